"""Token estimation for the assembled document."""

from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING

import tiktoken

from kubemix.observability.logging import get_logger

if TYPE_CHECKING:
    import structlog

DEFAULT_ENCODING = "o200k_base"


@lru_cache(maxsize=4)
def _encoding(name: str) -> tiktoken.Encoding:
    return tiktoken.get_encoding(name)


def count_tokens(
    text: str,
    encoding: str = DEFAULT_ENCODING,
    log: structlog.stdlib.BoundLogger | None = None,
) -> int:
    """Return the token count of ``text``, or 0 when it cannot be computed.

    Token counts are informational only, so an unavailable encoder
    (offline cache miss, unknown encoding) is logged rather than raised.
    """
    if not text:
        return 0
    try:
        return len(_encoding(encoding).encode(text, disallowed_special=()))
    except Exception as exc:  # noqa: BLE001
        (log or get_logger("tokens")).warning("token_count_failed", encoding=encoding, error=str(exc))
        return 0
