"""Disk sink for the rendered document."""

from __future__ import annotations

from pathlib import Path

from kubemix.errors import OutputWriteError
from kubemix.observability.logging import get_logger

_log = get_logger("writer")


def write_output(text: str, file_path: str, cwd: str = ".") -> Path:
    """Write ``text`` to ``file_path`` (relative to ``cwd``) as UTF-8.

    Raises:
        OutputWriteError: the file or its parent directory cannot be written.
    """
    path = Path(cwd, file_path).resolve()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    except OSError as exc:
        _log.error("output_write_failed", path=str(path), error=str(exc))
        raise OutputWriteError(f"Failed to write output to {path}: {exc}") from exc
    _log.debug("output_written", path=str(path), characters=len(text))
    return path
