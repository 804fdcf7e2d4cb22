"""Fixtures shared by unit and integration tests."""

from __future__ import annotations

from collections.abc import Iterator

import pytest
import structlog


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    """Keep structlog unconfigured between tests so capture_logs works."""
    structlog.reset_defaults()
    yield
    structlog.reset_defaults()
