"""Structured logging configuration using structlog.

All log output goes to stderr so that nothing interleaves with the run
summary printed on stdout.
"""

from __future__ import annotations

import logging
import sys
from typing import IO

import structlog

_SHARED_PROCESSORS: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.processors.add_log_level,
    structlog.processors.StackInfoRenderer(),
    structlog.dev.set_exc_info,
    structlog.processors.TimeStamper(fmt="iso", utc=True, key="ts"),
]


def setup_logging(level: str = "info", json_output: bool = False, stream: IO[str] | None = None) -> None:
    """Configure structlog.

    Console rendering is the default for interactive runs; ``json_output``
    switches to one JSON object per line for CI pipelines.
    """
    stream = stream or sys.stderr
    renderer: structlog.types.Processor
    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=stream.isatty())

    structlog.configure(
        processors=[*_SHARED_PROCESSORS, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level.upper(), logging.INFO)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        # module-level loggers are created before configuration runs
        cache_logger_on_first_use=False,
    )


def get_logger(component: str) -> structlog.stdlib.BoundLogger:
    """Get a logger bound with a component name."""
    return structlog.get_logger(component=component)  # type: ignore[return-value]
