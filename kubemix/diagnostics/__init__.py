"""Failing pod detection and diagnostics gathering."""

from kubemix.diagnostics.gatherer import DiagnosticsGatherer
from kubemix.diagnostics.health import (
    BAD_WAITING_REASONS,
    HEALTHY_PHASES,
    RESTART_COUNT_THRESHOLD,
    is_unhealthy,
    pod_documents,
)

__all__ = [
    "BAD_WAITING_REASONS",
    "DiagnosticsGatherer",
    "HEALTHY_PHASES",
    "RESTART_COUNT_THRESHOLD",
    "is_unhealthy",
    "pod_documents",
]
