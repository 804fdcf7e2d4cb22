"""Core data structures for kubemix."""

from kubemix.models.config import (
    DiagnosticsConfig,
    FilterConfig,
    KubemixConfig,
    KubernetesConfig,
    LogConfig,
    OutputConfig,
    OutputFormat,
    OutputStyle,
    SecurityConfig,
)
from kubemix.models.diagnostics import PREVIOUS_LOGS_UNAVAILABLE, DiagnosticRecord
from kubemix.models.resources import (
    GLOBAL_SCOPE,
    FetchedBlock,
    NamespaceResult,
    OutputBlock,
    PodRef,
    QueryResult,
    ScopeDecision,
)
from kubemix.models.results import AggregationResult, PackResult

__all__ = [
    "AggregationResult",
    "DiagnosticRecord",
    "DiagnosticsConfig",
    "FetchedBlock",
    "FilterConfig",
    "GLOBAL_SCOPE",
    "KubemixConfig",
    "KubernetesConfig",
    "LogConfig",
    "NamespaceResult",
    "OutputBlock",
    "OutputConfig",
    "OutputFormat",
    "OutputStyle",
    "PREVIOUS_LOGS_UNAVAILABLE",
    "PackResult",
    "PodRef",
    "QueryResult",
    "ScopeDecision",
    "SecurityConfig",
]
