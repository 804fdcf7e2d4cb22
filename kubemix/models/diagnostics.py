"""Diagnostic record data structures."""

from __future__ import annotations

from dataclasses import dataclass

# Stored in place of previous-container logs when no prior instance exists.
PREVIOUS_LOGS_UNAVAILABLE = "(previous logs unavailable: no terminated container instance)"


@dataclass
class DiagnosticRecord:
    """Extra query output gathered for one unhealthy pod.

    ``error`` is set when any sub-call failed; the text fields then hold
    whatever did succeed. A record is emitted even when every call failed.
    """

    namespace: str
    name: str
    describe_invocation: str = ""
    describe_text: str = ""
    logs_invocation: str = ""
    logs_text: str = ""
    prev_logs_invocation: str | None = None
    prev_logs_text: str | None = None
    error: str | None = None

    @property
    def is_complete(self) -> bool:
        return self.error is None
