"""Exception hierarchy for kubemix.

Only failures that must stop a run (or that callers need to tell apart)
get a class here. Per-namespace and per-diagnostic failures are recorded
as data, not raised.
"""

from __future__ import annotations


class KubemixError(Exception):
    """Base class for all kubemix errors."""


class ConfigError(KubemixError, ValueError):
    """Raised when a config file or CLI value is invalid."""


class OutputWriteError(KubemixError):
    """Raised when the assembled document cannot be written."""


class KubectlError(KubemixError):
    """Base for failures of a single kubectl invocation.

    ``invocation`` is always the fully expanded command line so the operator
    can reproduce the call by hand.
    """

    def __init__(self, message: str, invocation: str) -> None:
        super().__init__(message)
        self.invocation = invocation


class ToolNotFoundError(KubectlError):
    """Raised when the kubectl binary is not on the execution path."""

    def __init__(self, binary: str, invocation: str) -> None:
        super().__init__(
            f"{binary} command not found. Please ensure {binary} is installed and in your PATH.",
            invocation,
        )
        self.binary = binary


class ToolNotExecutableError(ToolNotFoundError):
    """Raised when the kubectl binary exists but cannot be started."""

    def __init__(self, binary: str, invocation: str, reason: str) -> None:
        KubectlError.__init__(self, f"{binary} could not be executed: {reason}", invocation)
        self.binary = binary
        self.reason = reason


class QueryFailedError(KubectlError):
    """Raised when kubectl exits non-zero."""

    def __init__(self, stderr: str, invocation: str, returncode: int = 1) -> None:
        detail = stderr.strip() or f"exit status {returncode}"
        super().__init__(f"kubectl command failed: {detail}", invocation)
        self.stderr = stderr
        self.returncode = returncode
