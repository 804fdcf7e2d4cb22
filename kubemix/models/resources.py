"""Data structures for fetched cluster output."""

from __future__ import annotations

from dataclasses import dataclass, field

GLOBAL_SCOPE = "global"


@dataclass(frozen=True)
class QueryResult:
    """Output of one kubectl call plus the exact command that produced it."""

    text: str
    invocation: str


@dataclass(frozen=True)
class ScopeDecision:
    """Resolved, deduplicated targets for one run."""

    namespaces: tuple[str, ...]
    kinds: tuple[str, ...]


@dataclass(frozen=True)
class FetchedBlock:
    """One fetched chunk of structured output and its post-redaction form.

    ``scope`` is a namespace name or ``GLOBAL_SCOPE``.
    """

    scope: str
    invocation: str
    raw_text: str
    redacted_text: str
    kind: str = "Resources"

    @property
    def namespace(self) -> str | None:
        return None if self.scope == GLOBAL_SCOPE else self.scope


@dataclass(frozen=True)
class OutputBlock:
    """A single section handed to the renderer."""

    kind: str
    invocation: str
    output: str
    namespace: str | None = None


@dataclass(frozen=True)
class PodRef:
    """A pod selected for diagnostics."""

    namespace: str
    name: str


@dataclass
class NamespaceResult:
    """Everything one per-namespace task contributed.

    A failed task leaves ``error`` set and every other field empty.
    """

    namespace: str
    resources: dict[str, list[str]] = field(default_factory=dict)
    block: FetchedBlock | None = None
    pod_documents: list[dict[str, object]] = field(default_factory=list)
    secrets_found: int = 0
    error: str | None = None
