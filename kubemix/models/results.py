"""Aggregation and packaging result structures."""

from __future__ import annotations

from dataclasses import dataclass, field

from kubemix.models.diagnostics import DiagnosticRecord
from kubemix.models.resources import FetchedBlock, OutputBlock


@dataclass
class AggregationResult:
    """The assembled dataset handed to the renderer."""

    namespaces: list[str]
    blocks: list[FetchedBlock] = field(default_factory=list)
    tree: str = ""
    diagnostics: list[DiagnosticRecord] = field(default_factory=list)
    resource_counts: dict[str, int] = field(default_factory=dict)
    secrets_found: int = 0
    redaction_enabled: bool = True
    failed_namespaces: list[str] = field(default_factory=list)

    @property
    def total_resource_count(self) -> int:
        return sum(self.resource_counts.values())

    @property
    def incomplete_diagnostics(self) -> int:
        return sum(1 for record in self.diagnostics if not record.is_complete)

    def output_blocks(self) -> list[OutputBlock]:
        """Blocks in render order, using the redacted text."""
        return [
            OutputBlock(
                kind=block.kind,
                namespace=block.namespace,
                invocation=block.invocation,
                output=block.redacted_text,
            )
            for block in self.blocks
        ]


@dataclass
class PackResult:
    """Metrics summary for one completed run."""

    namespace_count: int
    resource_counts: dict[str, int]
    total_resource_count: int
    total_characters: int
    total_tokens: int
    secrets_found: int
    output_path: str = ""
    redaction_enabled: bool = True
    failed_namespaces: list[str] = field(default_factory=list)
    incomplete_diagnostics: int = 0
    diagnostics_count: int = 0
