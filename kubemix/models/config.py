"""Configuration data structures."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class OutputStyle(StrEnum):
    """Syntax of the assembled document."""

    MARKDOWN = "markdown"
    XML = "xml"
    PLAIN = "plain"


class OutputFormat(StrEnum):
    """kubectl output format used for resource data blocks."""

    TEXT = "text"
    YAML = "yaml"
    JSON = "json"


DEFAULT_FILE_PATHS: dict[OutputStyle, str] = {
    OutputStyle.MARKDOWN: "kubemix-output.md",
    OutputStyle.XML: "kubemix-output.xml",
    OutputStyle.PLAIN: "kubemix-output.txt",
}


@dataclass
class OutputConfig:
    """Output document configuration."""

    file_path: str = DEFAULT_FILE_PATHS[OutputStyle.MARKDOWN]
    style: OutputStyle = OutputStyle.MARKDOWN


@dataclass
class KubernetesConfig:
    """How kubectl is invoked."""

    kubeconfig_path: str | None = None
    context: str | None = None
    output_format: OutputFormat = OutputFormat.TEXT
    binary: str = "kubectl"
    max_concurrency: int = 8


@dataclass
class FilterConfig:
    """One layer of include/exclude filters.

    Empty lists mean "not specified at this layer".
    """

    namespaces: list[str] = field(default_factory=list)
    exclude_namespaces: list[str] = field(default_factory=list)
    include_resource_types: list[str] = field(default_factory=list)
    exclude_resource_types: list[str] = field(default_factory=list)
    label_selector: str | None = None


@dataclass
class SecurityConfig:
    """Redaction configuration."""

    redact_secrets: bool = True


@dataclass
class DiagnosticsConfig:
    """Failing pod diagnostics configuration."""

    include_failing_pods: bool = True
    pod_log_tail_lines: int = 50


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "info"
    json_output: bool = False


@dataclass
class KubemixConfig:
    """Top-level kubemix configuration.

    ``file_filter`` and ``cli_filter`` are kept apart because the scope
    resolver applies different precedence rules to includes and excludes.
    """

    cwd: str = "."
    output: OutputConfig = field(default_factory=OutputConfig)
    kubernetes: KubernetesConfig = field(default_factory=KubernetesConfig)
    file_filter: FilterConfig = field(default_factory=FilterConfig)
    cli_filter: FilterConfig = field(default_factory=FilterConfig)
    security: SecurityConfig = field(default_factory=SecurityConfig)
    diagnostics: DiagnosticsConfig = field(default_factory=DiagnosticsConfig)
    log: LogConfig = field(default_factory=LogConfig)

    @property
    def label_selector(self) -> str | None:
        return self.cli_filter.label_selector or self.file_filter.label_selector
