"""Configuration loading.

Three layers, lowest priority first:

1. built-in defaults (the dataclass defaults in ``kubemix.models.config``)
2. the JSON config file (``kubemix.config.json`` in the working directory,
   or an explicit ``--config`` path)
3. command-line overrides

Filter lists are not merged here. The file and CLI filter layers are kept
apart on ``KubemixConfig`` and combined by the scope resolver, because
includes and excludes follow different precedence rules.

A few process-level settings come from ``KUBEMIX_*`` environment variables.
"""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from kubemix.errors import ConfigError
from kubemix.models.config import (
    DEFAULT_FILE_PATHS,
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
from kubemix.observability.logging import get_logger

DEFAULT_CONFIG_FILE = "kubemix.config.json"

# section -> allowed camelCase keys
_FILE_SCHEMA: dict[str, frozenset[str]] = {
    "output": frozenset({"filePath", "style"}),
    "kubernetes": frozenset({"kubeconfigPath", "context", "outputFormat", "maxConcurrency"}),
    "filter": frozenset(
        {"namespaces", "excludeNamespaces", "includeResourceTypes", "excludeResourceTypes", "labelSelector"}
    ),
    "security": frozenset({"redactSecrets"}),
    "diagnostics": frozenset({"includeFailingPods", "podLogTailLines"}),
}

_log = get_logger("config")


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"KUBEMIX_{key}", default)


def _env_bool(key: str, default: bool = False) -> bool:
    val = _env(key, str(default).lower())
    return val.lower() in ("true", "1", "yes")


def _env_int(key: str, default: int, min_val: int | None = None, max_val: int | None = None) -> int:
    raw = _env(key, str(default))
    try:
        val = int(raw)
    except ValueError as exc:
        raise ConfigError(f"KUBEMIX_{key} must be an integer, got {raw!r}") from exc
    if min_val is not None:
        val = max(val, min_val)
    if max_val is not None:
        val = min(val, max_val)
    return val


def _validate_log_level(value: str) -> str:
    valid = {"debug", "info", "warning", "error"}
    if value.lower() not in valid:
        raise ConfigError(f"Invalid log level: {value}. Must be one of {sorted(valid)}")
    return value.lower()


def _validate_style(value: Any, where: str) -> OutputStyle:
    try:
        return OutputStyle(value)
    except ValueError as exc:
        raise ConfigError(f"{where}: invalid style {value!r}, expected one of {[s.value for s in OutputStyle]}") from exc


def _validate_format(value: Any, where: str) -> OutputFormat:
    try:
        return OutputFormat(value)
    except ValueError as exc:
        raise ConfigError(
            f"{where}: invalid output format {value!r}, expected one of {[f.value for f in OutputFormat]}"
        ) from exc


def _validate_positive_int(value: Any, where: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigError(f"{where}: expected a positive integer, got {value!r}")
    return value


def _expect(value: Any, kind: type | tuple[type, ...], where: str) -> Any:
    if not isinstance(value, kind):
        raise ConfigError(f"{where}: expected {getattr(kind, '__name__', kind)}, got {type(value).__name__}")
    return value


def _str_list(value: Any, where: str) -> list[str]:
    _expect(value, list, where)
    if not all(isinstance(v, str) for v in value):
        raise ConfigError(f"{where}: every entry must be a string")
    return list(value)


def split_csv(value: str | None) -> list[str]:
    """Split a comma-separated CLI value, dropping blanks."""
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def resolve_log_config(cli_level: str | None = None) -> LogConfig:
    """Logging settings: CLI level, then KUBEMIX_LOG_LEVEL, then info."""
    return LogConfig(
        level=_validate_log_level(cli_level or _env("LOG_LEVEL", "info")),
        json_output=_env_bool("LOG_JSON", False),
    )


# ---------------------------------------------------------------------------
# Config file
# ---------------------------------------------------------------------------


def read_config_file(config_path: str | None, cwd: str = ".") -> dict[str, Any]:
    """Read and validate the config file.

    Returns an empty mapping when no explicit path was given and the default
    file does not exist.

    Raises:
        ConfigError: the explicit path is missing, the JSON is invalid, or
            the file contains unknown sections or keys.
    """
    explicit = config_path is not None
    path = Path(cwd, config_path if explicit else DEFAULT_CONFIG_FILE).resolve()

    if not path.is_file():
        if explicit:
            raise ConfigError(f"Specified config file not found at {path}")
        _log.debug("config_file_absent", path=str(path))
        return {}

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON syntax in config file {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Error reading config file {path}: {exc}") from exc

    _validate_file_shape(data, str(path))
    _log.debug("config_file_loaded", path=str(path), sections=sorted(data))
    return data


def _validate_file_shape(data: Any, source: str) -> None:
    _expect(data, dict, source)
    unknown_sections = sorted(set(data) - set(_FILE_SCHEMA))
    if unknown_sections:
        raise ConfigError(f"Invalid configuration in {source}: unknown section(s) {unknown_sections}")
    for section, body in data.items():
        _expect(body, dict, f"{source}: {section}")
        unknown_keys = sorted(set(body) - _FILE_SCHEMA[section])
        if unknown_keys:
            raise ConfigError(f"Invalid configuration in {source}: unknown key(s) {unknown_keys} in '{section}'")


def _file_filter(section: Mapping[str, Any]) -> FilterConfig:
    where = "filter"
    selector = section.get("labelSelector")
    if selector is not None:
        _expect(selector, str, f"{where}.labelSelector")
    return FilterConfig(
        namespaces=_str_list(section.get("namespaces", []), f"{where}.namespaces"),
        exclude_namespaces=_str_list(section.get("excludeNamespaces", []), f"{where}.excludeNamespaces"),
        include_resource_types=_str_list(section.get("includeResourceTypes", []), f"{where}.includeResourceTypes"),
        exclude_resource_types=_str_list(section.get("excludeResourceTypes", []), f"{where}.excludeResourceTypes"),
        label_selector=selector or None,
    )


# ---------------------------------------------------------------------------
# Merge
# ---------------------------------------------------------------------------


def _pick(cli: Mapping[str, Any], cli_key: str, section: Mapping[str, Any], file_key: str, default: Any) -> Any:
    """CLI value if set, else file value if set, else ``default``."""
    value = cli.get(cli_key)
    if value is not None:
        return value
    value = section.get(file_key)
    if value is not None:
        return value
    return default


def load_config(
    cli_overrides: Mapping[str, Any] | None = None,
    config_path: str | None = None,
    cwd: str = ".",
) -> KubemixConfig:
    """Build the effective configuration for one run.

    ``cli_overrides`` uses snake_case keys; ``None`` values mean "not given":

    ``file_path, style, kubeconfig, context, output_format, namespaces,
    exclude_namespaces, include_types, exclude_types, selector,
    redact_secrets, include_failing_pods, pod_log_lines, log_level``
    """
    cli = dict(cli_overrides or {})
    file_data = read_config_file(config_path, cwd)

    output_sec = file_data.get("output", {})
    kube_sec = file_data.get("kubernetes", {})
    security_sec = file_data.get("security", {})
    diag_sec = file_data.get("diagnostics", {})

    style = _validate_style(_pick(cli, "style", output_sec, "style", OutputStyle.MARKDOWN), "output.style")
    file_path = _pick(cli, "file_path", output_sec, "filePath", None) or DEFAULT_FILE_PATHS[style]

    kubernetes = KubernetesConfig(
        kubeconfig_path=_pick(cli, "kubeconfig", kube_sec, "kubeconfigPath", None),
        context=_pick(cli, "context", kube_sec, "context", None),
        output_format=_validate_format(
            _pick(cli, "output_format", kube_sec, "outputFormat", OutputFormat.TEXT),
            "kubernetes.outputFormat",
        ),
        binary=_env("KUBECTL", "kubectl"),
        max_concurrency=_validate_positive_int(
            kube_sec.get("maxConcurrency", _env_int("MAX_CONCURRENCY", 8, min_val=1, max_val=64)),
            "kubernetes.maxConcurrency",
        ),
    )

    cli_filter = FilterConfig(
        namespaces=list(cli.get("namespaces") or []),
        exclude_namespaces=list(cli.get("exclude_namespaces") or []),
        include_resource_types=list(cli.get("include_types") or []),
        exclude_resource_types=list(cli.get("exclude_types") or []),
        label_selector=cli.get("selector") or None,
    )

    redact_secrets = _pick(cli, "redact_secrets", security_sec, "redactSecrets", True)
    include_failing = _pick(cli, "include_failing_pods", diag_sec, "includeFailingPods", True)

    config = KubemixConfig(
        cwd=cwd,
        output=OutputConfig(file_path=file_path, style=style),
        kubernetes=kubernetes,
        file_filter=_file_filter(file_data.get("filter", {})),
        cli_filter=cli_filter,
        security=SecurityConfig(redact_secrets=_expect(redact_secrets, bool, "security.redactSecrets")),
        diagnostics=DiagnosticsConfig(
            include_failing_pods=_expect(include_failing, bool, "diagnostics.includeFailingPods"),
            pod_log_tail_lines=_validate_positive_int(
                _pick(cli, "pod_log_lines", diag_sec, "podLogTailLines", 50),
                "diagnostics.podLogTailLines",
            ),
        ),
        log=resolve_log_config(cli.get("log_level")),
    )
    _log.debug(
        "config_loaded",
        style=str(config.output.style),
        output_format=str(config.kubernetes.output_format),
        file_path=config.output.file_path,
        redact_secrets=config.security.redact_secrets,
    )
    return config
