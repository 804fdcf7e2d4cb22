"""Unit tests for configuration loading and precedence."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from kubemix.config import DEFAULT_CONFIG_FILE, load_config, read_config_file, split_csv
from kubemix.errors import ConfigError
from kubemix.models.config import OutputFormat, OutputStyle


def _write_config(directory: Path, data: dict, name: str = DEFAULT_CONFIG_FILE) -> Path:
    path = directory / name
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in ("KUBEMIX_KUBECTL", "KUBEMIX_LOG_LEVEL", "KUBEMIX_LOG_JSON", "KUBEMIX_MAX_CONCURRENCY"):
        monkeypatch.delenv(key, raising=False)


class TestDefaults:
    def test_defaults_without_file(self, tmp_path: Path) -> None:
        config = load_config(cwd=str(tmp_path))

        assert config.output.style is OutputStyle.MARKDOWN
        assert config.output.file_path == "kubemix-output.md"
        assert config.kubernetes.output_format is OutputFormat.TEXT
        assert config.kubernetes.binary == "kubectl"
        assert config.security.redact_secrets is True
        assert config.diagnostics.include_failing_pods is True
        assert config.diagnostics.pod_log_tail_lines == 50
        assert config.log.level == "info"

    @pytest.mark.parametrize(
        ("style", "path"),
        [("markdown", "kubemix-output.md"), ("xml", "kubemix-output.xml"), ("plain", "kubemix-output.txt")],
    )
    def test_default_path_follows_style(self, tmp_path: Path, style: str, path: str) -> None:
        assert load_config({"style": style}, cwd=str(tmp_path)).output.file_path == path


class TestPrecedence:
    def test_file_overrides_defaults(self, tmp_path: Path) -> None:
        _write_config(
            tmp_path,
            {
                "output": {"style": "xml"},
                "kubernetes": {"outputFormat": "yaml", "context": "staging"},
                "security": {"redactSecrets": False},
                "diagnostics": {"podLogTailLines": 20},
            },
        )

        config = load_config(cwd=str(tmp_path))

        assert config.output.style is OutputStyle.XML
        assert config.output.file_path == "kubemix-output.xml"
        assert config.kubernetes.output_format is OutputFormat.YAML
        assert config.kubernetes.context == "staging"
        assert config.security.redact_secrets is False
        assert config.diagnostics.pod_log_tail_lines == 20

    def test_cli_overrides_file(self, tmp_path: Path) -> None:
        _write_config(tmp_path, {"output": {"filePath": "from-file.md"}, "security": {"redactSecrets": False}})

        config = load_config({"file_path": "from-cli.md", "redact_secrets": True}, cwd=str(tmp_path))

        assert config.output.file_path == "from-cli.md"
        assert config.security.redact_secrets is True

    def test_unset_cli_values_do_not_override(self, tmp_path: Path) -> None:
        _write_config(tmp_path, {"diagnostics": {"includeFailingPods": False}})

        config = load_config({"include_failing_pods": None, "pod_log_lines": None}, cwd=str(tmp_path))

        assert config.diagnostics.include_failing_pods is False

    def test_filter_layers_kept_apart(self, tmp_path: Path) -> None:
        _write_config(tmp_path, {"filter": {"namespaces": ["a", "b"], "labelSelector": "tier=db"}})

        config = load_config({"exclude_namespaces": ["b"], "selector": "app=web"}, cwd=str(tmp_path))

        assert config.file_filter.namespaces == ["a", "b"]
        assert config.cli_filter.namespaces == []
        assert config.cli_filter.exclude_namespaces == ["b"]
        assert config.label_selector == "app=web"

    def test_file_selector_used_when_cli_silent(self, tmp_path: Path) -> None:
        _write_config(tmp_path, {"filter": {"labelSelector": "tier=db"}})

        assert load_config(cwd=str(tmp_path)).label_selector == "tier=db"

    def test_environment(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("KUBEMIX_KUBECTL", "/usr/local/bin/kubectl")
        monkeypatch.setenv("KUBEMIX_LOG_LEVEL", "warning")

        config = load_config(cwd=str(tmp_path))

        assert config.kubernetes.binary == "/usr/local/bin/kubectl"
        assert config.log.level == "warning"

    def test_cli_log_level_beats_environment(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("KUBEMIX_LOG_LEVEL", "warning")

        assert load_config({"log_level": "debug"}, cwd=str(tmp_path)).log.level == "debug"


class TestValidation:
    def test_explicit_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            read_config_file("missing.json", cwd=str(tmp_path))

    def test_explicit_path(self, tmp_path: Path) -> None:
        _write_config(tmp_path, {"output": {"style": "plain"}}, name="custom.json")

        assert load_config(config_path="custom.json", cwd=str(tmp_path)).output.style is OutputStyle.PLAIN

    def test_invalid_json(self, tmp_path: Path) -> None:
        (tmp_path / DEFAULT_CONFIG_FILE).write_text("{not json", encoding="utf-8")

        with pytest.raises(ConfigError, match="Invalid JSON"):
            load_config(cwd=str(tmp_path))

    def test_unknown_section(self, tmp_path: Path) -> None:
        _write_config(tmp_path, {"clipboard": {"enabled": True}})

        with pytest.raises(ConfigError, match="unknown section"):
            load_config(cwd=str(tmp_path))

    def test_unknown_key(self, tmp_path: Path) -> None:
        _write_config(tmp_path, {"filter": {"excludeNamespace": ["typo"]}})

        with pytest.raises(ConfigError, match="excludeNamespace"):
            load_config(cwd=str(tmp_path))

    @pytest.mark.parametrize(
        "data",
        [
            {"output": {"style": "html"}},
            {"kubernetes": {"outputFormat": "wide"}},
            {"diagnostics": {"podLogTailLines": 0}},
            {"diagnostics": {"podLogTailLines": True}},
            {"security": {"redactSecrets": "yes"}},
            {"filter": {"namespaces": "shop"}},
        ],
    )
    def test_invalid_values(self, tmp_path: Path, data: dict) -> None:
        _write_config(tmp_path, data)

        with pytest.raises(ConfigError):
            load_config(cwd=str(tmp_path))

    def test_invalid_log_level(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("KUBEMIX_LOG_LEVEL", "chatty")

        with pytest.raises(ConfigError, match="log level"):
            load_config(cwd=str(tmp_path))


def test_split_csv() -> None:
    assert split_csv(" a, b,,c ") == ["a", "b", "c"]
    assert split_csv(None) == []
