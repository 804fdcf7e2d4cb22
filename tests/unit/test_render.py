"""Unit tests for document rendering in the three output styles."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from kubemix.models.config import OutputFormat, OutputStyle
from kubemix.models.diagnostics import DiagnosticRecord
from kubemix.models.resources import FetchedBlock, GLOBAL_SCOPE
from kubemix.models.results import AggregationResult
from kubemix.output.render import RenderContext, render_output

_GENERATED = datetime(2024, 1, 15, 10, 30, tzinfo=UTC)


def _result(**overrides) -> AggregationResult:
    values = {
        "namespaces": ["shop"],
        "blocks": [
            FetchedBlock(
                scope=GLOBAL_SCOPE,
                invocation="kubectl get namespaces -o wide",
                raw_text="NAME   STATUS\nshop   Active\n",
                redacted_text="NAME   STATUS\nshop   Active\n",
                kind="Namespaces",
            ),
            FetchedBlock(
                scope="shop",
                invocation="kubectl get pods,secrets -n shop -o yaml",
                raw_text="kind: Secret\ndata:\n  a: c2VjcmV0\n",
                redacted_text="kind: Secret\ndata:\n  a: '*****'\n",
            ),
        ],
        "tree": "shop\n  pods:\n    web-0",
    }
    values.update(overrides)
    return AggregationResult(**values)


def _record(**overrides) -> DiagnosticRecord:
    values = {
        "namespace": "shop",
        "name": "web-0",
        "describe_invocation": "kubectl describe pod web-0 -n shop",
        "describe_text": "Name: web-0\n",
        "logs_invocation": "kubectl logs web-0 -n shop --tail=50",
        "logs_text": "panic: boom\n",
        "prev_logs_invocation": "kubectl logs web-0 -n shop --previous --tail=50",
        "prev_logs_text": "",
    }
    values.update(overrides)
    return DiagnosticRecord(**values)


def _render(style: OutputStyle, result: AggregationResult | None = None) -> str:
    context = RenderContext.from_result(result or _result(), OutputFormat.YAML, generated_at=_GENERATED)
    return render_output(style, context)


class TestMarkdown:
    def test_sections_in_order(self) -> None:
        text = _render(OutputStyle.MARKDOWN)

        order = [
            "generated by kubemix on 2024-01-15T10:30:00+00:00",
            "# Cluster Summary",
            "# Cluster Resource Overview",
            "# Resources",
            "## Resources in Namespace: shop",
        ]
        positions = [text.index(marker) for marker in order]
        assert positions == sorted(positions)

    def test_block_shows_command_and_redacted_output(self) -> None:
        text = _render(OutputStyle.MARKDOWN)

        assert "# Command used to generate the output below:\nkubectl get pods,secrets -n shop -o yaml" in text
        assert "a: '*****'" in text
        assert "c2VjcmV0" not in text

    def test_global_block_heading(self) -> None:
        assert "\n## Resource: Namespaces\n```bash" in _render(OutputStyle.MARKDOWN)

    def test_tree_in_fence(self) -> None:
        assert "```\nshop\n  pods:\n    web-0\n```" in _render(OutputStyle.MARKDOWN)

    def test_diagnostics_section(self) -> None:
        result = _result(diagnostics=[_record(error="describe: forbidden")])

        text = _render(OutputStyle.MARKDOWN, result)

        assert "# Failing Pod Diagnostics" in text
        assert "## Pod: web-0 (Namespace: shop)" in text
        assert "**Diagnostics incomplete:** describe: forbidden" in text
        assert "### Previous Logs" in text
        assert "(no output)" in text

    def test_no_diagnostics_section_when_empty(self) -> None:
        assert "Failing Pod Diagnostics" not in _render(OutputStyle.MARKDOWN)

    def test_redaction_note(self) -> None:
        assert "Secret values have been redacted" in _render(OutputStyle.MARKDOWN)
        assert "redaction was DISABLED" in _render(OutputStyle.MARKDOWN, _result(redaction_enabled=False))

    def test_failed_namespaces_noted(self) -> None:
        text = _render(OutputStyle.MARKDOWN, _result(failed_namespaces=["broken"]))

        assert "could not be fetched and are shown as empty: broken" in text


class TestXml:
    def test_resource_elements(self) -> None:
        text = _render(OutputStyle.XML)

        assert "<cluster_summary>" in text
        assert '<resource kind="Namespaces">' in text
        assert '<resource kind="Resources" namespace="shop">' in text
        assert "<![CDATA[\nkubectl get pods,secrets -n shop -o yaml\n]]>" in text

    def test_cdata_terminator_split(self) -> None:
        block = FetchedBlock(
            scope="shop", invocation="kubectl get cm -n shop -o yaml", raw_text="", redacted_text="x: ']]>'\n"
        )

        text = _render(OutputStyle.XML, _result(blocks=[block]))

        assert "x: ']]]]><![CDATA[>'" in text

    def test_tree_escaped(self) -> None:
        text = _render(OutputStyle.XML, _result(tree="a&b"))

        assert "<cluster_resource_overview>\na&amp;b\n</cluster_resource_overview>" in text

    def test_diagnostics(self) -> None:
        text = _render(OutputStyle.XML, _result(diagnostics=[_record(error="logs: <eof>")]))

        assert '<pod name="web-0" namespace="shop">' in text
        assert "<error>logs: &lt;eof&gt;</error>" in text
        assert "<previous_logs>" in text


class TestPlain:
    def test_layout(self) -> None:
        text = _render(OutputStyle.PLAIN)

        assert text.startswith("This file is a merged representation")
        assert "=" * 64 + "\nResources\n" + "=" * 64 in text
        block_head = "=" * 16 + "\nResources in Namespace: shop\nCommand Used: kubectl get pods,secrets -n shop -o yaml"
        assert block_head in text
        assert text.rstrip().endswith("=" * 64)


@pytest.mark.parametrize("style", list(OutputStyle))
def test_single_trailing_newline(style: OutputStyle) -> None:
    text = _render(style)

    assert text.endswith("\n")
    assert not text.endswith("\n\n")


def test_style_accepts_string() -> None:
    assert render_output("plain", RenderContext(tree="(no namespaces)")).startswith("This file")
