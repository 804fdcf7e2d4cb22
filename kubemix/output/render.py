"""Render an aggregation into the final document text."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from xml.sax.saxutils import escape, quoteattr

from kubemix.models.config import OutputFormat, OutputStyle
from kubemix.models.diagnostics import DiagnosticRecord
from kubemix.models.resources import OutputBlock
from kubemix.models.results import AggregationResult
from kubemix.output import styles
from kubemix.redaction import REDACTION_PLACEHOLDER

_NAMESPACE_BLOCK_KIND = "Resources"


@dataclass
class RenderContext:
    """Everything a template needs, independent of style."""

    tree: str
    blocks: list[OutputBlock] = field(default_factory=list)
    diagnostics: list[DiagnosticRecord] = field(default_factory=list)
    redaction_enabled: bool = True
    output_format: OutputFormat = OutputFormat.TEXT
    failed_namespaces: list[str] = field(default_factory=list)
    generated_at: str = ""

    @classmethod
    def from_result(
        cls,
        result: AggregationResult,
        output_format: OutputFormat,
        generated_at: datetime | None = None,
    ) -> RenderContext:
        return cls(
            tree=result.tree,
            blocks=result.output_blocks(),
            diagnostics=list(result.diagnostics),
            redaction_enabled=result.redaction_enabled,
            output_format=output_format,
            failed_namespaces=list(result.failed_namespaces),
            generated_at=(generated_at or datetime.now(UTC)).isoformat(),
        )


def _notes(ctx: RenderContext) -> str:
    lines = [
        styles.NOTE_REDACTED.format(placeholder=REDACTION_PLACEHOLDER)
        if ctx.redaction_enabled
        else styles.NOTE_NOT_REDACTED,
        styles.NOTE_OUTPUT_FORMAT.format(output_format=ctx.output_format),
        styles.NOTE_EXCLUDED,
    ]
    if ctx.diagnostics:
        lines.append(styles.NOTE_DIAGNOSTICS.format(count=len(ctx.diagnostics)))
    if ctx.failed_namespaces:
        lines.append(styles.NOTE_FAILED_NAMESPACES.format(namespaces=", ".join(ctx.failed_namespaces)))
    return "\n".join(lines)


def _body(text: str | None) -> str:
    text = (text or "").rstrip("\n")
    return text if text.strip() else styles.NO_OUTPUT


def _diag_calls(record: DiagnosticRecord) -> list[tuple[str, str, str]]:
    """(label, command, output) for each diagnostic sub-call."""
    calls = [
        (styles.DIAG_DESCRIBE, record.describe_invocation, record.describe_text),
        (styles.DIAG_LOGS, record.logs_invocation, record.logs_text),
    ]
    if record.prev_logs_invocation:
        calls.append((styles.DIAG_PREVIOUS_LOGS, record.prev_logs_invocation, record.prev_logs_text or ""))
    return calls


def _common(ctx: RenderContext) -> dict[str, str]:
    return {
        "header": styles.GENERATION_HEADER.format(generated_at=ctx.generated_at),
        "purpose": styles.SUMMARY_PURPOSE,
        "file_format": styles.SUMMARY_FILE_FORMAT,
        "usage_guidelines": styles.SUMMARY_USAGE_GUIDELINES,
        "notes": _notes(ctx),
        "tree": ctx.tree,
    }


# ---------------------------------------------------------------------------
# Markdown
# ---------------------------------------------------------------------------


def _markdown_heading(block: OutputBlock) -> str:
    if block.namespace is None:
        return styles.MARKDOWN_RESOURCE_HEADING.format(kind=block.kind)
    if block.kind == _NAMESPACE_BLOCK_KIND:
        return styles.MARKDOWN_NAMESPACE_HEADING.format(namespace=block.namespace)
    return styles.MARKDOWN_NAMESPACED_HEADING.format(kind=block.kind, namespace=block.namespace)


def _render_markdown(ctx: RenderContext) -> str:
    blocks = "\n".join(
        styles.MARKDOWN_BLOCK.format(heading=_markdown_heading(b), command=b.invocation, output=_body(b.output))
        for b in ctx.blocks
    )
    diagnostics = ""
    if ctx.diagnostics:
        pods = []
        for record in ctx.diagnostics:
            parts = [styles.MARKDOWN_POD_HEADING.format(name=record.name, namespace=record.namespace), ""]
            if record.error:
                parts.append(styles.MARKDOWN_DIAG_ERROR.format(error=record.error))
            for label, command, output in _diag_calls(record):
                parts.append(
                    styles.MARKDOWN_BLOCK.format(
                        heading=styles.MARKDOWN_DIAG_HEADING.format(label=label),
                        command=command,
                        output=_body(output),
                    )
                )
            pods.append("\n".join(parts))
        diagnostics = styles.MARKDOWN_DIAGNOSTICS.format(pods="\n".join(pods))
    return styles.MARKDOWN_DOCUMENT.format(blocks=blocks, diagnostics=diagnostics, **_common(ctx))


# ---------------------------------------------------------------------------
# XML
# ---------------------------------------------------------------------------


def _cdata(text: str) -> str:
    return text.replace("]]>", "]]]]><![CDATA[>")


def _render_xml(ctx: RenderContext) -> str:
    blocks = "\n".join(
        styles.XML_BLOCK.format(
            kind=quoteattr(b.kind),
            namespace_attr=f" namespace={quoteattr(b.namespace)}" if b.namespace else "",
            command=_cdata(b.invocation),
            output=_cdata(_body(b.output)),
        )
        for b in ctx.blocks
    )
    diagnostics = ""
    if ctx.diagnostics:
        pods = []
        for record in ctx.diagnostics:
            calls = "".join(
                styles.XML_DIAG_CALL.format(
                    tag=label.lower().replace(" ", "_"),
                    command=_cdata(command),
                    output=_cdata(_body(output)),
                )
                for label, command, output in _diag_calls(record)
            )
            pods.append(
                styles.XML_POD.format(
                    name=quoteattr(record.name),
                    namespace=quoteattr(record.namespace),
                    error=styles.XML_DIAG_ERROR.format(error=escape(record.error)) if record.error else "",
                    calls=calls,
                )
            )
        diagnostics = "\n" + styles.XML_DIAGNOSTICS.format(pods="".join(pods))
    common = _common(ctx)
    common["tree"] = escape(common["tree"])
    return styles.XML_DOCUMENT.format(blocks=blocks, diagnostics=diagnostics, **common)


# ---------------------------------------------------------------------------
# Plain
# ---------------------------------------------------------------------------


def _plain_label(block: OutputBlock) -> str:
    if block.namespace is None:
        return styles.PLAIN_RESOURCE_LABEL.format(kind=block.kind)
    if block.kind == _NAMESPACE_BLOCK_KIND:
        return styles.PLAIN_NAMESPACE_LABEL.format(namespace=block.namespace)
    return styles.PLAIN_NAMESPACED_LABEL.format(kind=block.kind, namespace=block.namespace)


def _render_plain(ctx: RenderContext) -> str:
    blocks = "".join(
        styles.PLAIN_BLOCK.format(label=_plain_label(b), command=b.invocation, output=_body(b.output))
        for b in ctx.blocks
    )
    diagnostics = ""
    if ctx.diagnostics:
        pods = []
        for record in ctx.diagnostics:
            pod_label = styles.PLAIN_POD_LABEL.format(name=record.name, namespace=record.namespace)
            parts = [pod_label + "\n\n"]
            if record.error:
                parts.append(styles.PLAIN_DIAG_ERROR.format(error=record.error))
            parts.extend(
                styles.PLAIN_BLOCK.format(label=f"{pod_label} {label}", command=command, output=_body(output))
                for label, command, output in _diag_calls(record)
            )
            pods.append("".join(parts))
        diagnostics = styles.PLAIN_DIAGNOSTICS.format(pods="".join(pods))
    return styles.PLAIN_DOCUMENT.format(blocks=blocks, diagnostics=diagnostics, **_common(ctx))


_RENDERERS = {
    OutputStyle.MARKDOWN: _render_markdown,
    OutputStyle.XML: _render_xml,
    OutputStyle.PLAIN: _render_plain,
}


def render_output(style: OutputStyle | str, context: RenderContext) -> str:
    """Render ``context`` in ``style``; the result ends with exactly one newline."""
    renderer = _RENDERERS[OutputStyle(style)]
    return renderer(context).strip() + "\n"

