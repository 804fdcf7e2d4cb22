"""End-to-end pipeline: aggregate, render, count tokens, write."""

from __future__ import annotations

from typing import TYPE_CHECKING

from kubemix.aggregator import Aggregator
from kubemix.kubectl.client import KubectlClient
from kubemix.models.results import PackResult
from kubemix.observability.logging import get_logger
from kubemix.output.render import RenderContext, render_output
from kubemix.output.tokens import count_tokens
from kubemix.output.writer import write_output

if TYPE_CHECKING:
    from kubemix.models.config import KubemixConfig


async def pack(config: KubemixConfig, client: KubectlClient | None = None) -> PackResult:
    """Run one aggregation and write the rendered document to disk.

    Raises:
        ToolNotFoundError: kubectl is not installed.
        AggregationError: namespace discovery or the global listing failed.
        OutputWriteError: the output file could not be written.
    """
    log = get_logger("packager")
    client = client or KubectlClient.from_config(config.kubernetes, log=get_logger("kubectl"))

    result = await Aggregator(config, client).run()

    context = RenderContext.from_result(result, config.kubernetes.output_format)
    text = render_output(config.output.style, context)
    tokens = count_tokens(text)
    path = write_output(text, config.output.file_path, config.cwd)

    log.info(
        "output_generated",
        path=str(path),
        style=str(config.output.style),
        characters=len(text),
        tokens=tokens,
    )

    return PackResult(
        namespace_count=len(result.namespaces),
        resource_counts=result.resource_counts,
        total_resource_count=result.total_resource_count,
        total_characters=len(text),
        total_tokens=tokens,
        secrets_found=result.secrets_found,
        output_path=str(path),
        redaction_enabled=result.redaction_enabled,
        failed_namespaces=result.failed_namespaces,
        incomplete_diagnostics=result.incomplete_diagnostics,
        diagnostics_count=len(result.diagnostics),
    )
