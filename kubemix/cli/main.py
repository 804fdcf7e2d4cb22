"""``kubemix`` command: aggregate cluster resources into one document."""

from __future__ import annotations

import asyncio
import os

import click

from kubemix import __version__
from kubemix.config import load_config, resolve_log_config, split_csv
from kubemix.errors import KubemixError
from kubemix.models.config import OutputFormat, OutputStyle
from kubemix.models.results import PackResult
from kubemix.observability.logging import get_logger, setup_logging
from kubemix.packager import pack

_RULE = "-" * 23


def _label(text: str) -> str:
    return click.style(f"{text:>18}", bold=True)


def _csv(ctx: click.Context, param: click.Parameter, value: tuple[str, ...]) -> list[str]:
    """Accept both repeated options and comma-separated values."""
    items: list[str] = []
    for chunk in value:
        items.extend(split_csv(chunk))
    return items


def _log_level(verbose: bool, quiet: bool) -> str | None:
    if verbose and quiet:
        raise click.UsageError("--verbose and --quiet are mutually exclusive")
    if verbose:
        return "debug"
    if quiet:
        return "error"
    return None


def print_summary(result: PackResult, output_format: str, style: str) -> None:
    click.echo(click.style("Aggregation Summary:", bold=True))
    click.echo(click.style(_RULE, dim=True))
    click.echo(f"{_label('Namespaces Found:')} {result.namespace_count:,}")
    if result.total_resource_count:
        click.echo(f"{_label('Resources Found:')} {result.total_resource_count:,} total resources")
        for kind in sorted(result.resource_counts):
            count = result.resource_counts[kind]
            if count > 0:
                click.echo(f"{_label(kind + ':')} {count:,}")
    click.echo(f"{_label('Total Chars:')} {result.total_characters:,}")
    click.echo(f"{_label('Total Tokens:')} {result.total_tokens:,}")
    click.echo(f"{_label('Output File:')} {result.output_path}")
    click.echo(f"{_label('Output Format:')} {output_format}")
    click.echo(f"{_label('Output Style:')} {style}")

    if result.redaction_enabled:
        security = f"secrets redacted ({result.secrets_found} found)"
        click.echo(f"{_label('Security:')} {click.style(security, fg='green')}")
    else:
        click.echo(f"{_label('Security:')} {click.style('secret redaction DISABLED', fg='yellow', bold=True)}")

    if result.diagnostics_count:
        detail = f"{result.diagnostics_count} unhealthy pod(s)"
        if result.incomplete_diagnostics:
            detail += f", {result.incomplete_diagnostics} incomplete"
        click.echo(f"{_label('Diagnostics:')} {detail}")

    if result.failed_namespaces:
        failed = ", ".join(result.failed_namespaces)
        click.echo(f"{_label('Failed Namespaces:')} {click.style(failed, fg='yellow')}")

    click.echo()
    click.echo(click.style("All Done!", fg="green"))
    click.echo("Kubernetes resources aggregated successfully.")


@click.command(name="kubemix", context_settings={"help_option_names": ["-h", "--help"]})
@click.option("-o", "--output", "file_path", help="Output file path.")
@click.option("--style", type=click.Choice([s.value for s in OutputStyle]), help="Output document style.")
@click.option("--kubeconfig", help="Path to the kubeconfig file.")
@click.option("--context", "kube_context", help="Kubernetes context to use.")
@click.option(
    "--format",
    "output_format",
    type=click.Choice([f.value for f in OutputFormat]),
    help="kubectl output format for resource data.",
)
@click.option("-n", "--namespace", "namespaces", multiple=True, callback=_csv, help="Namespaces to include.")
@click.option("--exclude-namespace", "exclude_namespaces", multiple=True, callback=_csv, help="Namespaces to exclude.")
@click.option("--include-type", "include_types", multiple=True, callback=_csv, help="Resource types to include.")
@click.option("--exclude-type", "exclude_types", multiple=True, callback=_csv, help="Resource types to exclude.")
@click.option("-l", "--selector", help="Label selector applied to namespaced queries.")
@click.option("--redact-secrets/--no-redact-secrets", default=None, help="Redact Secret values (default: on).")
@click.option(
    "--diagnostics/--no-diagnostics",
    "include_failing_pods",
    default=None,
    help="Gather describe output and logs for unhealthy pods (default: on).",
)
@click.option("--pod-log-lines", type=click.IntRange(min=1), help="Log lines to tail per unhealthy pod.")
@click.option("-c", "--config", "config_path", type=click.Path(dir_okay=False), help="Path to a config file.")
@click.option("--verbose", is_flag=True, help="Enable debug logging.")
@click.option("--quiet", is_flag=True, help="Only log errors.")
@click.version_option(__version__, "--version", prog_name="kubemix")
def cli(
    file_path: str | None,
    style: str | None,
    kubeconfig: str | None,
    kube_context: str | None,
    output_format: str | None,
    namespaces: list[str],
    exclude_namespaces: list[str],
    include_types: list[str],
    exclude_types: list[str],
    selector: str | None,
    redact_secrets: bool | None,
    include_failing_pods: bool | None,
    pod_log_lines: int | None,
    config_path: str | None,
    verbose: bool,
    quiet: bool,
) -> None:
    """Aggregate Kubernetes cluster resources into a single document."""
    overrides = {
        "file_path": file_path,
        "style": style,
        "kubeconfig": kubeconfig,
        "context": kube_context,
        "output_format": output_format,
        "namespaces": namespaces,
        "exclude_namespaces": exclude_namespaces,
        "include_types": include_types,
        "exclude_types": exclude_types,
        "selector": selector,
        "redact_secrets": redact_secrets,
        "include_failing_pods": include_failing_pods,
        "pod_log_lines": pod_log_lines,
        "log_level": _log_level(verbose, quiet),
    }

    try:
        log_config = resolve_log_config(overrides["log_level"])
        setup_logging(log_config.level, json_output=log_config.json_output)
        get_logger("cli").debug("run_started", version=__version__)
        config = load_config(overrides, config_path=config_path, cwd=os.getcwd())
        result = asyncio.run(pack(config))
    except KubemixError as exc:
        click.echo(click.style(f"Error: {exc}", fg="red"), err=True)
        raise SystemExit(1) from exc

    print_summary(result, str(config.kubernetes.output_format), str(config.output.style))
