"""Argument builders for the kubectl invocation shapes kubemix uses.

    kubectl get <kind-list> [-n <namespace>] -o <name|yaml|json|wide>
    kubectl describe pod <name> -n <namespace>
    kubectl logs <name> -n <namespace> [--previous] --tail=<n>
"""

from __future__ import annotations

from collections.abc import Sequence

from kubemix.models.config import OutputFormat

# kubectl -o value for each configured output format
_OUTPUT_FLAGS: dict[OutputFormat, str] = {
    OutputFormat.TEXT: "wide",
    OutputFormat.YAML: "yaml",
    OutputFormat.JSON: "json",
}

NAME_OUTPUT = "name"


def output_flag(output: OutputFormat | str) -> str:
    if output == NAME_OUTPUT:
        return NAME_OUTPUT
    return _OUTPUT_FLAGS[OutputFormat(output)]


def get_args(
    kinds: Sequence[str],
    namespace: str | None = None,
    output: OutputFormat | str = OutputFormat.YAML,
    selector: str | None = None,
) -> list[str]:
    args = ["get", ",".join(kinds)]
    if namespace:
        args += ["-n", namespace]
    if selector:
        args += ["-l", selector]
    args += ["-o", output_flag(output)]
    return args


def namespace_names_args() -> list[str]:
    return get_args(["namespaces"], output=NAME_OUTPUT)


def describe_pod_args(name: str, namespace: str) -> list[str]:
    return ["describe", "pod", name, "-n", namespace]


def logs_args(name: str, namespace: str, tail: int, previous: bool = False) -> list[str]:
    args = ["logs", name, "-n", namespace]
    if previous:
        args.append("--previous")
    args.append(f"--tail={tail}")
    return args
