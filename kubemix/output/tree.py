"""Indented namespace -> kind -> name overview of the collected resources.

    default
      pods:
        web-0
        web-1
      services:
        web
    staging
      (none)
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

# Kinds listed first, in this order; anything else follows alphabetically.
PREFERRED_KIND_ORDER: tuple[str, ...] = (
    "pods",
    "services",
    "deployments",
    "statefulsets",
    "daemonsets",
    "replicasets",
    "jobs",
    "cronjobs",
    "ingresses",
    "configmaps",
    "secrets",
    "persistentvolumeclaims",
)

EMPTY_NAMESPACE_MARKER = "(none)"
EMPTY_TREE = "(no namespaces)"

_INDENT = "  "
_RANK = {kind: i for i, kind in enumerate(PREFERRED_KIND_ORDER)}


def _kind_sort_key(kind: str) -> tuple[int, str]:
    return (_RANK.get(kind, len(_RANK)), kind)


def build_tree(namespaces: Sequence[str], resources: Mapping[str, Mapping[str, Sequence[str]]]) -> str:
    """Render the overview for ``namespaces``.

    Entries in ``resources`` for namespaces outside ``namespaces`` are
    ignored; kinds with no names are left out.
    """
    if not namespaces:
        return EMPTY_TREE

    lines: list[str] = []
    for namespace in sorted(set(namespaces)):
        lines.append(namespace)
        by_kind = resources.get(namespace) or {}
        kinds = sorted((k for k, names in by_kind.items() if names), key=_kind_sort_key)
        if not kinds:
            lines.append(f"{_INDENT}{EMPTY_NAMESPACE_MARKER}")
            continue
        for kind in kinds:
            lines.append(f"{_INDENT}{kind}:")
            lines.extend(f"{_INDENT * 2}{name}" for name in sorted(by_kind[kind]))
    return "\n".join(lines)
