"""Scope resolution: which namespaces and resource kinds a run queries.

Three layers feed the decision: built-in defaults, the config file and
command-line overrides. Include-lists replace (CLI over file over the
fallback); exclude-lists union across all three layers. Matching is exact
and case-sensitive; there is no globbing.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from kubemix.models.resources import ScopeDecision
from kubemix.observability.logging import get_logger

if TYPE_CHECKING:
    import structlog

    from kubemix.models.config import FilterConfig

DEFAULT_EXCLUDED_NAMESPACES: tuple[str, ...] = (
    "kube-system",
    "kube-public",
    "kube-node-lease",
)

DEFAULT_EXCLUDED_KINDS: tuple[str, ...] = (
    "events",
    "events.k8s.io",
    "controllerrevisions.apps",
    "endpointslices.discovery.k8s.io",
)

DEFAULT_KINDS: tuple[str, ...] = (
    "pods",
    "services",
    "deployments",
    "configmaps",
    "secrets",
    "statefulsets",
    "daemonsets",
    "replicasets",
    "ingresses",
    "persistentvolumeclaims",
)

MINIMAL_KIND = "pods"


@dataclass(frozen=True)
class ScopeDefaults:
    """Built-in lowest-priority filter layer."""

    exclude_namespaces: tuple[str, ...] = DEFAULT_EXCLUDED_NAMESPACES
    exclude_kinds: tuple[str, ...] = DEFAULT_EXCLUDED_KINDS
    kinds: tuple[str, ...] = DEFAULT_KINDS
    minimal_kind: str = MINIMAL_KIND


def _dedupe(values: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(v for v in values if v))


def _select(
    cli_include: Sequence[str],
    file_include: Sequence[str],
    fallback: Sequence[str],
    excludes: Iterable[str],
) -> tuple[list[str], list[str]]:
    """Return (selected, excluded) for one dimension."""
    if cli_include:
        base = cli_include
    elif file_include:
        base = file_include
    else:
        base = fallback
    exclude_set = set(excludes)
    candidates = _dedupe(base)
    selected = [v for v in candidates if v not in exclude_set]
    dropped = [v for v in candidates if v in exclude_set]
    return selected, dropped


def resolve(
    defaults: ScopeDefaults,
    file_filter: FilterConfig,
    cli_filter: FilterConfig,
    discovered_namespaces: Sequence[str],
    log: structlog.stdlib.BoundLogger | None = None,
) -> ScopeDecision:
    """Compute the final namespace and kind lists for a run."""
    log = log or get_logger("scope")

    namespaces, excluded_ns = _select(
        cli_filter.namespaces,
        file_filter.namespaces,
        discovered_namespaces,
        [*cli_filter.exclude_namespaces, *file_filter.exclude_namespaces, *defaults.exclude_namespaces],
    )
    if excluded_ns:
        log.debug("namespaces_excluded", namespaces=excluded_ns)

    requested = cli_filter.namespaces or file_filter.namespaces
    if requested:
        known = set(discovered_namespaces)
        missing = [ns for ns in requested if ns not in known]
        if missing:
            log.warning("requested_namespaces_not_found", namespaces=missing)

    if not namespaces:
        log.warning("no_namespaces_in_scope", reason="every candidate namespace was excluded or none exist")

    kinds, excluded_kinds = _select(
        cli_filter.include_resource_types,
        file_filter.include_resource_types,
        defaults.kinds,
        [*cli_filter.exclude_resource_types, *file_filter.exclude_resource_types, *defaults.exclude_kinds],
    )
    if excluded_kinds:
        log.debug("kinds_excluded", kinds=excluded_kinds)

    if not kinds:
        log.warning("no_kinds_in_scope", fallback=defaults.minimal_kind)
        kinds = [defaults.minimal_kind]

    decision = ScopeDecision(namespaces=tuple(namespaces), kinds=tuple(kinds))
    log.debug("scope_resolved", namespaces=list(decision.namespaces), kinds=list(decision.kinds))
    return decision
