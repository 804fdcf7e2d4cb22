"""Pod health classification.

A pod is unhealthy when any of the following holds:

* its phase is something other than Running or Succeeded,
* any container (init containers included) has restarted more than
  ``RESTART_COUNT_THRESHOLD`` times,
* any container is waiting with one of ``BAD_WAITING_REASONS``.

Malformed documents are treated as healthy; classification never raises.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from kubemix.redaction import iter_resources

RESTART_COUNT_THRESHOLD = 3

BAD_WAITING_REASONS: frozenset[str] = frozenset(
    {
        "CrashLoopBackOff",
        "ImagePullBackOff",
        "ErrImagePull",
        "CreateContainerConfigError",
        "CreateContainerError",
    }
)

HEALTHY_PHASES: frozenset[str] = frozenset({"Running", "Succeeded"})

_STATUS_FIELDS = ("containerStatuses", "initContainerStatuses")


def _container_unhealthy(status: Mapping[str, Any], restart_threshold: int, bad_reasons: frozenset[str]) -> bool:
    if int(status.get("restartCount") or 0) > restart_threshold:
        return True
    waiting = (status.get("state") or {}).get("waiting")
    return bool(waiting) and waiting.get("reason") in bad_reasons


def is_unhealthy(
    doc: Mapping[str, Any],
    *,
    restart_threshold: int = RESTART_COUNT_THRESHOLD,
    bad_reasons: frozenset[str] = BAD_WAITING_REASONS,
) -> bool:
    """Return True when ``doc`` is a Pod that needs diagnostics."""
    try:
        if doc.get("kind") != "Pod":
            return False
        status = doc.get("status") or {}
        phase = status.get("phase")
        if phase is not None and phase not in HEALTHY_PHASES:
            return True
        for field_name in _STATUS_FIELDS:
            for container in status.get(field_name) or []:
                if _container_unhealthy(container, restart_threshold, bad_reasons):
                    return True
    except (TypeError, AttributeError, ValueError):
        return False
    return False


def pod_documents(docs: Iterable[Any]) -> list[dict[str, Any]]:
    """Flatten parsed documents and list wrappers into Pod documents."""
    pods: list[dict[str, Any]] = []
    for doc in docs:
        pods.extend(d for d in iter_resources(doc) if d.get("kind") == "Pod")
    return pods


def pod_identity(doc: Mapping[str, Any], default_namespace: str) -> tuple[str, str] | None:
    """Return ``(namespace, name)`` for a pod document, or None if unnamed."""
    metadata = doc.get("metadata")
    if not isinstance(metadata, Mapping) or not metadata.get("name"):
        return None
    return str(metadata.get("namespace") or default_namespace), str(metadata["name"])
