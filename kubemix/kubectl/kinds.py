"""Resource kind normalization for ``kubectl get -o name`` output.

``kubectl get ... -o name`` prints ``<kind>[.<group>]/<name>`` lines, e.g.
``deployment.apps/web``. kubemix groups resources under the plural short
form (``deployments``). The lookup table is authoritative; the suffix rule
only covers kinds the table does not know.
"""

from __future__ import annotations

KIND_ALIASES: dict[str, str] = {
    "pod": "pods",
    "service": "services",
    "endpoints": "endpoints",
    "configmap": "configmaps",
    "secret": "secrets",
    "serviceaccount": "serviceaccounts",
    "persistentvolumeclaim": "persistentvolumeclaims",
    "persistentvolume": "persistentvolumes",
    "resourcequota": "resourcequotas",
    "limitrange": "limitranges",
    "namespace": "namespaces",
    "node": "nodes",
    "event": "events",
    "event.events.k8s.io": "events",
    "replicationcontroller": "replicationcontrollers",
    "deployment.apps": "deployments",
    "replicaset.apps": "replicasets",
    "statefulset.apps": "statefulsets",
    "daemonset.apps": "daemonsets",
    "controllerrevision.apps": "controllerrevisions",
    "job.batch": "jobs",
    "cronjob.batch": "cronjobs",
    "horizontalpodautoscaler.autoscaling": "horizontalpodautoscalers",
    "ingress.networking.k8s.io": "ingresses",
    "ingress.extensions": "ingresses",
    "networkpolicy.networking.k8s.io": "networkpolicies",
    "endpointslice.discovery.k8s.io": "endpointslices",
    "poddisruptionbudget.policy": "poddisruptionbudgets",
    "role.rbac.authorization.k8s.io": "roles",
    "rolebinding.rbac.authorization.k8s.io": "rolebindings",
    "lease.coordination.k8s.io": "leases",
}


def _pluralize(word: str) -> str:
    if word.endswith(("s", "x", "ch", "sh")):
        return word + "es"
    if word.endswith("y") and len(word) > 1 and word[-2] not in "aeiou":
        return word[:-1] + "ies"
    return word + "s"


def normalize_kind(raw: str) -> str:
    """Collapse an API-group-qualified kind to its plural short form."""
    key = raw.strip().lower()
    if key in KIND_ALIASES:
        return KIND_ALIASES[key]
    base = key.split(".", 1)[0]
    if base in KIND_ALIASES:
        return KIND_ALIASES[base]
    return _pluralize(base)


def parse_name_listing(text: str) -> dict[str, list[str]]:
    """Parse ``-o name`` output into ``{kind: [names]}``.

    Lines without a ``/`` are kept under the ``unknown`` kind so nothing
    kubectl returned silently disappears from the overview.
    """
    resources: dict[str, list[str]] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line:
            continue
        raw_kind, sep, name = line.partition("/")
        if not sep:
            resources.setdefault("unknown", []).append(line)
            continue
        resources.setdefault(normalize_kind(raw_kind), []).append(name)
    return resources
