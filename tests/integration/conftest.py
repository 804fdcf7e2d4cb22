"""Shared fixtures for kubemix integration tests.

Provides a fake kubectl client with canned responses keyed by argv, plus
realistic manifests for a small multi-namespace cluster, so integration
tests can exercise full aggregation runs without touching a real cluster.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

import pytest

from kubemix.errors import QueryFailedError
from kubemix.kubectl.client import KubectlClient
from kubemix.kubectl.commands import NAME_OUTPUT, get_args, namespace_names_args
from kubemix.models.config import KubemixConfig, KubernetesConfig, OutputFormat
from kubemix.models.resources import QueryResult
from kubemix.scope import DEFAULT_KINDS

# ---------------------------------------------------------------------------
# Fake kubectl
# ---------------------------------------------------------------------------


class FakeKubectl:
    """Stands in for KubectlClient.

    ``responses`` maps an argv tuple to stdout text. ``failures`` maps an
    argv tuple to either stderr text (raised as QueryFailedError) or an
    exception instance. Unknown commands succeed with empty output, which
    is how kubectl reports "No resources found".
    """

    def __init__(
        self,
        responses: dict[tuple[str, ...], str] | None = None,
        failures: dict[tuple[str, ...], str | Exception] | None = None,
    ) -> None:
        self.responses = dict(responses or {})
        self.failures = dict(failures or {})
        self.calls: list[tuple[str, ...]] = []
        self._real = KubectlClient(binary="kubectl")

    def invocation(self, args: Sequence[str]) -> str:
        return self._real.invocation(args)

    async def invoke(self, args: Sequence[str]) -> QueryResult:
        key = tuple(args)
        self.calls.append(key)
        await asyncio.sleep(0)
        if key in self.failures:
            failure = self.failures[key]
            if isinstance(failure, Exception):
                raise failure
            raise QueryFailedError(failure, self.invocation(args))
        return QueryResult(text=self.responses.get(key, ""), invocation=self.invocation(args))

    def called(self, verb: str) -> list[tuple[str, ...]]:
        return [call for call in self.calls if call and call[0] == verb]


def names_key(namespace: str, kinds: Sequence[str] = DEFAULT_KINDS, selector: str | None = None) -> tuple[str, ...]:
    return tuple(get_args(kinds, namespace, NAME_OUTPUT, selector))


def data_key(
    namespace: str,
    fmt: OutputFormat = OutputFormat.YAML,
    kinds: Sequence[str] = DEFAULT_KINDS,
    selector: str | None = None,
) -> tuple[str, ...]:
    return tuple(get_args(kinds, namespace, fmt, selector))


DISCOVERY_KEY = tuple(namespace_names_args())


def global_key(fmt: OutputFormat = OutputFormat.YAML) -> tuple[str, ...]:
    return tuple(get_args(["namespaces"], output=fmt))


# ---------------------------------------------------------------------------
# Cluster fixtures
# ---------------------------------------------------------------------------

SECRET_VALUE = "c3VwZXJzZWNyZXQ="

NAMESPACE_LISTING = """\
namespace/a
namespace/b
namespace/c
namespace/d
namespace/e
namespace/kube-system
"""

NAMESPACES_YAML = """\
apiVersion: v1
kind: List
items:
- apiVersion: v1
  kind: Namespace
  metadata:
    name: a
- apiVersion: v1
  kind: Namespace
  metadata:
    name: b
"""

A_NAMES = "pod/web-0\nsecret/db-creds\n"

A_DATA = f"""\
apiVersion: v1
kind: List
items:
- apiVersion: v1
  kind: Pod
  metadata:
    name: web-0
    namespace: a
  status:
    phase: Running
    containerStatuses:
    - name: app
      restartCount: 7
      state:
        waiting:
          reason: CrashLoopBackOff
- apiVersion: v1
  kind: Secret
  metadata:
    name: db-creds
    namespace: a
  type: Opaque
  data:
    password: {SECRET_VALUE}
"""

B_NAMES = "pod/api-0\n"

B_DATA = """\
apiVersion: v1
kind: List
items:
- apiVersion: v1
  kind: Pod
  metadata:
    name: api-0
    namespace: b
  status:
    phase: Running
    containerStatuses:
    - name: api
      restartCount: 0
      state:
        running:
          startedAt: "2024-01-15T10:30:00Z"
"""

E_NAMES = "service/web\n"

E_DATA = """\
apiVersion: v1
kind: List
items:
- apiVersion: v1
  kind: Service
  metadata:
    name: web
    namespace: e
  spec:
    type: ClusterIP
"""


def cluster_responses(fmt: OutputFormat = OutputFormat.YAML) -> dict[tuple[str, ...], str]:
    """Responses for namespaces a..e; c is wired to fail separately, d is empty."""
    return {
        DISCOVERY_KEY: NAMESPACE_LISTING,
        global_key(fmt): NAMESPACES_YAML,
        names_key("a"): A_NAMES,
        data_key("a", fmt): A_DATA,
        names_key("b"): B_NAMES,
        data_key("b", fmt): B_DATA,
        names_key("e"): E_NAMES,
        data_key("e", fmt): E_DATA,
    }


def make_config(fmt: OutputFormat = OutputFormat.YAML, cwd: str = ".") -> KubemixConfig:
    return KubemixConfig(cwd=cwd, kubernetes=KubernetesConfig(output_format=fmt, max_concurrency=2))


@pytest.fixture
def fake_cluster() -> FakeKubectl:
    """Five application namespaces; listing namespace ``c`` fails."""
    return FakeKubectl(
        responses=cluster_responses(),
        failures={names_key("c"): 'Error from server (Forbidden): pods is forbidden: User "dev" cannot list'},
    )
