"""Unit tests for the pod health classifier."""

from __future__ import annotations

import pytest

from kubemix.diagnostics.health import RESTART_COUNT_THRESHOLD, is_unhealthy, pod_documents, pod_identity


def _pod(phase: str | None = "Running", containers=None, init_containers=None) -> dict:
    status: dict = {}
    if phase is not None:
        status["phase"] = phase
    if containers is not None:
        status["containerStatuses"] = containers
    if init_containers is not None:
        status["initContainerStatuses"] = init_containers
    return {"kind": "Pod", "metadata": {"name": "web-0", "namespace": "shop"}, "status": status}


def _container(restarts: int = 0, waiting: str | None = None) -> dict:
    state = {"waiting": {"reason": waiting}} if waiting else {"running": {}}
    return {"name": "app", "restartCount": restarts, "state": state}


class TestIsUnhealthy:
    def test_running_pod_is_healthy(self) -> None:
        assert not is_unhealthy(_pod(containers=[_container()]))

    def test_succeeded_pod_is_healthy(self) -> None:
        assert not is_unhealthy(_pod("Succeeded"))

    @pytest.mark.parametrize("phase", ["Pending", "Failed", "Unknown"])
    def test_bad_phase(self, phase: str) -> None:
        assert is_unhealthy(_pod(phase))

    def test_restart_threshold_is_exclusive(self) -> None:
        assert not is_unhealthy(_pod(containers=[_container(restarts=RESTART_COUNT_THRESHOLD)]))
        assert is_unhealthy(_pod(containers=[_container(restarts=RESTART_COUNT_THRESHOLD + 1)]))

    @pytest.mark.parametrize(
        "reason",
        ["CrashLoopBackOff", "ImagePullBackOff", "ErrImagePull", "CreateContainerConfigError", "CreateContainerError"],
    )
    def test_bad_waiting_reason(self, reason: str) -> None:
        assert is_unhealthy(_pod(containers=[_container(waiting=reason)]))

    def test_benign_waiting_reason(self) -> None:
        assert not is_unhealthy(_pod(containers=[_container(waiting="ContainerCreating")]))

    def test_init_containers_inspected(self) -> None:
        assert is_unhealthy(_pod(init_containers=[_container(waiting="CrashLoopBackOff")]))

    def test_overridable_threshold(self) -> None:
        pod = _pod(containers=[_container(restarts=2)])

        assert is_unhealthy(pod, restart_threshold=1)

    def test_non_pod_ignored(self) -> None:
        assert not is_unhealthy({"kind": "Deployment", "status": {"phase": "Failed"}})

    @pytest.mark.parametrize(
        "doc",
        [
            {"kind": "Pod"},
            {"kind": "Pod", "status": None},
            {"kind": "Pod", "status": {"containerStatuses": "garbage"}},
            {"kind": "Pod", "status": {"containerStatuses": [{"restartCount": "many"}]}},
            {"kind": "Pod", "status": {"containerStatuses": [{"state": {"waiting": "yes"}}]}},
        ],
    )
    def test_malformed_documents_never_raise(self, doc: dict) -> None:
        assert is_unhealthy(doc) is False


class TestPodDocuments:
    def test_flattens_list_wrappers(self) -> None:
        docs = [
            {"kind": "List", "items": [_pod(), {"kind": "Service"}]},
            {"kind": "PodList", "items": [_pod("Failed")]},
            None,
        ]

        pods = pod_documents(docs)

        assert [p["status"]["phase"] for p in pods] == ["Running", "Failed"]

    def test_identity_falls_back_to_namespace(self) -> None:
        assert pod_identity({"metadata": {"name": "x"}}, "shop") == ("shop", "x")
        assert pod_identity({"metadata": {}}, "shop") is None
