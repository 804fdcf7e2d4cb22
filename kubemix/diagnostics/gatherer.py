"""Diagnostics gathering for unhealthy pods.

Each candidate gets three kubectl calls, run concurrently:
``describe pod``, current ``logs --tail`` and ``logs --previous --tail``.
A failing sub-call never affects its siblings or other candidates; the
failure is folded into the record's ``error`` field instead.
"""

from __future__ import annotations

import asyncio
import re
from collections.abc import Sequence
from typing import TYPE_CHECKING

from kubemix.errors import KubectlError, QueryFailedError
from kubemix.kubectl.commands import describe_pod_args, logs_args
from kubemix.models.diagnostics import PREVIOUS_LOGS_UNAVAILABLE, DiagnosticRecord
from kubemix.observability.logging import get_logger

if TYPE_CHECKING:
    import structlog

    from kubemix.kubectl.client import KubectlClient
    from kubemix.models.resources import PodRef

# kubectl: previous terminated container "app" in pod "web-0" not found
_NO_PREVIOUS_RE = re.compile(r"previous terminated container .* not found", re.IGNORECASE)


def _no_previous_instance(exc: Exception) -> bool:
    return isinstance(exc, QueryFailedError) and bool(_NO_PREVIOUS_RE.search(exc.stderr))


class DiagnosticsGatherer:
    """Bounded fan-out of diagnostic calls over candidate pods."""

    def __init__(
        self,
        client: KubectlClient,
        max_concurrency: int = 8,
        log: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._client = client
        self._semaphore = asyncio.Semaphore(max(1, max_concurrency))
        self._log = log or get_logger("diagnostics")

    async def gather(self, candidates: Sequence[PodRef], tail_lines: int) -> list[DiagnosticRecord]:
        """Return one record per candidate, in candidate order."""
        if not candidates:
            return []
        self._log.info("diagnostics_started", candidates=len(candidates), tail_lines=tail_lines)
        records = await asyncio.gather(*(self._gather_one(pod, tail_lines) for pod in candidates))
        incomplete = sum(1 for r in records if not r.is_complete)
        self._log.info("diagnostics_complete", records=len(records), incomplete=incomplete)
        return list(records)

    async def _gather_one(self, pod: PodRef, tail_lines: int) -> DiagnosticRecord:
        describe = describe_pod_args(pod.name, pod.namespace)
        logs = logs_args(pod.name, pod.namespace, tail_lines)
        previous = logs_args(pod.name, pod.namespace, tail_lines, previous=True)

        record = DiagnosticRecord(
            namespace=pod.namespace,
            name=pod.name,
            describe_invocation=self._client.invocation(describe),
            logs_invocation=self._client.invocation(logs),
            prev_logs_invocation=self._client.invocation(previous),
        )

        async with self._semaphore:
            outcomes = await asyncio.gather(
                self._client.invoke(describe),
                self._client.invoke(logs),
                self._client.invoke(previous),
                return_exceptions=True,
            )

        describe_out, logs_out, previous_out = outcomes
        errors: list[str] = []

        if isinstance(describe_out, BaseException):
            errors.append(self._failure("describe", pod, describe_out))
        else:
            record.describe_text = describe_out.text

        if isinstance(logs_out, BaseException):
            errors.append(self._failure("logs", pod, logs_out))
        else:
            record.logs_text = logs_out.text

        if isinstance(previous_out, BaseException):
            if isinstance(previous_out, Exception) and _no_previous_instance(previous_out):
                self._log.debug("previous_logs_unavailable", namespace=pod.namespace, pod=pod.name)
                record.prev_logs_text = PREVIOUS_LOGS_UNAVAILABLE
            else:
                errors.append(self._failure("previous logs", pod, previous_out))
        else:
            record.prev_logs_text = previous_out.text

        if errors:
            record.error = "; ".join(errors)
        return record

    def _failure(self, call: str, pod: PodRef, exc: BaseException) -> str:
        if not isinstance(exc, Exception):
            raise exc
        self._log.warning(
            "diagnostic_call_failed",
            call=call,
            namespace=pod.namespace,
            pod=pod.name,
            error=str(exc),
            command=exc.invocation if isinstance(exc, KubectlError) else None,
        )
        return f"{call}: {exc}"
