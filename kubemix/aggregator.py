"""Aggregation orchestrator.

Drives one run through its states:

    RESOLVING_SCOPE -> FETCHING_GLOBAL -> FETCHING_PER_NAMESPACE
        -> CLASSIFYING_AND_DIAGNOSING -> BUILDING_TREE -> DONE

Namespace discovery and the global namespace listing are mandatory: a
failure there moves the run to FAILED and raises. Everything after that is
best-effort. A namespace whose queries fail contributes an empty entry and
is reported in ``failed_namespaces``; a failing diagnostic call is recorded
on its DiagnosticRecord.
"""

from __future__ import annotations

import asyncio
from enum import StrEnum
from typing import TYPE_CHECKING, Any

import yaml

from kubemix.diagnostics.gatherer import DiagnosticsGatherer
from kubemix.diagnostics.health import is_unhealthy, pod_documents, pod_identity
from kubemix.errors import KubectlError, KubemixError, QueryFailedError, ToolNotFoundError
from kubemix.kubectl.commands import NAME_OUTPUT, get_args, namespace_names_args
from kubemix.kubectl.kinds import parse_name_listing
from kubemix.models.config import OutputFormat
from kubemix.models.resources import GLOBAL_SCOPE, FetchedBlock, NamespaceResult, PodRef
from kubemix.models.results import AggregationResult
from kubemix.observability.logging import get_logger
from kubemix.output.tree import build_tree
from kubemix.redaction import Redactor, parse_documents
from kubemix.scope import ScopeDefaults, resolve

if TYPE_CHECKING:
    import structlog

    from kubemix.kubectl.client import KubectlClient
    from kubemix.models.config import KubemixConfig
    from kubemix.models.resources import ScopeDecision

GLOBAL_BLOCK_KIND = "Namespaces"


class AggregationState(StrEnum):
    RESOLVING_SCOPE = "resolving_scope"
    FETCHING_GLOBAL = "fetching_global"
    FETCHING_PER_NAMESPACE = "fetching_per_namespace"
    CLASSIFYING_AND_DIAGNOSING = "classifying_and_diagnosing"
    BUILDING_TREE = "building_tree"
    DONE = "done"
    FAILED = "failed"


class AggregationError(KubemixError):
    """Raised when a mandatory step of the run fails."""

    def __init__(self, state: AggregationState, cause: Exception) -> None:
        super().__init__(f"Aggregation failed while {state.value.replace('_', ' ')}: {cause}")
        self.state = state
        self.cause = cause


class Aggregator:
    """Runs every query for one aggregation and assembles the result.

    Collaborators are injected so tests can substitute a fake kubectl
    client, redactor or gatherer.
    """

    def __init__(
        self,
        config: KubemixConfig,
        client: KubectlClient,
        *,
        redactor: Redactor | None = None,
        gatherer: DiagnosticsGatherer | None = None,
        scope_defaults: ScopeDefaults | None = None,
        log: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._config = config
        self._client = client
        self._log = log or get_logger("aggregator")
        self._redactor = redactor or Redactor()
        self._gatherer = gatherer or DiagnosticsGatherer(client, config.kubernetes.max_concurrency)
        self._defaults = scope_defaults or ScopeDefaults()
        self._semaphore = asyncio.Semaphore(max(1, config.kubernetes.max_concurrency))
        self.state = AggregationState.RESOLVING_SCOPE

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    async def run(self) -> AggregationResult:
        """Execute the full aggregation.

        Raises:
            ToolNotFoundError: kubectl is not installed.
            AggregationError: namespace discovery or the global listing failed.
        """
        self._enter(AggregationState.RESOLVING_SCOPE)
        discovered = await self._mandatory(self._discover_namespaces())
        scope = resolve(
            self._defaults,
            self._config.file_filter,
            self._config.cli_filter,
            discovered,
            log=self._log,
        )

        self._enter(AggregationState.FETCHING_GLOBAL)
        global_block = await self._mandatory(self._fetch_global())

        self._enter(AggregationState.FETCHING_PER_NAMESPACE)
        # every sibling task is joined before a missing kubectl is reported
        outcomes = await asyncio.gather(
            *(self._fetch_namespace(ns, scope) for ns in scope.namespaces),
            return_exceptions=True,
        )
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                self._log.error("aggregation_failed", state=self.state.value, error=str(outcome))
                self._enter(AggregationState.FAILED)
                raise outcome
        by_namespace = {result.namespace: result for result in outcomes}

        self._enter(AggregationState.CLASSIFYING_AND_DIAGNOSING)
        diagnostics = []
        if self._config.diagnostics.include_failing_pods:
            candidates = self._classify(by_namespace)
            diagnostics = await self._gatherer.gather(candidates, self._config.diagnostics.pod_log_tail_lines)
        else:
            self._log.debug("diagnostics_disabled")

        self._enter(AggregationState.BUILDING_TREE)
        namespaces = sorted(by_namespace)
        tree = build_tree(namespaces, {ns: by_namespace[ns].resources for ns in namespaces})

        blocks = [global_block]
        blocks.extend(by_namespace[ns].block for ns in namespaces if by_namespace[ns].block is not None)

        resource_counts: dict[str, int] = {}
        for ns in namespaces:
            for kind, names in by_namespace[ns].resources.items():
                resource_counts[kind] = resource_counts.get(kind, 0) + len(names)

        result = AggregationResult(
            namespaces=namespaces,
            blocks=blocks,
            tree=tree,
            diagnostics=diagnostics,
            resource_counts=dict(sorted(resource_counts.items())),
            secrets_found=sum(r.secrets_found for r in outcomes),
            redaction_enabled=self._config.security.redact_secrets,
            failed_namespaces=sorted(r.namespace for r in outcomes if r.error is not None),
        )

        self._enter(AggregationState.DONE)
        self._log.info(
            "aggregation_complete",
            namespaces=len(namespaces),
            resources=result.total_resource_count,
            failed_namespaces=result.failed_namespaces,
            diagnostics=len(diagnostics),
            incomplete_diagnostics=result.incomplete_diagnostics,
        )
        return result

    def _enter(self, state: AggregationState) -> None:
        self.state = state
        self._log.debug("aggregation_state", state=state.value)

    async def _mandatory(self, step: Any) -> Any:
        """Await ``step``; any failure is fatal for the run."""
        try:
            return await step
        except ToolNotFoundError:
            self._log.error("aggregation_failed", state=self.state.value, reason="kubectl not found")
            self._enter(AggregationState.FAILED)
            raise
        except KubectlError as exc:
            failed_in = self.state
            self._log.error(
                "aggregation_failed",
                state=failed_in.value,
                error=str(exc),
                command=exc.invocation,
            )
            self._enter(AggregationState.FAILED)
            raise AggregationError(failed_in, exc) from exc

    # ------------------------------------------------------------------
    # Mandatory queries
    # ------------------------------------------------------------------

    async def _discover_namespaces(self) -> list[str]:
        listing = await self._client.invoke(namespace_names_args())
        names = parse_name_listing(listing.text).get("namespaces", [])
        self._log.info("namespaces_discovered", count=len(names))
        return names

    async def _fetch_global(self) -> FetchedBlock:
        fmt = self._config.kubernetes.output_format
        result = await self._client.invoke(get_args(["namespaces"], output=fmt))
        return FetchedBlock(
            scope=GLOBAL_SCOPE,
            invocation=result.invocation,
            raw_text=result.text,
            redacted_text=self._redact(result.text, fmt),
            kind=GLOBAL_BLOCK_KIND,
        )

    # ------------------------------------------------------------------
    # Per-namespace fan-out
    # ------------------------------------------------------------------

    async def _fetch_namespace(self, namespace: str, scope: ScopeDecision) -> NamespaceResult:
        async with self._semaphore:
            try:
                return await self._collect_namespace(namespace, list(scope.kinds))
            except ToolNotFoundError:
                raise
            except Exception as exc:  # noqa: BLE001
                self._log.warning(
                    "namespace_fetch_failed",
                    namespace=namespace,
                    error=str(exc),
                    command=getattr(exc, "invocation", None),
                )
                return NamespaceResult(namespace=namespace, error=str(exc))

    async def _collect_namespace(self, namespace: str, kinds: list[str]) -> NamespaceResult:
        fmt = self._config.kubernetes.output_format
        selector = self._config.label_selector

        listing = await self._client.invoke(get_args(kinds, namespace, NAME_OUTPUT, selector))
        resources = parse_name_listing(listing.text)
        if not resources:
            self._log.debug("namespace_empty", namespace=namespace)
            return NamespaceResult(namespace=namespace)

        data = await self._client.invoke(get_args(kinds, namespace, fmt, selector))
        block = FetchedBlock(
            scope=namespace,
            invocation=data.invocation,
            raw_text=data.text,
            redacted_text=self._redact(data.text, fmt),
        )

        pods: list[dict[str, Any]] = []
        if self._config.diagnostics.include_failing_pods and resources.get("pods"):
            pods = await self._pod_documents(namespace, data.text, fmt, selector)

        self._log.debug(
            "namespace_fetched",
            namespace=namespace,
            kinds=sorted(resources),
            resources=sum(len(v) for v in resources.values()),
        )
        return NamespaceResult(
            namespace=namespace,
            resources=resources,
            block=block,
            pod_documents=pods,
            secrets_found=len(resources.get("secrets", [])),
        )

    async def _pod_documents(
        self,
        namespace: str,
        raw_text: str,
        fmt: OutputFormat,
        selector: str | None,
    ) -> list[dict[str, Any]]:
        """Parsed Pod documents for classification.

        Structured data blocks are parsed directly; wide tables cannot be,
        so pods are fetched once more as JSON.
        """
        source_fmt = fmt
        if fmt is OutputFormat.TEXT:
            try:
                raw_text = (await self._client.invoke(get_args(["pods"], namespace, OutputFormat.JSON, selector))).text
            except QueryFailedError as exc:
                self._log.warning("pod_status_fetch_failed", namespace=namespace, error=str(exc), command=exc.invocation)
                return []
            source_fmt = OutputFormat.JSON
        try:
            return pod_documents(parse_documents(raw_text, source_fmt))
        except (yaml.YAMLError, ValueError) as exc:
            self._log.warning("pod_status_unparseable", namespace=namespace, format=str(source_fmt), error=str(exc))
            return []

    def _redact(self, text: str, fmt: OutputFormat) -> str:
        if not self._config.security.redact_secrets:
            return text
        return self._redactor.redact(text, fmt)

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    def _classify(self, by_namespace: dict[str, NamespaceResult]) -> list[PodRef]:
        candidates: list[PodRef] = []
        for namespace in sorted(by_namespace):
            for doc in by_namespace[namespace].pod_documents:
                if not is_unhealthy(doc):
                    continue
                identity = pod_identity(doc, namespace)
                if identity is not None:
                    candidates.append(PodRef(*identity))
        self._log.info("unhealthy_pods_found", count=len(candidates))
        return candidates
