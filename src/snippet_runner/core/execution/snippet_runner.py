"""Snippet runner: collects rules, then dispatches their snippets.

Each cycle fetches the current rules, parses them onto an append-only
queue, and dispatches the *whole* queue: snippets with a registered local
handler are called in-process, everything else goes to the external
runner in a single batch. Snippets queued by earlier cycles are
dispatched again on every later cycle.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any

from snippet_runner.core.execution.external_runner import (
    ExternalRunnerGateway,
    GatewayInitializationError,
)
from snippet_runner.core.execution.handler_registry import HandlerRegistry
from snippet_runner.core.execution.result_types import CycleReport, PartitionResult
from snippet_runner.core.parsing.script_parser import parse_script
from snippet_runner.host.interfaces import ContentFilterType, FeatureGate, RuleSource
from snippet_runner.schemas.snippet import ExecutionContext, Snippet

logger = logging.getLogger(__name__)


class RunnerState(Enum):
    CREATED = "created"
    INITIALIZING = "initializing"
    GATED = "gated"
    READY = "ready"
    SUPPRESSED = "suppressed"


class SnippetRunner:
    """Dispatches parsed snippets to local handlers or the external runner."""

    def __init__(
        self,
        rule_source: RuleSource,
        feature_gate: FeatureGate,
        gateway: ExternalRunnerGateway,
        registry: HandlerRegistry,
        context: ExecutionContext | None = None,
    ) -> None:
        self._rule_source = rule_source
        self._feature_gate = feature_gate
        self._gateway = gateway
        self._registry = registry
        self._context = (
            context if context is not None else ExecutionContext.isolated()
        )
        self._queue: list[Snippet] = []
        self._state = RunnerState.CREATED
        self._pending: set[asyncio.Task[CycleReport]] = set()
        self._gateway_task: asyncio.Task[Any] | None = None

    @property
    def state(self) -> RunnerState:
        return self._state

    @property
    def queue(self) -> list[Snippet]:
        """Snapshot of every snippet queued so far, in arrival order."""
        return list(self._queue)

    async def start(self) -> CycleReport | None:
        """Start loading the runner, check eligibility, run the first cycle.

        Returns:
            The first cycle's report, or None if the page is whitelisted

        Raises:
            RuntimeError: If the runner was already started
        """
        if self._state is not RunnerState.CREATED:
            raise RuntimeError("SnippetRunner can only be started once")

        self._state = RunnerState.INITIALIZING
        self._gateway_task = asyncio.ensure_future(self._gateway.get_or_initialize())
        self._gateway_task.add_done_callback(_retrieve_exception)

        try:
            whitelisted = await self._rule_source.is_whitelisted()
        except Exception:
            logger.warning(
                "Whitelist check failed, not running snippets", exc_info=True
            )
            whitelisted = True

        if whitelisted:
            logger.debug("Page is whitelisted, snippets suppressed")
            self._state = RunnerState.SUPPRESSED
            return None

        first_cycle = self._schedule_cycle()
        self._rule_source.on_rules_loaded.add_listener(self._on_rules_loaded)
        return await first_cycle

    def stop(self) -> None:
        """Stop reacting to rule updates."""
        self._rule_source.on_rules_loaded.remove_listener(self._on_rules_loaded)

    async def drain(self) -> None:
        """Wait for every cycle scheduled by rule updates to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def collect_and_run(self) -> CycleReport:
        """Fetch rules, queue their snippets and dispatch the whole queue."""
        if self._state is RunnerState.SUPPRESSED:
            return CycleReport(status="suppressed", queued=len(self._queue))

        rules = await self._fetch_rules()
        if rules is None:
            return CycleReport(status="no_rules", queued=len(self._queue))

        parsed = self._queue_rules(rules)

        self._state = RunnerState.GATED
        gateway_error = await self._await_gateway()

        if not await self._is_enabled():
            logger.debug("Ad filtering disabled, skipping dispatch")
            return CycleReport(
                status="disabled", parsed=parsed, queued=len(self._queue)
            )

        self._state = RunnerState.READY
        partition = self.partition()
        report = CycleReport(
            status="completed",
            parsed=parsed,
            queued=len(self._queue),
            local=partition.local,
            external=partition.external,
        )

        self._run_local(partition.local, report)

        if gateway_error is not None:
            report.errors.append(gateway_error)
        else:
            await self._run_external(partition, report)

        return report

    def partition(self) -> PartitionResult:
        """Split the queue into local and external snippets."""
        result = PartitionResult()
        for snippet in list(self._queue):
            if snippet.name in self._registry:
                result.local.append(snippet)
            else:
                result.external.append(snippet)
        return result

    async def _fetch_rules(self) -> list[str] | None:
        try:
            rules = await self._rule_source.get_snippets()
        except Exception:
            logger.warning("Fetching snippet rules failed", exc_info=True)
            return None

        if not isinstance(rules, list | tuple):
            logger.debug("Rule source returned %s, not a list", type(rules).__name__)
            return None

        valid_rules = []
        for rule in rules:
            if isinstance(rule, str):
                valid_rules.append(rule)
            else:
                logger.warning("Ignoring non-string snippet rule: %r", rule)
        return valid_rules

    def _queue_rules(self, rules: list[str]) -> int:
        parsed = 0
        for rule in rules:
            snippets = parse_script(rule)
            self._queue.extend(snippets)
            parsed += len(snippets)
        return parsed

    async def _await_gateway(self) -> str | None:
        """Wait for the external runner; return an error message on failure."""
        try:
            await self._gateway.get_or_initialize()
        except GatewayInitializationError as e:
            return str(e)
        return None

    async def _is_enabled(self) -> bool:
        try:
            return bool(
                await self._feature_gate.is_content_filter_type_enabled(
                    ContentFilterType.ADS
                )
            )
        except Exception:
            logger.debug("Feature gate check failed", exc_info=True)
            return False

    def _run_local(self, snippets: list[Snippet], report: CycleReport) -> None:
        for snippet in snippets:
            handler = self._registry.resolve(snippet.name)
            if handler is None:
                continue
            try:
                handler(*snippet.args)
            except Exception as e:
                logger.warning("Local snippet %r failed", snippet.name, exc_info=True)
                report.errors.append(f"{snippet.name}: {e}")

    async def _run_external(
        self, partition: PartitionResult, report: CycleReport
    ) -> None:
        try:
            await self._gateway.invoke(self._context, *partition.external_filters())
        except Exception as e:
            logger.error("External runner failed", exc_info=True)
            report.errors.append(f"external runner: {e}")
            return
        report.external_invoked = True

    def _on_rules_loaded(self) -> None:
        self._schedule_cycle()

    def _schedule_cycle(self) -> asyncio.Task[CycleReport]:
        task = asyncio.ensure_future(self.collect_and_run())
        self._pending.add(task)
        task.add_done_callback(self._cycle_done)
        return task

    def _cycle_done(self, task: asyncio.Task[CycleReport]) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("Snippet cycle failed", exc_info=error)


def _retrieve_exception(task: asyncio.Task[Any]) -> None:
    # The gateway logs initialization failures itself
    if not task.cancelled():
        task.exception()
