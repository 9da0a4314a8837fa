"""Gateway to the external snippet runner.

The runner source is fetched and compiled once per gateway. Every caller
of ``get_or_initialize`` shares the same in-flight or finished
initialization, including its failure.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

from snippet_runner.core.execution.runner_compiler import (
    CompiledRunner,
    RunnerCompiler,
)
from snippet_runner.schemas.snippet import ExecutionContext

logger = logging.getLogger(__name__)


class GatewayInitializationError(RuntimeError):
    """The external runner could not be fetched or compiled."""


class ExternalRunnerGateway:
    """Lazily loaded, single-flight handle on the external runner."""

    def __init__(
        self,
        runner_url: str,
        compiler: RunnerCompiler,
        http_client: Any = None,
    ) -> None:
        self.runner_url = runner_url
        self._compiler = compiler
        self._http_client = http_client  # httpx.AsyncClient
        self._init_task: asyncio.Task[CompiledRunner] | None = None
        self._runner: CompiledRunner | None = None

    @property
    def is_initialized(self) -> bool:
        return self._runner is not None

    @property
    def initialization_started(self) -> bool:
        return self._init_task is not None

    async def get_or_initialize(self) -> CompiledRunner:
        """Return the compiled runner, starting initialization if needed.

        Raises:
            GatewayInitializationError: If fetching or compiling failed
        """
        if self._init_task is None:
            self._init_task = asyncio.ensure_future(self._initialize())
            self._init_task.add_done_callback(self._log_initialization_result)
        # One awaiter being cancelled must not cancel the shared task
        return await asyncio.shield(self._init_task)

    def reset(self) -> None:
        """Forget the current initialization so the next call re-fetches.

        Raises:
            RuntimeError: If initialization is still in flight
        """
        if self._init_task is not None and not self._init_task.done():
            raise RuntimeError("Cannot reset while initialization is in progress")

        close = getattr(self._runner, "close", None)
        if callable(close):
            close()
        self._init_task = None
        self._runner = None

    async def invoke(self, context: ExecutionContext, *filters: list[str]) -> None:
        """Run a batch of flattened snippets in the given context.

        The compiled runner is blocking, so it runs in the default executor.

        Raises:
            GatewayInitializationError: If the runner is not initialized
        """
        if self._runner is None:
            raise GatewayInitializationError("External runner is not initialized")
        logger.debug(
            "Invoking external runner with %d snippet(s) in %s",
            len(filters),
            context.world.value,
        )
        runner = self._runner
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, lambda: runner(context.to_dict(), *filters))

    async def aclose(self) -> None:
        """Wait for any in-flight initialization, then release the runner."""
        if self._init_task is not None and not self._init_task.done():
            try:
                await asyncio.shield(self._init_task)
            except GatewayInitializationError:
                pass  # Already logged by the done callback
        self.reset()

    async def __aenter__(self) -> ExternalRunnerGateway:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def _initialize(self) -> CompiledRunner:
        try:
            source = await self._fetch_source()
            runner = self._compiler.compile(source)
        except Exception as e:
            raise GatewayInitializationError(
                f"Failed to load external runner from {self.runner_url}: {e}"
            ) from e

        self._runner = runner
        logger.info("External runner loaded from %s", self.runner_url)
        return runner

    async def _fetch_source(self) -> str:
        """Fetch runner source from an http(s) URL or a local file."""
        parsed = urlparse(self.runner_url)

        if parsed.scheme in ("http", "https"):
            if self._http_client is not None:
                return await self._get_text(self._http_client)

            import httpx

            async with httpx.AsyncClient() as client:
                return await self._get_text(client)

        path = Path(parsed.path) if parsed.scheme == "file" else Path(self.runner_url)
        return await asyncio.to_thread(path.read_text, encoding="utf-8")

    async def _get_text(self, client: Any) -> str:
        response = await client.get(self.runner_url)
        response.raise_for_status()
        return str(response.text)

    def _log_initialization_result(self, task: asyncio.Task[CompiledRunner]) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("%s", error)
