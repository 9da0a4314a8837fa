"""Turning fetched runner source into something invokable.

The external runner is untrusted code, so compiling it never means
evaluating it in-process. The default compiler hands the source to a
separate interpreter process, one process per invocation.
"""

from __future__ import annotations

import json
import logging
import os
import subprocess
import tempfile
from pathlib import Path
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class CompiledRunner(Protocol):
    """Invokable external runner: ``runner(context, *filters)``."""

    def __call__(self, context: dict[str, Any], *filters: list[str]) -> None: ...


class RunnerCompiler(Protocol):
    def compile(self, source: str) -> CompiledRunner: ...


class SubprocessRunner:
    """Runs a runner script file with JSON input via stdin."""

    def __init__(self, script_path: Path, interpreter: list[str], timeout: int):
        self.script_path = script_path
        self.interpreter = interpreter
        self.timeout = timeout

    def __call__(self, context: dict[str, Any], *filters: list[str]) -> None:
        payload = json.dumps({"context": context, "filters": [*filters]})

        result = subprocess.run(
            self.interpreter + [str(self.script_path)],
            input=payload,
            capture_output=True,
            text=True,
            timeout=self.timeout,
            env=os.environ.copy(),
            check=False,
        )

        if result.returncode != 0:
            logger.warning(
                "External runner exited with code %d: %s",
                result.returncode,
                result.stderr.strip(),
            )

    def close(self) -> None:
        """Remove the temporary script file."""
        self.script_path.unlink(missing_ok=True)


class SubprocessRunnerCompiler:
    """Compiles runner source into a SubprocessRunner."""

    def __init__(self, interpreter: list[str] | None = None, timeout: int = 30):
        self.interpreter = interpreter if interpreter is not None else ["node"]
        self.timeout = timeout

    def compile(self, source: str) -> SubprocessRunner:
        """Write source to a temporary script.

        Raises:
            ValueError: If source is empty
        """
        if not source.strip():
            raise ValueError("External runner source is empty")

        with tempfile.NamedTemporaryFile(
            mode="w", suffix=".js", delete=False, encoding="utf-8"
        ) as f:
            f.write(source)
            script_path = Path(f.name)

        logger.debug("Compiled external runner to %s", script_path)
        return SubprocessRunner(script_path, self.interpreter, self.timeout)
