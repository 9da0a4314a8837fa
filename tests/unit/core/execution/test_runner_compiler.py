"""Tests for the subprocess runner compiler."""

import json
import logging
import subprocess
import sys
from pathlib import Path
from unittest.mock import Mock, patch

import pytest

from snippet_runner.core.execution.runner_compiler import (
    SubprocessRunner,
    SubprocessRunnerCompiler,
)


class TestSubprocessRunnerCompiler:
    def test_compile_writes_source_to_script_file(self) -> None:
        compiler = SubprocessRunnerCompiler(interpreter=["node"], timeout=5)

        runner = compiler.compile("console.log('hi')")
        try:
            assert runner.script_path.read_text(encoding="utf-8") == (
                "console.log('hi')"
            )
            assert runner.interpreter == ["node"]
            assert runner.timeout == 5
        finally:
            runner.close()

        assert not runner.script_path.exists()

    def test_default_interpreter_is_node(self) -> None:
        assert SubprocessRunnerCompiler().interpreter == ["node"]

    @pytest.mark.parametrize("source", ["", "  \n\t"])
    def test_empty_source_is_rejected(self, source: str) -> None:
        with pytest.raises(ValueError, match="empty"):
            SubprocessRunnerCompiler().compile(source)


class TestSubprocessRunner:
    def test_call_sends_context_and_filters_on_stdin(self, tmp_path: Path) -> None:
        script = tmp_path / "runner.js"
        runner = SubprocessRunner(script, ["node"], timeout=7)

        with patch(
            "snippet_runner.core.execution.runner_compiler.subprocess.run",
            return_value=Mock(returncode=0, stderr=""),
        ) as mock_run:
            runner({"world": "ISOLATED"}, ["a", "1"], ["b"])

        args, kwargs = mock_run.call_args
        assert args[0] == ["node", str(script)]
        assert json.loads(kwargs["input"]) == {
            "context": {"world": "ISOLATED"},
            "filters": [["a", "1"], ["b"]],
        }
        assert kwargs["timeout"] == 7
        assert kwargs["check"] is False

    def test_nonzero_exit_is_logged(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        runner = SubprocessRunner(tmp_path / "runner.js", ["node"], timeout=7)

        with (
            caplog.at_level(logging.WARNING),
            patch(
                "snippet_runner.core.execution.runner_compiler.subprocess.run",
                return_value=Mock(returncode=3, stderr="ReferenceError\n"),
            ),
        ):
            runner({"world": "ISOLATED"})

        assert "exited with code 3" in caplog.text
        assert "ReferenceError" in caplog.text

    def test_timeout_propagates(self, tmp_path: Path) -> None:
        runner = SubprocessRunner(tmp_path / "runner.js", ["node"], timeout=1)

        with (
            patch(
                "snippet_runner.core.execution.runner_compiler.subprocess.run",
                side_effect=subprocess.TimeoutExpired(cmd="node", timeout=1),
            ),
            pytest.raises(subprocess.TimeoutExpired),
        ):
            runner({"world": "ISOLATED"})

    def test_runs_real_interpreter(self, tmp_path: Path) -> None:
        """Compiled source runs in a separate interpreter process."""
        output = tmp_path / "payload.json"
        source = (
            "import json, pathlib, sys\n"
            f"pathlib.Path({str(output)!r}).write_text(sys.stdin.read())\n"
        )
        compiler = SubprocessRunnerCompiler(interpreter=[sys.executable], timeout=30)
        runner = compiler.compile(source)

        try:
            runner({"world": "ISOLATED"}, ["log", "hello world"])
        finally:
            runner.close()

        assert json.loads(output.read_text()) == {
            "context": {"world": "ISOLATED"},
            "filters": [["log", "hello world"]],
        }
