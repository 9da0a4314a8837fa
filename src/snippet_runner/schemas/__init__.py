"""Data models shared across the parser and the runner."""

from snippet_runner.schemas.snippet import ExecutionContext, ExecutionWorld, Snippet

__all__ = ["ExecutionContext", "ExecutionWorld", "Snippet"]
