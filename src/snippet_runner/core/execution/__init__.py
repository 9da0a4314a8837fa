"""Snippet dispatch: handler registry, external runner gateway and runner."""

from snippet_runner.core.execution.external_runner import (
    ExternalRunnerGateway,
    GatewayInitializationError,
)
from snippet_runner.core.execution.handler_registry import (
    HandlerRegistry,
    build_default_registry,
)
from snippet_runner.core.execution.result_types import CycleReport, PartitionResult
from snippet_runner.core.execution.snippet_runner import RunnerState, SnippetRunner

__all__ = [
    "CycleReport",
    "ExternalRunnerGateway",
    "GatewayInitializationError",
    "HandlerRegistry",
    "PartitionResult",
    "RunnerState",
    "SnippetRunner",
    "build_default_registry",
]
