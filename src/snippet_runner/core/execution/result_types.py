"""Typed results for runner cycles."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from snippet_runner.schemas.snippet import Snippet

CycleStatus = Literal["completed", "no_rules", "disabled", "suppressed"]


@dataclass
class PartitionResult:
    """Queue split into local and external snippets, each in source order."""

    local: list[Snippet] = field(default_factory=list)
    external: list[Snippet] = field(default_factory=list)

    def external_filters(self) -> list[list[str]]:
        return [snippet.to_filter() for snippet in self.external]


@dataclass
class CycleReport:
    """Outcome of one collection-and-run cycle.

    Negative gating results are reported through status, not errors.
    """

    status: CycleStatus
    parsed: int = 0
    queued: int = 0
    local: list[Snippet] = field(default_factory=list)
    external: list[Snippet] = field(default_factory=list)
    external_invoked: bool = False
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dict for CLI output."""
        result: dict[str, Any] = {
            "status": self.status,
            "parsed": self.parsed,
            "queued": self.queued,
            "local": [s.to_filter() for s in self.local],
            "external": [s.to_filter() for s in self.external],
            "external_invoked": self.external_invoked,
        }
        if self.errors:
            result["errors"] = self.errors
        return result
