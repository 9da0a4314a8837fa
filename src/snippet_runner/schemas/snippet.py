"""Snippet command model and execution context tag.

A snippet is one parsed command invocation: a name followed by its
positional string arguments, in the order they appeared in the script.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any


@dataclass(frozen=True)
class Snippet:
    """One command from a snippet script.

    Constructed by the parser, owned by the runner's queue, never mutated.
    """

    name: str
    args: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Snippet name must be non-empty")
        # Accept any sequence from callers but always store a tuple
        if not isinstance(self.args, tuple):
            object.__setattr__(self, "args", tuple(self.args))

    @classmethod
    def from_call(cls, call: Sequence[str]) -> Snippet:
        """Build a snippet from a raw ``[name, *args]`` call."""
        if not call:
            raise ValueError("Cannot build a snippet from an empty call")
        return cls(name=call[0], args=tuple(call[1:]))

    def to_filter(self) -> list[str]:
        """Flatten to the ``[name, *args]`` form used by the external runner."""
        return [self.name, *self.args]


class ExecutionWorld(Enum):
    """Script worlds an external runner can execute in."""

    ISOLATED = "ISOLATED"
    MAIN = "MAIN"


@dataclass(frozen=True)
class ExecutionContext:
    """Tag passed as the first positional argument to the external runner."""

    world: ExecutionWorld = ExecutionWorld.ISOLATED

    @classmethod
    def isolated(cls) -> ExecutionContext:
        return cls(world=ExecutionWorld.ISOLATED)

    def to_dict(self) -> dict[str, Any]:
        return {"world": self.world.value}
