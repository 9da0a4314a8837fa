"""Protocols for the host collaborators consumed by the runner.

The runner never reaches the host directly: rules, feature flags, the
document and media playback are all behind these interfaces.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from enum import Enum
from typing import Any, Protocol

from snippet_runner.host.events import RulesLoadedEvent


class ContentFilterType(Enum):
    """Content filter categories a host can enable independently."""

    ADS = "ads"
    TRACKERS = "trackers"
    ANNOYANCES = "annoyances"


class RuleSource(Protocol):
    """Supplies snippet scripts and tells whether the page is whitelisted."""

    on_rules_loaded: RulesLoadedEvent

    async def is_whitelisted(self) -> bool: ...

    async def get_snippets(self) -> Any:
        """Return the current scripts; anything but a list means none."""
        ...


class FeatureGate(Protocol):
    """Reports whether a content filter category is enabled."""

    async def is_content_filter_type_enabled(self, kind: ContentFilterType) -> bool: ...


MutationCallback = Callable[[], None]


class DocumentHost(Protocol):
    """Structural view of the page document."""

    def evaluate_xpath(self, expression: str) -> Sequence[Any]:
        """Return the nodes matching expression, in document order."""
        ...

    def select(self, selector: str) -> Sequence[Any]:
        """Return the nodes matching a CSS selector."""
        ...

    def observe_mutations(self, callback: MutationCallback) -> None:
        """Call callback on every child-list change in the document body.

        Observation starts once the body exists.
        """
        ...


class MediaController(Protocol):
    """Privileged playback control."""

    def skip_currently_playing_media(self) -> None: ...
