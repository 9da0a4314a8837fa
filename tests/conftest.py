"""Shared test fixtures and fakes."""

from collections.abc import Callable, Sequence
from typing import Any
from unittest.mock import Mock

import pytest

from snippet_runner.host.events import RulesLoadedEvent


class FakeDocument:
    """In-memory DocumentHost.

    Tests put nodes under an XPath expression or CSS selector and call
    ``mutate()`` to fire the registered mutation observers.
    """

    def __init__(self) -> None:
        self.xpath_nodes: dict[str, list[Any]] = {}
        self.css_nodes: dict[str, list[Any]] = {}
        self.observers: list[Callable[[], None]] = []

    def evaluate_xpath(self, expression: str) -> Sequence[Any]:
        return self.xpath_nodes.get(expression, [])

    def select(self, selector: str) -> Sequence[Any]:
        return self.css_nodes.get(selector, [])

    def observe_mutations(self, callback: Callable[[], None]) -> None:
        self.observers.append(callback)

    def mutate(self) -> None:
        for observer in list(self.observers):
            observer()


class FakeRuleSource:
    """RuleSource with counters, for checking what the runner touched."""

    def __init__(self, snippets: Any = None, whitelisted: bool = False) -> None:
        self.snippets = [] if snippets is None else snippets
        self.whitelisted = whitelisted
        self.on_rules_loaded = RulesLoadedEvent()
        self.whitelist_calls = 0
        self.snippet_calls = 0

    async def is_whitelisted(self) -> bool:
        self.whitelist_calls += 1
        return self.whitelisted

    async def get_snippets(self) -> Any:
        self.snippet_calls += 1
        return self.snippets


@pytest.fixture
def document() -> FakeDocument:
    return FakeDocument()


@pytest.fixture
def media_controller() -> Mock:
    controller = Mock()
    controller.skip_currently_playing_media = Mock()
    return controller


@pytest.fixture
def make_rule_source() -> type[FakeRuleSource]:
    return FakeRuleSource
