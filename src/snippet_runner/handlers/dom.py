"""Selector helpers over a DocumentHost."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from snippet_runner.host.interfaces import DocumentHost

NodeCallback = Callable[[Any], None]
QueryAndApply = Callable[[NodeCallback | None], None]

_XPATH_PREFIX = "xpath("
_XPATH_SUFFIX = ")"


def is_xpath_selector(selector: str) -> bool:
    return selector.startswith(_XPATH_PREFIX) and selector.endswith(_XPATH_SUFFIX)


def init_query_and_apply(selector: str, document: DocumentHost) -> QueryAndApply:
    """Build a query function for a CSS or XPath selector.

    Args:
        selector: A CSS selector, or an XPath expression written as
            ``xpath(<expression>)``
        document: Document to query

    Returns:
        Function taking a callback that is applied to every node matching
        the selector at call time. A None callback does nothing.
    """
    if is_xpath_selector(selector):
        expression = selector[len(_XPATH_PREFIX) : -len(_XPATH_SUFFIX)]

        def query_xpath(callback: NodeCallback | None) -> None:
            if callback is None:
                return
            # Snapshot so callbacks may mutate the document safely
            for node in list(document.evaluate_xpath(expression)):
                callback(node)

        return query_xpath

    def query_css(callback: NodeCallback | None) -> None:
        if callback is None:
            return
        for node in list(document.select(selector)):
            callback(node)

    return query_css
