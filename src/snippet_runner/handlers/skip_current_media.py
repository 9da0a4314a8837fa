"""The ``skip-current-media`` snippet.

Usage in a script::

    skip-current-media '//div[contains(@class, "ad-showing")]'

Watches the document and skips the currently playing media the first
time a node matches the XPath condition.
"""

from __future__ import annotations

import logging
from typing import Any

from snippet_runner.handlers.dom import init_query_and_apply
from snippet_runner.host.interfaces import DocumentHost, MediaController

logger = logging.getLogger(__name__)

SNIPPET_NAME = "skip-current-media"


class _Activation:
    """One invocation of the snippet, skipping at most once."""

    def __init__(self, xpath_condition: str, media_controller: MediaController):
        self.xpath_condition = xpath_condition
        self._media_controller = media_controller
        self.skipped = False

    def on_match(self, _node: Any) -> None:
        if self.skipped:
            return
        logger.debug("Skipping media, matched %r", self.xpath_condition)
        self._media_controller.skip_currently_playing_media()
        self.skipped = True


class SkipCurrentMedia:
    """Local handler skipping media when an XPath condition appears."""

    def __init__(
        self, document: DocumentHost, media_controller: MediaController
    ) -> None:
        self._document = document
        self._media_controller = media_controller
        self.activations: list[_Activation] = []

    def __call__(self, xpath_condition: str, *_extra: str) -> None:
        query_and_apply = init_query_and_apply(
            f"xpath({xpath_condition})", self._document
        )
        activation = _Activation(xpath_condition, self._media_controller)
        self.activations.append(activation)

        def search_nodes() -> None:
            if activation.skipped:
                return
            query_and_apply(activation.on_match)

        self._document.observe_mutations(search_nodes)
        search_nodes()
