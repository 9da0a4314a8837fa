"""Rule source and feature gate backed by in-memory data or a YAML file.

Rules file format::

    whitelisted: false
    snippets:
      - "log 'hello'; skip-current-media '//video'"
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from snippet_runner.host.events import RulesLoadedEvent
from snippet_runner.host.interfaces import ContentFilterType

logger = logging.getLogger(__name__)


def load_rules_file(path: Path) -> dict[str, Any]:
    """Load a rules file.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the document is not a mapping
    """
    if not path.exists():
        raise FileNotFoundError(f"Rules file not found: {path}")

    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Rules file must contain a mapping: {path}")
    return data


class StaticRuleSource:
    """Rule source serving a fixed snippet collection."""

    def __init__(self, snippets: Any = None, whitelisted: bool = False) -> None:
        self.snippets = [] if snippets is None else snippets
        self.whitelisted = whitelisted
        self.on_rules_loaded = RulesLoadedEvent()
        self._path: Path | None = None

    @classmethod
    def from_file(cls, path: Path) -> StaticRuleSource:
        data = load_rules_file(path)
        source = cls(
            snippets=data.get("snippets", []),
            whitelisted=bool(data.get("whitelisted", False)),
        )
        source._path = path
        return source

    async def is_whitelisted(self) -> bool:
        return self.whitelisted

    async def get_snippets(self) -> Any:
        return self.snippets

    def reload(self, snippets: Any = None) -> None:
        """Replace the snippets and notify listeners.

        Without arguments the backing file is re-read, if there is one.
        """
        if snippets is not None:
            self.snippets = snippets
        elif self._path is not None:
            self.snippets = load_rules_file(self._path).get("snippets", [])
        logger.debug("Rules reloaded")
        self.on_rules_loaded.emit()


class StaticFeatureGate:
    """Feature gate with a fixed set of enabled filter types."""

    def __init__(self, enabled: set[ContentFilterType] | None = None) -> None:
        self.enabled = {ContentFilterType.ADS} if enabled is None else enabled

    async def is_content_filter_type_enabled(self, kind: ContentFilterType) -> bool:
        return kind in self.enabled
