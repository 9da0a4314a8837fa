"""Registry of snippets handled in-process instead of by the external runner."""

from __future__ import annotations

from collections.abc import Callable

from snippet_runner.host.interfaces import DocumentHost, MediaController

# Handlers receive the snippet arguments positionally; results are ignored
LocalHandler = Callable[..., None]


class HandlerRegistry:
    """Name to handler mapping, configured once and then frozen."""

    def __init__(self) -> None:
        self._handlers: dict[str, LocalHandler] = {}
        self._frozen = False

    def register(self, name: str, handler: LocalHandler) -> None:
        """Register a handler, replacing any earlier one with the same name.

        Raises:
            ValueError: If name is empty
            RuntimeError: If the registry is already frozen
        """
        if not name:
            raise ValueError("Handler name must be non-empty")
        if self._frozen:
            raise RuntimeError(f"Cannot register '{name}': registry is frozen")
        self._handlers[name] = handler

    def freeze(self) -> HandlerRegistry:
        """Stop accepting registrations. Returns self for chaining."""
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def resolve(self, name: str) -> LocalHandler | None:
        """Get the handler for name, or None if it runs externally."""
        return self._handlers.get(name)

    def names(self) -> list[str]:
        return list(self._handlers)

    def __contains__(self, name: object) -> bool:
        return name in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)


def build_default_registry(
    document: DocumentHost, media_controller: MediaController
) -> HandlerRegistry:
    """Build the frozen registry of built-in local handlers."""
    from snippet_runner.handlers.skip_current_media import (
        SNIPPET_NAME,
        SkipCurrentMedia,
    )

    registry = HandlerRegistry()
    registry.register(SNIPPET_NAME, SkipCurrentMedia(document, media_controller))
    return registry.freeze()


def default_handler_names() -> list[str]:
    """Names of the built-in local handlers, without building them."""
    from snippet_runner.handlers.skip_current_media import SNIPPET_NAME

    return [SNIPPET_NAME]
