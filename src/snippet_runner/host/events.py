"""Payload-free event stream for rule updates."""

from collections.abc import Callable

Listener = Callable[[], None]


class RulesLoadedEvent:
    """Subscribe-only notification that the host reloaded its rules."""

    def __init__(self) -> None:
        self._listeners: list[Listener] = []

    def add_listener(self, listener: Listener) -> None:
        """Register a listener, called on every future emit."""
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def has_listener(self, listener: Listener) -> bool:
        return listener in self._listeners

    def emit(self) -> None:
        """Call every listener in registration order."""
        for listener in list(self._listeners):
            listener()
