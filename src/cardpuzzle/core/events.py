"""
A minimal, synchronous event bus so the UI layer can react to engine changes.
Listeners are invoked in registration order on the caller's turn.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Callable, DefaultDict, Dict, List

logger = logging.getLogger(__name__)

Listener = Callable[[str, Dict[str, Any]], None]


class EventBus:
    """Simple publish/subscribe event bus."""

    def __init__(self) -> None:
        self._listeners: DefaultDict[str, List[Listener]] = defaultdict(list)

    def on(self, event_name: str, listener: Listener) -> None:
        """Register a listener for a specific event name."""
        self._listeners[event_name].append(listener)

    def off(self, event_name: str, listener: Listener) -> None:
        listeners = self._listeners.get(event_name, [])
        if listener in listeners:
            listeners.remove(listener)

    def emit(self, event_name: str, payload: Dict[str, Any] | None = None) -> None:
        """Emit an event with optional payload, notifying all listeners."""
        if payload is None:
            payload = {}
        logger.debug("Emitting '%s' to %d listeners", event_name, len(self._listeners.get(event_name, [])))
        for listener in list(self._listeners.get(event_name, [])):
            listener(event_name, payload)
