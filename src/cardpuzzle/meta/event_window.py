"""Time-boxed event windows (album event, battle-pass event).

Every answer is a pure function of the two persisted timestamps and the
current time, so countdown displays can be started and stopped freely.
"""
from __future__ import annotations

import logging
from typing import Optional

from ..core.clock import Clock, SystemClock
from ..persistence.models import EventWindow, SaveDocument

logger = logging.getLogger(__name__)

ALBUM_EVENT = "albumEvent"
BATTLE_PASS_EVENT = "battlePassEvent"

_ATTRS = {
    ALBUM_EVENT: "album_event",
    BATTLE_PASS_EVENT: "battle_pass_event",
}

DEFAULT_DURATION_MS = 10 * 24 * 60 * 60 * 1000


def _attr(key: str) -> str:
    try:
        return _ATTRS[key]
    except KeyError as exc:
        raise KeyError(f"Unknown event key: {key}") from exc


def get_window(doc: SaveDocument, key: str) -> Optional[EventWindow]:
    window = getattr(doc, _attr(key))
    if isinstance(window, EventWindow) and window.is_well_formed():
        return window
    return None


def open_window(doc: SaveDocument, key: str, now_ms: int, duration_ms: int = DEFAULT_DURATION_MS) -> EventWindow:
    """Replace the window at ``key`` with a fresh one starting at ``now_ms``."""
    window = EventWindow(start_at=now_ms, end_at=now_ms + duration_ms)
    setattr(doc, _attr(key), window)
    logger.info("Opened %s window until %d", key, window.end_at)
    return window


class EventWindows:
    """Clock-bound accessors for the windows stored on a save document."""

    def __init__(self, clock: Optional[Clock] = None, duration_ms: int = DEFAULT_DURATION_MS) -> None:
        self.clock = clock or SystemClock()
        self.duration_ms = duration_ms

    def ensure(self, doc: SaveDocument, key: str, create_if_missing: bool) -> Optional[EventWindow]:
        window = get_window(doc, key)
        if window is not None:
            return window
        if not create_if_missing:
            return None
        return open_window(doc, key, self.clock.now_ms(), self.duration_ms)

    def open(self, doc: SaveDocument, key: str) -> EventWindow:
        return open_window(doc, key, self.clock.now_ms(), self.duration_ms)

    def is_active(self, doc: SaveDocument, key: str) -> bool:
        window = get_window(doc, key)
        return window is not None and self.clock.now_ms() < window.end_at

    def remaining_ms(self, doc: SaveDocument, key: str) -> int:
        window = get_window(doc, key)
        if window is None:
            return 0
        return max(0, window.end_at - self.clock.now_ms())


def format_remaining(ms: int) -> str:
    """Render an event countdown as ``"{d}d {h}h {m}m"``."""
    if ms <= 0:
        return "Event ended"
    days = ms // 86_400_000
    hours = (ms % 86_400_000) // 3_600_000
    minutes = (ms % 3_600_000) // 60_000
    return f"{days}d {hours}h {minutes}m"


def format_countdown(ms: int) -> str:
    """Render a cooldown as ``HH:MM:SS``; hours are not wrapped at 24."""
    ms = max(0, ms)
    hours = ms // 3_600_000
    minutes = (ms % 3_600_000) // 60_000
    seconds = (ms % 60_000) // 1000
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
