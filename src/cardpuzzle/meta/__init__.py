from .access import EVENT_ENDED, FeatureAccess, unlock_advisory
from .event_window import (
    ALBUM_EVENT,
    BATTLE_PASS_EVENT,
    EventWindows,
    format_countdown,
    format_remaining,
)

__all__ = [
    "ALBUM_EVENT",
    "BATTLE_PASS_EVENT",
    "EVENT_ENDED",
    "EventWindows",
    "FeatureAccess",
    "format_countdown",
    "format_remaining",
    "unlock_advisory",
]
