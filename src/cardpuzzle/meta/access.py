from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

EVENT_ENDED = "Event ended"


def unlock_advisory(unlock_level_index: int, after: bool = False) -> str:
    """Player-facing hint for a locked feature; levels are shown 1-based."""
    if after:
        return f"Unlocks after level {unlock_level_index + 1}"
    return f"Unlocks at level {unlock_level_index + 1}"


@dataclass(frozen=True)
class FeatureAccess:
    """Whether a feature screen may open, plus the transient hint when it may not."""

    available: bool
    advisory: Optional[str] = None

    @classmethod
    def ok(cls) -> "FeatureAccess":
        return cls(True)

    @classmethod
    def denied(cls, advisory: str) -> "FeatureAccess":
        return cls(False, advisory)
