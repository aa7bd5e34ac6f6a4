from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from ..collection.engine import CollectionEngine
from ..core.events import EventBus
from ..core.rng import RNG
from ..meta.access import FeatureAccess, unlock_advisory
from ..meta.event_window import format_countdown

logger = logging.getLogger(__name__)

FULL_TURNS_DEG = 360 * 4


class WheelState(str, Enum):
    LOCKED = "locked"
    IDLE = "idle"
    READY = "ready"
    SPINNING = "spinning"
    RESOLVED = "resolved"


@dataclass(frozen=True)
class SpinTicket:
    """A spin whose outcome is already fixed; ``resolve`` applies it."""

    index: int
    card_id: str
    pool: List[str]
    consumes_cooldown: bool
    started_at: int
    resolves_at: int

    @property
    def rotation_deg(self) -> float:
        """Final wheel rotation that lands segment ``index`` under the pointer."""
        return FULL_TURNS_DEG - self.index * (360 / len(self.pool))


class RewardWheel:
    """
    Cooldown-gated wheel that awards one card from the collection pool.

    The free path sets ``wheelNextFreeAt``; the privileged path (``free=False``)
    ignores and leaves the cooldown untouched.
    """

    def __init__(self, collection: CollectionEngine, rng: Optional[RNG] = None,
                 bus: Optional[EventBus] = None) -> None:
        self.collection = collection
        self.store = collection.store
        self.config = collection.store.config
        self.clock = collection.store.clock
        self.rng = rng or RNG()
        self.bus = bus or collection.bus
        self._in_flight: Optional[SpinTicket] = None
        self._last: Optional[SpinTicket] = None

    def is_unlocked(self) -> bool:
        return self.store.document.wheel_unlocked

    def cooldown_remaining_ms(self) -> int:
        return max(0, self.store.document.wheel_next_free_at - self.clock.now_ms())

    def cooldown_text(self) -> str:
        return format_countdown(self.cooldown_remaining_ms())

    def is_free_spin_available(self) -> bool:
        return self.is_unlocked() and self.cooldown_remaining_ms() <= 0

    @property
    def state(self) -> WheelState:
        if not self.is_unlocked():
            return WheelState.LOCKED
        if self._in_flight is not None:
            return WheelState.SPINNING
        if self._last is not None:
            return WheelState.RESOLVED
        if self.cooldown_remaining_ms() > 0:
            return WheelState.IDLE
        return WheelState.READY

    def access(self) -> FeatureAccess:
        if not self.is_unlocked():
            return FeatureAccess.denied(unlock_advisory(self.config.wheel_unlock_level))
        return FeatureAccess.ok()

    def dismiss(self) -> None:
        """Close the reward popup; the wheel falls back to Idle or Ready."""
        self._last = None

    def mark_tutorial_seen(self) -> None:
        self.store.document.wheel_tutorial_seen = True
        self.store.persist()

    def pool(self) -> List[str]:
        return self.collection.get_wheel_segment_pool()

    def start_spin(self, free: bool = True) -> Optional[SpinTicket]:
        """Pick the winning segment now; effects wait for :meth:`resolve`."""
        if not self.is_unlocked():
            logger.debug("Spin refused: wheel locked")
            return None
        if self._in_flight is not None:
            logger.debug("Spin refused: a spin is already in flight")
            return None
        if free and self.cooldown_remaining_ms() > 0:
            logger.debug("Spin refused: cooldown %s", self.cooldown_text())
            return None
        pool = self.pool()
        index = self.rng.randrange(len(pool))
        now = self.clock.now_ms()
        ticket = SpinTicket(
            index=index,
            card_id=pool[index],
            pool=pool,
            consumes_cooldown=free,
            started_at=now,
            resolves_at=now + self.config.wheel_spin_duration_ms + self.config.wheel_settle_ms,
        )
        self._in_flight = ticket
        self._last = None
        logger.debug("Spin started: segment %d -> %s", index, ticket.card_id)
        return ticket

    def resolve(self, ticket: SpinTicket) -> Optional[str]:
        """Apply the spin once its animation time has passed."""
        if ticket is not self._in_flight:
            logger.debug("resolve(): ticket is not the spin in flight")
            return None
        if self.clock.now_ms() < ticket.resolves_at:
            logger.debug("resolve(): wheel still turning until %d", ticket.resolves_at)
            return None
        return self._apply(ticket)

    def _apply(self, ticket: SpinTicket) -> str:
        self._in_flight = None
        card_id = self.collection.award_card_from_wheel(ticket.card_id)
        if ticket.consumes_cooldown:
            self.store.document.wheel_next_free_at = self.clock.now_ms() + self.config.wheel_cooldown_ms
        self.store.persist()
        self._last = ticket
        logger.info("Wheel awarded %s (free=%s)", card_id, ticket.consumes_cooldown)
        self.bus.emit("wheel:resolved", {"card_id": card_id, "index": ticket.index, "free": ticket.consumes_cooldown})
        return card_id

    def spin(self, free: bool = True) -> Optional[str]:
        """Start a spin and apply it without waiting for the animation."""
        ticket = self.start_spin(free=free)
        if ticket is None:
            return None
        return self._apply(ticket)
