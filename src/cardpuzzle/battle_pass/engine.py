from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..collection.engine import BattlePassAward, CollectionEngine
from ..core.events import EventBus
from ..meta.access import EVENT_ENDED, FeatureAccess, unlock_advisory
from ..meta.event_window import BATTLE_PASS_EVENT, EventWindows

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Tier:
    number: int
    threshold: int
    claimed: bool

    @property
    def status(self) -> str:
        return "claimed" if self.claimed else "pending"


@dataclass(frozen=True)
class StarResult:
    """Outcome of one acknowledged token."""

    stars_total: int
    tier_reached: bool = False
    award: Optional[BattlePassAward] = None
    coins: int = 0


class BattlePassEngine:
    """
    Star counter and tier rewards.

    Claimed status is derived from ``bpStarsTotal`` and never stored.
    """

    def __init__(self, collection: CollectionEngine, bus: Optional[EventBus] = None,
                 windows: Optional[EventWindows] = None) -> None:
        self.collection = collection
        self.store = collection.store
        self.config = collection.store.config
        self.bus = bus or collection.bus
        self.windows = windows or collection.windows

    @property
    def stars_total(self) -> int:
        return self.store.document.bp_stars_total

    def is_unlocked(self) -> bool:
        return self.store.document.battle_pass_unlocked

    def is_event_active(self) -> bool:
        return self.windows.is_active(self.store.document, BATTLE_PASS_EVENT)

    def is_accessible(self) -> bool:
        return self.access().available

    def access(self) -> FeatureAccess:
        if not self.is_unlocked():
            return FeatureAccess.denied(unlock_advisory(self.config.battle_pass_unlock_level))
        if not self.is_event_active():
            return FeatureAccess.denied(EVENT_ENDED)
        return FeatureAccess.ok()

    def acknowledge_token(self) -> Optional[StarResult]:
        """Add one star; every ``stars_per_tier`` stars pays out a tier reward."""
        doc = self.store.document
        if not doc.battle_pass_unlocked:
            logger.debug("Token acknowledged while battle pass locked; ignoring")
            return None
        doc.bp_stars_total += 1
        self.store.persist()
        total = doc.bp_stars_total
        self.bus.emit("battle_pass:star", {"stars_total": total})
        if total % self.config.stars_per_tier != 0:
            return StarResult(stars_total=total)

        if self.is_event_active():
            award = self.collection.award_card_from_battle_pass()
            result = StarResult(stars_total=total, tier_reached=True, award=award, coins=award.coins)
        else:
            amount = self.config.expired_tier_coins
            doc.add_coins(amount)
            self.store.persist()
            logger.info("Tier %d reached after event end; paid %d coins", total, amount)
            result = StarResult(stars_total=total, tier_reached=True, coins=amount)
        self.bus.emit("battle_pass:tier", {"stars_total": total, "card_id": result.award.card_id if result.award else None,
                                           "coins": result.coins})
        return result

    def tiers(self) -> List[Tier]:
        total = self.stars_total
        step = self.config.stars_per_tier
        return [
            Tier(number=n, threshold=n * step, claimed=total >= n * step)
            for n in range(1, self.config.battle_pass_display_tiers + 1)
        ]

    def progress_toward_next(self) -> Tuple[int, int]:
        step = self.config.stars_per_tier
        return self.stars_total % step, step

    def remaining_ms(self) -> int:
        return self.windows.remaining_ms(self.store.document, BATTLE_PASS_EVENT)
