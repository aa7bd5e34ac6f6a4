from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..art import DEFAULT_ART_SERVICE, ArtService
from ..battle_pass.engine import BattlePassEngine
from ..battle_pass.tokens import TokenSession
from ..catalog import CardCatalog, load_default_catalog
from ..collection.engine import CollectionEngine
from ..core.events import EventBus
from ..core.rng import RNG
from ..meta.access import FeatureAccess
from ..meta.event_window import ALBUM_EVENT, BATTLE_PASS_EVENT, EventWindows
from ..persistence.store import SaveStore
from ..wheel.engine import RewardWheel
from .gates import FEATURE_PRIORITY, Feature, FeatureGate, GateState, default_gates
from .levels import DEFAULT_PIECE_COUNT, LevelTable, compute_stars, load_default_levels

logger = logging.getLogger(__name__)


@dataclass
class LevelCompletion:
    level_index: int
    stars: int
    time_sec: float
    mistakes: int
    unlocked: List[Feature] = field(default_factory=list)
    dropped_card_id: Optional[str] = None


class ProgressionStateMachine:
    """
    Runs the level-completion cascade and owns the feature engines.

    Unlocks found on one completion queue their onboarding flows; the UI
    shows one per :meth:`next_onboarding` call, highest priority first.
    """

    def __init__(
        self,
        store: SaveStore,
        catalog: Optional[CardCatalog] = None,
        levels: Optional[LevelTable] = None,
        bus: Optional[EventBus] = None,
        rng: Optional[RNG] = None,
        art: Optional[ArtService] = None,
    ) -> None:
        self.store = store
        self.config = store.config
        self.catalog = catalog or load_default_catalog()
        self.levels = levels or load_default_levels()
        self.bus = bus or EventBus()
        self.windows = EventWindows(store.clock, self.config.event_duration_ms)
        self.collection = CollectionEngine(store, self.catalog, self.bus, self.windows, art or DEFAULT_ART_SERVICE)
        self.battle_pass = BattlePassEngine(self.collection)
        self.wheel = RewardWheel(self.collection, rng=rng)
        self.gates: Dict[Feature, FeatureGate] = default_gates()
        self._onboarding: List[Feature] = []
        self.tokens: Optional[TokenSession] = None

    @property
    def doc(self):
        return self.store.document

    @property
    def current_level(self) -> int:
        return self.doc.current_level

    def gate_state(self, feature: Feature) -> GateState:
        return self.gates[feature].state(self.doc)

    # Level screen

    def start_level(self, level_index: Optional[int] = None) -> Optional[TokenSession]:
        """Enter the level screen; a star-token session runs while the pass is live."""
        self.leave_level()
        if level_index is not None:
            if self.levels.get_level(level_index) is None:
                logger.debug("start_level(%s): no such level", level_index)
                return None
            self.doc.current_level = level_index
            self.store.persist()
        if self.battle_pass.is_unlocked():
            self.tokens = TokenSession(self.battle_pass)
        return self.tokens

    def leave_level(self) -> None:
        if self.tokens is not None:
            self.tokens.cancel()
            self.tokens = None

    def complete_level(
        self,
        level_index: Optional[int] = None,
        cheated: bool = False,
        time_sec: Optional[float] = None,
        mistakes: int = 0,
    ) -> LevelCompletion:
        index = self.current_level if level_index is None else level_index
        self.leave_level()

        level = self.levels.get_level(index)
        pieces = level.piece_count if level else DEFAULT_PIECE_COUNT
        if cheated:
            time_sec, mistakes = 0, 0
        stars = compute_stars(pieces, time_sec or 0, mistakes, cheated=cheated)
        result = LevelCompletion(level_index=index, stars=stars, time_sec=time_sec or 0, mistakes=mistakes)

        if self.collection.on_level_completed(index, {"cheated": cheated}).unlocked_now:
            result.unlocked.append(Feature.COLLECTION)

        # Battle pass and wheel key off the level match: every completion of the
        # unlock level sets the flag again and the battle pass gets a fresh window.
        # Onboarding is queued only on the Locked -> Unlocking transition.
        if index == self.config.battle_pass_unlock_level:
            if self.gates[Feature.BATTLE_PASS].begin(self.doc):
                result.unlocked.append(Feature.BATTLE_PASS)
            self.doc.battle_pass_unlocked = True
            self.windows.open(self.doc, BATTLE_PASS_EVENT)
            self.store.persist()

        if index == self.config.wheel_unlock_level:
            if self.gates[Feature.WHEEL].begin(self.doc):
                result.unlocked.append(Feature.WHEEL)
            self.doc.wheel_unlocked = True
            self.store.persist()

        for feature in result.unlocked:
            self._queue_onboarding(feature)

        if self.collection.is_available():
            result.dropped_card_id = self.collection.grant_level_drop(index)

        logger.info("Level %d complete: %d stars, unlocked=%s", index, stars, [f.value for f in result.unlocked])
        self.bus.emit("level:completed", {"level_index": index, "stars": stars})
        return result

    def advance_to_next_level(self) -> int:
        """Move to the next level; the last level repeats rather than wrapping."""
        last = max(0, self.levels.total_levels() - 1)
        self.doc.current_level = min(self.doc.current_level + 1, last)
        self.store.persist()
        return self.doc.current_level

    # Onboarding

    def _queue_onboarding(self, feature: Feature) -> None:
        if feature not in self._onboarding:
            self._onboarding.append(feature)
            self._onboarding.sort(key=FEATURE_PRIORITY.index)

    def pending_onboarding(self) -> List[Feature]:
        return list(self._onboarding)

    def next_onboarding(self) -> Optional[Feature]:
        """Pop the next flow to show; ``None`` once the queue is empty."""
        if not self._onboarding:
            return None
        feature = self._onboarding.pop(0)
        if feature is Feature.COLLECTION:
            self.begin_collection_onboarding()
        elif feature is Feature.BATTLE_PASS:
            self.gates[Feature.BATTLE_PASS].finish(self.doc)
        elif feature is Feature.WHEEL:
            self.finish_wheel_onboarding()
        return feature

    def begin_collection_onboarding(self) -> List[str]:
        return self.collection.grant_gift_cards()

    def complete_collection_tutorial(self) -> None:
        self.gates[Feature.COLLECTION].finish(self.doc)
        self.collection.mark_tutorial_completed()

    def finish_wheel_onboarding(self) -> None:
        self.gates[Feature.WHEEL].finish(self.doc)
        self.wheel.mark_tutorial_seen()

    # Access

    def feature_access(self, feature: Feature) -> FeatureAccess:
        if feature is Feature.COLLECTION:
            return self.collection.access()
        if feature is Feature.BATTLE_PASS:
            return self.battle_pass.access()
        return self.wheel.access()

    # Maintenance

    def reconcile_collection_state(self) -> bool:
        """Repair collection state that does not match ``currentLevel``; returns True if changed."""
        doc = self.doc
        threshold = self.config.collection_unlock_level
        cards = doc.cards
        if doc.current_level < threshold:
            if doc.collection_unlocked or doc.collection_tutorial_completed or cards.new_inbox or cards.collected:
                logger.warning("Level %d below collection unlock; re-locking", doc.current_level)
                self.gates[Feature.COLLECTION].relock(doc)
                self.collection.reset_collection_state()
                return True
            return False
        if doc.current_level > threshold and not doc.collection_tutorial_completed:
            logger.info("Level %d past collection unlock without tutorial; granting starter set", doc.current_level)
            doc.collection_unlocked = True
            self.windows.ensure(doc, ALBUM_EVENT, create_if_missing=True)
            self.collection.reset_collection_state()
            self.collection.grant_gift_cards()
            self.collection.mark_tutorial_completed()
            return True
        return False

    def reset_progress(self) -> None:
        """Back to a fresh save; music and sound toggles survive."""
        self.leave_level()
        self._onboarding.clear()
        self.gates = default_gates()
        self.wheel.dismiss()
        self.store.reset(keep_audio=True)

    def debug_open_all_albums(self) -> None:
        doc = self.doc
        doc.collection_unlocked = True
        doc.collection_tutorial_completed = True
        self.windows.open(doc, ALBUM_EVENT)
        doc.battle_pass_unlocked = True
        self.windows.open(doc, BATTLE_PASS_EVENT)
        doc.ensure_albums(self.catalog.album_ids())
        for card_id in self.catalog.all_card_ids():
            doc.cards.collected[card_id] = True
        doc.cards.new_inbox.clear()
        self.store.recompute_album_counts()
        self.store.persist()
        logger.warning("Debug: every album opened and filled")
