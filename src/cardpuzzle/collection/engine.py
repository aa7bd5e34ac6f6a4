"""Card collection: grants, inbox, duplicates and completion rewards.

All "next card" decisions walk the catalog in order, so results are a pure
function of the save document.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from ..art import DEFAULT_ART_SERVICE, ArtService
from ..catalog import AlbumReward, CardCatalog, load_default_catalog
from ..core.events import EventBus
from ..meta.access import EVENT_ENDED, FeatureAccess, unlock_advisory
from ..meta.event_window import ALBUM_EVENT, EventWindows
from ..persistence.codec import recompute_album_counts
from ..persistence.models import SaveDocument
from ..persistence.store import SaveStore

logger = logging.getLogger(__name__)

GOLD_CUP_REWARD = "goldCup"


@dataclass(frozen=True)
class UnlockResult:
    unlocked_now: bool = False


@dataclass(frozen=True)
class BattlePassAward:
    """Either a card went to the inbox or ``coins`` were credited instead."""

    card_id: Optional[str] = None
    coins: int = 0

    @property
    def is_card(self) -> bool:
        return self.card_id is not None


@dataclass(frozen=True)
class CollectResult:
    album_complete: bool = False
    album_id: Optional[str] = None
    reward: Optional[AlbumReward] = None
    all_cards_complete: bool = False


@dataclass(frozen=True)
class Progress:
    collected: int
    total: int


class CollectionEngine:
    """Operates on the collection part of the save document owned by ``store``."""

    def __init__(
        self,
        store: SaveStore,
        catalog: Optional[CardCatalog] = None,
        bus: Optional[EventBus] = None,
        windows: Optional[EventWindows] = None,
        art: Optional[ArtService] = None,
    ) -> None:
        self.store = store
        self.catalog = catalog or load_default_catalog()
        self.bus = bus or EventBus()
        self.windows = windows or EventWindows(store.clock, store.config.event_duration_ms)
        self.art = art or DEFAULT_ART_SERVICE
        if store.album_cards is None:
            store.album_cards = self.catalog.album_cards()

    @property
    def doc(self) -> SaveDocument:
        return self.store.document

    @property
    def config(self):
        return self.store.config

    # Feature flags

    def is_unlock_triggered(self) -> bool:
        return self.doc.collection_unlocked

    def is_available(self) -> bool:
        """Drops and the album screen need the tutorial to be finished."""
        return self.doc.collection_tutorial_completed

    def mark_tutorial_completed(self) -> None:
        self.doc.collection_tutorial_completed = True
        self.store.persist()

    def has_uncollected_new(self) -> bool:
        return bool(self.doc.cards.new_inbox)

    def access(self) -> FeatureAccess:
        if not self.is_available():
            return FeatureAccess.denied(unlock_advisory(self.config.collection_unlock_level, after=True))
        if not self.windows.is_active(self.doc, ALBUM_EVENT):
            return FeatureAccess.denied(EVENT_ENDED)
        return FeatureAccess.ok()

    # Grants

    def _next_ungranted(self) -> Optional[str]:
        cards = self.doc.cards
        for card_id in self.catalog.all_card_ids():
            if not cards.is_collected(card_id) and not cards.is_pending(card_id):
                return card_id
        return None

    def _push_inbox(self, card_id: str, source: str) -> None:
        self.doc.cards.new_inbox.append(card_id)
        logger.debug("Card %s added to inbox (%s)", card_id, source)

    def grant_gift_cards(self) -> List[str]:
        """Ensure the starter cards are pending; returns the ids actually added."""
        self.doc.ensure_albums(self.catalog.album_ids())
        cards = self.doc.cards
        added = []
        for card_id in self.catalog.gift_card_ids:
            if cards.is_collected(card_id) or cards.is_pending(card_id):
                continue
            self._push_inbox(card_id, "gift")
            added.append(card_id)
        self.store.persist()
        if added:
            self.bus.emit("cards:granted", {"card_ids": list(added), "source": "gift"})
        return added

    def grant_level_drop(self, level_index: int) -> Optional[str]:
        if not self.is_available():
            return None
        self.doc.ensure_albums(self.catalog.album_ids())
        card_id = self._next_ungranted()
        if card_id is not None:
            self._push_inbox(card_id, "level drop")
        else:
            order = self.catalog.all_card_ids()
            card_id = order[level_index % len(order)]
            count = self.doc.cards.add_duplicate(card_id)
            logger.debug("Level drop duplicate %s (x%d)", card_id, count)
        self.store.persist()
        self.bus.emit("cards:granted", {"card_ids": [card_id], "source": "level"})
        return card_id

    def on_level_completed(self, level_index: int, opts: Optional[Mapping[str, Any]] = None) -> UnlockResult:
        """Unlock the album feature exactly once, at the unlock level."""
        threshold = self.config.collection_unlock_level
        if level_index < threshold:
            return UnlockResult()
        if level_index == threshold and not self.doc.collection_unlocked:
            self.doc.collection_unlocked = True
            self.windows.open(self.doc, ALBUM_EVENT)
            self.store.persist()
            logger.info("Collection unlocked at level index %d", level_index)
            self.bus.emit("collection:unlocked", {"level_index": level_index})
            return UnlockResult(unlocked_now=True)
        return UnlockResult()

    def award_card_from_battle_pass(self) -> BattlePassAward:
        self.doc.ensure_albums(self.catalog.album_ids())
        card_id = self._next_ungranted()
        if card_id is not None:
            self._push_inbox(card_id, "battle pass")
            self.store.persist()
            self.bus.emit("cards:granted", {"card_ids": [card_id], "source": "battle_pass"})
            return BattlePassAward(card_id=card_id)
        amount = self.config.battle_pass_fallback_coins
        self.doc.add_coins(amount)
        self.store.persist()
        logger.info("Battle pass reward fell back to %d coins", amount)
        return BattlePassAward(coins=amount)

    def get_wheel_segment_pool(self) -> List[str]:
        """Fixed-size pool: ungranted cards, then owned cards, then the catalog, each cyclic."""
        cards = self.doc.cards
        order = self.catalog.all_card_ids()
        ungranted = [cid for cid in order if not cards.is_collected(cid) and not cards.is_pending(cid)]
        owned = [cid for cid in order if cards.is_collected(cid)]
        pool = []
        for i in range(self.config.wheel_segments):
            if i < len(ungranted):
                pool.append(ungranted[i])
            elif owned:
                pool.append(owned[(i - len(ungranted)) % len(owned)])
            else:
                pool.append(order[i % len(order)])
        return pool

    def award_card_from_wheel(self, card_id: str) -> str:
        """Push ``card_id`` to the inbox even when it is already collected."""
        self.doc.ensure_albums(self.catalog.album_ids())
        if self.doc.cards.is_collected(card_id):
            self.doc.cards.add_duplicate(card_id)
        self._push_inbox(card_id, "wheel")
        self.store.persist()
        self.bus.emit("cards:granted", {"card_ids": [card_id], "source": "wheel"})
        return card_id

    # Collecting

    def collect_card(self, card_id: str) -> Optional[CollectResult]:
        """
        Move ``card_id`` from the inbox to the collected set.

        Returns a CollectResult only when an album or the whole catalog was
        completed by this call; None otherwise (including when the card was
        not pending).
        """
        cards = self.doc.cards
        if not cards.is_pending(card_id):
            logger.debug("collect_card(%s): not in inbox", card_id)
            return None
        cards.new_inbox.remove(card_id)
        if cards.is_collected(card_id):
            self.store.persist()
            return None

        cards.collected[card_id] = True
        recompute_album_counts(self.doc, self.catalog.album_cards())
        self.bus.emit("card:collected", {"card_id": card_id})

        album_complete = False
        album_id = None
        reward = None
        if self.catalog.has_card(card_id):
            album = self.catalog.album(self.catalog.card(card_id).album_id)
            if self.doc.albums[album.id].collected_count >= album.size:
                album_complete = True
                album_id = album.id
                reward = album.reward
                rewards = self.doc.rewards
                rewards.trophies += 1
                rewards.unlock(album.id)
                self.doc.add_coins(self.config.album_complete_coins)
                logger.info("Album %s complete (trophies=%d)", album.id, rewards.trophies)
                self.bus.emit("album:completed", {"album_id": album.id, "reward": reward})

        all_complete = False
        total = self.catalog.total_cards()
        if total > 0 and self.get_collected_total() == total and not self.doc.all_cards_reward_claimed:
            all_complete = True
            self.doc.all_cards_reward_claimed = True
            self.doc.rewards.trophies_gold_cup = True
            self.doc.rewards.unlock(GOLD_CUP_REWARD)
            self.doc.add_coins(self.config.all_cards_complete_coins)
            logger.info("Every card collected; gold cup awarded")
            self.bus.emit("collection:all_complete", {})

        self.store.persist()
        if not (album_complete or all_complete):
            return None
        return CollectResult(album_complete=album_complete, album_id=album_id, reward=reward,
                             all_cards_complete=all_complete)

    # Aggregates

    def _pending_uncollected(self) -> List[str]:
        cards = self.doc.cards
        seen = []
        for cid in cards.new_inbox:
            if not cards.is_collected(cid) and cid not in seen:
                seen.append(cid)
        return seen

    def get_collected_total(self, include_inbox: bool = False) -> int:
        known = [cid for cid in self.catalog.all_card_ids() if self.doc.cards.is_collected(cid)]
        n = len(known)
        if include_inbox:
            n += len(self._pending_uncollected())
        return n

    def get_album_progress(self, album_id: str, include_inbox: bool = False) -> Progress:
        album = self.catalog.album(album_id)
        collected = sum(1 for cid in album.card_ids if self.doc.cards.is_collected(cid))
        if include_inbox:
            collected += sum(1 for cid in self._pending_uncollected() if cid in album.card_ids)
        return Progress(collected=collected, total=album.size)

    def global_progress(self) -> Progress:
        """Header counter: pending cards count as owned."""
        return Progress(collected=self.get_collected_total(include_inbox=True), total=self.catalog.total_cards())

    def get_cards_for_album(self, album_id: str) -> List[Dict[str, Any]]:
        cards = self.doc.cards
        rows = []
        for card in self.catalog.cards_in_album(album_id):
            rows.append(
                {
                    "id": card.id,
                    "name": card.name,
                    "rarity_stars": card.rarity_stars,
                    "art_seed": card.art_seed,
                    "image_src": card.image_src or "",
                    "art_ref": self.art.art_reference(card.art_seed, "card"),
                    "collected": cards.is_collected(card.id),
                    "is_new": cards.is_pending(card.id),
                    "duplicates": cards.duplicates.get(card.id, 0),
                }
            )
        return rows

    def reset_collection_state(self) -> None:
        self.doc.cards.clear()
        self.doc.ensure_albums(self.catalog.album_ids())
        for tally in self.doc.albums.values():
            tally.collected_count = 0
        self.store.persist()
        logger.info("Collection state reset")

    # New-pack animation bookkeeping

    def inbox_signature(self) -> str:
        return ",".join(sorted(self.doc.cards.new_inbox))

    def should_animate_new_pack(self) -> bool:
        if not self.is_available() or not self.doc.cards.new_inbox:
            return False
        return self.inbox_signature() != self.doc.last_animated_inbox_signature

    def mark_pack_animated(self) -> None:
        self.doc.last_animated_inbox_signature = self.inbox_signature()
        self.store.persist()


__all__ = [
    "BattlePassAward",
    "CollectResult",
    "CollectionEngine",
    "GOLD_CUP_REWARD",
    "Progress",
    "UnlockResult",
]
