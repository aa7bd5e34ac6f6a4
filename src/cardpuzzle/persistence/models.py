from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

DEFAULT_COINS = 50


def coerce_int(value: Any, default: int, minimum: Optional[int] = 0) -> int:
    """Best-effort integer coercion used when reading untrusted save data."""
    if isinstance(value, bool):
        return default
    try:
        result = int(value)
    except (TypeError, ValueError, OverflowError):
        return default
    if minimum is not None and result < minimum:
        return minimum
    return result


def coerce_bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
    return default


@dataclass
class EventWindow:
    """A ``[start_at, end_at)`` interval in epoch milliseconds."""

    start_at: int
    end_at: int

    def is_well_formed(self) -> bool:
        return isinstance(self.start_at, int) and isinstance(self.end_at, int)

    def to_dict(self) -> Dict[str, Any]:
        return {"startAt": self.start_at, "endAt": self.end_at}

    @staticmethod
    def from_dict(data: Any) -> Optional["EventWindow"]:
        if not isinstance(data, dict):
            return None
        start, end = data.get("startAt"), data.get("endAt")
        if isinstance(start, bool) or isinstance(end, bool):
            return None
        if not isinstance(start, (int, float)) or not isinstance(end, (int, float)):
            return None
        if not (math.isfinite(start) and math.isfinite(end)):
            return None
        return EventWindow(start_at=int(start), end_at=int(end))


@dataclass
class AlbumTally:
    """Per-album cache of collected cards; source of truth is ``CardsState.collected``."""

    collected_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"collectedCount": self.collected_count}

    @staticmethod
    def from_dict(data: Any) -> "AlbumTally":
        if not isinstance(data, dict):
            return AlbumTally()
        return AlbumTally(collected_count=coerce_int(data.get("collectedCount"), 0))


@dataclass
class CardsState:
    collected: Dict[str, bool] = field(default_factory=dict)
    new_inbox: List[str] = field(default_factory=list)
    duplicates: Dict[str, int] = field(default_factory=dict)

    def is_collected(self, card_id: str) -> bool:
        return self.collected.get(card_id) is True

    def is_pending(self, card_id: str) -> bool:
        return card_id in self.new_inbox

    def add_duplicate(self, card_id: str) -> int:
        self.duplicates[card_id] = self.duplicates.get(card_id, 0) + 1
        return self.duplicates[card_id]

    def clear(self) -> None:
        self.collected.clear()
        self.new_inbox.clear()
        self.duplicates.clear()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "collected": dict(self.collected),
            "newInbox": list(self.new_inbox),
            "duplicates": dict(self.duplicates),
        }

    @staticmethod
    def from_dict(data: Any) -> "CardsState":
        if not isinstance(data, dict):
            return CardsState()
        raw_collected = data.get("collected")
        raw_inbox = data.get("newInbox")
        raw_dupes = data.get("duplicates")
        collected: Dict[str, bool] = {}
        if isinstance(raw_collected, dict):
            collected = {str(k): True for k, v in raw_collected.items() if v is True}
        inbox: List[str] = []
        if isinstance(raw_inbox, list):
            inbox = [str(cid) for cid in raw_inbox if isinstance(cid, str)]
        dupes: Dict[str, int] = {}
        if isinstance(raw_dupes, dict):
            dupes = {str(k): coerce_int(v, 0) for k, v in raw_dupes.items()}
        return CardsState(collected=collected, new_inbox=inbox, duplicates=dupes)


@dataclass
class RewardsState:
    trophies: int = 0
    unlocked_rewards: List[str] = field(default_factory=list)
    trophies_gold_cup: bool = False

    def unlock(self, reward_id: str) -> bool:
        """Record ``reward_id`` once; returns False when it was already present."""
        if reward_id in self.unlocked_rewards:
            return False
        self.unlocked_rewards.append(reward_id)
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "trophies": self.trophies,
            "unlockedRewards": list(self.unlocked_rewards),
            "trophiesGoldCup": self.trophies_gold_cup,
        }

    @staticmethod
    def from_dict(data: Any) -> "RewardsState":
        if not isinstance(data, dict):
            return RewardsState()
        unlocked: List[str] = []
        raw = data.get("unlockedRewards")
        if isinstance(raw, list):
            for rid in raw:
                if isinstance(rid, str) and rid not in unlocked:
                    unlocked.append(rid)
        return RewardsState(
            trophies=coerce_int(data.get("trophies"), 0),
            unlocked_rewards=unlocked,
            trophies_gold_cup=coerce_bool(data.get("trophiesGoldCup"), False),
        )


@dataclass
class SaveDocument:
    """The single persisted state document.

    Attribute names are snake_case; ``to_dict`` emits the camelCase JSON
    layout used on disk.
    """

    current_level: int = 0
    coins: int = DEFAULT_COINS
    collection_unlocked: bool = False
    collection_tutorial_completed: bool = False
    last_animated_inbox_signature: str = ""
    albums: Dict[str, AlbumTally] = field(default_factory=dict)
    cards: CardsState = field(default_factory=CardsState)
    rewards: RewardsState = field(default_factory=RewardsState)
    all_cards_reward_claimed: bool = False
    battle_pass_unlocked: bool = False
    bp_stars_total: int = 0
    wheel_unlocked: bool = False
    wheel_next_free_at: int = 0
    wheel_tutorial_seen: bool = False
    album_event: Optional[EventWindow] = None
    battle_pass_event: Optional[EventWindow] = None
    music_on: bool = True
    sfx_on: bool = True

    @classmethod
    def default(cls, album_ids: Iterable[str] = (), coins: int = DEFAULT_COINS) -> "SaveDocument":
        doc = cls(coins=coins)
        for album_id in album_ids:
            doc.albums[album_id] = AlbumTally()
        return doc

    def ensure_albums(self, album_ids: Iterable[str]) -> None:
        for album_id in album_ids:
            if album_id not in self.albums:
                self.albums[album_id] = AlbumTally()

    def add_coins(self, amount: int) -> int:
        self.coins = max(0, self.coins + amount)
        return self.coins

    def to_dict(self) -> Dict[str, Any]:
        return {
            "currentLevel": self.current_level,
            "coins": self.coins,
            "collectionUnlocked": self.collection_unlocked,
            "collectionTutorialCompleted": self.collection_tutorial_completed,
            "lastAnimatedInboxSignature": self.last_animated_inbox_signature,
            "albums": {aid: tally.to_dict() for aid, tally in self.albums.items()},
            "cards": self.cards.to_dict(),
            "rewards": self.rewards.to_dict(),
            "allCardsRewardClaimed": self.all_cards_reward_claimed,
            "battlePassUnlocked": self.battle_pass_unlocked,
            "bpStarsTotal": self.bp_stars_total,
            "wheelUnlocked": self.wheel_unlocked,
            "wheelNextFreeAt": self.wheel_next_free_at,
            "wheelTutorialSeen": self.wheel_tutorial_seen,
            "albumEvent": self.album_event.to_dict() if self.album_event else None,
            "battlePassEvent": self.battle_pass_event.to_dict() if self.battle_pass_event else None,
            "musicOn": "true" if self.music_on else "false",
            "sfxOn": "true" if self.sfx_on else "false",
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "SaveDocument":
        """Build a document field by field; anything malformed keeps its default."""
        d = SaveDocument()
        albums: Dict[str, AlbumTally] = {}
        raw_albums = data.get("albums")
        if isinstance(raw_albums, dict):
            albums = {str(aid): AlbumTally.from_dict(v) for aid, v in raw_albums.items()}
        return SaveDocument(
            current_level=coerce_int(data.get("currentLevel"), d.current_level),
            coins=coerce_int(data.get("coins"), d.coins),
            collection_unlocked=coerce_bool(data.get("collectionUnlocked"), d.collection_unlocked),
            collection_tutorial_completed=coerce_bool(
                data.get("collectionTutorialCompleted"), d.collection_tutorial_completed
            ),
            last_animated_inbox_signature=str(data.get("lastAnimatedInboxSignature") or ""),
            albums=albums,
            cards=CardsState.from_dict(data.get("cards")),
            rewards=RewardsState.from_dict(data.get("rewards")),
            all_cards_reward_claimed=coerce_bool(data.get("allCardsRewardClaimed"), d.all_cards_reward_claimed),
            battle_pass_unlocked=coerce_bool(data.get("battlePassUnlocked"), d.battle_pass_unlocked),
            bp_stars_total=coerce_int(data.get("bpStarsTotal"), d.bp_stars_total),
            wheel_unlocked=coerce_bool(data.get("wheelUnlocked"), d.wheel_unlocked),
            wheel_next_free_at=coerce_int(data.get("wheelNextFreeAt"), d.wheel_next_free_at),
            wheel_tutorial_seen=coerce_bool(data.get("wheelTutorialSeen"), d.wheel_tutorial_seen),
            album_event=EventWindow.from_dict(data.get("albumEvent")),
            battle_pass_event=EventWindow.from_dict(data.get("battlePassEvent")),
            music_on=coerce_bool(data.get("musicOn"), d.music_on),
            sfx_on=coerce_bool(data.get("sfxOn"), d.sfx_on),
        )
