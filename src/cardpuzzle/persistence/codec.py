from __future__ import annotations

import json
import logging
from typing import Any, Dict, Mapping, Optional, Sequence

from ..config import ProgressionConfig
from ..errors import SaveDecodeError
from .models import EventWindow, SaveDocument, coerce_int

logger = logging.getLogger(__name__)

AlbumCards = Mapping[str, Sequence[str]]


def encode_document(doc: SaveDocument) -> str:
    """Encode a SaveDocument to a compact JSON string."""
    return json.dumps(doc.to_dict(), ensure_ascii=False, separators=(",", ":"))


def decode_document(
    text: str,
    config: ProgressionConfig,
    now_ms: int,
    album_cards: Optional[AlbumCards] = None,
) -> SaveDocument:
    """Decode JSON text into a SaveDocument, forward-migrating older layouts."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise SaveDecodeError(f"Invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise SaveDecodeError(f"Save root must be an object, got {type(data).__name__}")
    return migrate_data(data, config, now_ms, album_cards)


def migrate_data(
    data: Dict[str, Any],
    config: ProgressionConfig,
    now_ms: int,
    album_cards: Optional[AlbumCards] = None,
) -> SaveDocument:
    """Merge a raw document onto defaults and derive fields older saves lack.

    The layout carries no version number; each step keys off whether the
    field is present in ``data``.
    """
    doc = SaveDocument.from_dict(data)

    if "collectionTutorialCompleted" not in data and (
        data.get("collectionTutorialSeen") is True or data.get("collectionUnlockFlowSeen") is True
    ):
        logger.info("Migrating legacy collection tutorial flag")
        doc.collection_tutorial_completed = True

    if not isinstance(data.get("bpStarsTotal"), int) or isinstance(data.get("bpStarsTotal"), bool):
        doc.bp_stars_total = coerce_int(data.get("starTokens"), 0)

    if "battlePassUnlocked" not in data:
        doc.battle_pass_unlocked = doc.current_level >= config.battle_pass_min_level
    if doc.current_level < config.battle_pass_min_level and doc.battle_pass_unlocked:
        logger.warning("Battle pass flagged unlocked at level %d; re-locking", doc.current_level)
        doc.battle_pass_unlocked = False

    if "wheelUnlocked" not in data:
        doc.wheel_unlocked = doc.current_level >= config.wheel_min_level

    if doc.collection_unlocked and doc.album_event is None:
        doc.album_event = EventWindow(start_at=now_ms, end_at=now_ms + config.event_duration_ms)
    if doc.battle_pass_unlocked and doc.battle_pass_event is None:
        doc.battle_pass_event = EventWindow(start_at=now_ms, end_at=now_ms + config.event_duration_ms)

    if album_cards is not None:
        recompute_album_counts(doc, album_cards)
    return doc


def recompute_album_counts(doc: SaveDocument, album_cards: AlbumCards) -> None:
    """Rebuild every album cache from ``cards.collected``."""
    doc.ensure_albums(album_cards.keys())
    for album_id, card_ids in album_cards.items():
        count = sum(1 for cid in card_ids if doc.cards.is_collected(cid))
        tally = doc.albums[album_id]
        if tally.collected_count != count:
            logger.info("Album %s cache %d != %d collected; fixing", album_id, tally.collected_count, count)
            tally.collected_count = count
