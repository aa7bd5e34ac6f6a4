from __future__ import annotations

import copy
import logging
from typing import Any, Dict, Optional

from ..config import ProgressionConfig
from ..core.clock import Clock, SystemClock
from ..errors import SaveDecodeError
from .codec import AlbumCards, decode_document, encode_document, recompute_album_counts
from .models import SaveDocument, coerce_bool, coerce_int
from .storage import InMemoryStorage, KeyValueStorage

logger = logging.getLogger(__name__)

SAVE_KEY = "puzzleGame_save_v2"
LEGACY_KEYS = {
    "current_level": "puzzle_currentLevel",
    "coins": "puzzle_coins",
    "music_on": "puzzle_musicOn",
    "sfx_on": "puzzle_sfxOn",
}


class SaveStore:
    """Owns the single save document and its persistence.

    Engines receive the store and mutate ``store.document`` in place, then
    call :meth:`persist`. A failed write is logged and swallowed: the
    in-memory document stays authoritative for the rest of the session.
    """

    def __init__(
        self,
        storage: Optional[KeyValueStorage] = None,
        config: Optional[ProgressionConfig] = None,
        clock: Optional[Clock] = None,
        album_cards: Optional[AlbumCards] = None,
    ) -> None:
        self.storage = storage if storage is not None else InMemoryStorage()
        self.config = config or ProgressionConfig()
        self.clock = clock or SystemClock()
        self.album_cards = album_cards
        self._document = self.load()

    @property
    def document(self) -> SaveDocument:
        return self._document

    def _defaults(self) -> SaveDocument:
        album_ids = self.album_cards.keys() if self.album_cards is not None else ()
        return SaveDocument.default(album_ids=album_ids, coins=self.config.default_coins)

    def load(self) -> SaveDocument:
        """Read and migrate the stored document, falling back to defaults."""
        raw = self.storage.get(SAVE_KEY)
        if raw:
            try:
                doc = decode_document(raw, self.config, self.clock.now_ms(), self.album_cards)
                logger.debug("Loaded save document (level=%d coins=%d)", doc.current_level, doc.coins)
                return doc
            except SaveDecodeError as exc:
                logger.warning("Save document unreadable (%s); starting from defaults", exc)
                return self._defaults()
        return self._load_legacy()

    def _load_legacy(self) -> SaveDocument:
        doc = self._defaults()
        found = False
        level = self.storage.get(LEGACY_KEYS["current_level"])
        if level is not None:
            doc.current_level = coerce_int(level, doc.current_level)
            found = True
        coins = self.storage.get(LEGACY_KEYS["coins"])
        if coins is not None:
            doc.coins = coerce_int(coins, doc.coins)
            found = True
        music = self.storage.get(LEGACY_KEYS["music_on"])
        if music is not None:
            doc.music_on = coerce_bool(music, doc.music_on)
            found = True
        sfx = self.storage.get(LEGACY_KEYS["sfx_on"])
        if sfx is not None:
            doc.sfx_on = coerce_bool(sfx, doc.sfx_on)
            found = True
        if found:
            logger.info("Upgraded legacy per-key save (level=%d coins=%d)", doc.current_level, doc.coins)
        return doc

    def persist(self) -> bool:
        """Write the document; returns False (and logs) when storage fails."""
        try:
            self.storage.set(SAVE_KEY, encode_document(self._document))
            return True
        except OSError:
            logger.exception("Failed to persist save document; keeping in-memory state")
            return False

    def recompute_album_counts(self) -> None:
        if self.album_cards is not None:
            recompute_album_counts(self._document, self.album_cards)

    def reset(self, keep_audio: bool = True) -> SaveDocument:
        """Replace the document with defaults, optionally keeping audio toggles."""
        old = self._document
        fresh = self._defaults()
        if keep_audio:
            fresh.music_on = old.music_on
            fresh.sfx_on = old.sfx_on
        self._document = fresh
        self.persist()
        logger.info("Progress reset to defaults")
        return fresh

    def snapshot(self) -> Dict[str, Any]:
        """Read-only JSON-shaped copy of the document for the UI layer."""
        return copy.deepcopy(self._document.to_dict())
