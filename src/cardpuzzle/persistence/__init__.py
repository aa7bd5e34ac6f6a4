"""Persistence subsystem for the card puzzle save document.

This package provides:
- Data models for the single save document and its nested sections
- Encoding/decoding to the JSON layout with forward migration of old saves
- Key/value storage backends (atomic files, in-memory)
- A SaveStore that owns the document and swallows write failures
"""

from .models import (
    AlbumTally,
    CardsState,
    EventWindow,
    RewardsState,
    SaveDocument,
)
from .codec import decode_document, encode_document, migrate_data
from .storage import FileStorage, InMemoryStorage, KeyValueStorage, default_save_root
from .store import LEGACY_KEYS, SAVE_KEY, SaveStore

__all__ = [
    "AlbumTally",
    "CardsState",
    "EventWindow",
    "RewardsState",
    "SaveDocument",
    "decode_document",
    "encode_document",
    "migrate_data",
    "FileStorage",
    "InMemoryStorage",
    "KeyValueStorage",
    "default_save_root",
    "LEGACY_KEYS",
    "SAVE_KEY",
    "SaveStore",
]
