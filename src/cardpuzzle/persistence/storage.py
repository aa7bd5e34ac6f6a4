from __future__ import annotations

import logging
import os
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

from platformdirs import PlatformDirs

logger = logging.getLogger(__name__)

APP_NAME = "CardPuzzle"
ENV_SAVE_DIR = "CARDPUZZLE_SAVE_DIR"

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


def default_save_root() -> Path:
    """Platform data directory for saves, overridable via CARDPUZZLE_SAVE_DIR."""
    override = os.getenv(ENV_SAVE_DIR)
    if override:
        return Path(override).expanduser().resolve()
    dirs = PlatformDirs(appname=APP_NAME, appauthor=False)
    return Path(dirs.user_data_dir) / "saves"


class KeyValueStorage(ABC):
    """String key/value storage, shaped like a browser's local storage."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored text, or None if the key is absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store text under key. Raises OSError on failure."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete key if present."""


class InMemoryStorage(KeyValueStorage):
    """Test/deterministic storage that holds data in memory only."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class FileStorage(KeyValueStorage):
    """Filesystem-backed storage: one ``<key>.json`` file per key.

    Writes are atomic (temp file, fsync, replace) so a crash leaves either the
    old or the new value on disk, never a partial one.
    """

    def __init__(self, root: Optional[Path] = None) -> None:
        self.root = Path(root) if root is not None else default_save_root()
        self.root.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.root / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("Failed to read %s: %s", path, exc)
            return None

    def set(self, key: str, value: str) -> None:
        path = self.path_for(key)
        tmp_path = path.with_suffix(".json.tmp")
        logger.debug("Writing %s via %s", path, tmp_path)
        with open(tmp_path, "w", encoding="utf-8") as f:
            f.write(value)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)

    def remove(self, key: str) -> None:
        path = self.path_for(key)
        try:
            path.unlink(missing_ok=True)
        except OSError:
            logger.warning("Failed to remove %s", path, exc_info=True)
