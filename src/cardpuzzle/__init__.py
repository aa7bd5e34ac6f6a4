"""
Card Puzzle progression core.

Headless game-state logic for a casual jigsaw puzzle game:
- Save document persistence with forward migration
- Card catalog, album collection and completion rewards
- Time-boxed album and battle-pass events
- Battle-pass stars and the cooldown-gated reward wheel
- Level-completion unlock cascade with onboarding queue

UI layers should import and compose these services.
"""
from importlib.metadata import PackageNotFoundError, version

from .app import create_game
from .errors import (
    CardPuzzleError,
    CatalogError,
    ConfigError,
    SaveDecodeError,
    UnknownAlbumError,
    UnknownCardError,
)

try:
    __version__ = version("cardpuzzle")
except PackageNotFoundError:  # pragma: no cover - running from a source tree
    __version__ = "0.0.0"

__all__ = [
    "CardPuzzleError",
    "CatalogError",
    "ConfigError",
    "SaveDecodeError",
    "UnknownAlbumError",
    "UnknownCardError",
    "create_game",
    "__version__",
]
