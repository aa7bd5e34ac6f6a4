from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, List, Optional

from ..catalog.schema import read_data_resource, validate_document

logger = logging.getLogger(__name__)

LEVELS_RESOURCE = "levels.json"
LEVELS_SCHEMA = "levels.schema.json"

DEFAULT_PIECE_COUNT = 10


@dataclass(frozen=True)
class Level:
    index: int
    piece_count: int
    columns: int
    rows: int
    image_seed: int


class LevelTable:
    """Read-only lookup over the static level list."""

    def __init__(self, levels: List[Level]) -> None:
        self._levels = list(levels)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], source: str = "<memory>") -> "LevelTable":
        validate_document(data, LEVELS_SCHEMA, source=source)
        levels = [
            Level(
                index=i,
                piece_count=int(raw["pieceCount"]),
                columns=int(raw["cols"]),
                rows=int(raw["rows"]),
                image_seed=int(raw["imageSeed"]),
            )
            for i, raw in enumerate(data["levels"])
        ]
        logger.debug("Level table %s: %d levels", source, len(levels))
        return cls(levels)

    def get_level(self, index: int) -> Optional[Level]:
        if 0 <= index < len(self._levels):
            return self._levels[index]
        return None

    def total_levels(self) -> int:
        return len(self._levels)


@lru_cache(maxsize=1)
def load_default_levels() -> LevelTable:
    return LevelTable.from_dict(read_data_resource(LEVELS_RESOURCE), source=LEVELS_RESOURCE)


def compute_stars(piece_count: int, time_sec: float, mistakes: int, cheated: bool = False) -> int:
    """
    Rate a finished puzzle from 1 to 3 stars.

    3 stars: no mistakes and at most 5 seconds per piece.
    2 stars: at most 2 mistakes and at most 10 seconds per piece.
    A skipped (cheated) level always rates 3.
    """
    if cheated:
        return 3
    if mistakes == 0 and time_sec <= piece_count * 5:
        return 3
    if mistakes <= 2 and time_sec <= piece_count * 10:
        return 2
    return 1
