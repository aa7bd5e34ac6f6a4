from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .config import load_progression_config
from .catalog import load_default_catalog
from .core.clock import Clock, SystemClock
from .core.rng import RNG
from .persistence.storage import FileStorage, KeyValueStorage
from .persistence.store import SaveStore
from .progression import ProgressionStateMachine

logger = logging.getLogger(__name__)


def create_game(
    save_dir: Optional[Path] = None,
    config_path: Optional[Path] = None,
    storage: Optional[KeyValueStorage] = None,
    clock: Optional[Clock] = None,
    seed: Optional[int] = None,
) -> ProgressionStateMachine:
    """Wire config, storage and engines together, then repair the loaded save."""
    config = load_progression_config(config_path)
    catalog = load_default_catalog()
    if storage is None:
        storage = FileStorage(save_dir)
    store = SaveStore(storage, config=config, clock=clock or SystemClock(), album_cards=catalog.album_cards())
    game = ProgressionStateMachine(store, catalog=catalog, rng=RNG(seed))
    if game.reconcile_collection_state():
        logger.info("Collection state reconciled at startup")
    return game
