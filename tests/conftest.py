import sys
from pathlib import Path

import pytest

# Ensure 'src' is on sys.path for test imports without installing the package
ROOT = Path(__file__).resolve().parents[1]
src = ROOT / "src"
if str(src) not in sys.path:
    sys.path.insert(0, str(src))

from cardpuzzle.catalog import load_default_catalog  # noqa: E402
from cardpuzzle.config import ProgressionConfig  # noqa: E402
from cardpuzzle.core.clock import FixedClock  # noqa: E402
from cardpuzzle.core.rng import RNG  # noqa: E402
from cardpuzzle.persistence.storage import InMemoryStorage  # noqa: E402
from cardpuzzle.persistence.store import SaveStore  # noqa: E402
from cardpuzzle.progression import ProgressionStateMachine  # noqa: E402

START_MS = 1_700_000_000_000


@pytest.fixture
def clock():
    return FixedClock(START_MS)


@pytest.fixture
def config():
    return ProgressionConfig()


@pytest.fixture
def catalog():
    return load_default_catalog()


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def store(storage, config, clock, catalog):
    return SaveStore(storage, config=config, clock=clock, album_cards=catalog.album_cards())


@pytest.fixture
def game(store, catalog):
    return ProgressionStateMachine(store, catalog=catalog, rng=RNG(seed=7))


@pytest.fixture
def collection(game):
    return game.collection


@pytest.fixture
def available_collection(game):
    """Collection unlocked with its tutorial done and the album event running."""
    game.collection.on_level_completed(4)
    game.collection.mark_tutorial_completed()
    return game.collection
