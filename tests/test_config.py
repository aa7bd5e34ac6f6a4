from pathlib import Path

import pytest

from cardpuzzle.config import ProgressionConfig, load_progression_config
from cardpuzzle.errors import ConfigError


def test_embedded_config_matches_model_defaults():
    assert load_progression_config() == ProgressionConfig()


def test_defaults():
    cfg = ProgressionConfig()
    assert cfg.collection_unlock_level == 4
    assert cfg.battle_pass_min_level == 6
    assert cfg.wheel_min_level == 8
    assert cfg.event_duration_ms == 10 * 24 * 60 * 60 * 1000
    assert cfg.wheel_cooldown_ms == 6 * 60 * 60 * 1000


def test_override_file(tmp_path: Path):
    path = tmp_path / "progression.yaml"
    path.write_text("album_complete_coins: 40\nwheel_segments: 8\n", encoding="utf-8")
    cfg = load_progression_config(path)
    assert cfg.album_complete_coins == 40
    assert cfg.wheel_segments == 8
    assert cfg.default_coins == 50


def test_unlock_order_enforced(tmp_path: Path):
    path = tmp_path / "bad.yaml"
    path.write_text("battle_pass_unlock_level: 2\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_progression_config(path)


def test_invalid_yaml(tmp_path: Path):
    path = tmp_path / "broken.yaml"
    path.write_text("wheel_segments: [1,\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_progression_config(path)


def test_missing_file(tmp_path: Path):
    with pytest.raises(ConfigError):
        load_progression_config(tmp_path / "absent.yaml")
