from __future__ import annotations

import logging
from importlib.resources import files as resource_files
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator

from .errors import ConfigError

logger = logging.getLogger(__name__)

DAY_MS = 24 * 60 * 60 * 1000
HOUR_MS = 60 * 60 * 1000


class ProgressionConfig(BaseModel):
    """Tunables for unlock thresholds, event windows and reward amounts.

    Defaults mirror the embedded ``data/progression.yaml`` resource so the
    model is usable without touching the filesystem (e.g. in tests).
    """

    collection_unlock_level: int = Field(4, ge=0)
    battle_pass_unlock_level: int = Field(5, ge=0)
    wheel_unlock_level: int = Field(7, ge=0)

    event_duration_ms: int = Field(10 * DAY_MS, gt=0)

    default_coins: int = Field(50, ge=0)
    album_complete_coins: int = Field(20, ge=0)
    all_cards_complete_coins: int = Field(50, ge=0)
    battle_pass_fallback_coins: int = Field(10, ge=0)
    expired_tier_coins: int = Field(10, ge=0)

    stars_per_tier: int = Field(10, gt=0)
    battle_pass_display_tiers: int = Field(5, gt=0)
    token_interval_ms: int = Field(3000, gt=0)
    token_lifetime_ms: int = Field(5000, gt=0)

    wheel_segments: int = Field(6, gt=0)
    wheel_cooldown_ms: int = Field(6 * HOUR_MS, ge=0)
    wheel_spin_duration_ms: int = Field(3000, ge=0)
    wheel_settle_ms: int = Field(200, ge=0)

    @model_validator(mode="after")
    def check_unlock_order(self) -> "ProgressionConfig":
        if not (self.collection_unlock_level < self.battle_pass_unlock_level < self.wheel_unlock_level):
            raise ValueError("unlock levels must be strictly increasing: collection < battle pass < wheel")
        return self

    @property
    def battle_pass_min_level(self) -> int:
        """Lowest ``currentLevel`` at which a save may keep the battle pass unlocked."""
        return self.battle_pass_unlock_level + 1

    @property
    def wheel_min_level(self) -> int:
        return self.wheel_unlock_level + 1


def load_progression_config(path: Optional[str | Path] = None) -> ProgressionConfig:
    """Load progression tunables from YAML.

    If path is None, loads the embedded default resource at
    cardpuzzle/data/progression.yaml.
    """
    if path is None:
        text = resource_files("cardpuzzle.data").joinpath("progression.yaml").read_text(encoding="utf-8")
        logger.debug("Loaded embedded progression config resource")
    else:
        try:
            text = Path(path).read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Cannot read progression config {path}: {exc}") from exc
        logger.debug("Loaded progression config from path: %s", path)

    try:
        raw = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in progression config: {exc}") from exc
    try:
        cfg = ProgressionConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(f"Invalid progression config: {exc}") from exc
    logger.info(
        "Progression unlocks: collection=%d battle_pass=%d wheel=%d",
        cfg.collection_unlock_level,
        cfg.battle_pass_unlock_level,
        cfg.wheel_unlock_level,
    )
    return cfg
