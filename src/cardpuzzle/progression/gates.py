"""Per-feature unlock gates.

Each gate reads its state from the save document: the unlock flag moves it
out of Locked, and a finished onboarding moves it to Unlocked. Features
whose onboarding is not persisted keep that bit on the gate itself.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from ..persistence.models import SaveDocument

logger = logging.getLogger(__name__)


class Feature(str, Enum):
    COLLECTION = "collection"
    BATTLE_PASS = "battle_pass"
    WHEEL = "wheel"


# Onboarding priority when several unlock on the same completion.
FEATURE_PRIORITY = (Feature.COLLECTION, Feature.BATTLE_PASS, Feature.WHEEL)


class GateState(str, Enum):
    LOCKED = "locked"
    UNLOCKING = "unlocking"
    UNLOCKED = "unlocked"


class FeatureGate:
    def __init__(self, feature: Feature, flag_attr: str, onboarded_attr: Optional[str] = None) -> None:
        self.feature = feature
        self.flag_attr = flag_attr
        self.onboarded_attr = onboarded_attr
        self._onboarding_open = False

    def state(self, doc: SaveDocument) -> GateState:
        if not getattr(doc, self.flag_attr):
            return GateState.LOCKED
        if self.onboarded_attr is not None:
            done = getattr(doc, self.onboarded_attr)
        else:
            done = not self._onboarding_open
        return GateState.UNLOCKED if done else GateState.UNLOCKING

    def begin(self, doc: SaveDocument) -> bool:
        """Locked -> Unlocking. Returns False (no change) from any other state."""
        if self.state(doc) is not GateState.LOCKED:
            return False
        setattr(doc, self.flag_attr, True)
        if self.onboarded_attr is None:
            self._onboarding_open = True
        logger.info("Feature %s unlocking", self.feature.value)
        return True

    def finish(self, doc: SaveDocument) -> bool:
        """Unlocking -> Unlocked."""
        if self.state(doc) is not GateState.UNLOCKING:
            return False
        if self.onboarded_attr is not None:
            setattr(doc, self.onboarded_attr, True)
        self._onboarding_open = False
        logger.info("Feature %s unlocked", self.feature.value)
        return True

    def relock(self, doc: SaveDocument) -> None:
        setattr(doc, self.flag_attr, False)
        if self.onboarded_attr is not None:
            setattr(doc, self.onboarded_attr, False)
        self._onboarding_open = False


def default_gates():
    return {
        Feature.COLLECTION: FeatureGate(Feature.COLLECTION, "collection_unlocked", "collection_tutorial_completed"),
        Feature.BATTLE_PASS: FeatureGate(Feature.BATTLE_PASS, "battle_pass_unlocked"),
        Feature.WHEEL: FeatureGate(Feature.WHEEL, "wheel_unlocked", "wheel_tutorial_seen"),
    }
