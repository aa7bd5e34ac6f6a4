from .gates import Feature, FeatureGate, GateState
from .levels import Level, LevelTable, compute_stars, load_default_levels
from .state_machine import LevelCompletion, ProgressionStateMachine

__all__ = [
    "Feature",
    "FeatureGate",
    "GateState",
    "Level",
    "LevelCompletion",
    "LevelTable",
    "ProgressionStateMachine",
    "compute_stars",
    "load_default_levels",
]
