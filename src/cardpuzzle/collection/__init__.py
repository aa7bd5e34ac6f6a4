from .engine import BattlePassAward, CollectionEngine, CollectResult, GOLD_CUP_REWARD, Progress, UnlockResult

__all__ = [
    "BattlePassAward",
    "CollectResult",
    "CollectionEngine",
    "GOLD_CUP_REWARD",
    "Progress",
    "UnlockResult",
]
