from .engine import BattlePassEngine, StarResult, Tier
from .tokens import StarToken, TokenSession

__all__ = ["BattlePassEngine", "StarResult", "StarToken", "Tier", "TokenSession"]
