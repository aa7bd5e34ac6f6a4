from .engine import RewardWheel, SpinTicket, WheelState

__all__ = ["RewardWheel", "SpinTicket", "WheelState"]
