"""Small runtime helpers shared by every engine: clock, RNG and event bus."""
from .clock import Clock, FixedClock, SystemClock
from .events import EventBus
from .rng import RNG

__all__ = ["Clock", "FixedClock", "SystemClock", "EventBus", "RNG"]
