from __future__ import annotations

import time
from dataclasses import dataclass


class Clock:
    """Source of the current wall-clock time in epoch milliseconds."""

    def now_ms(self) -> int:  # pragma: no cover - interface
        raise NotImplementedError


class SystemClock(Clock):
    def now_ms(self) -> int:
        return int(time.time() * 1000)


@dataclass
class FixedClock(Clock):
    """Manually driven clock for tests and deterministic replays."""

    current_ms: int = 0

    def now_ms(self) -> int:
        return self.current_ms

    def set(self, value_ms: int) -> None:
        self.current_ms = int(value_ms)

    def advance(self, delta_ms: int) -> int:
        self.current_ms += int(delta_ms)
        return self.current_ms
