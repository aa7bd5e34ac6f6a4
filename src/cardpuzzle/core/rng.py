from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional


@dataclass
class RNG:
    """
    Deterministic-friendly RNG wrapper around random.Random.

    Allows injecting a fixed seed for reproducible tests and wheel spins.
    Exposes a minimal API so engines never touch Python's global RNG.
    """

    seed: Optional[int] = None

    def __post_init__(self) -> None:
        self._rng = random.Random(self.seed)

    def randrange(self, stop: int) -> int:
        """Return a uniformly chosen integer N such that 0 <= N < stop."""
        if stop <= 0:
            raise ValueError("randrange() stop must be positive")
        return self._rng.randrange(stop)

