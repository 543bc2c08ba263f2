"""Hunger clock component."""

from __future__ import annotations

import random
from dataclasses import dataclass


@dataclass
class HungerClock:
    """Counts up to a randomly chosen period after which the agent gets hungry."""

    period: float
    elapsed: float = 0.0

    def restart(self, rng: random.Random, low: float, high: float) -> None:
        """Zero the clock and draw a new period in ``[low, high]``."""

        self.elapsed = 0.0
        self.period = rng.uniform(low, high)

    @property
    def expired(self) -> bool:
        return self.elapsed >= self.period


__all__ = ["HungerClock"]
