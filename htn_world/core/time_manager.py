"""Tick timing helpers."""

from __future__ import annotations

import time


class TimeManager:
    """Fixed-step simulation clock.

    Every tick advances simulated time by ``delta_time`` regardless of wall
    time. :meth:`sleep_until_next_tick` additionally paces the loop to real
    time; :meth:`advance` runs as fast as possible.
    """

    def __init__(self, tick_rate: float = 30.0) -> None:
        if tick_rate <= 0:
            raise ValueError("tick_rate must be positive")
        self.tick_rate: float = tick_rate
        self.tick_counter: int = 0
        self._last_tick: float = time.perf_counter()

    @property
    def delta_time(self) -> float:
        """Simulated seconds per tick."""

        return 1.0 / self.tick_rate

    @property
    def elapsed(self) -> float:
        return self.tick_counter * self.delta_time

    # ------------------------------------------------------------------
    # Timing
    # ------------------------------------------------------------------
    def advance(self) -> None:
        """Move to the next tick without waiting."""

        self.tick_counter += 1

    def sleep_until_next_tick(self) -> None:
        """Block until the next tick should occur."""

        target = self._last_tick + self.delta_time
        now = time.perf_counter()
        remaining = target - now
        if remaining > 0:
            time.sleep(remaining)
            self._last_tick = target
        else:
            # Behind schedule; start from current time
            self._last_tick = now
        self.tick_counter += 1


__all__ = ["TimeManager"]
