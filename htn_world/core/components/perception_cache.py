"""Component caching an agent's sensor readings for the current tick."""

from __future__ import annotations

from dataclasses import dataclass

from ..geometry import Vec3, ZERO


@dataclass(slots=True)
class PerceptionCache:
    """Latest facts delivered by the external perception and inventory trackers.

    ``target_position`` is only meaningful while ``target_visible`` is true.
    ``goal_objects_stolen_count`` is monotonic; a rising edge marks a theft.
    """

    target_visible: bool = False
    target_position: Vec3 = ZERO
    target_cloaked: bool = False
    goal_objects_stolen_count: int = 0
    last_tick: int = 0
