"""Component holding the facts an agent currently believes about itself and its target."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace

from ..geometry import Vec3, ZERO


@dataclass(slots=True)
class WorldState:
    """Per-agent snapshot of believed facts driving planning decisions.

    One instance per agent is the *live* state, rewritten every tick by the
    world state system. The planner only ever mutates a :meth:`clone`.
    """

    target_visible: bool = False
    target_in_strike_range: bool = False
    target_cloaked: bool = False
    goal_object_stolen: bool = False
    goal_object_investigated: bool = False
    has_heavy_object_in_hand: bool = False
    heavy_object_closer_than_target: bool = False
    is_hungry: bool = False
    forage_available: bool = False
    # True while the target was seen within the alert window; widens the view cone.
    is_alert: bool = False

    distance_to_target: float = math.inf
    distance_to_nearest_heavy_object: float = math.inf
    time_since_target_seen: float = math.inf

    last_seen_target_position: Vec3 = ZERO
    last_goal_theft_position: Vec3 = ZERO
    home_position: Vec3 = ZERO

    def clone(self) -> "WorldState":
        """Return an independent copy for simulating task effects."""

        # All fields are immutable values, a shallow copy is a full copy.
        return replace(self)


__all__ = ["WorldState"]
