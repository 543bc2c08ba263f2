"""Component tying an agent entity to its planning brain."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Any


@dataclass
class AIState:
    """Per-agent identity and controller.

    ``executor`` is the agent's :class:`~htn_world.systems.ai.plan_execution_system.PlanExecutor`.
    ``thefts_seen`` remembers the last goal-object theft count so the sensor
    can detect a rising edge.
    """

    name: str
    executor: Any
    rng: random.Random = field(default_factory=random.Random)
    thefts_seen: int = 0


__all__ = ["AIState"]
