from __future__ import annotations

import random
from abc import ABC, abstractmethod
from typing import Any

from ..ai.planning.domain import build_planner
from ..config import AgentConfig
from ..core.components.ai_state import AIState
from ..core.components.hunger import HungerClock
from ..core.components.inventory import Inventory
from ..core.components.perception_cache import PerceptionCache
from ..core.components.world_state import WorldState
from ..core.geometry import Vec3
from ..systems.ai.plan_execution_system import PlanExecutor
from ..systems.movement.locomotion import KinematicLocomotion


class BaseScenario(ABC):
    """Abstract base class for simulation scenarios."""

    @abstractmethod
    def setup(self, world: Any) -> None:
        """Populate the world with scenario entities and state."""

    @abstractmethod
    def get_name(self) -> str:
        """Return a human readable name for the scenario."""

    @staticmethod
    def spawn_agent(
        world: Any,
        name: str,
        home: Vec3,
        config: AgentConfig,
        rng: random.Random,
        heading: float = 0.0,
    ) -> int:
        """Create a fully equipped HTN agent at ``home``.

        The agent gets its own random stream derived from ``rng`` so runs
        stay reproducible when ``rng`` is seeded.
        """

        agent_rng = random.Random(rng.getrandbits(64))
        executor = PlanExecutor(name, build_planner(agent_rng), events=world.events)
        hunger = HungerClock(period=agent_rng.uniform(config.hunger_min, config.hunger_max))
        return world.spawn(
            name,
            AIState(name=name, executor=executor, rng=agent_rng),
            WorldState(home_position=home),
            PerceptionCache(),
            Inventory(),
            hunger,
            KinematicLocomotion(
                home,
                heading,
                stopping_distance=config.stopping_distance,
                arrival_tolerance=config.arrival_tolerance,
            ),
        )


__all__ = ["BaseScenario"]
