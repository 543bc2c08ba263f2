# tests/conftest.py
import random
from typing import List, Tuple

import pytest

from htn_world.ai.behaviors.base import ActionContext
from htn_world.config import AgentConfig
from htn_world.core.components.hunger import HungerClock
from htn_world.core.components.inventory import Inventory
from htn_world.core.components.world_state import WorldState
from htn_world.core.events import ListEventSink
from htn_world.core.resources.registry import ResourceRegistry
from htn_world.systems.movement.locomotion import KinematicLocomotion


class FakeTarget:
    """Target handle recording the hits it takes."""

    def __init__(self, position=(0.0, 0.0, 10.0)) -> None:
        self.position = position
        self.hits = 0
        self.cloaked = False
        self.goal_objects_stolen = 0

    def take_damage(self) -> None:
        self.hits += 1


class FakeLauncher:
    def __init__(self) -> None:
        self.launched: List[Tuple] = []

    def launch(self, handle, origin, velocity) -> None:
        self.launched.append((handle, origin, velocity))


@pytest.fixture
def make_ctx():
    """Factory building an :class:`ActionContext` around a kinematic mover."""

    def _make(
        position=(0.0, 0.0, 0.0),
        heading=0.0,
        state=None,
        registry=None,
        config=None,
        target=None,
        projectiles=None,
        seed=1,
        agent="guardian",
    ) -> ActionContext:
        cfg = config if config is not None else AgentConfig()
        return ActionContext(
            agent=agent,
            state=state if state is not None else WorldState(),
            locomotion=KinematicLocomotion(
                position,
                heading,
                stopping_distance=cfg.stopping_distance,
                arrival_tolerance=cfg.arrival_tolerance,
            ),
            registry=registry if registry is not None else ResourceRegistry(),
            inventory=Inventory(),
            config=cfg,
            rng=random.Random(seed),
            hunger=HungerClock(period=20.0),
            target=target,
            projectiles=projectiles,
            events=ListEventSink(),
        )

    return _make


@pytest.fixture
def fake_target():
    return FakeTarget()


@pytest.fixture
def fake_launcher():
    return FakeLauncher()
