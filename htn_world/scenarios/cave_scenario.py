"""Cave guardians: agents guard their treasure against a scripted thief."""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional, Sequence

from .base_scenario import BaseScenario
from ..config import AgentConfig, CONFIG
from ..core import geometry as geo
from ..core.resources.registry import ResourceKind
from ..core.session import SessionFlow

logger = logging.getLogger(__name__)

ARENA_HALF_SIZE = 40.0
CAVE_POSITION: geo.Vec3 = (0.0, 0.0, 0.0)
HEAVY_OBJECT_COUNT = (10, 20)
FORAGE_POINT_COUNT = (5, 10)
HEAVY_OBJECT_HEIGHT = 1.25
FORAGE_POINT_HEIGHT = 0.35


class WaypointAction(Enum):
    NONE = "none"
    STEAL = "steal"
    CLOAK = "cloak"
    UNCLOAK = "uncloak"
    ESCAPE = "escape"


@dataclass(frozen=True)
class Waypoint:
    position: geo.Vec3
    action: WaypointAction = WaypointAction.NONE
    pause: float = 0.0


class ScriptedTarget:
    """Thief that walks a fixed route, steals, cloaks and tries to escape.

    Implements :class:`~htn_world.core.interfaces.TargetHandle`. Losing all
    lives ends the session as a loss for the thief; escaping with loot ends
    it as a win.
    """

    def __init__(
        self,
        session: SessionFlow,
        position: geo.Vec3,
        route: Sequence[Waypoint] = (),
        lives: int = 3,
        speed: float = 4.0,
    ) -> None:
        self.session = session
        self._position: geo.Vec3 = tuple(float(c) for c in position)
        self.route: List[Waypoint] = list(route)
        self.lives = lives
        self.speed = speed
        self.cloaked = False
        self.goal_objects_stolen = 0
        self._leg = 0
        self._pause = 0.0

    @property
    def position(self) -> geo.Vec3:
        return self._position

    @property
    def route_finished(self) -> bool:
        return self._leg >= len(self.route)

    def take_damage(self) -> None:
        if self.session.ended:
            return
        self.lives -= 1
        logger.info("Target took damage, %d lives left", self.lives)
        if self.lives <= 0:
            self.session.lose()

    def advance(self, dt: float) -> None:
        """Walk the route for ``dt`` seconds."""

        if self.session.ended or self.route_finished:
            return
        if self._pause > 0.0:
            self._pause = max(0.0, self._pause - dt)
            return

        waypoint = self.route[self._leg]
        self._position = geo.move_towards(self._position, waypoint.position, self.speed * dt)
        if geo.distance(self._position, waypoint.position) <= 1e-6:
            self._arrive(waypoint)

    def _arrive(self, waypoint: Waypoint) -> None:
        self._leg += 1
        self._pause = waypoint.pause
        action = waypoint.action
        if action is WaypointAction.STEAL:
            self.goal_objects_stolen += 1
            logger.info("Target stole a goal object (%d)", self.goal_objects_stolen)
        elif action is WaypointAction.CLOAK:
            self.cloaked = True
        elif action is WaypointAction.UNCLOAK:
            self.cloaked = False
        elif action is WaypointAction.ESCAPE and self.goal_objects_stolen > 0:
            self.session.win()


class TargetSystem:
    """Advance the world's scripted target before perception runs."""

    order = 5

    def __init__(self, world: Any) -> None:
        self.world = world

    def update(self, tick: int) -> None:
        target = getattr(self.world, "target", None)
        tm = getattr(self.world, "time_manager", None)
        if target is None or tm is None:
            return
        target.advance(tm.delta_time)


def default_route(rng: random.Random) -> List[Waypoint]:
    """Sneak in, steal from the cave, cloak on the way out, then escape."""

    spawn_angle = rng.uniform(0.0, 2.0 * math.pi)
    outside = (
        math.cos(spawn_angle) * ARENA_HALF_SIZE * 0.9,
        0.0,
        math.sin(spawn_angle) * ARENA_HALF_SIZE * 0.9,
    )
    halfway = geo.scale(outside, 0.5)
    return [
        Waypoint(CAVE_POSITION, WaypointAction.STEAL, pause=1.0),
        Waypoint(halfway, WaypointAction.CLOAK),
        Waypoint(geo.scale(outside, 0.75), WaypointAction.UNCLOAK, pause=4.0),
        Waypoint(outside, WaypointAction.ESCAPE),
    ]


class CaveScenario(BaseScenario):
    """Agents around a cave mouth, scattered heavy objects and forage points."""

    def __init__(
        self,
        agent_count: int = 2,
        rng: Optional[random.Random] = None,
        config: AgentConfig | None = None,
    ) -> None:
        self.agent_count = agent_count
        self.rng = rng if rng is not None else random.Random()
        self.config = config if config is not None else CONFIG.agent

    def get_name(self) -> str:
        return "Cave Guardians"

    def setup(self, world: Any) -> None:
        rng = self.rng
        registry = world.registry

        n_heavy = rng.randint(*HEAVY_OBJECT_COUNT)
        n_forage = rng.randint(*FORAGE_POINT_COUNT)
        registry.add_many(ResourceKind.HEAVY_OBJECT, [self._scatter(HEAVY_OBJECT_HEIGHT) for _ in range(n_heavy)])
        registry.add_many(ResourceKind.FORAGE_POINT, [self._scatter(FORAGE_POINT_HEIGHT) for _ in range(n_forage)])
        logger.info("[Scenario] %d heavy objects, %d forage points", n_heavy, n_forage)

        route = default_route(rng)
        world.target = ScriptedTarget(world.session, route[-1].position, route)

        for i in range(self.agent_count):
            angle = 2.0 * math.pi * i / max(1, self.agent_count)
            home = (math.cos(angle) * 3.0, 0.0, math.sin(angle) * 3.0)
            name = f"guardian_{i + 1}"
            # Face away from the cave mouth
            heading = geo.direction_to_heading(geo.sub(home, CAVE_POSITION))
            self.spawn_agent(world, name, home, self.config, rng, heading)
            logger.info("[Scenario] Spawned %s at %s", name, home)

    def _scatter(self, height: float) -> geo.Vec3:
        return (
            self.rng.uniform(-ARENA_HALF_SIZE, ARENA_HALF_SIZE),
            height,
            self.rng.uniform(-ARENA_HALF_SIZE, ARENA_HALF_SIZE),
        )


__all__ = [
    "CaveScenario",
    "ScriptedTarget",
    "TargetSystem",
    "Waypoint",
    "WaypointAction",
    "default_route",
]
