"""Ballistic flight for thrown heavy objects."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List
import logging

from ...core import geometry as geo
from ...core.resources.registry import ResourceHandle

logger = logging.getLogger(__name__)

GRAVITY = 9.81
# Projectiles still airborne after this many seconds are discarded.
MAX_LIFETIME = 10.0


@dataclass(slots=True)
class Projectile:
    handle: ResourceHandle
    position: geo.Vec3
    velocity: geo.Vec3
    age: float = 0.0


class ProjectileSystem:
    """Integrate launched objects under gravity and resolve target hits.

    Implements the :class:`~htn_world.core.interfaces.ProjectileLauncher`
    protocol. A projectile hits the world's target when it passes within
    ``hit_radius`` of the target's centre, and is spent on hitting the target
    or the ground.
    """

    order = 40

    def __init__(self, world: Any, hit_radius: float = 1.0, target_height: float = 0.5) -> None:
        self.world = world
        self.hit_radius = hit_radius
        self.target_height = target_height
        self.in_flight: List[Projectile] = []
        self.hits = 0

    def launch(self, handle: ResourceHandle, origin: geo.Vec3, velocity: geo.Vec3) -> None:
        self.in_flight.append(Projectile(handle, origin, velocity))
        logger.debug("Launched object %s with velocity %s", handle.id, velocity)

    def update(self, tick: int) -> None:
        tm = getattr(self.world, "time_manager", None)
        dt = tm.delta_time if tm is not None else 0.0
        target = getattr(self.world, "target", None)

        remaining: List[Projectile] = []
        for proj in self.in_flight:
            proj.velocity = (proj.velocity[0], proj.velocity[1] - GRAVITY * dt, proj.velocity[2])
            proj.position = geo.add(proj.position, geo.scale(proj.velocity, dt))
            proj.age += dt

            if target is not None:
                centre = geo.add(target.position, geo.scale(geo.UP, self.target_height))
                if geo.distance(proj.position, centre) <= self.hit_radius:
                    self.hits += 1
                    logger.info("Projectile %s hit the target", proj.handle.id)
                    target.take_damage()
                    continue
            if proj.position[1] <= 0.0 or proj.age >= MAX_LIFETIME:
                logger.debug("Projectile %s landed at %s", proj.handle.id, proj.position)
                continue
            remaining.append(proj)
        self.in_flight = remaining


__all__ = ["GRAVITY", "MAX_LIFETIME", "Projectile", "ProjectileSystem"]
