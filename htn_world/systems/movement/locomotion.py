# htn_world/systems/movement/locomotion.py
"""Straight-line kinematic mover standing in for navigation-mesh steering."""

from __future__ import annotations

from typing import Any
import logging

from ...core import geometry as geo
from ...core.geometry import Vec3

logger = logging.getLogger(__name__)


class KinematicLocomotion:
    """Move directly towards the requested point at the requested speed.

    Implements the :class:`~htn_world.core.interfaces.Locomotion` protocol.
    Positions advance only in :meth:`step`, which the locomotion system calls
    once per tick after the agents have issued their requests.
    """

    def __init__(
        self,
        position: Vec3 = geo.ZERO,
        heading: float = 0.0,
        stopping_distance: float = 0.5,
        arrival_tolerance: float = 0.1,
    ) -> None:
        self._position: Vec3 = tuple(float(c) for c in position)
        self._heading = heading % 360.0
        self.stopping_distance = stopping_distance
        self.arrival_tolerance = arrival_tolerance
        self.destination: Vec3 | None = None
        self.speed = 0.0
        self._velocity: Vec3 = geo.ZERO

    # ------------------------------------------------------------------
    # Locomotion protocol
    # ------------------------------------------------------------------
    @property
    def position(self) -> Vec3:
        return self._position

    @property
    def heading(self) -> float:
        return self._heading

    @property
    def forward(self) -> Vec3:
        return geo.heading_to_direction(self._heading)

    def request_move(self, point: Vec3, speed: float) -> None:
        self.destination = tuple(float(c) for c in point)
        self.speed = speed

    def stop(self) -> None:
        self.destination = None
        self._velocity = geo.ZERO

    def remaining_distance(self) -> float:
        if self.destination is None:
            return 0.0
        return geo.distance(geo.flatten(self._position), geo.flatten(self.destination))

    def has_arrived(self) -> bool:
        return self.remaining_distance() <= self.stopping_distance + self.arrival_tolerance

    def current_velocity(self) -> Vec3:
        return self._velocity

    def request_face_direction(self, direction: Vec3) -> None:
        flat = geo.flatten(direction)
        if geo.sqr_length(flat) > 1e-4:
            self._heading = geo.direction_to_heading(flat)

    # ------------------------------------------------------------------
    # Simulation
    # ------------------------------------------------------------------
    def teleport(self, position: Vec3) -> None:
        self._position = tuple(float(c) for c in position)

    def step(self, dt: float) -> None:
        """Advance towards the destination, stopping within stopping distance."""

        if self.destination is None or self.has_arrived():
            self._velocity = geo.ZERO
            return

        goal = (self.destination[0], self._position[1], self.destination[2])
        travel = min(self.speed * dt, max(0.0, self.remaining_distance() - self.stopping_distance))
        new_pos = geo.move_towards(self._position, goal, travel)
        delta = geo.sub(new_pos, self._position)
        self._velocity = geo.scale(delta, 1.0 / dt) if dt > 0 else geo.ZERO
        self.request_face_direction(delta)
        self._position = new_pos


class LocomotionSystem:
    """Advance every registered :class:`KinematicLocomotion` by one tick."""

    order = 30

    def __init__(self, world: Any) -> None:
        self.world = world

    def update(self, tick: int) -> None:
        em = getattr(self.world, "entity_manager", None)
        cm = getattr(self.world, "component_manager", None)
        tm = getattr(self.world, "time_manager", None)
        if em is None or cm is None:
            return
        dt = tm.delta_time if tm is not None else 0.0

        for entity_id in list(em.all_entities.keys()):
            loco = cm.get_component(entity_id, KinematicLocomotion)
            if loco is None:
                continue
            loco.step(dt)


__all__ = ["KinematicLocomotion", "LocomotionSystem"]
