"""Protocols for the external collaborators the agent drives or reads from."""

from __future__ import annotations

from typing import Protocol

from .geometry import Vec3
from .resources.registry import ResourceHandle


class Locomotion(Protocol):
    """Path following and steering for one agent.

    The agent only asks to move or face somewhere and polls the outcome.
    """

    @property
    def position(self) -> Vec3:
        ...

    @property
    def heading(self) -> float:
        ...

    def request_move(self, point: Vec3, speed: float) -> None:
        ...

    def stop(self) -> None:
        ...

    def remaining_distance(self) -> float:
        ...

    def has_arrived(self) -> bool:
        ...

    def current_velocity(self) -> Vec3:
        ...

    def request_face_direction(self, direction: Vec3) -> None:
        ...


class TargetHandle(Protocol):
    """The hostile target as seen by combat code."""

    @property
    def position(self) -> Vec3:
        ...

    def take_damage(self) -> None:
        ...


class ProjectileLauncher(Protocol):
    """Physics collaborator that takes ownership of thrown objects."""

    def launch(self, handle: ResourceHandle, origin: Vec3, velocity: Vec3) -> None:
        ...


__all__ = ["Locomotion", "TargetHandle", "ProjectileLauncher"]
