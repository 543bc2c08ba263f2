"""Small 3D vector helpers shared by sensing, locomotion and actions.

Points and directions are plain ``(x, y, z)`` tuples with ``y`` up. Headings
are yaw angles in degrees measured clockwise from ``+z``.
"""

from __future__ import annotations

import math
import random
from typing import Tuple

Vec3 = Tuple[float, float, float]

ZERO: Vec3 = (0.0, 0.0, 0.0)
UP: Vec3 = (0.0, 1.0, 0.0)
FORWARD: Vec3 = (0.0, 0.0, 1.0)


def add(a: Vec3, b: Vec3) -> Vec3:
    return (a[0] + b[0], a[1] + b[1], a[2] + b[2])


def sub(a: Vec3, b: Vec3) -> Vec3:
    return (a[0] - b[0], a[1] - b[1], a[2] - b[2])


def scale(a: Vec3, k: float) -> Vec3:
    return (a[0] * k, a[1] * k, a[2] * k)


def dot(a: Vec3, b: Vec3) -> float:
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def length(a: Vec3) -> float:
    return math.sqrt(dot(a, a))


def sqr_length(a: Vec3) -> float:
    return dot(a, a)


def distance(a: Vec3, b: Vec3) -> float:
    """Return the Euclidean distance between ``a`` and ``b``."""

    return length(sub(a, b))


def normalize(a: Vec3) -> Vec3:
    """Return ``a`` scaled to unit length, or :data:`ZERO` for a zero vector."""

    n = length(a)
    if n == 0.0:
        return ZERO
    return (a[0] / n, a[1] / n, a[2] / n)


def flatten(a: Vec3) -> Vec3:
    """Drop the vertical component of ``a``."""

    return (a[0], 0.0, a[2])


def move_towards(current: Vec3, target: Vec3, max_delta: float) -> Vec3:
    """Step from ``current`` towards ``target`` by at most ``max_delta``."""

    delta = sub(target, current)
    dist = length(delta)
    if dist <= max_delta or dist == 0.0:
        return target
    return add(current, scale(delta, max_delta / dist))


# ----------------------------------------------------------------------
# Headings
# ----------------------------------------------------------------------
def heading_to_direction(heading: float) -> Vec3:
    """Unit horizontal direction for a yaw ``heading`` in degrees."""

    rad = math.radians(heading)
    return (math.sin(rad), 0.0, math.cos(rad))


def direction_to_heading(direction: Vec3) -> float:
    """Yaw heading in ``[0, 360)`` for a horizontal ``direction``."""

    return math.degrees(math.atan2(direction[0], direction[2])) % 360.0


def angle_between_headings(a: float, b: float) -> float:
    """Smallest absolute difference between two headings, in degrees."""

    diff = (b - a) % 360.0
    return min(diff, 360.0 - diff)


def rotate_heading_towards(current: float, target: float, max_step: float) -> float:
    """Turn ``current`` towards ``target`` by at most ``max_step`` degrees."""

    diff = (target - current + 180.0) % 360.0 - 180.0
    if abs(diff) <= max_step:
        return target % 360.0
    return (current + math.copysign(max_step, diff)) % 360.0


def angle_between(a: Vec3, b: Vec3) -> float:
    """Unsigned angle in degrees between two vectors."""

    na = length(a)
    nb = length(b)
    if na == 0.0 or nb == 0.0:
        return 0.0
    cos = max(-1.0, min(1.0, dot(a, b) / (na * nb)))
    return math.degrees(math.acos(cos))


def random_point_in_disc(rng: random.Random, center: Vec3, radius: float) -> Vec3:
    """Uniform random point on the horizontal disc around ``center``."""

    r = radius * math.sqrt(rng.random())
    theta = rng.uniform(0.0, 2.0 * math.pi)
    return (center[0] + r * math.cos(theta), center[1], center[2] + r * math.sin(theta))


__all__ = [
    "Vec3",
    "ZERO",
    "UP",
    "FORWARD",
    "add",
    "sub",
    "scale",
    "dot",
    "length",
    "sqr_length",
    "distance",
    "normalize",
    "flatten",
    "move_towards",
    "heading_to_direction",
    "direction_to_heading",
    "angle_between_headings",
    "rotate_heading_towards",
    "angle_between",
    "random_point_in_disc",
]
