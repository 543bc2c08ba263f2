"""System filling agents' perception caches from the world's target."""

from __future__ import annotations

from typing import Any
import logging

from ...config import AgentConfig, CONFIG
from ...core import geometry as geo
from ...core.components.perception_cache import PerceptionCache
from ...core.components.world_state import WorldState
from ..movement.locomotion import KinematicLocomotion

logger = logging.getLogger(__name__)


def in_view_cone(
    observer: geo.Vec3,
    heading: float,
    point: geo.Vec3,
    cfg: AgentConfig,
    recently_seen: bool = False,
) -> bool:
    """Return ``True`` if ``point`` is inside the observer's view.

    Anything within strike reach is always seen. A recent sighting relaxes
    the view-angle test so the agent does not lose a target that steps
    just behind it.
    """

    to_point = geo.sub(point, observer)
    dist = geo.length(to_point)
    if dist > cfg.view_range:
        return False
    if dist <= cfg.attack_range + 0.5:
        return True
    if recently_seen:
        return True
    forward = geo.heading_to_direction(heading)
    return geo.angle_between(forward, geo.flatten(to_point)) <= cfg.view_angle / 2.0


class PerceptionSystem:
    """Populate :class:`PerceptionCache` components each tick.

    The world's ``target`` must expose ``position``, ``cloaked`` and
    ``goal_objects_stolen``. Cloaking hides the target completely.
    """

    order = 10

    def __init__(self, world: Any, config: AgentConfig | None = None) -> None:
        self.world = world
        self.config = config if config is not None else CONFIG.agent

    # ------------------------------------------------------------------
    # Main update
    # ------------------------------------------------------------------
    def update(self, tick: int) -> None:
        """Refresh perception caches for all entities."""

        em = getattr(self.world, "entity_manager", None)
        cm = getattr(self.world, "component_manager", None)
        target = getattr(self.world, "target", None)
        if em is None or cm is None:
            return

        for entity_id in list(em.all_entities.keys()):
            cache = cm.get_component(entity_id, PerceptionCache)
            if cache is None:
                continue
            loco = cm.get_component(entity_id, KinematicLocomotion)
            if loco is None:
                continue

            cache.last_tick = tick
            if target is None:
                cache.target_visible = False
                continue

            state = cm.get_component(entity_id, WorldState)
            recently_seen = (
                state is not None
                and state.time_since_target_seen < self.config.alert_fov_relax_time
            )

            cache.target_cloaked = bool(target.cloaked)
            cache.goal_objects_stolen_count = int(target.goal_objects_stolen)
            cache.target_visible = not cache.target_cloaked and in_view_cone(
                loco.position, loco.heading, target.position, self.config, recently_seen
            )
            if cache.target_visible:
                cache.target_position = target.position


__all__ = ["PerceptionSystem", "in_view_cone"]
