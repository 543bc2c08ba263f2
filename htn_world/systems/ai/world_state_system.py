"""Fold sensor readings and inventory into an agent's live :class:`WorldState`."""

from __future__ import annotations

import logging
import math
from typing import AbstractSet, Optional

from ...ai.behaviors.base import ActionContext
from ...ai.planning.domain import FORAGE_SEQUENCE
from ...core import geometry as geo
from ...core.components.ai_state import AIState
from ...core.components.perception_cache import PerceptionCache
from ...core.resources.registry import ResourceKind

logger = logging.getLogger(__name__)


class WorldStateSystem:
    """Recompute the live world state of one agent from its sensors.

    Run once per agent per tick, immediately before the replan check.
    """

    def __init__(self, forage_sequence: AbstractSet[str] = FORAGE_SEQUENCE) -> None:
        self.forage_sequence = forage_sequence

    def sense(
        self,
        ctx: ActionContext,
        ai: AIState,
        perception: PerceptionCache,
        dt: float,
        active_task: Optional[str] = None,
    ) -> None:
        s = ctx.state
        cfg = ctx.config
        pos = ctx.locomotion.position

        # ------------------------------------------------------------------
        # Target and theft tracking
        # ------------------------------------------------------------------
        s.target_cloaked = perception.target_cloaked
        live_target = ctx.target.position if ctx.target is not None else None
        if live_target is None and perception.target_visible:
            live_target = perception.target_position
        s.distance_to_target = geo.distance(pos, live_target) if live_target is not None else math.inf

        count = perception.goal_objects_stolen_count
        if count > ai.thefts_seen:
            s.goal_object_stolen = True
            s.goal_object_investigated = False
            s.last_goal_theft_position = live_target if live_target is not None else pos
            ai.thefts_seen = count
            logger.info("[%s] Goal object stolen (%d total)", ai.name, count)
        elif count > 0:
            s.goal_object_stolen = True

        s.target_visible = perception.target_visible and not perception.target_cloaked
        s.target_in_strike_range = s.distance_to_target <= cfg.attack_range
        if s.target_visible:
            s.last_seen_target_position = perception.target_position
            s.time_since_target_seen = 0.0
        else:
            s.time_since_target_seen += dt
        s.is_alert = s.time_since_target_seen < cfg.alert_fov_relax_time

        # ------------------------------------------------------------------
        # Heavy objects
        # ------------------------------------------------------------------
        s.has_heavy_object_in_hand = ctx.inventory.held is not None
        nearest = ctx.registry.nearest(ResourceKind.HEAVY_OBJECT, pos)
        if nearest is not None:
            s.distance_to_nearest_heavy_object = geo.distance(pos, nearest.position)
            s.heavy_object_closer_than_target = (
                s.distance_to_nearest_heavy_object < s.distance_to_target
            )
        else:
            s.distance_to_nearest_heavy_object = math.inf
            s.heavy_object_closer_than_target = False

        # ------------------------------------------------------------------
        # Hunger
        # ------------------------------------------------------------------
        own = ctx.inventory.reserved_forage
        s.forage_available = ctx.registry.has_unreserved(ResourceKind.FORAGE_POINT) or (
            own is not None and ctx.registry.reserved_by(own) == ctx.agent
        )

        hunger = ctx.hunger
        if hunger is not None and not s.is_hungry and active_task not in self.forage_sequence:
            hunger.elapsed += dt
            if hunger.expired:
                if s.forage_available:
                    s.is_hungry = True
                    logger.debug("[%s] Became hungry", ai.name)
                else:
                    hunger.restart(ctx.rng, cfg.hunger_min, cfg.hunger_max)

        # ------------------------------------------------------------------
        # Hunt mode: after investigating a theft the agent only chases the thief
        # ------------------------------------------------------------------
        if s.goal_object_stolen and s.goal_object_investigated:
            s.is_hungry = False
            s.forage_available = False
            s.heavy_object_closer_than_target = False
            if not s.target_cloaked and ctx.target is not None:
                target_pos = ctx.target.position
                s.distance_to_target = geo.distance(pos, target_pos)
                s.target_in_strike_range = s.distance_to_target <= cfg.attack_range
                s.target_visible = True
                s.last_seen_target_position = target_pos
                s.time_since_target_seen = 0.0
            else:
                s.target_visible = False


__all__ = ["WorldStateSystem"]
