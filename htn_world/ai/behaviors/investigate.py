"""Going to look at the spot a goal object was stolen from."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from .base import ActionContext, MoveToPoint
from ..planning.tasks import TaskKind
from ...core import geometry as geo
from ...core.events import TheftSpotInvestigatedEvent

logger = logging.getLogger(__name__)


class InvestigatePhase(Enum):
    LOCATE = "Locating Theft Spot"
    GO = "Going to Location"
    DONE = "Investigated"


class GoToTheftSpotAction(MoveToPoint):
    """Run to a random point near the theft and mark it investigated."""

    kind = TaskKind.GO_TO_THEFT_SPOT
    STEPS = (InvestigatePhase.LOCATE, InvestigatePhase.GO)
    DONE = InvestigatePhase.DONE
    speed_attr = "attack_speed"

    def choose_destination(self, ctx: ActionContext) -> Optional[geo.Vec3]:
        point = geo.random_point_in_disc(
            ctx.rng, ctx.state.last_goal_theft_position, ctx.config.theft_search_radius
        )
        logger.debug("[%s] Going to theft area at %s", ctx.agent, point)
        return point

    def on_arrival(self, ctx: ActionContext) -> None:
        ctx.state.goal_object_investigated = True
        ctx.events.emit(TheftSpotInvestigatedEvent(ctx.agent, ctx.tick, ctx.locomotion.position))
        logger.info("[%s] Investigated theft spot", ctx.agent)


__all__ = ["GoToTheftSpotAction", "InvestigatePhase"]
