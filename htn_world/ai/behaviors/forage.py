"""Forage sequence: walk to a forage point, eat it, walk home.

The point is reserved from the moment it is chosen until it is eaten.
Cancelling any of the three actions releases (never consumes) a still
reserved point so another agent can claim it.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from .base import ActionContext, MoveToPoint, TaskAction
from ..planning.tasks import TaskKind
from ...core.events import ForageConsumedEvent
from ...core.geometry import Vec3
from ...core.resources.registry import ResourceKind

logger = logging.getLogger(__name__)


class GoToForagePhase(Enum):
    FIND = "Finding Forage Point"
    WALK = "Walking to Forage Point"
    DONE = "Arrived"


class ForagePhase(Enum):
    START = "Starting to Eat"
    EAT = "Eating"
    DONE = "Finished Eating"


class ReturnHomePhase(Enum):
    FIND = "Finding Home"
    WALK = "Walking Home"
    DONE = "Arrived Home"


def release_forage(ctx: ActionContext) -> None:
    """Drop the agent's forage reservation, if any, leaving the point listed."""

    handle = ctx.inventory.reserved_forage
    if handle is None:
        return
    ctx.registry.release(handle, ctx.agent)
    ctx.inventory.reserved_forage = None
    logger.debug("[%s] Released forage point %s", ctx.agent, handle.id)


class GoToForageAction(MoveToPoint):
    kind = TaskKind.GO_TO_FORAGE
    STEPS = (GoToForagePhase.FIND, GoToForagePhase.WALK)
    DONE = GoToForagePhase.DONE

    def choose_destination(self, ctx: ActionContext) -> Optional[Vec3]:
        registry = ctx.registry
        held = ctx.inventory.reserved_forage
        if held is not None and registry.reserved_by(held) == ctx.agent:
            return held.position

        handle = registry.nearest_unreserved(
            ResourceKind.FORAGE_POINT, ctx.locomotion.position, ctx.agent
        )
        if handle is None:
            # Nothing left to eat; drop the hunger instead of waiting forever.
            ctx.state.is_hungry = False
            logger.debug("[%s] No forage point available", ctx.agent)
            return None
        ctx.inventory.reserved_forage = handle
        logger.debug("[%s] Going to forage point %s", ctx.agent, handle.id)
        return handle.position

    def cancel(self, ctx: ActionContext) -> None:
        release_forage(ctx)


class ForageAction(TaskAction):
    """Stand still for ``forage_duration`` seconds, then consume the point."""

    kind = TaskKind.FORAGE
    STEPS = (ForagePhase.START, ForagePhase.EAT)
    DONE = ForagePhase.DONE

    def __init__(self) -> None:
        super().__init__()
        self.elapsed = 0.0

    def on_begin(self, ctx: ActionContext) -> None:
        self.elapsed = 0.0

    def tick(self, ctx: ActionContext, dt: float) -> None:
        if self.complete:
            return

        if self.phase is ForagePhase.START:
            ctx.locomotion.stop()
            self.elapsed = 0.0
            self.enter(ctx, ForagePhase.EAT)

        self.elapsed += dt
        if self.elapsed < ctx.config.forage_duration:
            return

        handle = ctx.inventory.reserved_forage
        if handle is not None and ctx.registry.contains(handle):
            ctx.registry.consume(handle)
            ctx.events.emit(ForageConsumedEvent(ctx.agent, ctx.tick, handle.id))
            logger.info("[%s] Ate forage point %s", ctx.agent, handle.id)
        ctx.inventory.reserved_forage = None

        ctx.state.is_hungry = False
        if ctx.hunger is not None:
            ctx.hunger.restart(ctx.rng, ctx.config.hunger_min, ctx.config.hunger_max)
        self.finish(ctx)

    def cancel(self, ctx: ActionContext) -> None:
        release_forage(ctx)


class ReturnHomeAction(MoveToPoint):
    kind = TaskKind.RETURN_HOME
    STEPS = (ReturnHomePhase.FIND, ReturnHomePhase.WALK)
    DONE = ReturnHomePhase.DONE

    def choose_destination(self, ctx: ActionContext) -> Optional[Vec3]:
        return ctx.state.home_position

    def cancel(self, ctx: ActionContext) -> None:
        release_forage(ctx)


__all__ = [
    "ForageAction",
    "ForagePhase",
    "GoToForageAction",
    "GoToForagePhase",
    "ReturnHomeAction",
    "ReturnHomePhase",
    "release_forage",
]
