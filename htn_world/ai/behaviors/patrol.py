"""Idle behaviours: wandering near home and looking around."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from .base import ActionContext, MoveToPoint, TaskAction
from ..planning.tasks import TaskKind
from ...core import geometry as geo

logger = logging.getLogger(__name__)


class WalkPhase(Enum):
    CHOOSE = "Choosing Destination"
    WALK = "Walking"
    DONE = "Reached Destination"


class LookPhase(Enum):
    START = "Stopping"
    WAIT = "Waiting"
    TURN = "Turning"
    HOLD = "Looking"
    DONE = "Complete"


class WalkRandomlyAction(MoveToPoint):
    """Stroll to a random point within ``patrol_radius`` of home."""

    kind = TaskKind.WALK_RANDOMLY
    STEPS = (WalkPhase.CHOOSE, WalkPhase.WALK)
    DONE = WalkPhase.DONE

    def choose_destination(self, ctx: ActionContext) -> Optional[geo.Vec3]:
        point = geo.random_point_in_disc(ctx.rng, ctx.state.home_position, ctx.config.patrol_radius)
        logger.debug("[%s] Walking to %s", ctx.agent, point)
        return point


class LookAroundAction(TaskAction):
    """Stop, wait, turn to a random heading, wait again."""

    kind = TaskKind.LOOK_AROUND
    STEPS = (LookPhase.START, LookPhase.WAIT, LookPhase.TURN, LookPhase.HOLD)
    DONE = LookPhase.DONE

    def __init__(self) -> None:
        super().__init__()
        self.timer = 0.0
        self.target_heading = 0.0

    def on_begin(self, ctx: ActionContext) -> None:
        self.timer = 0.0
        self.target_heading = ctx.locomotion.heading

    def tick(self, ctx: ActionContext, dt: float) -> None:
        if self.complete:
            return

        cfg = ctx.config
        loco = ctx.locomotion
        self.timer += dt

        if self.phase is LookPhase.START:
            loco.stop()
            self.timer = 0.0
            self.enter(ctx, LookPhase.WAIT)
        elif self.phase is LookPhase.WAIT:
            if self.timer >= cfg.look_wait:
                self.target_heading = ctx.rng.uniform(0.0, 360.0)
                self.timer = 0.0
                self.enter(ctx, LookPhase.TURN)
        elif self.phase is LookPhase.TURN:
            heading = geo.rotate_heading_towards(
                loco.heading, self.target_heading, cfg.look_turn_speed * dt
            )
            loco.request_face_direction(geo.heading_to_direction(heading))
            if geo.angle_between_headings(heading, self.target_heading) < cfg.look_turn_tolerance:
                self.timer = 0.0
                self.enter(ctx, LookPhase.HOLD)
        elif self.phase is LookPhase.HOLD:
            if self.timer >= cfg.look_wait:
                self.finish(ctx)


__all__ = ["LookAroundAction", "LookPhase", "WalkRandomlyAction", "WalkPhase"]
