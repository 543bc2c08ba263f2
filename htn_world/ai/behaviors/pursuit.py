"""Chase-and-strike melee action."""

from __future__ import annotations

import logging
from enum import Enum

from .base import ActionContext, TaskAction
from ..planning.tasks import TaskKind
from ...core import geometry as geo
from ...core.events import MeleeHitEvent

logger = logging.getLogger(__name__)


class MeleePhase(Enum):
    CHASING = "Chasing Target"
    GOING_TO_LAST_SEEN = "Going to Last Seen"
    SEARCHING = "Searching Area"
    DONE = "Complete"


class MeleeAttackAction(TaskAction):
    """Chase the target and strike once in range.

    Losing sight sends the agent to the last sighting, where it spins in
    place for ``search_duration`` seconds. Reacquiring the target while
    searching resumes the chase; running out the search timer gives up,
    which still counts as completion.
    """

    kind = TaskKind.MELEE_ATTACK
    STEPS = (MeleePhase.CHASING, MeleePhase.GOING_TO_LAST_SEEN, MeleePhase.SEARCHING)
    DONE = MeleePhase.DONE

    def __init__(self) -> None:
        super().__init__()
        self.search_elapsed = 0.0

    def on_begin(self, ctx: ActionContext) -> None:
        self.search_elapsed = 0.0

    def tick(self, ctx: ActionContext, dt: float) -> None:
        if self.complete:
            return

        if self.phase is MeleePhase.CHASING:
            self._chase(ctx, dt)
        elif self.phase is MeleePhase.GOING_TO_LAST_SEEN:
            if ctx.locomotion.has_arrived():
                ctx.locomotion.stop()
                self.search_elapsed = 0.0
                logger.debug("[%s] Reached last seen position, searching", ctx.agent)
                self.enter(ctx, MeleePhase.SEARCHING)
        elif self.phase is MeleePhase.SEARCHING:
            self._search(ctx, dt)

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------
    def _chase(self, ctx: ActionContext, dt: float) -> None:
        cfg = ctx.config
        loco = ctx.locomotion

        if not ctx.state.target_visible:
            loco.request_move(ctx.state.last_seen_target_position, cfg.attack_speed)
            logger.debug("[%s] Lost target, heading to last seen position", ctx.agent)
            self.enter(ctx, MeleePhase.GOING_TO_LAST_SEEN)
            return

        target_pos = ctx.target_position()
        loco.request_move(target_pos, cfg.attack_speed)
        self._turn_towards(ctx, target_pos, cfg.chase_turn_speed * dt)

        if geo.distance(loco.position, target_pos) <= cfg.attack_range:
            if ctx.target is not None:
                ctx.target.take_damage()
            ctx.events.emit(MeleeHitEvent(ctx.agent, ctx.tick, target_pos))
            logger.info("[%s] Melee hit on target", ctx.agent)
            loco.stop()
            self.finish(ctx)

    def _search(self, ctx: ActionContext, dt: float) -> None:
        cfg = ctx.config
        self.search_elapsed += dt

        spin = 360.0 / cfg.search_duration * dt
        ctx.locomotion.request_face_direction(
            geo.heading_to_direction(ctx.locomotion.heading + spin)
        )

        if ctx.state.target_visible:
            logger.debug("[%s] Reacquired target while searching", ctx.agent)
            self.enter(ctx, MeleePhase.CHASING)
        elif self.search_elapsed >= cfg.search_duration:
            logger.debug("[%s] Search timed out, giving up", ctx.agent)
            self.finish(ctx)

    @staticmethod
    def _turn_towards(ctx: ActionContext, point: geo.Vec3, max_step: float) -> None:
        loco = ctx.locomotion
        direction = geo.flatten(geo.sub(point, loco.position))
        if geo.sqr_length(direction) <= 0.01:
            return
        heading = geo.rotate_heading_towards(
            loco.heading, geo.direction_to_heading(direction), max_step
        )
        loco.request_face_direction(geo.heading_to_direction(heading))


__all__ = ["MeleeAttackAction", "MeleePhase"]
