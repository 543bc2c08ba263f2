"""Fetching and throwing heavy objects."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from .base import ActionContext, TaskAction
from ..planning.tasks import TaskKind
from ...core import geometry as geo
from ...core.events import HeavyObjectGraspedEvent, ProjectileLaunchedEvent
from ...core.resources.registry import ResourceHandle, ResourceKind

logger = logging.getLogger(__name__)


class PickUpPhase(Enum):
    RUN_TO_OBJECT = "Running to Object"
    GRASP = "Picking Up"
    DONE = "Complete"


class ThrowPhase(Enum):
    APPROACH_AND_AIM = "Approaching Target"
    RELEASE = "Throwing Object"
    DONE = "Complete"


class PickUpHeavyObjectAction(TaskAction):
    """Walk to the nearest free heavy object and attach it to the agent.

    The object is reserved while the agent walks over, so two agents never
    race for it. With nothing to pick up the action completes at once.
    """

    kind = TaskKind.PICK_UP_HEAVY_OBJECT
    STEPS = (PickUpPhase.RUN_TO_OBJECT, PickUpPhase.GRASP)
    DONE = PickUpPhase.DONE

    def __init__(self) -> None:
        super().__init__()
        self.handle: Optional[ResourceHandle] = None

    def on_begin(self, ctx: ActionContext) -> None:
        self.handle = None

    def tick(self, ctx: ActionContext, dt: float) -> None:
        if self.complete:
            return

        if ctx.inventory.held is not None:
            logger.debug("[%s] Already holding a heavy object", ctx.agent)
            self.finish(ctx)
            return

        if self.phase is PickUpPhase.RUN_TO_OBJECT:
            if self.handle is None:
                self.handle = ctx.registry.nearest_unreserved(
                    ResourceKind.HEAVY_OBJECT, ctx.locomotion.position, ctx.agent
                )
                if self.handle is None:
                    logger.debug("[%s] No heavy object to pick up", ctx.agent)
                    self.finish(ctx)
                    return
                ctx.locomotion.request_move(self.handle.position, ctx.config.idle_speed)
                return
            if ctx.locomotion.has_arrived():
                self.enter(ctx, PickUpPhase.GRASP)
        elif self.phase is PickUpPhase.GRASP:
            self._grasp(ctx)

    def _grasp(self, ctx: ActionContext) -> None:
        handle = self.handle
        if handle is None or not ctx.registry.contains(handle):
            logger.debug("[%s] Heavy object vanished before grasp", ctx.agent)
            self.handle = None
            self.finish(ctx)
            return

        ctx.registry.consume(handle)
        ctx.inventory.held = handle
        ctx.state.has_heavy_object_in_hand = True
        ctx.events.emit(HeavyObjectGraspedEvent(ctx.agent, ctx.tick, handle.id))
        logger.info("[%s] Picked up heavy object %s", ctx.agent, handle.id)
        self.finish(ctx)

    def cancel(self, ctx: ActionContext) -> None:
        if self.handle is not None and ctx.inventory.held is not self.handle:
            ctx.registry.release(self.handle, ctx.agent)
        self.handle = None


class ThrowHeavyObjectAction(TaskAction):
    """Close to throw range, then launch the held object at the target.

    The agent advances while the target is visible but too far, and holds
    position while the target is out of sight.
    """

    kind = TaskKind.THROW_HEAVY_OBJECT
    STEPS = (ThrowPhase.APPROACH_AND_AIM, ThrowPhase.RELEASE)
    DONE = ThrowPhase.DONE

    def tick(self, ctx: ActionContext, dt: float) -> None:
        if self.complete:
            return

        if ctx.inventory.held is None:
            logger.debug("[%s] Nothing to throw", ctx.agent)
            self.finish(ctx)
            return

        if self.phase is ThrowPhase.APPROACH_AND_AIM:
            self._aim(ctx, dt)
        elif self.phase is ThrowPhase.RELEASE:
            self._release(ctx)

    def _aim(self, ctx: ActionContext, dt: float) -> None:
        cfg = ctx.config
        loco = ctx.locomotion
        target_pos = ctx.target_position()

        direction = geo.flatten(geo.sub(target_pos, loco.position))
        if geo.sqr_length(direction) > 0.01:
            heading = geo.rotate_heading_towards(
                loco.heading, geo.direction_to_heading(direction), cfg.chase_turn_speed * dt
            )
            loco.request_face_direction(geo.heading_to_direction(heading))

        if not ctx.state.target_visible:
            loco.stop()
            return

        if geo.distance(loco.position, target_pos) <= cfg.throw_range:
            loco.stop()
            logger.debug("[%s] Target in throw range", ctx.agent)
            self.enter(ctx, ThrowPhase.RELEASE)
        else:
            loco.request_move(target_pos, cfg.attack_speed)

    def _release(self, ctx: ActionContext) -> None:
        cfg = ctx.config
        loco = ctx.locomotion
        handle = ctx.inventory.held

        origin = geo.add(
            geo.add(loco.position, geo.scale(geo.heading_to_direction(loco.heading), cfg.hand_offset_forward)),
            geo.scale(geo.UP, cfg.hand_offset_up),
        )
        velocity = aim_velocity(
            origin,
            geo.add(ctx.target_position(), geo.scale(geo.UP, cfg.target_aim_height)),
            cfg.throw_speed,
            cfg.throw_upward_boost,
        )

        if ctx.projectiles is not None:
            ctx.projectiles.launch(handle, origin, velocity)
        ctx.inventory.held = None
        ctx.state.has_heavy_object_in_hand = False
        ctx.events.emit(ProjectileLaunchedEvent(ctx.agent, ctx.tick, handle.id, origin, velocity))
        logger.info("[%s] Threw heavy object %s", ctx.agent, handle.id)
        self.finish(ctx)


def aim_velocity(origin: geo.Vec3, aim_point: geo.Vec3, speed: float, upward_boost: float) -> geo.Vec3:
    """Straight-line launch velocity towards ``aim_point`` plus an upward lob."""

    direction = geo.normalize(geo.sub(aim_point, origin))
    return geo.add(geo.scale(direction, speed), geo.scale(geo.UP, upward_boost))


__all__ = [
    "PickUpHeavyObjectAction",
    "PickUpPhase",
    "ThrowHeavyObjectAction",
    "ThrowPhase",
    "aim_velocity",
]
