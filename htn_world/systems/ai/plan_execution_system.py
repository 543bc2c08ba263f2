"""Run HTN plans for every agent, one agent at a time."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, List, Optional

from ...ai.behaviors.base import ActionContext, SubStep, TaskAction
from ...ai.behaviors.dispatch import create_action
from ...ai.planning.base_planner import BasePlanner
from ...ai.planning.domain import root_task
from ...ai.planning.plan import Plan
from ...ai.planning.replan_policy import ReplanPolicy, ReplanReason
from ...ai.planning.tasks import CompoundTask, PrimitiveTask
from ...config import AgentConfig, CONFIG
from ...core.components.ai_state import AIState
from ...core.components.hunger import HungerClock
from ...core.components.inventory import Inventory
from ...core.components.perception_cache import PerceptionCache
from ...core.components.world_state import WorldState
from ...core.events import (
    EventSink,
    NullEventSink,
    PlanCreatedEvent,
    PlanFailedEvent,
    TaskCompletedEvent,
    TaskInterruptedEvent,
    TaskStartedEvent,
)
from ..movement.locomotion import KinematicLocomotion
from .world_state_system import WorldStateSystem

logger = logging.getLogger(__name__)


class ControllerState(Enum):
    NO_PLAN = "no_plan"
    RUNNING = "running"
    ADVANCING = "advancing"


class PlanExecutor:
    """Own one agent's plan, cursor and running action.

    Each :meth:`tick` asks the replan policy first, replans if told to, and
    then drives the action of the task under the cursor. A failed plan
    leaves an empty :class:`Plan` behind and the executor waits in
    ``NO_PLAN`` for the next trigger.
    """

    def __init__(
        self,
        name: str,
        planner: BasePlanner,
        policy: ReplanPolicy | None = None,
        root: CompoundTask | None = None,
        events: EventSink | None = None,
    ) -> None:
        self.name = name
        self.planner = planner
        self.policy = policy if policy is not None else ReplanPolicy()
        self.root = root if root is not None else root_task()
        self.events = events if events is not None else NullEventSink()

        self.plan = Plan()
        self.status = ControllerState.NO_PLAN
        self.last_replan_reason: Optional[ReplanReason] = None
        self._started: Optional[PrimitiveTask] = None
        self._started_index = -1
        self._action: Optional[TaskAction] = None

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------
    def tick(self, ctx: ActionContext, dt: float) -> None:
        reason = self.policy.should_replan(
            ctx.state,
            self.plan,
            self.active_task_name(),
            self._action is not None and self._action.complete,
        )
        if reason is not None:
            self.replan(ctx, reason)
        self.execute(ctx, dt)

    def replan(self, ctx: ActionContext, reason: ReplanReason) -> bool:
        """Discard the current plan and decompose the root task again."""

        action = self._action
        if action is not None:
            if not action.complete:
                if reason is ReplanReason.TARGET_SPOTTED:
                    logger.info("[%s] Interrupting %s - target spotted", self.name, self._started.name)
                self.events.emit(
                    TaskInterruptedEvent(self.name, ctx.tick, self._started.name, reason.value)
                )
            action.cancel(ctx)
        self._action = None
        self._started = None
        self._started_index = -1
        self.last_replan_reason = reason
        ctx.locomotion.stop()

        tasks = self.planner.plan(ctx.state, self.root)
        if tasks is None:
            logger.warning("[%s] Planning failed (%s)", self.name, reason.value)
            self.plan = Plan()
            self.status = ControllerState.NO_PLAN
            self.events.emit(PlanFailedEvent(self.name, ctx.tick, reason.value))
            return False

        self.plan = Plan.of(tasks)
        self.status = ControllerState.RUNNING if tasks else ControllerState.NO_PLAN
        logger.info("[%s] Plan created with %d tasks (%s)", self.name, len(tasks), reason.value)
        logger.debug("[%s] Plan: %s", self.name, " -> ".join(self.plan.names()))
        self.events.emit(PlanCreatedEvent(self.name, ctx.tick, tuple(self.plan.names()), reason.value))
        return True

    def execute(self, ctx: ActionContext, dt: float) -> None:
        """Drive the action of the task under the cursor for one tick."""

        task = self.plan.current
        if task is None:
            self.status = ControllerState.NO_PLAN
            return

        if task is not self._started or self.plan.cursor != self._started_index:
            self._started = task
            self._started_index = self.plan.cursor
            self._action = create_action(task.kind)
            self._action.begin(ctx)
            logger.debug("[%s] Starting task: %s", self.name, task.name)
            self.events.emit(TaskStartedEvent(self.name, ctx.tick, task.name, self.plan.cursor))

        self.status = ControllerState.RUNNING
        action = self._action
        if action.complete:
            self.status = ControllerState.ADVANCING
            return

        action.tick(ctx, dt)
        if action.complete:
            self.status = ControllerState.ADVANCING
            self.events.emit(TaskCompletedEvent(self.name, ctx.tick, task.name, self.plan.cursor))

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    @property
    def action(self) -> Optional[TaskAction]:
        return self._action

    def active_task_name(self) -> Optional[str]:
        return self._started.name if self._started is not None else None

    def current_plan(self) -> List[str]:
        return self.plan.names()

    def current_task_index(self) -> int:
        return self.plan.cursor

    def current_task_name(self) -> str:
        task = self.plan.current
        return task.name if task is not None else "None"

    def current_sub_steps(self) -> List[SubStep]:
        if self._action is None:
            return []
        return self._action.sub_steps()

    def current_execution_step(self) -> str:
        if self._action is None:
            return "Idle"
        return self._action.label()


class HTNAgentSystem:
    """Sense, replan and act for each agent entity in turn.

    Agents are processed sequentially so the shared resource registry sees
    one agent's claims before the next agent senses.
    """

    order = 20

    def __init__(self, world: Any, config: AgentConfig | None = None) -> None:
        self.world = world
        self.config = config if config is not None else CONFIG.agent
        self.sensor = WorldStateSystem()

    def update(self, tick: int) -> None:
        em = getattr(self.world, "entity_manager", None)
        cm = getattr(self.world, "component_manager", None)
        if em is None or cm is None:
            return
        tm = getattr(self.world, "time_manager", None)
        dt = tm.delta_time if tm is not None else 0.0

        for entity_id in list(em.all_entities.keys()):
            ai = cm.get_component(entity_id, AIState)
            if ai is None:
                continue
            ctx = self.context_for(entity_id, tick)
            if ctx is None:
                continue
            perception = cm.get_component(entity_id, PerceptionCache) or PerceptionCache()
            executor: PlanExecutor = ai.executor
            self.sensor.sense(ctx, ai, perception, dt, executor.active_task_name())
            executor.tick(ctx, dt)

    def context_for(self, entity_id: int, tick: int = 0) -> Optional[ActionContext]:
        """Assemble the :class:`ActionContext` for ``entity_id``."""

        cm = self.world.component_manager
        ai = cm.get_component(entity_id, AIState)
        state = cm.get_component(entity_id, WorldState)
        loco = cm.get_component(entity_id, KinematicLocomotion)
        if ai is None or state is None or loco is None:
            return None
        inventory = cm.get_component(entity_id, Inventory)
        if inventory is None:
            inventory = Inventory()
            cm.add_component(entity_id, inventory)

        return ActionContext(
            agent=ai.name,
            state=state,
            locomotion=loco,
            registry=self.world.registry,
            inventory=inventory,
            config=self.config,
            rng=ai.rng,
            hunger=cm.get_component(entity_id, HungerClock),
            target=getattr(self.world, "target", None),
            projectiles=getattr(self.world, "projectiles", None),
            events=getattr(self.world, "events", None) or NullEventSink(),
            tick=tick,
        )


__all__ = ["ControllerState", "HTNAgentSystem", "PlanExecutor"]
