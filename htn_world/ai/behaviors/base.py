"""Shared scaffolding for the multi-tick actions behind primitive tasks.

Every action is a small phase machine. The execution controller calls
:meth:`TaskAction.begin` once per fresh task start, then :meth:`TaskAction.tick`
every tick until :attr:`TaskAction.complete` turns true. A replan calls
:meth:`TaskAction.cancel` on the running action.
"""

from __future__ import annotations

import logging
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, List, Optional, Tuple

from ...config import AgentConfig
from ...core.components.hunger import HungerClock
from ...core.components.inventory import Inventory
from ...core.components.world_state import WorldState
from ...core.events import EventSink, NullEventSink
from ...core.geometry import Vec3
from ...core.interfaces import Locomotion, ProjectileLauncher, TargetHandle
from ...core.resources.registry import ResourceRegistry
from ..planning.tasks import TaskKind

logger = logging.getLogger(__name__)


class StepStatus(Enum):
    PENDING = "pending"
    ACTIVE = "active"
    DONE = "done"


@dataclass(frozen=True, slots=True)
class SubStep:
    """One row of the debug overlay's task breakdown."""

    name: str
    status: StepStatus


@dataclass
class ActionContext:
    """Everything an action may read or drive during one tick.

    ``agent`` doubles as the claimant key for registry reservations.
    """

    agent: str
    state: WorldState
    locomotion: Locomotion
    registry: ResourceRegistry
    inventory: Inventory
    config: AgentConfig
    rng: random.Random
    hunger: HungerClock | None = None
    target: TargetHandle | None = None
    projectiles: ProjectileLauncher | None = None
    events: EventSink = field(default_factory=NullEventSink)
    tick: int = 0

    def target_position(self) -> Vec3:
        """Live target position while visible, otherwise the last sighting."""

        if self.state.target_visible and self.target is not None:
            return self.target.position
        return self.state.last_seen_target_position


class TaskAction(ABC):
    """Base class for the phase machine backing one :class:`TaskKind`.

    Subclasses list their visible phases in ``STEPS`` (in order) and name the
    terminal phase in ``DONE``. The enum values double as overlay labels.
    """

    kind: ClassVar[TaskKind]
    STEPS: ClassVar[Tuple[Enum, ...]] = ()
    DONE: ClassVar[Optional[Enum]] = None

    def __init__(self) -> None:
        self.complete = False
        self.phase: Optional[Enum] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def begin(self, ctx: ActionContext) -> None:
        """Reset private state for a fresh start of the task."""

        self.complete = False
        self.phase = self.STEPS[0] if self.STEPS else None
        self.on_begin(ctx)

    def on_begin(self, ctx: ActionContext) -> None:
        """Hook for subclasses; runs at the end of :meth:`begin`."""

    @abstractmethod
    def tick(self, ctx: ActionContext, dt: float) -> None:
        """Advance the phase machine by ``dt`` seconds."""

    def cancel(self, ctx: ActionContext) -> None:
        """Abandon the action mid-phase; must leave reservations released."""

    def finish(self, ctx: ActionContext) -> None:
        self.complete = True
        if self.DONE is not None:
            self.phase = self.DONE
        logger.debug("[%s] %s complete", ctx.agent, self.kind.value)

    def enter(self, ctx: ActionContext, phase: Enum) -> None:
        logger.debug("[%s] %s: %s -> %s", ctx.agent, self.kind.value, self.label(), phase.value)
        self.phase = phase

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    def sub_steps(self) -> List[SubStep]:
        """Ordered breakdown of the phases with their status."""

        if self.complete:
            return [SubStep(step.value, StepStatus.DONE) for step in self.STEPS]
        idx = self.STEPS.index(self.phase) if self.phase in self.STEPS else -1
        out = []
        for i, step in enumerate(self.STEPS):
            if idx < 0 or i > idx:
                status = StepStatus.PENDING
            elif i == idx:
                status = StepStatus.ACTIVE
            else:
                status = StepStatus.DONE
            out.append(SubStep(step.value, status))
        return out

    def label(self) -> str:
        """One-line description of what the action is doing right now."""

        if self.complete:
            return "Complete"
        if self.phase is None:
            return "Starting"
        return str(self.phase.value)


class MoveToPoint(TaskAction):
    """Shared shape of the travel actions: choose a destination, then walk.

    Subclasses implement :meth:`choose_destination`; returning ``None``
    completes the action at once.
    """

    speed_attr: ClassVar[str] = "idle_speed"

    def __init__(self) -> None:
        super().__init__()
        self.destination: Optional[Vec3] = None

    def on_begin(self, ctx: ActionContext) -> None:
        self.destination = None

    @abstractmethod
    def choose_destination(self, ctx: ActionContext) -> Optional[Vec3]:
        ...

    def on_arrival(self, ctx: ActionContext) -> None:
        """Hook run once when the destination is reached."""

    def tick(self, ctx: ActionContext, dt: float) -> None:
        if self.complete:
            return

        if self.phase is self.STEPS[0]:
            self.destination = self.choose_destination(ctx)
            if self.destination is None:
                self.finish(ctx)
                return
            ctx.locomotion.request_move(self.destination, getattr(ctx.config, self.speed_attr))
            self.enter(ctx, self.STEPS[1])
            return

        if ctx.locomotion.has_arrived():
            self.on_arrival(ctx)
            self.finish(ctx)


__all__ = [
    "ActionContext",
    "MoveToPoint",
    "StepStatus",
    "SubStep",
    "TaskAction",
]
