"""Event dataclasses emitted by the planning and execution layers."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Protocol, Tuple

from .geometry import Vec3


@dataclass(slots=True)
class PlanCreatedEvent:
    """A new plan replaced the previous one."""

    agent: str
    tick: int
    tasks: Tuple[str, ...]
    reason: str


@dataclass(slots=True)
class PlanFailedEvent:
    """Decomposition found no plan; the agent waits for the next trigger."""

    agent: str
    tick: int
    reason: str


@dataclass(slots=True)
class TaskStartedEvent:
    agent: str
    tick: int
    task: str
    index: int


@dataclass(slots=True)
class TaskCompletedEvent:
    agent: str
    tick: int
    task: str
    index: int


@dataclass(slots=True)
class TaskInterruptedEvent:
    """An active task was cancelled by a replan."""

    agent: str
    tick: int
    task: str
    reason: str


@dataclass(slots=True)
class MeleeHitEvent:
    agent: str
    tick: int
    target_position: Vec3


@dataclass(slots=True)
class ProjectileLaunchedEvent:
    agent: str
    tick: int
    object_id: int
    origin: Vec3
    velocity: Vec3


@dataclass(slots=True)
class HeavyObjectGraspedEvent:
    agent: str
    tick: int
    object_id: int


@dataclass(slots=True)
class ForageConsumedEvent:
    agent: str
    tick: int
    object_id: int


@dataclass(slots=True)
class TheftSpotInvestigatedEvent:
    agent: str
    tick: int
    position: Vec3


def event_type(event: Any) -> str:
    """Return the log type tag for ``event``, e.g. ``PLAN_CREATED``."""

    name = type(event).__name__
    if name.endswith("Event"):
        name = name[: -len("Event")]
    out = []
    for i, ch in enumerate(name):
        if ch.isupper() and i:
            out.append("_")
        out.append(ch.upper())
    return "".join(out)


def event_payload(event: Any) -> Dict[str, Any]:
    return asdict(event)


class EventSink(Protocol):
    """Anything the engine notifies about plan and action milestones."""

    def emit(self, event: Any) -> None:
        ...


@dataclass
class ListEventSink:
    """Keep emitted events in memory."""

    events: List[Any] = field(default_factory=list)

    def emit(self, event: Any) -> None:
        self.events.append(event)

    def of_type(self, cls: type) -> List[Any]:
        return [e for e in self.events if isinstance(e, cls)]


class NullEventSink:
    """Discard every event."""

    def emit(self, event: Any) -> None:
        return None


__all__ = [
    "PlanCreatedEvent",
    "PlanFailedEvent",
    "TaskStartedEvent",
    "TaskCompletedEvent",
    "TaskInterruptedEvent",
    "MeleeHitEvent",
    "ProjectileLaunchedEvent",
    "HeavyObjectGraspedEvent",
    "ForageConsumedEvent",
    "TheftSpotInvestigatedEvent",
    "event_type",
    "event_payload",
    "EventSink",
    "ListEventSink",
    "NullEventSink",
]
