"""Task grammar for the hierarchical planner.

A :class:`PrimitiveTask` is an atomic unit of execution. It carries a
precondition and an effect over :class:`WorldState` for planning, and a
:class:`TaskKind` tag that selects the multi-tick state machine run by the
execution controller. A :class:`CompoundTask` is a named goal resolved by one
of the :class:`Method` entries registered for its name.

Task definitions are immutable and registered once; plans hold references
to them and never copy them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Tuple, Union

from ...core.components.world_state import WorldState

Condition = Callable[[WorldState], bool]
Effect = Callable[[WorldState], None]


def always(state: WorldState) -> bool:
    """Vacuously true precondition."""

    return True


def no_effect(state: WorldState) -> None:
    """Effect that leaves the simulated state untouched."""

    return None


class TaskKind(Enum):
    """Tag selecting which action state machine backs a primitive task."""

    WALK_RANDOMLY = "walk_randomly"
    LOOK_AROUND = "look_around"
    GO_TO_FORAGE = "go_to_forage"
    FORAGE = "forage"
    RETURN_HOME = "return_home"
    MELEE_ATTACK = "melee_attack"
    GO_TO_THEFT_SPOT = "go_to_theft_spot"
    PICK_UP_HEAVY_OBJECT = "pick_up_heavy_object"
    THROW_HEAVY_OBJECT = "throw_heavy_object"


@dataclass(frozen=True, eq=False)
class PrimitiveTask:
    """Atomic, preconditioned, effecting unit of execution."""

    name: str
    kind: TaskKind
    precondition: Condition = always
    effect: Effect = no_effect

    def applicable(self, state: WorldState) -> bool:
        return self.precondition(state)

    def apply(self, state: WorldState) -> None:
        self.effect(state)

    def describe(self) -> Dict[str, Any]:
        return {"type": "primitive", "name": self.name, "kind": self.kind.value}


@dataclass(frozen=True)
class CompoundTask:
    """Named goal resolved into subtasks by a :class:`Method`."""

    name: str

    def describe(self) -> Dict[str, Any]:
        return {"type": "compound", "name": self.name}


Task = Union[PrimitiveTask, CompoundTask]


@dataclass(frozen=True, eq=False)
class Method:
    """Guarded decomposition rule mapping one compound task to ordered subtasks."""

    task_name: str
    method_name: str
    precondition: Condition = always
    subtasks: Tuple[Task, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        # Accept any sequence but store an immutable tuple
        object.__setattr__(self, "subtasks", tuple(self.subtasks))

    def applicable(self, state: WorldState) -> bool:
        return self.precondition(state)

    def describe(self) -> Dict[str, Any]:
        return {
            "task": self.task_name,
            "method": self.method_name,
            "subtasks": [t.describe() for t in self.subtasks],
        }


__all__ = [
    "Condition",
    "Effect",
    "always",
    "no_effect",
    "TaskKind",
    "PrimitiveTask",
    "CompoundTask",
    "Task",
    "Method",
]
