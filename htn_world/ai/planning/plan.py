"""Ordered primitive-task sequence with an execution cursor."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .tasks import PrimitiveTask


@dataclass
class Plan:
    """Plan owned by exactly one execution controller.

    The task tuple is replaced wholesale on replan; only ``cursor`` moves.
    """

    tasks: Tuple[PrimitiveTask, ...] = ()
    cursor: int = 0

    @classmethod
    def of(cls, tasks: Sequence[PrimitiveTask]) -> "Plan":
        return cls(tuple(tasks), 0)

    def __len__(self) -> int:
        return len(self.tasks)

    @property
    def empty(self) -> bool:
        return not self.tasks

    @property
    def exhausted(self) -> bool:
        """True once the cursor has run past the last task (or the plan is empty)."""

        return self.cursor >= len(self.tasks)

    @property
    def current(self) -> Optional[PrimitiveTask]:
        if self.exhausted:
            return None
        return self.tasks[self.cursor]

    def advance(self) -> None:
        if not self.exhausted:
            self.cursor += 1

    def names(self) -> List[str]:
        return [t.name for t in self.tasks]


__all__ = ["Plan"]
