from __future__ import annotations

"""Abstract planner interface."""

from abc import ABC, abstractmethod
from typing import List, Optional

from .tasks import CompoundTask, PrimitiveTask
from ...core.components.world_state import WorldState


class BasePlanner(ABC):
    """Base class for planning algorithms."""

    @abstractmethod
    def plan(self, state: WorldState, root: CompoundTask) -> Optional[List[PrimitiveTask]]:
        """Return an ordered list of primitive tasks, or ``None`` on failure.

        Implementations must not mutate ``state``.
        """
        raise NotImplementedError


__all__ = ["BasePlanner"]
