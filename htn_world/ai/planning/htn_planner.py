"""Forward-decomposition hierarchical task network planner."""

from __future__ import annotations

import logging
import random
from typing import Dict, List, Optional, Set

from .base_planner import BasePlanner
from .tasks import CompoundTask, Method, PrimitiveTask, Task, always
from ...core.components.world_state import WorldState

logger = logging.getLogger(__name__)

IDLE_TASK_NAME = "Idle"


class DomainError(ValueError):
    """Raised for task/method registrations that can never plan correctly."""


class HTNPlanner(BasePlanner):
    """Decompose a root compound task into primitive tasks.

    Decomposition keeps an explicit stack and a simulated copy of the world
    state. A primitive whose precondition fails aborts the whole call; there
    is no backtracking into alternative methods higher up the tree. Method
    choice is the first applicable method in registration order, except for
    ``idle_task_name`` which picks uniformly among applicable methods.
    """

    def __init__(self, rng: random.Random | None = None, idle_task_name: str = IDLE_TASK_NAME) -> None:
        self.rng = rng if rng is not None else random.Random()
        self.idle_task_name = idle_task_name
        self._methods: List[Method] = []
        self._primitives: Dict[str, PrimitiveTask] = {}

    # ------------------------------------------------------------------
    # Registration API
    # ------------------------------------------------------------------
    def register_primitive(self, task: PrimitiveTask) -> None:
        if task.name in self._primitives and self._primitives[task.name] is not task:
            raise DomainError(f"Primitive task '{task.name}' registered twice")
        self._primitives[task.name] = task

    def register_method(self, method: Method) -> None:
        self._methods.append(method)

    def primitive(self, name: str) -> PrimitiveTask:
        return self._primitives[name]

    @property
    def primitives(self) -> Dict[str, PrimitiveTask]:
        return dict(self._primitives)

    @property
    def methods(self) -> List[Method]:
        return list(self._methods)

    def methods_for(self, task_name: str) -> List[Method]:
        """Return the decision table for ``task_name`` in registration order."""

        return [m for m in self._methods if m.task_name == task_name]

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------
    def validate(self, root: CompoundTask | None = None, require_fallback: bool = False) -> None:
        """Check the registered grammar for authoring errors.

        Every compound reachable from a method must have at least one method,
        and the compound → method → subtask graph must be acyclic. The
        planner itself does not detect cycles, so a cyclic domain would loop
        forever inside :meth:`plan`.

        With ``require_fallback`` the root must also own a method whose
        precondition is :func:`~htn_world.ai.planning.tasks.always`, so that
        planning can always succeed.
        """

        compound_names = {m.task_name for m in self._methods}
        for method in self._methods:
            for sub in method.subtasks:
                if isinstance(sub, CompoundTask) and sub.name not in compound_names:
                    raise DomainError(
                        f"Method {method.task_name}.{method.method_name} references "
                        f"compound '{sub.name}' which has no methods"
                    )

        done: Set[str] = set()

        def visit(name: str, path: List[str]) -> None:
            if name in path:
                cycle = " -> ".join(path[path.index(name):] + [name])
                raise DomainError(f"Cyclic method graph: {cycle}")
            if name in done:
                return
            for method in self.methods_for(name):
                for sub in method.subtasks:
                    if isinstance(sub, CompoundTask):
                        visit(sub.name, path + [name])
            done.add(name)

        roots = [root.name] if root is not None else sorted(compound_names)
        for name in roots:
            if name not in compound_names:
                raise DomainError(f"Root task '{name}' has no methods")
            visit(name, [])

        if require_fallback and root is not None:
            if not any(m.precondition is always for m in self.methods_for(root.name)):
                raise DomainError(f"Root task '{root.name}' has no always-true fallback method")

    # ------------------------------------------------------------------
    # Planning
    # ------------------------------------------------------------------
    def choose_method(self, task_name: str, state: WorldState) -> Optional[Method]:
        candidates = [m for m in self.methods_for(task_name) if m.applicable(state)]
        if not candidates:
            return None
        # Idle behaviour should look varied, goal-directed behaviour reproducible.
        if task_name == self.idle_task_name:
            return self.rng.choice(candidates)
        return candidates[0]

    def plan(self, state: WorldState, root: CompoundTask) -> Optional[List[PrimitiveTask]]:
        """Decompose ``root`` against a clone of ``state``."""

        out: List[PrimitiveTask] = []
        stack: List[Task] = [root]
        sim_state = state.clone()

        while stack:
            task = stack.pop()

            if isinstance(task, PrimitiveTask):
                if not task.applicable(sim_state):
                    logger.debug("Precondition failed for %s; aborting plan", task.name)
                    return None
                out.append(task)
                task.apply(sim_state)
            else:
                method = self.choose_method(task.name, sim_state)
                if method is None:
                    logger.debug("No applicable method for %s", task.name)
                    return None
                logger.debug("Decomposing %s via %s", task.name, method.method_name)
                stack.extend(reversed(method.subtasks))

        return out


__all__ = ["HTNPlanner", "DomainError", "IDLE_TASK_NAME"]
