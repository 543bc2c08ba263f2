"""Per-tick decision whether the current plan must be discarded."""

from __future__ import annotations

import logging
from enum import Enum
from typing import AbstractSet, Optional

from .domain import FORAGE_SEQUENCE, GO_TO_THEFT_SPOT, UNINTERRUPTIBLE
from .plan import Plan
from ...core.components.world_state import WorldState

logger = logging.getLogger(__name__)


class ReplanReason(Enum):
    TARGET_SPOTTED = "target_spotted"
    NO_PLAN = "no_plan"
    PLAN_EXHAUSTED = "plan_exhausted"
    GOAL_OBJECT_STOLEN = "goal_object_stolen"
    HUNGRY = "hungry"


class ReplanPolicy:
    """Evaluate the replanning rules in priority order.

    1. A visible, uncloaked target interrupts anything except the
       uninterruptible combat tasks.
    2. A missing or overrun plan triggers a replan.
    3. A completed task advances the cursor; exhausting the plan replans.
    4. An uninvestigated theft replans unless already heading to the spot.
    5. Newly raised hunger replans unless already foraging.

    Rules 4 and 5 leave uninterruptible combat tasks alone only while the
    target is in plain sight; a hold against a hidden target can still be
    broken by a theft or by hunger.
    """

    def __init__(
        self,
        uninterruptible: AbstractSet[str] = UNINTERRUPTIBLE,
        forage_sequence: AbstractSet[str] = FORAGE_SEQUENCE,
        investigate_task: str = GO_TO_THEFT_SPOT,
    ) -> None:
        self.uninterruptible = uninterruptible
        self.forage_sequence = forage_sequence
        self.investigate_task = investigate_task
        self._was_hungry = False

    def in_forage_sequence(self, task_name: Optional[str]) -> bool:
        return task_name in self.forage_sequence

    def should_replan(
        self,
        state: WorldState,
        plan: Optional[Plan],
        active_task: Optional[str],
        active_complete: bool = False,
    ) -> Optional[ReplanReason]:
        """Return why the plan must be replaced, or ``None`` to keep it.

        Rule 3 advances ``plan.cursor`` as a side effect when ``active_complete``.
        """

        hunger_rose = state.is_hungry and not self._was_hungry
        self._was_hungry = state.is_hungry
        committed = active_task in self.uninterruptible

        if state.target_visible and not state.target_cloaked and not committed:
            return ReplanReason.TARGET_SPOTTED

        if plan is None or plan.empty or plan.exhausted:
            return ReplanReason.NO_PLAN

        if active_complete:
            plan.advance()
            if plan.exhausted:
                return ReplanReason.PLAN_EXHAUSTED

        if committed and state.target_visible and not state.target_cloaked:
            return None

        if (
            state.goal_object_stolen
            and not state.goal_object_investigated
            and active_task != self.investigate_task
        ):
            return ReplanReason.GOAL_OBJECT_STOLEN

        if hunger_rose and not self.in_forage_sequence(active_task):
            return ReplanReason.HUNGRY

        return None


__all__ = ["ReplanPolicy", "ReplanReason"]
