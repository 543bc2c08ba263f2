"""Map each :class:`TaskKind` to the action class that runs it."""

from __future__ import annotations

from typing import Dict, Type

from .base import TaskAction
from .forage import ForageAction, GoToForageAction, ReturnHomeAction
from .heavy_object import PickUpHeavyObjectAction, ThrowHeavyObjectAction
from .investigate import GoToTheftSpotAction
from .patrol import LookAroundAction, WalkRandomlyAction
from .pursuit import MeleeAttackAction
from ..planning.tasks import TaskKind

ACTION_TYPES: Dict[TaskKind, Type[TaskAction]] = {
    cls.kind: cls
    for cls in (
        WalkRandomlyAction,
        LookAroundAction,
        GoToForageAction,
        ForageAction,
        ReturnHomeAction,
        MeleeAttackAction,
        GoToTheftSpotAction,
        PickUpHeavyObjectAction,
        ThrowHeavyObjectAction,
    )
}


def create_action(kind: TaskKind) -> TaskAction:
    """Return a fresh action instance for ``kind``."""

    try:
        return ACTION_TYPES[kind]()
    except KeyError:
        raise ValueError(f"No action registered for task kind {kind!r}") from None


__all__ = ["ACTION_TYPES", "create_action"]
