"""Task and method registrations for the guardian agent.

The agent guards goal objects near its home. It attacks a visible target,
investigates thefts, hunts the thief afterwards, forages when hungry and
otherwise idles (walk, look around, or fetch a heavy object to throw).
"""

from __future__ import annotations

import math
import random

from .htn_planner import HTNPlanner
from .tasks import CompoundTask, Method, PrimitiveTask, TaskKind, always
from ...core.components.world_state import WorldState

# Primitive task names
WALK_RANDOMLY = "WalkRandomly"
LOOK_AROUND = "LookAround"
GO_TO_FORAGE = "GoToForage"
FORAGE = "Forage"
RETURN_HOME = "ReturnHome"
MELEE_ATTACK = "MeleeAttack"
GO_TO_THEFT_SPOT = "GoToTheftSpot"
PICK_UP_HEAVY_OBJECT = "PickUpHeavyObject"
THROW_HEAVY_OBJECT = "ThrowHeavyObject"

# Compound task names
MANAGE_AGENT = "ManageAgent"
IDLE = "Idle"
ENGAGE_TARGET = "EngageTarget"

FORAGE_SEQUENCE = frozenset({GO_TO_FORAGE, FORAGE, RETURN_HOME})
# Combat commitments that perception must not interrupt.
UNINTERRUPTIBLE = frozenset({MELEE_ATTACK, THROW_HEAVY_OBJECT})


# ----------------------------------------------------------------------
# Conditions
# ----------------------------------------------------------------------
def _can_forage(s: WorldState) -> bool:
    return s.is_hungry and s.forage_available


def _heavy_object_reachable(s: WorldState) -> bool:
    return not s.has_heavy_object_in_hand and s.distance_to_nearest_heavy_object < math.inf


def _theft_uninvestigated(s: WorldState) -> bool:
    return s.goal_object_stolen and not s.goal_object_investigated


# ----------------------------------------------------------------------
# Effects
# ----------------------------------------------------------------------
def _sate(s: WorldState) -> None:
    s.is_hungry = False


def _mark_investigated(s: WorldState) -> None:
    s.goal_object_investigated = True


def _grab(s: WorldState) -> None:
    s.has_heavy_object_in_hand = True


def _release(s: WorldState) -> None:
    s.has_heavy_object_in_hand = False


def build_planner(rng: random.Random | None = None) -> HTNPlanner:
    """Return an :class:`HTNPlanner` loaded with the guardian grammar."""

    planner = HTNPlanner(rng=rng, idle_task_name=IDLE)

    walk_randomly = PrimitiveTask(WALK_RANDOMLY, TaskKind.WALK_RANDOMLY)
    look_around = PrimitiveTask(LOOK_AROUND, TaskKind.LOOK_AROUND)
    # Hunger stays set on the way there; only eating clears it.
    go_to_forage = PrimitiveTask(GO_TO_FORAGE, TaskKind.GO_TO_FORAGE, _can_forage)
    forage = PrimitiveTask(FORAGE, TaskKind.FORAGE, _can_forage, _sate)
    return_home = PrimitiveTask(RETURN_HOME, TaskKind.RETURN_HOME)
    melee_attack = PrimitiveTask(
        MELEE_ATTACK,
        TaskKind.MELEE_ATTACK,
        lambda s: s.target_visible and not s.has_heavy_object_in_hand,
    )
    go_to_theft_spot = PrimitiveTask(
        GO_TO_THEFT_SPOT, TaskKind.GO_TO_THEFT_SPOT, _theft_uninvestigated, _mark_investigated
    )
    pick_up_heavy_object = PrimitiveTask(
        PICK_UP_HEAVY_OBJECT, TaskKind.PICK_UP_HEAVY_OBJECT, _heavy_object_reachable, _grab
    )
    throw_heavy_object = PrimitiveTask(
        THROW_HEAVY_OBJECT,
        TaskKind.THROW_HEAVY_OBJECT,
        lambda s: s.target_visible and s.has_heavy_object_in_hand,
        _release,
    )

    for task in (
        go_to_theft_spot,
        melee_attack,
        pick_up_heavy_object,
        throw_heavy_object,
        walk_randomly,
        look_around,
        go_to_forage,
        forage,
        return_home,
    ):
        planner.register_primitive(task)

    idle = CompoundTask(IDLE)
    engage = CompoundTask(ENGAGE_TARGET)

    # Root decision table, first match wins.
    planner.register_method(Method(
        MANAGE_AGENT, "AttackTarget",
        lambda s: s.target_visible and not s.target_cloaked,
        (engage,),
    ))
    planner.register_method(Method(
        MANAGE_AGENT, "InvestigateTheft", _theft_uninvestigated, (go_to_theft_spot,),
    ))
    planner.register_method(Method(
        MANAGE_AGENT, "HuntTarget",
        lambda s: s.goal_object_stolen and s.goal_object_investigated and not s.target_cloaked,
        (engage,),
    ))
    planner.register_method(Method(
        MANAGE_AGENT, "IdleAfterTheft",
        lambda s: s.goal_object_stolen and s.goal_object_investigated and s.target_cloaked,
        (idle,),
    ))
    planner.register_method(Method(
        MANAGE_AGENT, "EatWhenHungry",
        lambda s: not s.goal_object_stolen and _can_forage(s),
        (go_to_forage, forage, return_home),
    ))
    planner.register_method(Method(
        MANAGE_AGENT, "Idle",
        lambda s: not s.goal_object_stolen and not s.target_visible and not s.is_hungry,
        (idle,),
    ))
    # Always-satisfiable fallback so a plan can be found from any state.
    planner.register_method(Method(MANAGE_AGENT, "Fallback", always, (idle,)))

    planner.register_method(Method(
        ENGAGE_TARGET, "EngageThrow",
        lambda s: s.target_visible and s.has_heavy_object_in_hand,
        (throw_heavy_object,),
    ))
    planner.register_method(Method(
        ENGAGE_TARGET, "EngageMelee",
        lambda s: s.target_visible and not s.has_heavy_object_in_hand,
        (melee_attack,),
    ))

    planner.register_method(Method(IDLE, "Walk", always, (walk_randomly,)))
    planner.register_method(Method(IDLE, "LookAround", always, (look_around,)))
    planner.register_method(Method(
        IDLE, "PickUpHeavyObject", _heavy_object_reachable, (pick_up_heavy_object,),
    ))

    planner.validate(root_task(), require_fallback=True)
    return planner


def root_task() -> CompoundTask:
    return CompoundTask(MANAGE_AGENT)


__all__ = [
    "build_planner",
    "root_task",
    "FORAGE_SEQUENCE",
    "UNINTERRUPTIBLE",
    "WALK_RANDOMLY",
    "LOOK_AROUND",
    "GO_TO_FORAGE",
    "FORAGE",
    "RETURN_HOME",
    "MELEE_ATTACK",
    "GO_TO_THEFT_SPOT",
    "PICK_UP_HEAVY_OBJECT",
    "THROW_HEAVY_OBJECT",
    "MANAGE_AGENT",
    "IDLE",
    "ENGAGE_TARGET",
]
