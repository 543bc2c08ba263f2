import random

from htn_world.ai.planning import domain
from htn_world.ai.planning.domain import build_planner
from htn_world.ai.planning.htn_planner import HTNPlanner
from htn_world.ai.planning.replan_policy import ReplanReason
from htn_world.ai.planning.tasks import CompoundTask, Method, PrimitiveTask, TaskKind, always
from htn_world.core.events import (
    ListEventSink,
    PlanCreatedEvent,
    PlanFailedEvent,
    TaskCompletedEvent,
    TaskInterruptedEvent,
    TaskStartedEvent,
)
from htn_world.core.resources.registry import ResourceKind, ResourceRegistry
from htn_world.systems.ai.plan_execution_system import ControllerState, PlanExecutor

DT = 0.1
IDLE_PLANS = ([domain.WALK_RANDOMLY], [domain.LOOK_AROUND])


def _make_executor(planner=None, root=None, seed=0):
    events = ListEventSink()
    planner = planner if planner is not None else build_planner(random.Random(seed))
    return PlanExecutor("guardian", planner, root=root, events=events), events


def _tick(executor, ctx, n=1):
    for _ in range(n):
        executor.tick(ctx, DT)
        ctx.locomotion.step(DT)
        ctx.tick += 1


def _tick_until(executor, ctx, predicate, limit=500):
    for _ in range(limit):
        if predicate():
            return
        _tick(executor, ctx)
    raise AssertionError("condition never reached")


def test_failed_planning_waits_in_no_plan(make_ctx):
    planner = HTNPlanner()
    root = CompoundTask("Root")
    executor, events = _make_executor(planner, root)
    ctx = make_ctx()

    _tick(executor, ctx)

    assert executor.status is ControllerState.NO_PLAN
    assert executor.current_plan() == []
    assert executor.current_task_name() == "None"
    assert executor.current_execution_step() == "Idle"
    assert executor.current_sub_steps() == []
    assert len(events.of_type(PlanFailedEvent)) == 1

    walk = PrimitiveTask(domain.WALK_RANDOMLY, TaskKind.WALK_RANDOMLY)
    planner.register_method(Method("Root", "Fallback", always, (walk,)))
    _tick(executor, ctx)

    assert executor.current_plan() == [domain.WALK_RANDOMLY]
    assert executor.status is ControllerState.RUNNING
    assert executor.last_replan_reason is ReplanReason.NO_PLAN


def test_quiet_agent_idles(make_ctx):
    executor, events = _make_executor()
    ctx = make_ctx()

    _tick(executor, ctx)

    assert executor.current_plan() in IDLE_PLANS
    assert executor.current_task_index() == 0
    [created] = events.of_type(PlanCreatedEvent)
    assert created.reason == "no_plan"
    [started] = events.of_type(TaskStartedEvent)
    assert started.index == 0


def test_hungry_agent_runs_forage_sequence(make_ctx):
    reg = ResourceRegistry()
    point = reg.add(ResourceKind.FORAGE_POINT, (0.0, 0.0, 5.0))
    ctx = make_ctx(registry=reg)
    ctx.state.is_hungry = True
    ctx.state.forage_available = True
    executor, events = _make_executor()

    _tick(executor, ctx)
    assert executor.current_plan() == [domain.GO_TO_FORAGE, domain.FORAGE, domain.RETURN_HOME]
    assert executor.current_task_name() == domain.GO_TO_FORAGE
    assert reg.reserved_by(point) == ctx.agent

    _tick_until(executor, ctx, lambda: executor.current_task_index() == 1)
    assert executor.current_task_name() == domain.FORAGE

    _tick_until(executor, ctx, lambda: not reg.contains(point))
    assert not ctx.state.is_hungry

    _tick_until(executor, ctx, lambda: executor.last_replan_reason is ReplanReason.PLAN_EXHAUSTED)
    assert executor.current_plan() in IDLE_PLANS
    assert [e.task for e in events.of_type(TaskCompletedEvent)] == [
        domain.GO_TO_FORAGE,
        domain.FORAGE,
        domain.RETURN_HOME,
    ]
    assert events.of_type(TaskInterruptedEvent) == []


def test_spotting_target_interrupts_forage_and_releases_point(make_ctx, fake_target):
    reg = ResourceRegistry()
    point = reg.add(ResourceKind.FORAGE_POINT, (0.0, 0.0, -10.0))
    ctx = make_ctx(registry=reg, target=fake_target)
    ctx.state.is_hungry = True
    ctx.state.forage_available = True
    executor, events = _make_executor()
    _tick(executor, ctx, 3)
    assert reg.reserved_by(point) == ctx.agent

    ctx.state.target_visible = True
    _tick(executor, ctx)

    assert executor.last_replan_reason is ReplanReason.TARGET_SPOTTED
    assert executor.current_plan() == [domain.MELEE_ATTACK]
    assert not reg.is_reserved(point)
    assert reg.contains(point)
    [interrupted] = events.of_type(TaskInterruptedEvent)
    assert interrupted.task == domain.GO_TO_FORAGE
    assert interrupted.reason == "target_spotted"


def test_melee_is_not_interrupted_by_theft(make_ctx, fake_target):
    fake_target.position = (0.0, 0.0, 30.0)
    ctx = make_ctx(target=fake_target)
    ctx.state.target_visible = True
    executor, events = _make_executor()
    _tick(executor, ctx)
    assert executor.current_plan() == [domain.MELEE_ATTACK]

    ctx.state.goal_object_stolen = True
    _tick(executor, ctx, 5)

    assert executor.current_plan() == [domain.MELEE_ATTACK]
    assert len(events.of_type(PlanCreatedEvent)) == 1


def test_lost_target_search_then_replan(make_ctx, fake_target):
    fake_target.position = (0.0, 0.0, 30.0)
    ctx = make_ctx(target=fake_target)
    ctx.state.target_visible = True
    executor, events = _make_executor()
    _tick(executor, ctx)

    ctx.state.target_visible = False
    ctx.state.last_seen_target_position = (0.0, 0.0, 5.0)
    _tick(executor, ctx)
    assert executor.current_execution_step() == "Going to Last Seen"

    _tick_until(executor, ctx, lambda: executor.current_execution_step() == "Searching Area")
    _tick_until(executor, ctx, lambda: executor.last_replan_reason is ReplanReason.PLAN_EXHAUSTED)

    assert fake_target.hits == 0
    assert [e.task for e in events.of_type(TaskCompletedEvent)] == [domain.MELEE_ATTACK]
    assert executor.current_plan() in IDLE_PLANS
    assert events.of_type(TaskInterruptedEvent) == []


def test_repeated_task_restarts_fresh(make_ctx):
    planner = HTNPlanner()
    look = PrimitiveTask(domain.LOOK_AROUND, TaskKind.LOOK_AROUND)
    planner.register_method(Method("Root", "Twice", always, (look, look)))
    executor, events = _make_executor(planner, CompoundTask("Root"))
    ctx = make_ctx()

    _tick_until(executor, ctx, lambda: executor.current_task_index() == 1)
    assert executor.current_execution_step() == "Waiting"
    assert executor.current_sub_steps()[0].status.value == "done"

    assert [e.index for e in events.of_type(TaskStartedEvent)] == [0, 1]


def test_replan_stops_locomotion(make_ctx):
    executor, _ = _make_executor()
    ctx = make_ctx()
    ctx.locomotion.request_move((50.0, 0.0, 0.0), 5.0)
    executor.replan(ctx, ReplanReason.NO_PLAN)
    assert executor.action is None
    assert ctx.locomotion.destination is None


def test_theft_interrupts_melee_search(make_ctx, fake_target):
    fake_target.position = (0.0, 0.0, 30.0)
    ctx = make_ctx(target=fake_target)
    ctx.state.target_visible = True
    executor, events = _make_executor()
    _tick(executor, ctx)

    ctx.state.target_visible = False
    ctx.state.last_seen_target_position = (0.0, 0.0, 5.0)
    _tick_until(executor, ctx, lambda: executor.current_execution_step() == "Searching Area")

    ctx.state.goal_object_stolen = True
    ctx.state.last_goal_theft_position = (4.0, 0.0, 4.0)
    _tick(executor, ctx)

    assert executor.last_replan_reason is ReplanReason.GOAL_OBJECT_STOLEN
    assert executor.current_plan() == [domain.GO_TO_THEFT_SPOT]
    [interrupted] = events.of_type(TaskInterruptedEvent)
    assert interrupted.task == domain.MELEE_ATTACK
    assert interrupted.reason == "goal_object_stolen"


def test_hunger_breaks_throw_hold_when_target_hidden(make_ctx, fake_target, fake_launcher):
    reg = ResourceRegistry()
    fake_target.position = (0.0, 0.0, 30.0)
    ctx = make_ctx(registry=reg, target=fake_target, projectiles=fake_launcher)
    ctx.inventory.held = reg.add(ResourceKind.HEAVY_OBJECT, (0.0, 0.0, 1.0))
    ctx.state.has_heavy_object_in_hand = True
    ctx.state.target_visible = True
    executor, events = _make_executor()
    _tick(executor, ctx)
    assert executor.current_plan() == [domain.THROW_HEAVY_OBJECT]

    ctx.state.target_visible = False
    ctx.state.last_seen_target_position = fake_target.position
    _tick(executor, ctx, 20)
    # Holding position with nothing to aim at
    assert executor.current_task_name() == domain.THROW_HEAVY_OBJECT
    assert fake_launcher.launched == []

    point = reg.add(ResourceKind.FORAGE_POINT, (0.0, 0.0, -5.0))
    ctx.state.is_hungry = True
    ctx.state.forage_available = True
    _tick(executor, ctx)

    assert executor.last_replan_reason is ReplanReason.HUNGRY
    assert executor.current_plan() == [domain.GO_TO_FORAGE, domain.FORAGE, domain.RETURN_HOME]
    assert reg.reserved_by(point) == ctx.agent
    [interrupted] = events.of_type(TaskInterruptedEvent)
    assert interrupted.task == domain.THROW_HEAVY_OBJECT
