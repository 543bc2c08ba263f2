import pytest

from htn_world.ai.behaviors.heavy_object import (
    PickUpHeavyObjectAction,
    PickUpPhase,
    ThrowHeavyObjectAction,
    ThrowPhase,
    aim_velocity,
)
from htn_world.core.events import HeavyObjectGraspedEvent, ProjectileLaunchedEvent
from htn_world.core.resources.registry import ResourceKind, ResourceRegistry

DT = 0.1
HEAVY = ResourceKind.HEAVY_OBJECT


def _make_registry_with_rock(position=(0.0, 0.0, 3.0)):
    reg = ResourceRegistry()
    rock = reg.add(HEAVY, position)
    return reg, rock


def test_pick_up_reserves_walks_and_grasps(make_ctx):
    reg, rock = _make_registry_with_rock()
    ctx = make_ctx(registry=reg)
    action = PickUpHeavyObjectAction()
    action.begin(ctx)

    action.tick(ctx, DT)
    assert reg.reserved_by(rock) == ctx.agent
    assert ctx.locomotion.destination == rock.position

    for _ in range(100):
        if action.complete:
            break
        ctx.locomotion.step(DT)
        action.tick(ctx, DT)

    assert action.complete
    assert action.phase is PickUpPhase.DONE
    assert not reg.contains(rock)
    assert ctx.inventory.held == rock
    assert ctx.state.has_heavy_object_in_hand
    assert [e.object_id for e in ctx.events.of_type(HeavyObjectGraspedEvent)] == [rock.id]


def test_pick_up_cancel_releases_reservation(make_ctx):
    reg, rock = _make_registry_with_rock()
    ctx = make_ctx(registry=reg)
    action = PickUpHeavyObjectAction()
    action.begin(ctx)
    action.tick(ctx, DT)

    action.cancel(ctx)

    assert not reg.is_reserved(rock)
    assert reg.contains(rock)


def test_pick_up_skips_objects_held_by_others(make_ctx):
    reg, rock = _make_registry_with_rock()
    reg.reserve(rock, "someone_else")
    ctx = make_ctx(registry=reg)
    action = PickUpHeavyObjectAction()
    action.begin(ctx)

    action.tick(ctx, DT)

    assert action.complete
    assert reg.reserved_by(rock) == "someone_else"
    assert ctx.events.of_type(HeavyObjectGraspedEvent) == []


def test_pick_up_with_full_hands_completes(make_ctx):
    reg, rock = _make_registry_with_rock()
    ctx = make_ctx(registry=reg)
    ctx.inventory.held = reg.add(HEAVY, (9.0, 0.0, 9.0))
    action = PickUpHeavyObjectAction()
    action.begin(ctx)

    action.tick(ctx, DT)

    assert action.complete
    assert not reg.is_reserved(rock)


def test_aim_velocity_adds_upward_lob():
    assert aim_velocity((0, 0, 0), (0, 0, 10), 15.0, 4.0) == pytest.approx((0.0, 4.0, 15.0))


def test_throw_in_range_launches_held_object(make_ctx, fake_target, fake_launcher):
    reg, rock = _make_registry_with_rock()
    reg.consume(rock)
    ctx = make_ctx(registry=reg, target=fake_target, projectiles=fake_launcher)
    ctx.inventory.held = rock
    ctx.state.target_visible = True
    ctx.state.has_heavy_object_in_hand = True
    action = ThrowHeavyObjectAction()
    action.begin(ctx)

    action.tick(ctx, DT)
    assert action.phase is ThrowPhase.RELEASE
    action.tick(ctx, DT)

    assert action.complete
    assert ctx.inventory.held is None
    assert not ctx.state.has_heavy_object_in_hand
    [(handle, origin, velocity)] = fake_launcher.launched
    assert handle == rock
    assert origin == pytest.approx((0.0, 1.2, 0.8))
    expected = aim_velocity(origin, (0.0, 0.5, 10.0), 15.0, 4.0)
    assert velocity == pytest.approx(expected)
    [event] = ctx.events.of_type(ProjectileLaunchedEvent)
    assert event.object_id == rock.id


def test_throw_approaches_distant_target(make_ctx, fake_target, fake_launcher):
    fake_target.position = (0.0, 0.0, 40.0)
    reg, rock = _make_registry_with_rock()
    ctx = make_ctx(registry=reg, target=fake_target, projectiles=fake_launcher)
    ctx.inventory.held = rock
    ctx.state.target_visible = True
    action = ThrowHeavyObjectAction()
    action.begin(ctx)

    action.tick(ctx, DT)

    assert action.phase is ThrowPhase.APPROACH_AND_AIM
    assert ctx.locomotion.destination == (0.0, 0.0, 40.0)
    assert ctx.locomotion.speed == ctx.config.attack_speed

    ctx.state.target_visible = False
    action.tick(ctx, DT)
    assert ctx.locomotion.destination is None
    assert fake_launcher.launched == []


def test_throw_without_object_completes(make_ctx, fake_launcher):
    ctx = make_ctx(projectiles=fake_launcher)
    action = ThrowHeavyObjectAction()
    action.begin(ctx)
    action.tick(ctx, DT)
    assert action.complete
    assert fake_launcher.launched == []
