import pytest

from htn_world.core.component_manager import ComponentManager
from htn_world.core.entity_manager import EntityManager
from htn_world.core.resources.registry import ResourceKind, ResourceRegistry
from htn_world.core.time_manager import TimeManager
from htn_world.core.world import World
from htn_world.systems.movement.locomotion import KinematicLocomotion, LocomotionSystem
from htn_world.systems.movement.projectile_system import ProjectileSystem


class _Target:
    def __init__(self, position):
        self.position = position
        self.hits = 0

    def take_damage(self):
        self.hits += 1


def _make_world(tick_rate=10.0):
    world = World()
    world.entity_manager = EntityManager()
    world.component_manager = ComponentManager()
    world.time_manager = TimeManager(tick_rate)
    return world


def test_step_moves_at_requested_speed():
    loco = KinematicLocomotion()
    loco.request_move((0.0, 0.0, 10.0), 5.0)
    loco.step(0.1)
    assert loco.position == pytest.approx((0.0, 0.0, 0.5))
    assert loco.current_velocity() == pytest.approx((0.0, 0.0, 5.0))
    assert loco.remaining_distance() == pytest.approx(9.5)


def test_step_halts_at_stopping_distance():
    loco = KinematicLocomotion(stopping_distance=0.5, arrival_tolerance=0.1)
    loco.request_move((3.0, 0.0, 0.0), 100.0)
    loco.step(1.0)
    assert loco.position == pytest.approx((2.5, 0.0, 0.0))
    assert loco.has_arrived()
    loco.step(1.0)
    assert loco.position == pytest.approx((2.5, 0.0, 0.0))
    assert loco.current_velocity() == (0.0, 0.0, 0.0)


def test_moving_turns_to_face_travel_direction():
    loco = KinematicLocomotion(heading=0.0)
    loco.request_move((10.0, 0.0, 0.0), 5.0)
    loco.step(0.1)
    assert loco.heading == pytest.approx(90.0)


def test_arrival_ignores_height():
    loco = KinematicLocomotion()
    loco.request_move((0.0, 5.0, 0.0), 5.0)
    assert loco.remaining_distance() == 0.0
    assert loco.has_arrived()


def test_stop_clears_destination():
    loco = KinematicLocomotion()
    loco.request_move((4.0, 0.0, 0.0), 5.0)
    loco.stop()
    assert loco.destination is None
    assert loco.remaining_distance() == 0.0
    loco.step(0.1)
    assert loco.position == (0.0, 0.0, 0.0)


def test_face_direction_ignores_zero_vector():
    loco = KinematicLocomotion(heading=45.0)
    loco.request_face_direction((0.0, 1.0, 0.0))
    assert loco.heading == 45.0
    loco.request_face_direction((0.0, 0.0, -1.0))
    assert loco.heading == pytest.approx(180.0)


def test_locomotion_system_steps_components():
    world = _make_world()
    e = world.entity_manager.create_entity("mover")
    loco = KinematicLocomotion()
    loco.request_move((0.0, 0.0, 10.0), 2.0)
    world.component_manager.add_component(e, loco)

    LocomotionSystem(world).update(0)

    assert loco.position == pytest.approx((0.0, 0.0, 0.2))


def test_projectile_hits_target_in_flight():
    world = _make_world(tick_rate=60.0)
    world.target = _Target((0.0, 0.0, 5.0))
    handle = ResourceRegistry().add(ResourceKind.HEAVY_OBJECT, (0.0, 0.0, 0.0))
    system = ProjectileSystem(world)
    system.launch(handle, (0.0, 0.5, 0.0), (0.0, 2.0, 10.0))

    for tick in range(60):
        system.update(tick)
        if not system.in_flight:
            break

    assert world.target.hits == 1
    assert system.hits == 1
    assert system.in_flight == []


def test_projectile_lands_when_it_misses():
    world = _make_world(tick_rate=60.0)
    world.target = _Target((50.0, 0.0, 0.0))
    handle = ResourceRegistry().add(ResourceKind.HEAVY_OBJECT, (0.0, 0.0, 0.0))
    system = ProjectileSystem(world)
    system.launch(handle, (0.0, 1.0, 0.0), (0.0, 0.0, 5.0))

    for tick in range(120):
        system.update(tick)

    assert system.in_flight == []
    assert world.target.hits == 0
