import pytest

from htn_world.core.component_manager import ComponentManager
from htn_world.core.components.inventory import Inventory
from htn_world.core.components.world_state import WorldState
from htn_world.core.entity_manager import EntityManager
from htn_world.core.resources.registry import ResourceKind
from htn_world.core.session import Outcome, SessionFlow
from htn_world.core.systems_manager import SystemsManager
from htn_world.core.time_manager import TimeManager
from htn_world.core.world import World


class DummySystem:
    def __init__(self, order=0, log=None, name=""):
        self.order = order
        self.log = log if log is not None else []
        self.name = name

    def update(self, tick: int) -> None:
        self.log.append((self.name, tick))


class WorldAwareSystem:
    def __init__(self):
        self.calls = []

    def update(self, world, tick):
        self.calls.append((world, tick))


def _make_world():
    world = World()
    world.entity_manager = EntityManager()
    world.component_manager = ComponentManager()
    world.systems_manager = SystemsManager()
    world.time_manager = TimeManager(30)
    return world


def test_systems_run_by_order_then_registration():
    log = []
    sm = SystemsManager()
    agents = DummySystem(20, log, "agents")
    perception = DummySystem(10, log, "perception")
    locomotion = DummySystem(30, log, "locomotion")
    late_agents = DummySystem(20, log, "late_agents")
    for system in (agents, locomotion, perception, late_agents):
        sm.register(system)

    sm.update(3)

    assert [name for name, _ in log] == ["perception", "agents", "late_agents", "locomotion"]
    assert all(tick == 3 for _, tick in log)


def test_register_twice_and_unregister():
    sm = SystemsManager()
    a = DummySystem()
    sm.register(a)
    sm.register(a)
    assert list(sm) == [a]
    sm.unregister(a)
    assert list(sm) == []


def test_update_adapts_to_signature():
    sm = SystemsManager()
    aware = WorldAwareSystem()
    plain = DummySystem()
    sm.register(aware)
    sm.register(plain)
    world = object()

    sm.update(world, 5)

    assert aware.calls == [(world, 5)]
    assert plain.log == [("", 5)]


def test_time_manager_fixed_step():
    tm = TimeManager(tick_rate=20)
    assert tm.delta_time == pytest.approx(0.05)
    tm.advance()
    tm.advance()
    assert tm.tick_counter == 2
    assert tm.elapsed == pytest.approx(0.1)


def test_time_manager_rejects_non_positive_rate():
    with pytest.raises(ValueError):
        TimeManager(0)


def test_entity_manager_names_and_lookup():
    em = EntityManager()
    a = em.create_entity("guardian_1")
    b = em.create_entity()
    assert a != b
    assert em.name_of(a) == "guardian_1"
    assert em.find("guardian_1") == a
    assert em.find("nobody") is None
    em.destroy_entity(a)
    assert not em.has_entity(a)
    assert list(em.all_entities) == [b]


def test_component_manager_one_per_class():
    cm = ComponentManager()
    first, second = WorldState(), WorldState(is_hungry=True)
    cm.add_component(1, first)
    cm.add_component(1, second)
    cm.add_component(2, Inventory())
    assert cm.get_component(1, WorldState) is second
    assert [e for e, _ in cm.entities_with(WorldState)] == [1]
    assert cm.remove_component(1, WorldState) is second
    assert cm.get_component(1, WorldState) is None
    assert cm.get_component(99, WorldState) is None


def test_spawn_requires_managers():
    with pytest.raises(RuntimeError):
        World().spawn("guardian")


def test_remove_entity_releases_reservations():
    world = _make_world()
    e = world.spawn("guardian_1", WorldState())
    point = world.registry.add(ResourceKind.FORAGE_POINT, (1.0, 0.0, 0.0))
    world.registry.reserve(point, "guardian_1")

    world.remove_entity(e, claimant="guardian_1")

    assert not world.registry.is_reserved(point)
    assert world.registry.contains(point)
    assert world.component_manager.get_component(e, WorldState) is None
    assert not world.entity_manager.has_entity(e)


def test_step_updates_then_advances():
    world = _make_world()
    aware = WorldAwareSystem()
    world.register_system(aware)

    assert world.step() == 0
    assert world.step() == 1
    assert aware.calls == [(world, 0), (world, 1)]
    assert world.time_manager.tick_counter == 2


def test_session_first_outcome_sticks():
    session = SessionFlow()
    seen = []
    session.subscribe(seen.append)
    assert not session.ended

    session.lose()
    session.win()

    assert session.outcome is Outcome.LOSE
    assert seen == [Outcome.LOSE]
