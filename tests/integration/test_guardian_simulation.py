import json
import random
from pathlib import Path

from htn_world.ai.planning import domain
from htn_world.config import AgentConfig
from htn_world.core.component_manager import ComponentManager
from htn_world.core.components.ai_state import AIState
from htn_world.core.components.world_state import WorldState
from htn_world.core.entity_manager import EntityManager
from htn_world.core.events import ListEventSink, PlanCreatedEvent
from htn_world.core.resources.registry import ResourceKind
from htn_world.core.systems_manager import SystemsManager
from htn_world.core.time_manager import TimeManager
from htn_world.core.world import World
from htn_world.main import bootstrap, main, run
from htn_world.persistence.event_log import EventLogSink
from htn_world.scenarios.base_scenario import BaseScenario
from htn_world.systems.ai.plan_execution_system import HTNAgentSystem
from htn_world.systems.movement.locomotion import LocomotionSystem

IDLE_PLANS = ([domain.WALK_RANDOMLY], [domain.LOOK_AROUND])


def _make_world():
    world = World()
    world.entity_manager = EntityManager()
    world.component_manager = ComponentManager()
    world.systems_manager = SystemsManager()
    world.time_manager = TimeManager(30)
    world.events = ListEventSink()
    cfg = AgentConfig()
    world.register_system(HTNAgentSystem(world, cfg))
    world.register_system(LocomotionSystem(world))
    return world, cfg


def _write_config(tmp_path: Path) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(
        "world:\n  tick_rate: 30\n  agent_count: 2\n  max_ticks: 60\n"
        "logging:\n  global_level: WARNING\n"
    )
    return path


def test_two_hungry_agents_share_one_forage_point():
    world, cfg = _make_world()
    point = world.registry.add(ResourceKind.FORAGE_POINT, (0.0, 0.0, 6.0))
    rng = random.Random(8)
    a = BaseScenario.spawn_agent(world, "guardian_a", (0.0, 0.0, 0.0), cfg, rng)
    b = BaseScenario.spawn_agent(world, "guardian_b", (1.0, 0.0, 0.0), cfg, rng)
    cm = world.component_manager
    for e in (a, b):
        cm.get_component(e, WorldState).is_hungry = True

    world.step()

    exec_a = cm.get_component(a, AIState).executor
    exec_b = cm.get_component(b, AIState).executor
    assert exec_a.current_plan() == [domain.GO_TO_FORAGE, domain.FORAGE, domain.RETURN_HOME]
    assert exec_b.current_plan() in IDLE_PLANS
    assert world.registry.reserved_by(point) == "guardian_a"
    assert not cm.get_component(b, WorldState).forage_available

    for _ in range(200):
        world.step()
        if not world.registry.contains(point):
            break
    assert not world.registry.contains(point)
    assert not cm.get_component(a, WorldState).is_hungry
    assert world.registry.reserved() == []


def test_removing_agent_frees_its_claims():
    world, cfg = _make_world()
    point = world.registry.add(ResourceKind.FORAGE_POINT, (0.0, 0.0, 20.0))
    a = BaseScenario.spawn_agent(world, "guardian_a", (0.0, 0.0, 0.0), cfg, random.Random(2))
    world.component_manager.get_component(a, WorldState).is_hungry = True
    world.step()
    assert world.registry.reserved_by(point) == "guardian_a"

    world.remove_entity(a, claimant="guardian_a")
    world.step()

    assert not world.registry.is_reserved(point)


def test_bootstrap_and_run(tmp_path: Path):
    events_path = tmp_path / "events.jsonl"
    world = bootstrap(_write_config(tmp_path), seed=7, event_log=events_path)

    ticks = run(world, 90)

    assert ticks == 90 or world.session.ended
    cm = world.component_manager
    agents = [cm.get_component(e, AIState) for e in world.entity_manager.all_entities]
    assert len(agents) == 2
    assert all(ai.executor.current_plan() for ai in agents)
    for handle in world.registry.reserved():
        assert world.registry.contains(handle)

    logged = [json.loads(line) for line in events_path.read_text().splitlines()]
    assert any(e["event_type"] == "PLAN_CREATED" for e in logged)


def test_bootstrap_is_reproducible(tmp_path: Path):
    cfg_path = _write_config(tmp_path)
    plans = []
    for _ in range(2):
        world = bootstrap(cfg_path, seed=21, agent_count=1)
        world.events = ListEventSink()
        for ai in (
            world.component_manager.get_component(e, AIState) for e in world.entity_manager.all_entities
        ):
            ai.executor.events = world.events
        run(world, 30)
        plans.append([e.tasks for e in world.events.of_type(PlanCreatedEvent)])
    assert plans[0] == plans[1]
    assert plans[0]


def test_main_writes_snapshot(tmp_path: Path):
    snapshot = tmp_path / "snapshot.json"
    code = main(
        [
            "--config", str(_write_config(tmp_path)),
            "--ticks", "45",
            "--seed", "3",
            "--agents", "3",
            "--snapshot", str(snapshot),
        ]
    )
    assert code == 0
    data = json.loads(snapshot.read_text())
    assert len(data["agents"]) == 3
    assert all(agent["plan"] for agent in data["agents"])
    assert data["tick"] <= 45


def test_event_log_retention_follows_given_config(tmp_path: Path):
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text(
        "world:\n  agent_count: 1\n"
        "logging:\n  global_level: WARNING\n"
        "cache:\n  log_retention_mb: 3\n"
    )
    world = bootstrap(cfg_path, seed=1, event_log=tmp_path / "events.jsonl")
    assert isinstance(world.events, EventLogSink)
    assert world.events.max_bytes == 3 * 1024 * 1024
