# htn_world/main.py
"""World bootstrap and headless tick loop."""

from __future__ import annotations

import argparse
import logging
import random
from pathlib import Path
from typing import Optional, Sequence

from .config import CONFIG, CONFIG_PATH, Config, LoggingConfig, load_config
from .core.component_manager import ComponentManager
from .core.entity_manager import EntityManager
from .core.systems_manager import SystemsManager
from .core.time_manager import TimeManager
from .core.world import World
from .persistence.event_log import EventLogSink, retention_bytes
from .scenarios.cave_scenario import CaveScenario, TargetSystem
from .systems.ai.plan_execution_system import HTNAgentSystem
from .systems.movement.locomotion import LocomotionSystem
from .systems.movement.projectile_system import ProjectileSystem
from .systems.perception.perception_system import PerceptionSystem
from .utils.observer import dump_snapshot, install_tick_observer, tick_stats, warn_missing_managers

logger = logging.getLogger(__name__)


def configure_logging(log_cfg: LoggingConfig = CONFIG.logging) -> None:
    """Apply the global level and per-module overrides from ``log_cfg``."""

    numeric_level = getattr(logging, str(log_cfg.global_level).upper(), None)
    invalid_global = not isinstance(numeric_level, int)
    if invalid_global:
        numeric_level = logging.INFO
    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        force=True,
    )
    if invalid_global:
        logger.warning("Invalid global log level '%s' in config, using INFO.", log_cfg.global_level)
    for module_name, level_str in log_cfg.module_levels.items():
        module_numeric_level = getattr(logging, str(level_str).upper(), None)
        if isinstance(module_numeric_level, int):
            logging.getLogger(module_name).setLevel(module_numeric_level)
        else:
            logger.warning("Invalid log level '%s' for module '%s' in config.", level_str, module_name)


def bootstrap(
    config_path: str | Path = CONFIG_PATH,
    agent_count: Optional[int] = None,
    seed: Optional[int] = None,
    event_log: str | Path | None = None,
) -> World:
    """Build a ready-to-run world from the configuration at ``config_path``."""

    cfg: Config = load_config(Path(config_path))
    if agent_count is None:
        agent_count = cfg.world.agent_count
    if seed is None:
        seed = cfg.world.seed
    if event_log is None and cfg.paths:
        event_log = cfg.paths.get("event_log")

    world = World()
    world.entity_manager = EntityManager()
    world.component_manager = ComponentManager()
    world.time_manager = TimeManager(cfg.world.tick_rate)
    world.systems_manager = SystemsManager()
    if event_log:
        world.events = EventLogSink(event_log, max_bytes=retention_bytes(cfg.cache))
        logger.info("[Bootstrap] Logging events to %s", event_log)

    projectiles = ProjectileSystem(world)
    world.projectiles = projectiles

    for system in (
        TargetSystem(world),
        PerceptionSystem(world, cfg.agent),
        HTNAgentSystem(world, cfg.agent),
        LocomotionSystem(world),
        projectiles,
    ):
        world.register_system(system)

    rng = random.Random(seed)
    scenario = CaveScenario(agent_count, rng, cfg.agent)
    scenario.setup(world)
    logger.info("[Bootstrap] Scenario '%s' with %d agents (seed=%s)", scenario.get_name(), agent_count, seed)

    warn_missing_managers(world)
    return world


def run(world: World, max_ticks: int, realtime: bool = False) -> int:
    """Tick ``world`` until ``max_ticks`` or the session ends; return ticks run."""

    tm = world.time_manager
    install_tick_observer(tm)
    ticks = 0
    try:
        while ticks < max_ticks and not world.session.ended:
            if realtime:
                world.systems_manager.update(world, tm.tick_counter)
                tm.sleep_until_next_tick()
            else:
                world.step()
            ticks += 1
    except KeyboardInterrupt:
        logger.info("KeyboardInterrupt caught. Shutting down...")
    return ticks


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="htn-world", description="Run the HTN guardian simulation headless.")
    parser.add_argument("--config", type=Path, default=CONFIG_PATH, help="YAML configuration file")
    parser.add_argument("--ticks", type=int, default=None, help="maximum ticks to run")
    parser.add_argument("--agents", type=int, default=None, help="number of guardian agents")
    parser.add_argument("--seed", type=int, default=None, help="random seed for a reproducible run")
    parser.add_argument("--snapshot", type=Path, default=None, help="write the final agent snapshot as JSON")
    parser.add_argument("--realtime", action="store_true", help="pace ticks to the configured tick rate")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)
    cfg = load_config(args.config)
    configure_logging(cfg.logging)

    world = bootstrap(args.config, agent_count=args.agents, seed=args.seed)
    max_ticks = args.ticks if args.ticks is not None else cfg.world.max_ticks
    ticks = run(world, max_ticks, realtime=args.realtime)

    outcome = world.session.outcome.value if world.session.outcome else "undecided"
    stats = tick_stats()
    logger.info("Ran %d ticks, outcome: %s (avg %.2f ms/tick)", ticks, outcome, stats["avg_ms"])

    if args.snapshot is not None:
        dump_snapshot(world, args.snapshot)
        logger.info("Snapshot written to %s", args.snapshot)
    return 0


__all__ = ["bootstrap", "build_arg_parser", "configure_logging", "main", "run"]


if __name__ == "__main__":
    raise SystemExit(main())
