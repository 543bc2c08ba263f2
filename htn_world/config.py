"""Simple configuration loader for htn_world."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


CONFIG_PATH = Path(__file__).resolve().parents[1] / "config.yaml"


@dataclass
class WorldConfig:
    """Configuration values for the world section."""

    tick_rate: float = 30.0
    seed: int | None = None
    agent_count: int = 2
    max_ticks: int = 1800


@dataclass
class AgentConfig:
    """Tuning for sensing, movement and the per-task state machines."""

    # Sensors
    view_range: float = 50.0
    view_angle: float = 120.0
    attack_range: float = 2.0
    alert_fov_relax_time: float = 2.0

    # Movement
    idle_speed: float = 5.0
    attack_speed: float = 10.0
    patrol_radius: float = 15.0
    stopping_distance: float = 0.5
    arrival_tolerance: float = 0.1

    # Pursuit
    search_duration: float = 3.0
    chase_turn_speed: float = 360.0

    # Look around
    look_wait: float = 2.0
    look_turn_speed: float = 90.0
    look_turn_tolerance: float = 3.0

    # Theft investigation
    theft_search_radius: float = 3.0

    # Foraging
    forage_duration: float = 1.0
    hunger_min: float = 15.0
    hunger_max: float = 25.0

    # Heavy object throw
    throw_range: float = 25.0
    throw_speed: float = 15.0
    throw_upward_boost: float = 4.0
    hand_offset_forward: float = 0.8
    hand_offset_up: float = 1.2
    target_aim_height: float = 0.5


@dataclass
class LoggingConfig:
    """Global and per-module log levels."""

    global_level: str = "INFO"
    module_levels: Dict[str, str] = field(default_factory=dict)


@dataclass
class Config:
    """Top level configuration dataclass."""

    world: WorldConfig
    agent: AgentConfig
    logging: LoggingConfig
    paths: Optional[Dict[str, str]] = None
    cache: Optional[Dict[str, Any]] = None


def _parse_agent(data: dict[str, Any]) -> AgentConfig:
    """Build :class:`AgentConfig` from ``data``, coercing every value to float."""

    known = {f.name for f in fields(AgentConfig)}
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"Unknown agent config keys: {sorted(unknown)}")
    agent = AgentConfig(**{k: float(v) for k, v in data.items()})
    if agent.hunger_min > agent.hunger_max:
        raise ValueError("agent.hunger_min must not exceed agent.hunger_max")
    if agent.search_duration <= 0:
        raise ValueError("agent.search_duration must be positive")
    return agent


def _parse_config(data: dict[str, Any]) -> Config:
    """Convert raw ``data`` into :class:`Config`."""

    world_data = data.get("world", {})
    seed = world_data.get("seed")
    world = WorldConfig(
        tick_rate=float(world_data.get("tick_rate", 30)),
        seed=int(seed) if seed is not None else None,
        agent_count=int(world_data.get("agent_count", 2)),
        max_ticks=int(world_data.get("max_ticks", 1800)),
    )
    if world.tick_rate <= 0:
        raise ValueError("world.tick_rate must be positive")

    agent = _parse_agent(data.get("agent", {}) or {})

    logging_data = data.get("logging", {}) or {}
    log_cfg = LoggingConfig(
        global_level=str(logging_data.get("global_level", "INFO")).upper(),
        module_levels=dict(logging_data.get("module_levels", {}) or {}),
    )

    paths = data.get("paths")
    cache = data.get("cache")

    return Config(world=world, agent=agent, logging=log_cfg, paths=paths, cache=cache)


def load_config(path: Path = CONFIG_PATH) -> Config:
    """Load configuration from ``path`` and return a :class:`Config`."""

    path = Path(path)
    if path.is_file():
        raw = yaml.safe_load(path.read_text()) or {}
    else:
        raw = {}
    return _parse_config(raw)


# Load configuration at module import time.
CONFIG = load_config()


__all__ = [
    "CONFIG",
    "Config",
    "WorldConfig",
    "AgentConfig",
    "LoggingConfig",
    "load_config",
]
