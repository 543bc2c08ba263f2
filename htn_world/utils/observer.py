"""Runtime observability helpers: agent snapshots and tick timing."""

from __future__ import annotations

import json
import logging
import math
import time
from collections import deque
from dataclasses import asdict
from pathlib import Path
from typing import Any, Deque, Dict, List

from ..core.components.ai_state import AIState
from ..core.components.world_state import WorldState
from ..systems.movement.locomotion import KinematicLocomotion

logger = logging.getLogger(__name__)

# Rolling history of the last 1000 tick durations in seconds
_TICK_HISTORY_LEN = 1000
_tick_durations: Deque[float] = deque(maxlen=_TICK_HISTORY_LEN)

# Track whether we've already warned about missing managers
_missing_manager_warned: bool = False


def record_tick(duration: float) -> None:
    """Append a tick ``duration`` in seconds to the rolling history."""

    _tick_durations.append(duration)


def tick_stats() -> Dict[str, float]:
    """Average tick time and the implied ticks per second."""

    if not _tick_durations:
        return {"ticks": 0, "avg_ms": 0.0, "tps": 0.0}
    avg = sum(_tick_durations) / len(_tick_durations)
    return {
        "ticks": len(_tick_durations),
        "avg_ms": avg * 1000.0,
        "tps": 1.0 / avg if avg > 0 else math.inf,
    }


def install_tick_observer(tm: Any) -> None:
    """Wrap ``tm.advance`` and ``tm.sleep_until_next_tick`` to record tick durations."""

    if tm is None or hasattr(tm, "_observer_wrapped"):
        return

    last = time.perf_counter()

    def wrap(original: Any) -> Any:
        def wrapper() -> None:
            nonlocal last
            original()
            now = time.perf_counter()
            record_tick(now - last)
            last = now

        return wrapper

    tm.advance = wrap(tm.advance)  # type: ignore[assignment]
    tm.sleep_until_next_tick = wrap(tm.sleep_until_next_tick)  # type: ignore[assignment]
    setattr(tm, "_observer_wrapped", True)


def warn_missing_managers(world: Any) -> None:
    """Log a warning once if any ``*_manager`` attribute is ``None``."""

    global _missing_manager_warned
    if _missing_manager_warned:
        return

    missing = [
        name
        for name in dir(world)
        if name.endswith("_manager") and getattr(world, name, None) is None
    ]
    if missing:
        logger.warning("World has uninitialized managers: %s", ", ".join(sorted(missing)))
        _missing_manager_warned = True


def _json_safe(value: Any) -> Any:
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, (list, tuple)):
        return [_json_safe(v) for v in value]
    if isinstance(value, dict):
        return {k: _json_safe(v) for k, v in value.items()}
    return value


def agent_snapshot(world: Any) -> List[Dict[str, Any]]:
    """Describe every agent the way a debug overlay would show it."""

    em = getattr(world, "entity_manager", None)
    cm = getattr(world, "component_manager", None)
    if em is None or cm is None:
        return []

    out: List[Dict[str, Any]] = []
    for entity_id in list(em.all_entities.keys()):
        ai = cm.get_component(entity_id, AIState)
        if ai is None:
            continue
        executor = ai.executor
        state = cm.get_component(entity_id, WorldState)
        loco = cm.get_component(entity_id, KinematicLocomotion)
        out.append(
            {
                "entity": entity_id,
                "name": ai.name,
                "position": list(loco.position) if loco is not None else None,
                "plan": executor.current_plan(),
                "task_index": executor.current_task_index(),
                "task": executor.current_task_name(),
                "step": executor.current_execution_step(),
                "sub_steps": [
                    {"name": s.name, "status": s.status.value}
                    for s in executor.current_sub_steps()
                ],
                "world_state": asdict(state) if state is not None else {},
            }
        )
    return _json_safe(out)


def dump_snapshot(world: Any, path: str | Path) -> None:
    """Write the agent snapshot and tick stats to ``path`` as JSON."""

    tm = getattr(world, "time_manager", None)
    session = getattr(world, "session", None)
    data = {
        "tick": tm.tick_counter if tm is not None else 0,
        "outcome": session.outcome.value if session is not None and session.outcome else None,
        "timing": _json_safe(tick_stats()),
        "agents": agent_snapshot(world),
    }
    p = Path(path)
    if not p.parent.exists():
        p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("w", encoding="utf-8") as fh:
        json.dump(data, fh, indent=2)


__all__ = [
    "agent_snapshot",
    "dump_snapshot",
    "install_tick_observer",
    "record_tick",
    "tick_stats",
    "warn_missing_managers",
    "_tick_durations",
]
