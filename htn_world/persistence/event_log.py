from __future__ import annotations

import json
import gzip
import logging
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, List

import yaml

from ..config import CONFIG_PATH
from ..core.events import event_payload, event_type

logger = logging.getLogger(__name__)

DEFAULT_RETENTION_MB = 50


def retention_bytes(cache: Dict[str, Any] | None) -> int:
    """Return the rotation threshold for a parsed ``cache`` config section."""
    try:
        retention_mb = int((cache or {}).get("log_retention_mb", DEFAULT_RETENTION_MB))
    except (AttributeError, TypeError, ValueError) as exc:
        logger.warning("Invalid log retention %r: %s", cache, exc)
        retention_mb = DEFAULT_RETENTION_MB
    return retention_mb * 1024 * 1024


def _log_retention_bytes(config_path: str | Path = CONFIG_PATH) -> int:
    """Return log rotation threshold in bytes from ``config.yaml``."""
    path = Path(config_path)
    cache = None
    if path.exists():
        try:
            with open(path, "r", encoding="utf-8") as fh:
                cache = (yaml.safe_load(fh) or {}).get("cache")
        except (OSError, yaml.YAMLError, AttributeError) as exc:
            logger.warning("Could not read log retention from %s: %s", path, exc)
    return retention_bytes(cache)


def _rotate_log(path: Path) -> Path:
    """Compress ``path`` into a timestamped ``.gz`` and clear it for new events."""
    ts = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    rotated = path.with_name(f"{path.stem}_{ts}{path.suffix}")
    path.rename(rotated)
    gz_path = rotated.with_suffix(rotated.suffix + ".gz")
    with open(rotated, "rb") as src, gzip.open(gz_path, "wb") as dst:
        shutil.copyfileobj(src, dst)
    rotated.unlink()
    logger.info("Rotated event log to %s", gz_path)
    return gz_path


def append_event(
    dest: str | Path | List[Dict[str, Any]],
    tick: int,
    event_type: str,
    data: Any,
    max_bytes: int | None = None,
) -> None:
    """Append an event to ``dest`` which may be a path or in-memory list."""

    event = {"tick": tick, "event_type": event_type, "data": data}
    if isinstance(dest, list):
        dest.append(event)
        return

    p = Path(dest)
    if not p.parent.exists():
        p.parent.mkdir(parents=True, exist_ok=True)

    limit = max_bytes if max_bytes is not None else _log_retention_bytes()
    if p.exists() and p.stat().st_size >= limit:
        _rotate_log(p)

    with p.open("a", encoding="utf-8") as fh:
        fh.write(json.dumps(event, ensure_ascii=False) + "\n")


def iter_events(path: str | Path) -> Iterator[Dict[str, Any]]:
    """Yield events from ``path`` in the order they were logged."""

    p = Path(path)
    if not p.exists():
        return

    with p.open("r", encoding="utf-8") as fh:
        for line in fh:
            line = line.strip()
            if not line:
                continue
            try:
                event = json.loads(line)
            except json.JSONDecodeError:
                logger.warning("Skipping malformed event line in %s", p)
                continue
            yield event


class EventLogSink:
    """Event sink writing every engine event as one JSON line.

    The rotation threshold is read once on construction unless given.
    """

    def __init__(self, path: str | Path, max_bytes: int | None = None) -> None:
        self.path = Path(path)
        self.max_bytes = max_bytes if max_bytes is not None else _log_retention_bytes()

    def emit(self, event: Any) -> None:
        append_event(self.path, event.tick, event_type(event), event_payload(event), self.max_bytes)

    def __iter__(self) -> Iterator[Dict[str, Any]]:
        yield from iter_events(self.path)


__all__ = [
    "EventLogSink",
    "append_event",
    "iter_events",
    "retention_bytes",
]
