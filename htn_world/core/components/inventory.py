"""Inventory component: objects the agent carries or has claimed."""

from __future__ import annotations

from dataclasses import dataclass

from ..resources.registry import ResourceHandle


@dataclass
class Inventory:
    """Agent-local ownership that survives replanning.

    ``held`` is a heavy object physically attached to the agent. It is never
    dropped on cancellation; only a throw lets go of it. ``reserved_forage``
    is a soft claim on a forage point that must be released on cancellation.
    """

    held: ResourceHandle | None = None
    reserved_forage: ResourceHandle | None = None


__all__ = ["Inventory"]
