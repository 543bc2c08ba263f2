"""Simple world container for core managers and shared simulation objects."""

from __future__ import annotations

from typing import Any, TYPE_CHECKING

from .events import EventSink, NullEventSink
from .resources.registry import ResourceRegistry
from .session import SessionFlow

if TYPE_CHECKING:
    from .component_manager import ComponentManager
    from .entity_manager import EntityManager
    from .systems_manager import SystemsManager
    from .time_manager import TimeManager


class World:
    """Lightweight holder for manager references and shared state.

    The registry, session and event sink are owned here and handed to the
    systems that need them; nothing reaches them through module globals.
    """

    def __init__(self) -> None:
        # These managers will be populated during the bootstrapping phase.
        self.entity_manager: "EntityManager" | None = None
        self.component_manager: "ComponentManager" | None = None
        self.systems_manager: "SystemsManager" | None = None
        self.time_manager: "TimeManager" | None = None

        self.registry = ResourceRegistry()
        self.session = SessionFlow()
        self.events: EventSink = NullEventSink()

        # Hostile target and projectile collaborator, set by the scenario
        self.target: Any | None = None
        self.projectiles: Any | None = None

    # ------------------------------------------------------------------
    # Entity operations
    # ------------------------------------------------------------------
    def spawn(self, name: str, *components: Any) -> int:
        """Create an entity called ``name`` carrying ``components``."""

        if self.entity_manager is None or self.component_manager is None:
            raise RuntimeError("World managers are not initialised")
        entity_id = self.entity_manager.create_entity(name)
        for component in components:
            self.component_manager.add_component(entity_id, component)
        return entity_id

    def remove_entity(self, entity_id: int, claimant: Any = None) -> None:
        """Destroy ``entity_id`` and drop any reservations held by ``claimant``."""

        if claimant is not None:
            self.registry.release_all(claimant)
        if self.component_manager is not None:
            self.component_manager.remove_entity(entity_id)
        if self.entity_manager is not None:
            self.entity_manager.destroy_entity(entity_id)

    # ------------------------------------------------------------------
    # System operations
    # ------------------------------------------------------------------
    def register_system(self, system: Any) -> None:
        if self.systems_manager is not None:
            self.systems_manager.register(system)

    def unregister_system(self, system: Any) -> None:
        if self.systems_manager is not None:
            self.systems_manager.unregister(system)

    def step(self) -> int:
        """Run every system for the current tick, then advance the clock."""

        tm = self.time_manager
        tick = tm.tick_counter if tm is not None else 0
        if self.systems_manager is not None:
            self.systems_manager.update(self, tick)
        if tm is not None:
            tm.advance()
        return tick


__all__ = ["World"]
