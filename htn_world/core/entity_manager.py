"""Entity bookkeeping for the simulation."""

from __future__ import annotations

from typing import Dict, Optional


class EntityManager:
    """Hand out entity ids and remember the optional display name of each."""

    def __init__(self) -> None:
        self._next_id: int = 0
        # Mapping of entity_id -> display name (may be empty)
        self._names: Dict[int, str] = {}

    # ------------------------------------------------------------------
    # Creation / Destruction
    # ------------------------------------------------------------------
    def create_entity(self, name: str = "") -> int:
        """Create a new entity and return its unique ID."""

        self._next_id += 1
        entity_id = self._next_id
        self._names[entity_id] = name
        return entity_id

    def destroy_entity(self, entity_id: int) -> None:
        self._names.pop(entity_id, None)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    def has_entity(self, entity_id: int) -> bool:
        return entity_id in self._names

    def name_of(self, entity_id: int) -> str:
        return self._names[entity_id]

    def find(self, name: str) -> Optional[int]:
        """Return the first entity called ``name``, or ``None``."""

        for entity_id, entity_name in self._names.items():
            if entity_name == name:
                return entity_id
        return None

    @property
    def all_entities(self) -> Dict[int, str]:
        return self._names


__all__ = ["EntityManager"]
