# Component Manager for ECS-style storage.
from __future__ import annotations

from typing import Any, Dict, Iterator, Optional, Tuple, Type, TypeVar

T = TypeVar("T")


class ComponentManager:
    """Store at most one component instance per class for each entity."""

    def __init__(self) -> None:
        # Maps entity id to {component class name: component instance}
        self._components: Dict[int, Dict[str, Any]] = {}

    # ------------------------------------------------------------------
    # Component access API
    # ------------------------------------------------------------------
    def add_component(self, entity_id: int, component: Any) -> None:
        """Attach ``component`` to ``entity_id``, replacing one of the same class."""
        self._components.setdefault(entity_id, {})[type(component).__name__] = component

    def get_component(self, entity_id: int, component_cls: Type[T]) -> Optional[T]:
        comps = self._components.get(entity_id)
        if not comps:
            return None
        return comps.get(component_cls.__name__)  # type: ignore[return-value]

    def remove_component(self, entity_id: int, component_cls: Type[T]) -> Optional[T]:
        """Remove and return the component of the given class from an entity."""
        comps = self._components.get(entity_id)
        if not comps:
            return None
        return comps.pop(component_cls.__name__, None)  # type: ignore[return-value]

    def remove_entity(self, entity_id: int) -> None:
        self._components.pop(entity_id, None)

    def entities_with(self, component_cls: Type[T]) -> Iterator[Tuple[int, T]]:
        """Yield ``(entity_id, component)`` for every entity carrying ``component_cls``."""
        name = component_cls.__name__
        for entity_id, comps in list(self._components.items()):
            comp = comps.get(name)
            if comp is not None:
                yield entity_id, comp


__all__ = ["ComponentManager"]
