"""components package."""

from .ai_state import AIState
from .hunger import HungerClock
from .inventory import Inventory
from .perception_cache import PerceptionCache
from .world_state import WorldState

__all__ = ["AIState", "HungerClock", "Inventory", "PerceptionCache", "WorldState"]
