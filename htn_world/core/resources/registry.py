"""Shared catalogue of contested world objects with a reservation protocol.

Agents are ticked one after another, so the registry needs no locking: a
call to :meth:`ResourceRegistry.nearest_unreserved` checks and claims in one
step from the caller's point of view.

A handle moves through three states::

    listed, unreserved  --reserve-->  listed, reserved  --consume-->  gone
            ^                                |
            +------------release-------------+
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Hashable, Iterable, List, Optional

from ..geometry import Vec3, sqr_length, sub

logger = logging.getLogger(__name__)


class ResourceKind(Enum):
    """Categories of contested objects."""

    HEAVY_OBJECT = "heavy_object"
    FORAGE_POINT = "forage_point"


@dataclass(frozen=True, slots=True)
class ResourceHandle:
    """Opaque reference to one registered world object."""

    id: int
    kind: ResourceKind
    position: Vec3


class ResourceRegistry:
    """Track heavy objects and forage points and who has claimed them."""

    def __init__(self) -> None:
        self._ids = itertools.count(1)
        self._items: Dict[ResourceKind, List[ResourceHandle]] = {kind: [] for kind in ResourceKind}
        # Maps handle -> claimant key of the agent holding it
        self._reservations: Dict[ResourceHandle, Hashable] = {}

    # ------------------------------------------------------------------
    # Population
    # ------------------------------------------------------------------
    def add(self, kind: ResourceKind, position: Vec3) -> ResourceHandle:
        """Register a new object of ``kind`` at ``position`` and return its handle."""

        handle = ResourceHandle(next(self._ids), kind, tuple(float(c) for c in position))
        self._items[kind].append(handle)
        return handle

    def add_many(self, kind: ResourceKind, positions: Iterable[Vec3]) -> List[ResourceHandle]:
        return [self.add(kind, pos) for pos in positions]

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def list(self, kind: ResourceKind) -> List[ResourceHandle]:
        """Return a copy of every listed handle of ``kind``, reserved or not."""

        return list(self._items[kind])

    def contains(self, handle: ResourceHandle) -> bool:
        return handle in self._items[handle.kind]

    def is_reserved(self, handle: ResourceHandle) -> bool:
        return handle in self._reservations

    def reserved_by(self, handle: ResourceHandle) -> Optional[Hashable]:
        return self._reservations.get(handle)

    def reserved(self) -> List[ResourceHandle]:
        return list(self._reservations)

    def nearest(self, kind: ResourceKind, from_position: Vec3) -> Optional[ResourceHandle]:
        """Closest listed handle of ``kind`` regardless of reservations."""

        return self._closest(self._items[kind], from_position)

    def has_unreserved(self, kind: ResourceKind) -> bool:
        return any(h not in self._reservations for h in self._items[kind])

    def nearest_unreserved(
        self, kind: ResourceKind, from_position: Vec3, claimant: Hashable
    ) -> Optional[ResourceHandle]:
        """Find the closest free handle of ``kind`` and reserve it for ``claimant``.

        A handle already held by ``claimant`` counts as free for that claimant,
        so asking twice returns the same object instead of claiming a second.
        """

        candidates = [
            h for h in self._items[kind] if self._reservations.get(h, claimant) == claimant
        ]
        best = self._closest(candidates, from_position)
        if best is not None:
            self._reservations[best] = claimant
            logger.debug("Reserved %s %s for %s", kind.value, best.id, claimant)
        return best

    # ------------------------------------------------------------------
    # Reservation protocol
    # ------------------------------------------------------------------
    def reserve(self, handle: ResourceHandle, claimant: Hashable) -> bool:
        """Claim ``handle`` for ``claimant``.

        Idempotent for the current holder. Returns ``False`` without changing
        anything when the handle is gone or held by a different claimant.
        """

        if not self.contains(handle):
            return False
        holder = self._reservations.setdefault(handle, claimant)
        return holder == claimant

    def release(self, handle: Optional[ResourceHandle], claimant: Optional[Hashable] = None) -> None:
        """Drop the reservation on ``handle``; the object stays listed.

        When ``claimant`` is given, only that claimant's reservation is dropped.
        """

        if handle is None or handle not in self._reservations:
            return
        if claimant is not None and self._reservations[handle] != claimant:
            return
        del self._reservations[handle]
        logger.debug("Released %s %s", handle.kind.value, handle.id)

    def consume(self, handle: ResourceHandle) -> None:
        """Remove ``handle`` from the catalogue and from the reservation set."""

        items = self._items[handle.kind]
        if handle not in items:
            raise KeyError(f"Unknown or already consumed resource {handle.id}")
        items.remove(handle)
        self._reservations.pop(handle, None)
        logger.debug("Consumed %s %s", handle.kind.value, handle.id)

    def release_all(self, claimant: Hashable) -> None:
        """Drop every reservation held by ``claimant`` (used on agent removal)."""

        for handle in [h for h, c in self._reservations.items() if c == claimant]:
            del self._reservations[handle]

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _closest(handles: Iterable[ResourceHandle], from_position: Vec3) -> Optional[ResourceHandle]:
        best: Optional[ResourceHandle] = None
        best_sqr = float("inf")
        for handle in handles:
            d = sqr_length(sub(handle.position, from_position))
            if d < best_sqr:
                best_sqr = d
                best = handle
        return best


__all__ = ["ResourceKind", "ResourceHandle", "ResourceRegistry"]
