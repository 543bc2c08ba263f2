"""Win/lose outcome broadcaster for one play session."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


class Outcome(Enum):
    WIN = "win"
    LOSE = "lose"


class SessionFlow:
    """Announce the end of a session to plain callables.

    Owned by the host and handed to whoever can end the session. The first
    outcome sticks; later calls are ignored.
    """

    def __init__(self) -> None:
        self.outcome: Optional[Outcome] = None
        self._listeners: List[Callable[[Outcome], None]] = []

    def subscribe(self, listener: Callable[[Outcome], None]) -> None:
        self._listeners.append(listener)

    @property
    def ended(self) -> bool:
        return self.outcome is not None

    def win(self) -> None:
        self._end(Outcome.WIN)

    def lose(self) -> None:
        self._end(Outcome.LOSE)

    def _end(self, outcome: Outcome) -> None:
        if self.outcome is not None:
            return
        self.outcome = outcome
        logger.info("Session ended: %s", outcome.value)
        for listener in list(self._listeners):
            listener(outcome)


__all__ = ["Outcome", "SessionFlow"]
