"""Common interface for anything that picks the next target for a side."""

from __future__ import annotations

import logging
import random
from abc import ABC, abstractmethod

from broadside.engine.board import Board
from broadside.engine.ship import Position

from .memory import MoveMemory

logger = logging.getLogger(__name__)


class MoveSource(ABC):
    """Proposes attack coordinates for one side.

    ``choose_target`` receives the defender's board and must only look at
    hit/miss state. Outcomes come back through :meth:`record_outcome`.
    """

    kind: str = "abstract"

    def __init__(self, rng: random.Random | None = None) -> None:
        self.memory = MoveMemory()
        self._rng = rng or random.Random()

    @abstractmethod
    def choose_target(self, board: Board) -> Position:
        """Return the next position to fire at."""

    def record_outcome(
        self, position: Position, hit: bool, sunk: bool, ship_name: str | None = None
    ) -> None:
        self.memory.record(position, hit, sunk, ship_name)

    def reset(self) -> None:
        """Forget everything learned during the current match.

        A fresh memory replaces the old one, so a request already running keeps
        reading the memory it started with.
        """
        self.memory = MoveMemory()
        logger.debug("move_source_reset kind=%s", self.kind)
