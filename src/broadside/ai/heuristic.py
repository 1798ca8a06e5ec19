"""Hunt-around-the-last-hit move source that needs nothing external."""

from __future__ import annotations

import logging
import random
from typing import Sequence

from broadside.engine.board import Board
from broadside.engine.ship import Position

from .base import MoveSource

logger = logging.getLogger(__name__)

EMERGENCY_TARGET = Position(0, 0)


def hunt_targets(board: Board, hits: Sequence[Position]) -> list[Position]:
    """Untargeted orthogonal neighbours of the most recent hit."""
    if not hits:
        return []
    return [pos for pos in hits[-1].orthogonal_neighbours() if board.is_untargeted(pos)]


def choose_heuristic_target(
    board: Board, hits: Sequence[Position], rng: random.Random
) -> Position:
    available = board.untargeted_positions()
    if not available:
        logger.warning("No untargeted cells left; returning emergency target")
        return EMERGENCY_TARGET

    around_hit = hunt_targets(board, hits)
    if around_hit:
        return rng.choice(around_hit)
    return rng.choice(available)


class HeuristicMoveSource(MoveSource):
    """Random search that switches to the neighbours of its last hit."""

    kind = "heuristic"

    def choose_target(self, board: Board) -> Position:
        return choose_heuristic_target(board, self.memory.hits, self._rng)
