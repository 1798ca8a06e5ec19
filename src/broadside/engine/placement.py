"""Ship placement rules and the randomized fleet layout."""

from __future__ import annotations

import logging
import random

from broadside.telemetry import get_meter, get_tracer

from .board import Board, create_empty_board
from .ship import Fleet, Position, Ship, create_fleet, footprint

logger = logging.getLogger(__name__)
tracer = get_tracer("broadside.engine.placement")
meter = get_meter("broadside.engine.placement")

PLACEMENT_COUNTER = meter.create_counter(
    "broadside_engine_ship_placements",
    unit="1",
    description="Number of ships written onto a board",
)

RANDOM_ATTEMPTS = 100


class PlacementError(RuntimeError):
    """Raised when a fleet cannot be laid out on the board at all."""


def is_valid_placement(board: Board, ship: Ship, origin: Position, horizontal: bool) -> bool:
    """Check bounds, overlap, and that no other ship touches the footprint (diagonals included)."""
    cells = footprint(ship.size, origin, horizontal)
    if not all(board.in_bounds(pos) for pos in cells):
        return False

    for pos in cells:
        if board.cell(pos).has_ship:
            return False
        for neighbour in pos.surrounding():
            if not board.in_bounds(neighbour):
                continue
            other = board.cell(neighbour)
            if other.has_ship and other.ship_id is not ship.id:
                return False
    return True


def place_ship(board: Board, ship: Ship, origin: Position, horizontal: bool) -> tuple[Board, Ship]:
    """Write ``ship`` onto a copy of ``board``.

    The placement is not re-validated; gate calls with :func:`is_valid_placement`.
    """
    cells = footprint(ship.size, origin, horizontal)
    new_board = board.with_ship_at(cells, ship.id)
    new_ship = ship.placed_at(cells, horizontal)
    PLACEMENT_COUNTER.add(1, attributes={"ship_type": ship.id.value})
    logger.debug(
        "ship_placed",
        extra={
            "ship_type": ship.id.name,
            "horizontal": horizontal,
            "row": origin.row,
            "col": origin.col,
        },
    )
    return new_board, new_ship


def remove_ship(board: Board, ship: Ship) -> Board:
    """Clear the ship's recorded positions on a copy of ``board``."""
    return board.with_ship_at(list(ship.positions), None)


def _scan_horizontal(board: Board, ship: Ship) -> Position | None:
    for pos in board.positions():
        if is_valid_placement(board, ship, pos, True):
            return pos
    return None


def place_ships_randomly(
    fleet: Fleet | None = None, rng: random.Random | None = None
) -> tuple[Board, Fleet]:
    """Lay out a whole fleet on an empty board.

    Each ship gets up to ``RANDOM_ATTEMPTS`` random draws; after that the
    board is scanned row by row for the first horizontal slot.
    """
    rng = rng or random.Random()
    fleet = fleet or create_fleet()
    with tracer.start_as_current_span("placement.place_ships_randomly") as span:
        board = create_empty_board()
        scanned = 0
        for ship in fleet:
            candidate = ship.unplaced()
            origin: Position | None = None
            horizontal = True
            for _ in range(RANDOM_ATTEMPTS):
                draw = Position(rng.randrange(board.size), rng.randrange(board.size))
                draw_horizontal = rng.random() < 0.5
                if is_valid_placement(board, candidate, draw, draw_horizontal):
                    origin, horizontal = draw, draw_horizontal
                    break

            if origin is None:
                scanned += 1
                origin = _scan_horizontal(board, candidate)
                horizontal = True
                if origin is None:
                    logger.error("placement_exhausted", extra={"ship_type": ship.id.name})
                    raise PlacementError(f"No legal slot left for the {ship.name}.")

            board, placed = place_ship(board, candidate, origin, horizontal)
            fleet = fleet.with_ship(placed)

        span.set_attribute("placement.scan_fallbacks", scanned)
        logger.debug("random_fleet_placed", extra={"scan_fallbacks": scanned})
        return board, fleet
