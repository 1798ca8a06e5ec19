"""Shot resolution against a board and its fleet."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from broadside.telemetry import get_meter, get_tracer

from .board import Board
from .ship import Fleet, Position, Ship

logger = logging.getLogger(__name__)
tracer = get_tracer("broadside.engine.attack")
meter = get_meter("broadside.engine.attack")

SHOT_COUNTER = meter.create_counter(
    "broadside_engine_shots",
    unit="1",
    description="Shots received by a board",
)


@dataclass(frozen=True)
class AttackResult:
    """Outcome of one shot.

    ``repeated`` marks a shot at an already-targeted cell; the board and
    fleet are then the caller's own objects, unchanged.
    """

    board: Board
    fleet: Fleet
    hit: bool = False
    sunk: bool = False
    ship: Ship | None = None
    repeated: bool = False

    @property
    def outcome(self) -> str:
        if self.repeated:
            return "repeated"
        if self.sunk:
            return "sunk"
        return "hit" if self.hit else "miss"


def make_attack(board: Board, fleet: Fleet, target: Position) -> AttackResult:
    """Fire at ``target`` and return fresh board/fleet values."""
    with tracer.start_as_current_span("attack.make_attack") as span:
        span.set_attribute("shot.row", target.row)
        span.set_attribute("shot.col", target.col)
        if not board.in_bounds(target):
            logger.error("shot_out_of_bounds", extra={"row": target.row, "col": target.col})
            raise ValueError(f"Shot {target} is outside the board.")

        cell = board.cell(target)
        if not cell.is_untargeted:
            span.set_attribute("shot.outcome", "repeated")
            SHOT_COUNTER.add(1, attributes={"outcome": "repeated"})
            logger.warning("shot_repeated", extra={"row": target.row, "col": target.col})
            return AttackResult(board=board, fleet=fleet, repeated=True)

        if cell.has_ship and cell.ship_id is not None:
            new_board = board.with_cells({target: replace(cell, is_hit=True)})
            ship = fleet.get(cell.ship_id).with_hit(target)
            result = AttackResult(
                board=new_board,
                fleet=fleet.with_ship(ship),
                hit=True,
                sunk=ship.is_sunk,
                ship=ship,
            )
        else:
            new_board = board.with_cells({target: replace(cell, is_miss=True)})
            result = AttackResult(board=new_board, fleet=fleet)

        span.set_attribute("shot.outcome", result.outcome)
        SHOT_COUNTER.add(1, attributes={"outcome": result.outcome})
        logger.debug(
            "shot_resolved",
            extra={
                "row": target.row,
                "col": target.col,
                "outcome": result.outcome,
                "ship_type": result.ship.id.name if result.ship else None,
            },
        )
        return result


def is_game_over(fleet: Fleet) -> bool:
    """True once every ship in ``fleet`` has all of its segments hit."""
    return fleet.all_sunk
