"""Copy-on-write board model for the Battleship engine."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterator, Mapping

from .ship import BOARD_SIZE, Position, ShipType


@dataclass(frozen=True)
class Cell:
    """State of a single board square."""

    has_ship: bool = False
    is_hit: bool = False
    is_miss: bool = False
    ship_id: ShipType | None = None

    def __post_init__(self) -> None:
        if self.is_hit and self.is_miss:
            raise ValueError("A cell cannot be both hit and missed.")
        if self.is_miss and self.has_ship:
            raise ValueError("A cell holding a ship cannot record a miss.")
        if self.is_hit and not self.has_ship:
            raise ValueError("Only a cell holding a ship can record a hit.")
        if self.has_ship != (self.ship_id is not None):
            raise ValueError("ship_id must be set exactly when the cell holds a ship.")

    @property
    def is_untargeted(self) -> bool:
        return not (self.is_hit or self.is_miss)


EMPTY_CELL = Cell()


@dataclass(frozen=True)
class Board:
    """A 10×10 row-major grid of cells.

    Boards are values: every mutator returns a new instance and leaves the
    receiver untouched, so snapshots taken earlier in a match stay valid.
    """

    cells: tuple[tuple[Cell, ...], ...]

    @property
    def size(self) -> int:
        return len(self.cells)

    def in_bounds(self, position: Position) -> bool:
        return position.in_bounds(self.size)

    def cell(self, position: Position) -> Cell:
        return self.cells[position.row][position.col]

    def positions(self) -> Iterator[Position]:
        for row in range(self.size):
            for col in range(self.size):
                yield Position(row, col)

    def is_untargeted(self, position: Position) -> bool:
        return self.in_bounds(position) and self.cell(position).is_untargeted

    def untargeted_positions(self) -> list[Position]:
        return [pos for pos in self.positions() if self.cell(pos).is_untargeted]

    def targeted_positions(self) -> list[Position]:
        return [pos for pos in self.positions() if not self.cell(pos).is_untargeted]

    def with_cells(self, updates: Mapping[Position, Cell]) -> Board:
        """Return a copy with the given cells replaced."""
        if not updates:
            return self
        rows = [list(row) for row in self.cells]
        for position, cell in updates.items():
            rows[position.row][position.col] = cell
        return Board(tuple(tuple(row) for row in rows))

    def with_ship_at(self, positions: list[Position], ship_id: ShipType | None) -> Board:
        """Set or clear ship ownership on ``positions``."""
        return self.with_cells(
            {
                pos: replace(self.cell(pos), has_ship=ship_id is not None, ship_id=ship_id)
                for pos in positions
            }
        )


def create_empty_board(size: int = BOARD_SIZE) -> Board:
    """Fresh board, every cell empty and untargeted."""
    row = tuple(EMPTY_CELL for _ in range(size))
    return Board(tuple(row for _ in range(size)))
