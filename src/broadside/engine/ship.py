"""Ship and fleet domain model for the Battleship engine."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterator

BOARD_SIZE = 10
COLUMN_LABELS = "ABCDEFGHIJ"


@dataclass(frozen=True)
class Position:
    """Immutable board coordinate."""

    row: int
    col: int

    def in_bounds(self, size: int = BOARD_SIZE) -> bool:
        return 0 <= self.row < size and 0 <= self.col < size

    @property
    def label(self) -> str:
        """Human readable form, column letter then row number (e.g. ``J10``)."""
        return f"{COLUMN_LABELS[self.col]}{self.row + 1}"

    def orthogonal_neighbours(self) -> list[Position]:
        """Up, down, left and right neighbours, unfiltered."""
        return [
            Position(self.row - 1, self.col),
            Position(self.row + 1, self.col),
            Position(self.row, self.col - 1),
            Position(self.row, self.col + 1),
        ]

    def surrounding(self) -> list[Position]:
        """The 8-neighbourhood of this position, unfiltered."""
        return [
            Position(self.row + d_row, self.col + d_col)
            for d_row in (-1, 0, 1)
            for d_col in (-1, 0, 1)
            if d_row or d_col
        ]


class ShipType(Enum):
    """All supported ship classes, in canonical placement order."""

    CARRIER = "carrier"
    BATTLESHIP = "battleship"
    CRUISER = "cruiser"
    SUBMARINE = "submarine"
    DESTROYER = "destroyer"

    @property
    def length(self) -> int:
        """Return the number of contiguous cells the ship occupies."""
        return _SHIP_LENGTHS[self]

    @property
    def display_name(self) -> str:
        return self.name.title()


_SHIP_LENGTHS = {
    ShipType.CARRIER: 5,
    ShipType.BATTLESHIP: 4,
    ShipType.CRUISER: 3,
    ShipType.SUBMARINE: 3,
    ShipType.DESTROYER: 2,
}


def footprint(size: int, origin: Position, horizontal: bool) -> list[Position]:
    """Cells covered by a ship of ``size`` starting at ``origin``."""
    if horizontal:
        return [Position(origin.row, origin.col + offset) for offset in range(size)]
    return [Position(origin.row + offset, origin.col) for offset in range(size)]


@dataclass(frozen=True)
class Ship:
    """A single ship; ``hits[i]`` tracks whether ``positions[i]`` was struck."""

    id: ShipType
    name: str
    size: int
    positions: tuple[Position, ...] = ()
    is_horizontal: bool = True
    is_placed: bool = False
    hits: tuple[bool, ...] = field(default=())

    def __post_init__(self) -> None:
        if not self.hits:
            object.__setattr__(self, "hits", (False,) * self.size)
        if len(self.hits) != self.size:
            raise ValueError(f"{self.name} needs {self.size} hit slots, got {len(self.hits)}.")

    @classmethod
    def of_type(cls, ship_type: ShipType) -> Ship:
        return cls(id=ship_type, name=ship_type.display_name, size=ship_type.length)

    @property
    def is_sunk(self) -> bool:
        return all(self.hits)

    def placed_at(self, positions: list[Position], horizontal: bool) -> Ship:
        return replace(
            self,
            positions=tuple(positions),
            is_horizontal=horizontal,
            is_placed=True,
            hits=(False,) * self.size,
        )

    def unplaced(self) -> Ship:
        return replace(self, positions=(), is_placed=False, hits=(False,) * self.size)

    def with_hit(self, position: Position) -> Ship:
        """Return a copy with the segment at ``position`` marked as hit."""
        if position not in self.positions:
            return self
        index = self.positions.index(position)
        hits = list(self.hits)
        hits[index] = True
        return replace(self, hits=tuple(hits))


@dataclass(frozen=True)
class Fleet:
    """The five ships owned by one side, in canonical order."""

    ships: tuple[Ship, ...]

    def __post_init__(self) -> None:
        ids = [ship.id for ship in self.ships]
        if ids != list(ShipType):
            raise ValueError("A fleet holds exactly one ship of every type in canonical order.")

    def __iter__(self) -> Iterator[Ship]:
        return iter(self.ships)

    def __len__(self) -> int:
        return len(self.ships)

    def get(self, ship_type: ShipType) -> Ship:
        return self.ships[list(ShipType).index(ship_type)]

    def with_ship(self, ship: Ship) -> Fleet:
        """Return a fleet with the ship of the same type replaced."""
        return Fleet(tuple(ship if existing.id is ship.id else existing for existing in self.ships))

    @property
    def all_placed(self) -> bool:
        return all(ship.is_placed for ship in self.ships)

    @property
    def all_sunk(self) -> bool:
        return all(ship.is_sunk for ship in self.ships)

    def sunk_names(self) -> list[str]:
        return [ship.name for ship in self.ships if ship.is_sunk]


def create_fleet() -> Fleet:
    """Five unplaced ships with all-false hits."""
    return Fleet(tuple(Ship.of_type(ship_type) for ship_type in ShipType))
