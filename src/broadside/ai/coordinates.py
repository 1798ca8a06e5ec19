"""Parsing of coordinate tokens such as ``A1`` or ``j10`` out of free text."""

from __future__ import annotations

import re

from broadside.engine.ship import BOARD_SIZE, COLUMN_LABELS, Position

_STRICT_PATTERN = re.compile(r"([A-J])(\d{1,2})", re.IGNORECASE)
_LOOSE_PATTERN = re.compile(r"([A-Za-z])(\d{1,2})")


class CoordinateParseError(ValueError):
    """Raised when no usable coordinate can be found in a reply."""


def _to_position(letter: str, digits: str) -> Position:
    return Position(row=int(digits) - 1, col=COLUMN_LABELS.index(letter.upper()))


def parse_coordinate(text: str) -> Position:
    """Extract the first coordinate token from ``text``.

    Letters map to columns (A=0) and numbers to rows (1=0). A strict A–J
    match wins; otherwise any letter+digits pair is tried and kept only if
    it still lands on the board.
    """
    match = _STRICT_PATTERN.search(text)
    if match:
        letter, digits = match.groups()
        number = int(digits)
        if not 1 <= number <= BOARD_SIZE:
            raise CoordinateParseError(f"Row number {number} is off the board in {text!r}.")
        return _to_position(letter, digits)

    loose = _LOOSE_PATTERN.search(text)
    if loose:
        letter, digits = loose.groups()
        if letter.upper() in COLUMN_LABELS and 1 <= int(digits) <= BOARD_SIZE:
            return _to_position(letter, digits)

    raise CoordinateParseError(f"Cannot parse a coordinate from {text!r}.")

