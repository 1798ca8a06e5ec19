"""Coordinate parsing tests."""

import pytest

from broadside.ai.coordinates import CoordinateParseError, parse_coordinate
from broadside.engine.ship import Position


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("j10", Position(9, 9)),
        ("A1", Position(0, 0)),
        ("C5", Position(4, 2)),
        ("  b7\n", Position(6, 1)),
        ("I'll go with E3.", Position(2, 4)),
        ('"D10"', Position(9, 3)),
    ],
)
def test_parse_valid_coordinates(text: str, expected: Position) -> None:
    assert parse_coordinate(text) == expected


@pytest.mark.parametrize("text", ["K1", "A11", "A0", "", "hello", "Z9", "10"])
def test_parse_rejects_off_board_or_missing(text: str) -> None:
    with pytest.raises(CoordinateParseError):
        parse_coordinate(text)


def test_parse_error_is_value_error() -> None:
    with pytest.raises(ValueError):
        parse_coordinate("nothing here")
