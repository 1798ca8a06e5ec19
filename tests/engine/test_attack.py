"""Tests for shot resolution."""

from dataclasses import replace

import pytest

from broadside.engine.attack import is_game_over, make_attack
from broadside.engine.board import create_empty_board
from broadside.engine.placement import place_ship
from broadside.engine.ship import Fleet, Position, ShipType, create_fleet


def _board_with_destroyer():
    fleet = create_fleet()
    board, destroyer = place_ship(create_empty_board(), fleet.get(ShipType.DESTROYER), Position(3, 3), True)
    return board, fleet.with_ship(destroyer)


def test_miss_marks_cell_on_copy() -> None:
    board, fleet = _board_with_destroyer()
    result = make_attack(board, fleet, Position(7, 7))

    assert not result.hit and not result.sunk and not result.repeated
    assert result.board.cell(Position(7, 7)).is_miss
    assert board.cell(Position(7, 7)).is_untargeted
    assert result.fleet is fleet


def test_second_hit_sinks_destroyer() -> None:
    board, fleet = _board_with_destroyer()
    first = make_attack(board, fleet, Position(3, 4))
    assert first.hit and not first.sunk
    assert first.fleet.get(ShipType.DESTROYER).hits == (False, True)

    second = make_attack(first.board, first.fleet, Position(3, 3))
    assert second.hit and second.sunk
    assert second.ship is not None and second.ship.name == "Destroyer"
    assert second.fleet.get(ShipType.DESTROYER).hits == (True, True)
    assert first.fleet.get(ShipType.DESTROYER).hits == (False, True)


@pytest.mark.parametrize("target", [Position(3, 3), Position(0, 0)])
def test_repeated_attack_is_a_no_op(target: Position) -> None:
    board, fleet = _board_with_destroyer()
    once = make_attack(board, fleet, target)
    again = make_attack(once.board, once.fleet, target)

    assert again.repeated
    assert not again.hit and not again.sunk
    assert again.board is once.board
    assert again.fleet is once.fleet


def test_cells_never_hit_and_miss() -> None:
    board, fleet = _board_with_destroyer()
    for pos in [Position(3, 3), Position(3, 3), Position(5, 5), Position(3, 4)]:
        result = make_attack(board, fleet, pos)
        board, fleet = result.board, result.fleet
    for pos in board.positions():
        cell = board.cell(pos)
        assert not (cell.is_hit and cell.is_miss)
        if cell.is_hit:
            assert cell.has_ship


def test_out_of_bounds_shot_raises() -> None:
    board, fleet = _board_with_destroyer()
    with pytest.raises(ValueError):
        make_attack(board, fleet, Position(10, 0))


def test_game_over_needs_every_hit() -> None:
    fleet = create_fleet()
    all_hit = Fleet(tuple(replace(ship, hits=(True,) * ship.size) for ship in fleet))
    assert is_game_over(all_hit)

    carrier = all_hit.get(ShipType.CARRIER)
    one_short = all_hit.with_ship(replace(carrier, hits=(True, True, True, True, False)))
    assert not is_game_over(one_short)
    assert not is_game_over(fleet)
