"""Turn controller tests."""

import random

import pytest

from broadside.engine.game import GamePhase, Side, TurnController, new_match
from broadside.engine.placement import place_ship, place_ships_randomly
from broadside.engine.board import create_empty_board
from broadside.engine.ship import Position, ShipType


def _playing_state(seed: int = 7):
    rng = random.Random(seed)
    state = new_match()
    for side in Side:
        board, fleet = place_ships_randomly(rng=rng)
        state = state.with_side(side, board=board, fleet=fleet)
    return TurnController().start(state)


def _ship_cell(state, side: Side) -> Position:
    return state.fleet(side).get(ShipType.CARRIER).positions[0]


def _water_cell(state, side: Side) -> Position:
    board = state.board(side)
    return next(pos for pos in board.positions() if not board.cell(pos).has_ship)


def test_start_requires_placed_fleets() -> None:
    with pytest.raises(RuntimeError):
        TurnController().start(new_match())


def test_start_enters_playing_with_side_a() -> None:
    state = _playing_state()
    assert state.phase is GamePhase.PLAYING
    assert state.turn is Side.A
    assert state.winner is None

    with pytest.raises(RuntimeError):
        TurnController().start(state)


def test_hit_then_miss_passes_turn() -> None:
    controller = TurnController()
    state = _playing_state()

    state, result = controller.resolve(state, Side.A, _ship_cell(state, Side.B))
    assert result.hit
    assert state.turn is Side.A

    state, result = controller.resolve(state, Side.A, _water_cell(state, Side.B))
    assert not result.hit
    assert state.turn is Side.B


def test_resolve_enforces_turn_and_phase() -> None:
    controller = TurnController()
    with pytest.raises(RuntimeError):
        controller.resolve(new_match(), Side.A, Position(0, 0))

    state = _playing_state()
    with pytest.raises(RuntimeError):
        controller.resolve(state, Side.B, Position(0, 0))


def test_repeated_target_leaves_state_untouched() -> None:
    controller = TurnController()
    state = _playing_state()
    target = _ship_cell(state, Side.B)
    state, _ = controller.resolve(state, Side.A, target)

    again, result = controller.resolve(state, Side.A, target)
    assert result.repeated
    assert again is state


def test_sinking_last_ship_ends_match() -> None:
    controller = TurnController()
    state = new_match()
    for side in Side:
        board, fleet = place_ships_randomly(rng=random.Random(3))
        state = state.with_side(side, board=board, fleet=fleet)
    state = controller.start(state)

    targets = [pos for ship in state.fleet(Side.B) for pos in ship.positions]
    for target in targets:
        state, result = controller.resolve(state, Side.A, target)
        assert result.hit

    assert state.phase is GamePhase.GAME_OVER
    assert state.winner is Side.A
    assert state.fleet(Side.B).all_sunk
    with pytest.raises(RuntimeError):
        controller.resolve(state, Side.A, Position(0, 0))


def test_match_state_is_copy_on_write() -> None:
    state = new_match()
    fleet = state.fleet(Side.A)
    board, carrier = place_ship(create_empty_board(), fleet.get(ShipType.CARRIER), Position(0, 0), True)
    updated = state.with_side(Side.A, board=board, fleet=fleet.with_ship(carrier))

    assert not state.board(Side.A).cell(Position(0, 0)).has_ship
    assert updated.board(Side.A).cell(Position(0, 0)).has_ship
    assert updated.board(Side.B) is state.board(Side.B)


def test_match_state_maps_are_read_only() -> None:
    state = new_match()
    seeded = state.with_side(Side.A, board=create_empty_board())

    with pytest.raises(TypeError):
        seeded.boards[Side.B] = create_empty_board()  # type: ignore[index]
    with pytest.raises(TypeError):
        seeded.fleets[Side.A] = state.fleet(Side.B)  # type: ignore[index]

    assert hash(seeded) == hash(new_match())
    assert seeded == new_match()
