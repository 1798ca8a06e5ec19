"""Board, placement, attack and turn rules."""

from .attack import AttackResult, is_game_over, make_attack
from .board import Board, Cell, create_empty_board
from .game import GamePhase, MatchState, Side, TurnController, new_match
from .placement import (
    PlacementError,
    is_valid_placement,
    place_ship,
    place_ships_randomly,
    remove_ship,
)
from .ship import BOARD_SIZE, Fleet, Position, Ship, ShipType, create_fleet

__all__ = [
    "AttackResult",
    "BOARD_SIZE",
    "Board",
    "Cell",
    "Fleet",
    "GamePhase",
    "MatchState",
    "PlacementError",
    "Position",
    "Ship",
    "ShipType",
    "Side",
    "TurnController",
    "create_empty_board",
    "create_fleet",
    "is_game_over",
    "is_valid_placement",
    "make_attack",
    "new_match",
    "place_ship",
    "place_ships_randomly",
    "remove_ship",
]
