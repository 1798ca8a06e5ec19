"""Match state and the turn controller."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from broadside.telemetry import get_meter, get_tracer

from .attack import AttackResult, is_game_over, make_attack
from .board import Board, create_empty_board
from .ship import Fleet, Position, create_fleet

logger = logging.getLogger(__name__)
tracer = get_tracer("broadside.engine.game")
meter = get_meter("broadside.engine.game")

MOVE_COUNTER = meter.create_counter(
    "broadside_engine_moves",
    unit="1",
    description="Number of attacks resolved by the turn controller",
)


class GamePhase(Enum):
    """High-level lifecycle of a match."""

    SETUP = "setup"
    PLAYING = "playing"
    GAME_OVER = "game_over"


class Side(Enum):
    """The two sides of a match."""

    A = "a"
    B = "b"

    def opponent(self) -> Side:
        """Return the opposing side."""
        return Side.B if self is Side.A else Side.A


@dataclass(frozen=True)
class MatchState:
    """Immutable snapshot of a match.

    The per-side maps are read-only views; use :meth:`with_side` to derive
    a changed snapshot.

    ``boards[side]`` carries ``side``'s own ships; it is the board the
    opponent fires at.
    """

    boards: Mapping[Side, Board]
    fleets: Mapping[Side, Fleet]
    phase: GamePhase = GamePhase.SETUP
    turn: Side = Side.A
    winner: Side | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "boards", MappingProxyType(dict(self.boards)))
        object.__setattr__(self, "fleets", MappingProxyType(dict(self.fleets)))

    def __hash__(self) -> int:
        return hash(
            (
                frozenset(self.boards.items()),
                frozenset(self.fleets.items()),
                self.phase,
                self.turn,
                self.winner,
            )
        )

    def board(self, side: Side) -> Board:
        return self.boards[side]

    def fleet(self, side: Side) -> Fleet:
        return self.fleets[side]

    def with_side(self, side: Side, board: Board | None = None, fleet: Fleet | None = None) -> MatchState:
        boards = dict(self.boards)
        fleets = dict(self.fleets)
        if board is not None:
            boards[side] = board
        if fleet is not None:
            fleets[side] = fleet
        return replace(self, boards=boards, fleets=fleets)

    @property
    def is_game_over(self) -> bool:
        return self.phase is GamePhase.GAME_OVER


def new_match() -> MatchState:
    """Fresh setup state: empty boards, unplaced fleets, side A to move."""
    return MatchState(
        boards={side: create_empty_board() for side in Side},
        fleets={side: create_fleet() for side in Side},
    )


class TurnController:
    """State machine sequencing setup, play and game over."""

    starting_side: Side = Side.A

    def start(self, state: MatchState) -> MatchState:
        """Move from setup to playing once both fleets are fully placed."""
        if state.phase is not GamePhase.SETUP:
            logger.error("start_rejected_wrong_phase", extra={"phase": state.phase.value})
            raise RuntimeError("A match can only be started from setup.")
        unplaced = [side.value for side in Side if not state.fleet(side).all_placed]
        if unplaced:
            logger.error("start_rejected_unplaced_fleet", extra={"sides": unplaced})
            raise RuntimeError("Both fleets must be fully placed before the match starts.")
        logger.info("match_started", extra={"turn": self.starting_side.value})
        return replace(state, phase=GamePhase.PLAYING, turn=self.starting_side, winner=None)

    def resolve(
        self, state: MatchState, attacker: Side, target: Position
    ) -> tuple[MatchState, AttackResult]:
        """Apply one attack by ``attacker`` and advance the turn.

        A hit keeps the turn, a miss passes it. A repeated target returns
        ``state`` itself so the caller can ask for another move.
        """
        with tracer.start_as_current_span("game.resolve") as span:
            span.set_attribute("attacker", attacker.value)
            span.set_attribute("row", target.row)
            span.set_attribute("col", target.col)
            if state.phase is not GamePhase.PLAYING:
                logger.error(
                    "move_rejected_game_not_playing",
                    extra={"attacker": attacker.value, "phase": state.phase.value},
                )
                raise RuntimeError("Game is not in progress.")
            if attacker is not state.turn:
                logger.error(
                    "move_rejected_wrong_side",
                    extra={"attacker": attacker.value, "current": state.turn.value},
                )
                raise RuntimeError("It is not this side's turn.")

            defender = attacker.opponent()
            result = make_attack(state.board(defender), state.fleet(defender), target)
            MOVE_COUNTER.add(1, attributes={"result": result.outcome, "attacker": attacker.value})
            if result.repeated:
                return state, result

            next_state = state.with_side(defender, board=result.board, fleet=result.fleet)
            if is_game_over(result.fleet):
                next_state = replace(next_state, phase=GamePhase.GAME_OVER, winner=attacker)
                span.set_attribute("game.winner", attacker.value)
                logger.info("game_finished", extra={"winner": attacker.value})
            elif not result.hit:
                next_state = replace(next_state, turn=defender)
            span.set_attribute("next_turn", next_state.turn.value)
            return next_state, result
