"""Drives a match between two move sources."""

from __future__ import annotations

import random
import threading
import time
from dataclasses import dataclass

from broadside.ai.base import MoveSource
from broadside.ai.config import ExternalSourceConfig
from broadside.ai.external import ExternalMoveSource
from broadside.ai.heuristic import HeuristicMoveSource
from broadside.engine.attack import AttackResult
from broadside.engine.game import GamePhase, MatchState, Side, TurnController, new_match
from broadside.engine.placement import is_valid_placement, place_ship, place_ships_randomly, remove_ship
from broadside.engine.ship import Position, ShipType, create_fleet
from broadside.telemetry import get_logger, get_tracer, record_game_metric

DEFAULT_MAX_TURNS = 1000


@dataclass(frozen=True)
class TurnRecord:
    """One applied attack, as seen from the orchestrator."""

    side: Side
    target: Position
    hit: bool
    sunk: bool
    ship_name: str | None
    repeated: bool
    next_turn: Side
    phase: GamePhase

    @classmethod
    def from_result(cls, side: Side, target: Position, result: AttackResult, state: MatchState) -> TurnRecord:
        return cls(
            side=side,
            target=target,
            hit=result.hit,
            sunk=result.sunk,
            ship_name=result.ship.name if result.sunk and result.ship else None,
            repeated=result.repeated,
            next_turn=state.turn,
            phase=state.phase,
        )


@dataclass(frozen=True)
class _MoveTicket:
    side: Side
    generation: int


class GameOrchestrator:
    """Owns the match state and asks each side's move source for attacks.

    Only one move request per side may be outstanding. Every reset starts
    a new generation; answers that arrive for an older generation, or after
    the phase or turn has moved on, are dropped.
    """

    def __init__(
        self,
        move_sources: dict[Side, MoveSource] | None = None,
        controller: TurnController | None = None,
        rng_seed: int | None = None,
    ) -> None:
        self._rng = random.Random(rng_seed)
        self._controller = controller or TurnController()
        self._sources: dict[Side, MoveSource] = {
            side: HeuristicMoveSource(rng=random.Random(self._rng.getrandbits(32))) for side in Side
        }
        self._sources.update(move_sources or {})
        self._state = new_match()
        self._generation = 0
        self._in_flight: dict[Side, _MoveTicket] = {}
        self._lock = threading.Lock()
        self._logger = get_logger("broadside.orchestrator")
        self._tracer = get_tracer("broadside.orchestrator")
        self._match_started_at: float | None = None

    @property
    def state(self) -> MatchState:
        return self._state

    @property
    def generation(self) -> int:
        return self._generation

    def move_source(self, side: Side) -> MoveSource:
        return self._sources[side]

    def is_move_in_flight(self, side: Side) -> bool:
        with self._lock:
            return side in self._in_flight

    # Setup

    def _require_setup(self) -> None:
        if self._state.phase is not GamePhase.SETUP:
            raise RuntimeError("Fleets can only be arranged during setup.")

    def place_ship(self, side: Side, ship_type: ShipType, origin: Position, horizontal: bool) -> bool:
        """Place or move one ship of ``side``; returns False if the spot is illegal."""
        with self._lock:
            self._require_setup()
            board = self._state.board(side)
            fleet = self._state.fleet(side)
            ship = fleet.get(ship_type)
            if ship.is_placed:
                board = remove_ship(board, ship)
                ship = ship.unplaced()
            if not is_valid_placement(board, ship, origin, horizontal):
                self._logger.info(
                    "Rejected %s placement for side %s at %s", ship.name, side.value, origin.label
                )
                return False
            board, placed = place_ship(board, ship, origin, horizontal)
            self._state = self._state.with_side(side, board=board, fleet=fleet.with_ship(placed))
            return True

    def randomize_fleet(self, side: Side) -> None:
        with self._lock:
            self._require_setup()
            board, fleet = place_ships_randomly(rng=self._rng)
            self._state = self._state.with_side(side, board=board, fleet=fleet)

    def clear_fleet(self, side: Side) -> None:
        with self._lock:
            self._require_setup()
            fresh = new_match()
            self._state = self._state.with_side(side, board=fresh.board(side), fleet=create_fleet())

    def start_match(self) -> MatchState:
        with self._lock:
            self._state = self._controller.start(self._state)
            self._match_started_at = time.perf_counter()
            self._logger.info("Match %d started", self._generation)
            return self._state

    def setup_random(self) -> MatchState:
        """Randomly place both fleets and start playing."""
        for side in Side:
            self.randomize_fleet(side)
        return self.start_match()

    def reset(self) -> MatchState:
        """Throw the current match away and return to an empty setup."""
        with self._lock:
            self._generation += 1
            self._in_flight.clear()
            self._state = new_match()
            self._match_started_at = None
            for source in self._sources.values():
                source.reset()
            self._logger.info("Match reset, generation=%d", self._generation)
            return self._state

    # Move sources

    def set_move_source(self, side: Side, source: MoveSource) -> None:
        """Swap the source for ``side``; it is used from the next move on."""
        with self._lock:
            self._sources[side] = source

    def update_move_source_config(self, side: Side, config: ExternalSourceConfig) -> None:
        source = self._sources[side]
        if not isinstance(source, ExternalMoveSource):
            raise TypeError(f"Side {side.value} uses a {source.kind} move source, which has no config.")
        source.update_config(config)

    # Play

    def play_turn(self) -> TurnRecord | None:
        """Ask the side to move for one attack and apply it.

        Returns None when nothing was applied: the match is not being
        played, that side already has a request outstanding, or the match
        moved on while the request was running.
        """
        with self._lock:
            if self._state.phase is not GamePhase.PLAYING:
                return None
            side = self._state.turn
            if side in self._in_flight:
                self._logger.warning("Move for side %s already in flight", side.value)
                return None
            ticket = _MoveTicket(side, self._generation)
            self._in_flight[side] = ticket
            board = self._state.board(side.opponent())
            source = self._sources[side]

        with self._tracer.start_as_current_span("broadside.orchestrator.play_turn") as span:
            span.set_attribute("side", side.value)
            span.set_attribute("source", source.kind)
            try:
                target = source.choose_target(board)
            finally:
                with self._lock:
                    if self._in_flight.get(side) is ticket:
                        del self._in_flight[side]

            with self._lock:
                if (
                    ticket.generation != self._generation
                    or self._state.phase is not GamePhase.PLAYING
                    or self._state.turn is not side
                ):
                    self._logger.info(
                        "Discarding stale move %s for side %s", target.label, side.value
                    )
                    span.set_attribute("discarded", True)
                    return None

                state, result = self._controller.resolve(self._state, side, target)
                record = TurnRecord.from_result(side, target, result, state)
                span.set_attribute("outcome", result.outcome)
                if result.repeated:
                    self._logger.warning(
                        "Side %s picked already-targeted %s; turn not advanced",
                        side.value,
                        target.label,
                    )
                    record_game_metric("broadside_repeated_targets_total", 1, {"side": side.value})
                    return record

                source.record_outcome(target, result.hit, result.sunk, record.ship_name)
                self._state = state
                record_game_metric(
                    "broadside_shots_total", 1, {"side": side.value, "result": result.outcome}
                )
                self._logger.info(
                    "Side %s fired at %s: %s", side.value, target.label, result.outcome
                )
                if state.phase is GamePhase.GAME_OVER:
                    self._finish_match()
                return record

    def run(self, max_turns: int = DEFAULT_MAX_TURNS) -> Side | None:
        """Tick until the match ends or ``max_turns`` ticks have passed."""
        for _ in range(max_turns):
            if self._state.phase is not GamePhase.PLAYING:
                break
            self.play_turn()
        return self._state.winner

    def _finish_match(self) -> None:
        duration = (
            time.perf_counter() - self._match_started_at if self._match_started_at else 0.0
        )
        winner = self._state.winner.value if self._state.winner else "unknown"
        shots = {
            side.value: len(self._state.board(side.opponent()).targeted_positions()) for side in Side
        }
        record_game_metric("broadside_matches_completed_total", 1, {"winner": winner})
        record_game_metric("broadside_match_duration_seconds", duration, {"winner": winner})
        self._logger.info(
            "Match finished. winner=%s shots=%s duration_s=%.3f", winner, shots, duration
        )
