"""Command-line driver that pits two move sources against each other."""

from __future__ import annotations

import argparse
import logging
import random
from typing import Sequence

from broadside.ai.base import MoveSource
from broadside.ai.config import ExternalSourceConfig
from broadside.ai.external import ExternalMoveSource
from broadside.ai.heuristic import HeuristicMoveSource
from broadside.engine.board import Board
from broadside.engine.game import Side
from broadside.engine.ship import COLUMN_LABELS, Position
from broadside.orchestrator import DEFAULT_MAX_TURNS, GameOrchestrator, TurnRecord
from broadside.telemetry import configure_console_logging, init_telemetry

SOURCE_KINDS = ("heuristic", "external")


def _format_board(board: Board, show_ships: bool) -> str:
    header = "    " + " ".join(f"{label:>2}" for label in COLUMN_LABELS[: board.size])
    rows = [header]
    for row in range(board.size):
        symbols = []
        for col in range(board.size):
            cell = board.cell(Position(row, col))
            if cell.is_hit:
                symbol = "X"
            elif cell.is_miss:
                symbol = "o"
            else:
                symbol = "S" if show_ships and cell.has_ship else "."
            symbols.append(f"{symbol:>2}")
        rows.append(f"{row + 1:>2} |" + " ".join(symbols))
    return "\n".join(rows)


def _describe_turn(record: TurnRecord) -> str:
    if record.repeated:
        return f"Side {record.side.name} picked {record.target.label} again; asking once more."
    outcome = "hit" if record.hit else "miss"
    if record.sunk:
        outcome = f"sank the {record.ship_name}!"
    return f"Side {record.side.name} fired at {record.target.label}: {outcome}"


def _build_source(kind: str, config: ExternalSourceConfig, rng: random.Random) -> MoveSource:
    if kind == "external":
        return ExternalMoveSource(config=config, rng=random.Random(rng.getrandbits(32)))
    return HeuristicMoveSource(rng=random.Random(rng.getrandbits(32)))


def _config_from_args(args: argparse.Namespace) -> ExternalSourceConfig:
    return ExternalSourceConfig.from_env(
        endpoint=args.endpoint,
        model=args.model,
        temperature=args.temperature,
        max_tokens=args.max_tokens,
        debug=True if args.debug else None,
    )


def check_connection(config: ExternalSourceConfig) -> bool:
    status = ExternalMoveSource(config=config).check_connection()
    if status.success:
        print(f"Connected to {config.endpoint}. Models: {', '.join(status.models) or 'none listed'}")
        return True
    print(f"Could not reach {config.endpoint}: {status.error}")
    return False


def play_match(
    side_a: str = "heuristic",
    side_b: str = "heuristic",
    config: ExternalSourceConfig | None = None,
    seed: int | None = None,
    show_boards: bool = False,
    max_turns: int = DEFAULT_MAX_TURNS,
) -> Side | None:
    config = config or ExternalSourceConfig.from_env()
    rng = random.Random(seed)
    orchestrator = GameOrchestrator(
        move_sources={
            Side.A: _build_source(side_a, config, rng),
            Side.B: _build_source(side_b, config, rng),
        },
        rng_seed=seed,
    )
    orchestrator.setup_random()
    print(f"Side A ({side_a}) vs side B ({side_b})\n")

    for _ in range(max_turns):
        record = orchestrator.play_turn()
        if record is None:
            break
        print(_describe_turn(record))
        if show_boards and not record.repeated:
            print(_format_board(orchestrator.state.board(record.side.opponent()), show_ships=True))
            print()

    state = orchestrator.state
    for side in Side:
        sunk = state.fleet(side).sunk_names()
        print(f"\nSide {side.name} fleet (sunk: {', '.join(sunk) or 'none'}):")
        print(_format_board(state.board(side), show_ships=True))

    if state.winner is None:
        print(f"\nNo winner after {max_turns} turns.")
    else:
        print(f"\nSide {state.winner.name} wins!")
    return state.winner


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run a Battleship match between two move sources.")
    parser.add_argument("--side-a", choices=SOURCE_KINDS, default="heuristic")
    parser.add_argument("--side-b", choices=SOURCE_KINDS, default="heuristic")
    parser.add_argument(
        "--seed", type=int, default=None, help="Optional RNG seed for reproducibility."
    )
    parser.add_argument("--endpoint", default=None, help="Chat-completion server, e.g. http://localhost:1234")
    parser.add_argument("--model", default=None)
    parser.add_argument("--temperature", type=float, default=None)
    parser.add_argument("--max-tokens", type=int, default=None)
    parser.add_argument("--debug", action="store_true", help="Log prompts and model replies.")
    parser.add_argument("--show-boards", action="store_true")
    parser.add_argument("--max-turns", type=int, default=DEFAULT_MAX_TURNS)
    parser.add_argument(
        "--check-connection",
        action="store_true",
        help="Only check that the chat-completion server answers, then exit.",
    )
    args = parser.parse_args(argv)

    configure_console_logging(logging.INFO if args.debug else logging.WARNING)
    init_telemetry()
    config = _config_from_args(args)

    if args.check_connection:
        return 0 if check_connection(config) else 1

    play_match(
        side_a=args.side_a,
        side_b=args.side_b,
        config=config,
        seed=args.seed,
        show_boards=args.show_boards,
        max_turns=args.max_turns,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
