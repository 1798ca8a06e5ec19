"""Prompt construction for the language-model move source."""

from __future__ import annotations

from enum import Enum
from typing import Iterable

from broadside.engine.board import Board, Cell
from broadside.engine.ship import COLUMN_LABELS, Position, ShipType

from .memory import MoveMemory

HIT_SYMBOL = "H"
MISS_SYMBOL = "M"
UNKNOWN_SYMBOL = "."

STRATEGY_RULES = (
    "If your last move was a HIT, your next move MUST be an adjacent cell "
    "(up, down, left or right) of that hit.",
    "If you have several HITS in a line, you MUST continue in that direction.",
    "If a line of HITS ended with a MISS, you MUST try the opposite end of the line.",
    "Otherwise space your shots out to search for new ships efficiently.",
    "Ships are 2-5 cells long and are never placed diagonally.",
)


class ContextLevel(Enum):
    """How much match history goes into a prompt."""

    FULL = "full"
    NO_HISTORY = "no_history"
    MINIMAL = "minimal"

    @property
    def includes_history(self) -> bool:
        return self is ContextLevel.FULL

    @property
    def includes_previous_moves(self) -> bool:
        return self is not ContextLevel.MINIMAL


def _symbol(cell: Cell) -> str:
    if cell.is_hit and cell.has_ship:
        return HIT_SYMBOL
    if cell.is_miss:
        return MISS_SYMBOL
    return UNKNOWN_SYMBOL


def render_board(board: Board) -> str:
    """Attacker's view of ``board``: hits and misses only, never ship cells."""
    lines = ["   " + " ".join(COLUMN_LABELS[: board.size])]
    for row in range(board.size):
        symbols = " ".join(_symbol(board.cell(Position(row, col))) for col in range(board.size))
        lines.append(f"{row + 1:>2} {symbols}")
    return "\n".join(lines)


def _labels(positions: Iterable[Position]) -> str:
    return ", ".join(pos.label for pos in positions) or "None"


def fleet_roster() -> str:
    return "\n".join(
        f"- {ship_type.display_name} ({ship_type.length} cells)" for ship_type in ShipType
    )


def build_prompt(board: Board, memory: MoveMemory, level: ContextLevel = ContextLevel.FULL) -> str:
    sections = [
        "BATTLESHIP AI - Choose your next move.",
        "Ships are placed on a 10x10 grid (A1 to J10). Ships fleet:\n" + fleet_roster(),
        "Current Board State:\n" + render_board(board),
        f"Legend: '{UNKNOWN_SYMBOL}' = unknown water, '{HIT_SYMBOL}' = hit, '{MISS_SYMBOL}' = miss",
    ]

    if level.includes_previous_moves:
        sections.append(f"Previous moves: {_labels(memory.previous_moves)}")

    if level.includes_history:
        sections.append(f"Current hits: {_labels(memory.hits)}")
        sections.append(f"Ships sunk: {', '.join(memory.sunk_ships) or 'None'}")
        if memory.recent:
            outcomes = "\n".join(
                f"- {outcome.position.label}: {'HIT' if outcome.hit else 'MISS'}"
                for outcome in memory.recent
            )
            sections.append("Last moves and results:\n" + outcomes)
        if memory.events:
            sections.append("Game log:\n" + "\n".join(f"- {event}" for event in memory.events))

    rules = "\n".join(f"{index}. {rule}" for index, rule in enumerate(STRATEGY_RULES, start=1))
    sections.append("Battleship Strategy Guide:\n" + rules)
    sections.append(
        "Choose the most strategic coordinate to attack next. Respond with ONLY the "
        'coordinate like "A1", "B5", or "J10" and nothing else.'
    )
    return "\n\n".join(sections)
