"""Per-side recollection of past shots, fed back into move selection."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field

from broadside.engine.ship import Position

RECENT_OUTCOMES = 3
EVENT_LOG_LIMIT = 10
EVENT_LOG_KEEP = 8


@dataclass(frozen=True)
class ShotOutcome:
    position: Position
    hit: bool


@dataclass
class MoveMemory:
    """What one side has learned about its opponent's board so far."""

    previous_moves: list[Position] = field(default_factory=list)
    hits: list[Position] = field(default_factory=list)
    sunk_ships: list[str] = field(default_factory=list)
    recent: deque[ShotOutcome] = field(default_factory=lambda: deque(maxlen=RECENT_OUTCOMES))
    events: list[str] = field(default_factory=list)

    def record(self, position: Position, hit: bool, sunk: bool, ship_name: str | None = None) -> None:
        self.previous_moves.append(position)
        self.recent.append(ShotOutcome(position, hit))
        if hit:
            self.hits.append(position)
        if sunk and ship_name and ship_name not in self.sunk_ships:
            self.sunk_ships.append(ship_name)

        if sunk and ship_name:
            self.events.append(f"SUNK {ship_name} at {position.label}!")
        elif hit:
            self.events.append(f"HIT at {position.label}")
        else:
            self.events.append(f"MISS at {position.label}")
        if len(self.events) > EVENT_LOG_LIMIT:
            self.events = self.events[-EVENT_LOG_KEEP:]

    @property
    def last_hit(self) -> Position | None:
        return self.hits[-1] if self.hits else None
