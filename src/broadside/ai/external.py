"""Move source that asks a chat-completion model for its next shot."""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass, field
from typing import Callable, Sequence

from broadside.engine.board import Board
from broadside.engine.ship import Position
from broadside.telemetry import get_tracer, record_game_metric, record_latency

from .base import MoveSource
from .config import ExternalSourceConfig
from .coordinates import CoordinateParseError, parse_coordinate
from .heuristic import EMERGENCY_TARGET, hunt_targets
from .memory import MoveMemory
from .prompt import ContextLevel, build_prompt
from .transport import ChatTransport, OpenAIChatTransport

logger = logging.getLogger(__name__)

# One attempt per entry, each with less history than the one before.
RETRY_POLICY: tuple[ContextLevel, ...] = (
    ContextLevel.FULL,
    ContextLevel.NO_HISTORY,
    ContextLevel.MINIMAL,
)
RETRY_DELAY_SECONDS = 0.3


@dataclass(frozen=True)
class AttemptRecord:
    """What happened on one request to the model."""

    level: ContextLevel
    reply: str | None = None
    position: Position | None = None
    error: str | None = None


@dataclass(frozen=True)
class ConnectionStatus:
    success: bool
    models: list[str] = field(default_factory=list)
    error: str | None = None


class ExternalMoveSource(MoveSource):
    """Delegates target selection to a language model.

    Failed requests are retried with progressively less context. When every
    attempt fails the source falls back to hunting around its own last hit,
    then to a random open cell, so callers always get a legal move while one
    exists.
    """

    kind = "external"

    def __init__(
        self,
        config: ExternalSourceConfig | None = None,
        transport: ChatTransport | None = None,
        rng: random.Random | None = None,
        sleep: Callable[[float], None] = time.sleep,
        retry_policy: Sequence[ContextLevel] = RETRY_POLICY,
        retry_delay: float = RETRY_DELAY_SECONDS,
    ) -> None:
        super().__init__(rng)
        self._config = config or ExternalSourceConfig()
        self._transport = transport or OpenAIChatTransport()
        self._sleep = sleep
        self.retry_policy = tuple(retry_policy)
        self.retry_delay = retry_delay
        self.last_attempts: list[AttemptRecord] = []
        self.used_fallback = False
        self._tracer = get_tracer("broadside.ai.external")

    @property
    def config(self) -> ExternalSourceConfig:
        return self._config

    def update_config(self, config: ExternalSourceConfig) -> None:
        """Replace the configuration; requests already running keep the old one."""
        self._config = config
        logger.info(
            "External source config updated endpoint=%s model=%s temperature=%.2f",
            config.endpoint,
            config.model,
            config.temperature,
        )

    def choose_target(self, board: Board) -> Position:
        config = self._config
        memory = self.memory
        start = time.perf_counter()
        with self._tracer.start_as_current_span("broadside.ai.external.choose_target") as span:
            span.set_attribute("model", config.model)
            self.last_attempts = []
            self.used_fallback = False

            for attempt, level in enumerate(self.retry_policy):
                if attempt:
                    self._sleep(self.retry_delay)
                record = self._attempt(board, level, config, memory)
                self.last_attempts.append(record)
                if record.position is not None:
                    span.set_attribute("attempts", attempt + 1)
                    span.set_attribute("fallback", False)
                    self._record_metrics(start, "model", attempt + 1)
                    return record.position
                logger.warning(
                    "Model attempt %d/%d (%s) failed: %s",
                    attempt + 1,
                    len(self.retry_policy),
                    level.value,
                    record.error,
                )

            self.used_fallback = True
            position = self.fallback_target(board, memory)
            span.set_attribute("attempts", len(self.retry_policy))
            span.set_attribute("fallback", True)
            self._record_metrics(start, "fallback", len(self.retry_policy))
            logger.warning("All model attempts failed; falling back to %s", position.label)
            return position

    def _attempt(
        self, board: Board, level: ContextLevel, config: ExternalSourceConfig, memory: MoveMemory
    ) -> AttemptRecord:
        prompt = build_prompt(board, memory, level)
        log_level = logging.INFO if config.debug else logging.DEBUG
        logger.log(log_level, "Prompt (%s):\n%s", level.value, prompt)

        try:
            reply = self._transport.complete(prompt, config)
        except Exception as exc:
            logger.warning("Completion request (%s) raised", level.value, exc_info=True)
            return AttemptRecord(level=level, error=str(exc) or type(exc).__name__)

        logger.log(log_level, "Model replied %r", reply)
        if not isinstance(reply, str):
            return AttemptRecord(level=level, error=f"Reply is not text: {reply!r}")
        try:
            position = parse_coordinate(reply)
        except CoordinateParseError as exc:
            return AttemptRecord(level=level, reply=reply, error=str(exc))

        if not board.is_untargeted(position):
            return AttemptRecord(
                level=level,
                reply=reply,
                error=f"{position.label} is off the board or already targeted",
            )
        return AttemptRecord(level=level, reply=reply, position=position)

    def fallback_target(self, board: Board, memory: MoveMemory | None = None) -> Position:
        """Hunt around our last hit, else a random open cell, else the emergency target."""
        if memory is None:
            memory = self.memory
        around_hit = [pos for pos in hunt_targets(board, memory.hits) if board.is_untargeted(pos)]
        if around_hit:
            return self._rng.choice(around_hit)
        available = board.untargeted_positions()
        if available:
            return self._rng.choice(available)
        return EMERGENCY_TARGET

    def check_connection(self) -> ConnectionStatus:
        """Ask the server for its model list; report failures instead of raising."""
        try:
            models = self._transport.list_models(self._config)
        except Exception as exc:
            logger.error("Connection check against %s failed: %s", self._config.endpoint, exc)
            return ConnectionStatus(success=False, error=str(exc))
        logger.info("Connection check against %s ok, %d models", self._config.endpoint, len(models))
        return ConnectionStatus(success=True, models=models)

    def _record_metrics(self, start: float, source: str, attempts: int) -> None:
        duration_ms = (time.perf_counter() - start) * 1000
        record_game_metric("broadside_external_moves_total", 1, {"source": source})
        record_game_metric("broadside_external_attempts_total", attempts, {"source": source})
        record_latency("broadside_external_move_latency_ms", duration_ms, {"source": source})
