"""OpenTelemetry wiring shared by the engine, move sources and CLI.

Spans and counters are no-ops until :func:`init_telemetry` installs
providers, so library code can instrument unconditionally.
"""

from __future__ import annotations

from .config import TelemetryConfig, init_telemetry
from .logger import configure_console_logging, get_logger
from .metrics import get_meter, record_game_metric, record_latency
from .tracer import get_tracer

__all__ = [
    "TelemetryConfig",
    "configure_console_logging",
    "get_logger",
    "get_meter",
    "get_tracer",
    "init_telemetry",
    "record_game_metric",
    "record_latency",
]
