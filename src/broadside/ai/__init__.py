"""Move sources: local heuristic and language-model backed."""

from .base import MoveSource
from .config import ExternalSourceConfig
from .external import ConnectionStatus, ExternalMoveSource
from .heuristic import HeuristicMoveSource

__all__ = [
    "ConnectionStatus",
    "ExternalMoveSource",
    "ExternalSourceConfig",
    "HeuristicMoveSource",
    "MoveSource",
]
