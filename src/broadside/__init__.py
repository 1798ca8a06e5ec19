"""Two-sided Battleship with heuristic and language-model move sources."""

__version__ = "0.1.0"
