"""Shared fixtures for move source tests."""

from __future__ import annotations

from typing import Iterable

import pytest

from broadside.ai.config import ExternalSourceConfig
from broadside.ai.transport import TransportError
from broadside.engine.attack import make_attack
from broadside.engine.board import Board, create_empty_board
from broadside.engine.ship import Position, create_fleet


class FakeTransport:
    """Returns canned replies in order; an exception instance is raised instead."""

    def __init__(self, replies: Iterable[str | Exception] = (), models: list[str] | None = None) -> None:
        self.replies = list(replies)
        self.prompts: list[str] = []
        self.configs: list[ExternalSourceConfig] = []
        self.models = models

    def complete(self, prompt: str, config: ExternalSourceConfig) -> str:
        self.prompts.append(prompt)
        self.configs.append(config)
        reply = self.replies.pop(0) if self.replies else "no idea"
        if isinstance(reply, Exception):
            raise reply
        return reply

    def list_models(self, config: ExternalSourceConfig) -> list[str]:
        if self.models is None:
            raise TransportError("connection refused")
        return self.models


def shoot(board: Board, *positions: Position) -> Board:
    fleet = create_fleet()
    for pos in positions:
        board = make_attack(board, fleet, pos).board
    return board


@pytest.fixture
def make_transport() -> type[FakeTransport]:
    return FakeTransport


@pytest.fixture(name="shoot")
def shoot_fixture():
    return shoot


@pytest.fixture
def empty_board() -> Board:
    return create_empty_board()
