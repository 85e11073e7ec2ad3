"""
Pytest fixtures for Divinim tests.
"""

import pytest

from ..engine_core.action import PlayerInfo
from ..engine_core.board import Board, BoardDimensions, TileCoordinate
from ..engine_core.state import GameState


def make_board(uuid: str, width: int, height: int, marks=()) -> Board:
    """Build a board from (x, y) pairs."""
    return Board(
        uuid=uuid,
        dimensions=BoardDimensions(width=width, height=height),
        marked_coordinates=frozenset(TileCoordinate(x=x, y=y) for x, y in marks),
    )


@pytest.fixture
def alice() -> PlayerInfo:
    return PlayerInfo(uuid="alice1", name="Alice", turn_remainder=0)


@pytest.fixture
def bob() -> PlayerInfo:
    return PlayerInfo(uuid="bob222", name="Bob", turn_remainder=1)


@pytest.fixture
def two_by_three() -> Board:
    """2x3 board with one mark in the bottom-right tile."""
    return make_board("b2x3AA", 2, 3, [(1, 2)])


@pytest.fixture
def one_by_two_full() -> Board:
    """1x2 board with both tiles marked."""
    return make_board("b1x2AA", 1, 2, [(0, 0), (0, 1)])


@pytest.fixture
def four_by_four() -> Board:
    """4x4 board with marks on the diagonal and one corner."""
    return make_board("b4x4AA", 4, 4, [(0, 0), (1, 1), (2, 2), (3, 3), (3, 0)])


@pytest.fixture
def two_player_state(alice, bob, two_by_three, four_by_four) -> GameState:
    """Two players, two live boards, no turns played."""
    return GameState.create(
        players=[alice, bob],
        boards=[two_by_three, four_by_four],
        game_id="game01",
    )
