"""
Action System - Players, actions and turns.

Actions represent a proposed cut on one live board. Once the engine
accepts and applies an action it is recorded as a Turn, together with
the player who made it.

All of these are frozen values so they can be logged, replayed and sent
to other peers without copying.
"""

from __future__ import annotations
from dataclasses import dataclass

from .board import Board, board_hash, generate_uuid
from .slice import Direction, Slice


@dataclass(frozen=True)
class PlayerInfo:
    """
    Identity and seat of a player.

    turn_remainder is the player's fixed place in round-robin order:
    turn n belongs to the player with turn_remainder == n % player_count.
    """
    uuid: str
    name: str
    turn_remainder: int

    @classmethod
    def create(cls, name: str, turn_remainder: int) -> PlayerInfo:
        """Factory with a freshly generated uuid."""
        return cls(uuid=generate_uuid(), name=name, turn_remainder=turn_remainder)


@dataclass(frozen=True)
class Action:
    """
    A proposed slice on a board.

    The board is the one the player saw when choosing. Validation always
    looks the board up by uuid in the current state, so a stale copy here
    only matters for its uuid.
    """
    slice: Slice
    board: Board

    @classmethod
    def horizontal(cls, board: Board, line: int) -> Action:
        """Factory for a cut between rows line - 1 and line."""
        return cls(slice=Slice.horizontal(line), board=board)

    @classmethod
    def vertical(cls, board: Board, line: int) -> Action:
        """Factory for a cut between columns line - 1 and line."""
        return cls(slice=Slice.vertical(line), board=board)

    @property
    def direction(self) -> Direction:
        return self.slice.direction


@dataclass(frozen=True)
class Turn:
    """An applied action and the player who made it."""
    player: PlayerInfo
    action: Action


def action_to_string(action: Action) -> str:
    """Compact description, e.g. 'V1 / 2:3-gA {aB3xYz}'."""
    return (
        f"{action.slice.direction.short}{action.slice.line} / "
        f"{board_hash(action.board)} {{{action.board.uuid}}}"
    )


def turn_to_string(turn: Turn) -> str:
    return f"{turn.player.name}: {action_to_string(turn.action)}"
