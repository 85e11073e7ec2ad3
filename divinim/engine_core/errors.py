"""
Engine Errors - Exception hierarchy for the game core.

All engine exceptions inherit from DivinimError so callers can catch
them in one place. Each carries a machine-readable code that the API
layer forwards unchanged.

Usage:
    from divinim.engine_core.errors import MissingBoardError

    try:
        game.play_turn(turn)
    except MissingBoardError as e:
        logger.warning("Stale action: %s", e.message)
"""

from __future__ import annotations
from typing import Any

__all__ = [
    "DivinimError",
    "InvalidSliceError",
    "MissingBoardError",
    "NoAvailableActionsError",
    "UnknownConditionError",
    "PlayerBusyError",
    "GameClosedError",
]


class DivinimError(Exception):
    """
    Base exception for all engine errors.

    Attributes:
        code: Machine-readable error code
        message: Human-readable description
        context: Extra values for debugging
    """
    code: str = "DIVINIM_ERROR"

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"[{self.code}] {self.message} ({ctx})"
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON responses."""
        return {
            "code": self.code,
            "message": self.message,
            "context": self.context,
        }


class InvalidSliceError(DivinimError):
    """
    Slice line is outside the interior of the target board.

    Only raised once a turn is being applied. By then the action already
    passed validation, so this means the caller's view of the board is stale.
    """
    code: str = "INVALID_SLICE"


class MissingBoardError(DivinimError):
    """Action targets a board that is not live in the current state."""
    code: str = "BOARD_NOT_FOUND"


class NoAvailableActionsError(DivinimError):
    """A player was asked to move but no board can be sliced."""
    code: str = "NO_AVAILABLE_ACTIONS"


class UnknownConditionError(DivinimError, ValueError):
    """Rule configuration names a win or score condition that does not exist."""
    code: str = "UNKNOWN_CONDITION"


class PlayerBusyError(DivinimError):
    """A player already has an outstanding action request."""
    code: str = "PLAYER_BUSY"


class GameClosedError(DivinimError):
    """The game was closed and accepts no further requests."""
    code: str = "GAME_CLOSED"
