"""
Action Generator - Enumerates and validates slices.

The action generator is used by:
1. Random players to pick a move
2. UI to show available cuts
3. Win conditions (no moves left)
4. Validation of incoming actions

A board of width w and height h offers (w - 1) vertical and (h - 1)
horizontal cuts.
"""

from __future__ import annotations
from typing import TYPE_CHECKING

from .action import Action
from .board import Board
from .slice import Direction, Slice

if TYPE_CHECKING:
    from .state import GameState


def actions_for_board(board: Board) -> list[Action]:
    """All interior cuts on one board, vertical lines first."""
    actions = [
        Action(slice=Slice(direction=Direction.VERTICAL, line=x), board=board)
        for x in range(1, board.width)
    ]
    actions.extend(
        Action(slice=Slice(direction=Direction.HORIZONTAL, line=y), board=board)
        for y in range(1, board.height)
    )
    return actions


def legal_actions(state: GameState) -> list[Action]:
    """
    Convenience function to get every available action.

    Same as state.available_actions.
    """
    return state.available_actions


def is_valid_action(state: GameState, action: Action) -> bool:
    """
    Check if an action can be applied to this state.

    The board must still be live, and the line is checked against the
    board's current dimensions in the state, not the copy carried by the
    action.
    """
    board = state.get_board(action.board.uuid)
    if board is None:
        return False
    return action.slice.fits(board.dimensions)
