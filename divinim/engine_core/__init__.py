"""
Engine Core - Deterministic board slicing and state transitions.

The engine core:
1. Models boards, slices, players and turns as immutable values
2. Slices boards and resolves isolated pieces
3. Holds the authoritative GameState
4. Enumerates and validates available actions
5. Applies turns via the reducer
"""

from .board import (
    Board,
    BoardDimensions,
    TileCoordinate,
    board_hash,
    generate_boards,
    generate_uuid,
    new_board,
    random_board,
    tile_coordinate_to_string,
)
from .slice import Direction, Slice, SliceResult, apply_slice
from .action import Action, PlayerInfo, Turn, action_to_string, turn_to_string
from .action_generator import actions_for_board, is_valid_action, legal_actions
from .state import GameState, TurnResult
from .reducer import Reducer, apply_turn, replay_turns, substitute_replacements
from .errors import (
    DivinimError,
    GameClosedError,
    InvalidSliceError,
    MissingBoardError,
    NoAvailableActionsError,
    PlayerBusyError,
    UnknownConditionError,
)

__all__ = [
    "Board",
    "BoardDimensions",
    "TileCoordinate",
    "board_hash",
    "generate_boards",
    "generate_uuid",
    "new_board",
    "random_board",
    "tile_coordinate_to_string",
    "Direction",
    "Slice",
    "SliceResult",
    "apply_slice",
    "Action",
    "PlayerInfo",
    "Turn",
    "action_to_string",
    "turn_to_string",
    "actions_for_board",
    "is_valid_action",
    "legal_actions",
    "GameState",
    "TurnResult",
    "Reducer",
    "apply_turn",
    "replay_turns",
    "substitute_replacements",
    "DivinimError",
    "GameClosedError",
    "InvalidSliceError",
    "MissingBoardError",
    "NoAvailableActionsError",
    "PlayerBusyError",
    "UnknownConditionError",
]
