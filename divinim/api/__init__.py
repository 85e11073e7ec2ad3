"""
API Module - HTTP interface for front ends.

Exposes hosted games via REST and WebSocket. A front end:
1. Lists the available rules
2. Creates a game with its setup options
3. Submits slices when it is the local player's turn
4. Forwards relay messages for network opponents
5. Follows committed turns over the WebSocket

All state is in memory. No persistent user accounts required.
"""

from .schemas import (
    # Requests
    CreateGameRequest,
    SubmitActionRequest,
    # Responses
    ActionsResponse,
    DeliverMessageResponse,
    EndGameResponse,
    ErrorResponse,
    GameListResponse,
    GameStateResponse,
    RulesResponse,
    SubmitActionResponse,
    # Enums
    ErrorCode,
    GameStatus,
)
from .service import GameService, GameNotFoundError, NotYourTurnError
from .app import create_app

__all__ = [
    # Requests
    "CreateGameRequest",
    "SubmitActionRequest",
    # Responses
    "ActionsResponse",
    "DeliverMessageResponse",
    "EndGameResponse",
    "ErrorResponse",
    "GameListResponse",
    "GameStateResponse",
    "RulesResponse",
    "SubmitActionResponse",
    # Enums
    "ErrorCode",
    "GameStatus",
    # Service
    "GameService",
    "GameNotFoundError",
    "NotYourTurnError",
    "create_app",
]
