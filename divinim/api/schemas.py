"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between a front end and the hosted
engine. Boards, players and turns reuse the relay wire models, so a
front end sees the same shapes a peer does.

Error Codes:
- GAME_NOT_FOUND: Game does not exist or has ended
- INVALID_ACTION: Submitted slice or board is not valid right now
- NOT_YOUR_TURN: The submitting player does not move now
- PLAYER_BUSY / GAME_CLOSED: The game cannot take the request
- UNKNOWN_CONDITION: Rule configuration names an unknown condition
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field

from ..engine_core.slice import Direction
from ..network.messages import BoardModel, PlayerInfoModel, TurnMessage


# =============================================================================
# Enums
# =============================================================================

class GameStatus(str, Enum):
    """Game status values."""
    CREATED = "created"
    WAITING_FOR_PLAYER = "waiting_for_player"
    OPPONENT_THINKING = "opponent_thinking"
    GAME_OVER = "game_over"
    FAILED = "failed"
    ABANDONED = "abandoned"


class ErrorCode(str, Enum):
    """Structured error codes."""
    GAME_NOT_FOUND = "GAME_NOT_FOUND"
    INVALID_ACTION = "INVALID_ACTION"
    NOT_YOUR_TURN = "NOT_YOUR_TURN"
    BOARD_NOT_FOUND = "BOARD_NOT_FOUND"
    PLAYER_BUSY = "PLAYER_BUSY"
    GAME_CLOSED = "GAME_CLOSED"
    UNKNOWN_CONDITION = "UNKNOWN_CONDITION"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Nested Models
# =============================================================================

class PlayerStatus(BaseModel):
    """Player information for display."""
    uuid: str
    name: str
    turn_remainder: int
    player_type: str = Field(description="RandomPlayer, InteractivePlayer or NetworkPlayer")
    score: int = 0
    is_current_turn: bool = False
    waiting: bool = Field(False, description="The engine is waiting for this player")


class ActionInfo(BaseModel):
    """One available cut."""
    board_uuid: str
    direction: Direction
    line: int
    label: str = Field(description="Direction, line, board hash and uuid, e.g. 'V1 / 2:3-B Xy12Ab'")


class ConditionInfo(BaseModel):
    """A win or score condition for rule listings."""
    kind: str
    name: str
    description: str


# =============================================================================
# Request Models
# =============================================================================

class CreateGameRequest(BaseModel):
    """Request to create and start a new game."""
    player_name: str = Field("Player", description="Display name for the local player")
    second_player_type: str = Field("random", description="random, interactive or network")
    opponent_name: Optional[str] = Field(None, description="Display name for seat 1")
    random_player_delay_ms: Optional[int] = Field(
        None, ge=0, description="Random player thinking delay; server default if omitted"
    )
    win_conditions: list[str] = Field(
        default_factory=lambda: ["no_moves_left"], description="Win condition kinds"
    )
    score_conditions: list[str] = Field(default_factory=list, description="Score condition kinds")
    board_count: int = Field(3, ge=1, le=32)
    width: int = Field(4, ge=1, le=32)
    height: int = Field(4, ge=1, le=32)
    mark_probability: float = Field(0.5, gt=0, le=1)
    seed: Optional[int] = Field(None, description="Seed for reproducible games")


class SubmitActionRequest(BaseModel):
    """A slice chosen by an interactive player."""
    player_uuid: str = Field(..., description="The interactive player submitting the slice")
    board_uuid: str
    direction: Direction
    line: int
    replacement_boards: list[BoardModel] = Field(
        default_factory=list,
        description="Boards the client already shows for the result of this slice",
    )


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class GameStateResponse(BaseModel):
    """Complete game state for display."""
    game_id: str
    status: GameStatus
    phase: str
    turn_number: int
    players: list[PlayerStatus] = Field(default_factory=list)
    boards: list[BoardModel] = Field(default_factory=list)
    current_player_uuid: Optional[str] = None
    available_action_count: int = 0
    turn_log: list[TurnMessage] = Field(default_factory=list)
    winners: list[PlayerInfoModel] = Field(default_factory=list)
    error: Optional[str] = None
    api_version: str = "v1"


class ActionsResponse(BaseModel):
    """Available cuts in the committed state."""
    game_id: str
    turn_number: int
    actions: list[ActionInfo] = Field(default_factory=list)
    count: int = 0


class SubmitActionResponse(BaseModel):
    """Outcome of a submitted slice."""
    game_id: str
    accepted: bool = Field(description="The slice was committed as a turn")
    turn_number: int = Field(description="Turn number after handling the slice")
    turn: Optional[TurnMessage] = None
    game_over: bool = False
    winners: list[PlayerInfoModel] = Field(default_factory=list)


class DeliverMessageResponse(BaseModel):
    """Outcome of a relay message delivery."""
    game_id: str
    delivered: bool


class GameListResponse(BaseModel):
    """Response listing hosted games."""
    games: list[str]
    count: int


class EndGameResponse(BaseModel):
    """Response after ending a game."""
    success: bool
    game_id: str


class RulesResponse(BaseModel):
    """Every selectable condition."""
    win_conditions: list[ConditionInfo] = Field(default_factory=list)
    score_conditions: list[ConditionInfo] = Field(default_factory=list)


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
