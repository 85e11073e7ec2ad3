"""
Relay Messages - Wire format for turns exchanged between peers.

These models contain only plain board, player and turn data: no
metadata, callbacks or computed properties cross the relay. A relay can
store and forward them verbatim.

Every model converts to and from the engine's frozen dataclasses with
from_core() / to_core().
"""

from __future__ import annotations
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from ..engine_core.action import Action, PlayerInfo, Turn
from ..engine_core.board import Board, BoardDimensions, TileCoordinate
from ..engine_core.slice import Direction, Slice, SliceResult
from ..engine_core.state import TurnResult


class SocketEvent(str, Enum):
    """Event names used by the relay transport."""
    CONNECTION = "connection"
    DISCONNECT = "disconnect"
    START_SESSION = "start-session"
    JOIN_SESSION = "join-session"
    MAKE_MOVE = "make-move"
    SESSION_UPDATED = "session-updated"


# =============================================================================
# Core value models
# =============================================================================

class TileCoordinateModel(BaseModel):
    x: int = Field(ge=0)
    y: int = Field(ge=0)


class BoardModel(BaseModel):
    """A board without presentation metadata."""
    uuid: str
    width: int = Field(ge=1)
    height: int = Field(ge=1)
    marked_coordinates: list[TileCoordinateModel] = Field(default_factory=list)

    @classmethod
    def from_core(cls, board: Board) -> BoardModel:
        return cls(
            uuid=board.uuid,
            width=board.width,
            height=board.height,
            marked_coordinates=[
                TileCoordinateModel(x=c.x, y=c.y) for c in board.sorted_marks
            ],
        )

    def to_core(self) -> Board:
        return Board(
            uuid=self.uuid,
            dimensions=BoardDimensions(width=self.width, height=self.height),
            marked_coordinates=frozenset(
                TileCoordinate(x=c.x, y=c.y) for c in self.marked_coordinates
            ),
        )


class SliceModel(BaseModel):
    direction: Direction
    line: int

    @classmethod
    def from_core(cls, slice_: Slice) -> SliceModel:
        return cls(direction=slice_.direction, line=slice_.line)

    def to_core(self) -> Slice:
        return Slice(direction=self.direction, line=self.line)


class PlayerInfoModel(BaseModel):
    uuid: str
    name: str
    turn_remainder: int = Field(ge=0)

    @classmethod
    def from_core(cls, info: PlayerInfo) -> PlayerInfoModel:
        return cls(uuid=info.uuid, name=info.name, turn_remainder=info.turn_remainder)

    def to_core(self) -> PlayerInfo:
        return PlayerInfo(uuid=self.uuid, name=self.name, turn_remainder=self.turn_remainder)


class ActionModel(BaseModel):
    slice: SliceModel
    board: BoardModel

    @classmethod
    def from_core(cls, action: Action) -> ActionModel:
        return cls(
            slice=SliceModel.from_core(action.slice),
            board=BoardModel.from_core(action.board),
        )

    def to_core(self) -> Action:
        return Action(slice=self.slice.to_core(), board=self.board.to_core())


class TurnModel(BaseModel):
    player: PlayerInfoModel
    action: ActionModel

    @classmethod
    def from_core(cls, turn: Turn) -> TurnModel:
        return cls(
            player=PlayerInfoModel.from_core(turn.player),
            action=ActionModel.from_core(turn.action),
        )

    def to_core(self) -> Turn:
        return Turn(player=self.player.to_core(), action=self.action.to_core())


class SliceResultModel(BaseModel):
    reduced_board: Optional[BoardModel] = None
    child_board: Optional[BoardModel] = None
    removed_boards: list[BoardModel] = Field(default_factory=list)

    @classmethod
    def from_core(cls, result: SliceResult) -> SliceResultModel:
        return cls(
            reduced_board=BoardModel.from_core(result.reduced_board) if result.reduced_board else None,
            child_board=BoardModel.from_core(result.child_board) if result.child_board else None,
            removed_boards=[BoardModel.from_core(b) for b in result.removed_boards],
        )

    def to_core(self) -> SliceResult:
        return SliceResult(
            reduced_board=self.reduced_board.to_core() if self.reduced_board else None,
            child_board=self.child_board.to_core() if self.child_board else None,
            removed_boards=tuple(b.to_core() for b in self.removed_boards),
        )


# =============================================================================
# Relay messages
# =============================================================================

class TurnMessage(BaseModel):
    """
    One committed turn, as sent to the other peers.

    turn_number is the index of the turn in the sender's history; the
    receiver only applies it when its own game is at the same turn.
    """
    game_id: str = ""
    turn_number: int = Field(ge=0)
    turn: TurnModel
    slice_result: SliceResultModel
    score_changes: dict[str, int] = Field(default_factory=dict)

    @classmethod
    def from_turn_result(cls, result: TurnResult, game_id: str = "") -> TurnMessage:
        return cls(
            game_id=game_id,
            turn_number=result.turn_number,
            turn=TurnModel.from_core(result.turn),
            slice_result=SliceResultModel.from_core(result.slice_result),
            score_changes=dict(result.score_changes),
        )

    def to_core(self) -> tuple[Turn, SliceResult]:
        return self.turn.to_core(), self.slice_result.to_core()


class SessionInfo(BaseModel):
    """
    Session record supplied by the relay at game start and on join.

    Player identifiers are taken as given; they are not checked for
    uniqueness or authenticity.
    """
    id: str
    players: list[PlayerInfoModel] = Field(default_factory=list)
    boards: list[BoardModel] = Field(default_factory=list)
    turn_log: list[TurnMessage] = Field(default_factory=list)

    def player_infos(self) -> list[PlayerInfo]:
        """Players sorted by turn order."""
        infos = [p.to_core() for p in self.players]
        return sorted(infos, key=lambda p: p.turn_remainder)

    def initial_boards(self) -> list[Board]:
        return [b.to_core() for b in self.boards]

    def turn_entries(self) -> list[tuple[Turn, SliceResult]]:
        """The turn log in order, ready for replay_turns()."""
        return [m.to_core() for m in sorted(self.turn_log, key=lambda m: m.turn_number)]
