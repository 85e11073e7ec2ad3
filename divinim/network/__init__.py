"""
Network module - What crosses the relay between peers.

Provides:
- TurnMessage: one committed turn with its slice result
- SessionInfo: the relay's session record (players, boards, turn log)
- SocketEvent: relay event names
- TurnBroadcaster: Game subscriber that sends local turns out
"""

from .messages import (
    ActionModel,
    BoardModel,
    PlayerInfoModel,
    SessionInfo,
    SliceModel,
    SliceResultModel,
    SocketEvent,
    TileCoordinateModel,
    TurnMessage,
    TurnModel,
)
from .broadcaster import TurnBroadcaster

__all__ = [
    "ActionModel",
    "BoardModel",
    "PlayerInfoModel",
    "SessionInfo",
    "SliceModel",
    "SliceResultModel",
    "SocketEvent",
    "TileCoordinateModel",
    "TurnMessage",
    "TurnModel",
    "TurnBroadcaster",
]
