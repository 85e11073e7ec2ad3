"""
Session Module - Runs games.

A Game drives the turn loop for one set of players and boards.
The SessionManager hosts several independent games at once:
- Created from setup options
- Loop runs as an asyncio task
- Closed and forgotten when the session ends

Nothing is persisted.
"""

from .game import EnginePhase, Game, TurnSubscriber
from .manager import Session, SessionManager, SessionState
from .setup import build_players, build_second_player, create_game, game_from_session_info

__all__ = [
    "EnginePhase",
    "Game",
    "TurnSubscriber",
    "Session",
    "SessionManager",
    "SessionState",
    "build_players",
    "build_second_player",
    "create_game",
    "game_from_session_info",
]
