"""
Session Manager - Hosts independent games in memory.

LIFECYCLE:
1. create_session() builds a Game from setup options
2. start_session() runs its play_loop() as a task on the running loop
3. While the game runs, callers submit actions and read state
4. end_session() closes the game, cancels its task and forgets it

PERSISTENCE RULES:
- No database; a session lives only in this process
- A restarted game is a new session; the old Game instance is closed,
  so late decisions meant for it are discarded
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Sequence, TYPE_CHECKING
import asyncio
import logging
import time

from ..config import GameSetupOptions
from .game import Game
from .setup import create_game

if TYPE_CHECKING:
    from ..engine_core.action import PlayerInfo
    from ..players.base import Player

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """State of a game session."""
    CREATED = "created"  # Game built, loop not started
    ACTIVE = "active"  # Loop running
    GAME_OVER = "game_over"  # A win condition fired
    FAILED = "failed"  # Loop raised
    ABANDONED = "abandoned"  # Ended before the game was over


@dataclass
class Session:
    """
    One hosted game.

    Contains:
    - The Game and the options it was created from
    - The task running its loop, once started
    - Session metadata
    """
    session_id: str
    game: Game
    options: GameSetupOptions
    created_at: float

    state: SessionState = SessionState.CREATED
    task: asyncio.Task | None = None
    winners: list[PlayerInfo] = field(default_factory=list)
    error: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def is_active(self) -> bool:
        """Check if session is still active."""
        return self.state in {SessionState.CREATED, SessionState.ACTIVE}


class SessionManager:
    """
    Manages hosted games.

    Responsibilities:
    - Create games from setup options
    - Run their turn loops
    - Track and clean up sessions

    No persistence - sessions are in-memory only.
    """

    def __init__(self, max_sessions: int = 100):
        self.max_sessions = max_sessions
        self._sessions: dict[str, Session] = {}

    def create_session(
        self,
        options: GameSetupOptions | None = None,
        players: Sequence[Player] | None = None,
    ) -> Session:
        """
        Create a new game session.

        Args:
            options: Game setup options
            players: Players to seat instead of the ones built from options

        Returns:
            New Session, not yet started
        """
        if len(self._sessions) >= self.max_sessions:
            self.cleanup_stale_sessions(max_age_seconds=0)
        if len(self._sessions) >= self.max_sessions:
            raise RuntimeError(f"Too many sessions (limit {self.max_sessions})")

        options = options or GameSetupOptions()
        game = create_game(options, players)
        session = Session(
            session_id=game.game_id,
            game=game,
            options=options,
            created_at=time.time(),
        )
        self._sessions[session.session_id] = session
        logger.info("Created session %s", session.session_id)
        return session

    def start_session(self, session_id: str) -> asyncio.Task:
        """Run the session's turn loop on the running event loop."""
        session = self._sessions.get(session_id)
        if session is None:
            raise KeyError(session_id)
        if session.task is None:
            session.task = asyncio.get_running_loop().create_task(self._run(session))
            session.state = SessionState.ACTIVE
        return session.task

    async def _run(self, session: Session) -> None:
        try:
            session.winners = await session.game.play_loop()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            session.state = SessionState.FAILED
            session.error = str(e)
            logger.exception("Game loop for session %s failed", session.session_id)
            return
        if session.game.closed:
            session.state = SessionState.ABANDONED
        else:
            session.state = SessionState.GAME_OVER

    def get_session(self, session_id: str) -> Session | None:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    def end_session(self, session_id: str, reason: str = "completed") -> bool:
        """
        End a session and clean up.

        The game is closed before its task is cancelled, so a decision
        that resolves in between is discarded rather than applied.
        """
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False

        session.game.close()
        if session.task is not None and not session.task.done():
            session.task.cancel()
        if session.is_active():
            session.state = SessionState.ABANDONED
        logger.info("Ended session %s (%s)", session_id, reason)
        return True

    def list_active_sessions(self) -> list[str]:
        """List IDs of active sessions."""
        return [
            sid for sid, session in self._sessions.items()
            if session.is_active()
        ]

    def list_sessions(self) -> list[str]:
        return list(self._sessions)

    def cleanup_stale_sessions(self, max_age_seconds: int = 3600) -> int:
        """
        Remove finished sessions older than max_age.

        Called periodically to free memory. Returns how many were removed.
        """
        current_time = time.time()
        to_remove = [
            session_id
            for session_id, session in self._sessions.items()
            if current_time - session.created_at >= max_age_seconds and not session.is_active()
        ]
        for session_id in to_remove:
            self.end_session(session_id, reason="stale")
        return len(to_remove)

    async def shutdown(self) -> None:
        """End every session and wait for their tasks to stop."""
        tasks = [s.task for s in self._sessions.values() if s.task is not None]
        for session_id in list(self._sessions):
            self.end_session(session_id, reason="shutdown")
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
