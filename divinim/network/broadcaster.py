"""
Turn Broadcaster - Sends locally made turns to the relay.

Subscribe an instance to a Game. After each committed turn made by a
local player it builds a TurnMessage and hands it to send(). Turns that
came in from the network are not echoed back.
"""

from __future__ import annotations
import asyncio
import inspect
import logging
from typing import Any, Callable, Iterable

from ..engine_core.state import TurnResult
from .messages import TurnMessage

logger = logging.getLogger(__name__)


class TurnBroadcaster:
    """
    Usage:
        broadcaster = TurnBroadcaster(relay.send, game.game_id, [local.info.uuid])
        unsubscribe = game.subscribe(broadcaster)

    send may be a plain function or a coroutine function. Coroutines are
    scheduled on the running loop; the game never waits for delivery.
    """

    def __init__(
        self,
        send: Callable[[TurnMessage], Any],
        game_id: str = "",
        local_player_uuids: Iterable[str] | None = None,
    ):
        self.send = send
        self.game_id = game_id
        self.local_player_uuids = set(local_player_uuids) if local_player_uuids is not None else None
        self.sent: list[TurnMessage] = []
        self._tasks: set[asyncio.Future] = set()

    def __call__(self, turn_result: TurnResult) -> None:
        player_uuid = turn_result.turn.player.uuid
        if self.local_player_uuids is not None and player_uuid not in self.local_player_uuids:
            return

        message = TurnMessage.from_turn_result(turn_result, game_id=self.game_id)
        self.sent.append(message)
        result = self.send(message)
        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._tasks.add(task)
            task.add_done_callback(self._on_sent)

    def _on_sent(self, task: asyncio.Future) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("Failed to send turn for game %s: %s", self.game_id, error)

    async def flush(self) -> None:
        """Wait for every scheduled send to finish."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
