"""
Network Player - Stands in for a remote peer.

The relay layer hands incoming turn messages to deliver(). get_action()
returns the turn whose turn_number matches the state it was asked for,
together with the sender's slice result boards, so the local copy of the
game keeps the same board uuids as the sender's.

Messages for earlier turns are stale and discarded. Messages for later
turns are kept until the game reaches them.
"""

from __future__ import annotations
import asyncio
import logging
from typing import TYPE_CHECKING

from ..engine_core.action import PlayerInfo
from .base import Player, PlayerDecision

if TYPE_CHECKING:
    from ..engine_core.state import GameState
    from ..network.messages import TurnMessage

logger = logging.getLogger(__name__)


class NetworkPlayer(Player):
    """
    Usage:
        remote = NetworkPlayer(session_info.player_infos()[1])

        # Relay handler
        remote.deliver(TurnMessage.model_validate(payload))
    """

    def __init__(self, info: PlayerInfo):
        super().__init__(info)
        self._inbox: asyncio.Queue[TurnMessage] = asyncio.Queue()
        self._early: dict[int, TurnMessage] = {}

    def deliver(self, message: TurnMessage) -> bool:
        """
        Accept a turn message from the relay.

        Returns False when the message was made by another player.
        """
        if message.turn.player.uuid != self.info.uuid:
            logger.warning(
                "Discarding turn %d for player %s: %s is not that player",
                message.turn_number,
                message.turn.player.uuid,
                self.info.uuid,
            )
            return False
        self._inbox.put_nowait(message)
        return True

    @property
    def queued(self) -> int:
        return self._inbox.qsize() + len(self._early)

    async def get_action(self, state: GameState) -> PlayerDecision:
        wanted = state.current_turn_number
        for number in [n for n in self._early if n < wanted]:
            logger.warning("Discarding stale turn %d (game is at turn %d)", number, wanted)
            del self._early[number]

        message = self._early.pop(wanted, None)
        while message is None:
            candidate = await self._inbox.get()
            if candidate.turn_number == wanted:
                message = candidate
            elif candidate.turn_number > wanted:
                self._early[candidate.turn_number] = candidate
            else:
                logger.warning(
                    "Discarding stale turn %d (game is at turn %d)",
                    candidate.turn_number,
                    wanted,
                )

        turn, slice_result = message.to_core()
        return PlayerDecision(
            action=turn.action,
            replacement_boards=tuple(slice_result.boards),
            player=turn.player,
        )
