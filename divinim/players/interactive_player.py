"""
Interactive Player - Waits for an external trigger, such as a UI slice selection.

The engine's request stays pending until submit() is called. Submitted
actions are not checked here; the engine ignores invalid ones and asks
again, so a front end can pass raw clicks straight through.
"""

from __future__ import annotations
from typing import TYPE_CHECKING, Iterable

from ..engine_core.action import Action, PlayerInfo
from .base import Player, PlayerDecision
from .rendezvous import ActionSlot

if TYPE_CHECKING:
    from ..engine_core.board import Board
    from ..engine_core.state import GameState


class InteractivePlayer(Player):
    """
    Usage:
        player = InteractivePlayer.create(turn_remainder=0, name="Alice")

        # UI event handler
        player.submit(Action.vertical(board, 2))
    """

    def __init__(self, info: PlayerInfo):
        super().__init__(info)
        self.slot = ActionSlot(name=f"player:{info.uuid}")
        self.last_state: GameState | None = None

    @classmethod
    def create(cls, turn_remainder: int, name: str = "Player") -> InteractivePlayer:
        return cls(PlayerInfo.create(name=name, turn_remainder=turn_remainder))

    @property
    def waiting(self) -> bool:
        """Whether the engine is waiting for this player's action."""
        return self.slot.pending

    async def wait_until_asked(self, timeout: float | None = None) -> bool:
        """Wait until the engine requests an action. False on timeout."""
        return await self.slot.wait_for_request(timeout)

    async def get_action(self, state: GameState) -> PlayerDecision:
        self.last_state = state
        return await self.slot.wait()

    def submit(self, action: Action, replacement_boards: Iterable[Board] = ()) -> bool:
        """
        Answer the outstanding request.

        Returns False when the engine is not waiting for this player.
        """
        return self.slot.resolve(
            PlayerDecision(action=action, replacement_boards=tuple(replacement_boards))
        )
