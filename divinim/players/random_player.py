"""
Random Player - Picks a uniformly random available action.

Used for:
- Computer opponents in casual play
- Driving simulations and tests
"""

from __future__ import annotations
import asyncio
import random
from typing import TYPE_CHECKING

from ..engine_core.action import PlayerInfo
from ..engine_core.errors import NoAvailableActionsError
from .base import Player, PlayerDecision

if TYPE_CHECKING:
    from ..engine_core.state import GameState


class RandomPlayer(Player):
    """
    Random player - waits a fixed delay, then returns a random cut.

    The delay only simulates thinking; 0 makes it answer immediately.
    """

    def __init__(
        self,
        info: PlayerInfo,
        delay_seconds: float = 1.0,
        seed: int | None = None,
    ):
        super().__init__(info)
        self.delay_seconds = delay_seconds
        self.rng = random.Random(seed)

    @classmethod
    def create(
        cls,
        turn_remainder: int,
        name: str = "Random CPU",
        delay_seconds: float = 1.0,
        seed: int | None = None,
    ) -> RandomPlayer:
        """Factory with a fresh player uuid."""
        return cls(
            PlayerInfo.create(name=name, turn_remainder=turn_remainder),
            delay_seconds=delay_seconds,
            seed=seed,
        )

    async def get_action(self, state: GameState) -> PlayerDecision:
        actions = state.available_actions
        if not actions:
            # The engine only asks while no win condition has fired
            raise NoAvailableActionsError(
                "No available actions",
                context={"player": self.info.name, "turn": state.current_turn_number},
            )

        action = self.rng.choice(actions)
        if self.delay_seconds > 0:
            await asyncio.sleep(self.delay_seconds)
        return PlayerDecision(
            action=action,
            explanation=f"Selected randomly from {len(actions)} actions",
        )
