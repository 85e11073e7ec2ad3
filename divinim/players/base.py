"""
Player Base - Interface for anything that chooses actions.

A Player takes the current game state and returns a decision. The engine
awaits the decision without knowing whether it comes from a random bot,
a person clicking a board, or a message from a remote peer.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..engine_core.action import Action, PlayerInfo
    from ..engine_core.board import Board
    from ..engine_core.state import GameState


@dataclass(frozen=True)
class PlayerDecision:
    """
    A decision made by a player.

    Contains:
    - The action to take
    - Boards the player already knows as descendants of this slice
      (a peer's slice result, or boards a UI is animating), so the
      engine can keep their identities
    - The player the source claims to be, when it is not the asked player
    """
    action: Action
    replacement_boards: tuple[Board, ...] = ()
    player: PlayerInfo | None = None
    explanation: str = ""


class Player(ABC):
    """
    Abstract base class for players.

    Implementations may suspend for as long as they need; the engine
    imposes no timeout.
    """

    def __init__(self, info: PlayerInfo):
        self.info = info

    @abstractmethod
    async def get_action(self, state: GameState) -> PlayerDecision:
        """
        Choose an action for the current state.

        Args:
            state: The committed state the action will be applied to

        Returns:
            PlayerDecision with the chosen action
        """
        pass

    @property
    def name(self) -> str:
        return self.info.name

    @property
    def turn_remainder(self) -> int:
        return self.info.turn_remainder

    def get_name(self) -> str:
        """Get the player's kind, for logs and the API."""
        return self.__class__.__name__

    def __repr__(self) -> str:
        return f"{self.get_name()}({self.info.name!r}, seat={self.info.turn_remainder})"
