"""
Players module - Anything that chooses actions for a seat.

Provides:
- Player: Interface the game engine awaits
- PlayerDecision: An action plus optional replacement boards
- RandomPlayer: Computer opponent picking random cuts
- InteractivePlayer: Waits for a UI or HTTP submission
- NetworkPlayer: Waits for a remote peer's turn message
- ActionSlot: Single-slot rendezvous used by interactive play
"""

from .base import Player, PlayerDecision
from .rendezvous import ActionSlot
from .random_player import RandomPlayer
from .interactive_player import InteractivePlayer
from .network_player import NetworkPlayer

__all__ = [
    "Player",
    "PlayerDecision",
    "ActionSlot",
    "RandomPlayer",
    "InteractivePlayer",
    "NetworkPlayer",
]
