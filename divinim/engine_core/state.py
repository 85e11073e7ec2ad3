"""
Game State - Authoritative snapshot of one Divinim game.

Design principles:
- Immutable: states are frozen, every turn produces a new state value
- Serializable: boards, players, scores and turns are plain values
- Derived queries: current player, available actions etc. are computed
- Extensible: presentation layers subclass GameState and override
  post_turn_update() to keep their own auxiliary data in step
"""

from __future__ import annotations
from dataclasses import dataclass, field, fields, replace
from types import MappingProxyType
from typing import Any, Iterable, Mapping

from .action import Action, PlayerInfo, Turn
from .action_generator import actions_for_board
from .board import Board
from .slice import SliceResult


def _freeze(mapping: Mapping[str, Any]) -> Mapping[str, Any]:
    if isinstance(mapping, MappingProxyType):
        return mapping
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class GameState:
    """
    Complete game state after some number of turns.

    Invariants:
    - boards holds exactly the live (unresolved) boards, keyed by uuid
    - players are sorted by turn_remainder
    - scores has one entry per player
    - current_turn_number == len(turn_history)
    """
    boards: Mapping[str, Board]
    players: tuple[PlayerInfo, ...]
    scores: Mapping[str, int]
    turn_history: tuple[Turn, ...] = ()
    game_id: str = ""

    def __post_init__(self):
        object.__setattr__(self, "boards", _freeze(self.boards))
        object.__setattr__(self, "scores", _freeze(self.scores))
        object.__setattr__(
            self,
            "players",
            tuple(sorted(self.players, key=lambda p: p.turn_remainder)),
        )
        object.__setattr__(self, "turn_history", tuple(self.turn_history))

    @classmethod
    def create(
        cls,
        players: Iterable[PlayerInfo],
        boards: Iterable[Board],
        game_id: str = "",
    ) -> GameState:
        """Create the initial state: no turns played, every score at 0."""
        players = tuple(players)
        if not players:
            raise ValueError("A game needs at least one player")
        board_map = {}
        for board in boards:
            if board.is_resolved:
                raise ValueError(f"Board {board.uuid} is already resolved")
            board_map[board.uuid] = board
        return cls(
            boards=board_map,
            players=players,
            scores={p.uuid: 0 for p in players},
            game_id=game_id,
        )

    # -------------------------------------------------------------------------
    # Derived queries
    # -------------------------------------------------------------------------

    @property
    def player_count(self) -> int:
        return len(self.players)

    @property
    def current_turn_number(self) -> int:
        return len(self.turn_history)

    @property
    def current_player(self) -> PlayerInfo:
        """The player whose turn it is now."""
        return self.players[self.current_turn_number % self.player_count]

    @property
    def previous_player(self) -> PlayerInfo:
        """The player who made the last move (the last seat before any turn)."""
        return self.players[(self.current_turn_number - 1) % self.player_count]

    @property
    def available_actions(self) -> list[Action]:
        """Every interior cut on every live board."""
        actions: list[Action] = []
        for board in self.boards.values():
            actions.extend(actions_for_board(board))
        return actions

    @property
    def available_action_count(self) -> int:
        return sum(b.width - 1 + b.height - 1 for b in self.boards.values())

    @property
    def has_available_actions(self) -> bool:
        return any(b.width > 1 or b.height > 1 for b in self.boards.values())

    def get_board(self, board_uuid: str) -> Board | None:
        return self.boards.get(board_uuid)

    def get_player(self, player_uuid: str) -> PlayerInfo | None:
        """Get player by uuid."""
        for p in self.players:
            if p.uuid == player_uuid:
                return p
        return None

    def score_of(self, player_uuid: str) -> int:
        return self.scores.get(player_uuid, 0)

    def is_player_turn(self, player: PlayerInfo) -> bool:
        return self.current_turn_number % self.player_count == player.turn_remainder

    # -------------------------------------------------------------------------
    # Copying
    # -------------------------------------------------------------------------

    def copy_with(self, **kwargs: Any) -> GameState:
        """
        Return a copy with some fields replaced.

        Unknown field names raise TypeError. Subclasses keep their type and
        their own extra fields.
        """
        known = {f.name for f in fields(self)}
        unknown = set(kwargs) - known
        if unknown:
            raise TypeError(f"Unknown GameState fields: {sorted(unknown)}")
        return replace(self, **kwargs)

    def post_turn_update(self, turn_result: TurnResult) -> GameState:
        """
        Hook called once per applied turn, on the new state.

        Returns the state to commit. The base state has no auxiliary data,
        so it returns itself.
        """
        return self


@dataclass(frozen=True)
class TurnResult:
    """
    Everything that happened in one applied turn.

    Consumed by score conditions, post_turn_update hooks and turn
    subscribers (layout, network broadcast).
    """
    turn: Turn
    in_state: GameState
    out_state: GameState
    slice_result: SliceResult
    score_changes: Mapping[str, int] = field(default_factory=dict)

    @property
    def turn_number(self) -> int:
        """Index of this turn in the turn history."""
        return self.in_state.current_turn_number
