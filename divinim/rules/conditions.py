"""
Rule Conditions - Win and score conditions.

A win condition looks at a state and returns the winners, or None while
the game goes on. A score condition looks at one applied turn and
returns score deltas keyed by player uuid, or None when nothing changes.

Conditions are closed variants: each family has an enum of kinds and a
lookup table from kind to condition. Configuration only ever refers to
kinds, so an unknown name is caught before a game starts.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from ..engine_core.action import PlayerInfo
from ..engine_core.errors import UnknownConditionError
from ..engine_core.state import GameState, TurnResult


class WinConditionKind(Enum):
    """Available win conditions."""
    NO_MOVES_LEFT = "no_moves_left"
    HIGHEST_SCORE = "highest_score"
    LOWEST_SCORE = "lowest_score"


class ScoreConditionKind(Enum):
    """Available score conditions."""
    MARKED_SQUARES = "marked_squares"
    TOTAL_AREA = "total_area"


@dataclass(frozen=True)
class WinCondition:
    """A named rule deciding whether, and to whom, the game ends."""
    kind: WinConditionKind
    name: str
    description: str
    condition: Callable[[GameState], list[PlayerInfo] | None]

    def evaluate(self, state: GameState) -> list[PlayerInfo] | None:
        return self.condition(state)


@dataclass(frozen=True)
class ScoreCondition:
    """A named rule awarding points for one applied turn."""
    kind: ScoreConditionKind
    name: str
    description: str
    condition: Callable[[TurnResult], dict[str, int] | None]

    def evaluate(self, turn_result: TurnResult) -> dict[str, int] | None:
        return self.condition(turn_result)


# =============================================================================
# Win conditions
# =============================================================================

def no_moves_left(state: GameState) -> list[PlayerInfo] | None:
    """
    When no cut is left, the player who made the last move wins.

    The player who now has to move, and cannot, loses.
    """
    if state.has_available_actions:
        return None
    return [state.previous_player]


def no_moves_highest_score(state: GameState) -> list[PlayerInfo] | None:
    """When no cut is left, every player tied for the highest score wins."""
    if state.has_available_actions:
        return None
    best = max(state.score_of(p.uuid) for p in state.players)
    return [p for p in state.players if state.score_of(p.uuid) == best]


def no_moves_lowest_score(state: GameState) -> list[PlayerInfo] | None:
    """When no cut is left, every player tied for the lowest score wins."""
    if state.has_available_actions:
        return None
    lowest = min(state.score_of(p.uuid) for p in state.players)
    return [p for p in state.players if state.score_of(p.uuid) == lowest]


# =============================================================================
# Score conditions
# =============================================================================

def marked_squares(turn_result: TurnResult) -> dict[str, int] | None:
    """One point to the mover per marked tile on each removed board."""
    points = turn_result.slice_result.removed_mark_count
    if points > 0:
        return {turn_result.turn.player.uuid: points}
    return None


def total_area(turn_result: TurnResult) -> dict[str, int] | None:
    """Points to the mover equal to the total area of the removed boards."""
    area = turn_result.slice_result.removed_area
    if area > 0:
        return {turn_result.turn.player.uuid: area}
    return None


WIN_CONDITIONS: dict[WinConditionKind, WinCondition] = {
    WinConditionKind.NO_MOVES_LEFT: WinCondition(
        kind=WinConditionKind.NO_MOVES_LEFT,
        name="No Moves Left",
        description=(
            "The game ends when a player has no valid moves available. "
            "The other player wins."
        ),
        condition=no_moves_left,
    ),
    WinConditionKind.HIGHEST_SCORE: WinCondition(
        kind=WinConditionKind.HIGHEST_SCORE,
        name="No Moves Highest Score",
        description=(
            "The game ends when a player has no valid moves available. "
            "The player with the highest score wins."
        ),
        condition=no_moves_highest_score,
    ),
    WinConditionKind.LOWEST_SCORE: WinCondition(
        kind=WinConditionKind.LOWEST_SCORE,
        name="No Moves Lowest Score",
        description=(
            "The game ends when a player has no valid moves available. "
            "The player with the lowest score wins."
        ),
        condition=no_moves_lowest_score,
    ),
}

SCORE_CONDITIONS: dict[ScoreConditionKind, ScoreCondition] = {
    ScoreConditionKind.MARKED_SQUARES: ScoreCondition(
        kind=ScoreConditionKind.MARKED_SQUARES,
        name="Marked Squares",
        description="Points are awarded for each marked square removed from the board.",
        condition=marked_squares,
    ),
    ScoreConditionKind.TOTAL_AREA: ScoreCondition(
        kind=ScoreConditionKind.TOTAL_AREA,
        name="Total Area",
        description="Points are awarded for the total area of the removed boards.",
        condition=total_area,
    ),
}


def parse_win_condition_kind(value: WinConditionKind | str) -> WinConditionKind:
    """Resolve an enum member or its value; unknown values raise."""
    if isinstance(value, WinConditionKind):
        return value
    try:
        return WinConditionKind(value)
    except ValueError:
        raise UnknownConditionError(
            f"Unknown win condition: {value!r}",
            context={"valid": [k.value for k in WinConditionKind]},
        ) from None


def parse_score_condition_kind(value: ScoreConditionKind | str) -> ScoreConditionKind:
    """Resolve an enum member or its value; unknown values raise."""
    if isinstance(value, ScoreConditionKind):
        return value
    try:
        return ScoreConditionKind(value)
    except ValueError:
        raise UnknownConditionError(
            f"Unknown score condition: {value!r}",
            context={"valid": [k.value for k in ScoreConditionKind]},
        ) from None


def get_win_condition(kind: WinConditionKind | str) -> WinCondition:
    return WIN_CONDITIONS[parse_win_condition_kind(kind)]


def get_score_condition(kind: ScoreConditionKind | str) -> ScoreCondition:
    return SCORE_CONDITIONS[parse_score_condition_kind(kind)]
