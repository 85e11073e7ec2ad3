"""
Rule Registry - Game setup configuration for win and score conditions.

RuleConfig is the enumerable, serializable configuration chosen at game
setup. RuleSet is what the engine runs: the resolved condition objects.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable

from ..engine_core.action import PlayerInfo
from ..engine_core.state import GameState
from .conditions import (
    ScoreCondition,
    ScoreConditionKind,
    WinCondition,
    WinConditionKind,
    get_score_condition,
    get_win_condition,
    parse_score_condition_kind,
    parse_win_condition_kind,
)


def _unique(items: Iterable) -> tuple:
    seen = []
    for item in items:
        if item not in seen:
            seen.append(item)
    return tuple(seen)


@dataclass(frozen=True)
class RuleConfig:
    """
    Which conditions a game uses.

    Accepts enum members or their string values. Anything else raises
    UnknownConditionError when the config is built, and an empty set of
    win conditions raises ValueError.
    """
    win_conditions: tuple[WinConditionKind, ...] = (WinConditionKind.NO_MOVES_LEFT,)
    score_conditions: tuple[ScoreConditionKind, ...] = ()

    def __post_init__(self):
        object.__setattr__(
            self,
            "win_conditions",
            _unique(parse_win_condition_kind(v) for v in self.win_conditions),
        )
        if not self.win_conditions:
            raise ValueError("At least one win condition is required")
        object.__setattr__(
            self,
            "score_conditions",
            _unique(parse_score_condition_kind(v) for v in self.score_conditions),
        )

    @classmethod
    def from_values(
        cls,
        win_conditions: Iterable[str] | None = None,
        score_conditions: Iterable[str] | None = None,
    ) -> RuleConfig:
        """Build from plain strings, e.g. from a request or the command line."""
        kwargs = {}
        if win_conditions is not None:
            kwargs["win_conditions"] = tuple(win_conditions)
        if score_conditions is not None:
            kwargs["score_conditions"] = tuple(score_conditions)
        return cls(**kwargs)

    def to_values(self) -> dict[str, list[str]]:
        return {
            "win_conditions": [k.value for k in self.win_conditions],
            "score_conditions": [k.value for k in self.score_conditions],
        }

    def build(self) -> RuleSet:
        return RuleSet(
            win_conditions=tuple(get_win_condition(k) for k in self.win_conditions),
            score_conditions=tuple(get_score_condition(k) for k in self.score_conditions),
        )


@dataclass(frozen=True)
class RuleSet:
    """The resolved conditions a game evaluates."""
    win_conditions: tuple[WinCondition, ...] = ()
    score_conditions: tuple[ScoreCondition, ...] = ()

    def winners(self, state: GameState) -> list[PlayerInfo]:
        """
        Winners according to every win condition.

        A player appears at most once per condition; lists from different
        conditions are concatenated in configuration order. Empty means the
        game goes on.
        """
        winners: list[PlayerInfo] = []
        for condition in self.win_conditions:
            result = condition.evaluate(state)
            if not result:
                continue
            seen: set[str] = set()
            for player in result:
                if player.uuid not in seen:
                    seen.add(player.uuid)
                    winners.append(player)
        return winners
