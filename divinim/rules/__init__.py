"""
Rules - Win and score conditions, selected at game setup.

Provides:
- WinCondition / ScoreCondition: named rule objects
- WinConditionKind / ScoreConditionKind: the closed set of rule kinds
- RuleConfig: setup configuration, rejects unknown kinds
- RuleSet: resolved conditions evaluated by the engine
"""

from .conditions import (
    WinCondition,
    ScoreCondition,
    WinConditionKind,
    ScoreConditionKind,
    WIN_CONDITIONS,
    SCORE_CONDITIONS,
    get_win_condition,
    get_score_condition,
)
from .registry import RuleConfig, RuleSet

__all__ = [
    "WinCondition",
    "ScoreCondition",
    "WinConditionKind",
    "ScoreConditionKind",
    "WIN_CONDITIONS",
    "SCORE_CONDITIONS",
    "get_win_condition",
    "get_score_condition",
    "RuleConfig",
    "RuleSet",
]
