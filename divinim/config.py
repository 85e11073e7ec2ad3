"""
Configuration - Environment settings and game setup options.

Environment variables:
    DIVINIM_ENV               deployment name (default: development)
    DIVINIM_LOG_LEVEL         logging level name (default: INFO)
    DIVINIM_RANDOM_DELAY_MS   random player thinking delay (default: 1000)
    DIVINIM_MAX_SESSIONS      games hosted at once by the API (default: 100)
    ALLOWED_ORIGINS           comma separated CORS origins (default: *)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
import logging
import os

from .rules.registry import RuleConfig

DEFAULT_RANDOM_DELAY_MS = 1000
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    """Process-wide settings, read once from the environment."""
    env: str = "development"
    log_level: str = "INFO"
    random_delay_ms: int = DEFAULT_RANDOM_DELAY_MS
    max_sessions: int = 100
    allowed_origins: tuple[str, ...] = ("*",)

    @classmethod
    def from_env(cls) -> Settings:
        origins = os.getenv("ALLOWED_ORIGINS", "*").split(",")
        return cls(
            env=os.getenv("DIVINIM_ENV", "development"),
            log_level=os.getenv("DIVINIM_LOG_LEVEL", "INFO").upper(),
            random_delay_ms=_int_env("DIVINIM_RANDOM_DELAY_MS", DEFAULT_RANDOM_DELAY_MS),
            max_sessions=_int_env("DIVINIM_MAX_SESSIONS", 100),
            allowed_origins=tuple(o.strip() for o in origins if o.strip()),
        )


def configure_logging(level: str | int = "INFO") -> None:
    """Set up root logging once for the CLI or the API server."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("divinim").setLevel(level)


class PlayerType(str, Enum):
    """Who controls the second seat."""
    RANDOM = "random"
    INTERACTIVE = "interactive"
    NETWORK = "network"


@dataclass(frozen=True)
class GameSetupOptions:
    """
    Everything needed to start a new game.

    The first seat is always an interactive player unless a caller
    supplies its own players; second_player_type picks the opponent.
    """
    second_player_type: PlayerType = PlayerType.RANDOM
    random_player_delay_ms: int = DEFAULT_RANDOM_DELAY_MS
    board_count: int = 3
    width: int = 4
    height: int = 4
    mark_probability: float = 0.5
    seed: int | None = None
    rules: RuleConfig = field(default_factory=RuleConfig)

    def __post_init__(self):
        object.__setattr__(self, "second_player_type", PlayerType(self.second_player_type))
        if self.random_player_delay_ms < 0:
            raise ValueError("random_player_delay_ms must be >= 0")
        if self.board_count < 1:
            raise ValueError("board_count must be >= 1")
        if self.width < 1 or self.height < 1 or self.width * self.height < 2:
            raise ValueError("Boards must have at least two tiles")
        if not 0 < self.mark_probability <= 1:
            raise ValueError("mark_probability must be in (0, 1]")

    @property
    def random_player_delay_seconds(self) -> float:
        return self.random_player_delay_ms / 1000
