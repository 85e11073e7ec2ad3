"""
Game Setup - Builds players, boards and the engine for a new game.

Two entry points:
- create_game(): a fresh local game from GameSetupOptions
- game_from_session_info(): a networked game from the relay's session
  record, with the turn log replayed so a late joiner catches up
"""

from __future__ import annotations
from typing import Mapping, Sequence
import random

from ..config import GameSetupOptions, PlayerType
from ..engine_core.action import PlayerInfo
from ..engine_core.board import generate_boards, generate_uuid
from ..engine_core.reducer import replay_turns
from ..engine_core.state import GameState
from ..network.messages import SessionInfo
from ..players.base import Player
from ..players.interactive_player import InteractivePlayer
from ..players.network_player import NetworkPlayer
from ..players.random_player import RandomPlayer
from ..rules.registry import RuleConfig
from .game import Game


def build_second_player(options: GameSetupOptions, name: str | None = None) -> Player:
    """The opponent in seat 1, as chosen by second_player_type."""
    kind = options.second_player_type
    if kind is PlayerType.RANDOM:
        return RandomPlayer.create(
            turn_remainder=1,
            name=name or "Random CPU",
            delay_seconds=options.random_player_delay_seconds,
            seed=options.seed,
        )
    if kind is PlayerType.INTERACTIVE:
        return InteractivePlayer.create(turn_remainder=1, name=name or "Player 2")
    return NetworkPlayer(PlayerInfo.create(name=name or "Remote Player", turn_remainder=1))


def build_players(
    options: GameSetupOptions,
    player_name: str = "Player",
    opponent_name: str | None = None,
) -> list[Player]:
    """Seat 0 is the local interactive player; seat 1 per the options."""
    return [
        InteractivePlayer.create(turn_remainder=0, name=player_name),
        build_second_player(options, opponent_name),
    ]


def create_game(
    options: GameSetupOptions | None = None,
    players: Sequence[Player] | None = None,
    game_id: str | None = None,
) -> Game:
    """
    Create a new game with freshly generated boards.

    Args:
        options: Setup options (defaults to GameSetupOptions())
        players: Players to seat; built from the options if not given
        game_id: Id for the game; a new short id if not given

    Returns:
        Game ready for play_loop()
    """
    options = options or GameSetupOptions()
    players = list(players) if players is not None else build_players(options)
    # One stream for boards, the game id and descendant uuids
    rng = random.Random(options.seed) if options.seed is not None else random.Random()

    boards = generate_boards(
        options.board_count,
        options.width,
        options.height,
        mark_probability=options.mark_probability,
        rng=rng,
    )
    state = GameState.create(
        players=[p.info for p in players],
        boards=boards,
        game_id=game_id or generate_uuid(rng),
    )
    return Game(state, players, options.rules, rng=rng)


def game_from_session_info(
    session_info: SessionInfo,
    local_players: Mapping[str, Player] | None = None,
    rules: RuleConfig | None = None,
) -> Game:
    """
    Create a game from a relay session record.

    Players listed in local_players (keyed by uuid) play on this machine;
    everyone else becomes a NetworkPlayer. Turns already in the session's
    turn log are replayed before the game is returned.
    """
    local_players = local_players or {}
    rules = rules or RuleConfig()
    players: list[Player] = [
        local_players.get(info.uuid) or NetworkPlayer(info)
        for info in session_info.player_infos()
    ]

    state = GameState.create(
        players=[p.info for p in players],
        boards=session_info.initial_boards(),
        game_id=session_info.id,
    )
    built = rules.build()
    if session_info.turn_log:
        state = replay_turns(state, session_info.turn_entries(), built.score_conditions)
    return Game(state, players, built)
