"""
Divinim CLI - Command-line interface for the engine.

Usage:
    divinim play                  Watch two random players play a game
    divinim rules                 List win and score conditions
    divinim serve                 Run the HTTP API with uvicorn
"""

import argparse
import asyncio
import sys

from .config import GameSetupOptions, Settings, configure_logging
from .engine_core.action import turn_to_string
from .engine_core.errors import DivinimError


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Divinim - Board Slicing Game Engine",
        prog="divinim",
    )
    parser.add_argument("--log-level", default=None, help="Logging level (default: DIVINIM_LOG_LEVEL or INFO)")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Play command
    play_parser = subparsers.add_parser("play", help="Play a random vs random game")
    play_parser.add_argument("--boards", type=int, default=3, help="Number of starting boards")
    play_parser.add_argument("--width", type=int, default=4, help="Board width")
    play_parser.add_argument("--height", type=int, default=4, help="Board height")
    play_parser.add_argument("--mark-probability", type=float, default=0.5, help="Chance a tile is marked")
    play_parser.add_argument("--win", nargs="+", default=["no_moves_left"], help="Win conditions")
    play_parser.add_argument("--score", nargs="*", default=[], help="Score conditions")
    play_parser.add_argument("--delay-ms", type=int, default=0, help="Random player thinking delay")
    play_parser.add_argument("--seed", type=int, default=None, help="Seed for a reproducible game")

    # Rules command
    subparsers.add_parser("rules", help="List win and score conditions")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port")

    args = parser.parse_args(argv)
    settings = Settings.from_env()
    configure_logging(args.log_level or settings.log_level)

    if args.command == "play":
        return cmd_play(args)
    elif args.command == "rules":
        return cmd_rules(args)
    elif args.command == "serve":
        return cmd_serve(args, settings)
    else:
        parser.print_help()
        sys.exit(1)


def cmd_play(args):
    """Play a game between two random players."""
    from .players import RandomPlayer
    from .rules import RuleConfig
    from .session import create_game

    try:
        rules = RuleConfig.from_values(args.win, args.score)
        options = GameSetupOptions(
            random_player_delay_ms=args.delay_ms,
            board_count=args.boards,
            width=args.width,
            height=args.height,
            mark_probability=args.mark_probability,
            seed=args.seed,
            rules=rules,
        )
    except (DivinimError, ValueError) as e:
        print(f"Error: {e}")
        sys.exit(2)

    seed = args.seed
    players = [
        RandomPlayer.create(
            turn_remainder=i,
            name=f"Random {i + 1}",
            delay_seconds=options.random_player_delay_seconds,
            seed=None if seed is None else seed + i,
        )
        for i in range(2)
    ]
    game = create_game(options, players)

    print(f"Game {game.game_id}: {len(game.state.boards)} boards")
    for board in game.state.boards.values():
        print(f"  {board.uuid} {board.width}x{board.height}, {board.mark_count} marked")

    def on_turn(result):
        print(f"Turn {result.turn_number}: {turn_to_string(result.turn)}")
        for player_uuid, delta in result.score_changes.items():
            print(f"  +{delta} {result.out_state.get_player(player_uuid).name}")

    game.subscribe(on_turn)
    winners = asyncio.run(game.play_loop())

    print("\nScores:")
    for player in game.players:
        print(f"  {player.name}: {game.state.score_of(player.info.uuid)}")
    print(f"Winners: {', '.join(w.name for w in winners) or 'none'}")
    return 0


def cmd_rules(args):
    """List every win and score condition."""
    from .rules import SCORE_CONDITIONS, WIN_CONDITIONS

    print("Win conditions:")
    for kind, condition in WIN_CONDITIONS.items():
        print(f"  {kind.value:<16} {condition.name}: {condition.description}")
    print("\nScore conditions:")
    for kind, condition in SCORE_CONDITIONS.items():
        print(f"  {kind.value:<16} {condition.name}: {condition.description}")
    return 0


def cmd_serve(args, settings):
    """Run the API server."""
    try:
        import uvicorn
    except ImportError:
        print("Error: uvicorn not installed. Install with: pip install uvicorn")
        sys.exit(1)

    from .api import create_app

    uvicorn.run(create_app(settings=settings), host=args.host, port=args.port)
    return 0


if __name__ == "__main__":
    main()
