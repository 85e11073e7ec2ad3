"""
API Service - Business logic layer between the HTTP API and the engine.

The service:
1. Translates API requests to engine calls
2. Hosts games through the SessionManager
3. Hands interactive slices and relay messages to the right players
4. Formats responses for front ends

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable
import logging

from ..config import GameSetupOptions, Settings
from ..engine_core.action import Action, action_to_string
from ..engine_core.errors import DivinimError, GameClosedError, MissingBoardError
from ..engine_core.slice import Slice
from ..engine_core.state import TurnResult
from ..network.messages import BoardModel, PlayerInfoModel, TurnMessage
from ..players.interactive_player import InteractivePlayer
from ..players.network_player import NetworkPlayer
from ..rules.conditions import SCORE_CONDITIONS, WIN_CONDITIONS
from ..rules.registry import RuleConfig
from ..session.manager import Session, SessionManager, SessionState
from ..session.setup import build_players
from .schemas import (
    ActionInfo,
    ActionsResponse,
    ConditionInfo,
    CreateGameRequest,
    DeliverMessageResponse,
    EndGameResponse,
    GameListResponse,
    GameStateResponse,
    GameStatus,
    PlayerStatus,
    RulesResponse,
    SubmitActionRequest,
    SubmitActionResponse,
)

logger = logging.getLogger(__name__)

# Seconds to wait for the loop to ask an interactive player after a turn
REQUEST_WAIT_SECONDS = 5.0


class GameNotFoundError(DivinimError):
    """No hosted game has this id."""
    code = "GAME_NOT_FOUND"


class NotYourTurnError(DivinimError):
    """The submitting player cannot move now."""
    code = "NOT_YOUR_TURN"


@dataclass
class GameService:
    """
    Main API service.

    Usage:
        service = GameService()

        # Create and start a game (inside a running event loop)
        state = await service.create_game(CreateGameRequest())

        # Submit a slice for the local player
        result = await service.submit_action(state.game_id, request)
    """
    settings: Settings = field(default_factory=Settings.from_env)
    session_manager: SessionManager | None = None

    def __post_init__(self):
        if self.session_manager is None:
            self.session_manager = SessionManager(max_sessions=self.settings.max_sessions)

    # =========================================================================
    # Games
    # =========================================================================

    async def create_game(self, request: CreateGameRequest) -> GameStateResponse:
        """
        Create a game and start its turn loop.

        Raises UnknownConditionError for unknown rule names and ValueError
        for invalid board options.
        """
        rules = RuleConfig.from_values(request.win_conditions, request.score_conditions)
        delay_ms = request.random_player_delay_ms
        if delay_ms is None:
            delay_ms = self.settings.random_delay_ms
        options = GameSetupOptions(
            second_player_type=request.second_player_type,
            random_player_delay_ms=delay_ms,
            board_count=request.board_count,
            width=request.width,
            height=request.height,
            mark_probability=request.mark_probability,
            seed=request.seed,
            rules=rules,
        )
        players = build_players(options, request.player_name, request.opponent_name)
        session = self.session_manager.create_session(options, players)
        self.session_manager.start_session(session.session_id)
        return self.get_game(session.session_id)

    def get_game(self, game_id: str) -> GameStateResponse:
        session = self._require(game_id)
        game = session.game
        state = game.state
        current = game.current_player()
        over = game.is_over

        return GameStateResponse(
            game_id=game_id,
            status=self._status(session),
            phase=game.phase.value,
            turn_number=state.current_turn_number,
            players=[
                PlayerStatus(
                    uuid=p.info.uuid,
                    name=p.name,
                    turn_remainder=p.turn_remainder,
                    player_type=p.get_name(),
                    score=state.score_of(p.info.uuid),
                    is_current_turn=not over and p is current,
                    waiting=isinstance(p, InteractivePlayer) and p.waiting,
                )
                for p in game.players
            ],
            boards=[BoardModel.from_core(b) for b in state.boards.values()],
            current_player_uuid=None if over else current.info.uuid,
            available_action_count=state.available_action_count,
            turn_log=[
                TurnMessage.from_turn_result(r, game_id=game_id) for r in game.turn_results
            ],
            winners=[PlayerInfoModel.from_core(w) for w in game.winners],
            error=session.error,
        )

    def list_games(self) -> GameListResponse:
        games = self.session_manager.list_sessions()
        return GameListResponse(games=games, count=len(games))

    def end_game(self, game_id: str) -> EndGameResponse:
        success = self.session_manager.end_session(game_id, reason="user_ended")
        return EndGameResponse(success=success, game_id=game_id)

    def get_actions(self, game_id: str) -> ActionsResponse:
        game = self._require(game_id).game
        actions = [] if game.is_over else game.get_available_actions()
        return ActionsResponse(
            game_id=game_id,
            turn_number=game.state.current_turn_number,
            actions=[
                ActionInfo(
                    board_uuid=a.board.uuid,
                    direction=a.slice.direction,
                    line=a.slice.line,
                    label=action_to_string(a),
                )
                for a in actions
            ],
            count=len(actions),
        )

    def subscribe(self, game_id: str, callback: Callable[[TurnResult], None]) -> Callable[[], None]:
        """Register a turn subscriber on a hosted game."""
        return self._require(game_id).game.subscribe(callback)

    # =========================================================================
    # Turns
    # =========================================================================

    async def submit_action(
        self,
        game_id: str,
        request: SubmitActionRequest,
    ) -> SubmitActionResponse:
        """
        Hand an interactive player's slice to the turn loop.

        Waits until the loop handled it. An out-of-bounds line is not an
        error: the loop ignores it and accepted is False.
        """
        game = self._require(game_id).game
        if game.is_over or game.closed:
            raise GameClosedError("Game is over", context={"game": game_id})

        player = game.get_player(request.player_uuid)
        if not isinstance(player, InteractivePlayer):
            raise NotYourTurnError(
                "Player is not an interactive player of this game",
                context={"player": request.player_uuid},
            )
        if not game.is_player_turn(player.info):
            raise NotYourTurnError(
                "It is not this player's turn",
                context={"player": player.name, "turn": game.state.current_turn_number},
            )

        board = game.state.get_board(request.board_uuid)
        if board is None:
            raise MissingBoardError(
                "Board is not in play",
                context={"board": request.board_uuid},
            )

        if not await player.wait_until_asked(REQUEST_WAIT_SECONDS):
            raise NotYourTurnError(
                "The game is not waiting for this player",
                context={"player": player.name},
            )

        turn_before = game.state.current_turn_number
        handled_before = game.handled_count
        action = Action(slice=Slice(request.direction, request.line), board=board)
        player.submit(action, [b.to_core() for b in request.replacement_boards])
        await game.wait_until_handled(handled_before + 1)

        accepted = game.state.current_turn_number > turn_before
        turn = None
        if accepted:
            turn = TurnMessage.from_turn_result(game.turn_results[turn_before], game_id=game_id)
        else:
            logger.debug("Slice %s was not applied in game %s", action_to_string(action), game_id)

        return SubmitActionResponse(
            game_id=game_id,
            accepted=accepted,
            turn_number=game.state.current_turn_number,
            turn=turn,
            game_over=bool(game.winners),
            winners=[PlayerInfoModel.from_core(w) for w in game.winners],
        )

    def deliver_message(self, game_id: str, message: TurnMessage) -> DeliverMessageResponse:
        """Pass a relay turn message to the network player it belongs to."""
        game = self._require(game_id).game
        if game.closed:
            raise GameClosedError("Game is closed", context={"game": game_id})

        player = game.get_player(message.turn.player.uuid)
        if not isinstance(player, NetworkPlayer):
            logger.warning(
                "No network player %s in game %s", message.turn.player.uuid, game_id
            )
            return DeliverMessageResponse(game_id=game_id, delivered=False)
        return DeliverMessageResponse(game_id=game_id, delivered=player.deliver(message))

    # =========================================================================
    # Rules
    # =========================================================================

    def list_rules(self) -> RulesResponse:
        return RulesResponse(
            win_conditions=[
                ConditionInfo(kind=k.value, name=c.name, description=c.description)
                for k, c in WIN_CONDITIONS.items()
            ],
            score_conditions=[
                ConditionInfo(kind=k.value, name=c.name, description=c.description)
                for k, c in SCORE_CONDITIONS.items()
            ],
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    def _require(self, game_id: str) -> Session:
        session = self.session_manager.get_session(game_id)
        if session is None:
            raise GameNotFoundError(f"Game {game_id} not found", context={"game": game_id})
        return session

    def _status(self, session: Session) -> GameStatus:
        if session.state is SessionState.GAME_OVER or (
            session.game.is_over and not session.game.closed
        ):
            return GameStatus.GAME_OVER
        if session.state is SessionState.FAILED:
            return GameStatus.FAILED
        if session.state is SessionState.ABANDONED:
            return GameStatus.ABANDONED
        if session.state is SessionState.CREATED:
            return GameStatus.CREATED

        current = session.game.current_player()
        if isinstance(current, InteractivePlayer):
            return GameStatus.WAITING_FOR_PLAYER
        return GameStatus.OPPONENT_THINKING
