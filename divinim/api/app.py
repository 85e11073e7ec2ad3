"""
FastAPI Application - REST and WebSocket API hosting Divinim games.

Endpoints:
    GET    /api/v1/rules                 List win and score conditions
    POST   /api/v1/games                 Create and start a game
    GET    /api/v1/games                 List hosted games
    GET    /api/v1/games/{id}            Get game state
    DELETE /api/v1/games/{id}            End game
    GET    /api/v1/games/{id}/actions    Available slices
    POST   /api/v1/games/{id}/actions    Submit an interactive player's slice
    POST   /api/v1/games/{id}/messages   Deliver a relay turn message
    WS     /api/v1/games/{id}/ws         Committed turns as they happen

Games live in memory only. Ending a game, or restarting the server,
discards it.

All responses are JSON with explicit Pydantic schemas.
"""

from contextlib import asynccontextmanager
from typing import Callable, Optional, Union
import json

from ..config import Settings, configure_logging
from ..engine_core.errors import DivinimError


def create_app(service=None, settings: Optional[Settings] = None):
    """
    Create the FastAPI application.

    Args:
        service: Optional GameService instance (creates new if not provided)
        settings: Optional Settings (read from the environment if not provided)

    Returns:
        FastAPI application instance
    """
    try:
        from fastapi import FastAPI, WebSocket, WebSocketDisconnect
        from fastapi.middleware.cors import CORSMiddleware
        from fastapi.responses import JSONResponse
    except ImportError:
        raise ImportError(
            "FastAPI not installed. Install with: pip install fastapi uvicorn"
        )

    from .. import __version__
    from ..network.broadcaster import TurnBroadcaster
    from ..network.messages import SocketEvent, TurnMessage
    from .service import GameService, GameNotFoundError
    from .schemas import (
        # Request models
        CreateGameRequest,
        SubmitActionRequest,
        # Response models
        ActionsResponse,
        DeliverMessageResponse,
        EndGameResponse,
        ErrorResponse,
        GameListResponse,
        GameStateResponse,
        HealthResponse,
        RulesResponse,
        SubmitActionResponse,
        # Enums
        ErrorCode,
    )

    settings = settings or (service.settings if service else Settings.from_env())
    configure_logging(settings.log_level)

    api_service = service or GameService(settings=settings)

    @asynccontextmanager
    async def lifespan(app):
        yield
        await api_service.session_manager.shutdown()

    app = FastAPI(
        lifespan=lifespan,
        title="Divinim Engine API",
        description="""
Divinim board slicing game - hosted games with random, interactive and network players.

## Flow

1. `POST /api/v1/games` creates a game and starts its turn loop
2. When it is your turn, `POST /actions` with a slice
3. Random opponents answer on their own; network opponents answer
   when the relay delivers their turn to `POST /messages`
4. The WebSocket pushes a `session-updated` message for every turn

## Error Codes

| Code | Description |
|------|-------------|
| `GAME_NOT_FOUND` | Game does not exist or has ended |
| `BOARD_NOT_FOUND` | Board is not in play |
| `NOT_YOUR_TURN` | Player cannot move now |
| `GAME_CLOSED` | Game is over or closed |
| `UNKNOWN_CONDITION` | Unknown win or score condition |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.allowed_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.service = api_service

    # WebSocket connections and the broadcaster feeding them, per game
    ws_connections: dict[str, list[WebSocket]] = {}
    ws_unsubscribe: dict[str, Callable[[], None]] = {}

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Optional[dict] = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    def error_from_exception(error: Exception) -> JSONResponse:
        """Map engine and validation errors to error responses."""
        if isinstance(error, GameNotFoundError):
            return make_error_response(
                ErrorCode.GAME_NOT_FOUND, error.message, 404, error.context
            )
        if isinstance(error, DivinimError):
            try:
                code = ErrorCode(error.code)
            except ValueError:
                code = ErrorCode.INVALID_ACTION
            status_code = 409 if code in {
                ErrorCode.NOT_YOUR_TURN,
                ErrorCode.PLAYER_BUSY,
                ErrorCode.GAME_CLOSED,
            } else 400
            return make_error_response(code, error.message, status_code, error.context)
        return make_error_response(ErrorCode.VALIDATION_ERROR, str(error))

    async def broadcast_to_game(game_id: str, message: dict):
        """Broadcast a message to all WebSocket connections for a game."""
        if game_id in ws_connections:
            dead_connections = []
            for ws in ws_connections[game_id]:
                try:
                    await ws.send_json(message)
                except (RuntimeError, WebSocketDisconnect):
                    dead_connections.append(ws)
            for ws in dead_connections:
                ws_connections[game_id].remove(ws)

    def attach_broadcaster(game_id: str) -> None:
        if game_id in ws_unsubscribe:
            return

        async def send(message: TurnMessage):
            await broadcast_to_game(game_id, {
                "type": SocketEvent.SESSION_UPDATED.value,
                "payload": message.model_dump(mode="json"),
            })

        ws_unsubscribe[game_id] = api_service.subscribe(
            game_id, TurnBroadcaster(send, game_id=game_id)
        )

    def detach_websocket(game_id: str, websocket: WebSocket) -> None:
        connections = ws_connections.get(game_id, [])
        if websocket in connections:
            connections.remove(websocket)
        if not connections:
            ws_connections.pop(game_id, None)
            unsubscribe = ws_unsubscribe.pop(game_id, None)
            if unsubscribe:
                unsubscribe()

    # =========================================================================
    # Rules Endpoint
    # =========================================================================

    @app.get(
        "/api/v1/rules",
        response_model=RulesResponse,
        tags=["Rules"],
        summary="List win and score conditions",
    )
    async def list_rules() -> RulesResponse:
        """Every condition a game can be configured with."""
        return api_service.list_rules()

    # =========================================================================
    # Game Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/games",
        response_model=GameStateResponse,
        responses={400: {"model": ErrorResponse, "description": "Invalid rules or options"}},
        tags=["Games"],
        summary="Create and start a game",
    )
    async def create_game(body: CreateGameRequest) -> Union[GameStateResponse, JSONResponse]:
        """
        Create a game and start its turn loop.

        Seat 0 is always the caller (an interactive player). Use
        `second_player_type` to choose a random, interactive or network
        opponent for seat 1.
        """
        try:
            return await api_service.create_game(body)
        except (DivinimError, ValueError) as e:
            return error_from_exception(e)

    @app.get(
        "/api/v1/games",
        response_model=GameListResponse,
        tags=["Games"],
        summary="List hosted games",
    )
    async def list_games() -> GameListResponse:
        """List all hosted game IDs."""
        return api_service.list_games()

    @app.get(
        "/api/v1/games/{game_id}",
        response_model=GameStateResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Games"],
        summary="Get game state",
    )
    async def get_game(game_id: str) -> Union[GameStateResponse, JSONResponse]:
        """Boards, players, scores, turn log and winners."""
        try:
            return api_service.get_game(game_id)
        except DivinimError as e:
            return error_from_exception(e)

    @app.delete(
        "/api/v1/games/{game_id}",
        response_model=EndGameResponse,
        tags=["Games"],
        summary="End a game",
    )
    async def end_game(game_id: str) -> EndGameResponse:
        """End a game and release resources."""
        return api_service.end_game(game_id)

    # =========================================================================
    # Turn Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/games/{game_id}/actions",
        response_model=ActionsResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Turns"],
        summary="List available slices",
    )
    async def get_actions(game_id: str) -> Union[ActionsResponse, JSONResponse]:
        """Every interior cut on every live board."""
        try:
            return api_service.get_actions(game_id)
        except DivinimError as e:
            return error_from_exception(e)

    @app.post(
        "/api/v1/games/{game_id}/actions",
        response_model=SubmitActionResponse,
        responses={
            400: {"model": ErrorResponse, "description": "Board not in play"},
            404: {"model": ErrorResponse, "description": "Game not found"},
            409: {"model": ErrorResponse, "description": "Not this player's turn"},
        },
        tags=["Turns"],
        summary="Submit a slice",
    )
    async def submit_action(
        game_id: str,
        body: SubmitActionRequest,
    ) -> Union[SubmitActionResponse, JSONResponse]:
        """
        Submit a slice for an interactive player.

        A line outside the board is ignored by the engine (`accepted=false`)
        and the same player is asked again.
        """
        try:
            return await api_service.submit_action(game_id, body)
        except DivinimError as e:
            return error_from_exception(e)

    @app.post(
        "/api/v1/games/{game_id}/messages",
        response_model=DeliverMessageResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Turns"],
        summary="Deliver a relay turn message",
    )
    async def deliver_message(
        game_id: str,
        body: TurnMessage,
    ) -> Union[DeliverMessageResponse, JSONResponse]:
        """Hand a remote peer's turn to the game's network player."""
        try:
            return api_service.deliver_message(game_id, body)
        except DivinimError as e:
            return error_from_exception(e)

    # =========================================================================
    # WebSocket Endpoint
    # =========================================================================

    @app.websocket("/api/v1/games/{game_id}/ws")
    async def websocket_endpoint(websocket: WebSocket, game_id: str):
        """
        WebSocket for real-time updates.

        Messages from server:
        - state: Current game state, sent on connect
        - session-updated: A committed turn (TurnMessage payload)
        - error: Error occurred

        Messages from client:
        - ping: Keep-alive
        """
        await websocket.accept()
        try:
            state = api_service.get_game(game_id)
        except DivinimError as e:
            await websocket.send_json({"type": "error", "payload": e.to_dict()})
            await websocket.close()
            return

        ws_connections.setdefault(game_id, []).append(websocket)
        attach_broadcaster(game_id)

        try:
            await websocket.send_json({
                "type": "state",
                "payload": state.model_dump(mode="json"),
            })

            while True:
                data = await websocket.receive_text()
                try:
                    message = json.loads(data)
                except json.JSONDecodeError:
                    await websocket.send_json({
                        "type": "error",
                        "payload": {"message": "Invalid JSON"},
                    })
                    continue
                if isinstance(message, dict) and message.get("type") == "ping":
                    await websocket.send_json({"type": "pong"})
        except WebSocketDisconnect:
            pass
        finally:
            detach_websocket(game_id, websocket)

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(
            status="healthy",
            service="divinim-engine",
            version=__version__,
        )

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Divinim Engine API",
            "version": __version__,
            "env": settings.env,
            "docs": "/api/docs",
            "health": "/health",
        }

    return app
