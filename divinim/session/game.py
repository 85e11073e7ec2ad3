"""
Game - The turn loop driving one Divinim game.

The loop:
1. Check win conditions; stop when any condition names winners
2. Ask the current player for an action (the only suspension point)
3. Ignore the decision if it is not a valid turn, and ask again
4. Apply it through the reducer and commit the new state
5. Notify turn subscribers (layout, network broadcast)
6. Repeat

One Game never applies two turns at once. Separate Game instances share
nothing and can run side by side on the same event loop.
"""

from __future__ import annotations
from enum import Enum
from typing import Callable, Iterable, Sequence, TYPE_CHECKING
import asyncio
import logging
import random

from ..engine_core.action import Action, PlayerInfo, Turn, action_to_string
from ..engine_core.action_generator import is_valid_action
from ..engine_core.errors import GameClosedError
from ..engine_core.reducer import Reducer
from ..engine_core.state import GameState, TurnResult
from ..rules.registry import RuleConfig, RuleSet

if TYPE_CHECKING:
    from ..engine_core.board import Board
    from ..players.base import Player, PlayerDecision

logger = logging.getLogger(__name__)

TurnSubscriber = Callable[[TurnResult], None]


class EnginePhase(Enum):
    """Where the turn loop currently is."""
    READY = "ready"
    AWAITING_ACTION = "awaiting_action"
    VALIDATING = "validating"
    APPLYING = "applying"
    CHECKING_WIN = "checking_win"
    TERMINATED = "terminated"


class Game:
    """
    The game engine.

    Usage:
        game = Game(state, [human, cpu], RuleConfig())
        game.subscribe(on_turn)
        winners = await game.play_loop()
    """

    def __init__(
        self,
        state: GameState,
        players: Sequence[Player],
        rules: RuleConfig | RuleSet | None = None,
        rng: random.Random | None = None,
    ):
        if rules is None:
            rules = RuleConfig()
        if isinstance(rules, RuleConfig):
            rules = rules.build()

        self.players: list[Player] = sorted(players, key=lambda p: p.turn_remainder)
        self._check_seats(state)

        self.rules = rules
        self.reducer = Reducer(score_conditions=rules.score_conditions, rng=rng)
        self.phase = EnginePhase.READY
        self.turn_results: list[TurnResult] = []
        self._state = state
        self._subscribers: list[TurnSubscriber] = []
        self._closed = False
        self._loop_finished = False
        self._handled = 0
        self._waiters: list[tuple[int, asyncio.Future]] = []

    def _check_seats(self, state: GameState) -> None:
        remainders = [p.turn_remainder for p in self.players]
        if remainders != list(range(len(self.players))):
            raise ValueError(
                f"Turn remainders must be 0..{len(self.players) - 1}, got {remainders}"
            )
        if [p.info for p in self.players] != list(state.players):
            raise ValueError("Players do not match the players in the game state")

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def state(self) -> GameState:
        """The committed state."""
        return self._state

    @property
    def game_id(self) -> str:
        return self._state.game_id

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def is_over(self) -> bool:
        return self.phase is EnginePhase.TERMINATED

    @property
    def winners(self) -> list[PlayerInfo]:
        """Winners in the committed state; empty while the game goes on."""
        return self.rules.winners(self._state)

    @property
    def handled_count(self) -> int:
        """How many decisions the loop has handled, committed or ignored."""
        return self._handled

    def current_player(self) -> Player:
        return self.players[self._state.current_turn_number % len(self.players)]

    def get_player(self, player_uuid: str) -> Player | None:
        for player in self.players:
            if player.info.uuid == player_uuid:
                return player
        return None

    def is_player_turn(self, player: PlayerInfo) -> bool:
        """Whether player holds the seat that moves now."""
        return (
            self._state.is_player_turn(player)
            and self.current_player().info.uuid == player.uuid
        )

    def is_valid_action(self, action: Action) -> bool:
        return is_valid_action(self._state, action)

    def is_valid_turn(self, turn: Turn) -> bool:
        return self.is_player_turn(turn.player) and self.is_valid_action(turn.action)

    def get_available_actions(self) -> list[Action]:
        return self._state.available_actions

    # -------------------------------------------------------------------------
    # State and subscribers
    # -------------------------------------------------------------------------

    def set_state(self, state: GameState) -> None:
        """Replace the committed state, e.g. with a replayed one."""
        if self.phase not in (EnginePhase.READY, EnginePhase.TERMINATED):
            raise RuntimeError("Cannot replace the state while the turn loop runs")
        self._check_seats(state)
        self._state = state

    def subscribe(self, callback: TurnSubscriber) -> Callable[[], None]:
        """
        Call callback with every committed TurnResult.

        Returns a function that removes the subscription.
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self, result: TurnResult) -> None:
        for callback in list(self._subscribers):
            try:
                callback(result)
            except Exception:
                logger.exception(
                    "Turn subscriber %r failed on turn %d", callback, result.turn_number
                )

    # -------------------------------------------------------------------------
    # Turns
    # -------------------------------------------------------------------------

    async def request_player_action(self, player: Player) -> PlayerDecision:
        """Wait for player's decision on the committed state. No timeout."""
        self.phase = EnginePhase.AWAITING_ACTION
        return await player.get_action(self._state)

    def simulate_turn(
        self,
        turn: Turn,
        replacement_boards: Iterable[Board] = (),
    ) -> TurnResult:
        """
        Compute the result of a turn without committing it.

        Raises MissingBoardError or InvalidSliceError when the turn does not
        apply to the committed state.
        """
        return self.reducer.apply(self._state, turn, replacement_boards)

    def play_turn(
        self,
        turn: Turn,
        replacement_boards: Iterable[Board] = (),
    ) -> TurnResult:
        """Apply a turn, commit the new state and notify subscribers."""
        if self._closed:
            raise GameClosedError("Game is closed", context={"game": self.game_id})
        self.phase = EnginePhase.APPLYING
        result = self.simulate_turn(turn, replacement_boards)
        self._state = result.out_state
        self.turn_results.append(result)
        self._notify(result)
        return result

    async def play_loop(self) -> list[PlayerInfo]:
        """
        Run turns until a win condition fires or the game is closed.

        Returns the winners (empty if the game was closed first).
        """
        logger.info(
            "Game %s started: %d boards, players %s",
            self.game_id,
            len(self._state.boards),
            [p.name for p in self.players],
        )
        try:
            while not self._closed:
                self.phase = EnginePhase.CHECKING_WIN
                winners = self.winners
                if winners:
                    self.phase = EnginePhase.TERMINATED
                    logger.info(
                        "Game %s over after %d turns, winners: %s",
                        self.game_id,
                        self._state.current_turn_number,
                        [w.name for w in winners],
                    )
                    return winners

                player = self.current_player()
                decision = await self.request_player_action(player)
                if self._closed:
                    logger.warning(
                        "Discarding decision from %s: game %s was closed",
                        player.name,
                        self.game_id,
                    )
                    break

                self.phase = EnginePhase.VALIDATING
                turn = Turn(player=decision.player or player.info, action=decision.action)
                if self.is_valid_turn(turn):
                    self.play_turn(turn, decision.replacement_boards)
                else:
                    logger.debug(
                        "Ignoring invalid turn from %s: %s",
                        turn.player.name,
                        action_to_string(turn.action),
                    )
                self._mark_handled()
            return []
        finally:
            self._loop_finished = True
            self._wake_waiters()

    def close(self) -> None:
        """
        Stop the game. Decisions arriving afterwards are discarded.

        The loop ends the next time it wakes up; callers that need it gone
        right away cancel the task running play_loop().
        """
        if self._closed:
            return
        self._closed = True
        self.phase = EnginePhase.TERMINATED
        logger.info("Game %s closed", self.game_id)
        self._wake_waiters()

    # -------------------------------------------------------------------------
    # Progress waiting
    # -------------------------------------------------------------------------

    def _mark_handled(self) -> None:
        self._handled += 1
        self._wake_waiters()

    def _wake_waiters(self) -> None:
        done = self._loop_finished or self._closed
        remaining = []
        for count, future in self._waiters:
            if future.done():
                continue
            if done or self._handled >= count:
                future.set_result(self._handled)
            else:
                remaining.append((count, future))
        self._waiters = remaining

    async def wait_until_handled(self, count: int, timeout: float | None = None) -> int:
        """
        Wait until the loop handled count decisions in total, or stopped.

        Returns the handled count at wake-up.
        """
        if self._handled >= count or self._loop_finished or self._closed:
            return self._handled
        future = asyncio.get_running_loop().create_future()
        self._waiters.append((count, future))
        if timeout is None:
            return await future
        return await asyncio.wait_for(future, timeout)
