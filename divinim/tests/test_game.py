"""
Tests for the Game turn loop.

Tests:
- Complete games between random players
- Turn order over long games
- Ignored, out-of-turn and late decisions
- Subscribers and commit semantics
"""

import asyncio
import logging
import random
from dataclasses import dataclass

import pytest

from ..engine_core.action import Action, PlayerInfo, Turn
from ..engine_core.board import random_board
from ..engine_core.errors import GameClosedError, MissingBoardError
from ..engine_core.reducer import replay_turns
from ..engine_core.state import GameState, TurnResult
from ..players.base import Player, PlayerDecision
from ..players.interactive_player import InteractivePlayer
from ..players.random_player import RandomPlayer
from ..rules.registry import RuleConfig
from ..session.game import EnginePhase, Game
from .conftest import make_board


@dataclass(frozen=True)
class RegeneratingState(GameState):
    """Adds a fresh board whenever fewer than two are live, until turn `regenerate_until`."""
    regenerate_until: int = 0

    def post_turn_update(self, turn_result: TurnResult) -> GameState:
        if self.current_turn_number >= self.regenerate_until or len(self.boards) >= 2:
            return self
        rng = random.Random(1000 + self.current_turn_number)
        board = random_board(rng.randint(2, 4), rng.randint(2, 4), 0.5, rng)
        boards = dict(self.boards)
        boards[board.uuid] = board
        return self.copy_with(boards=boards)


class ScriptedPlayer(Player):
    """Answers with queued decisions, then with the first available action."""

    def __init__(self, info, decisions=()):
        super().__init__(info)
        self.decisions = list(decisions)
        self.calls = 0

    async def get_action(self, state):
        self.calls += 1
        if self.decisions:
            return self.decisions.pop(0)
        return PlayerDecision(action=state.available_actions[0])


def random_game(alice, bob, boards, rules=None, seed=0):
    players = [
        RandomPlayer(alice, delay_seconds=0, seed=seed),
        RandomPlayer(bob, delay_seconds=0, seed=seed + 1),
    ]
    state = GameState.create([alice, bob], boards, game_id="game01")
    return Game(state, players, rules)


class TestCompleteGames:
    """Tests for games played to the end."""

    @pytest.mark.asyncio
    async def test_random_game_ends_with_previous_player(self, alice, bob, two_by_three, four_by_four):
        game = random_game(alice, bob, [two_by_three, four_by_four])
        winners = await game.play_loop()

        assert game.phase is EnginePhase.TERMINATED
        assert game.is_over
        assert not game.state.has_available_actions
        assert winners == [game.state.previous_player]
        assert len(game.turn_results) == game.state.current_turn_number

    @pytest.mark.asyncio
    async def test_marked_domino_game(self, alice, bob, one_by_two_full):
        """The only cut removes everything; the first mover wins."""
        game = random_game(alice, bob, [one_by_two_full])
        assert await game.play_loop() == [alice]
        assert game.state.current_turn_number == 1

    @pytest.mark.asyncio
    async def test_scores_follow_conditions(self, alice, bob, four_by_four):
        rules = RuleConfig.from_values(["highest_score"], ["marked_squares"])
        game = random_game(alice, bob, [four_by_four], rules, seed=3)
        winners = await game.play_loop()

        total = game.state.score_of(alice.uuid) + game.state.score_of(bob.uuid)
        assert total == four_by_four.mark_count
        best = max(game.state.score_of(alice.uuid), game.state.score_of(bob.uuid))
        assert winners and all(game.state.score_of(w.uuid) == best for w in winners)

    @pytest.mark.asyncio
    async def test_turn_order_over_long_game(self, alice, bob):
        """currentPlayer after n turns is players[n mod 2] for every n."""
        start = [random_board(3, 3, 0.5, random.Random(i)) for i in range(2)]
        state = RegeneratingState(
            boards={b.uuid: b for b in start},
            players=(alice, bob),
            scores={alice.uuid: 0, bob.uuid: 0},
            regenerate_until=60,
        )
        players = [RandomPlayer(alice, 0, seed=1), RandomPlayer(bob, 0, seed=2)]
        game = Game(state, players)

        seen = []
        game.subscribe(lambda r: seen.append(
            (r.out_state.current_turn_number, r.turn.player, game.current_player().info)
        ))
        await game.play_loop()

        assert len(seen) >= 50
        for n, mover, next_up in seen:
            assert mover == state.players[(n - 1) % 2]
            assert next_up == state.players[n % 2]
        assert [n for n, _, _ in seen] == list(range(1, len(seen) + 1))


class TestDecisionHandling:
    """Tests for decisions the loop does not apply."""

    @pytest.mark.asyncio
    async def test_invalid_action_ignored(self, alice, bob, two_by_three):
        bad = PlayerDecision(action=Action.vertical(two_by_three, 5))
        first = ScriptedPlayer(alice, [bad])
        game = Game(GameState.create([alice, bob], [two_by_three]), [first, ScriptedPlayer(bob)])

        await game.play_loop()

        # Asked twice for turn 0: once ignored, once applied
        assert first.calls == 2
        assert game.turn_results[0].turn.player == alice
        assert game.handled_count == 2

    @pytest.mark.asyncio
    async def test_stale_board_ignored(self, alice, bob, two_by_three):
        stray = make_board("stray0", 3, 3, [(1, 1)])
        first = ScriptedPlayer(alice, [PlayerDecision(action=Action.vertical(stray, 1))])
        game = Game(GameState.create([alice, bob], [two_by_three]), [first, ScriptedPlayer(bob)])

        await game.play_loop()
        assert first.calls == 2

    @pytest.mark.asyncio
    async def test_out_of_turn_decision_ignored(self, alice, bob, two_by_three):
        """A decision claiming another seat's player is not applied."""
        impostor = PlayerDecision(action=Action.vertical(two_by_three, 1), player=bob)
        first = ScriptedPlayer(alice, [impostor])
        game = Game(GameState.create([alice, bob], [two_by_three]), [first, ScriptedPlayer(bob)])

        await game.play_loop()
        assert first.calls == 2
        assert game.turn_results[0].turn.player == alice

    @pytest.mark.asyncio
    async def test_closed_game_discards_decision(self, alice, bob, two_by_three, caplog):
        human = InteractivePlayer(alice)
        game = Game(GameState.create([alice, bob], [two_by_three]), [human, ScriptedPlayer(bob)])
        task = asyncio.ensure_future(game.play_loop())
        assert await human.wait_until_asked(timeout=1)
        assert game.phase is EnginePhase.AWAITING_ACTION

        game.close()
        with caplog.at_level(logging.WARNING):
            human.submit(Action.vertical(two_by_three, 1))
            assert await task == []

        assert game.state.current_turn_number == 0
        assert "closed" in caplog.text


class TestTurns:
    """Tests for simulate_turn and play_turn."""

    def test_simulate_does_not_commit(self, two_player_state, two_by_three, alice, bob):
        game = Game(two_player_state, [ScriptedPlayer(alice), ScriptedPlayer(bob)])
        result = game.simulate_turn(Turn(player=alice, action=Action.vertical(two_by_three, 1)))
        assert result.out_state.current_turn_number == 1
        assert game.state is two_player_state

    def test_play_turn_commits(self, two_player_state, two_by_three, alice, bob):
        game = Game(two_player_state, [ScriptedPlayer(alice), ScriptedPlayer(bob)])
        before = game.state
        turn = Turn(player=alice, action=Action.vertical(two_by_three, 1))
        result = game.play_turn(turn)

        assert game.state is result.out_state
        assert game.state.turn_history == (turn,)
        assert before.turn_history == ()
        assert before.get_board(two_by_three.uuid) == two_by_three

    def test_failed_turn_keeps_state(self, two_player_state, alice, bob):
        game = Game(two_player_state, [ScriptedPlayer(alice), ScriptedPlayer(bob)])
        stray = make_board("stray0", 3, 3, [(1, 1)])
        with pytest.raises(MissingBoardError):
            game.play_turn(Turn(player=alice, action=Action.vertical(stray, 1)))
        assert game.state is two_player_state
        assert game.turn_results == []

    def test_play_turn_after_close(self, two_player_state, two_by_three, alice, bob):
        game = Game(two_player_state, [ScriptedPlayer(alice), ScriptedPlayer(bob)])
        game.close()
        with pytest.raises(GameClosedError):
            game.play_turn(Turn(player=alice, action=Action.vertical(two_by_three, 1)))

    def test_is_valid_turn(self, two_player_state, two_by_three, alice, bob):
        game = Game(two_player_state, [ScriptedPlayer(alice), ScriptedPlayer(bob)])
        action = Action.vertical(two_by_three, 1)
        assert game.is_valid_turn(Turn(player=alice, action=action))
        assert not game.is_valid_turn(Turn(player=bob, action=action))
        # Same seat, different uuid
        stranger = PlayerInfo(uuid="other0", name="Eve", turn_remainder=0)
        assert not game.is_valid_turn(Turn(player=stranger, action=action))


class TestSubscribers:
    """Tests for turn subscribers."""

    def test_called_in_order(self, two_player_state, two_by_three, alice, bob):
        game = Game(two_player_state, [ScriptedPlayer(alice), ScriptedPlayer(bob)])
        calls = []
        game.subscribe(lambda r: calls.append(("first", r.turn_number)))
        game.subscribe(lambda r: calls.append(("second", r.turn_number)))

        game.play_turn(Turn(player=alice, action=Action.vertical(two_by_three, 1)))
        assert calls == [("first", 0), ("second", 0)]

    def test_failing_subscriber_isolated(self, two_player_state, two_by_three, alice, bob, caplog):
        game = Game(two_player_state, [ScriptedPlayer(alice), ScriptedPlayer(bob)])
        calls = []

        def broken(result):
            raise RuntimeError("renderer crashed")

        game.subscribe(broken)
        game.subscribe(calls.append)
        with caplog.at_level(logging.ERROR):
            result = game.play_turn(Turn(player=alice, action=Action.vertical(two_by_three, 1)))

        assert calls == [result]
        assert game.state is result.out_state
        assert "renderer crashed" in caplog.text

    def test_unsubscribe(self, two_player_state, two_by_three, alice, bob):
        game = Game(two_player_state, [ScriptedPlayer(alice), ScriptedPlayer(bob)])
        calls = []
        unsubscribe = game.subscribe(calls.append)
        unsubscribe()
        unsubscribe()
        game.play_turn(Turn(player=alice, action=Action.vertical(two_by_three, 1)))
        assert calls == []


class TestSetState:
    """Tests for replacing the committed state."""

    def test_replayed_state_replaces_initial(self, two_player_state, two_by_three, four_by_four, alice, bob):
        host = Game(two_player_state, [ScriptedPlayer(alice), ScriptedPlayer(bob)])
        host.play_turn(Turn(player=alice, action=Action.vertical(four_by_four, 2)))
        host.play_turn(Turn(player=bob, action=Action.vertical(two_by_three, 1)))
        log = [(r.turn, r.slice_result) for r in host.turn_results]

        joined = Game(two_player_state, [ScriptedPlayer(alice), ScriptedPlayer(bob)])
        joined.set_state(replay_turns(two_player_state, log))

        assert joined.state.current_turn_number == 2
        assert dict(joined.state.boards) == dict(host.state.boards)
        assert joined.current_player().info == alice

    def test_rejects_other_players(self, two_player_state, two_by_three, alice, bob):
        game = Game(two_player_state, [ScriptedPlayer(alice), ScriptedPlayer(bob)])
        stranger = PlayerInfo(uuid="other0", name="Eve", turn_remainder=1)
        with pytest.raises(ValueError):
            game.set_state(GameState.create([alice, stranger], [two_by_three]))
        assert game.state is two_player_state

    @pytest.mark.asyncio
    async def test_rejected_while_loop_waits(self, two_player_state, alice, bob):
        human = InteractivePlayer(alice)
        game = Game(two_player_state, [human, ScriptedPlayer(bob)])
        task = asyncio.ensure_future(game.play_loop())
        assert await human.wait_until_asked(timeout=1)

        with pytest.raises(RuntimeError):
            game.set_state(two_player_state)

        game.close()
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)


class TestSetupChecks:
    """Tests for Game construction."""

    def test_players_must_match_state(self, two_player_state, alice):
        stranger = PlayerInfo(uuid="other0", name="Eve", turn_remainder=1)
        with pytest.raises(ValueError):
            Game(two_player_state, [ScriptedPlayer(alice), ScriptedPlayer(stranger)])

    def test_remainders_must_be_contiguous(self, alice, two_by_three):
        far = PlayerInfo(uuid="far000", name="Far", turn_remainder=2)
        state = GameState.create([alice, far], [two_by_three])
        with pytest.raises(ValueError):
            Game(state, [ScriptedPlayer(alice), ScriptedPlayer(far)])

    def test_rules_accept_config_or_default(self, two_player_state, alice, bob):
        players = [ScriptedPlayer(alice), ScriptedPlayer(bob)]
        assert Game(two_player_state, players).rules == RuleConfig().build()
        game = Game(two_player_state, players, RuleConfig(score_conditions=("total_area",)))
        assert len(game.rules.score_conditions) == 1


class TestWaitUntilHandled:
    """Tests for progress waiting."""

    @pytest.mark.asyncio
    async def test_wakes_after_decision(self, alice, bob, two_by_three):
        human = InteractivePlayer(alice)
        game = Game(GameState.create([alice, bob], [two_by_three]), [human, InteractivePlayer(bob)])
        task = asyncio.ensure_future(game.play_loop())
        assert await human.wait_until_asked(timeout=1)

        human.submit(Action.vertical(two_by_three, 1))
        assert await game.wait_until_handled(1, timeout=1) == 1
        assert game.state.current_turn_number == 1

        game.close()
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)

    @pytest.mark.asyncio
    async def test_returns_when_game_ends(self, alice, bob, one_by_two_full):
        game = random_game(alice, bob, [one_by_two_full])
        await game.play_loop()
        assert await game.wait_until_handled(10) == 1
