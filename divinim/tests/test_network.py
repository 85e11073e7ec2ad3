"""
Tests for relay messages and networked games.

Tests:
- Wire format of turn messages and session records
- Broadcasting local turns
- Late joiners replaying the turn log
- Two peers converging under random delivery delays
"""

import asyncio
import logging
import random

import pytest

from ..engine_core.action import Action, Turn
from ..engine_core.state import GameState
from ..network.broadcaster import TurnBroadcaster
from ..network.messages import (
    BoardModel,
    PlayerInfoModel,
    SessionInfo,
    SocketEvent,
    TurnMessage,
)
from ..players.interactive_player import InteractivePlayer
from ..players.network_player import NetworkPlayer
from ..players.random_player import RandomPlayer
from ..rules.registry import RuleConfig
from ..session.game import Game
from ..session.setup import game_from_session_info
from .conftest import make_board


def play_vertical(game, player, board_uuid, line=1):
    board = game.state.get_board(board_uuid)
    return game.play_turn(Turn(player=player, action=Action.vertical(board, line)))


class TestMessages:
    """Tests for the wire format."""

    def test_turn_message_over_json(self, two_player_state, alice, two_by_three):
        game = Game(two_player_state, [InteractivePlayer(alice), NetworkPlayer(two_player_state.players[1])])
        result = play_vertical(game, alice, two_by_three.uuid)

        message = TurnMessage.from_turn_result(result, game_id="game01")
        received = TurnMessage.model_validate_json(message.model_dump_json())
        turn, slice_result = received.to_core()

        assert received.turn_number == 0
        assert turn == result.turn
        assert slice_result == result.slice_result

    def test_payload_is_plain_data(self, two_player_state, alice, two_by_three):
        game = Game(two_player_state, [InteractivePlayer(alice), NetworkPlayer(two_player_state.players[1])])
        result = play_vertical(game, alice, two_by_three.uuid)
        payload = TurnMessage.from_turn_result(result).model_dump(mode="json")

        assert payload["turn"]["action"]["slice"] == {"direction": "vertical", "line": 1}
        assert payload["turn"]["action"]["board"]["marked_coordinates"] == [{"x": 1, "y": 2}]
        assert payload["slice_result"]["removed_boards"][0]["marked_coordinates"] == []

    def test_board_metadata_not_sent(self, two_by_three):
        decorated = two_by_three.with_metadata(color="red")
        assert "metadata" not in BoardModel.from_core(decorated).model_dump()
        assert BoardModel.from_core(decorated).to_core() == two_by_three

    def test_rejects_negative_turn_number(self):
        with pytest.raises(ValueError):
            TurnMessage.model_validate({
                "turn_number": -1,
                "turn": {
                    "player": {"uuid": "a", "name": "A", "turn_remainder": 0},
                    "action": {
                        "slice": {"direction": "vertical", "line": 1},
                        "board": {"uuid": "b", "width": 2, "height": 2},
                    },
                },
                "slice_result": {},
            })

    def test_session_info_orders_players(self, alice, bob, two_by_three):
        info = SessionInfo(
            id="room01",
            players=[PlayerInfoModel.from_core(bob), PlayerInfoModel.from_core(alice)],
            boards=[BoardModel.from_core(two_by_three)],
        )
        assert info.player_infos() == [alice, bob]
        assert info.initial_boards() == [two_by_three]
        assert info.turn_entries() == []

    def test_socket_event_names(self):
        assert SocketEvent.SESSION_UPDATED.value == "session-updated"
        assert SocketEvent("make-move") is SocketEvent.MAKE_MOVE


class TestBroadcaster:
    """Tests for TurnBroadcaster."""

    def test_sends_local_turns_only(self, two_player_state, alice, bob, two_by_three, four_by_four):
        game = Game(two_player_state, [InteractivePlayer(alice), NetworkPlayer(bob)])
        outbox = []
        broadcaster = TurnBroadcaster(outbox.append, "game01", [alice.uuid])
        game.subscribe(broadcaster)

        play_vertical(game, alice, four_by_four.uuid, 2)
        remaining = next(iter(game.state.boards))
        play_vertical(game, bob, remaining)

        assert [m.turn.player.uuid for m in outbox] == [alice.uuid]
        assert outbox[0].game_id == "game01"
        assert broadcaster.sent == outbox

    @pytest.mark.asyncio
    async def test_async_send(self, two_player_state, alice, bob, two_by_three):
        game = Game(two_player_state, [InteractivePlayer(alice), NetworkPlayer(bob)])
        outbox = []

        async def send(message):
            await asyncio.sleep(0.01)
            outbox.append(message)

        broadcaster = TurnBroadcaster(send)
        game.subscribe(broadcaster)
        play_vertical(game, alice, two_by_three.uuid)
        assert outbox == []

        await broadcaster.flush()
        assert len(outbox) == 1

    @pytest.mark.asyncio
    async def test_send_failure_logged(self, two_player_state, alice, bob, two_by_three, caplog):
        game = Game(two_player_state, [InteractivePlayer(alice), NetworkPlayer(bob)])

        async def send(message):
            raise ConnectionError("relay offline")

        broadcaster = TurnBroadcaster(send, "game01")
        game.subscribe(broadcaster)
        with caplog.at_level(logging.ERROR):
            result = play_vertical(game, alice, two_by_three.uuid)
            await broadcaster.flush()
            await asyncio.sleep(0)

        assert game.state is result.out_state
        assert "relay offline" in caplog.text


class TestLateJoin:
    """Tests for building a game from a session record."""

    def test_replays_turn_log(self, two_player_state, alice, bob, two_by_three, four_by_four):
        rules = RuleConfig(score_conditions=("marked_squares",))
        host = Game(two_player_state, [InteractivePlayer(alice), NetworkPlayer(bob)], rules)
        play_vertical(host, alice, two_by_three.uuid)
        play_vertical(host, bob, four_by_four.uuid, 3)

        info = SessionInfo(
            id="game01",
            players=[PlayerInfoModel.from_core(alice), PlayerInfoModel.from_core(bob)],
            boards=[BoardModel.from_core(two_by_three), BoardModel.from_core(four_by_four)],
            turn_log=[TurnMessage.from_turn_result(r) for r in reversed(host.turn_results)],
        )
        local = InteractivePlayer(bob)
        joined = game_from_session_info(info, {bob.uuid: local}, rules)

        assert joined.players[1] is local
        assert isinstance(joined.players[0], NetworkPlayer)
        assert joined.state.current_turn_number == 2
        assert dict(joined.state.boards) == dict(host.state.boards)
        assert dict(joined.state.scores) == dict(host.state.scores)
        assert joined.state.turn_history == host.state.turn_history


class TestConvergence:
    """Two peers playing one game over a delayed relay."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("seed", [1, 2, 3])
    async def test_peers_reach_same_state(self, alice, bob, seed):
        delays = random.Random(seed)
        boards = [
            make_board("peerB1", 4, 3, [(0, 0), (3, 2), (1, 1)]),
            make_board("peerB2", 3, 3, [(1, 1)]),
            make_board("peerB3", 2, 4, [(0, 3), (1, 0)]),
        ]
        rules = RuleConfig(win_conditions=("highest_score",), score_conditions=("marked_squares",))
        remote_alice = NetworkPlayer(alice)
        remote_bob = NetworkPlayer(bob)

        host = Game(
            GameState.create([alice, bob], boards, game_id="shared"),
            [RandomPlayer(alice, 0, seed=seed), remote_bob],
            rules,
            rng=random.Random(seed),
        )
        guest = Game(
            GameState.create([alice, bob], boards, game_id="shared"),
            [remote_alice, RandomPlayer(bob, 0, seed=seed + 10)],
            rules,
            rng=random.Random(seed + 20),
        )

        def relay_to(player):
            async def send(message):
                await asyncio.sleep(delays.random() * 0.005)
                player.deliver(TurnMessage.model_validate_json(message.model_dump_json()))
            return send

        host_out = TurnBroadcaster(relay_to(remote_alice), "shared", [alice.uuid])
        guest_out = TurnBroadcaster(relay_to(remote_bob), "shared", [bob.uuid])
        host.subscribe(host_out)
        guest.subscribe(guest_out)

        host_winners, guest_winners = await asyncio.wait_for(
            asyncio.gather(host.play_loop(), guest.play_loop()), timeout=10
        )
        await host_out.flush()
        await guest_out.flush()

        assert host_winners == guest_winners
        assert host.state.current_turn_number == guest.state.current_turn_number > 0
        assert dict(host.state.boards) == dict(guest.state.boards) == {}
        assert dict(host.state.scores) == dict(guest.state.scores)
        assert host.state.turn_history == guest.state.turn_history
