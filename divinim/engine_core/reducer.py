"""
Reducer - Applies turns to game state.

The reducer is the single point of state transition.
Every committed state is produced by Reducer.apply().

Design principles:
- Pure function: (state, turn, replacement boards) -> TurnResult
- Never touches the input state; all collections are rebuilt
- Fails loudly: a missing board or an out-of-bounds slice raises,
  since actions reaching this point were already validated
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Iterable, Sequence
import logging
import random

from .action import Turn, action_to_string
from .board import Board, board_hash, generate_uuid
from .errors import InvalidSliceError, MissingBoardError
from .slice import SliceResult, apply_slice
from .state import GameState, TurnResult

if TYPE_CHECKING:
    from ..rules.conditions import ScoreCondition

logger = logging.getLogger(__name__)


@dataclass
class Reducer:
    """
    Reducer applies turns to game state.

    Stateless apart from configuration: the score conditions to evaluate
    and an optional random source for new board uuids.
    """
    score_conditions: Sequence[ScoreCondition] = ()
    rng: random.Random | None = None

    def apply(
        self,
        state: GameState,
        turn: Turn,
        replacement_boards: Iterable[Board] = (),
    ) -> TurnResult:
        """
        Apply a turn and return what happened.

        The result's out_state already includes the turn in its history,
        updated scores and the post_turn_update hook's changes.
        """
        action = turn.action
        target = state.get_board(action.board.uuid)
        if target is None:
            raise MissingBoardError(
                "Target board not found in current state",
                context={"board": action.board.uuid, "turn": state.current_turn_number},
            )

        slice_result = apply_slice(target, action.slice, self.rng)
        if slice_result is None:
            raise InvalidSliceError(
                "Slice is outside the board",
                context={
                    "action": action_to_string(action),
                    "dimensions": f"{target.width}x{target.height}",
                },
            )

        replacement_boards = tuple(replacement_boards)
        live_uuids = set(state.boards)
        slice_result = self._fresh_descendants(
            slice_result,
            avoid=live_uuids | {b.uuid for b in replacement_boards},
        )
        slice_result = substitute_replacements(
            slice_result,
            replacement_boards,
            taken_uuids=live_uuids - {target.uuid},
        )

        new_boards = dict(state.boards)
        del new_boards[target.uuid]
        for board in slice_result.boards:
            new_boards[board.uuid] = board

        out_state = state.copy_with(
            boards=new_boards,
            turn_history=state.turn_history + (turn,),
        )
        turn_result = TurnResult(
            turn=turn,
            in_state=state,
            out_state=out_state,
            slice_result=slice_result,
        )

        score_changes = self._score_changes(turn_result)
        if score_changes:
            new_scores = dict(state.scores)
            for player_uuid, delta in score_changes.items():
                new_scores[player_uuid] = new_scores.get(player_uuid, 0) + delta
            out_state = out_state.copy_with(scores=new_scores)
        turn_result = replace(turn_result, out_state=out_state, score_changes=score_changes)

        final_state = out_state.post_turn_update(turn_result)
        logger.debug(
            "Applied turn %d: %s (removed %d boards)",
            state.current_turn_number,
            action_to_string(action),
            len(slice_result.removed_boards),
        )
        return replace(turn_result, out_state=final_state)

    def _fresh_descendants(self, slice_result: SliceResult, avoid: set[str]) -> SliceResult:
        """Re-draw generated descendant uuids that are already in use."""
        used = set(avoid)

        def fresh(board: Board | None) -> Board | None:
            if board is None:
                return None
            while board.uuid in used:
                logger.debug("Board uuid %s already in use, drawing another", board.uuid)
                board = replace(board, uuid=generate_uuid(self.rng))
            used.add(board.uuid)
            return board

        return replace(
            slice_result,
            reduced_board=fresh(slice_result.reduced_board),
            child_board=fresh(slice_result.child_board),
        )

    def _score_changes(self, turn_result: TurnResult) -> dict[str, int]:
        """Sum the deltas of every score condition."""
        totals: dict[str, int] = {}
        for condition in self.score_conditions:
            changes = condition.evaluate(turn_result)
            if not changes:
                continue
            for player_uuid, delta in changes.items():
                totals[player_uuid] = totals.get(player_uuid, 0) + delta
        return totals


def substitute_replacements(
    slice_result: SliceResult,
    replacement_boards: Iterable[Board],
    taken_uuids: set[str] | None = None,
) -> SliceResult:
    """
    Swap freshly generated descendants for caller-supplied boards.

    A replacement is used when it has the same layout as a descendant
    (hash first, then exact comparison). Each replacement is used at most
    once, and replacements whose uuid is already held by another live
    board are skipped.
    """
    pool = list(replacement_boards)
    if not pool:
        return slice_result

    taken = set(taken_uuids or ())

    def take(candidate: Board | None) -> Board | None:
        if candidate is None:
            return None
        key = board_hash(candidate)
        for i, board in enumerate(pool):
            if board_hash(board) != key or not board.same_layout(candidate):
                continue
            if board.uuid in taken:
                logger.warning("Ignoring replacement board %s: uuid already in play", board.uuid)
                continue
            pool.pop(i)
            taken.add(board.uuid)
            return board
        return candidate

    return SliceResult(
        reduced_board=take(slice_result.reduced_board),
        child_board=take(slice_result.child_board),
        removed_boards=slice_result.removed_boards,
    )


def apply_turn(
    state: GameState,
    turn: Turn,
    replacement_boards: Iterable[Board] = (),
    score_conditions: Sequence[ScoreCondition] = (),
) -> TurnResult:
    """
    Convenience function to apply a single turn.

    Creates a Reducer and applies the turn.
    """
    reducer = Reducer(score_conditions=score_conditions)
    return reducer.apply(state, turn, replacement_boards)


def replay_turns(
    initial_state: GameState,
    log: Iterable[tuple[Turn, SliceResult]],
    score_conditions: Sequence[ScoreCondition] = (),
) -> GameState:
    """
    Re-apply a turn log from an initial state.

    Each logged slice result's live boards are fed back as replacement
    boards, so the replayed boards keep the uuids of the original run and
    later turns find the boards they refer to.
    """
    reducer = Reducer(score_conditions=score_conditions)
    state = initial_state
    for turn, slice_result in log:
        state = reducer.apply(state, turn, slice_result.boards).out_state
    return state
