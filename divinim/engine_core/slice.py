"""
Slice Algorithm - Cutting one board into at most two boards.

A slice is a single cut along an interior grid line. The part before the
line (top or left) becomes the "reduced" board, the part from the line
onward (bottom or right) becomes the "child" board. Parts that end up
resolved are reported as removed instead of being returned as boards.

apply_slice() is pure: the input board is never modified and both
descendants always get fresh uuids. Keeping an existing identity is the
reducer's job (see replacement boards in reducer.py).
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
import random

from .board import Board, BoardDimensions, TileCoordinate, new_board


class Direction(Enum):
    """Orientation of a cut."""
    HORIZONTAL = "horizontal"  # Between two rows, line is a y index
    VERTICAL = "vertical"  # Between two columns, line is an x index

    @property
    def short(self) -> str:
        return "H" if self == Direction.HORIZONTAL else "V"


@dataclass(frozen=True)
class Slice:
    """
    A cut between line - 1 and line.

    Valid lines run from 1 to dimension - 1; line 0 or line == dimension
    would cut along the border instead of through the board.
    """
    direction: Direction
    line: int

    def axis_length(self, dimensions: BoardDimensions) -> int:
        """Length of the axis this slice cuts across."""
        if self.direction == Direction.HORIZONTAL:
            return dimensions.height
        return dimensions.width

    def fits(self, dimensions: BoardDimensions) -> bool:
        """Check if the line is an interior grid line for these dimensions."""
        return 1 <= self.line < self.axis_length(dimensions)

    @classmethod
    def horizontal(cls, line: int) -> Slice:
        return cls(direction=Direction.HORIZONTAL, line=line)

    @classmethod
    def vertical(cls, line: int) -> Slice:
        return cls(direction=Direction.VERTICAL, line=line)


@dataclass(frozen=True)
class SliceResult:
    """
    Outcome of slicing one board.

    reduced_board is the top/left part, child_board the bottom/right part.
    Either is None when that part was resolved; it is then listed in
    removed_boards instead.
    """
    reduced_board: Board | None
    child_board: Board | None
    removed_boards: tuple[Board, ...] = field(default_factory=tuple)

    @property
    def boards(self) -> list[Board]:
        """Descendant boards that stay in play."""
        return [b for b in (self.reduced_board, self.child_board) if b is not None]

    @property
    def removed_mark_count(self) -> int:
        return sum(b.mark_count for b in self.removed_boards)

    @property
    def removed_area(self) -> int:
        return sum(b.dimensions.area for b in self.removed_boards)


def apply_slice(
    board: Board,
    slice_: Slice,
    rng: random.Random | None = None,
) -> SliceResult | None:
    """
    Apply a slice to a board.

    Returns None if the slice is out of bounds for this board.
    Marks on the far side of the line are shifted so they are relative to
    the child board's own origin.
    """
    if not slice_.fits(board.dimensions):
        return None

    line = slice_.line
    before: list[TileCoordinate] = []
    after: list[TileCoordinate] = []

    for coord in board.marked_coordinates:
        if slice_.direction == Direction.HORIZONTAL:
            if coord.y < line:
                before.append(coord)
            else:
                after.append(TileCoordinate(x=coord.x, y=coord.y - line))
        else:
            if coord.x < line:
                before.append(coord)
            else:
                after.append(TileCoordinate(x=coord.x - line, y=coord.y))

    width, height = board.width, board.height
    if slice_.direction == Direction.HORIZONTAL:
        reduced_dims = BoardDimensions(width=width, height=line)
        child_dims = BoardDimensions(width=width, height=height - line)
    else:
        reduced_dims = BoardDimensions(width=line, height=height)
        child_dims = BoardDimensions(width=width - line, height=height)

    reduced_board: Board | None = new_board(reduced_dims, before, rng)
    child_board: Board | None = new_board(child_dims, after, rng)

    removed: list[Board] = []
    if reduced_board.is_resolved:
        removed.append(reduced_board)
        reduced_board = None
    if child_board.is_resolved:
        removed.append(child_board)
        child_board = None

    return SliceResult(
        reduced_board=reduced_board,
        child_board=child_board,
        removed_boards=tuple(removed),
    )
