"""
Board Model - Tiles, dimensions and boards.

A board is a rectangular grid of tiles, some of which are "marked".
Boards are immutable values: slicing never edits a board, it produces
new boards with fresh identifiers.

Design principles:
- Immutable: frozen dataclasses, marks held in a frozenset
- Serializable: only plain ints, strings and collections of them
- Content hashable: board_hash() identifies a board by layout, not identity
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Iterable
import random

BASE62_CHARS = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789"
UUID_LENGTH = 6


@dataclass(frozen=True, order=True)
class TileCoordinate:
    """
    A tile position on a board.

    Origin is the top-left corner, like pixels: x grows to the right,
    y grows downward.
    """
    x: int
    y: int


@dataclass(frozen=True)
class BoardDimensions:
    """Width and height of a board, in tiles."""
    width: int
    height: int

    def __post_init__(self):
        if self.width < 1 or self.height < 1:
            raise ValueError(
                f"Board dimensions must be at least 1x1, got {self.width}x{self.height}"
            )

    @property
    def area(self) -> int:
        return self.width * self.height


@dataclass(frozen=True)
class Board:
    """
    A single sliceable board.

    Note: uuid is a short random identifier. Two boards with the same
    layout but different uuids are different game pieces; use
    same_layout() or board_hash() to compare content.
    """
    uuid: str
    dimensions: BoardDimensions
    marked_coordinates: frozenset[TileCoordinate] = frozenset()

    # Presentation data attached by callers (positions, animation ids).
    # Never read by the engine and ignored by equality.
    metadata: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    def __post_init__(self):
        if not isinstance(self.marked_coordinates, frozenset):
            object.__setattr__(self, "marked_coordinates", frozenset(self.marked_coordinates))
        for coord in self.marked_coordinates:
            if not (0 <= coord.x < self.dimensions.width and 0 <= coord.y < self.dimensions.height):
                raise ValueError(
                    f"Marked coordinate {tile_coordinate_to_string(coord)} is outside "
                    f"a {self.dimensions.width}x{self.dimensions.height} board"
                )

    @property
    def width(self) -> int:
        return self.dimensions.width

    @property
    def height(self) -> int:
        return self.dimensions.height

    @property
    def mark_count(self) -> int:
        return len(self.marked_coordinates)

    @property
    def is_resolved(self) -> bool:
        """
        Whether this board is out of play.

        A board is resolved when it has no marks left, or when it is a
        single marked unit tile. Larger fully-marked boards stay live.
        """
        if self.mark_count == 0:
            return True
        return self.width == 1 and self.height == 1 and self.mark_count == 1

    @property
    def sorted_marks(self) -> list[TileCoordinate]:
        """Marks in reading order (row by row)."""
        return sorted(self.marked_coordinates, key=lambda c: (c.y, c.x))

    def same_layout(self, other: Board) -> bool:
        """Check if two boards have identical dimensions and marks."""
        return (
            self.dimensions == other.dimensions
            and self.marked_coordinates == other.marked_coordinates
        )

    def with_metadata(self, **values: Any) -> Board:
        """Return a copy of this board (same uuid) with extra metadata."""
        merged = dict(self.metadata)
        merged.update(values)
        return Board(
            uuid=self.uuid,
            dimensions=self.dimensions,
            marked_coordinates=self.marked_coordinates,
            metadata=merged,
        )


def generate_uuid(rng: random.Random | None = None) -> str:
    """
    NOT CRYPTOGRAPHICALLY SECURE

    Generate a short base-62 identifier for boards and players.
    Collisions are unlikely enough for objects living in one game, and the
    short form is easy to read in logs and turn lists.
    """
    chooser = rng or random
    return "".join(chooser.choice(BASE62_CHARS) for _ in range(UUID_LENGTH))


def int_to_alphanumeric(num: int) -> str:
    """Render a non-negative integer in base 62. Zero renders as ''."""
    if num < 0:
        raise ValueError("Only non-negative integers can be rendered")
    base = len(BASE62_CHARS)
    digits = []
    while num > 0:
        num, remainder = divmod(num, base)
        digits.append(BASE62_CHARS[remainder])
    return "".join(reversed(digits))


def board_hash(board: Board) -> str:
    """
    Content hash of a board, used to match replacement boards.

    Format: "{width}:{height}-{marks}", where marks is a bitmask over the
    grid (bit y*width+x) rendered in base 62. Identical layouts always hash
    identically; the uuid and metadata are not part of the hash.
    """
    dimension_hash = f"{board.width}:{board.height}"
    marked_hash = 0
    for coord in board.marked_coordinates:
        marked_hash |= 1 << (coord.y * board.width + coord.x)
    return f"{dimension_hash}-{int_to_alphanumeric(marked_hash)}"


def tile_coordinate_to_string(coord: TileCoordinate) -> str:
    return f"({coord.x}, {coord.y})"


def new_board(
    dimensions: BoardDimensions,
    marked_coordinates: Iterable[TileCoordinate],
    rng: random.Random | None = None,
) -> Board:
    """Create a board with a fresh uuid."""
    return Board(
        uuid=generate_uuid(rng),
        dimensions=dimensions,
        marked_coordinates=frozenset(marked_coordinates),
    )


def random_board(
    width: int,
    height: int,
    mark_probability: float = 0.5,
    rng: random.Random | None = None,
) -> Board:
    """
    Generate a live board with randomly marked tiles.

    Each tile is marked independently with mark_probability. Layouts that
    would be resolved immediately (no marks, or a marked unit tile) are
    re-rolled, so the result can always be placed in live state.
    """
    if width == 1 and height == 1:
        raise ValueError("A 1x1 board is always resolved and cannot be generated")
    if not 0.0 < mark_probability <= 1.0:
        raise ValueError("mark_probability must be in (0, 1]")

    rng = rng or random.Random()
    dimensions = BoardDimensions(width=width, height=height)
    while True:
        marks = [
            TileCoordinate(x=x, y=y)
            for y in range(height)
            for x in range(width)
            if rng.random() < mark_probability
        ]
        board = new_board(dimensions, marks, rng)
        if not board.is_resolved:
            return board


def generate_boards(
    count: int,
    width: int,
    height: int,
    mark_probability: float = 0.5,
    seed: int | None = None,
    rng: random.Random | None = None,
) -> list[Board]:
    """
    Generate the starting boards for a game.

    Pass rng to draw from a stream the caller keeps using afterwards;
    otherwise a new one is seeded with seed. Board uuids are distinct.
    """
    if count < 1:
        raise ValueError("A game needs at least one board")
    if rng is None:
        rng = random.Random(seed)
    boards: list[Board] = []
    uuids: set[str] = set()
    while len(boards) < count:
        board = random_board(width, height, mark_probability, rng)
        if board.uuid not in uuids:
            uuids.add(board.uuid)
            boards.append(board)
    return boards
