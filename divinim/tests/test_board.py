"""
Tests for the board model.

Tests:
- Short identifiers and the content hash
- Resolution rule
- Random board generation
"""

import random

import pytest

from ..engine_core.board import (
    BASE62_CHARS,
    UUID_LENGTH,
    Board,
    BoardDimensions,
    TileCoordinate,
    board_hash,
    generate_boards,
    generate_uuid,
    int_to_alphanumeric,
    random_board,
    tile_coordinate_to_string,
)
from .conftest import make_board


class TestIdentifiers:
    """Tests for base-62 identifiers."""

    def test_uuid_shape(self):
        """Identifiers are six base-62 characters."""
        uuid = generate_uuid()
        assert len(uuid) == UUID_LENGTH
        assert all(c in BASE62_CHARS for c in uuid)

    def test_seeded_uuid_is_reproducible(self):
        """The same seed gives the same identifiers."""
        assert generate_uuid(random.Random(7)) == generate_uuid(random.Random(7))

    def test_int_to_alphanumeric(self):
        """Integers render in base 62, zero as the empty string."""
        assert int_to_alphanumeric(0) == ""
        assert int_to_alphanumeric(1) == "B"
        assert int_to_alphanumeric(61) == "9"
        assert int_to_alphanumeric(62) == "BA"

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            int_to_alphanumeric(-1)


class TestBoardHash:
    """Tests for the content hash."""

    def test_hash_format(self, two_by_three):
        """Dimensions prefix plus the mark bitmask (bit y*width+x)."""
        # (1, 2) on a 2-wide board is bit 5 -> 32 -> 'g'
        assert board_hash(two_by_three) == "2:3-g"

    def test_unmarked_board_hash(self):
        assert board_hash(make_board("empty1", 3, 2)) == "3:2-"

    def test_identical_layouts_hash_identically(self):
        """uuid and metadata do not affect the hash."""
        a = make_board("aaaaaa", 3, 3, [(0, 0), (2, 1)])
        b = make_board("bbbbbb", 3, 3, [(2, 1), (0, 0)]).with_metadata(x=10)
        assert board_hash(a) == board_hash(b)
        assert a.same_layout(b)

    def test_dimensions_distinguish_layouts(self):
        """Same bitmask on a different shape hashes differently."""
        a = make_board("aaaaaa", 2, 3, [(0, 0)])
        b = make_board("bbbbbb", 3, 2, [(0, 0)])
        assert board_hash(a) != board_hash(b)

    def test_large_board_hash(self):
        """Boards larger than 64 tiles still hash exactly."""
        a = make_board("aaaaaa", 10, 10, [(9, 9)])
        b = make_board("bbbbbb", 10, 10, [(8, 9)])
        assert board_hash(a) != board_hash(b)


class TestBoard:
    """Tests for board values."""

    def test_mark_outside_board_rejected(self):
        with pytest.raises(ValueError):
            make_board("bad000", 2, 2, [(2, 0)])

    def test_zero_dimension_rejected(self):
        with pytest.raises(ValueError):
            BoardDimensions(width=0, height=3)

    def test_marks_become_frozenset(self):
        board = Board(
            uuid="list01",
            dimensions=BoardDimensions(2, 2),
            marked_coordinates=[TileCoordinate(0, 0)],
        )
        assert isinstance(board.marked_coordinates, frozenset)

    def test_metadata_ignored_by_equality(self, two_by_three):
        tagged = two_by_three.with_metadata(position=(3, 4))
        assert tagged == two_by_three
        assert tagged.uuid == two_by_three.uuid
        assert tagged.metadata == {"position": (3, 4)}
        assert two_by_three.metadata == {}

    def test_coordinate_to_string(self):
        assert tile_coordinate_to_string(TileCoordinate(1, 2)) == "(1, 2)"


class TestResolution:
    """Tests for the resolution rule."""

    def test_unmarked_board_resolved(self):
        assert make_board("r00000", 3, 1).is_resolved

    def test_marked_unit_tile_resolved(self):
        assert make_board("r00001", 1, 1, [(0, 0)]).is_resolved

    def test_unmarked_unit_tile_resolved(self):
        assert make_board("r00002", 1, 1).is_resolved

    def test_fully_marked_domino_stays_live(self):
        """A 2x1 board with both tiles marked is not resolved."""
        assert not make_board("r00003", 2, 1, [(0, 0), (1, 0)]).is_resolved

    def test_partially_marked_board_live(self, two_by_three):
        assert not two_by_three.is_resolved


class TestRandomBoards:
    """Tests for board generation."""

    def test_random_board_is_live(self):
        rng = random.Random(3)
        for _ in range(50):
            board = random_board(2, 1, mark_probability=0.3, rng=rng)
            assert not board.is_resolved
            assert board.mark_count >= 1

    def test_unit_board_rejected(self):
        with pytest.raises(ValueError):
            random_board(1, 1)

    def test_probability_range(self):
        with pytest.raises(ValueError):
            random_board(3, 3, mark_probability=0)
        with pytest.raises(ValueError):
            random_board(3, 3, mark_probability=1.5)

    def test_full_probability_marks_everything(self):
        board = random_board(3, 2, mark_probability=1.0)
        assert board.mark_count == 6

    def test_generate_boards_is_reproducible(self):
        first = generate_boards(4, 3, 3, seed=11)
        second = generate_boards(4, 3, 3, seed=11)
        assert len(first) == 4
        assert first == second

    def test_generate_boards_needs_one(self):
        with pytest.raises(ValueError):
            generate_boards(0, 3, 3)
