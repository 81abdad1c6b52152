"""Unit tests for room configuration models."""

import pytest
from pydantic import ValidationError

from mystery_room.models.event import PuzzleType
from mystery_room.models.room import (
    ConnectionLayout,
    PairMatchLayout,
    PlacementLayout,
    Puzzle,
)
from tests.helpers import make_puzzle


class TestDefaultLayouts:
    """Tests for the built-in layouts."""

    def test_connection_chain(self) -> None:
        """Six nodes Start..End with a five-edge chain."""
        layout = ConnectionLayout.default()

        assert [n.label for n in layout.nodes] == [
            "Start", "Analysis", "Design", "Development", "Testing", "End",
        ]
        assert layout.correct_sequence == [(1, 2), (2, 3), (3, 4), (4, 5), (5, 6)]
        assert (layout.start_node, layout.end_node) == (1, 6)
        assert [n.fixed for n in layout.nodes] == [True, False, False, False, False, True]

    def test_pair_match_symbols(self) -> None:
        """Five symbols with labels."""
        layout = PairMatchLayout.default()

        assert [s.symbol for s in layout.symbols] == ["diamond", "heart", "spade", "club", "star"]
        assert layout.symbols[0].label == "React"

    def test_placement_pieces(self) -> None:
        """Five pieces lined up below their targets."""
        layout = PlacementLayout.default()

        assert len(layout.pieces) == 5
        assert layout.pieces[4].start == (2.0, -1.0, 0.0)
        assert layout.pieces[4].target == (2.0, 1.0, 0.0)
        assert layout.snap_threshold is None


class TestPuzzle:
    """Tests for the Puzzle model."""

    def test_puzzle_type_resolves_legacy(self) -> None:
        """Legacy tags map to the enum."""
        assert make_puzzle(1, "shape", ("a",)).puzzle_type == PuzzleType.PLACEMENT

    def test_unknown_type_loads(self) -> None:
        """Unknown types are kept as raw strings."""
        puzzle = make_puzzle(1, "riddle", ("a",))

        assert puzzle.type == "riddle"
        assert puzzle.puzzle_type is None

    def test_frozen(self) -> None:
        """Puzzles are immutable after load."""
        puzzle = make_puzzle(1, "connection", ("a",))

        with pytest.raises(ValidationError):
            puzzle.title = "Changed"

    def test_layout_fallback(self) -> None:
        """Missing layout blocks fall back to the defaults."""
        puzzle = Puzzle(id=1, title="P", type="connection", facts=("a",))

        assert puzzle.connection_layout() == ConnectionLayout.default()
        assert puzzle.total_facts == 1


class TestRoomData:
    """Tests for RoomData lookups."""

    def test_lookups(self, sample_room_data) -> None:
        assert sample_room_data.get_puzzle(2).title == "Experience"
        assert sample_room_data.get_puzzle(9) is None
        assert sample_room_data.get_puzzle_by_type(PuzzleType.PAIR_MATCH).id == 3
        assert sample_room_data.puzzle_ids() == [1, 2, 3]
