# File: tests/test_packing.py
"""Tests for strip-to-piece conversion and greedy roll packing."""

from collections import Counter

import pytest

from floorcut.errors import PieceTooLargeError
from floorcut.models import Direction
from floorcut.packing import pack_pieces_onto_rolls, pieces_from_layout, roll_totals
from floorcut.planner import calculate_vinyl


def _placed(rolls):
    return [p for r in rolls for p in r.pieces]


class TestPiecesFromLayout:
    def test_horizontal_strips(self, rectangle_polygon):
        layout = calculate_vinyl([rectangle_polygon], [], 2.0, Direction.HORIZONTAL, 100)
        pieces = pieces_from_layout(layout, [rectangle_polygon], 100)
        assert [p.name for p in pieces] == ["P1_S1", "P1_S2"]
        assert [c for p in pieces for c in (p.length_m, p.width_m)] == pytest.approx([4.0, 2.0, 4.0, 1.0])
        assert pieces[0].id == "strip-0-1"

    def test_vertical_strips_run_along_y(self, rectangle_polygon):
        layout = calculate_vinyl([rectangle_polygon], [], 2.0, Direction.VERTICAL, 100)
        pieces = pieces_from_layout(layout, [rectangle_polygon], 100)
        assert [c for p in pieces for c in (p.length_m, p.width_m)] == pytest.approx([3.0, 2.0, 3.0, 2.0])

    def test_strip_outline_carried_over(self, rectangle_polygon):
        layout = calculate_vinyl([rectangle_polygon], [], 2.0, Direction.HORIZONTAL, 100)
        pieces = pieces_from_layout(layout, [rectangle_polygon], 100)
        assert len(pieces[0].original_polygon_points) == 4


class TestPackPieces:
    def test_empty_input(self):
        assert pack_pieces_onto_rolls([], 25.0, 2.0) == []

    def test_every_piece_placed_once(self, make_piece):
        pieces = [make_piece(f"p{i}", length, width) for i, (length, width) in enumerate([
            (4.0, 2.0), (4.0, 1.0), (3.0, 0.5), (7.5, 2.0), (1.0, 1.0), (12.0, 1.5), (0.5, 0.5),
        ])]
        rolls = pack_pieces_onto_rolls(pieces, 10.0, 2.0)
        placed = Counter(p.id for p in _placed(rolls))
        assert placed == Counter(p.id for p in pieces)

    def test_side_by_side_in_one_row(self, make_piece):
        pieces = [make_piece(f"p{i}", 3.0, 0.5) for i in range(3)]
        rolls = pack_pieces_onto_rolls(pieces, 25.0, 2.0)
        assert len(rolls) == 1
        offsets = [(p.offset_x_on_roll_m, p.offset_y_on_roll_m) for p in rolls[0].pieces]
        assert offsets == [(0.0, 0.0), (0.0, 0.5), (0.0, 1.0)]
        assert rolls[0].length_used_m == pytest.approx(3.0)

    def test_new_row_when_too_wide(self, make_piece):
        pieces = [make_piece("a", 4.0, 2.0), make_piece("b", 4.0, 1.0)]
        rolls = pack_pieces_onto_rolls(pieces, 25.0, 2.0)
        assert len(rolls) == 1
        b = rolls[0].pieces[1]
        assert (b.offset_x_on_roll_m, b.offset_y_on_roll_m) == (4.0, 0.0)
        assert rolls[0].length_used_m == pytest.approx(8.0)

    def test_new_roll_when_too_long(self, make_piece):
        pieces = [make_piece("a", 4.0, 2.0), make_piece("b", 4.0, 2.0)]
        rolls = pack_pieces_onto_rolls(pieces, 5.0, 2.0)
        assert [r.roll_number for r in rolls] == [1, 2]
        second = rolls[1].pieces[0]
        assert (second.offset_x_on_roll_m, second.offset_y_on_roll_m) == (0.0, 0.0)
        assert second.roll_number == 2

    def test_longest_first(self, make_piece):
        pieces = [make_piece("short", 1.0, 1.0), make_piece("long", 5.0, 1.0)]
        rolls = pack_pieces_onto_rolls(pieces, 25.0, 2.0)
        assert rolls[0].pieces[0].name == "long"

    def test_fitting_pieces_stay_on_roll(self, make_piece):
        sizes = [(4.0, 2.0), (3.5, 0.5), (3.0, 0.7), (2.0, 1.2), (6.0, 1.0), (1.0, 0.3), (2.5, 2.0)]
        pieces = [make_piece(f"p{i}", l, w) for i, (l, w) in enumerate(sizes)]
        rolls = pack_pieces_onto_rolls(pieces, 8.0, 2.0)
        for p in _placed(rolls):
            assert p.offset_x_on_roll_m + p.length_m <= 8.0 + 1e-9
            assert p.offset_y_on_roll_m + p.width_m <= 2.0 + 1e-9

    def test_oversized_piece_placed_with_warning(self, make_piece, caplog):
        pieces = [make_piece("huge", 30.0, 2.5)]
        rolls = pack_pieces_onto_rolls(pieces, 25.0, 2.0)
        assert [p.name for p in _placed(rolls)] == ["huge"]
        assert "wider than the roll" in caplog.text
        assert "longer than a single roll" in caplog.text

    def test_strict_mode_rejects_long_piece(self, make_piece):
        with pytest.raises(PieceTooLargeError) as exc_info:
            pack_pieces_onto_rolls([make_piece("huge", 30.0, 1.0)], 25.0, 2.0, strict=True)
        assert exc_info.value.dimension == "length"
        assert exc_info.value.piece_name == "huge"

    def test_strict_mode_rejects_wide_piece(self, make_piece):
        with pytest.raises(PieceTooLargeError):
            pack_pieces_onto_rolls([make_piece("wide", 1.0, 2.5)], 25.0, 2.0, strict=True)


class TestRollTotals:
    def test_totals(self, make_piece):
        rolls = pack_pieces_onto_rolls([make_piece("a", 4.0, 2.0), make_piece("b", 4.0, 1.0)], 25.0, 2.0)
        assert roll_totals(rolls, 25.0) == (pytest.approx(8.0), 1)

    def test_exact_multiple_of_roll_length(self, make_piece):
        rolls = pack_pieces_onto_rolls([make_piece("a", 25.0, 2.0)], 25.0, 2.0)
        assert roll_totals(rolls, 25.0)[1] == 1

    def test_no_rolls(self):
        assert roll_totals([], 25.0) == (0, 0)
