"""
Roll packing

Places vinyl pieces onto fixed-size rolls with a greedy shelf heuristic.
This is not an optimal bin packer: pieces are sorted longest first and
each one goes beside the current row, into a new row, or onto a new roll.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

from .errors import PieceTooLargeError
from .models import Direction, FloorPolygon, Piece, PlacedPiece, Roll, VinylLayout

logger = logging.getLogger(__name__)

# Slack (metres) when comparing piece sizes against roll limits
PACKING_TOLERANCE = 1e-4


def pieces_from_layout(layout: VinylLayout, polygons: Sequence[FloorPolygon],
                       grid_size: float) -> List[Piece]:
    """
    Express every strip of a layout in roll coordinates

    Horizontal strips run along x, so their bounding-box width is the
    length taken off the roll; vertical strips run along y.
    """
    index_by_id = {p.id: i for i, p in enumerate(polygons)}
    pieces: List[Piece] = []
    for poly_layout in layout.polygon_layouts:
        poly_index = index_by_id.get(poly_layout.polygon_id, poly_layout.polygon_index)
        for strip in poly_layout.strips:
            if layout.direction == Direction.HORIZONTAL:
                length_px, width_px = strip.width, strip.height
            else:
                length_px, width_px = strip.height, strip.width
            pieces.append(Piece(
                id=f"strip-{poly_index}-{strip.sheet_number}",
                name=f"P{poly_index + 1}_S{strip.sheet_number}",
                length_m=length_px / grid_size,
                width_m=width_px / grid_size,
                area=strip.area,
                original_polygon_points=strip.original_polygon_points,
            ))
    return pieces


@dataclass
class _RollCursor:
    """Packing state of the roll currently being filled"""
    roll_number: int
    pieces: List[PlacedPiece] = field(default_factory=list)
    row_offset: float = 0.0          # where the current row starts along the roll
    current_length_used: float = 0.0  # row_offset + length of the current row
    max_height_used: float = 0.0      # width consumed across the current row

    def place(self, piece: Piece, offset_x: float, offset_y: float) -> None:
        self.pieces.append(PlacedPiece(
            **piece.model_dump(),
            offset_x_on_roll_m=offset_x,
            offset_y_on_roll_m=offset_y,
            roll_number=self.roll_number,
        ))

    def to_roll(self) -> Roll:
        return Roll(roll_number=self.roll_number, pieces=self.pieces,
                    length_used_m=self.current_length_used)


def _check_capacity(piece: Piece, roll_length_m: float, roll_width_m: float, strict: bool) -> None:
    if piece.width_m > roll_width_m + PACKING_TOLERANCE:
        if strict:
            raise PieceTooLargeError(piece.name, "width", piece.width_m, roll_width_m)
        logger.warning("Piece %s (width: %.2fm) is wider than the roll (%.2fm)",
                       piece.name, piece.width_m, roll_width_m)
    if piece.length_m > roll_length_m + PACKING_TOLERANCE:
        if strict:
            raise PieceTooLargeError(piece.name, "length", piece.length_m, roll_length_m)
        logger.warning("Piece %s (length: %.2fm) is longer than a single roll (%.2fm)",
                       piece.name, piece.length_m, roll_length_m)


def _start_roll(cursors: List[_RollCursor], piece: Piece) -> _RollCursor:
    cursor = _RollCursor(roll_number=len(cursors) + 1)
    cursors.append(cursor)
    cursor.place(piece, 0.0, 0.0)
    cursor.current_length_used = piece.length_m
    cursor.max_height_used = piece.width_m
    return cursor


def pack_pieces_onto_rolls(pieces: Sequence[Piece], roll_length_m: float, roll_width_m: float,
                           strict: bool = False) -> List[Roll]:
    """
    Pack pieces onto rolls, longest first

    Oversized pieces are still placed (overflowing their roll) and
    logged, unless strict is set, in which case PieceTooLargeError is
    raised before anything is packed.

    Returns: rolls numbered from 1; every input piece appears exactly once
    """
    ordered = sorted(pieces, key=lambda p: p.length_m, reverse=True)
    for piece in ordered:
        _check_capacity(piece, roll_length_m, roll_width_m, strict)

    cursors: List[_RollCursor] = []
    current = None

    for piece in ordered:
        if current is None:
            current = _start_roll(cursors, piece)
            continue

        row_length = current.current_length_used - current.row_offset
        fits_beside = (
            piece.length_m <= row_length + PACKING_TOLERANCE
            and current.max_height_used + piece.width_m <= roll_width_m + PACKING_TOLERANCE
        )
        if fits_beside:
            current.place(piece, current.row_offset, current.max_height_used)
            current.max_height_used += piece.width_m
            continue

        fits_new_row = (
            current.current_length_used + piece.length_m <= roll_length_m + PACKING_TOLERANCE
            and piece.width_m <= roll_width_m + PACKING_TOLERANCE
        )
        if fits_new_row:
            current.row_offset = current.current_length_used
            current.place(piece, current.row_offset, 0.0)
            current.current_length_used += piece.length_m
            current.max_height_used = piece.width_m
            continue

        current = _start_roll(cursors, piece)

    rolls = [c.to_roll() for c in cursors]
    logger.debug("Packed %d pieces onto %d roll(s)", len(ordered), len(rolls))
    return rolls


def roll_totals(rolls: Sequence[Roll], roll_length_m: float) -> Tuple[float, int]:
    """
    Linear metres of pieces and the number of roll lengths that implies

    Returns: (total_length_m, estimated_rolls)
    """
    total_length = sum(p.length_m for r in rolls for p in r.pieces)
    estimated = math.ceil(total_length / roll_length_m - 1e-9) if total_length > 0 else 0
    return total_length, estimated
