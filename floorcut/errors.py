"""
Exceptions raised by the layout engine

Expected degenerate geometry never raises: it yields empty results and a
log warning. These exceptions cover programmer errors, malformed input
and the opt-in strict capacity check.
"""

from typing import Optional


class FloorCutError(Exception):
    """Base class for layout engine failures"""
    pass


class InvalidInputError(FloorCutError, ValueError):
    """User-entered value rejected by an editing helper"""

    def __init__(self, detail: str, field: Optional[str] = None):
        self.detail = detail
        self.field = field
        super().__init__(detail)


class PieceTooLargeError(FloorCutError):
    """A piece does not fit the roll stock and strict packing was requested"""

    def __init__(self, piece_name: str, dimension: str, size_m: float, limit_m: float):
        self.piece_name = piece_name
        self.dimension = dimension
        self.size_m = size_m
        self.limit_m = limit_m
        super().__init__(
            f"Piece {piece_name} ({dimension}: {size_m:.2f}m) exceeds the roll {dimension} ({limit_m:.2f}m)"
        )


class ProjectFormatError(FloorCutError):
    """A project snapshot could not be parsed or validated"""
    pass
