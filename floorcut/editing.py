"""
Editing helpers

Pure operations behind the editor's selection and context-menu actions.
Each returns a new edge rather than changing the one passed in, and
rejects nonsensical user input with InvalidInputError.
"""

import math
from typing import Optional, Sequence

from .errors import InvalidInputError
from .geometry import angle, point_in_polygon, point_to_segment_distance
from .models import Edge, EdgeType, FloorPolygon

SELECT_THRESHOLD_PX = 10.0

ROTATABLE_TYPES = (EdgeType.DOOR, EdgeType.WINDOW)
COVING_TYPES = (EdgeType.WALL, EdgeType.VOID_EDGE)


def find_edge_at(x: float, y: float, edges: Sequence[Edge], grid_size: float,
                 threshold_px: float = SELECT_THRESHOLD_PX) -> Optional[Edge]:
    """Topmost (last drawn) edge within threshold_px of the point"""
    for edge in reversed(edges):
        if point_to_segment_distance((x, y), edge.start, edge.end, grid_size) * grid_size < threshold_px:
            return edge
    return None


def find_polygon_at(x: float, y: float, polygons: Sequence[FloorPolygon]) -> Optional[FloorPolygon]:
    for polygon in reversed(polygons):
        if point_in_polygon(x, y, polygon.points):
            return polygon
    return None


def _length_px(edge: Edge) -> float:
    return math.hypot(edge.end_x - edge.start_x, edge.end_y - edge.start_y)


def _with_end(edge: Edge, length_px: float, angle_deg: float) -> Edge:
    rad = math.radians(angle_deg)
    return edge.model_copy(update={
        "end_x": edge.start_x + length_px * math.cos(rad),
        "end_y": edge.start_y + length_px * math.sin(rad),
    })


def rotate_edge(edge: Edge, delta_deg: float) -> Edge:
    """Rotate a door or window about its start point; other edges come back unchanged"""
    if edge.type not in ROTATABLE_TYPES:
        return edge
    if math.isnan(delta_deg):
        raise InvalidInputError("Please enter a valid number for rotation angle.", field="angle")
    return _with_end(edge, _length_px(edge), angle(edge.start, edge.end) + delta_deg)


def set_edge_length(edge: Edge, length_m: float, grid_size: float) -> Edge:
    """Keep start point and direction, move the end to the requested length"""
    if math.isnan(length_m) or length_m < 0:
        raise InvalidInputError("Please enter a valid positive number for length.", field="length")
    return _with_end(edge, length_m * grid_size, angle(edge.start, edge.end))


def toggle_coving(edge: Edge, amount_mm: float) -> Edge:
    """
    Switch coving on or off for a wall or void edge

    amount_mm is what the user typed; it is stored in metres when coving
    turns on and reset to 0 when it turns off.
    """
    if edge.type not in COVING_TYPES:
        raise InvalidInputError(f"Coving cannot be applied to a {edge.type.value}.", field="type")
    if math.isnan(amount_mm) or amount_mm < 0:
        raise InvalidInputError("Please enter a valid positive number for coving amount (mm).",
                                field="covingAmount")
    coving = not edge.coving
    return edge.model_copy(update={
        "coving": coving,
        "coving_amount": amount_mm / 1000 if coving else 0.0,
    })
