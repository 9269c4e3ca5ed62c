"""
Coving adjustment

Coving is trim run up the wall from the floor, so the vinyl for a coved
wall extends past the floor outline and the vinyl around a coved void
stops short of it. Both are modelled by moving each vertex along the
averaged outward normal of its two edges.

This is a per-vertex offset, not a true polygon buffer: concave or acute
corners with large offsets can self-intersect.
"""

import logging
import math
from typing import Dict, List, Optional, Sequence, Tuple

from .geometry import distance, outward_normal, signed_area
from .models import Edge, EdgeType, Point

logger = logging.getLogger(__name__)

MIN_COVING_M = 0.001
EDGE_MATCH_PX = 1.0


def _segment_key(p1: Point, p2: Point) -> Tuple[float, float, float, float]:
    # Direction-independent lookup key; coordinates rounded for float noise
    return (
        round(min(p1[0], p2[0]), 6), round(min(p1[1], p2[1]), 6),
        round(max(p1[0], p2[0]), 6), round(max(p1[1], p2[1]), 6),
    )


def _bisector_offset(prev_pt: Point, point: Point, next_pt: Point,
                     orientation: float, offset_px: float) -> Point:
    """Displacement of a corner by offset_px along its outward bisector"""
    n1 = outward_normal(prev_pt, point, orientation)
    n2 = outward_normal(point, next_pt, orientation)
    ax = n1[0] + n2[0]
    ay = n1[1] + n2[1]
    length = math.hypot(ax, ay)
    if length == 0:
        return (0.0, 0.0)
    return (ax / length * offset_px, ay / length * offset_px)


def _effective_coving(edge: Optional[Edge]) -> float:
    if edge is None or not edge.coving or edge.coving_amount <= MIN_COVING_M:
        return 0.0
    return edge.coving_amount


def expand_for_coving(polygon: Sequence[Point], source_edges: Sequence[Edge],
                      grid_size: float) -> List[Point]:
    """
    Push coved corners of a wall polygon outward

    Each vertex moves by the larger coving amount of its two adjacent
    edges (looked up in source_edges regardless of drawing direction).
    Vertices with no coved neighbour stay put.
    """
    if len(polygon) < 3:
        return list(polygon)

    edge_map: Dict[Tuple[float, float, float, float], Edge] = {}
    for edge in source_edges:
        edge_map[_segment_key(edge.start, edge.end)] = edge

    orientation = signed_area(polygon)
    n = len(polygon)
    expanded: List[Point] = []
    for i in range(n):
        prev_pt = polygon[i - 1]
        point = polygon[i]
        next_pt = polygon[(i + 1) % n]

        amount = max(
            _effective_coving(edge_map.get(_segment_key(prev_pt, point))),
            _effective_coving(edge_map.get(_segment_key(point, next_pt))),
        )
        if amount > MIN_COVING_M:
            dx, dy = _bisector_offset(prev_pt, point, next_pt, orientation, amount * grid_size)
            expanded.append((point[0] + dx, point[1] + dy))
        else:
            expanded.append(point)

    return expanded


def offset_polygon(points: Sequence[Point], offset_px: float) -> List[Point]:
    """Move every vertex by offset_px along its bisector (positive grows, negative shrinks)"""
    if len(points) < 3:
        return list(points)

    orientation = signed_area(points)
    n = len(points)
    result: List[Point] = []
    for i in range(n):
        dx, dy = _bisector_offset(points[i - 1], points[i], points[(i + 1) % n],
                                  orientation, offset_px)
        result.append((points[i][0] + dx, points[i][1] + dy))
    return result


def _matching_edge(p1: Point, p2: Point, edges: Sequence[Edge]) -> Optional[Edge]:
    # Void loops may be re-ordered or reversed, so match by proximity
    for edge in edges:
        if distance(edge.start, p1, 1) < EDGE_MATCH_PX and distance(edge.end, p2, 1) < EDGE_MATCH_PX:
            return edge
        if distance(edge.start, p2, 1) < EDGE_MATCH_PX and distance(edge.end, p1, 1) < EDGE_MATCH_PX:
            return edge
    return None


def shrink_void_for_coving(void_loop: Sequence[Point], void_edges: Sequence[Edge],
                           grid_size: float) -> List[Point]:
    """Shrink a void by the largest coving amount found on its own edges"""
    n = len(void_loop)
    max_amount = 0.0
    for i in range(n):
        edge = _matching_edge(void_loop[i], void_loop[(i + 1) % n], void_edges)
        max_amount = max(max_amount, _effective_coving(edge))

    if max_amount > MIN_COVING_M:
        logger.debug("Shrinking void by %.3f m of coving", max_amount)
        return offset_polygon(void_loop, -max_amount * grid_size)
    return list(void_loop)


def coving_length(edges: Sequence[Edge], grid_size: float) -> float:
    """Total length in metres of coved walls"""
    return sum(
        distance(e.start, e.end, grid_size)
        for e in edges
        if e.type == EdgeType.WALL and e.coving and e.coving_amount > 0
    )
