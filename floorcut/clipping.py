"""
Strip clipping

Sutherland-Hodgman clipping of a floor polygon against one band
rectangle, followed by void removal. The default void test keeps or
drops a whole band piece on a single centroid sample; the exact mode
subtracts the voids with shapely.
"""

import logging
from typing import List, Sequence, Tuple

from shapely.geometry import Polygon
from shapely.geometry.base import BaseGeometry

from .geometry import Rect, point_in_polygon, polygon_centroid
from .models import Point, VoidMode

logger = logging.getLogger(__name__)

# Cross-product slack: points this close to a clip edge count as inside
CLIP_TOLERANCE = 0.001


def _clip_edges(rect: Rect) -> List[Tuple[Point, Point]]:
    """Rectangle sides in fixed order: top, right, bottom, left"""
    x0, y0 = rect.x, rect.y
    x1, y1 = rect.x + rect.width, rect.y + rect.height
    return [
        ((x0, y0), (x1, y0)),
        ((x1, y0), (x1, y1)),
        ((x1, y1), (x0, y1)),
        ((x0, y1), (x0, y0)),
    ]


def _inside(p: Point, edge_start: Point, edge_end: Point) -> bool:
    cross = ((edge_end[0] - edge_start[0]) * (p[1] - edge_start[1])
             - (edge_end[1] - edge_start[1]) * (p[0] - edge_start[0]))
    return cross >= -CLIP_TOLERANCE


def _crossing(p1: Point, p2: Point, edge_start: Point, edge_end: Point):
    """Where p1-p2 meets the (infinite) clip line, or None if parallel"""
    ex = edge_end[0] - edge_start[0]
    ey = edge_end[1] - edge_start[1]
    dx = p2[0] - p1[0]
    dy = p2[1] - p1[1]
    den = dx * ey - dy * ex
    if den == 0:
        return None
    t = ((edge_start[0] - p1[0]) * ey - (edge_start[1] - p1[1]) * ex) / den
    t = max(0.0, min(1.0, t))
    return (p1[0] + t * dx, p1[1] + t * dy)


def clip_to_rect(polygon: Sequence[Point], rect: Rect) -> List[List[Point]]:
    """
    Clip a polygon to an axis-aligned rectangle

    Returns: [clipped_points] or [] when fewer than 3 vertices survive.
    At most one polygon comes back; the input is assumed simple.
    """
    if len(polygon) < 3:
        return []

    clipped = list(polygon)
    for edge_start, edge_end in _clip_edges(rect):
        if not clipped:
            break
        out: List[Point] = []
        n = len(clipped)
        for j in range(n):
            p1 = clipped[j]
            p2 = clipped[(j + 1) % n]
            in1 = _inside(p1, edge_start, edge_end)
            in2 = _inside(p2, edge_start, edge_end)

            if in1 and in2:
                out.append(p2)
            elif in1:
                hit = _crossing(p1, p2, edge_start, edge_end)
                if hit is not None:
                    out.append(hit)
            elif in2:
                hit = _crossing(p1, p2, edge_start, edge_end)
                if hit is not None:
                    out.append(hit)
                out.append(p2)
        clipped = out

    if len(clipped) >= 3:
        return [clipped]
    return []


def _centroid_in_any_void(points: Sequence[Point], void_polygons: Sequence[Sequence[Point]]) -> bool:
    cx, cy = polygon_centroid(points)
    return any(point_in_polygon(cx, cy, v) for v in void_polygons)


def _as_shape(points: Sequence[Point]) -> Polygon:
    shape = Polygon(points)
    if not shape.is_valid:
        # Offset voids can self-intersect on sharp corners
        shape = shape.buffer(0)
    return shape


def _exterior_rings(geom: BaseGeometry) -> List[List[Point]]:
    rings: List[List[Point]] = []
    parts = getattr(geom, "geoms", [geom])
    for part in parts:
        if part.is_empty or part.geom_type != "Polygon":
            continue
        if len(part.interiors):
            logger.info("Void lies wholly inside a band piece; %d hole(s) must be cut in place",
                        len(part.interiors))
        coords = [(float(x), float(y)) for x, y in part.exterior.coords[:-1]]
        if len(coords) >= 3:
            rings.append(coords)
    return rings


def _subtract_voids_exact(piece: Sequence[Point], void_polygons: Sequence[Sequence[Point]]) -> List[List[Point]]:
    shape: BaseGeometry = _as_shape(piece)
    for void in void_polygons:
        if len(void) < 3:
            continue
        shape = shape.difference(_as_shape(void))
        if shape.is_empty:
            return []
    return _exterior_rings(shape)


def clip_and_subtract_voids(polygon: Sequence[Point], rect: Rect,
                            void_polygons: Sequence[Sequence[Point]],
                            void_mode: VoidMode = VoidMode.CENTROID) -> List[List[Point]]:
    """
    Clip to a band rectangle, then remove voided pieces

    In centroid mode a piece whose vertex average falls inside any void
    is dropped whole, otherwise kept whole; partial overlaps are not
    carved out. Exact mode returns the band piece minus the voids.
    """
    pieces = clip_to_rect(polygon, rect)
    if not void_polygons:
        return pieces

    result: List[List[Point]] = []
    for piece in pieces:
        if void_mode == VoidMode.EXACT:
            result.extend(_subtract_voids_exact(piece, void_polygons))
        elif not _centroid_in_any_void(piece, void_polygons):
            result.append(piece)
    return result
