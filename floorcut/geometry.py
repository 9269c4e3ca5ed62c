"""
Geometry primitives

Point, segment and polygon math in pixel space. Functions that report
lengths take the grid size (pixels per metre) and return metres.
Degenerate input yields a safe default instead of raising.
"""

import logging
import math
from typing import NamedTuple, Optional, Sequence

from .models import Point

logger = logging.getLogger(__name__)

DEFAULT_GRID_SIZE = 100.0


class Bounds(NamedTuple):
    min_x: float
    min_y: float
    max_x: float
    max_y: float
    width: float
    height: float


class Rect(NamedTuple):
    """Axis-aligned rectangle, origin at the top-left (screen coordinates)"""
    x: float
    y: float
    width: float
    height: float


def snap_to_grid(point: Point, grid_size: float, enabled: bool = True) -> Point:
    """Round a point to the nearest grid intersection when snapping is on"""
    if not enabled or grid_size <= 0:
        return point
    return (round(point[0] / grid_size) * grid_size, round(point[1] / grid_size) * grid_size)


def distance(p1: Point, p2: Point, grid_size: float = DEFAULT_GRID_SIZE) -> float:
    """Euclidean distance in metres"""
    return math.hypot(p2[0] - p1[0], p2[1] - p1[1]) / grid_size


def angle(p1: Point, p2: Point) -> float:
    """Direction of p1 -> p2 in degrees, in (-180, 180]"""
    if any(math.isnan(v) for v in (p1[0], p1[1], p2[0], p2[1])):
        logger.warning("Invalid coordinates for angle calculation: %s, %s", p1, p2)
        return 0.0
    return math.degrees(math.atan2(p2[1] - p1[1], p2[0] - p1[0]))


def point_to_segment_distance(point: Point, seg_start: Point, seg_end: Point,
                              grid_size: float = DEFAULT_GRID_SIZE) -> float:
    """
    Shortest distance from a point to a segment, in metres

    The projection onto the segment's line is clamped to the segment, so
    points beyond either end measure to that endpoint.
    """
    dx = seg_end[0] - seg_start[0]
    dy = seg_end[1] - seg_start[1]
    length_sq = dx * dx + dy * dy
    if length_sq == 0:
        return distance(point, seg_start, grid_size)

    t = ((point[0] - seg_start[0]) * dx + (point[1] - seg_start[1]) * dy) / length_sq
    t = max(0.0, min(1.0, t))
    projection = (seg_start[0] + t * dx, seg_start[1] + t * dy)
    return distance(point, projection, grid_size)


def point_in_polygon(x: float, y: float, polygon: Sequence[Point]) -> bool:
    """Ray-casting parity test"""
    if not polygon or len(polygon) < 3:
        return False

    inside = False
    j = len(polygon) - 1
    for i in range(len(polygon)):
        xi, yi = polygon[i]
        xj, yj = polygon[j]
        if (yi > y) != (yj > y) and x < (xj - xi) * (y - yi) / (yj - yi) + xi:
            inside = not inside
        j = i
    return inside


def signed_area(points: Sequence[Point]) -> float:
    """Shoelace sum / 2 keeping the sign (positive = counter-clockwise in y-up axes)"""
    n = len(points)
    if n < 3:
        return 0.0
    acc = 0.0
    for i in range(n):
        x1, y1 = points[i]
        x2, y2 = points[(i + 1) % n]
        acc += x1 * y2 - x2 * y1
    return acc / 2.0


def polygon_area(points: Sequence[Point]) -> float:
    """Polygon area in square pixels; either winding order"""
    return abs(signed_area(points))


def polygon_perimeter(points: Sequence[Point], grid_size: float = DEFAULT_GRID_SIZE) -> float:
    """Closed perimeter in metres"""
    if not points or len(points) < 2:
        return 0.0
    n = len(points)
    return sum(distance(points[i], points[(i + 1) % n], grid_size) for i in range(n))


def polygon_bounds(points: Sequence[Point]) -> Bounds:
    if not points:
        return Bounds(0.0, 0.0, 0.0, 0.0, 0.0, 0.0)
    xs = [p[0] for p in points]
    ys = [p[1] for p in points]
    min_x, max_x = min(xs), max(xs)
    min_y, max_y = min(ys), max(ys)
    return Bounds(min_x, min_y, max_x, max_y, max_x - min_x, max_y - min_y)


def polygon_centroid(points: Sequence[Point]) -> Point:
    """
    Vertex average of a polygon

    Not the area-weighted centroid: good enough as an interior sample on
    roughly convex shapes, can land outside strongly concave ones.
    """
    if not points:
        return (0.0, 0.0)
    n = len(points)
    return (sum(p[0] for p in points) / n, sum(p[1] for p in points) / n)


def segment_intersection(p1: Point, p2: Point, p3: Point, p4: Point) -> Optional[Point]:
    """Intersection of segments p1-p2 and p3-p4, or None (parallel, collinear, disjoint)"""
    den = (p1[0] - p2[0]) * (p3[1] - p4[1]) - (p1[1] - p2[1]) * (p3[0] - p4[0])
    if den == 0:
        return None

    t = ((p1[0] - p3[0]) * (p3[1] - p4[1]) - (p1[1] - p3[1]) * (p3[0] - p4[0])) / den
    u = -((p1[0] - p2[0]) * (p1[1] - p3[1]) - (p1[1] - p2[1]) * (p1[0] - p3[0])) / den

    if 0 <= t <= 1 and 0 <= u <= 1:
        return (p1[0] + t * (p2[0] - p1[0]), p1[1] + t * (p2[1] - p1[1]))
    return None


def points_close(a: Point, b: Point, tolerance: float) -> bool:
    """Both coordinates within tolerance (square window, not a circle)"""
    return abs(a[0] - b[0]) < tolerance and abs(a[1] - b[1]) < tolerance


def outward_normal(a: Point, b: Point, orientation: float) -> Point:
    """
    Unit normal of a -> b pointing away from the polygon interior

    orientation is the sign of signed_area() for the polygon the edge
    belongs to. Zero-length edges give (0, 0).
    """
    dx = b[0] - a[0]
    dy = b[1] - a[1]
    length = math.hypot(dx, dy)
    if length == 0:
        return (0.0, 0.0)
    sign = 1.0 if orientation >= 0 else -1.0
    return (sign * dy / length, -sign * dx / length)
