"""
Polygon assembly

Turns unordered wall or void-edge segments into closed vertex loops.
Endpoints are matched within a fixed pixel tolerance. A segment set that
does not close yields an empty result, which is the normal state while a
room is still being drawn.
"""

import logging
import uuid
from typing import List, Optional, Sequence

from .coving import expand_for_coving
from .geometry import points_close, polygon_area
from .models import Edge, EdgeType, FloorPolygon, Point

logger = logging.getLogger(__name__)

ENDPOINT_TOLERANCE_PX = 5.0


def _connection_count(index: int, segments: Sequence[Edge], tolerance: float) -> int:
    """Number of other segments sharing an endpoint with segments[index]"""
    seg = segments[index]
    count = 0
    for j, other in enumerate(segments):
        if j == index:
            continue
        if any(points_close(a, b, tolerance)
               for a in (seg.start, seg.end)
               for b in (other.start, other.end)):
            count += 1
    return count


def _pick_start(segments: Sequence[Edge], tolerance: float) -> int:
    # Prefer an open end; a closed loop has none, so fall back to the first
    for i in range(len(segments)):
        if _connection_count(i, segments, tolerance) < 2:
            return i
    return 0


def order_segments_into_polygon(segments: Sequence[Edge],
                                tolerance: float = ENDPOINT_TOLERANCE_PX) -> List[Point]:
    """
    Order segments into a closed polygon

    Traces greedily from a start segment, appending the far endpoint of
    each connecting segment. Segments may appear in any order and either
    direction.

    Returns: ordered points without the duplicate closing point, or []
    when the segments do not form a closed loop of at least 3 points.
    """
    if not segments:
        return []

    start_index = _pick_start(segments, tolerance)
    start = segments[start_index]

    polygon: List[Point] = [start.start, start.end]
    used = {start_index}
    current = start.end
    closed = False

    for _ in range(len(segments) * 2):
        if len(used) == len(segments):
            break

        next_index = -1
        next_point: Optional[Point] = None
        for i, seg in enumerate(segments):
            if i in used:
                continue
            if points_close(seg.start, current, tolerance):
                next_index, next_point = i, seg.end
                break
            if points_close(seg.end, current, tolerance):
                next_index, next_point = i, seg.start
                break

        if next_index == -1:
            break

        polygon.append(next_point)
        used.add(next_index)
        current = next_point

        if points_close(current, polygon[0], tolerance):
            polygon.pop()
            closed = True
            break

    if not closed:
        if len(polygon) > 2 and points_close(current, polygon[0], tolerance):
            polygon.pop()
        else:
            logger.debug("Segments do not close into a loop (%d segments, %d traced)",
                         len(segments), len(used))
            return []

    if len(polygon) < 3:
        return []
    return polygon


def group_disjoint_edges_into_loops(edges: Sequence[Edge],
                                    tolerance: float = ENDPOINT_TOLERANCE_PX) -> List[List[Point]]:
    """
    Split edges into their closed loops

    Void edges can describe several separate shapes at once. Each unused
    edge seeds a path that grows end-to-start (reversing edges as needed)
    until it returns to its seed point. Paths that never close are
    dropped and their edges released.
    """
    shapes: List[List[Point]] = []
    used = set()

    for index, edge in enumerate(edges):
        if index in used:
            continue

        path = [edge]
        path_indices = [index]
        used.add(index)

        path_start = edge.start
        path_end = edge.end
        closed = False

        for _ in range(len(edges) * 2):
            found = False
            for i, candidate in enumerate(edges):
                if i in used:
                    continue
                if points_close(candidate.start, path_end, tolerance):
                    path.append(candidate)
                    path_end = candidate.end
                elif points_close(candidate.end, path_end, tolerance):
                    path.append(candidate.reversed())
                    path_end = candidate.start
                else:
                    continue
                path_indices.append(i)
                used.add(i)
                found = True
                break

            if points_close(path_end, path_start, tolerance):
                closed = True
                break
            if not found:
                break

        if closed and len(path) >= 3:
            loop = order_segments_into_polygon(path, tolerance)
            if len(loop) >= 3:
                shapes.append(loop)
                continue

        logger.warning("Discarding open edge group %s (not closed or fewer than 3 edges)",
                       path_indices)
        used.difference_update(path_indices)

    return shapes


def _same_loop(a: Sequence[Point], b: Sequence[Point], tolerance: float) -> bool:
    if len(a) != len(b):
        return False
    return all(any(points_close(p, q, tolerance) for q in b) for p in a)


def detect_polygons(edges: Sequence[Edge],
                    existing: Sequence[FloorPolygon] = (),
                    grid_size: float = 100.0,
                    include_coving: bool = False,
                    tolerance: float = ENDPOINT_TOLERANCE_PX) -> List[FloorPolygon]:
    """
    Find closed wall loops not already known

    Returns: new polygons (area in m²), possibly empty
    """
    walls = [e for e in edges if e.type == EdgeType.WALL]
    if len(walls) < 3:
        logger.debug("Not enough walls to form a polygon (%d)", len(walls))
        return []

    found: List[FloorPolygon] = []
    for loop in group_disjoint_edges_into_loops(walls, tolerance):
        points = expand_for_coving(loop, walls, grid_size) if include_coving else loop
        known = list(existing) + found
        if any(_same_loop(loop, p.points, tolerance) or _same_loop(points, p.points, tolerance)
               for p in known):
            continue
        area_m2 = polygon_area(points) / (grid_size * grid_size)
        found.append(FloorPolygon(id=str(uuid.uuid4()), points=points, area=area_m2))
        logger.info("Detected polygon with %d points, %.2f m²", len(points), area_m2)

    return found


def recompute_area(polygon: FloorPolygon, grid_size: float) -> FloorPolygon:
    """Copy of the polygon with area re-derived from its points"""
    return polygon.model_copy(update={"area": polygon_area(polygon.points) / (grid_size * grid_size)})
