"""
Vinyl strip planner

Sweeps roll-width bands across each polygon's bounding box, clips the
polygon to every band and turns the surviving pieces into numbered
strips. Aggregates material, floor area, waste and efficiency per cut
direction.
"""

import logging
import math
from typing import Dict, List, Sequence

from shapely.geometry import Polygon as ShapelyPolygon

from .assembly import group_disjoint_edges_into_loops
from .clipping import clip_and_subtract_voids
from .coving import coving_length, expand_for_coving, shrink_void_for_coving
from .geometry import Bounds, Rect, polygon_bounds, polygon_perimeter
from .models import (
    Direction,
    Edge,
    EdgeType,
    FloorMeasurements,
    FloorPolygon,
    LayoutConfig,
    Point,
    PolygonLayout,
    Strip,
    VinylLayout,
    VoidMode,
)

logger = logging.getLogger(__name__)

# Pieces at or below this area (m²) are clipping slivers
MIN_STRIP_AREA_M2 = 0.001


def build_void_polygons(edges: Sequence[Edge], grid_size: float) -> List[List[Point]]:
    """Closed void loops from voidEdge segments, shrunk for coving"""
    void_edges = [e for e in edges if e.type == EdgeType.VOID_EDGE]
    if not void_edges:
        return []
    return [
        shrink_void_for_coving(loop, void_edges, grid_size)
        for loop in group_disjoint_edges_into_loops(void_edges)
    ]


def _band_rects(bounds: Bounds, band_px: float, direction: Direction) -> List[Rect]:
    if direction == Direction.HORIZONTAL:
        start, stop = bounds.min_y, bounds.max_y
    else:
        start, stop = bounds.min_x, bounds.max_x

    extent = stop - start
    if extent <= 0:
        return []

    rects = []
    for i in range(math.ceil(extent / band_px)):
        pos = start + i * band_px
        size = min(band_px, stop - pos)
        if direction == Direction.HORIZONTAL:
            rects.append(Rect(bounds.min_x, pos, bounds.width, size))
        else:
            rects.append(Rect(pos, bounds.min_y, size, bounds.height))
    return rects


def _check_simple(points: Sequence[Point]) -> None:
    if len(points) >= 3 and not ShapelyPolygon(points).is_valid:
        logger.warning("Polygon is self-intersecting; strip shapes may be wrong")


def plan_strips(polygon_points: Sequence[Point], bounds: Bounds, roll_width_m: float,
                direction: Direction, grid_size: float, void_edges: Sequence[Edge] = (),
                void_mode: VoidMode = VoidMode.CENTROID) -> List[Strip]:
    """
    Cut one polygon into roll-width strips

    Strip area is the clipped piece's bounding box, not its true area.
    Sheet numbers start at 1 for every call.
    """
    band_px = roll_width_m * grid_size
    if band_px <= 0:
        logger.warning("Roll width must be positive, got %s m", roll_width_m)
        return []

    _check_simple(polygon_points)
    voids = build_void_polygons(void_edges, grid_size)

    strips: List[Strip] = []
    sheet_number = 1
    for rect in _band_rects(bounds, band_px, direction):
        for piece in clip_and_subtract_voids(polygon_points, rect, voids, void_mode):
            piece_bounds = polygon_bounds(piece)
            area_m2 = (piece_bounds.width / grid_size) * (piece_bounds.height / grid_size)
            if area_m2 <= MIN_STRIP_AREA_M2:
                continue
            strips.append(Strip(
                x=piece_bounds.min_x,
                y=piece_bounds.min_y,
                width=piece_bounds.width,
                height=piece_bounds.height,
                area=area_m2,
                direction=direction,
                original_polygon_points=piece,
                sheet_number=sheet_number,
            ))
            sheet_number += 1

    logger.debug("Planned %d %s strips", len(strips), direction.value)
    return strips


def calculate_vinyl(polygons: Sequence[FloorPolygon], all_edges: Sequence[Edge],
                    roll_width_m: float, direction: Direction, grid_size: float,
                    void_mode: VoidMode = VoidMode.CENTROID,
                    include_coving: bool = False) -> VinylLayout:
    """
    Plan strips for every polygon in one direction

    Returns: layout with material, floor area, waste and efficiency (%)
    """
    direction = Direction(direction)
    walls = [e for e in all_edges if e.type == EdgeType.WALL]

    layouts: List[PolygonLayout] = []
    for index, polygon in enumerate(polygons):
        points = polygon.points
        if include_coving:
            points = expand_for_coving(points, walls, grid_size)
        strips = plan_strips(points, polygon_bounds(points), roll_width_m, direction,
                             grid_size, all_edges, void_mode)
        layouts.append(PolygonLayout(
            polygon_index=index,
            polygon_id=polygon.id,
            strips=strips,
            total_material_area=sum(s.area for s in strips),
        ))

    total_floor = sum(p.area for p in polygons)
    total_material = sum(pl.total_material_area for pl in layouts)

    return VinylLayout(
        direction=direction,
        polygon_layouts=layouts,
        total_material_area=total_material,
        total_floor_area=total_floor,
        waste=total_material - total_floor,
        efficiency=(total_floor / total_material) * 100 if total_material > 0 else 0.0,
    )


def calculate_layouts(polygons: Sequence[FloorPolygon], all_edges: Sequence[Edge],
                      config: LayoutConfig) -> Dict[Direction, VinylLayout]:
    """Both cut directions for the same floor"""
    return {
        direction: calculate_vinyl(polygons, all_edges, config.roll_width_m, direction,
                                   config.grid_size, config.void_mode, config.include_coving)
        for direction in (Direction.HORIZONTAL, Direction.VERTICAL)
    }


def floor_measurements(polygons: Sequence[FloorPolygon], edges: Sequence[Edge],
                       grid_size: float) -> FloorMeasurements:
    return FloorMeasurements(
        total_area=sum(p.area for p in polygons),
        perimeter=sum(polygon_perimeter(p.points, grid_size) for p in polygons),
        wall_count=sum(1 for e in edges if e.type == EdgeType.WALL),
        polygon_count=len(polygons),
        coving_length=coving_length(edges, grid_size),
    )
