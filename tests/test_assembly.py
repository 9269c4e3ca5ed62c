# File: tests/test_assembly.py
"""Tests for turning drawn segments into closed loops."""

import pytest

from floorcut.assembly import (
    detect_polygons,
    group_disjoint_edges_into_loops,
    order_segments_into_polygon,
    recompute_area,
)
from floorcut.geometry import polygon_area
from floorcut.models import EdgeType, FloorPolygon


def _square(make_edge, x0, y0, size, type=EdgeType.VOID_EDGE):
    x1, y1 = x0 + size, y0 + size
    return [
        make_edge(x0, y0, x1, y0, type=type),
        make_edge(x1, y0, x1, y1, type=type),
        make_edge(x1, y1, x0, y1, type=type),
        make_edge(x0, y1, x0, y0, type=type),
    ]


class TestOrderSegments:
    def test_shuffled_and_reversed_square_closes(self, make_edge):
        segments = [
            make_edge(100, 0, 100, 100),
            make_edge(0, 0, 100, 0),
            make_edge(0, 100, 100, 100),
            make_edge(0, 100, 0, 0),
        ]
        loop = order_segments_into_polygon(segments)
        assert len(loop) == 4
        assert sorted(loop) == [(0, 0), (0, 100), (100, 0), (100, 100)]
        assert polygon_area(loop) == pytest.approx(10000.0)

    def test_open_chain_returns_empty(self, make_edge):
        segments = [
            make_edge(0, 0, 100, 0),
            make_edge(100, 0, 100, 100),
            make_edge(100, 100, 0, 100),
        ]
        assert order_segments_into_polygon(segments) == []

    def test_endpoints_within_tolerance_connect(self, make_edge):
        segments = [
            make_edge(0, 0, 100, 0),
            make_edge(103, 2, 100, 100),
            make_edge(100, 100, 0, 100),
            make_edge(0, 100, 2, 3),
        ]
        assert len(order_segments_into_polygon(segments)) == 4

    def test_endpoints_beyond_tolerance_do_not_connect(self, make_edge):
        segments = [
            make_edge(0, 0, 100, 0),
            make_edge(110, 0, 100, 100),
            make_edge(100, 100, 0, 100),
            make_edge(0, 100, 0, 0),
        ]
        assert order_segments_into_polygon(segments) == []

    def test_empty_input(self):
        assert order_segments_into_polygon([]) == []

    def test_two_segments_are_not_a_polygon(self, make_edge):
        segments = [make_edge(0, 0, 100, 0), make_edge(100, 0, 0, 0)]
        assert order_segments_into_polygon(segments) == []


class TestGroupLoops:
    def test_two_disjoint_squares(self, make_edge):
        edges = _square(make_edge, 0, 0, 100) + _square(make_edge, 200, 200, 50)
        loops = group_disjoint_edges_into_loops(edges)
        assert len(loops) == 2
        assert sorted(polygon_area(loop) for loop in loops) == pytest.approx([2500.0, 10000.0])

    def test_reversed_edge_is_followed(self, make_edge):
        edges = [
            make_edge(0, 0, 100, 0),
            make_edge(100, 100, 100, 0),
            make_edge(100, 100, 0, 100),
            make_edge(0, 100, 0, 0),
        ]
        loops = group_disjoint_edges_into_loops(edges)
        assert len(loops) == 1
        assert len(loops[0]) == 4

    def test_open_chain_is_discarded(self, make_edge, caplog):
        open_chain = [make_edge(500, 500, 600, 500), make_edge(600, 500, 600, 600)]
        loops = group_disjoint_edges_into_loops(open_chain + _square(make_edge, 0, 0, 100))
        assert len(loops) == 1
        assert "Discarding open edge group" in caplog.text

    def test_no_edges(self):
        assert group_disjoint_edges_into_loops([]) == []


class TestDetectPolygons:
    def test_rectangle_room(self, rectangle_walls):
        found = detect_polygons(rectangle_walls, grid_size=100)
        assert len(found) == 1
        assert found[0].area == pytest.approx(12.0)
        assert len(found[0].points) == 4

    def test_known_polygon_not_added_again(self, rectangle_walls):
        first = detect_polygons(rectangle_walls, grid_size=100)
        assert detect_polygons(rectangle_walls, existing=first, grid_size=100) == []

    def test_needs_three_walls(self, make_edge):
        walls = [make_edge(0, 0, 100, 0), make_edge(100, 0, 100, 100)]
        assert detect_polygons(walls) == []

    def test_doors_and_windows_ignored(self, rectangle_walls, make_edge):
        edges = rectangle_walls + [
            make_edge(50, 0, 150, 0, type=EdgeType.DOOR),
            make_edge(400, 50, 400, 150, type=EdgeType.WINDOW),
        ]
        assert len(detect_polygons(edges, grid_size=100)) == 1

    def test_coving_expands_detected_polygon(self, make_edge):
        walls = [
            make_edge(0, 0, 400, 0, coving=True, coving_amount=0.15),
            make_edge(400, 0, 400, 300),
            make_edge(400, 300, 0, 300),
            make_edge(0, 300, 0, 0),
        ]
        plain = detect_polygons(walls, grid_size=100)
        coved = detect_polygons(walls, grid_size=100, include_coving=True)
        assert coved[0].area > plain[0].area

    def test_recompute_area(self, square_points):
        stale = FloorPolygon(points=square_points, area=99.0)
        fresh = recompute_area(stale, 100)
        assert fresh.area == pytest.approx(1.0)
        assert stale.area == 99.0
