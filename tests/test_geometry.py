# File: tests/test_geometry.py
"""Unit tests for the geometry primitives."""

import math

import pytest

from floorcut.geometry import (
    Bounds,
    angle,
    distance,
    outward_normal,
    point_in_polygon,
    point_to_segment_distance,
    points_close,
    polygon_area,
    polygon_bounds,
    polygon_centroid,
    polygon_perimeter,
    segment_intersection,
    signed_area,
    snap_to_grid,
)


class TestAreaAndPerimeter:
    """Shoelace area and perimeter."""

    def test_unit_square(self, square_points):
        assert polygon_area(square_points) == pytest.approx(10000.0)
        assert polygon_area(square_points) / (100 * 100) == pytest.approx(1.0)
        assert polygon_perimeter(square_points, 100) == pytest.approx(4.0)

    def test_orientation_invariance(self, rectangle_points):
        reversed_points = list(reversed(rectangle_points))
        assert polygon_area(reversed_points) == pytest.approx(polygon_area(rectangle_points))
        assert signed_area(reversed_points) == pytest.approx(-signed_area(rectangle_points))

    def test_degenerate_inputs(self):
        assert polygon_area([(0, 0), (10, 0)]) == 0.0
        assert polygon_perimeter([], 100) == 0.0
        assert polygon_perimeter([(0, 0)], 100) == 0.0


class TestDistances:
    def test_distance_in_metres(self):
        assert distance((0, 0), (300, 400), 100) == pytest.approx(5.0)

    def test_point_to_segment_projection(self):
        assert point_to_segment_distance((50, 50), (0, 0), (100, 0), 100) == pytest.approx(0.5)

    def test_point_beyond_segment_end_measures_to_endpoint(self):
        assert point_to_segment_distance((200, 0), (0, 0), (100, 0), 100) == pytest.approx(1.0)

    def test_zero_length_segment(self):
        assert point_to_segment_distance((30, 40), (0, 0), (0, 0), 100) == pytest.approx(0.5)


class TestAngle:
    def test_cardinal_directions(self):
        assert angle((0, 0), (10, 0)) == pytest.approx(0.0)
        assert angle((0, 0), (0, 10)) == pytest.approx(90.0)
        assert angle((0, 0), (-10, 0)) == pytest.approx(180.0)

    def test_nan_returns_zero(self, caplog):
        assert angle((math.nan, 0), (10, 0)) == 0.0
        assert "Invalid coordinates" in caplog.text


class TestPointInPolygon:
    def test_inside_and_outside(self, square_points):
        assert point_in_polygon(50, 50, square_points)
        assert not point_in_polygon(150, 50, square_points)

    def test_outside_bounding_box_never_inside(self, rectangle_points):
        concave = [(0, 0), (400, 0), (400, 100), (100, 100), (100, 300), (0, 300)]
        for poly in (rectangle_points, concave):
            for x, y in [(-1, 10), (401, 10), (10, -1), (10, 301), (1000, 1000)]:
                assert not point_in_polygon(x, y, poly)

    def test_concave_notch_is_outside(self):
        concave = [(0, 0), (400, 0), (400, 100), (100, 100), (100, 300), (0, 300)]
        assert not point_in_polygon(300, 200, concave)
        assert point_in_polygon(50, 200, concave)

    def test_requires_three_points(self):
        assert not point_in_polygon(0, 0, [(0, 0), (10, 10)])


class TestBoundsAndCentroid:
    def test_bounds(self, rectangle_points):
        assert polygon_bounds(rectangle_points) == Bounds(0, 0, 400, 300, 400, 300)

    def test_empty_bounds(self):
        assert polygon_bounds([]) == Bounds(0.0, 0.0, 0.0, 0.0, 0.0, 0.0)

    def test_centroid_is_vertex_average(self, square_points):
        assert polygon_centroid(square_points) == pytest.approx((50.0, 50.0))

    def test_centroid_not_area_weighted(self):
        # Extra vertices along one side pull the average toward that side
        points = [(0, 0), (50, 0), (100, 0), (100, 100), (0, 100)]
        cx, cy = polygon_centroid(points)
        assert cy < 50


class TestSegmentIntersection:
    def test_crossing_segments(self):
        assert segment_intersection((0, 0), (100, 100), (0, 100), (100, 0)) == pytest.approx((50, 50))

    def test_parallel_returns_none(self):
        assert segment_intersection((0, 0), (100, 0), (0, 10), (100, 10)) is None

    def test_lines_cross_outside_segments(self):
        assert segment_intersection((0, 0), (10, 10), (100, 0), (90, 10)) is None


class TestHelpers:
    def test_snap_to_grid(self):
        assert snap_to_grid((149, 51), 100) == (100, 100)
        assert snap_to_grid((149, 51), 100, enabled=False) == (149, 51)

    def test_points_close_uses_square_window(self):
        assert points_close((0, 0), (4, 4), 5)
        assert not points_close((0, 0), (6, 0), 5)

    def test_outward_normal_follows_winding(self, square_points):
        orientation = signed_area(square_points)
        assert outward_normal((0, 0), (100, 0), orientation) == pytest.approx((0.0, -1.0))
        assert outward_normal((100, 0), (0, 0), -orientation) == pytest.approx((0.0, -1.0))

    def test_outward_normal_zero_length(self):
        assert outward_normal((5, 5), (5, 5), 1.0) == (0.0, 0.0)
