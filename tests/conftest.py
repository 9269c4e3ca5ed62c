# tests/conftest.py
import pytest

from floorcut.models import Edge, EdgeType, FloorPolygon, Piece


def _edge(x1, y1, x2, y2, type=EdgeType.WALL, coving=False, coving_amount=0.0, id=None):
    kwargs = dict(start_x=x1, start_y=y1, end_x=x2, end_y=y2, type=type,
                  coving=coving, coving_amount=coving_amount)
    if id is not None:
        kwargs["id"] = id
    return Edge(**kwargs)


@pytest.fixture
def make_edge():
    """Factory for edges from raw pixel coordinates"""
    return _edge


@pytest.fixture
def make_piece():
    """Factory for pieces given their size on the roll"""
    def _piece(name, length_m, width_m):
        return Piece(id=name, name=name, length_m=length_m, width_m=width_m,
                     area=length_m * width_m)
    return _piece


@pytest.fixture
def square_points():
    """1 m x 1 m square at gridSize 100"""
    return [(0.0, 0.0), (100.0, 0.0), (100.0, 100.0), (0.0, 100.0)]


@pytest.fixture
def rectangle_points():
    """4 m x 3 m room at gridSize 100"""
    return [(0.0, 0.0), (400.0, 0.0), (400.0, 300.0), (0.0, 300.0)]


@pytest.fixture
def rectangle_walls():
    """Four walls around the 4 m x 3 m room"""
    return [
        _edge(0, 0, 400, 0, id="top"),
        _edge(400, 0, 400, 300, id="right"),
        _edge(400, 300, 0, 300, id="bottom"),
        _edge(0, 300, 0, 0, id="left"),
    ]


@pytest.fixture
def rectangle_polygon(rectangle_points):
    return FloorPolygon(id="room-1", points=rectangle_points, area=12.0)
