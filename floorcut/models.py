"""
Data models for the floor layout engine

Pydantic models for the drawn edges, detected polygons, vinyl strips and
roll placements, plus the request/response bodies of the API. Field
names are snake_case in Python and camelCase on the wire.
"""

import uuid
from enum import Enum
from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .config import Config

Point = Tuple[float, float]


class EdgeType(str, Enum):
    WALL = "wall"
    DOOR = "door"
    WINDOW = "window"
    VOID_EDGE = "voidEdge"


class Direction(str, Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


class VoidMode(str, Enum):
    """How voids are removed from band pieces"""
    CENTROID = "centroid"
    EXACT = "exact"


def coerce_points(value: Any) -> Any:
    """Accept points as (x, y) pairs or {"x": .., "y": ..} objects"""
    if not isinstance(value, list):
        return value
    return [(p["x"], p["y"]) if isinstance(p, dict) else p for p in value]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Edge(CamelModel):
    """A user-drawn segment: wall, door, window or void boundary"""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    start_x: float
    start_y: float
    end_x: float
    end_y: float
    type: EdgeType = EdgeType.WALL
    coving: bool = False
    coving_amount: float = Field(0.0, ge=0, description="Coving depth in metres")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "edge-1",
                "startX": 0,
                "startY": 0,
                "endX": 400,
                "endY": 0,
                "type": "wall",
                "coving": True,
                "covingAmount": 0.15
            }
        }
    )

    @property
    def start(self) -> Point:
        return (self.start_x, self.start_y)

    @property
    def end(self) -> Point:
        return (self.end_x, self.end_y)

    def reversed(self) -> "Edge":
        """Same edge traversed end -> start"""
        return self.model_copy(update={
            "start_x": self.end_x,
            "start_y": self.end_y,
            "end_x": self.start_x,
            "end_y": self.start_y,
        })


class FloorPolygon(CamelModel):
    """A closed wall loop; area is in square metres"""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    points: List[Point] = Field(min_length=3)
    area: float = Field(ge=0)

    @field_validator("points", mode="before")
    @classmethod
    def accept_xy_objects(cls, value):
        return coerce_points(value)


class Strip(CamelModel):
    """One cuttable band piece; bounding box in pixels, area in m²"""
    x: float
    y: float
    width: float
    height: float
    area: float
    direction: Direction
    original_polygon_points: List[Point]
    sheet_number: int = Field(ge=1)

    @field_validator("original_polygon_points", mode="before")
    @classmethod
    def accept_xy_objects(cls, value):
        return coerce_points(value)


class PolygonLayout(CamelModel):
    polygon_index: int
    polygon_id: str
    strips: List[Strip] = Field(default_factory=list)
    total_material_area: float = 0.0


class VinylLayout(CamelModel):
    """Strip plan for all polygons in one direction"""
    direction: Direction
    polygon_layouts: List[PolygonLayout] = Field(default_factory=list)
    total_material_area: float = 0.0
    total_floor_area: float = 0.0
    waste: float = 0.0
    efficiency: float = 0.0

    @property
    def piece_count(self) -> int:
        return sum(len(pl.strips) for pl in self.polygon_layouts)


class Piece(CamelModel):
    """A strip expressed in roll coordinates (metres)"""
    id: str
    name: str
    length_m: float = Field(ge=0, description="Extent along the roll")
    width_m: float = Field(ge=0, description="Extent across the roll")
    area: float = 0.0
    original_polygon_points: List[Point] = Field(default_factory=list)

    @field_validator("original_polygon_points", mode="before")
    @classmethod
    def accept_xy_objects(cls, value):
        return coerce_points(value)


class PlacedPiece(Piece):
    offset_x_on_roll_m: float = Field(0.0, alias="offsetX_onRollM")
    offset_y_on_roll_m: float = Field(0.0, alias="offsetY_onRollM")
    roll_number: int = Field(1, ge=1)


class Roll(CamelModel):
    roll_number: int = Field(ge=1)
    pieces: List[PlacedPiece] = Field(default_factory=list)
    length_used_m: float = 0.0


class FloorMeasurements(CamelModel):
    total_area: float = 0.0
    perimeter: float = 0.0
    wall_count: int = 0
    polygon_count: int = 0
    coving_length: float = 0.0


class LayoutConfig(CamelModel):
    """Configuration for vinyl planning and roll packing"""
    grid_size: float = Field(default_factory=lambda: Config.GRID_SIZE, gt=0,
                             description="Pixels per metre")
    roll_width_m: float = Field(default_factory=lambda: Config.ROLL_WIDTH_M, gt=0)
    roll_length_m: float = Field(default_factory=lambda: Config.ROLL_LENGTH_M, gt=0)
    void_mode: VoidMode = VoidMode.CENTROID
    include_coving: bool = False
    strict_capacity: bool = False

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "gridSize": 100,
                "rollWidthM": 2.0,
                "rollLengthM": 25.0,
                "voidMode": "centroid",
                "includeCoving": False,
                "strictCapacity": False
            }
        }
    )


class ProjectSnapshot(CamelModel):
    """Flat save/load format"""
    edges: List[Edge] = Field(default_factory=list)
    polygons: List[FloorPolygon] = Field(default_factory=list)
    grid_size: float = Field(100.0, gt=0)
    vinyl_width: float = Field(2.0, gt=0)
    timestamp: Optional[str] = None


# ============================================================================
# API BODIES
# ============================================================================

class VinylRequest(CamelModel):
    """Request body for layout planning"""
    polygons: List[FloorPolygon]
    edges: List[Edge] = Field(default_factory=list)
    config: LayoutConfig = Field(default_factory=LayoutConfig)
    direction: Direction = Direction.HORIZONTAL


class EdgeLengthUpdate(CamelModel):
    length_m: float


class EdgeRotation(CamelModel):
    angle_deg: float


class CovingToggle(CamelModel):
    """Coving depth as typed by the user, in millimetres"""
    amount_mm: float = 0.0


class PolygonPointsUpdate(CamelModel):
    points: List[Point] = Field(min_length=3)

    @field_validator("points", mode="before")
    @classmethod
    def accept_xy_objects(cls, value):
        return coerce_points(value)


class BothLayouts(CamelModel):
    horizontal: VinylLayout
    vertical: VinylLayout


class RollLayoutResult(CamelModel):
    """Response for roll packing"""
    success: bool = True
    direction: Direction
    layout: VinylLayout
    rolls: List[Roll]
    num_rolls: int
    total_length_m: float
    message: Optional[str] = None


class DetectResult(CamelModel):
    added: List[FloorPolygon]
    polygons: List[FloorPolygon]


class ErrorResponse(BaseModel):
    """Error response format"""
    success: bool = False
    error: str
    detail: Optional[str] = None
