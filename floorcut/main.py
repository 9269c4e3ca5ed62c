"""
FastAPI Backend for the floor layout engine

REST API for drawn edges, polygon detection, vinyl strip layouts, roll
packing and cut lists. The drawing UI owns rendering and calls these
endpoints with plain data.
Run with: uvicorn floorcut.main:app --reload
"""

import json
import uuid
from typing import List, Optional, Union

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from .assembly import detect_polygons, recompute_area
from .config import Config
from .editing import find_edge_at, find_polygon_at, rotate_edge, set_edge_length, toggle_coving
from .errors import FloorCutError, InvalidInputError, PieceTooLargeError, ProjectFormatError
from .geometry import snap_to_grid
from .logging_config import setup_logging
from .models import (
    BothLayouts,
    CovingToggle,
    DetectResult,
    Direction,
    Edge,
    EdgeLengthUpdate,
    EdgeRotation,
    ErrorResponse,
    FloorMeasurements,
    FloorPolygon,
    LayoutConfig,
    PolygonPointsUpdate,
    ProjectSnapshot,
    RollLayoutResult,
    VinylRequest,
)
from .packing import pack_pieces_onto_rolls, pieces_from_layout, roll_totals
from .planner import calculate_layouts, calculate_vinyl, floor_measurements
from .project import export_project, import_project
from .report import generate_cut_list

logger = setup_logging(Config.log_level(), Config.LOG_FILE)
Config.validate()

# Initialize FastAPI app
app = FastAPI(
    title="Floor Layout API",
    description="REST API for floor polygons, vinyl strip layouts and roll packing",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Configure CORS for the drawing UI
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# In-memory drawing state
edges_database: List[Edge] = []
polygons_database: List[FloorPolygon] = []
projects_database: dict = {}
current_config = LayoutConfig()


@app.get("/", tags=["Root"])
async def root():
    """API root endpoint"""
    return {
        "message": "Floor Layout API v1.0",
        "docs": "/docs",
        "health": "/health"
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "edges_count": len(edges_database),
        "polygons_count": len(polygons_database),
        "projects_count": len(projects_database)
    }


# ============================================================================
# CONFIG ENDPOINTS
# ============================================================================

@app.get("/api/config", response_model=LayoutConfig, tags=["Config"])
async def get_config():
    return current_config


@app.put("/api/config", response_model=LayoutConfig, tags=["Config"])
async def update_config(config: LayoutConfig):
    """Replace grid size, roll stock and planning options"""
    global current_config
    current_config = config
    return current_config


# ============================================================================
# EDGE ENDPOINTS
# ============================================================================

@app.post("/api/edges", response_model=Edge, tags=["Edges"], status_code=status.HTTP_201_CREATED)
async def create_edge(edge: Edge, snap: bool = False):
    """
    Add a drawn edge

    - **startX/startY/endX/endY**: endpoints in pixels
    - **type**: wall, door, window or voidEdge
    - **coving/covingAmount**: coving flag and depth in metres
    - **snap**: round both endpoints to the grid first
    """
    if any(e.id == edge.id for e in edges_database):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Edge with ID '{edge.id}' already exists"
        )

    if snap:
        start_x, start_y = snap_to_grid(edge.start, current_config.grid_size)
        end_x, end_y = snap_to_grid(edge.end, current_config.grid_size)
        edge = edge.model_copy(update={
            "start_x": start_x, "start_y": start_y, "end_x": end_x, "end_y": end_y,
        })

    edges_database.append(edge)
    return edge


@app.get("/api/edges", response_model=List[Edge], tags=["Edges"])
async def get_edges():
    """Get all edges"""
    return edges_database


@app.get("/api/edges/at", response_model=Edge, tags=["Edges"])
async def edge_at(x: float, y: float):
    """Topmost edge near a canvas point (for selection)"""
    edge = find_edge_at(x, y, edges_database, current_config.grid_size)
    if edge is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No edge near ({x}, {y})"
        )
    return edge


def _edge_index(edge_id: str) -> int:
    for i, e in enumerate(edges_database):
        if e.id == edge_id:
            return i
    raise HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Edge '{edge_id}' not found"
    )


@app.get("/api/edges/{edge_id}", response_model=Edge, tags=["Edges"])
async def get_edge(edge_id: str):
    """Get a specific edge by ID"""
    return edges_database[_edge_index(edge_id)]


@app.put("/api/edges/{edge_id}/length", response_model=Edge, tags=["Edges"])
async def resize_edge(edge_id: str, body: EdgeLengthUpdate):
    """Set an edge's length in metres, keeping its start point and direction"""
    i = _edge_index(edge_id)
    edges_database[i] = set_edge_length(edges_database[i], body.length_m, current_config.grid_size)
    return edges_database[i]


@app.put("/api/edges/{edge_id}/rotate", response_model=Edge, tags=["Edges"])
async def rotate(edge_id: str, body: EdgeRotation):
    """Rotate a door or window about its start point"""
    i = _edge_index(edge_id)
    edges_database[i] = rotate_edge(edges_database[i], body.angle_deg)
    return edges_database[i]


@app.put("/api/edges/{edge_id}/coving", response_model=Edge, tags=["Edges"])
async def coving(edge_id: str, body: CovingToggle):
    """Toggle coving on a wall or void edge"""
    i = _edge_index(edge_id)
    edges_database[i] = toggle_coving(edges_database[i], body.amount_mm)
    return edges_database[i]


@app.put("/api/edges/{edge_id}", response_model=Edge, tags=["Edges"])
async def update_edge(edge_id: str, updated_edge: Edge):
    """Update an existing edge"""
    for i, e in enumerate(edges_database):
        if e.id == edge_id:
            edges_database[i] = updated_edge.model_copy(update={"id": edge_id})
            return edges_database[i]

    raise HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Edge '{edge_id}' not found"
    )


@app.delete("/api/edges/{edge_id}", tags=["Edges"])
async def delete_edge(edge_id: str):
    """Delete an edge"""
    global edges_database
    initial_length = len(edges_database)
    edges_database = [e for e in edges_database if e.id != edge_id]

    if len(edges_database) == initial_length:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Edge '{edge_id}' not found"
        )

    return {"message": f"Edge '{edge_id}' deleted successfully"}


@app.delete("/api/edges", tags=["Edges"])
async def clear_all():
    """Clear all edges and polygons"""
    global edges_database, polygons_database
    count = len(edges_database)
    edges_database = []
    polygons_database = []
    return {"message": f"Cleared {count} edges"}


# ============================================================================
# POLYGON ENDPOINTS
# ============================================================================

@app.post("/api/polygons/detect", response_model=DetectResult, tags=["Polygons"])
async def detect(include_coving: Optional[bool] = None):
    """
    Look for closed wall loops

    New loops are added to the stored polygons. An empty `added` list is
    the normal answer while walls are still open. include_coving defaults
    to the stored config.
    """
    if include_coving is None:
        include_coving = current_config.include_coving
    added = detect_polygons(edges_database, polygons_database, current_config.grid_size,
                            include_coving=include_coving)
    polygons_database.extend(added)
    return DetectResult(added=added, polygons=polygons_database)


@app.get("/api/polygons", response_model=List[FloorPolygon], tags=["Polygons"])
async def get_polygons():
    return polygons_database


@app.get("/api/polygons/at", response_model=FloorPolygon, tags=["Polygons"])
async def polygon_at(x: float, y: float):
    polygon = find_polygon_at(x, y, polygons_database)
    if polygon is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No polygon at ({x}, {y})"
        )
    return polygon


@app.put("/api/polygons/{polygon_id}", response_model=FloorPolygon, tags=["Polygons"])
async def update_polygon(polygon_id: str, body: PolygonPointsUpdate):
    """Move a polygon's points; the area is re-derived from them"""
    for i, p in enumerate(polygons_database):
        if p.id == polygon_id:
            moved = p.model_copy(update={"points": body.points})
            polygons_database[i] = recompute_area(moved, current_config.grid_size)
            return polygons_database[i]

    raise HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Polygon '{polygon_id}' not found"
    )


@app.delete("/api/polygons/{polygon_id}", tags=["Polygons"])
async def delete_polygon(polygon_id: str):
    global polygons_database
    initial_length = len(polygons_database)
    polygons_database = [p for p in polygons_database if p.id != polygon_id]

    if len(polygons_database) == initial_length:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Polygon '{polygon_id}' not found"
        )

    return {"message": f"Polygon '{polygon_id}' deleted successfully"}


@app.get("/api/measurements", response_model=FloorMeasurements, tags=["Polygons"])
async def measurements():
    """Area, perimeter, counts and coving length of the stored drawing"""
    return floor_measurements(polygons_database, edges_database, current_config.grid_size)


# ============================================================================
# VINYL ENDPOINTS
# ============================================================================

@app.post("/api/vinyl", tags=["Vinyl"])
async def plan_vinyl(request: VinylRequest):
    """
    Plan vinyl strips for the given polygons in one direction

    Returns the layout with material, waste and efficiency statistics.
    """
    if not request.polygons:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No polygons provided for planning"
        )

    cfg = request.config
    layout = calculate_vinyl(request.polygons, request.edges, cfg.roll_width_m, request.direction,
                             cfg.grid_size, cfg.void_mode, cfg.include_coving)
    return layout.model_dump(mode="json", by_alias=True)


@app.post("/api/vinyl/current", response_model=BothLayouts, tags=["Vinyl"])
async def plan_current():
    """Plan both directions for the stored drawing"""
    if not polygons_database:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No polygons detected yet"
        )

    layouts = calculate_layouts(polygons_database, edges_database, current_config)
    return BothLayouts(horizontal=layouts[Direction.HORIZONTAL], vertical=layouts[Direction.VERTICAL])


def _pack(request: VinylRequest):
    cfg = request.config
    layout = calculate_vinyl(request.polygons, request.edges, cfg.roll_width_m, request.direction,
                             cfg.grid_size, cfg.void_mode, cfg.include_coving)
    pieces = pieces_from_layout(layout, request.polygons, cfg.grid_size)
    rolls = pack_pieces_onto_rolls(pieces, cfg.roll_length_m, cfg.roll_width_m,
                                   strict=cfg.strict_capacity)
    return layout, pieces, rolls


@app.post("/api/rolls", response_model=RollLayoutResult, tags=["Vinyl"])
async def pack_rolls(request: VinylRequest):
    """
    Plan strips and pack them onto rolls

    Pieces that do not fit the roll are placed anyway and logged, unless
    strictCapacity is set (then the request fails with 422).
    """
    layout, pieces, rolls = _pack(request)
    total_length, _ = roll_totals(rolls, request.config.roll_length_m)
    return RollLayoutResult(
        success=True,
        direction=request.direction,
        layout=layout,
        rolls=rolls,
        num_rolls=len(rolls),
        total_length_m=total_length,
        message=f"Packed {len(pieces)} pieces onto {len(rolls)} roll(s)"
    )


@app.post("/api/cut-list", response_class=PlainTextResponse, tags=["Vinyl"])
async def cut_list(request: VinylRequest):
    """Text cut list for one direction"""
    layout, _, rolls = _pack(request)
    return generate_cut_list(layout, rolls, request.config.roll_width_m,
                             request.config.roll_length_m)


# ============================================================================
# PROJECT ENDPOINTS
# ============================================================================

def _current_snapshot() -> ProjectSnapshot:
    return ProjectSnapshot(
        edges=edges_database,
        polygons=polygons_database,
        grid_size=current_config.grid_size,
        vinyl_width=current_config.roll_width_m,
    )


@app.post("/api/projects", tags=["Projects"])
async def save_project(name: str):
    """Save the current drawing as a project"""
    project_id = str(uuid.uuid4())
    projects_database[project_id] = {
        "id": project_id,
        "name": name,
        "data": export_project(_current_snapshot())
    }
    return {"id": project_id, "message": f"Project '{name}' saved"}


@app.get("/api/projects", tags=["Projects"])
async def list_projects():
    """List all saved projects"""
    return [{"id": p["id"], "name": p["name"]} for p in projects_database.values()]


def _stored_project(project_id: str) -> dict:
    if project_id not in projects_database:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Project '{project_id}' not found"
        )
    return projects_database[project_id]


@app.get("/api/projects/{project_id}", tags=["Projects"])
async def get_project(project_id: str):
    """Get a saved project without touching the current drawing"""
    project = _stored_project(project_id)
    return {"id": project["id"], "name": project["name"], "data": json.loads(project["data"])}


@app.post("/api/projects/{project_id}/load", tags=["Projects"])
async def load_project(project_id: str):
    """Restore a saved project into the current drawing"""
    snapshot = _restore(_stored_project(project_id)["data"])
    return snapshot.model_dump(mode="json", by_alias=True)


@app.post("/api/projects/import", tags=["Projects"])
async def import_project_file(request: Request):
    """Load a project JSON document (the body) into the current drawing"""
    snapshot = _restore(await request.body())
    return {"message": f"Loaded {len(snapshot.edges)} edges and {len(snapshot.polygons)} polygons"}


def _restore(json_data: Union[str, bytes]) -> ProjectSnapshot:
    global edges_database, polygons_database, current_config
    snapshot = import_project(json_data)
    edges_database = list(snapshot.edges)
    polygons_database = list(snapshot.polygons)
    current_config = current_config.model_copy(update={
        "grid_size": snapshot.grid_size,
        "roll_width_m": snapshot.vinyl_width,
    })
    return snapshot


# ============================================================================
# ERROR HANDLERS
# ============================================================================

@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc):
    """Custom HTTP exception handler"""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=str(exc.detail),
            detail=str(exc)
        ).model_dump()
    )


@app.exception_handler(FloorCutError)
async def floorcut_exception_handler(request, exc):
    """Map engine errors to client errors"""
    if isinstance(exc, (PieceTooLargeError, InvalidInputError)):
        code = status.HTTP_422_UNPROCESSABLE_ENTITY
    elif isinstance(exc, ProjectFormatError):
        code = status.HTTP_400_BAD_REQUEST
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    logger.warning("Request failed: %s", exc)
    return JSONResponse(
        status_code=code,
        content=ErrorResponse(
            error=type(exc).__name__,
            detail=str(exc)
        ).model_dump()
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("floorcut.main:app", host="0.0.0.0", port=8000, reload=True)
