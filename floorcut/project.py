"""
Project import/export

Flat JSON snapshot of the drawing: edges, polygons, grid size and vinyl
width. No versioning; the document is restored as written.
"""

import json
import logging
from datetime import datetime
from typing import Any, Dict, Union

from pydantic import ValidationError

from .errors import ProjectFormatError
from .geometry import polygon_area
from .models import ProjectSnapshot, coerce_points

logger = logging.getLogger(__name__)


def export_project(snapshot: ProjectSnapshot) -> str:
    """Export entire project as JSON"""
    data = snapshot.model_dump(mode="json", by_alias=True)
    data["timestamp"] = snapshot.timestamp or datetime.now().isoformat()
    return json.dumps(data, indent=2)


def _fill_missing_areas(data: Dict[str, Any]) -> None:
    grid_size = data.get("gridSize") or data.get("grid_size") or 100
    for poly in data.get("polygons") or []:
        if isinstance(poly, dict) and poly.get("area") is None:
            points = coerce_points(poly.get("points") or [])
            poly["area"] = polygon_area([tuple(p) for p in points]) / (grid_size * grid_size)


def import_project(json_data: Union[str, bytes]) -> ProjectSnapshot:
    """
    Import project from JSON text or raw UTF-8 bytes

    Missing gridSize/vinylWidth fall back to 100 px/m and 2.0 m; polygons
    saved without an area get it recomputed.
    """
    try:
        data = json.loads(json_data)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ProjectFormatError(f"Invalid project JSON: {e}") from e
    if not isinstance(data, dict):
        raise ProjectFormatError("Project JSON must be an object")

    # Older saves keep the edges under "objects"
    if "edges" not in data and "objects" in data:
        data["edges"] = data.pop("objects")

    try:
        _fill_missing_areas(data)
        snapshot = ProjectSnapshot.model_validate(data)
    except (ValidationError, TypeError, ValueError) as e:
        raise ProjectFormatError(f"Invalid project data: {e}") from e

    logger.info("Loaded project: %d edges, %d polygons", len(snapshot.edges), len(snapshot.polygons))
    return snapshot
