"""
Configuration for the floor layout engine

Defaults are read from environment variables so the API server and
scripts share one source of truth.
"""

import os
import logging

logger = logging.getLogger(__name__)


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not a number, using %s", name, raw, default)
        return default


class Config:
    """Application configuration loaded from environment variables"""

    # Drawing scale (pixels per metre)
    GRID_SIZE = _env_float("FLOORCUT_GRID_SIZE", 100.0)

    # Vinyl roll stock
    ROLL_WIDTH_M = _env_float("FLOORCUT_ROLL_WIDTH_M", 2.0)
    ROLL_LENGTH_M = _env_float("FLOORCUT_ROLL_LENGTH_M", 25.0)

    # Logging
    LOG_LEVEL = os.environ.get("FLOORCUT_LOG_LEVEL", "INFO").upper()
    LOG_FILE = os.environ.get("FLOORCUT_LOG_FILE") or None

    DEBUG = os.environ.get("DEBUG", "false").lower() == "true"

    @classmethod
    def validate(cls):
        """Validate critical configuration values"""
        if cls.GRID_SIZE <= 0:
            logger.warning("FLOORCUT_GRID_SIZE must be positive, got %s", cls.GRID_SIZE)
        if cls.ROLL_WIDTH_M <= 0:
            logger.warning("FLOORCUT_ROLL_WIDTH_M must be positive, got %s", cls.ROLL_WIDTH_M)
        if cls.ROLL_LENGTH_M <= 0:
            logger.warning("FLOORCUT_ROLL_LENGTH_M must be positive, got %s", cls.ROLL_LENGTH_M)

    @classmethod
    def log_level(cls) -> int:
        return logging.DEBUG if cls.DEBUG else getattr(logging, cls.LOG_LEVEL, logging.INFO)
