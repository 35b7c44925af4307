"""Text-safe serialization of intensity grids."""

from __future__ import annotations

import base64
import binascii
import logging
import math
from typing import Iterable

from .models import (
    DEFAULT_GRID_SIZE,
    DEFAULT_LEVELS,
    IntensityGrid,
    InvalidArtifact,
    InvalidGeometry,
    check_levels,
)

logger = logging.getLogger("pixelart.codec")


def infer_grid_size(length: int, default_size: int = DEFAULT_GRID_SIZE) -> int:
    side = math.isqrt(length)
    if length > 0 and side * side == length:
        return side
    return default_size


def encode(grid: IntensityGrid) -> str:
    """One byte per cell, base64 over the raw bytes; no other compression."""
    if not grid.is_exact or grid.size <= 0:
        raise InvalidGeometry(f"grid of size {grid.size} holds {len(grid.data)} values")
    check_levels(grid.data, grid.levels)
    return base64.b64encode(grid.data).decode("ascii")


def encode_levels(values: Iterable[int], levels: int = DEFAULT_LEVELS) -> str:
    return encode(IntensityGrid.from_levels(values, levels))


def decode(
    text: str,
    levels: int = DEFAULT_LEVELS,
    default_size: int = DEFAULT_GRID_SIZE,
) -> IntensityGrid:
    """Inverse of :func:`encode`.

    A byte length that is not a perfect square is not an error: the grid is
    treated as ``default_size`` wide and a warning is logged.
    """
    compact = "".join(text.split())
    try:
        data = base64.b64decode(compact, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidArtifact(f"artifact is not valid base64: {exc}") from exc

    check_levels(data, levels)
    size = infer_grid_size(len(data), default_size)
    if size * size != len(data):
        logger.warning(
            f"artifact holds {len(data)} values, not a square grid; using {default_size}x{default_size}",
            extra={"event": "grid_geometry_fallback"},
        )
    return IntensityGrid(size=size, data=data, levels=levels)
