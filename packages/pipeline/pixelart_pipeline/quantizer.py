"""Luminance bucketing and direct nearest-palette-color quantization."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import Sequence

import numpy as np
from PIL import Image

from .colors import ROLES, Palette
from .models import DEFAULT_GRID_SIZE, DEFAULT_LEVELS, RGB, IntensityGrid, check_level_count
from .sampler import pixelate, sample

BUCKET_ROLES: tuple[str, str, str] = ("primary", "secondary", "accent")


def luminance(r: int, g: int, b: int) -> int:
    """BT.601 luma rounded half-up to 0..255."""
    return int(math.floor(0.299 * r + 0.587 * g + 0.114 * b + 0.5))


def luminance_array(rgb: np.ndarray) -> np.ndarray:
    arr = np.asarray(rgb, dtype=np.float64)
    y = 0.299 * arr[..., 0] + 0.587 * arr[..., 1] + 0.114 * arr[..., 2]
    return np.floor(y + 0.5).astype(np.int32)


def quantize(y: float, levels: int = DEFAULT_LEVELS) -> int:
    """Uniform bucketing of 0..255 into ``levels`` equal-width bins."""
    check_level_count(levels)
    clamped = min(max(float(y), 0.0), 255.0)
    return min(levels - 1, int(math.floor(clamped / 255.0 * levels)))


def quantize_array(y: np.ndarray, levels: int = DEFAULT_LEVELS) -> np.ndarray:
    check_level_count(levels)
    clamped = np.clip(np.asarray(y, dtype=np.float64), 0.0, 255.0)
    out = np.floor(clamped / 255.0 * levels).astype(np.int32)
    return np.minimum(out, levels - 1).astype(np.uint8)


def bucket_thresholds(levels: int = DEFAULT_LEVELS) -> tuple[int, int]:
    """First level of the secondary and of the accent bucket.

    For 16 levels this gives 0-4 primary, 5-9 secondary and 10-15 accent.
    """
    check_level_count(levels)
    return levels // 3, (2 * levels) // 3


def bucket_role(level: int, levels: int = DEFAULT_LEVELS) -> str:
    low, high = bucket_thresholds(levels)
    level = min(max(int(level), 0), levels - 1)
    if level < low:
        return "primary"
    if level < high:
        return "secondary"
    return "accent"


def palette_distances(samples: np.ndarray, palette_rgb: Sequence[RGB] | np.ndarray) -> np.ndarray:
    """Euclidean RGB distance from every sample (..., 3) to every palette row (K, 3)."""
    pal = np.asarray(palette_rgb, dtype=np.float64).reshape(-1, 3)
    arr = np.asarray(samples, dtype=np.float64)
    diff = arr[..., None, :] - pal
    return np.sqrt(np.sum(diff * diff, axis=-1))


def nearest_color(rgb: RGB, palette: Palette) -> tuple[str, RGB, float]:
    colors = palette.as_rgb_list()
    dist = palette_distances(np.asarray(rgb), colors)
    # argmin keeps the first minimum, i.e. palette declaration order.
    idx = int(np.argmin(dist))
    return ROLES[idx], colors[idx], float(dist[idx])


class QuantizationStrategy(ABC):
    """Maps a dense RGB sample grid onto the palette's vocabulary."""

    name: str = "abstract"

    @abstractmethod
    def apply(self, rgb: np.ndarray, palette: Palette | None = None):
        raise NotImplementedError


class LuminanceBuckets(QuantizationStrategy):
    """Mode A: store brightness levels; colors are chosen at render time."""

    name = "luminance"

    def __init__(self, levels: int = DEFAULT_LEVELS) -> None:
        check_level_count(levels)
        self.levels = levels

    def apply(self, rgb: np.ndarray, palette: Palette | None = None) -> IntensityGrid:
        arr = np.asarray(rgb)
        if arr.ndim != 3 or arr.shape[0] != arr.shape[1] or arr.shape[-1] < 3:
            raise ValueError("expected square (N,N,3) sample grid")
        levels = quantize_array(luminance_array(arr[..., :3]), self.levels)
        return IntensityGrid(size=int(arr.shape[0]), data=levels.tobytes(), levels=self.levels)


class NearestPaletteColor(QuantizationStrategy):
    """Mode B: replace each sample with the closest of the five palette colors."""

    name = "nearest"

    def apply(self, rgb: np.ndarray, palette: Palette | None = None) -> np.ndarray:
        palette = palette or Palette()
        colors = np.asarray(palette.as_rgb_list(), dtype=np.uint8)
        arr = np.asarray(rgb)[..., :3]
        idx = np.argmin(palette_distances(arr, colors), axis=-1)
        return colors[idx]


def image_to_intensity_grid(
    bitmap: Image.Image,
    size: int = DEFAULT_GRID_SIZE,
    levels: int = DEFAULT_LEVELS,
) -> IntensityGrid:
    return LuminanceBuckets(levels).apply(sample(bitmap, size))


def image_to_palette_art(
    bitmap: Image.Image,
    palette: Palette,
    target_width: int,
    target_height: int,
    pixel_size: int = 4,
) -> Image.Image:
    blocky = pixelate(bitmap, target_width, target_height, pixel_size)
    recolored = NearestPaletteColor().apply(np.asarray(blocky, dtype=np.uint8), palette)
    return Image.fromarray(np.ascontiguousarray(recolored, dtype=np.uint8))
