"""Center-crop and nearest-neighbor resampling to a fixed grid."""

from __future__ import annotations

import numpy as np
from PIL import Image

from .models import DEFAULT_GRID_SIZE, DecodeFailure

Box = tuple[int, int, int, int]


def _check_bitmap(bitmap: Image.Image) -> None:
    if bitmap.width <= 0 or bitmap.height <= 0:
        raise DecodeFailure("bitmap has no pixels")


def center_square_box(width: int, height: int) -> Box:
    side = min(width, height)
    left = (width - side) // 2
    top = (height - side) // 2
    return (left, top, left + side, top + side)


def aspect_crop_box(width: int, height: int, target_width: int, target_height: int) -> Box:
    """Largest centered box of the target aspect ratio inside ``width x height``."""
    if target_width <= 0 or target_height <= 0:
        raise ValueError("target size must be positive")
    src_aspect = width / height
    target_aspect = target_width / target_height

    if src_aspect > target_aspect:
        crop_w = max(1, round(height * target_aspect))
        crop_h = height
    else:
        crop_w = width
        crop_h = max(1, round(width / target_aspect))
    left = (width - crop_w) // 2
    top = (height - crop_h) // 2
    return (left, top, left + crop_w, top + crop_h)


def sample(bitmap: Image.Image, target_n: int = DEFAULT_GRID_SIZE) -> np.ndarray:
    """Square-crop ``bitmap`` and resize it to ``target_n x target_n`` RGB samples.

    Resampling is nearest neighbor on purpose so the output keeps hard block
    edges; no smoothing filter is ever applied.
    """
    if target_n <= 0:
        raise ValueError("target_n must be positive")
    _check_bitmap(bitmap)
    box = center_square_box(bitmap.width, bitmap.height)
    square = bitmap.convert("RGB").resize((target_n, target_n), resample=Image.Resampling.NEAREST, box=box)
    return np.asarray(square, dtype=np.uint8)


def sample_rect(bitmap: Image.Image, target_width: int, target_height: int) -> Image.Image:
    _check_bitmap(bitmap)
    box = aspect_crop_box(bitmap.width, bitmap.height, target_width, target_height)
    return bitmap.convert("RGB").resize((target_width, target_height), resample=Image.Resampling.NEAREST, box=box)


def pixelate(
    bitmap: Image.Image,
    target_width: int,
    target_height: int,
    pixel_size: int = 4,
) -> Image.Image:
    """Crop to the slot's aspect ratio, then down- and up-scale in ``pixel_size`` blocks."""
    if pixel_size <= 0:
        raise ValueError("pixel_size must be positive")
    _check_bitmap(bitmap)
    box = aspect_crop_box(bitmap.width, bitmap.height, target_width, target_height)
    small_size = (max(1, target_width // pixel_size), max(1, target_height // pixel_size))
    small = bitmap.convert("RGB").resize(small_size, resample=Image.Resampling.NEAREST, box=box)
    return small.resize((target_width, target_height), resample=Image.Resampling.NEAREST)
