"""Bitmap decoding boundary (RGBA in sRGB order)."""

from __future__ import annotations

import asyncio
import io
from pathlib import Path
from typing import BinaryIO, Union

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from .models import DecodeFailure

BitmapSource = Union[Path, str, bytes, BinaryIO]


def load_bitmap(source: BitmapSource) -> Image.Image:
    """Decode ``source`` into a fully loaded RGBA image.

    EXIF orientation is applied so camera photos come out upright. Decoder
    errors surface as :class:`DecodeFailure` and are never retried.
    """
    stream = io.BytesIO(source) if isinstance(source, (bytes, bytearray)) else source
    try:
        with Image.open(stream) as im0:
            im = ImageOps.exif_transpose(im0)
            im = im.convert("RGBA")
            im.load()
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        raise DecodeFailure(f"cannot decode bitmap: {exc}") from exc

    if im.width == 0 or im.height == 0:
        raise DecodeFailure("bitmap has no pixels")
    return im


async def decode_bitmap(source: BitmapSource) -> Image.Image:
    """One-shot awaitable decode; resolves with the bitmap or raises DecodeFailure."""
    return await asyncio.to_thread(load_bitmap, source)


def bitmap_from_array(array: np.ndarray) -> Image.Image:
    arr = np.asarray(array)
    if arr.dtype != np.uint8 or arr.ndim != 3 or arr.shape[-1] not in (3, 4):
        raise TypeError("expected uint8 (H,W,3/4) array")
    if arr.shape[0] == 0 or arr.shape[1] == 0:
        raise DecodeFailure("bitmap has no pixels")
    return Image.fromarray(arr)
