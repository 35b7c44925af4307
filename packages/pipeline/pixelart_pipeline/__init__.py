"""Pixel-art pipeline: sampling, quantization, and artifact encoding."""

from .bitmap_io import bitmap_from_array, decode_bitmap, load_bitmap
from .codec import decode, encode, encode_levels, infer_grid_size
from .colors import FALLBACK_COLOR, ROLES, Palette, parse_color, parse_color_lenient, rgb_to_hex
from .models import (
    DEFAULT_GRID_SIZE,
    DEFAULT_LEVELS,
    MAX_LEVELS,
    DecodeFailure,
    IntensityGrid,
    InvalidArtifact,
    InvalidGeometry,
    LevelOutOfRange,
    PaletteParseError,
    PixelArtError,
    RenderSurfaceUnavailable,
)
from .quantizer import (
    LuminanceBuckets,
    NearestPaletteColor,
    QuantizationStrategy,
    bucket_role,
    bucket_thresholds,
    image_to_intensity_grid,
    image_to_palette_art,
    luminance,
    nearest_color,
    quantize,
)
from .sampler import pixelate, sample, sample_rect
from .themes import DEFAULT_THEME_NAME, get_theme, list_themes

__all__ = [
    "DEFAULT_GRID_SIZE",
    "DEFAULT_LEVELS",
    "MAX_LEVELS",
    "DEFAULT_THEME_NAME",
    "DecodeFailure",
    "FALLBACK_COLOR",
    "IntensityGrid",
    "InvalidArtifact",
    "InvalidGeometry",
    "LevelOutOfRange",
    "LuminanceBuckets",
    "NearestPaletteColor",
    "Palette",
    "PaletteParseError",
    "PixelArtError",
    "QuantizationStrategy",
    "ROLES",
    "RenderSurfaceUnavailable",
    "bitmap_from_array",
    "bucket_role",
    "bucket_thresholds",
    "decode",
    "decode_bitmap",
    "encode",
    "encode_levels",
    "get_theme",
    "image_to_intensity_grid",
    "image_to_palette_art",
    "infer_grid_size",
    "list_themes",
    "load_bitmap",
    "luminance",
    "nearest_color",
    "parse_color",
    "parse_color_lenient",
    "pixelate",
    "quantize",
    "rgb_to_hex",
    "sample",
    "sample_rect",
]
