"""Typed renderer models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from PIL import Image

from pixelart_pipeline.models import IntensityGrid

Frame = Union[IntensityGrid, Image.Image]

COLORIZERS = ("buckets", "gradient")
TRANSITIONS = ("scanline", "dissolve", "boot-up")


@dataclass
class RenderStats:
    fill_changes: int = 0
    blocks_painted: int = 0
    skipped_cells: int = 0
    drew: bool = False
