"""Offline renderings of intensity grids: PNG image, data URL, and SVG."""

from __future__ import annotations

import base64
from io import BytesIO

from PIL import Image

from pixelart_pipeline.colors import Palette, rgb_to_hex
from pixelart_pipeline.models import IntensityGrid

from .renderer import GridRenderer, colorize
from .surface import ImageSurface


def render_to_image(
    grid: IntensityGrid,
    palette: Palette,
    width: int,
    height: int | None = None,
    colorizer: str = "buckets",
) -> Image.Image:
    height = width if height is None else height
    surface = ImageSurface(width, height, background=palette.rgb("background"))
    GridRenderer(colorizer).render(surface, grid, palette, width, height)
    return surface.snapshot()


def preview_data_url(grid: IntensityGrid, palette: Palette, width: int, height: int | None = None) -> str:
    image = render_to_image(grid, palette, width, height)
    buf = BytesIO()
    image.save(buf, format="PNG")
    b64 = base64.b64encode(buf.getvalue()).decode("ascii")
    return f"data:image/png;base64,{b64}"


def render_svg(grid: IntensityGrid, palette: Palette, pixel_size: int = 1, colorizer: str = "buckets") -> str:
    colors = colorize(grid, palette, colorizer)
    n = grid.size
    side = n * pixel_size
    rects: list[str] = []
    for index, color in enumerate(colors):
        if color is None:
            continue
        y, x = divmod(index, n)
        rects.append(
            f'<rect x="{x * pixel_size}" y="{y * pixel_size}" width="{pixel_size}" '
            f'height="{pixel_size}" fill="{rgb_to_hex(color)}" />'
        )
    return (
        f'<svg width="{side}" height="{side}" viewBox="0 0 {side} {side}" '
        f'preserveAspectRatio="xMidYMid meet" shape-rendering="crispEdges" '
        f'xmlns="http://www.w3.org/2000/svg">{"".join(rects)}</svg>'
    )
