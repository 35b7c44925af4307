"""Grid renderer: level -> palette color, painted as pixel blocks."""

from __future__ import annotations

import logging
import math

from PIL import Image

from pixelart_pipeline.colors import Palette, blend, relative_luminance
from pixelart_pipeline.models import RGB, IntensityGrid, RenderSurfaceUnavailable
from pixelart_pipeline.quantizer import bucket_role

from .models import COLORIZERS, Frame, RenderStats
from .surface import RenderSurface

logger = logging.getLogger("pixelart.renderer")

_GRADIENT_STOPS = (0.0, 0.4, 0.7, 1.0)
_GRADIENT_GAMMA = 0.85


def bucket_lut(palette: Palette, levels: int) -> list[RGB]:
    """Color for every possible byte value under the three-role bucket rule."""
    role_rgb = {role: palette.rgb(role) for role in ("primary", "secondary", "accent")}
    return [role_rgb[bucket_role(value, levels)] for value in range(256)]


def _gradient_anchors(palette: Palette) -> list[RGB]:
    ordered = sorted(
        (palette.rgb(role) for role in ("primary", "secondary", "accent", "text", "background")),
        key=relative_luminance,
    )
    unique = list(dict.fromkeys(ordered))
    darkest, lightest = unique[0], unique[-1]
    if len(unique) > 2:
        mid_dark = unique[len(unique) // 3]
    else:
        mid_dark = unique[1] if len(unique) > 1 else darkest
    if len(unique) > 3:
        mid_light = unique[(len(unique) * 2) // 3]
    else:
        mid_light = unique[-2] if len(unique) > 1 else lightest
    return [darkest, mid_dark, mid_light, lightest]


def gradient_lut(palette: Palette, levels: int) -> list[RGB]:
    """Blend across the palette sorted dark to light, with a mild gamma curve."""
    anchors = _gradient_anchors(palette)
    top = max(levels - 1, 1)
    out: list[RGB] = []
    for value in range(256):
        t = min(max(value / top, 0.0), 1.0) ** _GRADIENT_GAMMA
        seg = 0
        while seg < len(_GRADIENT_STOPS) - 2 and t > _GRADIENT_STOPS[seg + 1]:
            seg += 1
        start, end = _GRADIENT_STOPS[seg], _GRADIENT_STOPS[seg + 1]
        out.append(blend(anchors[seg], anchors[seg + 1], (t - start) / (end - start)))
    return out


def colorize(grid: IntensityGrid, palette: Palette, colorizer: str = "buckets") -> list[RGB | None]:
    """Second pipeline stage: resolve every cell's level to a color.

    Cells missing from a fallback-geometry grid resolve to ``None``.
    """
    if colorizer == "buckets":
        lut = bucket_lut(palette, grid.levels)
    elif colorizer == "gradient":
        lut = gradient_lut(palette, grid.levels)
    else:
        raise ValueError(f"unknown colorizer {colorizer!r}, expected one of {COLORIZERS}")

    cells: list[RGB | None] = [lut[value] for value in grid.data[: grid.cell_count]]
    cells.extend([None] * (grid.cell_count - len(cells)))
    return cells


def cell_edges(size: int, extent: int) -> list[int]:
    """Pixel boundaries for ``size`` cells across ``extent`` pixels, gap free."""
    return [math.floor(i * extent / size) for i in range(size + 1)]


def _same_frame(a: Frame | None, b: Frame | None) -> bool:
    if a is b:
        return True
    return isinstance(a, IntensityGrid) and isinstance(b, IntensityGrid) and a == b


class GridRenderer:
    """Draws intensity grids onto a surface, skipping redundant redraws."""

    def __init__(self, colorizer: str = "buckets") -> None:
        if colorizer not in COLORIZERS:
            raise ValueError(f"unknown colorizer {colorizer!r}")
        self.colorizer = colorizer
        self.last_stats = RenderStats()
        self._last: tuple | None = None

    def invalidate(self) -> None:
        self._last = None

    def _unchanged(self, surface: RenderSurface, frame: Frame, palette: Palette | None, width: int, height: int) -> bool:
        if self._last is None:
            return False
        last_surface, last_frame, last_palette, last_w, last_h, last_colorizer = self._last
        return (
            last_surface is surface
            and _same_frame(last_frame, frame)
            and last_palette == palette
            and (last_w, last_h) == (width, height)
            and last_colorizer == self.colorizer
        )

    @staticmethod
    def _acquire(surface: RenderSurface | None, width: int, height: int) -> RenderSurface:
        if surface is None:
            raise RenderSurfaceUnavailable("no render surface attached")
        if width <= 0 or height <= 0:
            raise RenderSurfaceUnavailable(f"cannot render into {width}x{height}")
        surface.ensure_size(width, height)
        return surface

    def render(
        self,
        surface: RenderSurface | None,
        grid: IntensityGrid,
        palette: Palette,
        width: int,
        height: int,
        force: bool = False,
    ) -> bool:
        """Paint ``grid`` across ``width`` pixels; returns False when nothing changed.

        The fill color is only switched when a cell's color differs from the
        previous cell's, so runs of equal cells cost a single paint-state change.
        """
        if not force and surface is not None and self._unchanged(surface, grid, palette, width, height):
            self.last_stats = RenderStats(drew=False)
            return False

        target = self._acquire(surface, width, height)
        colors = colorize(grid, palette, self.colorizer)
        n = grid.size
        edges = cell_edges(n, width)
        stats = RenderStats(drew=True)

        target.clear()
        current: RGB | None = None
        for row in range(n):
            y0, y1 = edges[row], edges[row + 1]
            base = row * n
            for col in range(n):
                color = colors[base + col]
                if color is None:
                    stats.skipped_cells += 1
                    continue
                if color != current:
                    target.set_fill(color)
                    current = color
                    stats.fill_changes += 1
                x0 = edges[col]
                target.fill_rect(x0, y0, edges[col + 1] - x0, y1 - y0)
                stats.blocks_painted += 1

        if stats.skipped_cells:
            logger.debug(
                f"{stats.skipped_cells} cells missing from {n}x{n} grid",
                extra={"event": "render_partial_grid"},
            )
        self.last_stats = stats
        self._last = (surface, grid, palette, width, height, self.colorizer)
        return True

    def render_bitmap(
        self,
        surface: RenderSurface | None,
        bitmap: Image.Image,
        width: int,
        height: int,
        force: bool = False,
    ) -> bool:
        """Draw an already-colored bitmap, scaled with nearest neighbor."""
        if not force and surface is not None and self._unchanged(surface, bitmap, None, width, height):
            self.last_stats = RenderStats(drew=False)
            return False

        target = self._acquire(surface, width, height)
        target.clear()
        target.draw_image(bitmap, 0, 0, width, height)
        self.last_stats = RenderStats(blocks_painted=1, drew=True)
        self._last = (surface, bitmap, None, width, height, self.colorizer)
        return True

    def render_frame(
        self,
        surface: RenderSurface | None,
        frame: Frame,
        palette: Palette,
        width: int,
        height: int,
        force: bool = False,
    ) -> bool:
        if isinstance(frame, IntensityGrid):
            return self.render(surface, frame, palette, width, height, force=force)
        return self.render_bitmap(surface, frame, width, height, force=force)
