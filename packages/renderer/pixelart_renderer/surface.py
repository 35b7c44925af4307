"""Raster surfaces the grid renderer paints on."""

from __future__ import annotations

from typing import Protocol

from PIL import Image, ImageDraw

from pixelart_pipeline.models import RGB, RenderSurfaceUnavailable


class RenderSurface(Protocol):
    width: int
    height: int

    def ensure_size(self, width: int, height: int) -> None: ...

    def clear(self) -> None: ...

    def set_fill(self, color: RGB) -> None: ...

    def fill_rect(self, x: int, y: int, w: int, h: int) -> None: ...

    def set_pixel_block(self, x: int, y: int, w: int, h: int, color: RGB) -> None: ...

    def draw_image(self, image: Image.Image, x: int, y: int, w: int, h: int) -> None: ...


class ImageSurface:
    """Headless surface backed by an in-memory Pillow image.

    Counts paint-state changes so callers can check how many times the fill
    color was switched during a draw.
    """

    def __init__(self, width: int, height: int, background: RGB = (0, 0, 0)) -> None:
        self.background = background
        self.image: Image.Image | None = None
        self._draw: ImageDraw.ImageDraw | None = None
        self._fill: RGB | None = None
        self.fill_changes = 0
        self.blocks_painted = 0
        self.clears = 0
        self._allocate(width, height)

    def _allocate(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise RenderSurfaceUnavailable(f"cannot allocate {width}x{height} surface")
        self.image = Image.new("RGB", (width, height), self.background)
        self._draw = ImageDraw.Draw(self.image)

    def _require(self) -> ImageDraw.ImageDraw:
        if self._draw is None or self.image is None:
            raise RenderSurfaceUnavailable("surface is closed")
        return self._draw

    @property
    def width(self) -> int:
        return self.image.width if self.image is not None else 0

    @property
    def height(self) -> int:
        return self.image.height if self.image is not None else 0

    @property
    def fill(self) -> RGB | None:
        return self._fill

    def ensure_size(self, width: int, height: int) -> None:
        self._require()
        if (width, height) != (self.width, self.height):
            self._allocate(width, height)

    def clear(self) -> None:
        draw = self._require()
        draw.rectangle((0, 0, self.width - 1, self.height - 1), fill=self.background)
        self.clears += 1

    def set_fill(self, color: RGB) -> None:
        self._require()
        self._fill = color
        self.fill_changes += 1

    def fill_rect(self, x: int, y: int, w: int, h: int) -> None:
        draw = self._require()
        if w <= 0 or h <= 0:
            return
        if self._fill is None:
            raise RuntimeError("fill color not set")
        draw.rectangle((x, y, x + w - 1, y + h - 1), fill=self._fill)
        self.blocks_painted += 1

    def set_pixel_block(self, x: int, y: int, w: int, h: int, color: RGB) -> None:
        if color != self._fill:
            self.set_fill(color)
        self.fill_rect(x, y, w, h)

    def draw_image(self, image: Image.Image, x: int, y: int, w: int, h: int) -> None:
        self._require()
        if w <= 0 or h <= 0:
            return
        scaled = image.convert("RGB").resize((w, h), resample=Image.Resampling.NEAREST)
        self.image.paste(scaled, (x, y))  # type: ignore[union-attr]

    def snapshot(self) -> Image.Image:
        self._require()
        return self.image.copy()  # type: ignore[union-attr]

    def pixel(self, x: int, y: int) -> RGB:
        self._require()
        return self.image.getpixel((x, y))  # type: ignore[union-attr,return-value]

    def close(self) -> None:
        self.image = None
        self._draw = None
        self._fill = None
