"""Timer-driven slideshow over decoded grids or legacy bitmaps."""

from __future__ import annotations

import logging
import random
import threading
from dataclasses import dataclass
from typing import Iterable, Sequence

from pixelart_pipeline.codec import decode
from pixelart_pipeline.colors import Palette
from pixelart_pipeline.models import (
    DEFAULT_GRID_SIZE,
    DEFAULT_LEVELS,
    IntensityGrid,
    PixelArtError,
    RenderSurfaceUnavailable,
)

from .models import Frame
from .renderer import GridRenderer
from .scheduling import Scheduler, TimerHandle
from .surface import RenderSurface

logger = logging.getLogger("pixelart.slideshow")


@dataclass(frozen=True)
class SlideDelay:
    """Each wait is drawn uniformly from ``[min_ms, max_ms)``."""

    min_ms: float = 3000.0
    max_ms: float = 5000.0

    def __post_init__(self) -> None:
        if self.min_ms <= 0 or self.max_ms < self.min_ms:
            raise ValueError("delays must satisfy 0 < min_ms <= max_ms")

    def next_delay_ms(self, rng: random.Random) -> float:
        return self.min_ms + rng.random() * (self.max_ms - self.min_ms)


def frames_from_artifacts(
    artifacts: Iterable[str],
    levels: int = DEFAULT_LEVELS,
    default_size: int = DEFAULT_GRID_SIZE,
) -> list[IntensityGrid]:
    frames: list[IntensityGrid] = []
    for idx, text in enumerate(artifacts):
        try:
            frames.append(decode(text, levels=levels, default_size=default_size))
        except PixelArtError as exc:
            logger.error(
                f"skipping artifact {idx}: {exc}",
                extra={"event": "artifact_decode_failed"},
            )
    return frames


class Slideshow:
    """Shows one frame at a time and advances on a randomized single-shot timer.

    At most one timer is outstanding. It is cancelled before every re-arm and
    on detach, and callbacks from a superseded sequence are ignored.
    """

    def __init__(
        self,
        renderer: GridRenderer,
        surface: RenderSurface,
        scheduler: Scheduler,
        rng: random.Random | None = None,
        delays: SlideDelay | None = None,
    ) -> None:
        self.renderer = renderer
        self.surface = surface
        self.scheduler = scheduler
        self.delays = delays or SlideDelay()
        self._rng = rng or random.Random()
        self._lock = threading.RLock()

        self._frames: list[Frame] = []
        self._index = 0
        self._timer: TimerHandle | None = None
        self._generation = 0
        self._palette = Palette()
        self._width = 0
        self._height = 0

        self.transition = "scanline"
        self.visited: list[int] = []
        self.delay_history: list[float] = []

    @property
    def current_index(self) -> int:
        return self._index

    @property
    def current_frame(self) -> Frame | None:
        with self._lock:
            return self._frames[self._index] if self._frames else None

    @property
    def frame_count(self) -> int:
        return len(self._frames)

    @property
    def is_active(self) -> bool:
        return bool(self._frames)

    @property
    def has_pending_timer(self) -> bool:
        return self._timer is not None

    def attach(
        self,
        frames: Sequence[Frame],
        palette: Palette,
        width: int,
        height: int,
        transition: str = "scanline",
    ) -> None:
        """Replace the sequence and start from its first frame."""
        with self._lock:
            self._cancel_timer()
            self._generation += 1
            self._frames = list(frames)
            self._index = 0
            self._palette = palette
            self._width = width
            self._height = height
            self.transition = transition
            self.visited = []
            self.delay_history = []
            if not self._frames:
                return

            self.renderer.invalidate()
            self.visited.append(0)
            if len(self._frames) > 1:
                self._arm()
            logger.info(
                f"slideshow attached with {len(self._frames)} frame(s)",
                extra={"event": "slideshow_attached"},
            )
            # The timer stays armed if the first draw fails; a later resize or tick recovers.
            try:
                self._draw()
            except RenderSurfaceUnavailable as exc:
                logger.error(
                    f"slideshow first draw failed: {exc}",
                    extra={"event": "slideshow_render_failed"},
                )
                raise

    def set_palette(self, palette: Palette) -> None:
        with self._lock:
            self._palette = palette
            if self._frames:
                self._draw()

    def resize(self, width: int, height: int) -> None:
        with self._lock:
            self._width = width
            self._height = height
            if self._frames:
                self._draw()

    def detach(self) -> None:
        with self._lock:
            self._cancel_timer()
            self._generation += 1
            self._frames = []
            self._index = 0
            logger.info("slideshow detached", extra={"event": "slideshow_detached"})

    def _draw(self) -> bool:
        frame = self._frames[self._index]
        return self.renderer.render_frame(self.surface, frame, self._palette, self._width, self._height)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _arm(self) -> None:
        self._cancel_timer()
        delay_ms = self.delays.next_delay_ms(self._rng)
        self.delay_history.append(delay_ms)
        generation = self._generation
        self._timer = self.scheduler.call_later(delay_ms / 1000.0, lambda: self._on_timer(generation))

    def _on_timer(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation or not self._frames:
                logger.debug("stale slideshow timer ignored", extra={"event": "slideshow_stale_timer"})
                return
            self._timer = None
            self._index = (self._index + 1) % len(self._frames)
            self.visited.append(self._index)
            try:
                self._draw()
            except RenderSurfaceUnavailable as exc:
                logger.error(
                    f"slideshow redraw failed at frame {self._index}: {exc}",
                    extra={"event": "slideshow_render_failed"},
                )
            self._arm()
