"""Renderer package for pixel-exact grid drawing and slideshows."""

from .export import preview_data_url, render_svg, render_to_image
from .models import COLORIZERS, TRANSITIONS, Frame, RenderStats
from .renderer import GridRenderer, cell_edges, colorize
from .scheduling import AsyncioScheduler, Scheduler, ThreadingScheduler, TimerHandle, VirtualScheduler
from .slideshow import SlideDelay, Slideshow, frames_from_artifacts
from .surface import ImageSurface, RenderSurface

__all__ = [
    "AsyncioScheduler",
    "COLORIZERS",
    "Frame",
    "GridRenderer",
    "ImageSurface",
    "RenderStats",
    "RenderSurface",
    "Scheduler",
    "SlideDelay",
    "Slideshow",
    "TRANSITIONS",
    "ThreadingScheduler",
    "TimerHandle",
    "VirtualScheduler",
    "cell_edges",
    "colorize",
    "frames_from_artifacts",
    "preview_data_url",
    "render_svg",
    "render_to_image",
]
