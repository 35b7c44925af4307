"""Persistent pipeline settings schema and load/save helpers."""

from __future__ import annotations

import json
import logging
import os
import platform
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any


CONFIG_VERSION = 2
TRANSITION_TYPES = ("scanline", "dissolve", "boot-up")
COLORIZER_NAMES = ("buckets", "gradient")

logger = logging.getLogger("pixelart.config")


@dataclass
class GridConfig:
    size: int = 128
    levels: int = 16


@dataclass
class SlideshowConfig:
    min_delay_ms: int = 3000
    max_delay_ms: int = 5000
    transition: str = "scanline"
    artifacts: list[str] = field(default_factory=list)


@dataclass
class RenderConfig:
    display_width: int = 256
    display_height: int = 256
    colorizer: str = "buckets"
    pixel_size: int = 4


@dataclass
class PaletteConfig:
    theme: str = "Cobalt"
    overrides: dict[str, str] = field(default_factory=dict)


@dataclass
class DiagnosticsConfig:
    keep_log_files: int = 7


@dataclass
class AppConfig:
    config_version: int = CONFIG_VERSION
    grid: GridConfig = field(default_factory=GridConfig)
    slideshow: SlideshowConfig = field(default_factory=SlideshowConfig)
    render: RenderConfig = field(default_factory=RenderConfig)
    palette: PaletteConfig = field(default_factory=PaletteConfig)
    diagnostics: DiagnosticsConfig = field(default_factory=DiagnosticsConfig)


DEFAULT_CONFIG = AppConfig()


def config_root() -> Path:
    system = platform.system()
    if system == "Windows":
        base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
        return base / "PixelArt"
    if system == "Darwin":
        return Path.home() / "Library" / "Application Support" / "PixelArt"
    return Path.home() / ".config" / "pixelart"


def config_path() -> Path:
    return config_root() / "config.json"


def _merge(dataclass_type, raw: dict[str, Any]):
    defaults = dataclass_type()  # type: ignore[misc]
    if not isinstance(raw, dict):
        return defaults
    for k, v in raw.items():
        if hasattr(defaults, k):
            setattr(defaults, k, v)
    return defaults


def _normalize_grid(cfg: AppConfig) -> None:
    cfg.grid.size = max(8, min(512, int(cfg.grid.size)))
    cfg.grid.levels = max(1, min(256, int(cfg.grid.levels)))


def _normalize_slideshow(cfg: AppConfig) -> None:
    s = cfg.slideshow
    s.min_delay_ms = max(1, int(s.min_delay_ms))
    s.max_delay_ms = max(s.min_delay_ms + 1, int(s.max_delay_ms))
    if s.transition not in TRANSITION_TYPES:
        s.transition = "scanline"
    s.artifacts = [str(a) for a in (s.artifacts or []) if a]


def _normalize_render(cfg: AppConfig) -> None:
    r = cfg.render
    r.display_width = max(1, int(r.display_width))
    r.display_height = max(1, int(r.display_height))
    r.pixel_size = max(1, int(r.pixel_size))
    if r.colorizer not in COLORIZER_NAMES:
        r.colorizer = "buckets"


def _normalize_palette(cfg: AppConfig) -> None:
    overrides = cfg.palette.overrides if isinstance(cfg.palette.overrides, dict) else {}
    cfg.palette.overrides = {str(k): str(v) for k, v in overrides.items() if v}


def _migrate(raw: dict[str, Any]) -> dict[str, Any]:
    version = int(raw.get("config_version", 1))
    data = dict(raw)

    if version < 2:
        # v1 kept grid geometry as flat top-level keys.
        grid = dict(data.get("grid", {}) or {})
        if "grid_size" in data:
            grid.setdefault("size", data.pop("grid_size"))
        if "levels" in data:
            grid.setdefault("levels", data.pop("levels"))
        data["grid"] = grid
        data.setdefault("slideshow", {})
        data.setdefault("diagnostics", {})
        data["config_version"] = 2

    return data


def load_config(path: Path | None = None) -> AppConfig:
    path = path or config_path()
    if not path.exists():
        return AppConfig()

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.warning(f"config unreadable, using defaults: {exc}", extra={"event": "config_invalid"})
        return AppConfig()
    if not isinstance(raw, dict):
        return AppConfig()

    data = _migrate(raw)
    cfg = AppConfig(
        config_version=int(data.get("config_version", CONFIG_VERSION)),
        grid=_merge(GridConfig, data.get("grid", {})),
        slideshow=_merge(SlideshowConfig, data.get("slideshow", {})),
        render=_merge(RenderConfig, data.get("render", {})),
        palette=_merge(PaletteConfig, data.get("palette", {})),
        diagnostics=_merge(DiagnosticsConfig, data.get("diagnostics", {})),
    )

    _normalize_grid(cfg)
    _normalize_slideshow(cfg)
    _normalize_render(cfg)
    _normalize_palette(cfg)
    return cfg


def save_config(cfg: AppConfig, path: Path | None = None) -> Path:
    cfg.config_version = CONFIG_VERSION
    path = path or config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(asdict(cfg), indent=2, sort_keys=True), encoding="utf-8")
    return path
