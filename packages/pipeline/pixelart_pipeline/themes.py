"""Built-in palettes for rendering pixel art."""

from __future__ import annotations

from .colors import Palette

DEFAULT_THEME_NAME = "Cobalt"

THEMES: dict[str, Palette] = {
    "Cobalt": Palette(),
    "Ember": Palette(
        primary="#3b1f1a",
        secondary="hsl(18, 70%, 45%)",
        accent="#ffb347",
        background="#1a140e",
        text="#fff7e8",
    ),
    "Moss": Palette(
        primary="hsl(140, 35%, 18%)",
        secondary="hsl(120, 30%, 42%)",
        accent="hsl(90, 55%, 72%)",
        background="#f1f7ec",
        text="#142a14",
    ),
    "Arcade": Palette(
        primary="#0a0f1d",
        secondary="#ff3ea5",
        accent="#35d9ff",
        background="#131b33",
        text="#f4f7ff",
    ),
}


def list_themes() -> list[str]:
    return sorted(THEMES.keys())


def get_theme(name: str | None) -> Palette:
    if not name:
        return THEMES[DEFAULT_THEME_NAME]
    return THEMES.get(name, THEMES[DEFAULT_THEME_NAME])
