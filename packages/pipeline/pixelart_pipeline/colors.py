"""Palette model and color-string parsing."""

from __future__ import annotations

import colorsys
import logging
import math
import re
from dataclasses import dataclass, fields
from typing import Mapping

from PIL import ImageColor

from .models import RGB, PaletteParseError

logger = logging.getLogger("pixelart.palette")

FALLBACK_COLOR: RGB = (0, 0, 0)

ROLES: tuple[str, ...] = ("primary", "secondary", "accent", "background", "text")
ROLE_ALIASES = {"bg": "background"}

DEFAULT_ROLE_COLORS: dict[str, str] = {
    "primary": "#2a52be",
    "secondary": "#7cb9e8",
    "accent": "#00308f",
    "background": "#e6f2ff",
    "text": "#001f3f",
}

_NUM = r"(-?\d+(?:\.\d+)?)"
_HSL_FUNC = re.compile(
    rf"^hsla?\(\s*{_NUM}(?:deg)?\s*[, ]\s*{_NUM}%\s*[, ]\s*{_NUM}%\s*(?:[,/]\s*[\d.]+%?\s*)?\)$",
    re.IGNORECASE,
)
_HSL_TRIPLET = re.compile(rf"^{_NUM}(?:deg)?\s*[, ]\s*{_NUM}%\s*[, ]\s*{_NUM}%$", re.IGNORECASE)
_RGB_FUNC = re.compile(
    rf"^rgba?\(\s*{_NUM}\s*[, ]\s*{_NUM}\s*[, ]\s*{_NUM}\s*(?:[,/]\s*[\d.]+%?\s*)?\)$",
    re.IGNORECASE,
)
_BARE_HEX = re.compile(r"^(?:[0-9a-f]{3}|[0-9a-f]{6}|[0-9a-f]{8})$", re.IGNORECASE)


def _channel(value: float) -> int:
    return max(0, min(255, int(math.floor(value + 0.5))))


def _hsl_to_rgb(h: float, s: float, l: float) -> RGB:
    r, g, b = colorsys.hls_to_rgb((h % 360.0) / 360.0, min(max(l, 0.0), 100.0) / 100.0, min(max(s, 0.0), 100.0) / 100.0)
    return (_channel(r * 255), _channel(g * 255), _channel(b * 255))


def parse_color(value: str) -> RGB:
    """Parse a theme color string into an RGB tuple.

    Accepts hex (with or without ``#``), ``rgb()``/``rgba()``, ``hsl()``/``hsla()``,
    bare ``"H S% L%"`` triplets as used in CSS custom properties, and the color
    names Pillow knows.
    """
    if not isinstance(value, str):
        raise PaletteParseError(f"color must be a string, got {type(value).__name__}")
    text = value.strip()
    if not text:
        raise PaletteParseError("empty color string")

    match = _HSL_FUNC.match(text) or _HSL_TRIPLET.match(text)
    if match:
        return _hsl_to_rgb(*(float(g) for g in match.groups()))

    match = _RGB_FUNC.match(text)
    if match:
        return tuple(_channel(float(g)) for g in match.groups())  # type: ignore[return-value]

    if _BARE_HEX.match(text):
        text = f"#{text}"

    try:
        parsed = ImageColor.getrgb(text)
    except ValueError as exc:
        raise PaletteParseError(f"unrecognized color {value!r}") from exc
    return (int(parsed[0]), int(parsed[1]), int(parsed[2]))


def parse_color_lenient(value: str) -> RGB:
    try:
        return parse_color(value)
    except PaletteParseError as exc:
        logger.warning(
            f"palette color {value!r} not understood, using fallback: {exc}",
            extra={"event": "palette_parse_failed"},
        )
        return FALLBACK_COLOR


def rgb_to_hex(rgb: RGB) -> str:
    return f"#{rgb[0]:02x}{rgb[1]:02x}{rgb[2]:02x}"


def blend(a: RGB, b: RGB, ratio: float) -> RGB:
    """Linear mix, 0 -> a, 1 -> b."""
    t = min(max(ratio, 0.0), 1.0)
    return (
        _channel(a[0] + (b[0] - a[0]) * t),
        _channel(a[1] + (b[1] - a[1]) * t),
        _channel(a[2] + (b[2] - a[2]) * t),
    )


def relative_luminance(rgb: RGB) -> float:
    return (0.299 * rgb[0] + 0.587 * rgb[1] + 0.114 * rgb[2]) / 255.0


@dataclass(frozen=True)
class Palette:
    """Five named theme colors, kept in the theming collaborator's own format."""

    primary: str = DEFAULT_ROLE_COLORS["primary"]
    secondary: str = DEFAULT_ROLE_COLORS["secondary"]
    accent: str = DEFAULT_ROLE_COLORS["accent"]
    background: str = DEFAULT_ROLE_COLORS["background"]
    text: str = DEFAULT_ROLE_COLORS["text"]

    @classmethod
    def from_mapping(cls, raw: Mapping[str, str]) -> Palette:
        known = {f.name for f in fields(cls)}
        values: dict[str, str] = {}
        for key, color in raw.items():
            role = ROLE_ALIASES.get(key, key)
            if role in known and color:
                values[role] = str(color)
        return cls(**values)

    @property
    def roles(self) -> tuple[str, ...]:
        return ROLES

    def color(self, role: str) -> str:
        role = ROLE_ALIASES.get(role, role)
        if role not in ROLES:
            raise KeyError(role)
        return getattr(self, role)

    def rgb(self, role: str) -> RGB:
        return parse_color_lenient(self.color(role))

    def as_rgb_list(self) -> list[RGB]:
        return [self.rgb(role) for role in ROLES]

    def with_overrides(self, overrides: Mapping[str, str]) -> Palette:
        merged = {role: getattr(self, role) for role in ROLES}
        for key, color in overrides.items():
            role = ROLE_ALIASES.get(key, key)
            if role in merged and color:
                merged[role] = str(color)
        return Palette(**merged)
