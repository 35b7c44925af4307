"""Typed pipeline models, constants, and error types."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Iterator

DEFAULT_GRID_SIZE = 128
DEFAULT_LEVELS = 16
# Levels are stored one per byte.
MAX_LEVELS = 256

RGB = tuple[int, int, int]


class PixelArtError(Exception):
    """Base class for pipeline failures."""


class DecodeFailure(PixelArtError):
    """Source bitmap could not be decoded."""


class InvalidGeometry(PixelArtError, ValueError):
    """Grid data length is not a perfect square."""


class LevelOutOfRange(PixelArtError, ValueError):
    """A stored intensity value is not below the level count."""


class InvalidArtifact(PixelArtError, ValueError):
    """Artifact text is not valid base64."""


class RenderSurfaceUnavailable(PixelArtError):
    """Render target cannot be acquired."""


class PaletteParseError(PixelArtError, ValueError):
    """Color string is in no recognized format."""


def check_level_count(levels: int) -> None:
    if not 1 <= levels <= MAX_LEVELS:
        raise ValueError(f"levels must be in 1..{MAX_LEVELS}, got {levels}")


def check_levels(data: bytes, levels: int) -> None:
    check_level_count(levels)
    if data and max(data) >= levels:
        bad = max(data)
        raise LevelOutOfRange(f"value {bad} outside 0..{levels - 1}")


@dataclass(frozen=True)
class IntensityGrid:
    """Row-major square grid of quantized intensity levels.

    ``data`` normally holds ``size * size`` bytes. Grids produced by the
    decoder's geometry fallback keep their raw bytes, so ``is_exact`` may be
    False and trailing cells may be missing.
    """

    size: int
    data: bytes
    levels: int = DEFAULT_LEVELS

    @classmethod
    def from_levels(cls, values: Iterable[int], levels: int = DEFAULT_LEVELS) -> IntensityGrid:
        try:
            data = bytes(values)
        except ValueError as exc:
            raise LevelOutOfRange(str(exc)) from exc
        side = math.isqrt(len(data))
        if not data or side * side != len(data):
            raise InvalidGeometry(f"length {len(data)} is not a perfect square")
        check_levels(data, levels)
        return cls(size=side, data=data, levels=levels)

    @property
    def cell_count(self) -> int:
        return self.size * self.size

    @property
    def is_exact(self) -> bool:
        return len(self.data) == self.cell_count

    def level_at(self, row: int, col: int) -> int | None:
        index = row * self.size + col
        if index >= len(self.data):
            return None
        return self.data[index]

    def rows(self) -> Iterator[bytes]:
        for row in range(self.size):
            start = row * self.size
            chunk = self.data[start : start + self.size]
            if not chunk:
                return
            yield chunk
