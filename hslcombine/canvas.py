from __future__ import annotations

from enum import IntEnum
from typing import Tuple

import numpy as np

from hslcombine.colorspace import (
    HSLColor,
    brightness,
    hsl_to_rgb,
    hue_step,
    scale_to_16bit,
    to_8bit,
)
from hslcombine.decode import SourceImage
from hslcombine.errors import InvalidChannelError, InvalidDimensionsError


# Rows converted per batch when rendering the whole canvas.
RENDER_BAND_ROWS = 256


class Channel(IntEnum):
    HUE = 0
    SATURATION = 1
    LUMINOSITY = 2

    @property
    def label(self) -> str:
        return self.name.lower()


class HSLCanvas:
    """
    Mutable HSL pixel buffer.

    The three 16-bit components of each pixel are interleaved in a single
    (height, width, 3) uint16 array. All components start at 0 (black).
    """

    def __init__(self, width: int, height: int):
        if width <= 0 or height <= 0:
            raise InvalidDimensionsError(
                f"Image bounds must be positive, got {width}x{height}"
            )

        self.width = int(width)
        self.height = int(height)
        self._pixels = np.zeros((self.height, self.width, 3), dtype=np.uint16)

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def pixel_at(self, x: int, y: int) -> HSLColor:
        # Out-of-bounds lookups read as black instead of failing
        if not self.in_bounds(x, y):
            return HSLColor()
        h, s, l = self._pixels[y, x].tolist()
        return HSLColor(h, s, l)

    def set_channel(self, source: SourceImage, channel) -> None:
        """
        Writes the brightness of every source pixel into one component.

        Source pixel (0, 0) lands on canvas pixel (0, 0). Canvas pixels the
        source does not cover keep their current value for that component.
        """
        try:
            channel = Channel(channel)
        except ValueError:
            raise InvalidChannelError(f"Invalid component offset: {channel}") from None

        src_h, src_w = source.pixels.shape[:2]
        rows = min(src_h, self.height)
        cols = min(src_w, self.width)
        if rows == 0 or cols == 0:
            return

        values = scale_to_16bit(brightness(source.pixels[:rows, :cols]))
        self._pixels[:rows, :cols, channel] = values

    def adjust_hue(self, amount: float) -> None:
        """Rotates every hue forward by `amount` of a full turn, wrapping around."""
        step = hue_step(amount)
        if step == 0:
            return

        # uint16 addition wraps, which is exactly modulo arithmetic on the hue circle
        hue = self._pixels[:, :, Channel.HUE]
        hue += np.uint16(step)

    def render(self) -> "RenderedImage":
        """Freezes the canvas and returns a read-only RGB view of it."""
        self._pixels.flags.writeable = False
        return RenderedImage(self._pixels)


class RenderedImage:
    """
    Read-only RGB image backed by HSL pixels.

    Nothing is converted up front; each read turns HSL into RGB.
    """

    def __init__(self, hsl_pixels: np.ndarray):
        if hsl_pixels.ndim != 3 or hsl_pixels.shape[2] != 3:
            raise ValueError("HSL pixels must have shape (height, width, 3)")
        if hsl_pixels.dtype != np.uint16:
            raise ValueError("HSL pixels must have dtype uint16")

        self._hsl = hsl_pixels.view()
        self._hsl.flags.writeable = False

    @property
    def size(self) -> Tuple[int, int]:
        return self._hsl.shape[1], self._hsl.shape[0]

    @property
    def width(self) -> int:
        return self._hsl.shape[1]

    @property
    def height(self) -> int:
        return self._hsl.shape[0]

    @property
    def hsl_pixels(self) -> np.ndarray:
        """The underlying (height, width, 3) HSL buffer, read-only."""
        return self._hsl

    @property
    def bounds(self) -> Tuple[int, int, int, int]:
        return 0, 0, self.width, self.height

    def hsl_at(self, x: int, y: int) -> HSLColor:
        if not (0 <= x < self.width and 0 <= y < self.height):
            return HSLColor()
        h, s, l = self._hsl[y, x].tolist()
        return HSLColor(h, s, l)

    def at(self, x: int, y: int) -> Tuple[int, int, int, int]:
        return self.hsl_at(x, y).rgba()

    def to_rgb16(self) -> np.ndarray:
        out = np.empty(self._hsl.shape, dtype=np.uint16)
        for top in range(0, self.height, RENDER_BAND_ROWS):
            band = slice(top, top + RENDER_BAND_ROWS)
            out[band] = hsl_to_rgb(self._hsl[band])
        return out

    def to_rgb8(self) -> np.ndarray:
        out = np.empty(self._hsl.shape, dtype=np.uint8)
        for top in range(0, self.height, RENDER_BAND_ROWS):
            band = slice(top, top + RENDER_BAND_ROWS)
            out[band] = to_8bit(hsl_to_rgb(self._hsl[band]))
        return out

    def __repr__(self) -> str:
        return f"RenderedImage({self.width}x{self.height})"
