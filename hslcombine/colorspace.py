from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np


# Every stored component is a fraction out of 0xffff.
FIXED_MAX = 0xFFFF

# Distinct positions on the hue circle; uint16 addition wraps at this modulus.
HUE_STEPS = 0x10000


def clamp01(values) -> np.ndarray:
    return np.clip(values, 0.0, 1.0)


def scale_to_16bit(values) -> np.ndarray:
    """Linearly maps [0, 1] onto [0, 0xffff], clamping out-of-range input.

    Fractions are truncated toward zero, the same as an integer cast.
    """
    values = clamp01(np.asarray(values, dtype=np.float64))
    return (values * FIXED_MAX).astype(np.uint16)


def to_8bit(rgb16: np.ndarray) -> np.ndarray:
    return (np.asarray(rgb16, dtype=np.uint16) >> 8).astype(np.uint8)


def brightness(rgb16: np.ndarray) -> np.ndarray:
    """Grayscale proxy for 16-bit colors: (R + G + B) / 3, normalized to [0, 1].

    The last axis holds the channels; a fourth (alpha) channel is ignored.
    """
    rgb16 = np.asarray(rgb16)
    if rgb16.shape[-1] not in (3, 4):
        raise ValueError("Colors must have 3 or 4 channels")

    total = rgb16[..., :3].astype(np.uint32).sum(axis=-1)
    return total / (3.0 * FIXED_MAX)


def hue_to_rgb(h) -> np.ndarray:
    h6 = np.asarray(h, dtype=np.float64) * 6.0
    r = np.abs(h6 - 3.0) - 1.0
    g = 2.0 - np.abs(h6 - 2.0)
    b = 2.0 - np.abs(h6 - 4.0)
    return clamp01(np.stack([r, g, b], axis=-1))


def hsl_to_rgb(hsl16: np.ndarray) -> np.ndarray:
    """Converts 16-bit HSL triples (last axis) to 16-bit RGB triples."""
    hsl = np.asarray(hsl16, dtype=np.float64) / FIXED_MAX
    h = hsl[..., 0]
    s = hsl[..., 1]
    l = hsl[..., 2]

    rgb = hue_to_rgb(h)
    chroma = (1.0 - np.abs(2.0 * l - 1.0)) * s
    rgb = (rgb - 0.5) * chroma[..., np.newaxis] + l[..., np.newaxis]

    return scale_to_16bit(rgb)


def hue_step(amount: float) -> int:
    """Fixed-point offset that rotates hue forward by `amount` of a turn."""
    return int(round(amount * HUE_STEPS)) % HUE_STEPS


@dataclass(frozen=True)
class HSLColor:
    h: int = 0
    s: int = 0
    l: int = 0

    @classmethod
    def from_fractions(cls, h: float, s: float, l: float) -> "HSLColor":
        h16, s16, l16 = scale_to_16bit([h, s, l]).tolist()
        return cls(h16, s16, l16)

    def components(self) -> Tuple[float, float, float]:
        return self.h / FIXED_MAX, self.s / FIXED_MAX, self.l / FIXED_MAX

    def rgba(self) -> Tuple[int, int, int, int]:
        r, g, b = hsl_to_rgb(np.array([self.h, self.s, self.l], dtype=np.uint16)).tolist()
        return r, g, b, FIXED_MAX

    def __str__(self) -> str:
        h, s, l = self.components()
        return f"({h:f}, {s:f}, {l:f})"
