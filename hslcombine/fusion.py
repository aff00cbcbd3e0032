from __future__ import annotations

from pathlib import Path
from typing import Sequence, Tuple, Union

from hslcombine.canvas import Channel, HSLCanvas, RenderedImage
from hslcombine.console import log
from hslcombine.decode import load_image
from hslcombine.errors import ArityError, RangeError


PathLike = Union[str, Path]


def get_max_dimensions(image_files: Sequence[PathLike]) -> Tuple[int, int]:
    """Decodes each file in turn and returns the largest width and height seen."""
    max_w = 0
    max_h = 0
    for filename in image_files:
        log(f"Getting dimensions for {filename}...")
        pic = load_image(filename)
        w, h = pic.size
        del pic

        max_w = max(max_w, w)
        max_h = max(max_h, h)
    return max_w, max_h


def combine_images(image_files: Sequence[PathLike], adjust_hue: float = 0.0) -> RenderedImage:
    """
    Maps the brightness of three images onto hue, saturation and luminosity.

    Only one decoded input is held in memory at a time; the first failure
    aborts the whole operation.
    """
    if len(image_files) != 3:
        raise ArityError(f"Need exactly 3 image files, got {len(image_files)}")

    if not (0.0 <= adjust_hue <= 1.0):
        raise RangeError("Hue adjustment values must be in [0, 1]")

    w, h = get_max_dimensions(image_files)
    log(f"Combining images into a {w}x{h} image.")
    combined = HSLCanvas(w, h)

    for channel, filename in zip(Channel, image_files):
        log(f"Setting {channel.label} using {filename}...")
        pic = load_image(filename)
        combined.set_channel(pic, channel)
        del pic

    if adjust_hue != 0:
        log("Adjusting hue...")
        combined.adjust_hue(adjust_hue)

    return combined.render()
