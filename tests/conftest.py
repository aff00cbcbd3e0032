from pathlib import Path

import cv2 as cv
import numpy as np
import pytest

from hslcombine.decode import SourceImage


@pytest.fixture
def write_solid(tmp_path: Path):
    """Writes a single-color image with OpenCV and returns its path."""

    def _write(name: str, width: int, height: int, value=0) -> Path:
        if np.isscalar(value):
            pixels = np.full((height, width), value, dtype=np.uint8)
        else:
            # value is RGB; OpenCV writes BGR
            pixels = np.empty((height, width, 3), dtype=np.uint8)
            pixels[:, :] = tuple(value)[::-1]
        path = tmp_path / name
        assert cv.imwrite(str(path), pixels)
        return path

    return _write


@pytest.fixture
def solid_source():
    """Builds an in-memory source image filled with one 16-bit gray value."""

    def _build(width: int, height: int, value16: int) -> SourceImage:
        return SourceImage(pixels=np.full((height, width, 3), value16, dtype=np.uint16))

    return _build
