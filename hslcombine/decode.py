"""
Format-sniffing image decoders.

Every decoder returns the same thing: an (H, W, 3) uint16 RGB array with any
alpha premultiplied into the color. Callers never branch on the file format.
"""

from __future__ import annotations

import io
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple, Union

import cv2 as cv
import numpy as np
from PIL import Image, UnidentifiedImageError

from hslcombine.colorspace import FIXED_MAX
from hslcombine.console import warn
from hslcombine.errors import DecodeError, OpenError


# Longest signature any registered decoder inspects.
HEADER_SIZE = 16

# Netpbm headers are short; MAXVAL is always found in the first few hundred bytes.
NETPBM_HEADER_LIMIT = 1024
NETPBM_SCALED = (b"P2", b"P3", b"P5", b"P6", b"P7")

_NETPBM_TOKEN = re.compile(rb"(?:\s|#[^\r\n]*)*([^\s#]+)")
_PAM_MAXVAL = re.compile(rb"^MAXVAL\s+(\d+)", re.MULTILINE)


@dataclass(frozen=True)
class SourceImage:
    pixels: np.ndarray  # Shape (H, W, 3), dtype uint16, RGB order.
    path: Optional[Path] = None

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height


def widen_to_16bit(samples: np.ndarray) -> np.ndarray:
    if samples.dtype == np.uint8:
        # v * 257 maps 0xff onto 0xffff exactly
        return samples.astype(np.uint16) * np.uint16(257)
    if samples.dtype == np.uint16:
        return samples
    if samples.dtype in (np.float32, np.float64):
        return (np.clip(samples, 0.0, 1.0) * FIXED_MAX).astype(np.uint16)
    raise ValueError(f"Unsupported sample type: {samples.dtype}")


def premultiply(rgb16: np.ndarray, alpha16: np.ndarray) -> np.ndarray:
    scaled = rgb16.astype(np.uint32) * alpha16[..., np.newaxis].astype(np.uint32)
    return (scaled // FIXED_MAX).astype(np.uint16)


def rescale_to_16bit(samples: np.ndarray, maxval: int) -> np.ndarray:
    """Stretches samples in [0, maxval] onto [0, 0xffff]."""
    if maxval <= 0 or maxval > FIXED_MAX:
        raise ValueError(f"Invalid maximum sample value: {maxval}")
    if maxval == FIXED_MAX:
        return samples

    clipped = np.minimum(samples, maxval).astype(np.uint32)
    return (clipped * FIXED_MAX // maxval).astype(np.uint16)


def netpbm_maxval(data: bytes) -> int:
    """Reads MAXVAL from a PGM/PPM (P2, P3, P5, P6) or PAM (P7) header."""
    header = data[:NETPBM_HEADER_LIMIT]

    if header[:2] == b"P7":
        match = _PAM_MAXVAL.search(header.split(b"ENDHDR", 1)[0])
        if match is None:
            raise ValueError("PAM header has no MAXVAL")
        return int(match.group(1))

    # Magic number, then width, height and maxval separated by whitespace or comments
    tokens = []
    pos = 2
    while len(tokens) < 3:
        match = _NETPBM_TOKEN.match(header, pos)
        if match is None:
            raise ValueError("truncated netpbm header")
        tokens.append(match.group(1))
        pos = match.end()

    try:
        return int(tokens[2])
    except ValueError:
        raise ValueError(f"Invalid netpbm maxval: {tokens[2]!r}") from None


def to_rgb16(pixels: np.ndarray, order: str = "RGB") -> np.ndarray:
    """Normalizes gray, RGB(A) or BGR(A) arrays to 16-bit opaque RGB."""
    pixels = widen_to_16bit(pixels)

    if pixels.ndim == 2:
        return np.repeat(pixels[:, :, np.newaxis], 3, axis=2)

    if pixels.ndim != 3 or pixels.shape[2] not in (1, 2, 3, 4):
        raise ValueError(f"Unsupported pixel layout: {pixels.shape}")

    channels = pixels.shape[2]
    if channels in (1, 2):
        color = np.repeat(pixels[:, :, :1], 3, axis=2)
    else:
        color = pixels[:, :, :3]
        if order == "BGR":
            color = color[:, :, ::-1]

    if channels in (2, 4):
        color = premultiply(color, pixels[:, :, -1])

    return np.ascontiguousarray(color)


class ImageDecoder(ABC):
    """Decodes one family of on-disk formats."""

    name = "base"
    signatures: Tuple[bytes, ...] = ()

    def accepts(self, header: bytes) -> bool:
        return any(header.startswith(sig) for sig in self.signatures)

    @abstractmethod
    def decode(self, data: bytes) -> np.ndarray:
        """Returns (H, W, 3) uint16 RGB pixels, raising ValueError on bad data."""


class OpenCVDecoder(ImageDecoder):
    name = "opencv"
    signatures = (
        b"\xff\xd8\xff",  # JPEG
        b"\x89PNG\r\n\x1a\n",
        b"BM",
        b"P1", b"P2", b"P3", b"P4", b"P5", b"P6", b"P7",  # PBM/PGM/PPM/PAM
        b"II*\x00", b"MM\x00*",  # TIFF
    )

    def accepts(self, header: bytes) -> bool:
        if header[:4] == b"RIFF" and header[8:12] == b"WEBP":
            return True
        return super().accepts(header)

    def decode(self, data: bytes) -> np.ndarray:
        buffer = np.frombuffer(data, dtype=np.uint8)
        try:
            img = cv.imdecode(buffer, cv.IMREAD_UNCHANGED)
        except cv.error as exc:
            raise ValueError(str(exc).strip()) from exc
        if img is None:
            raise ValueError("corrupt or truncated image data")

        # 16-bit netpbm samples come back unscaled, relative to the file's MAXVAL
        if img.dtype == np.uint16 and data[:2] in NETPBM_SCALED:
            img = rescale_to_16bit(img, netpbm_maxval(data))
        return to_rgb16(img, order="BGR")


class PillowDecoder(ImageDecoder):
    name = "pillow"
    signatures = (b"GIF87a", b"GIF89a")

    def decode(self, data: bytes) -> np.ndarray:
        try:
            with Image.open(io.BytesIO(data)) as pic:
                if getattr(pic, "n_frames", 1) > 1:
                    warn(f"Animated image with {pic.n_frames} frames, using the first frame")
                pic.seek(0)
                rgba = np.asarray(pic.convert("RGBA"))
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, EOFError) as exc:
            raise ValueError(str(exc)) from exc
        return to_rgb16(rgba, order="RGB")


DECODERS: List[ImageDecoder] = [OpenCVDecoder(), PillowDecoder()]


def register_decoder(decoder: ImageDecoder) -> None:
    """Adds a decoder; later registrations win over earlier ones."""
    DECODERS.insert(0, decoder)


def find_decoder(header: bytes) -> Optional[ImageDecoder]:
    for decoder in DECODERS:
        if decoder.accepts(header):
            return decoder
    return None


def decode_image(data: bytes, filename: Optional[Union[str, Path]] = None) -> SourceImage:
    label = filename if filename is not None else "<memory>"
    decoder = find_decoder(data[:HEADER_SIZE])
    if decoder is None:
        raise DecodeError(label, "image: unknown format")

    try:
        pixels = decoder.decode(data)
    except ValueError as exc:
        raise DecodeError(label, exc) from exc

    path = Path(filename) if filename is not None else None
    return SourceImage(pixels=pixels, path=path)


def load_image(path: Union[str, Path]) -> SourceImage:
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise OpenError(path, exc.strerror or exc) from exc
    return decode_image(data, path)
