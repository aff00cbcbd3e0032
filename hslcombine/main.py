# hslcombine/main.py

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import NoReturn, Optional, Sequence, Union

import cv2 as cv

from hslcombine.canvas import RenderedImage
from hslcombine.console import error, log
from hslcombine.errors import CombineError, EncodeError
from hslcombine.fusion import combine_images


JPEG_QUALITY = 100


def save_jpeg(path: Union[str, Path], image: RenderedImage, quality: int = JPEG_QUALITY) -> None:
    rgb = image.to_rgb8()
    try:
        ok, encoded = cv.imencode(
            ".jpg",
            cv.cvtColor(rgb, cv.COLOR_RGB2BGR),
            [cv.IMWRITE_JPEG_QUALITY, int(quality)],
        )
    except cv.error as exc:
        raise EncodeError(path, str(exc).strip()) from exc
    if not ok:
        raise EncodeError(path, "JPEG encoder rejected the image")

    try:
        Path(path).write_bytes(encoded.tobytes())
    except OSError as exc:
        raise EncodeError(path, exc.strerror or exc) from exc


class _ArgumentParser(argparse.ArgumentParser):
    # Usage problems are ordinary failures: exit status 1, not argparse's 2
    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\nRun with -help for usage information.\n")


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        description="Combine three images into one by mapping their brightness to "
        "the hue, saturation, and luminosity components of HSL.",
        add_help=False,
    )
    parser.add_argument(
        "-H",
        dest="hue",
        required=True,
        metavar="PATH",
        help="The path to the image file to map to the hue component. Required.",
    )
    parser.add_argument(
        "-S",
        dest="saturation",
        required=True,
        metavar="PATH",
        help="The path to the image file to map to the saturation component. Required.",
    )
    parser.add_argument(
        "-L",
        dest="luminosity",
        required=True,
        metavar="PATH",
        help="The path to the image file to map to the luminosity component. Required.",
    )
    parser.add_argument(
        "-o",
        dest="output",
        required=True,
        metavar="PATH",
        help="The name of the .jpg file to create. Required.",
    )
    parser.add_argument(
        "-adjust_hue",
        type=float,
        default=0.0,
        metavar="AMOUNT",
        help='An amount, in the range [0, 1], by which to "rotate" hue values (default: 0).',
    )
    parser.add_argument("-help", "--help", action="help", help="Show this message and exit.")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        output_image = combine_images(
            [args.hue, args.saturation, args.luminosity],
            args.adjust_hue,
        )
    except CombineError as exc:
        error(f"Error combining images: {exc}")
        return 1

    log(f"Writing combined image to {args.output}")
    try:
        save_jpeg(args.output, output_image)
    except EncodeError as exc:
        error(f"Failed creating output JPEG image: {exc}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
