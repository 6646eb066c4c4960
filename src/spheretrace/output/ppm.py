"""Plain-text PPM (P3) encoding.

A P3 file is three header lines followed by one ``R G B`` line per pixel,
rows from the top of the image to the bottom:

    P3
    <width> <height>
    255
    255 255 255
    ...
"""

from __future__ import annotations

import sys
from typing import TextIO

import numpy as np
import numpy.typing as npt

MAX_COLOR_VALUE = 255


def ppm_header(width: int, height: int) -> str:
    """Return the P3 header for an image of the given size."""
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    return f"P3\n{width} {height}\n{MAX_COLOR_VALUE}\n"


def _check_pixels(pixels: npt.NDArray[np.uint8]) -> None:
    if pixels.ndim != 3 or pixels.shape[2] != 3:
        raise ValueError(f"Expected pixels of shape (H, W, 3), got {pixels.shape}")
    if pixels.dtype != np.uint8:
        raise ValueError(f"Expected dtype uint8, got {pixels.dtype}")


def iter_ppm_lines(pixels: npt.NDArray[np.uint8]):
    """Yield the lines of a P3 image, each ending in a newline.

    Args:
        pixels: Image array of shape (H, W, 3) with dtype uint8, row 0 at
            the top.

    Raises:
        ValueError: If the array has the wrong shape or dtype.
    """
    _check_pixels(pixels)
    height, width, _ = pixels.shape

    yield ppm_header(width, height)
    for row in pixels:
        for r, g, b in row.tolist():
            yield f"{r} {g} {b}\n"


def encode_ppm(pixels: npt.NDArray[np.uint8]) -> str:
    """Encode an 8-bit image as a P3 string."""
    return "".join(iter_ppm_lines(pixels))


def write_ppm(pixels: npt.NDArray[np.uint8], stream: TextIO | None = None) -> None:
    """Write an 8-bit image as P3 to a text stream (stdout by default)."""
    if stream is None:
        stream = sys.stdout
    stream.writelines(iter_ppm_lines(pixels))
    stream.flush()
