"""Image conversion and export utilities.

Rendered images are linear float arrays of shape (H, W, 3), row 0 at the
top. Before they can be written out they go through a fixed output
transform:

    1. gamma 2 correction (square root of each channel),
    2. clamp to [0, 0.999],
    3. quantize as int(256 * x), giving values in [0, 255].

Supported formats:
    - PPM P3 (see spheretrace.output.ppm)
    - PNG (8-bit via Pillow)

Example:
    >>> from spheretrace.output.export import image_to_uint8, save_png
    >>> pixels = image_to_uint8(renderer.get_image_numpy())
    >>> save_png(pixels, "output.png")
"""

from __future__ import annotations

import logging
import os

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

logger = logging.getLogger(__name__)

# Upper clamp before quantization, so 256 * x never reaches 256
MAX_INTENSITY = 0.999


def _check_image_shape(image: npt.NDArray) -> None:
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an image of shape (H, W, 3), got {image.shape}")


def apply_gamma(image: npt.NDArray[np.floating]) -> npt.NDArray[np.float64]:
    """Apply gamma 2 correction (per-channel square root).

    Negative and NaN channels are treated as 0.
    """
    linear = np.nan_to_num(image.astype(np.float64), nan=0.0)
    return np.sqrt(np.maximum(linear, 0.0))


def image_to_uint8(image: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Convert a linear image to 8-bit output values.

    Args:
        image: Linear image array of shape (H, W, 3).

    Returns:
        8-bit image array of shape (H, W, 3) with dtype uint8.

    Raises:
        ValueError: If the image does not have shape (H, W, 3).
    """
    _check_image_shape(image)

    corrected = np.clip(apply_gamma(image), 0.0, MAX_INTENSITY)
    return (256.0 * corrected).astype(np.uint8)


def save_png(pixels: npt.NDArray[np.uint8], filepath: str | os.PathLike[str]) -> None:
    """Save an 8-bit image as a PNG file.

    Args:
        pixels: Image array of shape (H, W, 3) with dtype uint8, as
            returned by image_to_uint8().
        filepath: Output file path (should end in .png).

    Raises:
        ValueError: If the array has the wrong shape or dtype.
    """
    _check_image_shape(pixels)
    if pixels.dtype != np.uint8:
        raise ValueError(f"Expected dtype uint8, got {pixels.dtype}")

    pil_image = PILImage.fromarray(pixels)
    pil_image.save(filepath)
    logger.info("Saved PNG to %s", filepath)
