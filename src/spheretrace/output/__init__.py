"""Output module for encoding and saving rendered images.

Components:
    export: Gamma correction, 8-bit quantization, PNG export
    ppm: Plain-text PPM (P3) encoding
    progress: Scanline progress line on stderr

Example:
    >>> from spheretrace.output import image_to_uint8, write_ppm
    >>> write_ppm(image_to_uint8(renderer.get_image_numpy()))
"""

from .export import (
    MAX_INTENSITY,
    apply_gamma,
    image_to_uint8,
    save_png,
)
from .ppm import encode_ppm, iter_ppm_lines, ppm_header, write_ppm
from .progress import ScanlineProgress

__all__ = [
    # Export
    "MAX_INTENSITY",
    "apply_gamma",
    "image_to_uint8",
    "save_png",
    # PPM
    "ppm_header",
    "iter_ppm_lines",
    "encode_ppm",
    "write_ppm",
    # Progress
    "ScanlineProgress",
]
