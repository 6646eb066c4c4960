"""Render settings.

RenderConfig collects everything a render needs apart from the scene. It
is plain Python and safe to import before Taichi is initialized.
"""

from dataclasses import dataclass

# Maximum supported image dimensions (the render target is preallocated)
MAX_IMAGE_WIDTH = 1024
MAX_IMAGE_HEIGHT = 1024

DEFAULT_ASPECT_RATIO = 16.0 / 9.0


@dataclass
class RenderConfig:
    """Settings for a single render.

    Attributes:
        image_width: Image width in pixels.
        aspect_ratio: Width divided by height; the height is derived.
        samples_per_pixel: Number of jittered samples averaged per pixel.
        max_depth: Maximum number of bounces per sample.
        seed: Seed for the per-pixel random streams.
        viewport_height: Camera viewport height in world units.
        focal_length: Camera focal length in world units.
        normals: Shade by surface normal instead of by material.
    """

    image_width: int = 400
    aspect_ratio: float = DEFAULT_ASPECT_RATIO
    samples_per_pixel: int = 100
    max_depth: int = 50
    seed: int = 0
    viewport_height: float = 2.0
    focal_length: float = 1.0
    normals: bool = False

    def __post_init__(self) -> None:
        if self.image_width <= 0:
            raise ValueError(f"image_width must be positive, got {self.image_width}")
        if self.aspect_ratio <= 0.0:
            raise ValueError(f"aspect_ratio must be positive, got {self.aspect_ratio}")
        if self.samples_per_pixel <= 0:
            raise ValueError(
                f"samples_per_pixel must be positive, got {self.samples_per_pixel}"
            )
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {self.max_depth}")
        if self.seed < 0:
            raise ValueError(f"seed must be non-negative, got {self.seed}")
        if self.viewport_height <= 0.0:
            raise ValueError(f"viewport_height must be positive, got {self.viewport_height}")
        if self.focal_length <= 0.0:
            raise ValueError(f"focal_length must be positive, got {self.focal_length}")

        height = self.image_height
        if height <= 0:
            raise ValueError(
                f"Image height {height} (width {self.image_width} / aspect "
                f"{self.aspect_ratio}) must be positive"
            )
        if self.image_width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
            raise ValueError(
                f"Image dimensions ({self.image_width}x{height}) exceed maximum "
                f"supported ({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
            )

    @property
    def image_height(self) -> int:
        """Image height in pixels, truncated from width / aspect_ratio."""
        return int(self.image_width / self.aspect_ratio)
