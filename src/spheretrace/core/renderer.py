"""Scanline renderer wrapping the core integrator.

The Renderer owns the render target dimensions, seeds one random stream per
pixel, and renders rows from the top of the image to the bottom. Progress is
reported before each row as the number of rows left after it, either
through a callback or by iterating render_progressive().

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from spheretrace.core.renderer import Renderer
    >>> from spheretrace.scene.presets import create_material_scene
    >>> from spheretrace.camera.viewport import setup_camera
    >>>
    >>> scene, camera = create_material_scene(aspect_ratio=16.0 / 9.0)
    >>> setup_camera(camera)
    >>>
    >>> renderer = Renderer(400, 225)
    >>> renderer.render(scene.world, samples_per_pixel=100, max_depth=50)
    >>> pixels = renderer.get_image_uint8()
"""

import logging
import time
from collections.abc import Callable, Generator

import numpy as np
import numpy.typing as npt

from spheretrace.core.integrator import (
    MAX_DEPTH,
    ShadingMode,
    clear_render_target,
    get_pixel_sums_numpy,
    render_scanline,
    setup_render_target,
)
from spheretrace.core.sampler import seed_streams
from spheretrace.output.export import image_to_uint8

logger = logging.getLogger(__name__)

# Callback receives (row_about_to_render, total_rows); rows count down to 0
ProgressCallback = Callable[[int, int], None]


class Renderer:
    """Renders a scene one scanline at a time.

    Every pixel samples from its own random stream, so the same seed always
    produces the same image regardless of how pixels are scheduled.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
    """

    def __init__(self, width: int, height: int) -> None:
        """Initialize the renderer and its render target.

        Args:
            width: Image width in pixels.
            height: Image height in pixels.

        Raises:
            ValueError: If dimensions are not positive or exceed the maximum.
        """
        self._width = width
        self._height = height
        self._samples_per_pixel = 0
        setup_render_target(width, height)

    @property
    def width(self) -> int:
        """Get the image width."""
        return self._width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self._height

    @property
    def samples_per_pixel(self) -> int:
        """Get the samples per pixel of the last render (0 before rendering)."""
        return self._samples_per_pixel

    def reset(self) -> None:
        """Clear the image so the renderer can be reused."""
        clear_render_target()
        self._samples_per_pixel = 0

    def render(
        self,
        world,
        samples_per_pixel: int,
        max_depth: int = MAX_DEPTH,
        seed: int = 0,
        shading: ShadingMode = ShadingMode.MATERIAL,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Render the full image.

        Args:
            world: The scene (a HittableList).
            samples_per_pixel: Number of jittered samples averaged per pixel.
            max_depth: Maximum number of bounces per sample.
            seed: Seed for the per-pixel random streams.
            shading: The ShadingMode to use.
            callback: Optional function called before each row with
                (row, total_rows). Rows count down from height - 1 to 0.

        Raises:
            ValueError: If samples_per_pixel or max_depth is invalid.
        """
        for remaining, total in self.render_progressive(
            world, samples_per_pixel, max_depth=max_depth, seed=seed, shading=shading
        ):
            if callback is not None:
                callback(remaining, total)

    def render_progressive(
        self,
        world,
        samples_per_pixel: int,
        max_depth: int = MAX_DEPTH,
        seed: int = 0,
        shading: ShadingMode = ShadingMode.MATERIAL,
    ) -> Generator[tuple[int, int], None, None]:
        """Render the full image, yielding before each row.

        Generator form of render(). Each row is rendered when the generator
        is resumed after yielding (row, total_rows), so the first yield
        reports ``height - 1`` rows remaining and the last reports 0.

        Example:
            >>> for remaining, total in renderer.render_progressive(world, 10):
            ...     print(f"Scanlines remaining: {remaining}")
        """
        if samples_per_pixel <= 0:
            raise ValueError(f"samples_per_pixel must be positive, got {samples_per_pixel}")
        if max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {max_depth}")

        logger.info(
            "Rendering %dx%d, %d samples per pixel, max depth %d, seed %d",
            self._width,
            self._height,
            samples_per_pixel,
            max_depth,
            seed,
        )
        start = time.perf_counter()

        self.reset()
        seed_streams(seed, self._width * self._height)

        for row in reversed(range(self._height)):
            yield (row, self._height)
            render_scanline(world, row, samples_per_pixel, max_depth, shading)

        self._samples_per_pixel = samples_per_pixel
        logger.info("Render finished in %.2fs", time.perf_counter() - start)

    def get_image_numpy(self) -> npt.NDArray[np.float64]:
        """Get the averaged linear color of every pixel.

        Returns:
            Array of shape (height, width, 3), row 0 being the top of the
            image. Values are not clamped.

        Raises:
            RuntimeError: If nothing has been rendered yet.
        """
        if self._samples_per_pixel == 0:
            raise RuntimeError("Nothing rendered yet. Call render() first.")
        return get_pixel_sums_numpy() / float(self._samples_per_pixel)

    def get_image_uint8(self) -> npt.NDArray[np.uint8]:
        """Get the gamma-corrected 8-bit image (see output.export.image_to_uint8)."""
        return image_to_uint8(self.get_image_numpy())

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"Renderer(width={self.width}, height={self.height}, "
            f"samples_per_pixel={self.samples_per_pixel})"
        )
