"""Path tracing integrator for Monte Carlo light transport.

This module implements the color estimator and the render kernels. For a
ray and a depth budget, ray_color():

    1. returns black once the depth budget is exhausted,
    2. intersects the scene in [T_MIN, inf); T_MIN > 0 keeps a scattered
       ray from immediately re-hitting the surface it left,
    3. on a hit, asks the material to scatter; absorption returns black,
       otherwise the attenuation multiplies the path throughput and the
       scattered ray continues with one less bounce,
    4. on a miss, returns throughput times the sky gradient.

Exactly one scatter direction is followed per bounce. Noise is reduced by
averaging many samples per pixel, not by branching.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from spheretrace.core.integrator import render_image, setup_render_target
    >>> from spheretrace.scene.presets import create_material_scene
    >>> from spheretrace.camera.viewport import setup_camera
    >>>
    >>> scene, camera = create_material_scene(aspect_ratio=16.0 / 9.0)
    >>> setup_camera(camera)
    >>> setup_render_target(400, 225)
    >>> render_image(scene.world, samples_per_pixel=100, max_depth=50)
"""

from enum import IntEnum

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from spheretrace.camera.viewport import get_ray_jittered
from spheretrace.config import MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH
from spheretrace.core.ray import Ray, make_ray
from spheretrace.core.sampler import MAX_STREAMS
from spheretrace.core.vec3 import normalize, vec3
from spheretrace.materials.registry import scatter_material


class ShadingMode(IntEnum):
    """How a primary ray is turned into a color."""

    MATERIAL = 0  # Full material scattering (ray_color)
    NORMALS = 1  # Surface normal visualization (ray_color_normals)


# =============================================================================
# Rendering Constants
# =============================================================================

# Default maximum number of bounces per path
MAX_DEPTH = 50

# Intersection window for every bounce
T_MIN = 0.001
T_MAX = tm.inf

# Sky gradient endpoints (bottom and top of the background)
SKY_HORIZON_COLOR = (1.0, 1.0, 1.0)
SKY_ZENITH_COLOR = (0.5, 0.7, 1.0)


# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Per-pixel sum of sample colors, indexed [column, row] with row 0 at the bottom
_color_buffer = ti.Vector.field(3, dtype=ti.f64, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

_render_target_initialized = ti.field(dtype=ti.i32, shape=())

# Result slot for trace_ray()
_trace_result = ti.Vector.field(3, dtype=ti.f64, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Set the active image dimensions and clear the color buffer.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If a dimension is not positive or exceeds the maximum.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )
    # One random stream per pixel
    assert width * height <= MAX_STREAMS

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the color buffer to zero."""
    _color_buffer.fill(0.0)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


def get_pixel_sums_numpy() -> npt.NDArray[np.float64]:
    """Get the per-pixel sample sums as a NumPy array.

    Returns:
        Array of shape (height, width, 3), row 0 being the top of the image.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    image = _color_buffer.to_numpy()[:width, :height, :]

    # (width, height, 3) bottom-up -> (height, width, 3) top-down
    image = np.transpose(image, (1, 0, 2))
    return np.flipud(image).astype(np.float64)


# =============================================================================
# Color Estimators
# =============================================================================


@ti.func
def background_color(direction: vec3) -> vec3:
    """Sky gradient seen by rays that escape the scene.

    Blends from SKY_HORIZON_COLOR to SKY_ZENITH_COLOR with
    ``t = 0.5 * (unit(direction).y + 1)``.
    """
    unit_direction = normalize(direction)
    t = 0.5 * (unit_direction.y + 1.0)
    horizon = vec3(SKY_HORIZON_COLOR[0], SKY_HORIZON_COLOR[1], SKY_HORIZON_COLOR[2])
    zenith = vec3(SKY_ZENITH_COLOR[0], SKY_ZENITH_COLOR[1], SKY_ZENITH_COLOR[2])
    return (1.0 - t) * horizon + t * zenith


@ti.func
def ray_color(world: ti.template(), ray: Ray, depth: ti.i32, stream: ti.i32) -> vec3:
    """Estimate the radiance arriving along a ray.

    Iterative form of the depth-bounded recursion
    ``color(r, d) = attenuation * color(scattered, d - 1)``.

    Args:
        world: The scene (a HittableList).
        ray: The ray to follow.
        depth: Remaining number of bounces. 0 yields black.
        stream: The random stream for scattering.

    Returns:
        The estimated color.
    """
    color = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    current = ray
    remaining = depth

    active = 1
    while active == 1:
        if remaining <= 0:
            # Bounce budget exhausted: the path carries no light
            active = 0
        else:
            rec = world.hit(current, T_MIN, T_MAX)
            if rec.hit == 0:
                color = throughput * background_color(current.direction)
                active = 0
            else:
                scattered_direction, attenuation, did_scatter = scatter_material(
                    rec.material_id, current, rec, stream
                )
                if did_scatter == 0:
                    active = 0
                else:
                    throughput *= attenuation
                    current = make_ray(rec.position, scattered_direction)
                    remaining -= 1

    return color


@ti.func
def ray_color_normals(world: ti.template(), ray: Ray) -> vec3:
    """Visualize surface normals: ``0.5 * (normal + 1)`` on hit, sky on miss."""
    color = vec3(0.0, 0.0, 0.0)
    rec = world.hit(ray, T_MIN, T_MAX)
    if rec.hit == 1:
        color = 0.5 * (rec.normal + vec3(1.0, 1.0, 1.0))
    else:
        color = background_color(ray.direction)
    return color


@ti.func
def sample_pixel(
    world: ti.template(),
    pixel_i: ti.i32,
    pixel_j: ti.i32,
    width: ti.i32,
    height: ti.i32,
    max_depth: ti.i32,
    shading: ti.i32,
    stream: ti.i32,
) -> vec3:
    """Trace one jittered primary ray through a pixel."""
    ray = get_ray_jittered(pixel_i, pixel_j, width, height, stream)
    color = vec3(0.0, 0.0, 0.0)
    if shading == int(ShadingMode.NORMALS):
        color = ray_color_normals(world, ray)
    else:
        color = ray_color(world, ray, max_depth, stream)
    return color


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_scanline(
    world: ti.template(),
    row: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
    shading: ti.i32,
):
    """Accumulate all samples for every pixel of one row (pixels in parallel)."""
    for i in range(width):
        stream = row * width + i
        pixel_color = vec3(0.0, 0.0, 0.0)
        s = 0
        while s < samples_per_pixel:
            pixel_color += sample_pixel(world, i, row, width, height, max_depth, shading, stream)
            s += 1
        _color_buffer[i, row] = pixel_color


def render_scanline(
    world,
    row: int,
    samples_per_pixel: int,
    max_depth: int = MAX_DEPTH,
    shading: ShadingMode = ShadingMode.MATERIAL,
) -> None:
    """Render one image row into the color buffer.

    Streams for the row's pixels must already be seeded (see
    spheretrace.core.sampler.seed_streams).

    Args:
        world: The scene (a HittableList).
        row: The row to render (0 = bottom).
        samples_per_pixel: Number of samples summed per pixel.
        max_depth: Bounce budget per sample.
        shading: The ShadingMode to use.

    Raises:
        RuntimeError: If render target has not been set up.
        ValueError: If the row is out of range.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    if row < 0 or row >= height:
        raise ValueError(f"Row {row} is outside [0, {height})")
    _render_scanline(world, row, width, height, samples_per_pixel, max_depth, int(shading))


def render_image(
    world,
    samples_per_pixel: int,
    max_depth: int = MAX_DEPTH,
    shading: ShadingMode = ShadingMode.MATERIAL,
) -> None:
    """Render every row, top to bottom. Streams must already be seeded."""
    _, height = get_image_dimensions()
    for row in reversed(range(height)):
        render_scanline(world, row, samples_per_pixel, max_depth, shading)


@ti.kernel
def _trace_single(
    world: ti.template(),
    origin: ti.types.vector(3, ti.f64),
    direction: ti.types.vector(3, ti.f64),
    depth: ti.i32,
    stream: ti.i32,
):
    # Wrapped in a loop so nested loops stay serial
    for _ in range(1):
        _trace_result[None] = ray_color(world, make_ray(origin, direction), depth, stream)


def trace_ray(
    world,
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    depth: int = MAX_DEPTH,
    stream: int = 0,
) -> tuple[float, float, float]:
    """Evaluate ray_color for a single ray from Python.

    Intended for testing and debugging. The stream must be seeded.

    Returns:
        Tuple of (R, G, B) color values.
    """
    _trace_single(world, vec3(*origin), vec3(*direction), depth, stream)
    color = _trace_result[None]
    return (float(color[0]), float(color[1]), float(color[2]))
