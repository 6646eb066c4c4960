"""Fixed-viewport camera for primary ray generation.

The camera sits at ``origin`` looking down -z through a rectangular
viewport placed ``focal_length`` in front of it. The viewport is
``aspect_ratio * viewport_height`` wide and ``viewport_height`` tall:

    horizontal        = (viewport_width, 0, 0)
    vertical          = (0, viewport_height, 0)
    lower_left_corner = origin - horizontal/2 - vertical/2 - (0, 0, focal_length)

A ray for normalized image coordinates (u, v), with (0, 0) at the bottom
left, points from the origin to ``lower_left_corner + u*horizontal +
v*vertical``. The direction is left unnormalized.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from spheretrace.camera.viewport import Camera, setup_camera, get_ray
    >>> setup_camera(Camera(aspect_ratio=16.0 / 9.0))
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray = get_ray(0.5, 0.5)  # Ray through the viewport center
"""

from dataclasses import dataclass

import numpy as np
import taichi as ti

from spheretrace.core.ray import Ray, make_ray
from spheretrace.core.sampler import random_f64

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class Camera:
    """Configuration for the fixed-viewport camera.

    Attributes:
        aspect_ratio: Width divided by height of the output image.
        viewport_height: Height of the viewport in world units.
        focal_length: Distance from the origin to the viewport plane.
        origin: Camera position in world space (x, y, z).
    """

    aspect_ratio: float
    viewport_height: float = 2.0
    focal_length: float = 1.0
    origin: tuple[float, float, float] = (0.0, 0.0, 0.0)

    def __post_init__(self) -> None:
        for name in ("aspect_ratio", "viewport_height", "focal_length"):
            value = getattr(self, name)
            if value <= 0.0:
                raise ValueError(f"Camera {name} must be positive, got {value}")

    @property
    def viewport_width(self) -> float:
        """Width of the viewport in world units."""
        return self.aspect_ratio * self.viewport_height


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f64, shape=())
_viewport_horizontal = ti.Vector.field(3, dtype=ti.f64, shape=())
_viewport_vertical = ti.Vector.field(3, dtype=ti.f64, shape=())
_lower_left_corner = ti.Vector.field(3, dtype=ti.f64, shape=())


# =============================================================================
# Camera Setup (Python-side, called once per render)
# =============================================================================


def setup_camera(camera: Camera) -> None:
    """Precompute the viewport vectors and store them for kernels.

    Args:
        camera: Camera configuration.

    Note:
        This function writes to Taichi fields and should be called from
        Python (not from within a Taichi kernel).
    """
    origin = np.array(camera.origin, dtype=np.float64)
    horizontal = np.array([camera.viewport_width, 0.0, 0.0], dtype=np.float64)
    vertical = np.array([0.0, camera.viewport_height, 0.0], dtype=np.float64)
    forward = np.array([0.0, 0.0, camera.focal_length], dtype=np.float64)

    lower_left = origin - horizontal / 2.0 - vertical / 2.0 - forward

    _camera_origin[None] = origin.tolist()
    _viewport_horizontal[None] = horizontal.tolist()
    _viewport_vertical[None] = vertical.tolist()
    _lower_left_corner[None] = lower_left.tolist()


# =============================================================================
# Ray Generation (Taichi-compatible)
# =============================================================================


@ti.func
def get_ray(u: ti.f64, v: ti.f64) -> Ray:
    """Generate a primary ray through normalized viewport coordinates.

    Args:
        u: Horizontal coordinate in [0, 1] (left to right).
        v: Vertical coordinate in [0, 1] (bottom to top).

    Returns:
        A Ray from the camera origin through the viewport point.
    """
    origin = _camera_origin[None]
    point_on_viewport = (
        _lower_left_corner[None] + u * _viewport_horizontal[None] + v * _viewport_vertical[None]
    )
    return make_ray(origin, point_on_viewport - origin)


@ti.func
def get_ray_jittered(
    pixel_i: ti.i32, pixel_j: ti.i32, width: ti.i32, height: ti.i32, stream: ti.i32
) -> Ray:
    """Generate a primary ray with a random sub-pixel offset.

    Coordinates are normalized by ``width - 1`` and ``height - 1`` so the
    first and last pixel centers land on the viewport edges. Single-pixel
    dimensions use a denominator of 1.

    Args:
        pixel_i: Pixel column (0 = left).
        pixel_j: Pixel row (0 = bottom).
        width: Image width in pixels.
        height: Image height in pixels.
        stream: The random stream to draw the jitter from.

    Returns:
        A jittered primary Ray.
    """
    jitter_u = random_f64(stream)
    jitter_v = random_f64(stream)

    u_span = ti.cast(ti.max(width - 1, 1), ti.f64)
    v_span = ti.cast(ti.max(height - 1, 1), ti.f64)
    u = (ti.cast(pixel_i, ti.f64) + jitter_u) / u_span
    v = (ti.cast(pixel_j, ti.f64) + jitter_v) / v_span

    return get_ray(u, v)


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Get the current camera vectors for inspection from Python.

    Returns:
        Dictionary with origin, horizontal, vertical and lower_left.
    """
    result = {}
    for name, field in (
        ("origin", _camera_origin),
        ("horizontal", _viewport_horizontal),
        ("vertical", _viewport_vertical),
        ("lower_left", _lower_left_corner),
    ):
        vec = field[None]
        result[name] = (float(vec[0]), float(vec[1]), float(vec[2]))
    return result
