"""Core rendering module.

This module contains the fundamental building blocks for path tracing:

Components:
    vec3: Vector type, geometric operations and random sampling helpers
    sampler: Seeded per-pixel random streams
    ray: Ray data structure and evaluation
    integrator: The path estimator (ray_color) and render target
    renderer: Scanline renderer driving the integrator

The integrator follows one scatter direction per bounce and relies on the
per-pixel sample loop for variance reduction. Every random draw goes
through an explicit stream, which keeps renders reproducible per seed.
"""

from .ray import Ray, make_ray, ray_at
from .sampler import (
    MAX_STREAMS,
    get_stream_count,
    pcg_hash,
    random_f64,
    random_range,
    seed_streams,
)
from .vec3 import (
    NEAR_ZERO_EPSILON,
    cross,
    dot,
    length,
    length_squared,
    near_zero,
    normalize,
    random_in_unit_sphere,
    random_unit_vector,
    random_vec3,
    reflect,
    vec3,
)

# Note: integrator and renderer are NOT imported here to avoid circular imports.
# Import directly from spheretrace.core.integrator or spheretrace.core.renderer.

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "dot",
    "cross",
    "length",
    "length_squared",
    "normalize",
    "reflect",
    "near_zero",
    "random_vec3",
    "random_in_unit_sphere",
    "random_unit_vector",
    "NEAR_ZERO_EPSILON",
    "MAX_STREAMS",
    "seed_streams",
    "get_stream_count",
    "pcg_hash",
    "random_f64",
    "random_range",
]
