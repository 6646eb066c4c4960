"""Three-component vector algebra for points, directions and colors.

``vec3`` is a Taichi vector of three 64-bit floats. Component-wise
arithmetic (vector-vector and vector-scalar in both orders) and negation
come from the Taichi vector type itself; this module adds the geometric
operations and the randomized sampling helpers used for Monte Carlo
scattering. All functions are Taichi functions callable from kernels.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from spheretrace.core.vec3 import vec3, normalize, reflect
    >>> # Inside a Taichi kernel:
    >>> # d = reflect(normalize(vec3(1.0, -1.0, 0.0)), vec3(0.0, 1.0, 0.0))
"""

import taichi as ti
import taichi.math as tm

from spheretrace.core.sampler import random_range

vec3 = ti.types.vector(3, ti.f64)

# Components below this magnitude count as zero in near_zero()
NEAR_ZERO_EPSILON = 1e-8


@ti.func
def dot(a: vec3, b: vec3) -> ti.f64:
    """Compute the dot product a . b."""
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product a x b."""
    return tm.cross(a, b)


@ti.func
def length_squared(v: vec3) -> ti.f64:
    """Compute the squared Euclidean length of a vector.

    Cheaper than length() when only comparing magnitudes.
    """
    return tm.dot(v, v)


@ti.func
def length(v: vec3) -> ti.f64:
    """Compute the Euclidean length of a vector."""
    return ti.sqrt(length_squared(v))


@ti.func
def normalize(v: vec3) -> vec3:
    """Scale a vector to unit length.

    Args:
        v: The input vector. Must not be the zero vector.

    Returns:
        ``v / length(v)``. For the zero vector this is 0/0 in every
        component, so the result is NaN; callers are expected to avoid it.
    """
    return v / length(v)


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect a direction about a unit normal.

    Computes ``incident - 2 (incident . normal) normal``. The length of the
    incident vector is preserved when ``normal`` is unit length.

    Args:
        incident: The incoming direction (pointing toward the surface).
        normal: The surface normal (unit length).

    Returns:
        The mirrored direction.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Check whether every component is within NEAR_ZERO_EPSILON of zero.

    Used to detect degenerate scatter directions.

    Returns:
        1 if all components are near zero, 0 otherwise.
    """
    s = NEAR_ZERO_EPSILON
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


# =============================================================================
# Random Sampling Utilities for Monte Carlo
# =============================================================================


@ti.func
def random_vec3(stream: ti.i32, lo: ti.f64, hi: ti.f64) -> vec3:
    """Sample each component independently and uniformly from [lo, hi).

    Args:
        stream: The random stream to draw from.
        lo: Lower bound of every component.
        hi: Upper bound of every component.

    Returns:
        A random vector.
    """
    x = random_range(stream, lo, hi)
    y = random_range(stream, lo, hi)
    z = random_range(stream, lo, hi)
    return vec3(x, y, z)


@ti.func
def random_in_unit_sphere(stream: ti.i32) -> vec3:
    """Generate a point uniformly distributed inside the unit ball.

    Rejection sampling: draw from the [-1, 1] cube until the point lies
    strictly inside the ball. Acceptance probability is pi/6 per draw.

    Args:
        stream: The random stream to draw from.

    Returns:
        A random point with squared length < 1.
    """
    p = random_vec3(stream, -1.0, 1.0)
    while length_squared(p) >= 1.0:
        p = random_vec3(stream, -1.0, 1.0)
    return p


@ti.func
def random_unit_vector(stream: ti.i32) -> vec3:
    """Generate a random unit vector by normalizing a unit-ball sample.

    Args:
        stream: The random stream to draw from.

    Returns:
        A random vector of length 1.
    """
    return normalize(random_in_unit_sphere(stream))
