"""Sphere primitive and ray-sphere intersection.

The intersection solves ``|O + tD - C|^2 = r^2`` with the half-b form of
the quadratic formula:

    a      = D . D
    half_b = (O - C) . D
    c      = |O - C|^2 - r^2
    disc   = half_b^2 - a c

The nearer root is tried first and the farther one only if the nearer
falls outside [t_min, t_max]. Directions with ``a`` at or below
DEGENERATE_DIRECTION_EPSILON are reported as misses rather than dividing
by (almost) zero.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from spheretrace.geometry.sphere import Sphere, hit_sphere
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from spheretrace.core.ray import Ray, ray_at
from spheretrace.core.vec3 import vec3

# Rays whose squared direction length is at or below this never hit
DEGENERATE_DIRECTION_EPSILON = 1e-12

# Material id carried by spheres (and hit records) without a material
NO_MATERIAL = -1


@ti.dataclass
class Sphere:
    """A sphere defined by center point, radius and material.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive).
        material_id: Unified material id, or NO_MATERIAL.
    """

    center: vec3
    radius: ti.f64
    material_id: ti.i32


@ti.dataclass
class HitRecord:
    """Record of a ray-surface intersection.

    Attributes:
        hit: 1 if the ray hit, 0 if it missed. All other fields are only
            meaningful when hit == 1.
        t: The ray parameter at the intersection.
        position: The intersection point.
        normal: Unit surface normal, oriented against the incident ray so
            that dot(ray.direction, normal) <= 0.
        front_face: 1 if the ray struck the outward side, 0 otherwise.
        material_id: Material id of the surface that was hit.
    """

    hit: ti.i32
    t: ti.f64
    position: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32


@ti.func
def miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        position=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        material_id=NO_MATERIAL,
    )


@ti.func
def set_face_normal(direction: vec3, outward_normal: vec3):
    """Orient a geometric normal against the incident direction.

    Args:
        direction: The ray direction.
        outward_normal: The unit normal pointing out of the surface.

    Returns:
        A tuple (front_face, normal). front_face is 1 when the ray arrives
        from outside; normal is outward_normal, negated for back faces.
    """
    front_face = 1
    normal = outward_normal
    if tm.dot(direction, outward_normal) >= 0.0:
        front_face = 0
        normal = -outward_normal
    return front_face, normal


@ti.func
def hit_sphere(ray: Ray, sphere: Sphere, t_min: ti.f64, t_max: ti.f64) -> HitRecord:
    """Intersect a ray with a sphere inside the window [t_min, t_max].

    Args:
        ray: The ray to test (direction need not be normalized).
        sphere: The sphere to test against.
        t_min: Smallest accepted ray parameter.
        t_max: Largest accepted ray parameter.

    Returns:
        A HitRecord for the nearest root inside the window, or a miss
        record. Check the hit field.
    """
    result = miss_record()

    oc = ray.origin - sphere.center
    a = tm.dot(ray.direction, ray.direction)
    half_b = tm.dot(oc, ray.direction)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = half_b * half_b - a * c

    if a > DEGENERATE_DIRECTION_EPSILON and discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)

        root = (-half_b - sqrt_d) / a
        valid = root >= t_min and root <= t_max
        if not valid:
            root = (-half_b + sqrt_d) / a
            valid = root >= t_min and root <= t_max

        if valid:
            position = ray_at(ray, root)
            outward_normal = (position - sphere.center) / sphere.radius
            front_face, normal = set_face_normal(ray.direction, outward_normal)
            result = HitRecord(
                hit=1,
                t=root,
                position=position,
                normal=normal,
                front_face=front_face,
                material_id=sphere.material_id,
            )

    return result


@ti.func
def make_sphere(center: vec3, radius: ti.f64, material_id: ti.i32) -> Sphere:
    """Create a sphere inside a Taichi kernel."""
    return Sphere(center=center, radius=radius, material_id=material_id)
