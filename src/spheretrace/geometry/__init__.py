"""Geometry module for the sphere primitive and scene composition.

Components:
    sphere: Sphere primitive, HitRecord and ray-sphere intersection
    hittable_list: Ordered sphere collection with nearest-hit reduction

All intersection routines are Taichi functions. Results follow the pattern:
    rec = hit_sphere(ray, sphere, t_min, t_max)   # rec.hit == 0 means miss
    rec = world.hit(ray, t_min, t_max)            # nearest over all spheres
"""

from .hittable_list import MAX_SPHERES, HittableList
from .sphere import (
    DEGENERATE_DIRECTION_EPSILON,
    NO_MATERIAL,
    HitRecord,
    Sphere,
    hit_sphere,
    make_sphere,
    miss_record,
    set_face_normal,
)

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "make_sphere",
    "miss_record",
    "set_face_normal",
    "HittableList",
    "MAX_SPHERES",
    "NO_MATERIAL",
    "DEGENERATE_DIRECTION_EPSILON",
]
