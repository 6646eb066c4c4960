"""Ordered collection of spheres answering nearest-hit queries.

HittableList stores its spheres in Taichi fields (structure-of-arrays
layout) and reduces them to the globally nearest hit in a single pass:
each sphere is queried with the current closest distance as its upper
bound, so farther candidates are pruned and the last accepted record is
the nearest one, independent of insertion order.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from spheretrace.geometry.hittable_list import HittableList
    >>> world = HittableList()
    >>> world.add((0.0, -100.5, -1.0), 100.0, material_id=0)
    >>> world.add((0.0, 0.0, -1.0), 0.5, material_id=1)
    >>> # Inside a Taichi kernel taking world as ti.template():
    >>> # rec = world.hit(ray, 0.001, 1e30)
"""

import taichi as ti

from spheretrace.core.ray import Ray
from spheretrace.geometry.sphere import (
    NO_MATERIAL,
    HitRecord,
    Sphere,
    hit_sphere,
    miss_record,
)

# Default number of spheres a list can hold (preallocated)
MAX_SPHERES = 1024


@ti.data_oriented
class HittableList:
    """A fixed-capacity, ordered list of spheres.

    Instances can be passed to Taichi kernels as ``ti.template()``
    arguments; ``hit`` is a Taichi function.

    Attributes:
        capacity: Maximum number of spheres the list can hold.
    """

    def __init__(self, capacity: int = MAX_SPHERES) -> None:
        """Allocate storage for up to ``capacity`` spheres.

        Raises:
            ValueError: If capacity is not positive.
        """
        if capacity <= 0:
            raise ValueError(f"Capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._centers = ti.Vector.field(3, dtype=ti.f64, shape=capacity)
        self._radii = ti.field(dtype=ti.f64, shape=capacity)
        self._material_ids = ti.field(dtype=ti.i32, shape=capacity)
        self._count = ti.field(dtype=ti.i32, shape=())

    def __len__(self) -> int:
        return int(self._count[None])

    def add(
        self,
        center: tuple[float, float, float],
        radius: float,
        material_id: int = NO_MATERIAL,
    ) -> int:
        """Append a sphere.

        Args:
            center: The center point as (x, y, z).
            radius: The radius (must be positive).
            material_id: Unified material id, or NO_MATERIAL.

        Returns:
            The index of the added sphere.

        Raises:
            ValueError: If the radius is not positive.
            RuntimeError: If the list is full.
        """
        if radius <= 0.0:
            raise ValueError(f"Sphere radius must be positive, got {radius}")
        idx = len(self)
        if idx >= self.capacity:
            raise RuntimeError(f"Maximum number of spheres ({self.capacity}) exceeded")
        self._centers[idx] = [float(center[0]), float(center[1]), float(center[2])]
        self._radii[idx] = float(radius)
        self._material_ids[idx] = material_id
        self._count[None] = idx + 1
        return idx

    def clear(self) -> None:
        """Remove all spheres. Field data is overwritten by later adds."""
        self._count[None] = 0

    def spheres(self) -> list[tuple[tuple[float, float, float], float, int]]:
        """Read back the stored spheres as (center, radius, material_id)."""
        result = []
        for i in range(len(self)):
            c = self._centers[i]
            result.append(
                (
                    (float(c[0]), float(c[1]), float(c[2])),
                    float(self._radii[i]),
                    int(self._material_ids[i]),
                )
            )
        return result

    @ti.func
    def get_sphere(self, i: ti.i32) -> Sphere:
        """Load sphere ``i`` from field storage."""
        return Sphere(
            center=self._centers[i],
            radius=self._radii[i],
            material_id=self._material_ids[i],
        )

    @ti.func
    def hit(self, ray: Ray, t_min: ti.f64, t_max: ti.f64) -> HitRecord:
        """Find the nearest intersection inside [t_min, t_max].

        Args:
            ray: The ray to test.
            t_min: Smallest accepted ray parameter.
            t_max: Largest accepted ray parameter.

        Returns:
            The HitRecord of the nearest sphere, or a miss record.
        """
        result = miss_record()
        closest_so_far = t_max

        # while, not for: the scan must stay serial even at kernel top level
        i = 0
        n = self._count[None]
        while i < n:
            rec = hit_sphere(ray, self.get_sphere(i), t_min, closest_so_far)
            if rec.hit == 1:
                closest_so_far = rec.t
                result = rec
            i += 1

        return result
