"""Unified material ids and scatter dispatch.

Materials live in per-type parameter tables (see lambertian and metal).
The registry hands out a single material id space on top of them and
records, for each id, the material type and the index into that type's
table. Spheres store only the id; the integrator calls scatter_material()
which switches on the type.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from spheretrace.materials.registry import MaterialType, register_material
    >>> from spheretrace.materials.lambertian import add_lambertian_material
    >>> material_id = register_material(
    ...     MaterialType.LAMBERTIAN, add_lambertian_material((0.5, 0.5, 0.5))
    ... )
"""

from enum import IntEnum

import taichi as ti

from spheretrace.core.ray import Ray
from spheretrace.core.vec3 import vec3
from spheretrace.geometry.sphere import HitRecord
from spheretrace.materials.lambertian import (
    clear_lambertian_materials,
    get_lambertian_albedo,
    scatter_lambertian,
)
from spheretrace.materials.metal import (
    clear_metal_materials,
    get_metal_albedo,
    get_metal_fuzz,
    scatter_metal,
)


class MaterialType(IntEnum):
    """Enumeration of supported material types."""

    LAMBERTIAN = 0
    METAL = 1


# Maximum number of materials across all types
MAX_MATERIALS = 512  # 256 per type * 2 types

# material_types[i] stores the MaterialType for material id i
material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
# material_type_indices[i] stores the index into the type-specific table
material_type_indices = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def clear_material_registry() -> None:
    """Forget every material id and empty the per-type tables."""
    clear_lambertian_materials()
    clear_metal_materials()
    num_materials[None] = 0


def register_material(material_type: MaterialType, type_index: int) -> int:
    """Assign a unified material id to an entry of a per-type table.

    Args:
        material_type: The type of the material.
        type_index: The index returned by the type's add function.

    Returns:
        The new material id.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
    """
    material_id = num_materials[None]
    if material_id >= MAX_MATERIALS:
        raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")
    material_types[material_id] = int(material_type)
    material_type_indices[material_id] = type_index
    num_materials[None] = material_id + 1
    return material_id


def get_material_count() -> int:
    """Get the number of registered materials."""
    return int(num_materials[None])


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """Get the material type for a material id.

    Returns:
        The MaterialType as an integer, or -1 for unknown ids.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_types[material_id]
    return result


@ti.func
def get_material_type_index(material_id: ti.i32) -> ti.i32:
    """Get the per-type table index for a material id, or -1."""
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_type_indices[material_id]
    return result


@ti.func
def scatter_material(material_id: ti.i32, ray: Ray, rec: HitRecord, stream: ti.i32):
    """Dispatch to the scatter function of a material.

    Args:
        material_id: The unified material id of the surface.
        ray: The incoming ray.
        rec: The hit record (normal faces the incoming ray).
        stream: The random stream to draw from.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter). Unknown
        material ids absorb the ray (did_scatter == 0).
    """
    mat_type = get_material_type(material_id)
    type_index = get_material_type_index(material_id)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0

    if mat_type == int(MaterialType.LAMBERTIAN):
        albedo = get_lambertian_albedo(type_index)
        scattered_direction, attenuation = scatter_lambertian(albedo, rec.normal, stream)
        did_scatter = 1

    elif mat_type == int(MaterialType.METAL):
        albedo = get_metal_albedo(type_index)
        fuzz = get_metal_fuzz(type_index)
        scattered_direction, attenuation, did_scatter = scatter_metal(
            albedo, fuzz, ray.direction, rec.normal, stream
        )

    return scattered_direction, attenuation, did_scatter
