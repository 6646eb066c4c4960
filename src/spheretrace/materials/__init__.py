"""Materials module for surface scattering models.

Components:
    lambertian: Ideal diffuse reflection
    metal: Specular reflection with fuzz
    registry: Unified material ids and scatter dispatch

Each scatter function returns a new direction (the scattered ray starts at
the hit point), a per-channel attenuation, and, where a material can absorb,
a did_scatter flag. All scattering code is Taichi functions that draw
randomness from an explicit stream.
"""

from .lambertian import (
    add_lambertian_material,
    clear_lambertian_materials,
    get_lambertian_albedo,
    get_lambertian_material_count,
    lambertian_direction,
    scatter_lambertian,
)
from .metal import (
    add_metal_material,
    clamp_fuzz,
    clear_metal_materials,
    get_metal_albedo,
    get_metal_fuzz,
    get_metal_material_count,
    scatter_metal,
)
from .registry import (
    MAX_MATERIALS,
    MaterialType,
    clear_material_registry,
    get_material_count,
    get_material_type,
    get_material_type_index,
    register_material,
    scatter_material,
)

__all__ = [
    # Lambertian
    "lambertian_direction",
    "scatter_lambertian",
    "add_lambertian_material",
    "clear_lambertian_materials",
    "get_lambertian_material_count",
    "get_lambertian_albedo",
    # Metal
    "scatter_metal",
    "add_metal_material",
    "clamp_fuzz",
    "clear_metal_materials",
    "get_metal_material_count",
    "get_metal_albedo",
    "get_metal_fuzz",
    # Registry
    "MaterialType",
    "MAX_MATERIALS",
    "register_material",
    "clear_material_registry",
    "get_material_count",
    "get_material_type",
    "get_material_type_index",
    "scatter_material",
]
