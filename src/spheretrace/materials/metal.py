"""Metal (specular reflective) material implementation.

The incoming direction is normalized and mirrored about the surface normal:

    R = I - 2(I . N)N

then perturbed by ``fuzz * random_in_unit_sphere()`` to model a rough
surface. If the perturbed direction points into the surface the ray is
absorbed and the material reports no scatter.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from spheretrace.materials.metal import scatter_metal
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation, did_scatter = scatter_metal(
    >>> #     albedo, fuzz, incident_dir, normal, stream
    >>> # )
"""

import taichi as ti
import taichi.math as tm

from spheretrace.core.vec3 import normalize, random_in_unit_sphere, reflect, vec3


@ti.func
def scatter_metal(
    albedo: vec3,
    fuzz: ti.f64,
    incident_direction: vec3,
    normal: vec3,
    stream: ti.i32,
):
    """Compute the scattered direction for a metal surface.

    Args:
        albedo: The reflective color (RGB).
        fuzz: The perturbation radius in [0, 1].
        incident_direction: The incoming ray direction (any length).
        normal: The surface normal, facing the incoming ray (unit length).
        stream: The random stream to draw from.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) where:
        - scattered_direction: The fuzzed reflection (not normalized), or
          the zero vector when absorbed.
        - attenuation: The color attenuation (equals albedo).
        - did_scatter: 1 if the direction leaves the surface, 0 if absorbed.
    """
    reflected = reflect(normalize(incident_direction), normal)
    scattered_direction = reflected + fuzz * random_in_unit_sphere(stream)

    did_scatter = 1
    if tm.dot(scattered_direction, normal) <= 0.0:
        did_scatter = 0
        scattered_direction = vec3(0.0, 0.0, 0.0)

    attenuation = albedo
    return scattered_direction, attenuation, did_scatter


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of metal materials in the scene
MAX_METAL_MATERIALS = 256

metal_albedos = ti.Vector.field(3, dtype=ti.f64, shape=MAX_METAL_MATERIALS)
metal_fuzzes = ti.field(dtype=ti.f64, shape=MAX_METAL_MATERIALS)
num_metal_materials = ti.field(dtype=ti.i32, shape=())


def clamp_fuzz(fuzz: float) -> float:
    """Clamp a fuzz value into [0, 1]."""
    return min(max(float(fuzz), 0.0), 1.0)


def clear_metal_materials() -> None:
    """Clear all metal materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_metal_materials[None] = 0


def add_metal_material(
    albedo: tuple[float, float, float],
    fuzz: float = 0.0,
) -> int:
    """Add a metal material to the material table.

    Args:
        albedo: The reflective color as (R, G, B) tuple.
        fuzz: The reflection perturbation radius. Values outside [0, 1]
            are clamped. Default is 0 (perfect mirror).

    Returns:
        The type-local index of the added material.

    Raises:
        ValueError: If any albedo component is outside [0, 1].
        RuntimeError: If the maximum number of materials is exceeded.
    """
    for i, component in enumerate(albedo):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "A surface cannot reflect more light than it receives."
            )

    idx = num_metal_materials[None]
    if idx >= MAX_METAL_MATERIALS:
        raise RuntimeError(f"Maximum number of metal materials ({MAX_METAL_MATERIALS}) exceeded")

    metal_albedos[idx] = [float(albedo[0]), float(albedo[1]), float(albedo[2])]
    metal_fuzzes[idx] = clamp_fuzz(fuzz)
    num_metal_materials[None] = idx + 1
    return idx


def get_metal_material_count() -> int:
    """Get the number of metal materials in the table."""
    return int(num_metal_materials[None])


@ti.func
def get_metal_albedo(material_idx: ti.i32) -> vec3:
    """Get the albedo for a metal material by type-local index."""
    return metal_albedos[material_idx]


@ti.func
def get_metal_fuzz(material_idx: ti.i32) -> ti.f64:
    """Get the fuzz for a metal material by type-local index."""
    return metal_fuzzes[material_idx]
