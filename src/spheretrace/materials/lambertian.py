"""Lambertian (ideal diffuse) material implementation.

A Lambertian surface scatters toward ``normal + random_unit_vector()``,
which distributes outgoing directions with a cosine falloff around the
normal. The attenuation is the material albedo and scattering always
succeeds.

When the random unit vector almost exactly cancels the normal, the sum is
replaced by the normal itself so the scattered ray never has a zero-length
direction.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from spheretrace.materials.lambertian import scatter_lambertian
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation = scatter_lambertian(albedo, normal, stream)
"""

import taichi as ti

from spheretrace.core.vec3 import near_zero, random_unit_vector, vec3


@ti.func
def lambertian_direction(normal: vec3, offset: vec3) -> vec3:
    """Combine a normal with a unit offset, guarding against cancellation.

    Args:
        normal: The surface normal at the hit point (unit length).
        offset: A random unit vector.

    Returns:
        ``normal + offset``, or ``normal`` if the sum is near zero.
    """
    direction = normal + offset
    if near_zero(direction):
        direction = normal
    return direction


@ti.func
def scatter_lambertian(albedo: vec3, normal: vec3, stream: ti.i32):
    """Sample a scattered direction for a Lambertian surface.

    Args:
        albedo: The diffuse reflectance color (RGB).
        normal: The surface normal at the hit point (unit length).
        stream: The random stream to draw from.

    Returns:
        A tuple of (scattered_direction, attenuation). The direction is not
        normalized and is never the zero vector; attenuation equals albedo.
    """
    direction = lambertian_direction(normal, random_unit_vector(stream))
    attenuation = albedo
    return direction, attenuation


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of Lambertian materials in the scene
MAX_LAMBERTIAN_MATERIALS = 256

lambertian_albedos = ti.Vector.field(3, dtype=ti.f64, shape=MAX_LAMBERTIAN_MATERIALS)
num_lambertian_materials = ti.field(dtype=ti.i32, shape=())


def clear_lambertian_materials() -> None:
    """Clear all Lambertian materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_lambertian_materials[None] = 0


def add_lambertian_material(albedo: tuple[float, float, float]) -> int:
    """Add a Lambertian material to the material table.

    Args:
        albedo: The diffuse reflectance color as (R, G, B) tuple.

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

    idx = num_lambertian_materials[None]
    if idx >= MAX_LAMBERTIAN_MATERIALS:
        raise RuntimeError(
            f"Maximum number of Lambertian materials ({MAX_LAMBERTIAN_MATERIALS}) exceeded"
        )

    lambertian_albedos[idx] = [float(albedo[0]), float(albedo[1]), float(albedo[2])]
    num_lambertian_materials[None] = idx + 1
    return idx


def get_lambertian_material_count() -> int:
    """Get the number of Lambertian materials in the table."""
    return int(num_lambertian_materials[None])


@ti.func
def get_lambertian_albedo(material_idx: ti.i32) -> vec3:
    """Get the albedo for a Lambertian material by type-local index."""
    return lambertian_albedos[material_idx]
