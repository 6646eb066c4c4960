"""Scene manager coordinating spheres and materials.

This module provides a high-level scene building API on top of the material
registry and the HittableList. Materials are registered first and return a
unified material id; spheres then reference that id.

The SceneManager maintains:
- A HittableList holding the scene's spheres (``scene.world``)
- Python-side records of every material and sphere added
- Convenience methods for adding a sphere with a new material in one call
- Scene configuration round-trip (SceneConfig and JSON files)

The material tables are module-level Taichi fields, so only one SceneManager
should be in use at a time. Creating a SceneManager clears them.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from spheretrace.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> mat_id = scene.add_lambertian_material(albedo=(0.7, 0.3, 0.3))
    >>> scene.add_sphere(center=(0, 0, -1), radius=0.5, material_id=mat_id)
"""

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any

from spheretrace.geometry.hittable_list import MAX_SPHERES, HittableList
from spheretrace.materials.lambertian import add_lambertian_material
from spheretrace.materials.metal import add_metal_material, clamp_fuzz
from spheretrace.materials.registry import (
    MAX_MATERIALS,
    MaterialType,
    clear_material_registry,
    get_material_count,
    register_material,
)

logger = logging.getLogger(__name__)


@dataclass
class MaterialInfo:
    """Information about a registered material.

    Attributes:
        material_id: The unified material ID.
        material_type: The type of material (Lambertian or Metal).
        type_index: The index within the type-specific material table.
        params: The material parameters as stored.
    """

    material_id: int
    material_type: MaterialType
    type_index: int
    params: dict[str, Any]


@dataclass
class SphereInfo:
    """Information about a sphere in the scene.

    Attributes:
        sphere_index: The index in the HittableList.
        center: The center of the sphere.
        radius: The radius of the sphere.
        material_id: The material ID assigned to the sphere.
    """

    sphere_index: int
    center: tuple[float, float, float]
    radius: float
    material_id: int


@dataclass
class SceneConfig:
    """Configuration for scene serialization.

    Attributes:
        materials: List of material configurations. Each has a ``type``
            ("lambertian" or "metal"), an ``albedo`` and, for metals, a
            ``fuzz``. A material's id is its position in the list.
        spheres: List of sphere configurations with ``center``, ``radius``
            and ``material_id``.
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    spheres: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable dictionary."""
        return {"materials": self.materials, "spheres": self.spheres}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SceneConfig":
        """Build a SceneConfig from a dictionary with 'materials' and 'spheres'.

        Raises:
            ValueError: If the data is not a mapping of lists.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Scene data must be an object, got {type(data).__name__}")
        materials = data.get("materials", [])
        spheres = data.get("spheres", [])
        if not isinstance(materials, list) or not isinstance(spheres, list):
            raise ValueError("Scene 'materials' and 'spheres' must be lists")
        return cls(materials=materials, spheres=spheres)


def _as_vec3(values: Any, name: str) -> tuple[float, float, float]:
    if len(values) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(values)}")
    return (float(values[0]), float(values[1]), float(values[2]))


class SceneManager:
    """Scene builder coordinating spheres and materials.

    Attributes:
        world: The HittableList passed to the renderer.
        materials: List of MaterialInfo for all registered materials.
        spheres: List of SphereInfo for all spheres in the scene.

    Example:
        >>> scene = SceneManager()
        >>> ground = scene.add_lambertian_material(albedo=(0.8, 0.8, 0.0))
        >>> gold = scene.add_metal_material(albedo=(0.8, 0.6, 0.2), fuzz=1.0)
        >>> scene.add_sphere((0, -100.5, -1), 100, ground)
        >>> scene.add_sphere((1, 0, -1), 0.5, gold)
    """

    def __init__(self, capacity: int = MAX_SPHERES) -> None:
        """Initialize an empty scene.

        Args:
            capacity: Maximum number of spheres.
        """
        self.world = HittableList(capacity)
        self.materials: list[MaterialInfo] = []
        self.spheres: list[SphereInfo] = []
        self._clear_all()

    def _clear_all(self) -> None:
        """Clear all scene data including Taichi fields."""
        self.world.clear()
        clear_material_registry()
        self.materials.clear()
        self.spheres.clear()

    def clear(self) -> None:
        """Clear the entire scene (spheres and materials)."""
        self._clear_all()

    # =========================================================================
    # Material Management
    # =========================================================================

    def add_lambertian_material(self, albedo: tuple[float, float, float]) -> int:
        """Add a Lambertian (diffuse) material to the scene.

        Args:
            albedo: The diffuse reflectance color as (R, G, B) in [0, 1].

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If any albedo component is outside [0, 1].
        """
        type_index = add_lambertian_material(albedo)
        material_id = register_material(MaterialType.LAMBERTIAN, type_index)

        self.materials.append(
            MaterialInfo(
                material_id=material_id,
                material_type=MaterialType.LAMBERTIAN,
                type_index=type_index,
                params={"albedo": tuple(albedo)},
            )
        )
        logger.debug("Added lambertian material %d: albedo=%s", material_id, albedo)
        return material_id

    def add_metal_material(self, albedo: tuple[float, float, float], fuzz: float = 0.0) -> int:
        """Add a metal (specular reflective) material to the scene.

        Args:
            albedo: The reflective color as (R, G, B) in [0, 1].
            fuzz: Reflection perturbation radius, clamped to [0, 1].

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If any albedo component is outside [0, 1].
        """
        type_index = add_metal_material(albedo, fuzz)
        material_id = register_material(MaterialType.METAL, type_index)

        self.materials.append(
            MaterialInfo(
                material_id=material_id,
                material_type=MaterialType.METAL,
                type_index=type_index,
                params={"albedo": tuple(albedo), "fuzz": clamp_fuzz(fuzz)},
            )
        )
        logger.debug("Added metal material %d: albedo=%s fuzz=%s", material_id, albedo, fuzz)
        return material_id

    def get_material_count(self) -> int:
        """Get the total number of materials in the scene."""
        return get_material_count()

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        """Get information about a material by ID, or None if not found."""
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    # =========================================================================
    # Sphere Management
    # =========================================================================

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material_id: int,
    ) -> int:
        """Add a sphere to the scene.

        Args:
            center: The center point of the sphere as (x, y, z).
            radius: The radius of the sphere (must be positive).
            material_id: The unified material ID to assign to the sphere.

        Returns:
            The index of the added sphere.

        Raises:
            RuntimeError: If the maximum number of spheres is exceeded.
            ValueError: If material_id is invalid or radius is not positive.
        """
        if material_id < 0 or material_id >= get_material_count():
            raise ValueError(f"Invalid material_id: {material_id}")

        center = _as_vec3(center, "center")
        sphere_index = self.world.add(center, radius, material_id)

        self.spheres.append(
            SphereInfo(
                sphere_index=sphere_index,
                center=center,
                radius=float(radius),
                material_id=material_id,
            )
        )
        logger.debug(
            "Added sphere %d: center=%s radius=%s material=%d",
            sphere_index,
            center,
            radius,
            material_id,
        )
        return sphere_index

    def add_lambertian_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        albedo: tuple[float, float, float],
    ) -> tuple[int, int]:
        """Add a sphere with a new Lambertian material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_lambertian_material(albedo)
        sphere_index = self.add_sphere(center, radius, material_id)
        return sphere_index, material_id

    def add_metal_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        albedo: tuple[float, float, float],
        fuzz: float = 0.0,
    ) -> tuple[int, int]:
        """Add a sphere with a new metal material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_metal_material(albedo, fuzz)
        sphere_index = self.add_sphere(center, radius, material_id)
        return sphere_index, material_id

    def get_sphere_count(self) -> int:
        """Get the number of spheres in the scene."""
        return len(self.world)

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object."""
        config = SceneConfig()

        for mat in self.materials:
            mat_config: dict[str, Any] = {"type": mat.material_type.name.lower()}
            for key, value in mat.params.items():
                mat_config[key] = list(value) if isinstance(value, tuple) else value
            config.materials.append(mat_config)

        for sphere in self.spheres:
            config.spheres.append(
                {
                    "center": list(sphere.center),
                    "radius": sphere.radius,
                    "material_id": sphere.material_id,
                }
            )

        return config

    def from_config(self, config: SceneConfig) -> None:
        """Load a scene from a configuration object.

        Clears the current scene and loads the configuration.

        Args:
            config: The scene configuration to load.

        Raises:
            ValueError: If the configuration contains invalid data.
        """
        self.clear()

        # Materials first, spheres reference them by id
        for mat_config in config.materials:
            mat_type = str(mat_config.get("type", "")).lower()
            if mat_type == "lambertian":
                albedo = _as_vec3(mat_config.get("albedo", [0.5, 0.5, 0.5]), "albedo")
                self.add_lambertian_material(albedo)
            elif mat_type == "metal":
                albedo = _as_vec3(mat_config.get("albedo", [0.8, 0.8, 0.8]), "albedo")
                fuzz = float(mat_config.get("fuzz", 0.0))
                self.add_metal_material(albedo, fuzz)
            else:
                raise ValueError(f"Unknown material type: {mat_type}")

        for sphere_config in config.spheres:
            center = _as_vec3(sphere_config.get("center", [0, 0, 0]), "center")
            radius = float(sphere_config.get("radius", 1.0))
            material_id = int(sphere_config.get("material_id", 0))
            self.add_sphere(center, radius, material_id)

        logger.debug(
            "Loaded scene: %d materials, %d spheres",
            len(self.materials),
            len(self.spheres),
        )

    # =========================================================================
    # Capacity Information
    # =========================================================================

    def get_max_spheres(self) -> int:
        """Get the maximum number of spheres supported."""
        return self.world.capacity

    @staticmethod
    def get_max_materials() -> int:
        """Get the maximum number of materials supported."""
        return MAX_MATERIALS

    def __repr__(self) -> str:
        return (
            f"SceneManager(materials={len(self.materials)}, "
            f"spheres={len(self.spheres)})"
        )


def read_scene_config(path: str | os.PathLike[str]) -> SceneConfig:
    """Read a SceneConfig from a JSON file.

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the file is not valid scene JSON.
    """
    with open(path, encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid scene file {path}: {e}") from e
    return SceneConfig.from_dict(data)


def write_scene_config(config: SceneConfig, path: str | os.PathLike[str]) -> None:
    """Write a SceneConfig to a JSON file."""
    with open(path, "w", encoding="utf-8") as f:
        json.dump(config.to_dict(), f, indent=2)
        f.write("\n")
