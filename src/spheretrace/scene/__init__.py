"""Scene module for building and loading sphere scenes.

Components:
    manager: SceneManager coordinating spheres and materials, JSON configs
    presets: Ready-made scenes returning (scene, camera)

Example:
    >>> from spheretrace.scene import SceneManager
    >>> scene = SceneManager()
    >>> scene.add_lambertian_sphere((0, 0, -1), 0.5, albedo=(0.5, 0.5, 0.5))
"""

from .manager import (
    MaterialInfo,
    SceneConfig,
    SceneManager,
    SphereInfo,
    read_scene_config,
    write_scene_config,
)
from .presets import (
    PRESETS,
    create_material_scene,
    create_preset_scene,
    create_two_sphere_scene,
)

__all__ = [
    # Manager
    "SceneManager",
    "MaterialInfo",
    "SphereInfo",
    "SceneConfig",
    "read_scene_config",
    "write_scene_config",
    # Presets
    "PRESETS",
    "create_two_sphere_scene",
    "create_material_scene",
    "create_preset_scene",
]
