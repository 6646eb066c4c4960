"""Preset scenes.

Both presets place a large "ground" sphere of radius 100 below a unit-scale
foreground, viewed by the default camera at the origin looking down -z:

- two-sphere: ground plus one sphere at (0, 0, -1), both 50% grey diffuse.
- materials: a yellow diffuse ground, a reddish diffuse center sphere, and
  two metal spheres on the left (fuzz 0.3) and right (fuzz 1.0).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from spheretrace.scene.presets import create_material_scene
    >>> from spheretrace.camera.viewport import setup_camera
    >>>
    >>> scene, camera = create_material_scene(aspect_ratio=16.0 / 9.0)
    >>> setup_camera(camera)
"""

import logging
from collections.abc import Callable

from spheretrace.camera.viewport import Camera
from spheretrace.scene.manager import SceneManager

logger = logging.getLogger(__name__)

# Ground sphere shared by every preset
GROUND_CENTER = (0.0, -100.5, -1.0)
GROUND_RADIUS = 100.0


def create_two_sphere_scene(
    aspect_ratio: float = 16.0 / 9.0,
    viewport_height: float = 2.0,
    focal_length: float = 1.0,
) -> tuple[SceneManager, Camera]:
    """Create the ground plus foreground sphere scene.

    Returns:
        Tuple of (SceneManager, Camera).
    """
    camera = Camera(
        aspect_ratio=aspect_ratio,
        viewport_height=viewport_height,
        focal_length=focal_length,
    )
    scene = SceneManager()

    grey = scene.add_lambertian_material((0.5, 0.5, 0.5))
    scene.add_sphere((0.0, 0.0, -1.0), 0.5, grey)
    scene.add_sphere(GROUND_CENTER, GROUND_RADIUS, grey)

    logger.debug("Created two-sphere scene: %r", scene)
    return scene, camera


def create_material_scene(
    aspect_ratio: float = 16.0 / 9.0,
    viewport_height: float = 2.0,
    focal_length: float = 1.0,
) -> tuple[SceneManager, Camera]:
    """Create the diffuse and metal material showcase scene.

    Returns:
        Tuple of (SceneManager, Camera).
    """
    camera = Camera(
        aspect_ratio=aspect_ratio,
        viewport_height=viewport_height,
        focal_length=focal_length,
    )
    scene = SceneManager()

    scene.add_lambertian_sphere(GROUND_CENTER, GROUND_RADIUS, albedo=(0.8, 0.8, 0.0))
    scene.add_lambertian_sphere((0.0, 0.0, -1.0), 0.5, albedo=(0.7, 0.3, 0.3))
    scene.add_metal_sphere((-1.0, 0.0, -1.0), 0.5, albedo=(0.8, 0.8, 0.8), fuzz=0.3)
    scene.add_metal_sphere((1.0, 0.0, -1.0), 0.5, albedo=(0.8, 0.6, 0.2), fuzz=1.0)

    logger.debug("Created material scene: %r", scene)
    return scene, camera


PRESETS: dict[str, Callable[..., tuple[SceneManager, Camera]]] = {
    "two-sphere": create_two_sphere_scene,
    "materials": create_material_scene,
}


def create_preset_scene(
    name: str,
    aspect_ratio: float = 16.0 / 9.0,
    viewport_height: float = 2.0,
    focal_length: float = 1.0,
) -> tuple[SceneManager, Camera]:
    """Create a preset scene by name.

    Raises:
        ValueError: If the name is not one of PRESETS.
    """
    try:
        factory = PRESETS[name]
    except KeyError:
        raise ValueError(
            f"Unknown scene preset: {name!r} (choose from {', '.join(PRESETS)})"
        ) from None
    return factory(
        aspect_ratio=aspect_ratio,
        viewport_height=viewport_height,
        focal_length=focal_length,
    )
