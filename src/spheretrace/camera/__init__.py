"""Camera module for primary ray generation.

Components:
    viewport: Fixed axis-aligned viewport camera

Ray generation uses normalized image coordinates:
    u in [0, 1]: left to right across the image
    v in [0, 1]: bottom to top across the image
"""

from .viewport import (
    Camera,
    get_camera_info,
    get_ray,
    get_ray_jittered,
    setup_camera,
)

__all__ = [
    "Camera",
    "setup_camera",
    "get_ray",
    "get_ray_jittered",
    "get_camera_info",
]
