"""Unit tests for the fixed-viewport camera.

Tests cover:
- Camera validation and derived viewport width
- Viewport vectors for the default camera
- Corner and center rays
- Jittered rays stay within one pixel footprint
"""

import numpy as np
import pytest
import taichi as ti


def _ray_for(u, v):
    from spheretrace.camera.viewport import get_ray

    origin = ti.Vector.field(3, dtype=ti.f64, shape=())
    direction = ti.Vector.field(3, dtype=ti.f64, shape=())

    @ti.kernel
    def test_kernel(uu: ti.f64, vv: ti.f64):
        ray = get_ray(uu, vv)
        origin[None] = ray.origin
        direction[None] = ray.direction

    test_kernel(u, v)
    return list(origin[None]), list(direction[None])


class TestCameraConfig:
    """Tests for the Camera dataclass."""

    def test_viewport_width(self):
        """Viewport width is aspect_ratio * viewport_height."""
        from spheretrace.camera.viewport import Camera

        camera = Camera(aspect_ratio=16.0 / 9.0)
        assert camera.viewport_height == 2.0
        assert camera.focal_length == 1.0
        assert abs(camera.viewport_width - 32.0 / 9.0) < 1e-12

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"aspect_ratio": 0.0},
            {"aspect_ratio": 1.0, "viewport_height": -2.0},
            {"aspect_ratio": 1.0, "focal_length": 0.0},
        ],
    )
    def test_rejects_non_positive_values(self, kwargs):
        """Non-positive dimensions are rejected."""
        from spheretrace.camera.viewport import Camera

        with pytest.raises(ValueError):
            Camera(**kwargs)


class TestCameraSetup:
    """Tests for setup_camera and primary rays."""

    def test_default_camera_vectors(self):
        """The default camera places its viewport one unit down -z."""
        from spheretrace.camera.viewport import Camera, get_camera_info, setup_camera

        setup_camera(Camera(aspect_ratio=2.0))
        info = get_camera_info()
        assert info["origin"] == pytest.approx((0.0, 0.0, 0.0))
        assert info["horizontal"] == pytest.approx((4.0, 0.0, 0.0))
        assert info["vertical"] == pytest.approx((0.0, 2.0, 0.0))
        assert info["lower_left"] == pytest.approx((-2.0, -1.0, -1.0))

    def test_center_ray_points_forward(self):
        """(0.5, 0.5) looks straight down -z."""
        from spheretrace.camera.viewport import Camera, setup_camera

        setup_camera(Camera(aspect_ratio=16.0 / 9.0))
        origin, direction = _ray_for(0.5, 0.5)
        assert origin == pytest.approx([0.0, 0.0, 0.0])
        assert direction == pytest.approx([0.0, 0.0, -1.0])

    def test_corner_rays(self):
        """(0, 0) and (1, 1) hit the lower-left and upper-right corners."""
        from spheretrace.camera.viewport import Camera, setup_camera

        setup_camera(Camera(aspect_ratio=2.0))
        _, lower_left = _ray_for(0.0, 0.0)
        _, upper_right = _ray_for(1.0, 1.0)
        assert lower_left == pytest.approx([-2.0, -1.0, -1.0])
        assert upper_right == pytest.approx([2.0, 1.0, -1.0])

    def test_offset_origin(self):
        """Rays start at the camera origin and still aim at the viewport."""
        from spheretrace.camera.viewport import Camera, setup_camera

        setup_camera(Camera(aspect_ratio=1.0, origin=(1.0, 2.0, 3.0)))
        origin, direction = _ray_for(0.5, 0.5)
        assert origin == pytest.approx([1.0, 2.0, 3.0])
        assert direction == pytest.approx([0.0, 0.0, -1.0])

    def test_jittered_rays_stay_in_pixel(self):
        """Jittered rays for pixel (i, j) fall in [i, i+1) x [j, j+1) of the grid."""
        from spheretrace.camera.viewport import Camera, get_ray_jittered, setup_camera
        from spheretrace.core.sampler import seed_streams

        width, height = 11, 5
        num = 256
        setup_camera(Camera(aspect_ratio=2.0))
        seed_streams(seed=2, count=num)
        directions = ti.Vector.field(3, dtype=ti.f64, shape=num)

        @ti.kernel
        def test_kernel():
            for s in range(num):
                ray = get_ray_jittered(3, 2, width, height, s)
                directions[s] = ray.direction

        test_kernel()
        d = directions.to_numpy()
        # Invert direction = lower_left + u*h + v*v for the aspect-2 camera
        u = (d[:, 0] + 2.0) / 4.0
        v = (d[:, 1] + 1.0) / 2.0
        px = u * (width - 1)
        py = v * (height - 1)
        assert ((px >= 3.0 - 1e-9) & (px < 4.0)).all()
        assert ((py >= 2.0 - 1e-9) & (py < 3.0)).all()
        np.testing.assert_allclose(d[:, 2], -1.0)

    def test_single_pixel_image(self):
        """A 1x1 image uses a denominator of 1 instead of dividing by zero."""
        from spheretrace.camera.viewport import Camera, get_ray_jittered, setup_camera
        from spheretrace.core.sampler import seed_streams

        setup_camera(Camera(aspect_ratio=1.0))
        seed_streams(seed=0, count=1)
        direction = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            for _ in range(1):
                direction[None] = get_ray_jittered(0, 0, 1, 1, 0).direction

        test_kernel()
        d = list(direction[None])
        assert all(np.isfinite(d))
        assert -1.0 <= d[0] < 1.0
        assert -1.0 <= d[1] < 1.0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
