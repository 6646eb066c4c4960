"""Unit tests for the Metal material module.

Tests cover:
- Perfect specular reflection (fuzz=0)
- Fuzzy reflection stays within the fuzz ball
- Absorption when the scattered direction points into the surface
- Attenuation equals albedo
- Material table operations and fuzz clamping
"""

import math

import numpy as np
import pytest
import taichi as ti

NUM_SAMPLES = 2048


def _scatter_once(albedo, fuzz, incident, normal, seed=0):
    """Run scatter_metal once and return (direction, attenuation, did_scatter)."""
    from spheretrace.core.sampler import seed_streams
    from spheretrace.core.vec3 import vec3
    from spheretrace.materials.metal import scatter_metal

    result_dir = ti.Vector.field(3, dtype=ti.f64, shape=())
    result_att = ti.Vector.field(3, dtype=ti.f64, shape=())
    result_scatter = ti.field(dtype=ti.i32, shape=())
    seed_streams(seed, 1)

    @ti.kernel
    def test_kernel(
        a: ti.types.vector(3, ti.f64),
        f: ti.f64,
        d: ti.types.vector(3, ti.f64),
        n: ti.types.vector(3, ti.f64),
    ):
        direction, attenuation, did_scatter = scatter_metal(a, f, d, n, 0)
        result_dir[None] = direction
        result_att[None] = attenuation
        result_scatter[None] = did_scatter

    test_kernel(vec3(*albedo), fuzz, vec3(*incident), vec3(*normal))
    return list(result_dir[None]), list(result_att[None]), result_scatter[None]


class TestPerfectReflection:
    """Tests for perfect specular reflection (fuzz=0)."""

    def test_normal_incidence(self):
        """A ray hitting the surface head-on reflects straight back."""
        direction, _, did_scatter = _scatter_once(
            (1.0, 1.0, 1.0), 0.0, (0.0, -1.0, 0.0), (0.0, 1.0, 0.0)
        )
        assert direction == pytest.approx([0.0, 1.0, 0.0])
        assert did_scatter == 1

    def test_45_degrees(self):
        """Reflection at 45 degrees mirrors about the normal."""
        direction, _, did_scatter = _scatter_once(
            (1.0, 1.0, 1.0), 0.0, (1.0, -1.0, 0.0), (0.0, 1.0, 0.0)
        )
        s = 1.0 / math.sqrt(2.0)
        assert direction == pytest.approx([s, s, 0.0])
        assert did_scatter == 1

    def test_incident_length_ignored(self):
        """The incident direction is normalized before reflecting."""
        direction, _, _ = _scatter_once(
            (1.0, 1.0, 1.0), 0.0, (0.0, -7.0, 0.0), (0.0, 1.0, 0.0)
        )
        assert direction == pytest.approx([0.0, 1.0, 0.0])

    def test_attenuation_is_albedo(self):
        """Attenuation equals the material albedo."""
        _, attenuation, _ = _scatter_once(
            (0.8, 0.6, 0.2), 0.0, (0.0, -1.0, 0.0), (0.0, 1.0, 0.0)
        )
        assert attenuation == pytest.approx([0.8, 0.6, 0.2])


class TestFuzzyReflection:
    """Tests for fuzz > 0."""

    def test_fuzz_ball_radius(self):
        """Scattered directions lie within fuzz of the mirror direction."""
        from spheretrace.core.sampler import seed_streams
        from spheretrace.core.vec3 import vec3
        from spheretrace.materials.metal import scatter_metal

        directions = ti.Vector.field(3, dtype=ti.f64, shape=NUM_SAMPLES)
        flags = ti.field(dtype=ti.i32, shape=NUM_SAMPLES)
        seed_streams(seed=4, count=NUM_SAMPLES)

        @ti.kernel
        def test_kernel():
            for i in range(NUM_SAMPLES):
                d, _, s = scatter_metal(
                    vec3(0.8, 0.8, 0.8), 0.3, vec3(0.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0), i
                )
                directions[i] = d
                flags[i] = s

        test_kernel()
        dirs = directions.to_numpy()
        offsets = dirs - np.array([0.0, 1.0, 0.0])
        assert (np.linalg.norm(offsets, axis=1) < 0.3 + 1e-12).all()
        # With fuzz 0.3 around a vertical mirror direction nothing is absorbed
        assert (flags.to_numpy() == 1).all()

    def test_grazing_rays_can_be_absorbed(self):
        """Full fuzz at grazing incidence absorbs some rays, zeroing the direction."""
        from spheretrace.core.sampler import seed_streams
        from spheretrace.core.vec3 import normalize, vec3
        from spheretrace.materials.metal import scatter_metal

        directions = ti.Vector.field(3, dtype=ti.f64, shape=NUM_SAMPLES)
        flags = ti.field(dtype=ti.i32, shape=NUM_SAMPLES)
        seed_streams(seed=6, count=NUM_SAMPLES)

        @ti.kernel
        def test_kernel():
            for i in range(NUM_SAMPLES):
                incident = normalize(vec3(1.0, -0.05, 0.0))
                d, _, s = scatter_metal(vec3(0.8, 0.6, 0.2), 1.0, incident, vec3(0.0, 1.0, 0.0), i)
                directions[i] = d
                flags[i] = s

        test_kernel()
        dirs = directions.to_numpy()
        absorbed = flags.to_numpy() == 0
        assert absorbed.any()
        assert (~absorbed).any()
        # Absorbed rays report the zero vector, kept rays leave the surface
        assert (dirs[absorbed] == 0.0).all()
        assert (dirs[~absorbed][:, 1] > 0.0).all()


class TestMetalMaterialTable:
    """Tests for the metal material table."""

    def test_add_and_read(self):
        """Materials keep their albedo and fuzz."""
        from spheretrace.materials.metal import (
            add_metal_material,
            get_metal_albedo,
            get_metal_fuzz,
            get_metal_material_count,
        )

        assert add_metal_material((0.8, 0.8, 0.8), 0.3) == 0
        assert add_metal_material((0.8, 0.6, 0.2), 1.0) == 1
        assert get_metal_material_count() == 2

        albedo = ti.Vector.field(3, dtype=ti.f64, shape=())
        fuzz = ti.field(dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            albedo[None] = get_metal_albedo(1)
            fuzz[None] = get_metal_fuzz(0)

        test_kernel()
        assert list(albedo[None]) == pytest.approx([0.8, 0.6, 0.2])
        assert abs(fuzz[None] - 0.3) < 1e-12

    @pytest.mark.parametrize(
        "fuzz, expected", [(-0.5, 0.0), (0.0, 0.0), (0.4, 0.4), (1.0, 1.0), (2.5, 1.0)]
    )
    def test_clamp_fuzz(self, fuzz, expected):
        """Fuzz values are clamped to [0, 1]."""
        from spheretrace.materials.metal import clamp_fuzz

        assert clamp_fuzz(fuzz) == expected

    def test_out_of_range_fuzz_is_clamped_on_add(self):
        """add_metal_material() stores the clamped fuzz."""
        from spheretrace.materials.metal import add_metal_material, get_metal_fuzz

        idx = add_metal_material((0.5, 0.5, 0.5), 3.0)
        fuzz = ti.field(dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel(i: ti.i32):
            fuzz[None] = get_metal_fuzz(i)

        test_kernel(idx)
        assert fuzz[None] == 1.0

    def test_rejects_bad_albedo(self):
        """Albedo components must lie in [0, 1]."""
        from spheretrace.materials.metal import add_metal_material

        with pytest.raises(ValueError, match="Albedo"):
            add_metal_material((0.5, 1.5, 0.5), 0.0)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
