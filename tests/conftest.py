"""Pytest configuration for spheretrace tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which would
    invalidate the module-level fields of already imported modules.
    """
    ti.init(arch=ti.cpu, default_fp=ti.f64, fast_math=False, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear material tables and the render target around each test."""
    # Import here so Taichi is initialized first
    from spheretrace.core.integrator import clear_render_target
    from spheretrace.materials.registry import clear_material_registry

    def _clear_all():
        clear_material_registry()
        clear_render_target()

    _clear_all()
    yield
    _clear_all()
