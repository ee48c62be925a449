"""Pytest configuration for orrery tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene data before and after each test.

    This ensures tests are isolated from each other. The random streams are
    reseeded so kernels that draw random numbers are deterministic.
    """
    # Import here to ensure Taichi is initialized
    from src.orrery.core.integrator import reset_render_target, set_background
    from src.orrery.core.sampler import seed_streams
    from src.orrery.materials.diffuse_light import clear_diffuse_light_materials
    from src.orrery.materials.lambertian import clear_lambertian_materials
    from src.orrery.materials.textures import clear_textures
    from src.orrery.scene.intersection import clear_scene
    from src.orrery.scene.manager import _clear_material_tracking

    def _clear_all():
        clear_scene()
        clear_textures()
        clear_lambertian_materials()
        clear_diffuse_light_materials()
        _clear_material_tracking()
        reset_render_target()
        set_background((0.0, 0.0, 0.0))

    _clear_all()
    seed_streams(12345)

    yield

    _clear_all()


@pytest.fixture
def fresh_scene():
    """Create a fresh SceneManager for a test."""
    from src.orrery.scene.manager import SceneManager

    scene = SceneManager()
    yield scene
    scene.clear()
