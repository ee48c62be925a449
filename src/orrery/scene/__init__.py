"""Scene module for scene management and solar-system construction.

Components:
    intersection: Sphere storage and closest-hit queries
    manager: Unified scene manager coordinating spheres, materials and textures
    solar_system: Immutable solar-system presets and the scene builder

Scene data is organized for efficient GPU access:
    - Structure-of-Arrays layout for sphere data
    - Contiguous material ID arrays
"""

from .intersection import (
    MAX_SPHERES,
    SceneHitRecord,
    add_sphere,
    clear_scene,
    get_sphere_count,
    intersect_scene,
)
from .manager import (
    MAX_MATERIALS,
    MaterialInfo,
    MaterialType,
    SceneManager,
    SphereInfo,
    TextureInfo,
    get_material_type,
    get_material_type_index,
)
from .solar_system import (
    PREVIEW_PRESET,
    PRESETS,
    PRODUCTION_PRESET,
    BodySpec,
    SolarSystemPreset,
    body_positions,
    build_solar_system,
    get_preset,
)

__all__ = [
    # Intersection module
    "SceneHitRecord",
    "add_sphere",
    "clear_scene",
    "get_sphere_count",
    "intersect_scene",
    "MAX_SPHERES",
    # Manager module
    "SceneManager",
    "MaterialType",
    "MaterialInfo",
    "SphereInfo",
    "TextureInfo",
    "MAX_MATERIALS",
    "get_material_type",
    "get_material_type_index",
    # Solar system module
    "BodySpec",
    "SolarSystemPreset",
    "PRODUCTION_PRESET",
    "PREVIEW_PRESET",
    "PRESETS",
    "get_preset",
    "body_positions",
    "build_solar_system",
]
