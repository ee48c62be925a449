"""Diffuse light (emissive) material implementation.

A diffuse light never scatters: a path that reaches it ends there and picks
up the emitted radiance. The emission is a texture lookup, so a light can be
image-mapped (the sun's surface, the star field) and can exceed 1 per
channel to represent bright sources.
"""

import taichi as ti
import taichi.math as tm

from src.orrery.materials.textures import texture_value

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def scatter_diffuse_light() -> ti.i32:
    """Emitters absorb every incoming ray. Always returns 0 (no scatter)."""
    return 0


@ti.func
def emit_diffuse_light(texture_id: ti.i32, u: ti.f32, v: ti.f32, p: vec3) -> vec3:
    """Emitted radiance at a surface point.

    Args:
        texture_id: ID of the emission texture.
        u: Horizontal texture coordinate.
        v: Vertical texture coordinate.
        p: The hit point.

    Returns:
        The emission texture's value at (u, v, p).
    """
    return texture_value(texture_id, u, v, p)


# =============================================================================
# Material Field Storage
# =============================================================================

MAX_DIFFUSE_LIGHT_MATERIALS = 64

diffuse_light_texture_ids = ti.field(dtype=ti.i32, shape=MAX_DIFFUSE_LIGHT_MATERIALS)
num_diffuse_light_materials = ti.field(dtype=ti.i32, shape=())


def clear_diffuse_light_materials() -> None:
    """Clear all diffuse light materials."""
    num_diffuse_light_materials[None] = 0


def add_diffuse_light_material(texture_id: int) -> int:
    """Add a diffuse light material to the registry.

    Args:
        texture_id: ID of the emission texture.

    Returns:
        The index of the added material within the diffuse light registry.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
    """
    idx = num_diffuse_light_materials[None]
    if idx >= MAX_DIFFUSE_LIGHT_MATERIALS:
        raise RuntimeError(
            f"Maximum number of diffuse light materials ({MAX_DIFFUSE_LIGHT_MATERIALS}) exceeded"
        )

    diffuse_light_texture_ids[idx] = texture_id
    num_diffuse_light_materials[None] = idx + 1
    return idx


def get_diffuse_light_material_count() -> int:
    """Get the number of diffuse light materials in the registry."""
    return int(num_diffuse_light_materials[None])


@ti.func
def get_diffuse_light_texture(material_idx: ti.i32) -> ti.i32:
    """Get the emission texture ID of a diffuse light material by index."""
    return diffuse_light_texture_ids[material_idx]
