"""Lambertian (ideal diffuse) material implementation.

A Lambertian surface scatters every incoming ray. The outgoing direction is
the surface normal plus a random unit vector, which distributes directions
proportionally to cos(theta) around the normal. Because the sampling density
matches the BRDF's cosine term, the path weight reduces to the albedo:

    attenuation = albedo(u, v, p)

The albedo comes from a texture, so image-mapped planets scatter the color
of the texel under the hit point.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.orrery.materials.lambertian import scatter_lambertian
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation = scatter_lambertian(albedo, normal, stream)
"""

import taichi as ti
import taichi.math as tm

from src.orrery.core.ray import near_zero, random_unit_vector

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def scatter_lambertian(albedo: vec3, normal: vec3, stream: ti.i32):
    """Sample a scattered direction for a Lambertian surface.

    Args:
        albedo: The diffuse reflectance color at the hit point (RGB).
        normal: The unit surface normal, facing the incoming ray.
        stream: The generator stream to draw from.

    Returns:
        A tuple (scattered_direction, attenuation). The direction is not
        normalized; it is never the zero vector.
    """
    scattered_direction = normal + random_unit_vector(stream)

    # The random vector can cancel the normal almost exactly
    if near_zero(scattered_direction):
        scattered_direction = normal

    return scattered_direction, albedo


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of Lambertian materials in the scene
MAX_LAMBERTIAN_MATERIALS = 256

# Albedo texture of each Lambertian material
lambertian_texture_ids = ti.field(dtype=ti.i32, shape=MAX_LAMBERTIAN_MATERIALS)
num_lambertian_materials = ti.field(dtype=ti.i32, shape=())


def clear_lambertian_materials() -> None:
    """Clear all Lambertian materials."""
    num_lambertian_materials[None] = 0


def add_lambertian_material(texture_id: int) -> int:
    """Add a Lambertian material to the material registry.

    Args:
        texture_id: ID of the albedo texture.

    Returns:
        The index of the added material within the Lambertian registry.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
    """
    idx = num_lambertian_materials[None]
    if idx >= MAX_LAMBERTIAN_MATERIALS:
        raise RuntimeError(
            f"Maximum number of Lambertian materials ({MAX_LAMBERTIAN_MATERIALS}) exceeded"
        )

    lambertian_texture_ids[idx] = texture_id
    num_lambertian_materials[None] = idx + 1
    return idx


def get_lambertian_material_count() -> int:
    """Get the number of Lambertian materials in the registry."""
    return int(num_lambertian_materials[None])


@ti.func
def get_lambertian_texture(material_idx: ti.i32) -> ti.i32:
    """Get the albedo texture ID of a Lambertian material by index."""
    return lambertian_texture_ids[material_idx]
