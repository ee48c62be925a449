"""Materials module for textures and scattering models.

Components:
    image_loader: Decoding texture images with Pillow
    textures: Solid and image texture registry and lookup
    lambertian: Ideal diffuse reflection with a textured albedo
    diffuse_light: Non-scattering emitter with a textured emission

Materials reference textures by ID, so any number of materials can share
one texture.
"""

from .diffuse_light import (
    add_diffuse_light_material,
    clear_diffuse_light_materials,
    emit_diffuse_light,
    get_diffuse_light_material_count,
    get_diffuse_light_texture,
    scatter_diffuse_light,
)
from .image_loader import ImageData, empty_image, image_from_array, load_image
from .lambertian import (
    add_lambertian_material,
    clear_lambertian_materials,
    get_lambertian_material_count,
    get_lambertian_texture,
    scatter_lambertian,
)
from .textures import (
    DIAGNOSTIC_COLOR,
    TextureType,
    add_image_texture,
    add_solid_texture,
    clear_textures,
    get_texel_count,
    get_texture_count,
    image_texture_value,
    texture_value,
)

__all__ = [
    # Images
    "ImageData",
    "empty_image",
    "image_from_array",
    "load_image",
    # Textures
    "TextureType",
    "DIAGNOSTIC_COLOR",
    "add_solid_texture",
    "add_image_texture",
    "clear_textures",
    "get_texture_count",
    "get_texel_count",
    "texture_value",
    "image_texture_value",
    # Lambertian
    "scatter_lambertian",
    "add_lambertian_material",
    "clear_lambertian_materials",
    "get_lambertian_material_count",
    "get_lambertian_texture",
    # Diffuse light
    "scatter_diffuse_light",
    "emit_diffuse_light",
    "add_diffuse_light_material",
    "clear_diffuse_light_materials",
    "get_diffuse_light_material_count",
    "get_diffuse_light_texture",
]
