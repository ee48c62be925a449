"""Texture registry and lookup.

Textures map a surface coordinate (u, v) and a hit point to a color. Two
kinds exist:

- SOLID: a constant color, ignoring all inputs.
- IMAGE: an equirectangular image lookup scaled by a brightness factor.

Colors are not bounded above: an emissive texture with brightness 20 returns
values up to 20 per channel, which directly becomes light intensity.

All textures live in Taichi fields indexed by a texture ID, so any number of
materials can share one texture. Image texels of every texture are packed
into a single flat field; each image texture records its offset into it.

Image lookup clamps u and v to [0, 1], flips v (texture space is bottom-up,
images are stored top-down) and picks the nearest texel:

    i = floor(u * width),  j = floor((1 - v) * height)

If a texture has no rows (its image failed to load) the lookup returns a
cyan diagnostic color instead.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.orrery.materials.textures import add_solid_texture
    >>> tex_id = add_solid_texture((0.8, 0.3, 0.3))
    >>> # Use texture_value(tex_id, u, v, p) within a Taichi kernel
"""

from enum import IntEnum

import numpy as np
import taichi as ti
import taichi.math as tm

from src.orrery.core.interval import Interval, interval_clamp
from src.orrery.materials.image_loader import ImageData

# Type alias for 3D vectors
vec3 = tm.vec3


class TextureType(IntEnum):
    """Enumeration of supported texture kinds."""

    SOLID = 0
    IMAGE = 1


# Returned for textures whose image has no data
DIAGNOSTIC_COLOR = (0.0, 1.0, 1.0)

# Maximum number of textures in the registry
MAX_TEXTURES = 256

# Total texel budget shared by all image textures
MAX_TEXELS = 1 << 24

texture_types = ti.field(dtype=ti.i32, shape=MAX_TEXTURES)
texture_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_TEXTURES)
texture_widths = ti.field(dtype=ti.i32, shape=MAX_TEXTURES)
texture_heights = ti.field(dtype=ti.i32, shape=MAX_TEXTURES)
texture_offsets = ti.field(dtype=ti.i32, shape=MAX_TEXTURES)
# brightness / 255, applied to raw 8-bit texels
texture_scales = ti.field(dtype=ti.f32, shape=MAX_TEXTURES)
num_textures = ti.field(dtype=ti.i32, shape=())

texels = ti.Vector.field(3, dtype=ti.u8, shape=MAX_TEXELS)
num_texels = ti.field(dtype=ti.i32, shape=())


@ti.kernel
def _upload_texels(pixels: ti.types.ndarray(), offset: ti.i32, count: ti.i32):
    for k in range(count):
        texels[offset + k] = ti.Vector([pixels[k, 0], pixels[k, 1], pixels[k, 2]], dt=ti.u8)


def clear_textures() -> None:
    """Clear all textures and release the texel storage."""
    num_textures[None] = 0
    num_texels[None] = 0


def _next_texture_index() -> int:
    idx = num_textures[None]
    if idx >= MAX_TEXTURES:
        raise RuntimeError(f"Maximum number of textures ({MAX_TEXTURES}) exceeded")
    return idx


def add_solid_texture(color: tuple[float, float, float]) -> int:
    """Add a constant-color texture.

    Args:
        color: The (R, G, B) color. Components may exceed 1 for emitters.

    Returns:
        The texture ID.

    Raises:
        RuntimeError: If the maximum number of textures is exceeded.
    """
    idx = _next_texture_index()
    texture_types[idx] = int(TextureType.SOLID)
    texture_colors[idx] = [color[0], color[1], color[2]]
    texture_widths[idx] = 0
    texture_heights[idx] = 0
    texture_offsets[idx] = 0
    texture_scales[idx] = 0.0
    num_textures[None] = idx + 1
    return idx


def add_image_texture(image: ImageData, brightness: float = 1.0) -> int:
    """Add an image-backed texture.

    An empty image (height 0) is accepted; lookups into it return the cyan
    diagnostic color.

    Args:
        image: The decoded RGB image.
        brightness: Multiplier applied to the normalized texel color.

    Returns:
        The texture ID.

    Raises:
        ValueError: If brightness is negative or the image is not RGB.
        RuntimeError: If the texture or texel capacity is exceeded.
    """
    if brightness < 0.0:
        raise ValueError(f"Texture brightness must be non-negative, got {brightness}")

    idx = _next_texture_index()
    offset = num_texels[None]
    count = 0

    if not image.is_empty:
        if image.channels != 3:
            raise ValueError(f"Image textures must have 3 channels, got {image.channels}")
        count = image.width * image.height
        if offset + count > MAX_TEXELS:
            raise RuntimeError(
                f"Texel storage exhausted: {offset + count} texels requested, "
                f"capacity is {MAX_TEXELS}"
            )
        flat = np.ascontiguousarray(image.pixels.reshape(count, 3), dtype=np.uint8)
        _upload_texels(flat, offset, count)

    texture_types[idx] = int(TextureType.IMAGE)
    texture_colors[idx] = [0.0, 0.0, 0.0]
    texture_widths[idx] = image.width if count > 0 else 0
    texture_heights[idx] = image.height if count > 0 else 0
    texture_offsets[idx] = offset
    texture_scales[idx] = brightness / 255.0
    num_textures[None] = idx + 1
    num_texels[None] = offset + count
    return idx


def get_texture_count() -> int:
    """Get the number of textures in the registry."""
    return int(num_textures[None])


def get_texel_count() -> int:
    """Get the number of texels used by all image textures."""
    return int(num_texels[None])


@ti.func
def image_texture_value(texture_idx: ti.i32, u: ti.f32, v: ti.f32) -> vec3:
    """Look up an image texture at (u, v).

    Args:
        texture_idx: ID of an IMAGE texture.
        u: Horizontal coordinate, clamped to [0, 1].
        v: Vertical coordinate (0 = bottom), clamped to [0, 1].

    Returns:
        brightness / 255 times the nearest texel, or cyan if the texture has
        no image data.
    """
    result = vec3(0.0, 1.0, 1.0)
    width = texture_widths[texture_idx]
    height = texture_heights[texture_idx]

    if height > 0 and width > 0:
        unit = Interval(min=0.0, max=1.0)
        uc = interval_clamp(unit, u)
        # Flip v to image row order
        vc = 1.0 - interval_clamp(unit, v)

        i = ti.cast(uc * ti.cast(width, ti.f32), ti.i32)
        j = ti.cast(vc * ti.cast(height, ti.f32), ti.i32)
        # u = 1 or v = 0 land one past the last texel
        i = ti.min(ti.max(i, 0), width - 1)
        j = ti.min(ti.max(j, 0), height - 1)

        texel = texels[texture_offsets[texture_idx] + j * width + i]
        result = texture_scales[texture_idx] * vec3(
            ti.cast(texel[0], ti.f32),
            ti.cast(texel[1], ti.f32),
            ti.cast(texel[2], ti.f32),
        )

    return result


@ti.func
def texture_value(texture_id: ti.i32, u: ti.f32, v: ti.f32, p: vec3) -> vec3:
    """Evaluate a texture.

    Args:
        texture_id: The texture ID.
        u: Horizontal texture coordinate.
        v: Vertical texture coordinate.
        p: The hit point. Neither texture kind depends on it.

    Returns:
        The texture color. Unknown IDs yield the cyan diagnostic color.
    """
    result = vec3(0.0, 1.0, 1.0)
    if texture_id >= 0 and texture_id < num_textures[None]:
        kind = texture_types[texture_id]
        if kind == int(TextureType.SOLID):
            result = texture_colors[texture_id]
        elif kind == int(TextureType.IMAGE):
            result = image_texture_value(texture_id, u, v)
    return result
