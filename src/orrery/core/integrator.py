"""Path tracing integrator for Monte Carlo light transport.

This module implements the rendering kernel: per-pixel sample accumulation
driven by a recursive light-transport estimator, written as a bounded loop.

For a ray and a depth budget, ray_color returns

    black                                   if depth <= 0
    background                              if the ray escapes
    emitted                                 if the material absorbs
    emitted + attenuation * ray_color(scattered, depth - 1)   otherwise

which is the one-sample Monte Carlo estimator of the rendering equation with
the material's scatter distribution as the importance density. The loop
carries a running throughput (product of attenuations) and a radiance sum
instead of recursing.

Key features:
    - Material dispatch (Lambertian, DiffuseLight)
    - Per-pixel random streams, so images are reproducible from a seed
    - Batched accumulation of samples into a preallocated buffer
    - Self-intersection avoidance through a positive minimum ray parameter
      and scattered origins offset off the surface by coordinate magnitude

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from src.orrery.core.integrator import render_samples, setup_render_target
    >>> from src.orrery.core.sampler import seed_streams
    >>> seed_streams(42)
    >>> setup_render_target(400, 225)
    >>> render_samples(num_samples=16, max_depth=50)
"""

import numpy as np
import taichi as ti
import taichi.math as tm

from src.orrery.camera.camera import get_ray
from src.orrery.core.interval import Interval
from src.orrery.core.ray import Ray, make_ray
from src.orrery.materials.diffuse_light import (
    emit_diffuse_light,
    get_diffuse_light_texture,
    scatter_diffuse_light,
)
from src.orrery.materials.lambertian import get_lambertian_texture, scatter_lambertian
from src.orrery.materials.textures import texture_value
from src.orrery.scene.intersection import SceneHitRecord, intersect_scene
from src.orrery.scene.manager import (
    MaterialType,
    get_material_type,
    get_material_type_index,
)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# t_min and t_max for ray intersection; t_min > 0 keeps scattered rays from
# re-hitting the surface they leave
T_MIN = 1e-3
T_MAX = 1e10

# Scattered rays start this far off the surface per unit of coordinate
# magnitude. f32 hit points carry an absolute error of a few ulps, which
# exceeds T_MIN once coordinates reach the thousands.
SURFACE_OFFSET_SCALE = 1e-5

# Radiance of rays that escape the scene
_background = ti.Vector.field(3, dtype=ti.f32, shape=())


def set_background(color: tuple[float, float, float]) -> None:
    """Set the radiance returned by rays that hit nothing."""
    _background[None] = [color[0], color[1], color[2]]


def get_background() -> tuple[float, float, float]:
    """Get the current background radiance."""
    bg = _background[None]
    return (float(bg[0]), float(bg[1]), float(bg[2]))


# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Sum of all samples per pixel, indexed [column, row] with row 0 at the top
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Samples accumulated so far (identical for every pixel)
_sample_count = ti.field(dtype=ti.i32, shape=())

_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffers.

    Sets the active image dimensions and clears the buffers. The buffers are
    preallocated to MAX_IMAGE_WIDTH x MAX_IMAGE_HEIGHT.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If dimensions exceed maximum supported size.
    """
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the render target buffers to zero."""
    _color_buffer.fill(0.0)
    _sample_count[None] = 0


def reset_render_target() -> None:
    """Forget the render target entirely (used between tests)."""
    clear_render_target()
    _image_width[None] = 0
    _image_height[None] = 0
    _render_target_initialized[None] = 0


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions.

    Returns:
        Tuple of (width, height).
    """
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def offset_ray_origin(point: vec3, normal: vec3) -> vec3:
    """Move a surface point off the surface along the ray-facing normal.

    The offset grows with the largest coordinate of the point, so it stays
    above the rounding error of f32 hit points at any scene scale.

    Args:
        point: The hit point.
        normal: Unit normal on the side the scattered ray leaves from.

    Returns:
        The origin for the scattered ray.
    """
    magnitude = ti.max(ti.abs(point.x), ti.abs(point.y), ti.abs(point.z))
    return point + (SURFACE_OFFSET_SCALE * (1.0 + magnitude)) * normal


@ti.func
def scatter_material(material_id: ti.i32, ray_in: Ray, rec: SceneHitRecord, stream: ti.i32):
    """Dispatch to the scatter function of the hit material.

    Unknown material types fall back to absorbing every ray.

    Args:
        material_id: The unified material ID.
        ray_in: The incoming ray.
        rec: The hit record at the scattering point.
        stream: The generator stream to draw from.

    Returns:
        A tuple (did_scatter, attenuation, scattered_ray). attenuation and
        scattered_ray are meaningless when did_scatter is 0.
    """
    mat_type = get_material_type(material_id)
    type_index = get_material_type_index(material_id)

    did_scatter = 0
    attenuation = vec3(0.0, 0.0, 0.0)
    scattered_direction = ray_in.direction

    if mat_type == int(MaterialType.LAMBERTIAN):
        albedo = texture_value(get_lambertian_texture(type_index), rec.u, rec.v, rec.point)
        scattered_direction, attenuation = scatter_lambertian(albedo, rec.normal, stream)
        did_scatter = 1

    elif mat_type == int(MaterialType.DIFFUSE_LIGHT):
        did_scatter = scatter_diffuse_light()

    scattered = make_ray(offset_ray_origin(rec.point, rec.normal), scattered_direction)
    return did_scatter, attenuation, scattered


@ti.func
def emit_material(material_id: ti.i32, u: ti.f32, v: ti.f32, p: vec3) -> vec3:
    """Radiance emitted by the hit material; black for non-emitters."""
    mat_type = get_material_type(material_id)
    emission = vec3(0.0, 0.0, 0.0)

    if mat_type == int(MaterialType.DIFFUSE_LIGHT):
        type_index = get_material_type_index(material_id)
        emission = emit_diffuse_light(get_diffuse_light_texture(type_index), u, v, p)

    return emission


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def ray_color(ray: Ray, max_depth: ti.i32, stream: ti.i32) -> vec3:
    """Estimate the radiance arriving along a ray.

    Args:
        ray: The ray to trace.
        max_depth: Number of path segments allowed. 0 or less gives black.
        stream: The generator stream to draw from.

    Returns:
        The estimated radiance (RGB).
    """
    radiance = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    current = ray

    # Active flag for path continuation (no break inside ti.func loops)
    active = 1

    for _ in range(max_depth):
        if active == 1:
            rec = intersect_scene(current, Interval(min=T_MIN, max=T_MAX))

            if rec.hit == 0:
                radiance += throughput * _background[None]
                active = 0
            else:
                radiance += throughput * emit_material(rec.material_id, rec.u, rec.v, rec.point)

                did_scatter, attenuation, scattered = scatter_material(
                    rec.material_id, current, rec, stream
                )

                if did_scatter == 0:
                    active = 0
                else:
                    throughput *= attenuation
                    current = scattered

    return radiance


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _accumulate_samples(width: ti.i32, height: ti.i32, num_samples: ti.i32, max_depth: ti.i32):
    """Trace num_samples camera rays per pixel and add them to the buffer.

    Pixels run in parallel; the samples of one pixel run in order on its own
    random stream.
    """
    for i, j in ti.ndrange(width, height):
        stream = j * width + i
        color_sum = vec3(0.0, 0.0, 0.0)
        for _ in range(num_samples):
            ray = get_ray(i, j, stream)
            color_sum += ray_color(ray, max_depth, stream)
        _color_buffer[i, j] += color_sum


@ti.kernel
def _trace_single_ray(origin: vec3, direction: vec3, max_depth: ti.i32, stream: ti.i32) -> vec3:
    return ray_color(make_ray(origin, direction), max_depth, stream)


# =============================================================================
# Public Rendering API
# =============================================================================


def render_samples(num_samples: int, max_depth: int) -> None:
    """Add num_samples samples to every pixel of the render target.

    Can be called repeatedly; the samples of successive calls continue each
    pixel's random stream, so splitting a render into batches does not
    change the result.

    Args:
        num_samples: Samples per pixel to add.
        max_depth: Maximum number of ray bounces.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    _accumulate_samples(width, height, num_samples, max_depth)
    _sample_count[None] += num_samples


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    max_depth: int,
    stream: int = 0,
) -> tuple[float, float, float]:
    """Trace a single ray through the current scene.

    This is a Python-callable function for testing; it does not touch the
    render target.

    Returns:
        Tuple of (R, G, B) radiance.
    """
    color = _trace_single_ray(
        vec3(origin[0], origin[1], origin[2]),
        vec3(direction[0], direction[1], direction[2]),
        max_depth,
        stream,
    )
    return (float(color[0]), float(color[1]), float(color[2]))


def get_total_samples() -> int:
    """Get the number of samples accumulated per pixel so far."""
    return int(_sample_count[None])


def get_accumulated_numpy() -> np.ndarray:
    """Get the raw per-pixel sample sums.

    Returns:
        float32 array of shape (height, width, 3), row 0 at the top.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    full_image = _color_buffer.to_numpy()

    # (width, height, 3) -> (height, width, 3)
    image = np.transpose(full_image[:width, :height, :], (1, 0, 2))
    return np.ascontiguousarray(image, dtype=np.float32)


def get_average_image_numpy() -> np.ndarray:
    """Get the linear average radiance per pixel.

    Returns:
        float32 array of shape (height, width, 3). All zeros before any
        sample has been rendered.
    """
    image = get_accumulated_numpy()
    samples = get_total_samples()
    if samples == 0:
        return image
    return image / np.float32(samples)
