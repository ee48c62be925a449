"""Thin-lens camera model for ray generation.

The camera supports:
- Look-at positioning (lookfrom, lookat, vup)
- Vertical field of view specification
- Arbitrary aspect ratios
- Jittered sub-pixel sampling for anti-aliasing
- Depth of field via a defocus disk

The camera builds an orthonormal basis (u, v, w) from the view parameters:
- w: points from lookat toward lookfrom (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

The focus plane passes through lookat, at focus distance |lookfrom - lookat|
from the camera, and the viewport lies on it:

    viewport_height = 2 * tan(vfov / 2) * focus_dist
    viewport_width  = viewport_height * aspect_ratio

Pixel (0, 0) is the top-left pixel; rows run top to bottom. With a
defocus angle of 0 every ray starts at lookfrom (a pinhole camera).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from src.orrery.camera.camera import CameraConfig, setup_camera
    >>> camera = CameraConfig(
    ...     image_width=400,
    ...     lookfrom=(0.0, 0.0, 3.0),
    ...     lookat=(0.0, 0.0, 0.0),
    ... )
    >>> setup_camera(camera)
    >>> # Inside a Taichi kernel: ray = get_ray(i, j, stream)
"""

import math
from dataclasses import dataclass
from typing import Optional

import numpy as np
import taichi as ti

from src.orrery.core.ray import Ray, make_ray, random_in_unit_disk, vec3
from src.orrery.core.sampler import random_float

Point3 = tuple[float, float, float]
Color = tuple[float, float, float]


# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class CameraConfig:
    """Parameters of the camera and of the render it drives.

    Attributes:
        aspect_ratio: Image width divided by height.
        image_width: Rendered image width in pixels.
        samples_per_pixel: Number of random samples averaged per pixel.
        max_depth: Maximum number of ray bounces.
        vfov: Vertical field of view in degrees.
        lookfrom: Camera position in world space.
        lookat: Point the camera looks at; also fixes the focus distance.
        vup: Camera-relative up direction.
        defocus_angle: Cone angle of rays through each pixel, in degrees.
            0 disables depth of field.
        background: Radiance returned by rays that escape the scene.
        seed: Seed of the random streams. None picks a fresh seed per
            render.
    """

    aspect_ratio: float = 1.0
    image_width: int = 100
    samples_per_pixel: int = 10
    max_depth: int = 10
    vfov: float = 90.0
    lookfrom: Point3 = (0.0, 0.0, 0.0)
    lookat: Point3 = (0.0, 0.0, -1.0)
    vup: Point3 = (0.0, 1.0, 0.0)
    defocus_angle: float = 0.0
    background: Color = (0.0, 0.0, 0.0)
    seed: Optional[int] = None

    @property
    def image_height(self) -> int:
        """Image height in pixels, at least 1."""
        return max(1, int(self.image_width / self.aspect_ratio))

    @property
    def focus_dist(self) -> float:
        """Distance from lookfrom to the plane of perfect focus."""
        return float(np.linalg.norm(np.subtract(self.lookfrom, self.lookat)))


# =============================================================================
# Taichi Fields for Camera State (GPU-accessible)
# =============================================================================

_camera_center = ti.Vector.field(3, dtype=ti.f32, shape=())

# Orthonormal basis vectors
_camera_u = ti.Vector.field(3, dtype=ti.f32, shape=())  # Right
_camera_v = ti.Vector.field(3, dtype=ti.f32, shape=())  # Up
_camera_w = ti.Vector.field(3, dtype=ti.f32, shape=())  # Backward (opposite view)

# Center of pixel (0, 0) and offsets to its right and lower neighbours
_pixel00_loc = ti.Vector.field(3, dtype=ti.f32, shape=())
_pixel_delta_u = ti.Vector.field(3, dtype=ti.f32, shape=())
_pixel_delta_v = ti.Vector.field(3, dtype=ti.f32, shape=())

# Defocus disk radius vectors
_defocus_disk_u = ti.Vector.field(3, dtype=ti.f32, shape=())
_defocus_disk_v = ti.Vector.field(3, dtype=ti.f32, shape=())
_defocus_angle = ti.field(dtype=ti.f32, shape=())


# =============================================================================
# Camera Setup (Python-side, called once per camera configuration)
# =============================================================================


def setup_camera(camera: CameraConfig) -> None:
    """Initialize camera state from configuration.

    Computes the basis, the pixel grid on the focus plane and the defocus
    disk. Degenerate bases (lookfrom == lookat, or vup parallel to the view
    direction) are not checked and produce NaN rays.

    Args:
        camera: Camera configuration.
    """
    image_width = camera.image_width
    image_height = camera.image_height

    lookfrom = np.array(camera.lookfrom, dtype=np.float64)
    lookat = np.array(camera.lookat, dtype=np.float64)
    vup = np.array(camera.vup, dtype=np.float64)

    focus_dist = np.linalg.norm(lookfrom - lookat)
    theta = math.radians(camera.vfov)
    h = math.tan(theta / 2.0)
    viewport_height = 2.0 * h * focus_dist
    viewport_width = viewport_height * camera.aspect_ratio

    w = lookfrom - lookat
    w = w / np.linalg.norm(w)
    u = np.cross(vup, w)
    u = u / np.linalg.norm(u)
    v = np.cross(w, u)

    # Viewport edges; the vertical one points down the image
    viewport_u = viewport_width * u
    viewport_v = viewport_height * -v

    pixel_delta_u = viewport_u / image_width
    pixel_delta_v = viewport_v / image_height

    viewport_upper_left = lookfrom - focus_dist * w - viewport_u / 2.0 - viewport_v / 2.0
    pixel00_loc = viewport_upper_left + 0.5 * (pixel_delta_u + pixel_delta_v)

    defocus_radius = focus_dist * math.tan(math.radians(camera.defocus_angle / 2.0))

    _camera_center[None] = lookfrom.tolist()
    _camera_u[None] = u.tolist()
    _camera_v[None] = v.tolist()
    _camera_w[None] = w.tolist()
    _pixel00_loc[None] = pixel00_loc.tolist()
    _pixel_delta_u[None] = pixel_delta_u.tolist()
    _pixel_delta_v[None] = pixel_delta_v.tolist()
    _defocus_disk_u[None] = (u * defocus_radius).tolist()
    _defocus_disk_v[None] = (v * defocus_radius).tolist()
    _defocus_angle[None] = camera.defocus_angle


# =============================================================================
# Ray Generation (Taichi-compatible, GPU-callable)
# =============================================================================


@ti.func
def _defocus_disk_sample(stream: ti.i32) -> vec3:
    """Random point on the camera's defocus disk."""
    p = random_in_unit_disk(stream)
    return _camera_center[None] + p.x * _defocus_disk_u[None] + p.y * _defocus_disk_v[None]


@ti.func
def get_ray(pixel_i: ti.i32, pixel_j: ti.i32, stream: ti.i32) -> Ray:
    """Generate a jittered camera ray for pixel (i, j).

    The ray targets a random point in the square of side 1 centered on the
    pixel, and starts on the defocus disk (or at the camera center when the
    defocus angle is 0). The direction is not normalized.

    Args:
        pixel_i: Column, 0 = left.
        pixel_j: Row, 0 = top.
        stream: The generator stream to draw from.

    Returns:
        The camera ray.
    """
    offset_x = random_float(stream) - 0.5
    offset_y = random_float(stream) - 0.5
    pixel_sample = (
        _pixel00_loc[None]
        + (ti.cast(pixel_i, ti.f32) + offset_x) * _pixel_delta_u[None]
        + (ti.cast(pixel_j, ti.f32) + offset_y) * _pixel_delta_v[None]
    )

    origin = _camera_center[None]
    if _defocus_angle[None] > 0.0:
        origin = _defocus_disk_sample(stream)

    return make_ray(origin, pixel_sample - origin)


@ti.func
def get_camera_basis():
    """Get the camera's orthonormal basis vectors.

    Returns:
        A tuple (u, v, w): right, up and backward directions in world space.
    """
    return _camera_u[None], _camera_v[None], _camera_w[None]


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with center, u, v, w, pixel00, pixel_delta_u,
        pixel_delta_v, defocus_disk_u and defocus_disk_v.
    """
    fields = {
        "center": _camera_center,
        "u": _camera_u,
        "v": _camera_v,
        "w": _camera_w,
        "pixel00": _pixel00_loc,
        "pixel_delta_u": _pixel_delta_u,
        "pixel_delta_v": _pixel_delta_v,
        "defocus_disk_u": _defocus_disk_u,
        "defocus_disk_v": _defocus_disk_v,
    }
    info = {}
    for name, f in fields.items():
        vec = f[None]
        info[name] = (float(vec[0]), float(vec[1]), float(vec[2]))
    return info
