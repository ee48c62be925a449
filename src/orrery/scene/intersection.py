"""Scene-level ray intersection over the sphere list.

The scene is an ordered list of spheres stored in Taichi fields. Each sphere
has an associated material ID for shading. intersect_scene scans every
sphere with a shrinking upper bound and returns only the closest hit, so the
order in which spheres were added never changes the result.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.orrery.scene.intersection import add_sphere, clear_scene, intersect_scene
    >>> clear_scene()
    >>> add_sphere((0.0, 0.0, -1.0), 0.5, material_id=0)
    >>> # Use intersect_scene within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from src.orrery.core.interval import Interval
from src.orrery.core.ray import Ray
from src.orrery.geometry.sphere import HitRecord, Sphere, hit_sphere

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection with material information.

    Extends the sphere HitRecord with the material of the struck sphere.

    Attributes:
        hit: Whether the ray intersected any sphere (1 if hit, 0 if miss).
        t: The parameter value along the ray where intersection occurred.
        point: The 3D point where the ray intersected the surface.
        normal: The unit surface normal, oriented against the incoming ray.
        u: Horizontal texture coordinate in [0, 1].
        v: Vertical texture coordinate in [0, 1].
        front_face: Whether the ray hit the front face (1) or back face (0).
        material_id: The material ID of the hit sphere, -1 on a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    u: ti.f32
    v: ti.f32
    front_face: ti.i32
    material_id: ti.i32


# Maximum number of spheres supported in the scene
MAX_SPHERES = 1024

# Sphere storage: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Remove all spheres from the scene.

    Resets the sphere count to zero. The field data is overwritten when new
    spheres are added.
    """
    num_spheres[None] = 0


def add_sphere(
    center: tuple[float, float, float],
    radius: float,
    material_id: int = 0,
) -> int:
    """Add a sphere to the scene.

    A radius of zero is accepted but produces undefined normals; callers are
    expected not to build such spheres.

    Args:
        center: The center point of the sphere.
        radius: The radius of the sphere (non-negative).
        material_id: The material ID to associate with this sphere.

    Returns:
        The index of the added sphere.

    Raises:
        ValueError: If the radius is negative.
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    if radius < 0.0:
        raise ValueError(f"Sphere radius must be non-negative, got {radius}")

    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = [center[0], center[1], center[2]]
    sphere_radii[idx] = radius
    sphere_material_ids[idx] = material_id
    num_spheres[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


@ti.func
def _hit_record_to_scene_hit_record(rec: HitRecord, material_id: ti.i32) -> SceneHitRecord:
    """Attach a material ID to a sphere hit record."""
    return SceneHitRecord(
        hit=rec.hit,
        t=rec.t,
        point=rec.point,
        normal=rec.normal,
        u=rec.u,
        v=rec.v,
        front_face=rec.front_face,
        material_id=material_id,
    )


@ti.func
def _make_miss_record() -> SceneHitRecord:
    """Create a SceneHitRecord indicating no intersection."""
    return SceneHitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        u=0.0,
        v=0.0,
        front_face=0,
        material_id=-1,
    )


@ti.func
def intersect_scene(ray: Ray, ray_t: Interval) -> SceneHitRecord:
    """Test a ray against every sphere in the scene.

    Args:
        ray: The ray to test.
        ray_t: Accepted range of ray parameters (exclusive on both ends).

    Returns:
        A SceneHitRecord for the closest intersection, or a miss record if
        nothing was hit inside ray_t.
    """
    closest = Interval(min=ray_t.min, max=ray_t.max)
    result = _make_miss_record()

    for i in range(num_spheres[None]):
        sphere = Sphere(center=sphere_centers[i], radius=sphere_radii[i])
        rec = hit_sphere(ray, sphere, closest)
        if rec.hit == 1:
            closest.max = rec.t
            result = _hit_record_to_scene_hit_record(rec, sphere_material_ids[i])

    return result
