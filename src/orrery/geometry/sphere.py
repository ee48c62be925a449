"""Sphere primitive with robust ray-sphere intersection and UV mapping.

This module provides the Sphere dataclass, the HitRecord it produces, and
the intersection routine used by the scene. Intersection uses the robust
quadratic formula from Ray Tracing Gems to avoid catastrophic cancellation,
which matters at solar-system scale where ray origins sit thousands of units
away from small spheres. Hit points are projected back onto the sphere so
they lie on the surface to within rounding of the center and radius.

Texture coordinates follow the equirectangular convention: u runs once
around the Y axis starting at -X, v runs from the south pole (v = 0) to the
north pole (v = 1).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.orrery.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -1), radius=0.5)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from src.orrery.core.interval import Interval, interval_surrounds
from src.orrery.core.ray import Ray, ray_at

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (non-negative float).
    """

    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Record of a ray-sphere intersection.

    Attributes:
        hit: Whether the ray intersected the sphere (1 if hit, 0 if miss).
        t: The parameter value along the ray where intersection occurred.
        point: The 3D point where the ray intersected the sphere.
        normal: The unit surface normal, oriented against the incoming ray.
        u: Horizontal texture coordinate in [0, 1].
        v: Vertical texture coordinate in [0, 1].
        front_face: 1 if the ray arrived from outside the sphere, 0 otherwise.

    All fields other than ``hit`` are only meaningful when hit == 1.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    u: ti.f32
    v: ti.f32
    front_face: ti.i32


@ti.func
def _solve_quadratic_robust(h: ti.f32, a: ti.f32, c: ti.f32, sqrt_d: ti.f32):
    """Solve a*t^2 + 2*h*t + c = 0 using a numerically stable method.

    Args:
        h: Half of the linear coefficient.
        a: Quadratic coefficient.
        c: Constant term.
        sqrt_d: Square root of discriminant (h^2 - a*c).

    Returns:
        Tuple of (t0, t1) where t0 <= t1.
    """
    # q = -(h + sign(h) * sqrt(discriminant)) avoids cancellation
    sign_h = ti.select(h < 0.0, -1.0, 1.0)
    q = -(h + sign_h * sqrt_d)

    t0 = 0.0
    t1 = 0.0

    if ti.abs(q) < 1e-10:
        t0 = (-h - sqrt_d) / a
        t1 = (-h + sqrt_d) / a
    else:
        t0 = q / a
        t1 = c / q

    if t0 > t1:
        temp = t0
        t0 = t1
        t1 = temp

    return t0, t1


@ti.func
def solve_sphere_roots(ray: Ray, sphere: Sphere):
    """Find the parameters where a ray's line meets a sphere's surface.

    Solves |O + tD - C|^2 = r^2 written as a*t^2 + 2*h*t + c = 0 with
    a = D.D, h = D.(O - C) and c = |O - C|^2 - r^2.

    Args:
        ray: The ray to test.
        sphere: The sphere to test against.

    Returns:
        A tuple (num_roots, t0, t1). num_roots is 0 when the line misses,
        otherwise 2 with t0 <= t1 (equal for a tangent line). The roots are
        not filtered by any interval.
    """
    oc = ray.origin - sphere.center
    a = tm.dot(ray.direction, ray.direction)
    h = tm.dot(ray.direction, oc)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = h * h - a * c

    num_roots = 0
    t0 = 0.0
    t1 = 0.0
    if discriminant >= 0.0:
        num_roots = 2
        t0, t1 = _solve_quadratic_robust(h, a, c, ti.sqrt(discriminant))

    return num_roots, t0, t1


@ti.func
def get_sphere_uv(outward_normal: vec3):
    """Map a unit outward normal to equirectangular texture coordinates.

    phi = atan2(-n.z, n.x) is the angle around the Y axis, theta =
    acos(-n.y) the angle down from -Y:

        u = (phi + pi) / (2 pi),  v = theta / pi

    Examples: (1,0,0) -> (0.5, 0.5); (0,1,0) -> (0.5, 1.0);
    (0,0,1) -> (0.25, 0.5); (-1,0,0) -> (0.0 or 1.0, 0.5).

    Args:
        outward_normal: Unit normal pointing away from the sphere center.

    Returns:
        Tuple (u, v), both in [0, 1].
    """
    theta = ti.acos(tm.clamp(-outward_normal.y, -1.0, 1.0))
    phi = ti.atan2(-outward_normal.z, outward_normal.x) + tm.pi
    return phi / (2.0 * tm.pi), theta / tm.pi


@ti.func
def hit_sphere(ray: Ray, sphere: Sphere, ray_t: Interval) -> HitRecord:
    """Test for ray-sphere intersection within an open distance interval.

    The smaller root inside (ray_t.min, ray_t.max) is preferred; if only the
    larger one is inside (the ray starts inside the sphere or the near hit
    is too close) that one is used.

    Args:
        ray: The ray to test. The direction need not be normalized.
        sphere: The sphere to test intersection against.
        ray_t: Accepted range of ray parameters (exclusive on both ends).

    Returns:
        A HitRecord. Check its ``hit`` field to determine whether an
        intersection occurred.
    """
    did_hit = 0
    hit_t = 0.0
    hit_point = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)
    hit_u = 0.0
    hit_v = 0.0
    is_front_face = 0

    num_roots, t0, t1 = solve_sphere_roots(ray, sphere)

    if num_roots > 0:
        t = t0
        valid = interval_surrounds(ray_t, t)
        if not valid:
            t = t1
            valid = interval_surrounds(ray_t, t)

        if valid:
            did_hit = 1
            hit_t = t
            # Project the f32 ray point back onto the surface; at large
            # coordinates ray_at lands up to a few ulps inside or outside
            outward_normal = tm.normalize(ray_at(ray, t) - sphere.center)
            hit_point = sphere.center + sphere.radius * outward_normal
            hit_u, hit_v = get_sphere_uv(outward_normal)

            if tm.dot(ray.direction, outward_normal) < 0.0:
                is_front_face = 1
                hit_normal = outward_normal
            else:
                # Ray is inside the sphere, hitting back face
                is_front_face = 0
                hit_normal = -outward_normal

    return HitRecord(
        hit=did_hit,
        t=hit_t,
        point=hit_point,
        normal=hit_normal,
        u=hit_u,
        v=hit_v,
        front_face=is_front_face,
    )


@ti.func
def make_sphere(center: vec3, radius: ti.f32) -> Sphere:
    """Create a sphere from center and radius."""
    return Sphere(center=center, radius=radius)
