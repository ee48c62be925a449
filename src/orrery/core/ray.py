"""Ray data structure and vector utilities for the path tracer.

This module provides the Ray dataclass, the small set of vector helpers the
renderer needs, and the random direction samplers used for diffuse
scattering and depth of field. All sampling functions draw from an explicit
generator stream (see ``sampler``) so that results are reproducible for a
given seed.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, -1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import taichi as ti
import taichi.math as tm

from src.orrery.core.sampler import random_float

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Components below this magnitude count as zero
NEAR_ZERO_EPSILON = 1e-8

# Rejection sampling gives up after this many attempts
_MAX_REJECTION_TRIES = 64


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Not required to be
            unit length; intersection routines handle arbitrary lengths.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length(v: vec3) -> ti.f32:
    """Compute the Euclidean length of a vector."""
    return tm.length(v)


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Compute the squared length of a vector."""
    return tm.dot(v, v)


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length."""
    return tm.normalize(v)


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    """Compute the dot product a . b."""
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product a x b."""
    return tm.cross(a, b)


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Check if a vector is near zero in all components.

    Used to catch degenerate scatter directions, where a random unit vector
    almost exactly cancels the surface normal.

    Args:
        v: The vector to check.

    Returns:
        1 if every component is below NEAR_ZERO_EPSILON in magnitude, 0 otherwise.
    """
    s = NEAR_ZERO_EPSILON
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


# =============================================================================
# Random Sampling Utilities for Monte Carlo
# =============================================================================


@ti.func
def random_in_unit_sphere(stream: ti.i32) -> vec3:
    """Generate a random point strictly inside the unit sphere.

    Uses rejection sampling. Points extremely close to the origin are
    rejected as well, so the result can always be normalized safely.

    Args:
        stream: The generator stream to draw from.

    Returns:
        A random point p with 1e-20 < |p|^2 < 1.
    """
    p = vec3(0.0, 0.0, 1.0)
    found = False
    for _ in range(_MAX_REJECTION_TRIES):
        if not found:
            candidate = vec3(
                random_float(stream) * 2.0 - 1.0,
                random_float(stream) * 2.0 - 1.0,
                random_float(stream) * 2.0 - 1.0,
            )
            lensq = length_squared(candidate)
            if lensq > 1e-20 and lensq < 1.0:
                p = candidate
                found = True
    return p


@ti.func
def random_unit_vector(stream: ti.i32) -> vec3:
    """Generate a random unit vector uniformly distributed on the sphere."""
    return normalize(random_in_unit_sphere(stream))


@ti.func
def random_in_unit_disk(stream: ti.i32) -> vec3:
    """Generate a random point inside the unit disk in the xy-plane.

    Used to pick ray origins on the camera's defocus disk.

    Args:
        stream: The generator stream to draw from.

    Returns:
        A random point (x, y, 0) with x^2 + y^2 < 1.
    """
    p = vec3(0.0, 0.0, 0.0)
    found = False
    for _ in range(_MAX_REJECTION_TRIES):
        if not found:
            candidate = vec3(
                random_float(stream) * 2.0 - 1.0,
                random_float(stream) * 2.0 - 1.0,
                0.0,
            )
            if candidate.x * candidate.x + candidate.y * candidate.y < 1.0:
                p = candidate
                found = True
    return p
