"""Core rendering module.

This module contains the fundamental building blocks for ray tracing:

Components:
    ray: Ray data structure, vector utilities and random directions
    interval: Open and closed parameter ranges
    sampler: Seeded per-pixel random number streams
    orbit: Time-parameterized circular orbits
    integrator: Light transport and sample accumulation
    renderer: Camera-driven frame rendering and display conversion

All compute-intensive operations use Taichi kernels for GPU acceleration.
"""

from .interval import (
    Interval,
    interval_clamp,
    interval_contains,
    interval_surrounds,
    make_interval,
)
from .orbit import (
    OrbitBody,
    SatelliteOrbit,
    orbit_position,
    orbit_positions,
    period_for_radius,
)
from .ray import (
    Ray,
    cross,
    dot,
    length,
    length_squared,
    make_ray,
    near_zero,
    normalize,
    random_in_unit_disk,
    random_in_unit_sphere,
    random_unit_vector,
    ray_at,
    vec3,
)
from .sampler import get_seed, random_float, random_range, seed_streams

# Note: integrator and renderer are NOT imported here to avoid circular imports.
# Import directly from src.orrery.core.integrator or src.orrery.core.renderer.

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length",
    "length_squared",
    "normalize",
    "dot",
    "cross",
    "near_zero",
    "random_in_unit_sphere",
    "random_unit_vector",
    "random_in_unit_disk",
    "Interval",
    "make_interval",
    "interval_contains",
    "interval_surrounds",
    "interval_clamp",
    "seed_streams",
    "get_seed",
    "random_float",
    "random_range",
    "OrbitBody",
    "SatelliteOrbit",
    "orbit_position",
    "orbit_positions",
    "period_for_radius",
]
