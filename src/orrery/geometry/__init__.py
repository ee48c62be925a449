"""Geometry module for shape primitives.

Components:
    sphere: Sphere primitive with ray-sphere intersection and UV mapping

All intersection routines are implemented as Taichi functions (@ti.func).
"""

from .sphere import HitRecord, Sphere, get_sphere_uv, hit_sphere, make_sphere, solve_sphere_roots

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "make_sphere",
    "solve_sphere_roots",
    "get_sphere_uv",
]
