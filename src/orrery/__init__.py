"""Taichi path tracer for still frames of an animated solar system.

This package renders one frame of a solar-system scene with Monte Carlo
path tracing over textured spheres lit by emissive bodies:
- Time-parameterized circular orbits place the bodies
- Equirectangular image textures, optionally scaled for emitters
- Lambertian and diffuse light materials
- Seeded, reproducible per-pixel sampling

Subpackages:
    core: Rays, intervals, random streams, orbits, integrator and renderer
    geometry: Sphere primitive and intersection
    materials: Textures, image decoding and material models
    scene: Scene registries, scene manager and solar-system presets
    camera: Thin-lens camera with ray generation
    preview: Image export
"""

__version__ = "0.1.0"
