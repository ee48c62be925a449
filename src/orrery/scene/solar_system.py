"""Solar-system scene presets and the scene builder.

A SolarSystemPreset is an immutable table of bodies plus the camera and
sampling defaults that go with it. build_solar_system evaluates every orbit
at the requested time and registers the resulting spheres, textures and
materials with a SceneManager, so a frame is fully determined by
(preset, time) and nothing about the orbits lives in module state.

Body kinds:
- Fixed bodies (the sun, the star field) stay at their initial position.
- Planets circle the preset's center on OrbitBody orbits.
- Moons circle a named primary on a tilted SatelliteOrbit.

The star field is an emissive sphere large enough to contain the whole
system; the camera sits inside it and sees its inner surface.

Two presets are provided:

- production: the full-size table, 8000 samples per pixel.
- preview: a compact table with a moon, 10 samples per pixel, for quick
  looks and tests.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from src.orrery.scene.manager import SceneManager
    >>> from src.orrery.scene.solar_system import PREVIEW_PRESET, build_solar_system
    >>> scene = SceneManager()
    >>> spheres = build_solar_system(scene, PREVIEW_PRESET, time=120, texture_dir="textures")
"""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass, field
from pathlib import Path

from src.orrery.core.orbit import OrbitBody, Point3, SatelliteOrbit
from src.orrery.scene.manager import SceneManager, SphereInfo

logger = logging.getLogger(__name__)

Color = tuple[float, float, float]


@dataclass(frozen=True)
class BodySpec:
    """One body of a solar-system preset.

    Attributes:
        name: Unique name of the body.
        radius: Sphere radius.
        initial: Position at time 0.
        texture: Image file name, resolved against the texture directory.
            None uses the solid ``color`` instead.
        color: Solid color used when there is no texture.
        emissive: True for light sources, False for diffuse surfaces.
        brightness: Multiplier applied to the texture (emitters only need
            values above 1).
        fixed: True for bodies that never move.
        primary: Name of the body this one circles. None circles the
            preset's center.
        tilt: Inclination of a moon's orbital plane, in degrees.
    """

    name: str
    radius: float
    initial: Point3
    texture: str | None = None
    color: Color = (0.5, 0.5, 0.5)
    emissive: bool = False
    brightness: float = 1.0
    fixed: bool = False
    primary: str | None = None
    tilt: float = 0.0


@dataclass(frozen=True)
class SolarSystemPreset:
    """An immutable scene table plus its render defaults.

    Attributes:
        name: Preset name.
        center: The point planets orbit (the sun's position).
        bodies: Bodies in the order they are added to the scene.
        aspect_ratio: Default image aspect ratio.
        image_width: Default image width.
        samples_per_pixel: Default samples per pixel.
        max_depth: Default bounce limit.
        vfov: Default vertical field of view in degrees.
        background: Radiance of rays that escape the scene.
        defocus_angle: Default defocus angle in degrees.
    """

    name: str
    center: Point3
    bodies: tuple[BodySpec, ...]
    aspect_ratio: float = 16.0 / 9.0
    image_width: int = 500
    samples_per_pixel: int = 10
    max_depth: int = 50
    vfov: float = 45.0
    background: Color = (0.0, 0.0, 0.0)
    defocus_angle: float = 0.0
    _by_name: dict[str, BodySpec] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        by_name: dict[str, BodySpec] = {}
        for body in self.bodies:
            if body.name in by_name:
                raise ValueError(f"Duplicate body name in preset {self.name!r}: {body.name!r}")
            if body.primary is not None:
                primary = by_name.get(body.primary)
                # Primaries must come first so positions resolve in one pass
                if primary is None:
                    raise ValueError(
                        f"Body {body.name!r} orbits {body.primary!r}, which is not "
                        f"defined before it in preset {self.name!r}"
                    )
                if primary.fixed or primary.primary is not None:
                    raise ValueError(f"Body {body.name!r} must orbit a planet, not {body.primary!r}")
            by_name[body.name] = body
        object.__setattr__(self, "_by_name", by_name)

    def body(self, name: str) -> BodySpec:
        """Look up a body by name.

        Raises:
            KeyError: If the preset has no such body.
        """
        return self._by_name[name]

    def orbit_of(self, name: str) -> OrbitBody | SatelliteOrbit | None:
        """The orbit of a body, or None for fixed bodies."""
        body = self.body(name)
        if body.fixed:
            return None
        if body.primary is None:
            return OrbitBody(initial=body.initial, reference=self.center)
        primary = OrbitBody(initial=self.body(body.primary).initial, reference=self.center)
        return SatelliteOrbit.around(primary, body.initial, tilt=math.radians(body.tilt))


_SUN_CENTER: Point3 = (-1200.0, 0.0, 0.0)

PRODUCTION_PRESET = SolarSystemPreset(
    name="production",
    center=_SUN_CENTER,
    bodies=(
        BodySpec("sun", 550.0, _SUN_CENTER, "sunmap.png", emissive=True, brightness=20.0, fixed=True),
        BodySpec("stars", 5000.0, _SUN_CENTER, "stars_background.jpg", emissive=True, fixed=True),
        BodySpec("mercury", 40.0, (-400.0, 0.0, 0.0), "mercurymap.jpg"),
        BodySpec("venus", 95.0, (-220.0, 0.0, 0.0), "venusmap.jpg"),
        BodySpec("earth", 100.0, (30.0, 0.0, 0.0), "earthmap1k.jpg"),
        BodySpec("mars", 85.0, (320.0, 0.0, 0.0), "marsmap.jpg"),
        BodySpec("jupiter", 240.0, (720.0, 0.0, 0.0), "jupitermap.jpg"),
        BodySpec("saturn", 210.0, (1320.0, 0.0, 0.0), "saturnmap.jpg"),
        BodySpec("uranus", 150.0, (1820.0, 0.0, 0.0), "uranusmap.jpg"),
        BodySpec("neptune", 130.0, (2270.0, 0.0, 0.0), "naptunemap.jpg"),
    ),
    aspect_ratio=16.0 / 9.0,
    image_width=500,
    samples_per_pixel=8000,
    max_depth=50,
    vfov=45.0,
)

_PREVIEW_SUN_CENTER: Point3 = (-300.0, 0.0, 0.0)

PREVIEW_PRESET = SolarSystemPreset(
    name="preview",
    center=_PREVIEW_SUN_CENTER,
    bodies=(
        BodySpec("sun", 120.0, _PREVIEW_SUN_CENTER, "sunmap.png", emissive=True, brightness=20.0, fixed=True),
        BodySpec("stars", 1500.0, _PREVIEW_SUN_CENTER, "stars_background.jpg", emissive=True, fixed=True),
        BodySpec("mercury", 12.0, (-140.0, 0.0, 0.0), "mercurymap.jpg"),
        BodySpec("venus", 22.0, (-80.0, 0.0, 60.0), "venusmap.jpg"),
        BodySpec("earth", 25.0, (0.0, 0.0, 0.0), "earthmap1k.jpg"),
        BodySpec("moon", 7.0, (45.0, 0.0, 0.0), "moonmap1k.jpg", primary="earth", tilt=5.0),
        BodySpec("mars", 18.0, (90.0, 0.0, -70.0), "marsmap.jpg"),
        BodySpec("jupiter", 55.0, (260.0, 0.0, 0.0), "jupitermap.jpg"),
        BodySpec("saturn", 48.0, (420.0, 0.0, 90.0), "saturnmap.jpg"),
        BodySpec("uranus", 34.0, (560.0, 0.0, 0.0), "uranusmap.jpg"),
        BodySpec("neptune", 32.0, (680.0, 0.0, -60.0), "naptunemap.jpg"),
    ),
    aspect_ratio=16.0 / 9.0,
    image_width=200,
    samples_per_pixel=10,
    max_depth=10,
    vfov=60.0,
)

PRESETS: dict[str, SolarSystemPreset] = {
    PRODUCTION_PRESET.name: PRODUCTION_PRESET,
    PREVIEW_PRESET.name: PREVIEW_PRESET,
}


def get_preset(name: str) -> SolarSystemPreset:
    """Look up a preset by name.

    Raises:
        ValueError: If no preset has that name.
    """
    try:
        return PRESETS[name]
    except KeyError:
        raise ValueError(f"Unknown preset {name!r}; choose from {sorted(PRESETS)}") from None


def body_positions(preset: SolarSystemPreset, time: float) -> dict[str, Point3]:
    """Positions of every body of a preset at a given time.

    Args:
        preset: The scene table.
        time: Simulated time.

    Returns:
        Mapping of body name to (x, y, z), in preset order.
    """
    positions: dict[str, Point3] = {}
    for body in preset.bodies:
        orbit = preset.orbit_of(body.name)
        if orbit is None:
            positions[body.name] = body.initial
        else:
            positions[body.name] = orbit.position_at(time)
    return positions


def _texture_path(texture: str, texture_dir: str | os.PathLike[str] | None) -> Path:
    if texture_dir is None:
        return Path(texture)
    return Path(texture_dir) / texture


def build_solar_system(
    scene: SceneManager,
    preset: SolarSystemPreset,
    time: float,
    texture_dir: str | os.PathLike[str] | None = None,
) -> list[SphereInfo]:
    """Populate a scene with the bodies of a preset at a given time.

    The scene is cleared first. Every body gets its own texture and
    material, even when two bodies share an image file. Texture files that
    cannot be loaded are logged and render in the cyan diagnostic color.

    Args:
        scene: The scene manager to fill.
        preset: The scene table.
        time: Simulated time at which orbits are evaluated.
        texture_dir: Directory holding the texture images. None resolves
            names against the working directory.

    Returns:
        The added spheres, in preset order.
    """
    scene.clear()
    positions = body_positions(preset, time)

    spheres = []
    for body in preset.bodies:
        if body.texture is None:
            texture_id = scene.add_solid_texture(
                (
                    body.color[0] * body.brightness,
                    body.color[1] * body.brightness,
                    body.color[2] * body.brightness,
                )
            )
        else:
            texture_id = scene.add_image_texture(
                _texture_path(body.texture, texture_dir), brightness=body.brightness
            )

        if body.emissive:
            material_id = scene.add_diffuse_light_material(texture_id)
        else:
            material_id = scene.add_lambertian_material(texture_id)

        index = scene.add_sphere(positions[body.name], body.radius, material_id, name=body.name)
        spheres.append(scene.spheres[index])

    logger.info(
        "Built %s solar system at t=%s: %d bodies", preset.name, time, len(spheres)
    )
    return spheres
