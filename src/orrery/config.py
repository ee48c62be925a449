"""Frame configuration file loading.

A frame is described by a small JSON document:

    {
        "time": 120,
        "camera": {
            "position": [0, 900, 3000],
            "look_at": [0, 0, 0],
            "up": [0, 1, 0]
        }
    }

Optional top-level keys override the preset's render defaults:
"preset" ("production" or "preview"), "samples_per_pixel", "image_width",
"max_depth", "seed" and "texture_dir". A relative texture_dir is resolved
against the directory of the config file.

Any problem with the file is fatal: load_frame_config raises and rendering
never starts.

Example:
    >>> from src.orrery.config import build_camera_config, load_frame_config
    >>> frame = load_frame_config("config.json")
    >>> camera = build_camera_config(frame)
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from src.orrery.camera.camera import CameraConfig
from src.orrery.core.orbit import Point3
from src.orrery.scene.solar_system import PRODUCTION_PRESET, SolarSystemPreset, get_preset

logger = logging.getLogger(__name__)

DEFAULT_PRESET = PRODUCTION_PRESET.name


@dataclass(frozen=True)
class CameraPose:
    """Where the camera is and where it looks.

    Attributes:
        position: Camera position (lookfrom).
        look_at: Target point (lookat).
        up: Up direction (vup).
    """

    position: Point3
    look_at: Point3
    up: Point3


@dataclass(frozen=True)
class FrameConfig:
    """Everything needed to render one frame.

    Attributes:
        time: Simulated time at which orbits are evaluated.
        camera: Camera pose.
        preset: Name of the solar-system preset.
        samples_per_pixel: Override of the preset's sample count.
        image_width: Override of the preset's image width.
        max_depth: Override of the preset's bounce limit.
        seed: Random seed; None picks a fresh one.
        texture_dir: Directory holding the texture images.
    """

    time: int
    camera: CameraPose
    preset: str = DEFAULT_PRESET
    samples_per_pixel: int | None = None
    image_width: int | None = None
    max_depth: int | None = None
    seed: int | None = None
    texture_dir: str | None = None


def _parse_vector(data: dict[str, Any], key: str) -> Point3:
    if key not in data:
        raise ValueError(f"Missing required key 'camera.{key}'")
    value = data[key]
    if not isinstance(value, list) or len(value) != 3:
        raise ValueError(f"'camera.{key}' must be a list of 3 numbers, got {value!r}")
    try:
        return (float(value[0]), float(value[1]), float(value[2]))
    except (TypeError, ValueError):
        raise ValueError(f"'camera.{key}' must contain only numbers, got {value!r}") from None


def _parse_optional_int(data: dict[str, Any], key: str) -> int | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"'{key}' must be an integer, got {value!r}")
    return value


def parse_frame_config(data: Any, base_dir: str | os.PathLike[str] | None = None) -> FrameConfig:
    """Validate a decoded JSON document and build a FrameConfig.

    Args:
        data: The decoded JSON document.
        base_dir: Directory that a relative texture_dir is resolved against.

    Returns:
        The frame configuration.

    Raises:
        ValueError: If required keys are missing or values have the wrong
            type.
    """
    if not isinstance(data, dict):
        raise ValueError("Frame config must be a JSON object")

    if "time" not in data:
        raise ValueError("Missing required key 'time'")
    time = data["time"]
    if isinstance(time, bool) or not isinstance(time, (int, float)):
        raise ValueError(f"'time' must be a number, got {time!r}")
    # Orbits step in whole time units; 120.0 is accepted, 120.7 is not
    if isinstance(time, float) and not time.is_integer():
        raise ValueError(f"'time' must be a whole number, got {time!r}")

    camera = data.get("camera")
    if not isinstance(camera, dict):
        raise ValueError("Missing required object 'camera'")

    pose = CameraPose(
        position=_parse_vector(camera, "position"),
        look_at=_parse_vector(camera, "look_at"),
        up=_parse_vector(camera, "up"),
    )

    preset = data.get("preset", DEFAULT_PRESET)
    if not isinstance(preset, str):
        raise ValueError(f"'preset' must be a string, got {preset!r}")
    # Raises ValueError for unknown names
    get_preset(preset)

    texture_dir = data.get("texture_dir")
    if texture_dir is not None:
        if not isinstance(texture_dir, str):
            raise ValueError(f"'texture_dir' must be a string, got {texture_dir!r}")
        if base_dir is not None and not os.path.isabs(texture_dir):
            texture_dir = str(Path(base_dir) / texture_dir)

    return FrameConfig(
        time=int(time),
        camera=pose,
        preset=preset,
        samples_per_pixel=_parse_optional_int(data, "samples_per_pixel"),
        image_width=_parse_optional_int(data, "image_width"),
        max_depth=_parse_optional_int(data, "max_depth"),
        seed=_parse_optional_int(data, "seed"),
        texture_dir=texture_dir,
    )


def load_frame_config(path: str | os.PathLike[str]) -> FrameConfig:
    """Read a frame configuration file.

    Args:
        path: Path to the JSON file.

    Returns:
        The frame configuration.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is not valid JSON or misses required keys.
    """
    config_path = Path(path)
    if not config_path.is_file():
        raise FileNotFoundError(f"Failed to open config file: {config_path}")

    try:
        with open(config_path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {config_path}: {e}") from e

    frame = parse_frame_config(data, base_dir=config_path.parent)
    logger.info("Loaded frame config %s (preset %s, t=%d)", config_path, frame.preset, frame.time)
    return frame


def build_camera_config(frame: FrameConfig, preset: SolarSystemPreset | None = None) -> CameraConfig:
    """Combine a frame's pose and overrides with the preset's defaults.

    Args:
        frame: The frame configuration.
        preset: The preset supplying defaults. None looks up frame.preset.

    Returns:
        The camera configuration for the render.
    """
    if preset is None:
        preset = get_preset(frame.preset)

    def pick(override: int | None, default: int) -> int:
        return default if override is None else override

    return CameraConfig(
        aspect_ratio=preset.aspect_ratio,
        image_width=pick(frame.image_width, preset.image_width),
        samples_per_pixel=pick(frame.samples_per_pixel, preset.samples_per_pixel),
        max_depth=pick(frame.max_depth, preset.max_depth),
        vfov=preset.vfov,
        lookfrom=frame.camera.position,
        lookat=frame.camera.look_at,
        vup=frame.camera.up,
        defocus_angle=preset.defocus_angle,
        background=preset.background,
        seed=frame.seed,
    )
