"""Camera module for view and ray generation.

Components:
    camera: Thin-lens camera with look-at positioning and defocus blur

Camera responsibilities:
    - Derive the image height and viewport from the configuration
    - Apply anti-aliasing jitter for sub-pixel sampling
    - Sample ray origins on the defocus disk for depth of field

Pixel (0, 0) is the top-left pixel; rows run top to bottom.
"""

from .camera import CameraConfig, get_camera_basis, get_camera_info, get_ray, setup_camera

__all__ = [
    "CameraConfig",
    "setup_camera",
    "get_ray",
    "get_camera_basis",
    "get_camera_info",
]
