"""Preview module for output.

Components:
    export: PNG export and image comparison utilities
"""

from src.orrery.preview.export import compute_rmse, load_png, save_png

__all__ = [
    "save_png",
    "load_png",
    "compute_rmse",
]
