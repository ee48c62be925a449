"""Image export utilities for rendered images.

This module writes finished frames to disk. The renderer already produces
display-ready bytes (gamma corrected, quantized), so export does no tone
mapping of its own.

Supported formats:
    - PNG (8-bit RGB via Pillow)

Example:
    >>> from src.orrery.preview.export import save_png
    >>> image = renderer.render()
    >>> save_png(image, "frame.png")
"""

from __future__ import annotations

import logging
import os

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

logger = logging.getLogger(__name__)


def save_png(image: npt.NDArray[np.uint8], filepath: str | os.PathLike[str]) -> None:
    """Save an 8-bit RGB image as a PNG file.

    Args:
        image: Array of shape (height, width, 3), row 0 at the top.
        filepath: Output file path (should end in .png).

    Raises:
        ValueError: If the array is not (H, W, 3) uint8.
    """
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {image.shape}")
    if image.dtype != np.uint8:
        raise ValueError(f"Expected a uint8 image, got dtype {image.dtype}")

    pil_image = PILImage.fromarray(np.ascontiguousarray(image), mode="RGB")
    pil_image.save(filepath, format="PNG")
    logger.info("Saved %dx%d image to %s", image.shape[1], image.shape[0], filepath)


def load_png(filepath: str | os.PathLike[str]) -> npt.NDArray[np.uint8]:
    """Read an image file back as an (H, W, 3) uint8 array."""
    with PILImage.open(filepath) as img:
        return np.array(img.convert("RGB"), dtype=np.uint8)


def compute_rmse(
    image_a: npt.NDArray[np.generic],
    image_b: npt.NDArray[np.generic],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(
            f"Image shapes must match: {image_a.shape} vs {image_b.shape}"
        )

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
