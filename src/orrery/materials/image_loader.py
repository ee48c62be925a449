"""Decoding of texture image files into raw RGB pixel buffers.

The renderer only needs (width, height, channels, bytes) for each texture.
Decoding goes through Pillow; every image is converted to 8-bit RGB.

A file that cannot be opened or decoded does not abort scene construction.
load_image logs a warning and returns an empty image (height 0), which the
texture lookup turns into a cyan diagnostic color.

Example:
    >>> from src.orrery.materials.image_loader import load_image
    >>> image = load_image("textures/earthmap1k.jpg")
    >>> image.width, image.height, image.channels
    (1024, 512, 3)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage
from PIL import UnidentifiedImageError

logger = logging.getLogger(__name__)

# Every decoded image is converted to this many channels
RGB_CHANNELS = 3


@dataclass(frozen=True)
class ImageData:
    """A decoded image.

    Attributes:
        width: Width in pixels.
        height: Height in pixels. Zero when decoding failed.
        channels: Number of channels per pixel (3 when loaded, 0 when empty).
        pixels: uint8 array of shape (height, width, channels), rows top to
            bottom.
    """

    width: int
    height: int
    channels: int
    pixels: npt.NDArray[np.uint8] = field(repr=False)

    @property
    def is_empty(self) -> bool:
        """True when the image holds no pixel data."""
        return self.height <= 0 or self.width <= 0


def empty_image() -> ImageData:
    """Return the failure sentinel: an image with no rows."""
    return ImageData(width=0, height=0, channels=0, pixels=np.zeros((0, 0, RGB_CHANNELS), dtype=np.uint8))


def image_from_array(array: npt.ArrayLike) -> ImageData:
    """Wrap an in-memory RGB array as ImageData.

    Args:
        array: Array of shape (height, width, 3). Values are converted to
            uint8.

    Returns:
        The wrapped image.

    Raises:
        ValueError: If the array does not have shape (H, W, 3).
    """
    pixels = np.asarray(array)
    if pixels.ndim != 3 or pixels.shape[2] != RGB_CHANNELS:
        raise ValueError(f"Expected an (H, W, 3) array, got shape {pixels.shape}")
    pixels = np.ascontiguousarray(pixels, dtype=np.uint8)
    return ImageData(
        width=int(pixels.shape[1]),
        height=int(pixels.shape[0]),
        channels=RGB_CHANNELS,
        pixels=pixels,
    )


def load_image(image_path: str | os.PathLike[str]) -> ImageData:
    """Load an image file as 8-bit RGB.

    Args:
        image_path: Path to the image file.

    Returns:
        The decoded image, or empty_image() if the file is missing or cannot
        be decoded.
    """
    try:
        with PILImage.open(image_path) as img:
            if img.mode != "RGB":
                img = img.convert("RGB")
            pixels = np.array(img, dtype=np.uint8)
    except (OSError, UnidentifiedImageError, ValueError) as e:
        logger.warning("Could not load texture image %s: %s", image_path, e)
        return empty_image()

    logger.debug("Loaded texture image %s (%dx%d)", image_path, pixels.shape[1], pixels.shape[0])
    return image_from_array(pixels)
