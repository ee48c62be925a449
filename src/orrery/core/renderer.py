"""Frame renderer: camera setup, batched sampling and display conversion.

This module provides the top-level rendering entry point. A Renderer owns
one CameraConfig and drives the integrator over the current scene:

- Camera geometry, background and render target are set up on construction
- The random streams are reseeded so every render is reproducible from
  CameraConfig.seed
- Samples are accumulated in batches, with an optional progress callback
- The final image is converted for display: average, clamp to [0, 1],
  square-root gamma, then quantized to bytes with min(255, int(256 * c))

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from src.orrery.camera.camera import CameraConfig
    >>> from src.orrery.core.renderer import Renderer
    >>> from src.orrery.scene.manager import SceneManager
    >>>
    >>> scene = SceneManager()
    >>> scene.add_light_sphere((0.0, 0.0, -2.0), 0.5, (4.0, 4.0, 4.0))
    >>> renderer = Renderer(CameraConfig(image_width=64, samples_per_pixel=16, seed=7))
    >>> image = renderer.render()  # (36, 64, 3) uint8
"""

import logging
import time
from collections.abc import Callable, Generator

import numpy as np
import numpy.typing as npt

from src.orrery.camera.camera import CameraConfig, setup_camera
from src.orrery.core.integrator import (
    clear_render_target,
    get_average_image_numpy,
    get_total_samples,
    render_samples,
    set_background,
    setup_render_target,
)
from src.orrery.core.sampler import seed_streams
from src.orrery.preview.export import save_png

logger = logging.getLogger(__name__)

# Type alias for progress callback
# Callback receives (current_samples, total_target_samples)
ProgressCallback = Callable[[int, int], None]

# Samples per kernel launch when no batch size is given
DEFAULT_BATCH_SIZE = 16


def linear_to_display(image: npt.NDArray[np.float32]) -> npt.NDArray[np.uint8]:
    """Convert linear radiance to 8-bit display values.

    Each channel is clamped to [0, 1], gamma corrected with a square root
    and mapped to a byte with min(255, int(256 * c)).

    Args:
        image: Array of linear colors, any shape ending in 3.

    Returns:
        uint8 array of the same shape.
    """
    encoded = np.sqrt(np.clip(image, 0.0, 1.0))
    return np.minimum(255, (256.0 * encoded).astype(np.int32)).astype(np.uint8)


def _fresh_seed() -> int:
    return int(np.random.default_rng().integers(0, 2**31 - 1))


class Renderer:
    """Renders the current scene through one camera.

    The scene registries are global, so a Renderer always sees whatever
    SceneManager last built. The camera and render target are configured
    when the renderer is created.

    Attributes:
        config: The camera and sampling configuration.
        seed: The seed actually used for the random streams.
    """

    def __init__(self, config: CameraConfig) -> None:
        """Initialize the renderer.

        Args:
            config: Camera configuration. Its image size must fit the
                preallocated render target (2048 x 2048).

        Raises:
            ValueError: If the image dimensions exceed the maximum size.
        """
        self.config = config
        self.seed = config.seed if config.seed is not None else _fresh_seed()
        setup_camera(config)
        set_background(config.background)
        setup_render_target(config.image_width, config.image_height)
        seed_streams(self.seed)

    @property
    def width(self) -> int:
        """Get the image width."""
        return self.config.image_width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self.config.image_height

    @property
    def sample_count(self) -> int:
        """Get the current number of accumulated samples per pixel."""
        return get_total_samples()

    def reset(self) -> None:
        """Clear the accumulated samples and restart the random streams."""
        clear_render_target()
        seed_streams(self.seed)

    def render_progressive(
        self,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> Generator[tuple[int, int], None, None]:
        """Render all remaining samples, yielding progress after each batch.

        Args:
            batch_size: Number of samples per pixel rendered per batch.

        Yields:
            Tuple of (current_total_samples, target_total_samples).
        """
        target_samples = self.config.samples_per_pixel
        batch_size = max(1, batch_size)

        while self.sample_count < target_samples:
            batch = min(batch_size, target_samples - self.sample_count)
            render_samples(batch, self.config.max_depth)
            logger.debug("Rendered %d/%d samples per pixel", self.sample_count, target_samples)
            yield (self.sample_count, target_samples)

    def render(
        self,
        batch_size: int = DEFAULT_BATCH_SIZE,
        callback: ProgressCallback | None = None,
    ) -> npt.NDArray[np.uint8]:
        """Render the frame to completion.

        Args:
            batch_size: Number of samples per pixel rendered before each
                callback.
            callback: Optional callback called after each batch. Receives
                (current_total_samples, target_total_samples).

        Returns:
            The display image, uint8 array of shape (height, width, 3), row
            0 at the top.
        """
        logger.info(
            "Rendering %dx%d, %d samples per pixel, max depth %d, seed %d",
            self.width,
            self.height,
            self.config.samples_per_pixel,
            self.config.max_depth,
            self.seed,
        )
        start = time.perf_counter()

        for current, target in self.render_progressive(batch_size):
            if callback is not None:
                callback(current, target)

        logger.info("Render finished in %.2fs", time.perf_counter() - start)
        return self.get_image_uint8()

    def get_image_numpy(self) -> npt.NDArray[np.float32]:
        """Get the linear average radiance per pixel, unclamped.

        Returns:
            NumPy array of shape (height, width, 3) with dtype float32.
        """
        return get_average_image_numpy()

    def get_image_uint8(self) -> npt.NDArray[np.uint8]:
        """Get the rendered image as gamma-corrected 8-bit values.

        Returns:
            NumPy array of shape (height, width, 3) with dtype uint8.
        """
        return linear_to_display(self.get_image_numpy())

    def save_image(self, filepath: str) -> None:
        """Save the rendered image as a PNG file."""
        save_png(self.get_image_uint8(), filepath)

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"Renderer(width={self.width}, height={self.height}, "
            f"samples={self.sample_count}/{self.config.samples_per_pixel}, seed={self.seed})"
        )
