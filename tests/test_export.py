"""Tests for PNG export and image comparison."""

import numpy as np
import pytest


class TestSavePng:
    """Tests for save_png and load_png."""

    def test_save_and_load(self, tmp_path):
        """A saved image reads back byte for byte, row 0 at the top."""
        from src.orrery.preview.export import load_png, save_png

        image = np.zeros((3, 5, 3), dtype=np.uint8)
        image[0, :] = [255, 0, 0]
        image[2, 4] = [1, 2, 3]

        path = tmp_path / "out.png"
        save_png(image, path)
        loaded = load_png(path)
        assert loaded.shape == (3, 5, 3)
        assert np.array_equal(loaded, image)

    def test_rejects_float_images(self, tmp_path):
        """Only display-ready bytes are written."""
        from src.orrery.preview.export import save_png

        with pytest.raises(ValueError):
            save_png(np.zeros((2, 2, 3), dtype=np.float32), tmp_path / "out.png")

    def test_rejects_wrong_shape(self, tmp_path):
        """Images must be (H, W, 3)."""
        from src.orrery.preview.export import save_png

        with pytest.raises(ValueError):
            save_png(np.zeros((2, 2), dtype=np.uint8), tmp_path / "out.png")


class TestComputeRmse:
    """Tests for compute_rmse."""

    def test_identical_images(self):
        """Identical images have zero error."""
        from src.orrery.preview.export import compute_rmse

        image = np.full((4, 4, 3), 17, dtype=np.uint8)
        assert compute_rmse(image, image) == 0.0

    def test_known_difference(self):
        """A constant offset gives that offset as error."""
        from src.orrery.preview.export import compute_rmse

        a = np.zeros((2, 2, 3), dtype=np.uint8)
        b = np.full((2, 2, 3), 10, dtype=np.uint8)
        assert compute_rmse(a, b) == pytest.approx(10.0)

    def test_shape_mismatch(self):
        """Images of different shapes cannot be compared."""
        from src.orrery.preview.export import compute_rmse

        with pytest.raises(ValueError):
            compute_rmse(np.zeros((2, 2, 3)), np.zeros((2, 3, 3)))
