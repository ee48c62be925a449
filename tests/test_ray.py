"""Unit tests for rays, vector helpers, intervals and random directions."""

import pytest
import taichi as ti


class TestRay:
    """Tests for the Ray dataclass and ray_at."""

    def test_ray_at(self):
        """Test evaluating points along a ray."""
        from src.orrery.core.ray import make_ray, ray_at, vec3

        result = ti.field(dtype=ti.math.vec3, shape=3)

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(1.0, 2.0, 3.0), vec3(0.0, 0.0, -2.0))
            result[0] = ray_at(ray, 0.0)
            result[1] = ray_at(ray, 1.5)
            result[2] = ray_at(ray, -1.0)

        test_kernel()
        assert tuple(result[0]) == pytest.approx((1.0, 2.0, 3.0))
        assert tuple(result[1]) == pytest.approx((1.0, 2.0, 0.0))
        assert tuple(result[2]) == pytest.approx((1.0, 2.0, 5.0))

    def test_near_zero(self):
        """Only vectors with every component below 1e-8 are near zero."""
        from src.orrery.core.ray import near_zero, vec3

        result = ti.field(dtype=ti.i32, shape=3)

        @ti.kernel
        def test_kernel():
            result[0] = near_zero(vec3(1e-9, -1e-9, 0.0))
            result[1] = near_zero(vec3(1e-9, 1e-3, 0.0))
            result[2] = near_zero(vec3(0.0, 0.0, 0.0))

        test_kernel()
        assert result[0] == 1
        assert result[1] == 0
        assert result[2] == 1


class TestInterval:
    """Tests for interval queries."""

    def test_contains_and_surrounds(self):
        """contains is closed, surrounds is open."""
        from src.orrery.core.interval import Interval, interval_contains, interval_surrounds

        contains = ti.field(dtype=ti.i32, shape=3)
        surrounds = ti.field(dtype=ti.i32, shape=3)

        @ti.kernel
        def test_kernel():
            interval = Interval(min=0.0, max=1.0)
            contains[0] = interval_contains(interval, 0.0)
            contains[1] = interval_contains(interval, 0.5)
            contains[2] = interval_contains(interval, 1.5)
            surrounds[0] = interval_surrounds(interval, 0.0)
            surrounds[1] = interval_surrounds(interval, 0.5)
            surrounds[2] = interval_surrounds(interval, 1.0)

        test_kernel()
        assert [contains[i] for i in range(3)] == [1, 1, 0]
        assert [surrounds[i] for i in range(3)] == [0, 1, 0]

    def test_clamp(self):
        """Values outside the interval are projected onto its ends."""
        from src.orrery.core.interval import interval_clamp, make_interval

        result = ti.field(dtype=ti.f32, shape=3)

        @ti.kernel
        def test_kernel():
            interval = make_interval(0.0, 1.0)
            result[0] = interval_clamp(interval, -0.5)
            result[1] = interval_clamp(interval, 0.25)
            result[2] = interval_clamp(interval, 1.5)

        test_kernel()
        assert result[0] == 0.0
        assert result[1] == 0.25
        assert result[2] == 1.0


class TestRandomDirections:
    """Tests for the random direction samplers."""

    def test_random_unit_vector_is_unit(self):
        """Random unit vectors have length 1."""
        from src.orrery.core.ray import random_unit_vector

        n = 256
        lengths = ti.field(dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            for k in range(n):
                lengths[k] = random_unit_vector(k).norm()

        test_kernel()
        values = lengths.to_numpy()
        assert values.min() > 0.999
        assert values.max() < 1.001

    def test_random_unit_vectors_cover_sphere(self):
        """The mean of many random unit vectors is close to zero."""
        from src.orrery.core.ray import random_unit_vector

        n = 4096
        vectors = ti.field(dtype=ti.math.vec3, shape=n)

        @ti.kernel
        def test_kernel():
            for k in range(n):
                vectors[k] = random_unit_vector(k)

        test_kernel()
        mean = vectors.to_numpy().mean(axis=0)
        assert abs(mean[0]) < 0.05
        assert abs(mean[1]) < 0.05
        assert abs(mean[2]) < 0.05

    def test_random_in_unit_disk(self):
        """Disk samples lie strictly inside the unit disk in the xy-plane."""
        from src.orrery.core.ray import random_in_unit_disk

        n = 512
        points = ti.field(dtype=ti.math.vec3, shape=n)

        @ti.kernel
        def test_kernel():
            for k in range(n):
                points[k] = random_in_unit_disk(k)

        test_kernel()
        p = points.to_numpy()
        assert (p[:, 2] == 0.0).all()
        assert ((p[:, 0] ** 2 + p[:, 1] ** 2) < 1.0).all()
