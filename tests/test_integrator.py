"""Tests for the path tracing integrator and the frame renderer.

Tests cover:
- Depth limit, escape to background and emitter hits for single rays
- Render target setup and error handling
- Empty scenes render exactly the background color
- Closed-form scenes (uniform emitter, diffuse sphere under uniform sky)
- The same closed forms at solar-system coordinates
- Reproducibility from a fixed seed and batch-size independence
- Display conversion of linear radiance to bytes
"""

import numpy as np
import pytest


def _camera(**kwargs):
    from src.orrery.camera.camera import CameraConfig

    defaults = dict(
        aspect_ratio=1.0,
        image_width=16,
        samples_per_pixel=4,
        max_depth=10,
        vfov=90.0,
        lookfrom=(0.0, 0.0, 0.0),
        lookat=(0.0, 0.0, -1.0),
        seed=7,
    )
    defaults.update(kwargs)
    return CameraConfig(**defaults)


class TestTraceRay:
    """Tests for ray_color through trace_ray."""

    def test_zero_depth_is_black(self, fresh_scene):
        """A ray with no depth budget contributes nothing, even into a light."""
        from src.orrery.core.integrator import set_background, trace_ray

        set_background((1.0, 1.0, 1.0))
        fresh_scene.add_light_sphere((0.0, 0.0, -5.0), 1.0, (4.0, 4.0, 4.0))
        assert trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), max_depth=0) == (0.0, 0.0, 0.0)

    def test_miss_returns_background(self):
        """Rays that escape return the background radiance."""
        from src.orrery.core.integrator import set_background, trace_ray

        set_background((0.25, 0.5, 0.75))
        assert trace_ray((0.0, 0.0, 0.0), (1.0, 0.0, 0.0), max_depth=5) == pytest.approx(
            (0.25, 0.5, 0.75)
        )

    def test_light_hit_returns_emission(self, fresh_scene):
        """Hitting an emitter returns its emission; lights do not scatter."""
        from src.orrery.core.integrator import set_background, trace_ray

        set_background((1.0, 1.0, 1.0))
        fresh_scene.add_light_sphere((0.0, 0.0, -5.0), 1.0, (4.0, 2.0, 1.0))
        color = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), max_depth=1)
        assert color == pytest.approx((4.0, 2.0, 1.0))

    def test_diffuse_hit_at_depth_one_is_black(self, fresh_scene):
        """A diffuse bounce with no budget left gathers nothing."""
        from src.orrery.core.integrator import set_background, trace_ray

        set_background((1.0, 1.0, 1.0))
        fresh_scene.add_lambertian_sphere((0.0, 0.0, -5.0), 1.0, (0.5, 0.5, 0.5))
        assert trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), max_depth=1) == (0.0, 0.0, 0.0)

    def test_diffuse_sphere_under_uniform_sky(self, fresh_scene):
        """A convex diffuse sphere under a uniform sky reflects albedo * sky."""
        from src.orrery.core.integrator import set_background, trace_ray

        set_background((1.0, 1.0, 1.0))
        fresh_scene.add_lambertian_sphere((0.0, 0.0, -5.0), 1.0, (0.5, 0.25, 1.0))
        for stream in range(8):
            color = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), max_depth=10, stream=stream)
            assert color == pytest.approx((0.5, 0.25, 1.0), abs=1e-5)


class TestRenderTarget:
    """Tests for render target management."""

    def test_setup_and_dimensions(self):
        """Dimensions are stored and the buffer starts empty."""
        from src.orrery.core.integrator import (
            get_accumulated_numpy,
            get_image_dimensions,
            get_total_samples,
            setup_render_target,
        )

        setup_render_target(32, 8)
        assert get_image_dimensions() == (32, 8)
        assert get_total_samples() == 0
        image = get_accumulated_numpy()
        assert image.shape == (8, 32, 3)
        assert not image.any()

    def test_oversized_target_rejected(self):
        """Images larger than the preallocated buffer are rejected."""
        from src.orrery.core.integrator import MAX_IMAGE_WIDTH, setup_render_target

        with pytest.raises(ValueError):
            setup_render_target(MAX_IMAGE_WIDTH + 1, 10)

    def test_render_without_target_raises(self):
        """Rendering before setup is an error."""
        from src.orrery.core.integrator import render_samples

        with pytest.raises(RuntimeError):
            render_samples(1, 5)

    def test_sample_count_accumulates(self):
        """Each render_samples call adds to the per-pixel sample count."""
        from src.orrery.core.integrator import get_total_samples, render_samples, setup_render_target

        setup_render_target(4, 4)
        render_samples(3, 2)
        render_samples(2, 2)
        assert get_total_samples() == 5


class TestRenderer:
    """Tests for the Renderer class on small scenes."""

    def test_empty_scene_is_background(self):
        """Every pixel of an empty scene is exactly the background."""
        from src.orrery.core.renderer import Renderer, linear_to_display

        background = (0.25, 0.5, 0.0)
        renderer = Renderer(_camera(background=background, samples_per_pixel=8))
        image = renderer.render()

        linear = renderer.get_image_numpy()
        assert np.array_equal(linear, np.broadcast_to(np.float32(background), linear.shape))
        expected = linear_to_display(np.array(background, dtype=np.float32))
        assert image.shape == (16, 16, 3)
        assert np.all(image == expected)
        assert tuple(expected) == (128, 181, 0)

    def test_enclosing_emitter_is_uniform(self, fresh_scene):
        """Inside a uniformly emitting sphere, every sample sees its emission."""
        from src.orrery.core.renderer import Renderer

        fresh_scene.add_light_sphere((0.0, 0.0, 0.0), 100.0, (0.5, 0.5, 0.5))
        renderer = Renderer(_camera(samples_per_pixel=4))
        renderer.render()
        assert np.allclose(renderer.get_image_numpy(), 0.5, atol=1e-6)

    def test_lit_diffuse_sphere_in_frame(self, fresh_scene):
        """A diffuse sphere filling the center of the frame shows albedo * sky there."""
        from src.orrery.core.renderer import Renderer

        fresh_scene.add_lambertian_sphere((0.0, 0.0, -3.0), 1.0, (0.5, 0.5, 0.5))
        renderer = Renderer(_camera(background=(1.0, 1.0, 1.0), samples_per_pixel=4))
        renderer.render()
        linear = renderer.get_image_numpy()
        assert np.allclose(linear[8, 8], 0.5, atol=1e-5)
        # Corners see the sky directly
        assert np.allclose(linear[0, 0], 1.0, atol=1e-6)

    def test_same_seed_is_bit_identical(self, fresh_scene):
        """Two renders of the same scene with the same seed match exactly."""
        from src.orrery.core.renderer import Renderer

        fresh_scene.add_lambertian_sphere((0.0, -101.0, -1.0), 100.0, (0.5, 0.5, 0.5))
        fresh_scene.add_light_sphere((0.0, 2.0, -1.0), 0.5, (8.0, 8.0, 8.0))
        fresh_scene.add_lambertian_sphere((0.0, 0.0, -1.5), 0.5, (0.7, 0.3, 0.3))

        first = Renderer(_camera(samples_per_pixel=6, seed=99))
        image_a = first.render()
        linear_a = first.get_image_numpy()

        second = Renderer(_camera(samples_per_pixel=6, seed=99))
        image_b = second.render()

        assert np.array_equal(image_a, image_b)
        assert np.array_equal(linear_a, second.get_image_numpy())

    def test_different_seeds_differ(self, fresh_scene):
        """Different seeds give different noise."""
        from src.orrery.core.renderer import Renderer

        fresh_scene.add_lambertian_sphere((0.0, -101.0, -1.0), 100.0, (0.5, 0.5, 0.5))
        fresh_scene.add_light_sphere((0.0, 2.0, -1.0), 0.5, (8.0, 8.0, 8.0))

        first = Renderer(_camera(samples_per_pixel=2, seed=1))
        first.render()
        linear_a = first.get_image_numpy()

        second = Renderer(_camera(samples_per_pixel=2, seed=2))
        second.render()

        assert not np.array_equal(linear_a, second.get_image_numpy())

    def test_batch_size_does_not_change_result(self, fresh_scene):
        """Splitting the samples into batches continues the same random streams."""
        from src.orrery.core.renderer import Renderer

        fresh_scene.add_lambertian_sphere((0.0, -101.0, -1.0), 100.0, (0.5, 0.5, 0.5))
        fresh_scene.add_light_sphere((0.0, 2.0, -1.0), 0.5, (8.0, 8.0, 8.0))

        renderer = Renderer(_camera(samples_per_pixel=8, seed=5))
        renderer.render(batch_size=8)
        single = renderer.get_image_numpy()

        renderer.reset()
        renderer.render(batch_size=3)
        batched = renderer.get_image_numpy()

        assert np.allclose(single, batched, rtol=1e-5, atol=1e-6)

    def test_progress_callback(self):
        """The callback sees every batch and ends at the target."""
        from src.orrery.core.renderer import Renderer

        calls = []
        renderer = Renderer(_camera(samples_per_pixel=10))
        renderer.render(batch_size=4, callback=lambda cur, total: calls.append((cur, total)))
        assert calls == [(4, 10), (8, 10), (10, 10)]
        assert renderer.sample_count == 10

    def test_unseeded_renderer_picks_a_seed(self):
        """Without a seed a fresh one is drawn and recorded."""
        from src.orrery.core.renderer import Renderer

        renderer = Renderer(_camera(seed=None))
        assert isinstance(renderer.seed, int)
        assert "seed=" in repr(renderer)

    def test_save_image(self, tmp_path):
        """save_image writes a PNG of the display image."""
        from src.orrery.core.renderer import Renderer
        from src.orrery.preview.export import load_png

        renderer = Renderer(_camera(background=(1.0, 0.0, 0.0), samples_per_pixel=1))
        image = renderer.render()
        path = tmp_path / "frame.png"
        renderer.save_image(str(path))
        assert np.array_equal(load_png(path), image)


class TestProductionScale:
    """Diffuse planets at solar-system coordinates under a uniform sky.

    The camera sits thousands of units from the planets, so any scattered ray
    that re-hits the sphere it leaves darkens the result below albedo * sky.
    """

    @pytest.mark.parametrize("planet", ["earth", "saturn", "neptune"])
    def test_every_stream_sees_albedo_times_sky(self, fresh_scene, planet):
        """Rays aimed at a production planet all return albedo * sky."""
        from src.orrery.core.integrator import set_background, trace_ray
        from src.orrery.scene.solar_system import PRODUCTION_PRESET

        body = PRODUCTION_PRESET.body(planet)
        set_background((1.0, 1.0, 1.0))
        fresh_scene.add_lambertian_sphere(body.initial, body.radius, (0.5, 0.5, 0.5))

        eye = np.array([0.0, 900.0, 3000.0])
        for stream in range(64):
            # Spread the aim across the visible disc
            offset = 0.4 * body.radius * np.array(
                [np.cos(stream * 0.7), np.sin(stream * 1.3), 0.0]
            )
            direction = np.array(body.initial) + offset - eye
            color = trace_ray(tuple(eye), tuple(direction), max_depth=10, stream=stream)
            assert color == pytest.approx((0.5, 0.5, 0.5), abs=1e-5)

    def test_rendered_planet_is_uniform(self, fresh_scene):
        """A narrow view filled by the earth renders albedo * sky in every pixel."""
        from src.orrery.core.renderer import Renderer
        from src.orrery.scene.solar_system import PRODUCTION_PRESET

        earth = PRODUCTION_PRESET.body("earth")
        fresh_scene.add_lambertian_sphere(earth.initial, earth.radius, (0.5, 0.5, 0.5))
        renderer = Renderer(
            _camera(
                image_width=8,
                samples_per_pixel=4,
                vfov=2.0,
                lookfrom=(0.0, 900.0, 3000.0),
                lookat=earth.initial,
                background=(1.0, 1.0, 1.0),
            )
        )
        renderer.render()
        assert np.allclose(renderer.get_image_numpy(), 0.5, atol=1e-5)


class TestLinearToDisplay:
    """Tests for the display transform."""

    @pytest.mark.parametrize(
        "linear, expected",
        [
            (0.0, 0),
            (0.25, 128),
            (1.0, 255),
            (4.0, 255),
            (-1.0, 0),
            (0.5, 181),
        ],
    )
    def test_values(self, linear, expected):
        """Clamp, square root, then min(255, int(256 * c))."""
        from src.orrery.core.renderer import linear_to_display

        out = linear_to_display(np.full((1, 1, 3), linear, dtype=np.float32))
        assert out.dtype == np.uint8
        assert np.all(out == expected)
