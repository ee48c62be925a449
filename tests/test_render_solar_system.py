"""End-to-end tests for the solar-system render script.

These render tiny frames of the preview preset on the CPU backend that the
session fixture already initialised, so main() (which calls ti.init) is only
exercised on its failure path through render_solar_system.
"""

import json

import numpy as np
import pytest


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "frame.json"
    path.write_text(
        json.dumps(
            {
                "time": 40,
                "camera": {"position": [0, 300, 900], "look_at": [0, 0, 0], "up": [0, 1, 0]},
                "preset": "preview",
                "texture_dir": "textures",
            }
        ),
        encoding="utf-8",
    )
    return path


class TestParseArgs:
    """Tests for command-line parsing."""

    def test_defaults(self):
        """Without options nothing overrides the config file."""
        from examples.render_solar_system import parse_args

        args = parse_args([])
        assert args.config == "examples/config.json"
        assert args.output == "solar_system.png"
        assert args.samples is None
        assert args.seed is None
        assert args.batch_size == 16

    def test_overrides(self):
        """Options are parsed with their types."""
        from examples.render_solar_system import parse_args

        args = parse_args(["frame.json", "--samples", "4", "--width", "32", "--seed", "9", "--cpu"])
        assert args.config == "frame.json"
        assert (args.samples, args.width, args.seed) == (4, 32, 9)
        assert args.cpu


class TestRenderSolarSystem:
    """Tests for a full render through the script."""

    def test_renders_png(self, config_file, tmp_path):
        """A tiny preview frame is written as a PNG of the requested size."""
        from examples.render_solar_system import parse_args, render_solar_system
        from src.orrery.preview.export import load_png

        output = tmp_path / "frame.png"
        args = parse_args(
            [
                str(config_file),
                "--output",
                str(output),
                "--width",
                "32",
                "--samples",
                "2",
                "--max-depth",
                "3",
                "--seed",
                "1",
                "--quiet",
            ]
        )
        assert render_solar_system(args) == output

        image = load_png(output)
        assert image.shape == (18, 32, 3)
        # Textures are missing, so emitters render cyan and the frame is not black
        assert image.any()

    def test_same_seed_same_frame(self, config_file, tmp_path):
        """Rendering a frame twice with one seed gives identical files."""
        from examples.render_solar_system import parse_args, render_solar_system
        from src.orrery.preview.export import load_png

        images = []
        for name in ("a.png", "b.png"):
            args = parse_args(
                [
                    str(config_file),
                    "--output",
                    str(tmp_path / name),
                    "--width",
                    "24",
                    "--samples",
                    "2",
                    "--seed",
                    "5",
                    "--quiet",
                ]
            )
            images.append(load_png(render_solar_system(args)))
        assert np.array_equal(images[0], images[1])

    def test_missing_config_is_fatal(self, tmp_path):
        """A missing config file stops the render before anything is drawn."""
        from examples.render_solar_system import parse_args, render_solar_system

        args = parse_args([str(tmp_path / "missing.json"), "--quiet"])
        with pytest.raises(FileNotFoundError):
            render_solar_system(args)
