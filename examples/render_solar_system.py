#!/usr/bin/env python3
"""Render one frame of the solar system.

This script reads a frame configuration (time and camera pose), builds the
solar-system scene for that time, renders it and writes a PNG.

Usage:
    python -m examples.render_solar_system [config] [options]

Options:
    --output OUTPUT       Output file path (default: solar_system.png)
    --preset NAME         Scene preset: production or preview
    --time T              Override the config's time
    --samples SAMPLES     Override the number of samples per pixel
    --width WIDTH         Override the image width in pixels
    --max-depth DEPTH     Override the maximum number of bounces
    --seed SEED           Random seed (default: config value, else random)
    --texture-dir DIR     Directory holding the texture images
    --batch-size SIZE     Samples per progress update (default: 16)
    --cpu                 Force the CPU backend
    --verbose             Enable debug logging
    --quiet               Suppress progress output

Example:
    python -m examples.render_solar_system examples/config.json --preset preview --samples 20
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render one frame of the solar system.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "config",
        nargs="?",
        default="examples/config.json",
        help="Frame configuration file (default: examples/config.json)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="solar_system.png",
        help="Output file path (default: solar_system.png)",
    )
    parser.add_argument("--preset", type=str, default=None, help="Scene preset name")
    parser.add_argument("--time", type=int, default=None, help="Simulated time")
    parser.add_argument("--samples", type=int, default=None, help="Samples per pixel")
    parser.add_argument("--width", type=int, default=None, help="Image width in pixels")
    parser.add_argument("--max-depth", type=int, default=None, help="Maximum ray bounces")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--texture-dir", type=str, default=None, help="Texture directory")
    parser.add_argument(
        "--batch-size",
        type=int,
        default=16,
        help="Samples per progress update (default: 16)",
    )
    parser.add_argument("--cpu", action="store_true", help="Force the CPU backend")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    return parser.parse_args(argv)


def render_solar_system(args: argparse.Namespace) -> Path:
    """Render the frame described by the parsed arguments.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from src.orrery.config import build_camera_config, load_frame_config
    from src.orrery.core.renderer import Renderer
    from src.orrery.preview.export import save_png
    from src.orrery.scene.manager import SceneManager
    from src.orrery.scene.solar_system import build_solar_system, get_preset

    frame = load_frame_config(args.config)
    overrides = {
        "preset": args.preset,
        "time": args.time,
        "samples_per_pixel": args.samples,
        "image_width": args.width,
        "max_depth": args.max_depth,
        "seed": args.seed,
        "texture_dir": args.texture_dir,
    }
    frame = dataclasses.replace(frame, **{k: v for k, v in overrides.items() if v is not None})

    preset = get_preset(frame.preset)
    camera = build_camera_config(frame, preset)

    if not args.quiet:
        print(
            f"Building {preset.name} solar system at t={frame.time} "
            f"({camera.image_width}x{camera.image_height})..."
        )

    scene = SceneManager()
    build_solar_system(scene, preset, frame.time, texture_dir=frame.texture_dir)

    renderer = Renderer(camera)

    if not args.quiet:
        print(f"Rendering {camera.samples_per_pixel} samples per pixel (seed {renderer.seed})...")

    start_time = time.time()

    def progress_callback(current: int, target: int) -> None:
        if not args.quiet:
            elapsed = time.time() - start_time
            progress_pct = (current / target) * 100 if target > 0 else 0
            samples_per_sec = current / elapsed if elapsed > 0 else 0
            print(
                f"\r  Progress: {current}/{target} samples "
                f"({progress_pct:.1f}%) - {samples_per_sec:.1f} spp/s",
                end="",
                flush=True,
            )

    image = renderer.render(batch_size=args.batch_size, callback=progress_callback)

    if not args.quiet:
        print()  # Newline after progress

    output_file = Path(args.output)
    save_png(image, output_file)

    total_time = time.time() - start_time
    if not args.quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Use GPU if available, fall back to CPU
    if args.cpu:
        ti.init(arch=ti.cpu)
        if not args.quiet:
            print("Using CPU backend")
    else:
        try:
            ti.init(arch=ti.gpu)
            if not args.quiet:
                print("Using GPU backend")
        except Exception:
            ti.init(arch=ti.cpu)
            if not args.quiet:
                print("Using CPU backend")

    try:
        render_solar_system(args)
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
