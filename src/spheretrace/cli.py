"""Command-line interface: render a scene to a PPM image on stdout.

Usage:
    spheretrace [options] > image.ppm
    python -m spheretrace [options] > image.ppm

Options:
    --width WIDTH             Image width in pixels (default: 400)
    --aspect-ratio RATIO      Width / height (default: 1.7778)
    --samples SAMPLES         Samples per pixel (default: 100)
    --max-depth DEPTH         Maximum bounces per sample (default: 50)
    --seed SEED               Random seed (default: 0)
    --scene NAME              Preset scene: two-sphere or materials (default: materials)
    --scene-file PATH         Load the scene from a JSON file instead of a preset
    --normals                 Shade by surface normal instead of by material
    --viewport-height HEIGHT  Camera viewport height (default: 2.0)
    --focal-length LENGTH     Camera focal length (default: 1.0)
    --png PATH                Also save the image as PNG
    --arch {cpu,gpu}          Taichi backend (default: cpu)
    --quiet                   Suppress the progress line
    --log-level LEVEL         Logging level (default: WARNING)

Example:
    python -m spheretrace --width 200 --samples 10 --scene two-sphere > out.ppm
"""

from __future__ import annotations

import argparse
import contextlib
import logging
import os
import sys
import time
from pathlib import Path
from typing import TextIO

# stdout carries the image, so keep Taichi's import banner off it
os.environ.setdefault("ENABLE_TAICHI_HEADER_PRINT", "False")

import numpy as np  # noqa: E402
import numpy.typing as npt  # noqa: E402
import taichi as ti  # noqa: E402

from spheretrace.config import DEFAULT_ASPECT_RATIO, RenderConfig  # noqa: E402
from spheretrace.logging_config import setup_logging  # noqa: E402

logger = logging.getLogger(__name__)

SCENE_CHOICES = ("two-sphere", "materials")
ARCH_CHOICES = {"cpu": ti.cpu, "gpu": ti.gpu}


def init_backend(arch: str = "cpu") -> None:
    """Initialize Taichi for 64-bit rendering.

    Must be called before any spheretrace module that declares Taichi
    fields is imported.

    Args:
        arch: "cpu" or "gpu".

    Raises:
        ValueError: If the arch name is unknown.
    """
    if arch not in ARCH_CHOICES:
        raise ValueError(f"Unknown arch: {arch!r} (choose from {', '.join(ARCH_CHOICES)})")
    # ti.init prints its startup line to stdout regardless of log_level
    with contextlib.redirect_stdout(sys.stderr):
        ti.init(
            arch=ARCH_CHOICES[arch],
            default_fp=ti.f64,
            fast_math=False,
            log_level=ti.WARN,
        )
    logger.info("Initialized Taichi backend: %s", arch)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="spheretrace",
        description="Render a sphere scene with Monte Carlo path tracing. "
        "The PPM image is written to stdout.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=400,
        help="Image width in pixels (default: 400)",
    )
    parser.add_argument(
        "--aspect-ratio",
        type=float,
        default=DEFAULT_ASPECT_RATIO,
        help="Image width divided by height (default: 16/9)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=100,
        help="Number of samples per pixel (default: 100)",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=50,
        help="Maximum number of bounces per sample (default: 50)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Seed for the per-pixel random streams (default: 0)",
    )
    parser.add_argument(
        "--scene",
        choices=SCENE_CHOICES,
        default="materials",
        help="Preset scene to render (default: materials)",
    )
    parser.add_argument(
        "--scene-file",
        type=Path,
        default=None,
        help="JSON scene file to render instead of a preset",
    )
    parser.add_argument(
        "--normals",
        action="store_true",
        help="Shade by surface normal instead of by material",
    )
    parser.add_argument(
        "--viewport-height",
        type=float,
        default=2.0,
        help="Camera viewport height in world units (default: 2.0)",
    )
    parser.add_argument(
        "--focal-length",
        type=float,
        default=1.0,
        help="Camera focal length in world units (default: 1.0)",
    )
    parser.add_argument(
        "--png",
        type=Path,
        default=None,
        help="Also save the image as a PNG file",
    )
    parser.add_argument(
        "--arch",
        choices=sorted(ARCH_CHOICES),
        default="cpu",
        help="Taichi backend (default: cpu)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress the progress line",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: WARNING)",
    )
    return parser.parse_args(argv)


def config_from_args(args: argparse.Namespace) -> RenderConfig:
    """Build a RenderConfig from parsed arguments.

    Raises:
        ValueError: If a setting is out of range.
    """
    return RenderConfig(
        image_width=args.width,
        aspect_ratio=args.aspect_ratio,
        samples_per_pixel=args.samples,
        max_depth=args.max_depth,
        seed=args.seed,
        viewport_height=args.viewport_height,
        focal_length=args.focal_length,
        normals=args.normals,
    )


def run(
    config: RenderConfig,
    scene_name: str = "materials",
    scene_file: str | os.PathLike[str] | None = None,
    png_path: str | os.PathLike[str] | None = None,
    quiet: bool = False,
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> npt.NDArray[np.uint8]:
    """Render a scene and write it as PPM.

    Taichi must already be initialized (see init_backend).

    Args:
        config: Render settings.
        scene_name: Preset scene name, used when scene_file is None.
        scene_file: Optional JSON scene file.
        png_path: Optional path for an additional PNG copy.
        quiet: If True, no progress line is written.
        out: Stream for the PPM image (default stdout).
        err: Stream for the progress line (default stderr).

    Returns:
        The 8-bit image of shape (height, width, 3).
    """
    # Lazy imports to allow Taichi initialization first
    from spheretrace.camera.viewport import Camera, setup_camera
    from spheretrace.core.integrator import ShadingMode
    from spheretrace.core.renderer import Renderer
    from spheretrace.output.export import save_png
    from spheretrace.output.ppm import write_ppm
    from spheretrace.output.progress import ScanlineProgress
    from spheretrace.scene.manager import SceneManager, read_scene_config
    from spheretrace.scene.presets import create_preset_scene

    if scene_file is not None:
        logger.info("Loading scene from %s", scene_file)
        scene = SceneManager()
        scene.from_config(read_scene_config(scene_file))
        camera = Camera(
            aspect_ratio=config.aspect_ratio,
            viewport_height=config.viewport_height,
            focal_length=config.focal_length,
        )
    else:
        scene, camera = create_preset_scene(
            scene_name,
            aspect_ratio=config.aspect_ratio,
            viewport_height=config.viewport_height,
            focal_length=config.focal_length,
        )
    setup_camera(camera)

    shading = ShadingMode.NORMALS if config.normals else ShadingMode.MATERIAL
    renderer = Renderer(config.image_width, config.image_height)
    progress = None if quiet else ScanlineProgress(err)

    start_time = time.time()
    renderer.render(
        scene.world,
        config.samples_per_pixel,
        max_depth=config.max_depth,
        seed=config.seed,
        shading=shading,
        callback=progress,
    )

    pixels = renderer.get_image_uint8()
    write_ppm(pixels, out)
    if progress is not None:
        progress.finish()

    if png_path is not None:
        save_png(pixels, png_path)

    logger.info("Total time: %.2fs", time.time() - start_time)
    return pixels


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    setup_logging(args.log_level)

    try:
        config = config_from_args(args)
        init_backend(args.arch)
        run(
            config,
            scene_name=args.scene,
            scene_file=args.scene_file,
            png_path=args.png,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        logger.error("Error: %s", e)
        logger.debug("Traceback:", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
