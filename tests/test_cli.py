"""Tests for the command-line interface.

The session fixture has already initialized Taichi, so these tests call
run() directly. The entry-point test renders in a separate process.
"""

import io
import json
import logging
import os
import subprocess
import sys
from pathlib import Path

import numpy as np
import pytest

from spheretrace.cli import config_from_args, init_backend, main, parse_args
from spheretrace.config import RenderConfig

SRC_DIR = Path(__file__).resolve().parent.parent / "src"


@pytest.fixture
def restore_logging():
    """Undo handler changes main() makes to the package logger."""
    logger = logging.getLogger("spheretrace")
    handlers, level = list(logger.handlers), logger.level
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)


def _small_config(**kwargs):
    settings = {
        "image_width": 8,
        "aspect_ratio": 2.0,
        "samples_per_pixel": 1,
        "max_depth": 3,
        "seed": 7,
    }
    settings.update(kwargs)
    return RenderConfig(**settings)


class TestParseArgs:
    """Tests for argument parsing."""

    def test_defaults(self):
        """Defaults match RenderConfig defaults."""
        args = parse_args([])
        config = config_from_args(args)
        assert config == RenderConfig()
        assert args.scene == "materials"
        assert args.scene_file is None
        assert args.png is None
        assert args.arch == "cpu"
        assert not args.quiet

    def test_options(self):
        """Every render option reaches the RenderConfig."""
        args = parse_args(
            [
                "--width", "200",
                "--aspect-ratio", "2",
                "--samples", "10",
                "--max-depth", "5",
                "--seed", "3",
                "--normals",
                "--viewport-height", "3.0",
                "--focal-length", "1.5",
                "--scene", "two-sphere",
            ]
        )
        config = config_from_args(args)
        assert config.image_width == 200
        assert config.image_height == 100
        assert config.samples_per_pixel == 10
        assert config.max_depth == 5
        assert config.seed == 3
        assert config.normals
        assert config.viewport_height == 3.0
        assert config.focal_length == 1.5
        assert args.scene == "two-sphere"

    def test_unknown_scene_exits(self):
        """argparse rejects scenes outside the preset list."""
        with pytest.raises(SystemExit):
            parse_args(["--scene", "cornell"])


class TestRun:
    """Tests for rendering through run()."""

    def test_ppm_output(self):
        """stdout holds a complete P3 image and stderr the progress line."""
        from spheretrace.cli import run

        out, err = io.StringIO(), io.StringIO()
        pixels = run(_small_config(), scene_name="two-sphere", out=out, err=err)

        lines = out.getvalue().splitlines()
        assert lines[:3] == ["P3", "8 4", "255"]
        assert len(lines) == 3 + 8 * 4
        for line in lines[3:]:
            values = [int(v) for v in line.split()]
            assert len(values) == 3
            assert all(0 <= v <= 255 for v in values)
        assert pixels.shape == (4, 8, 3)
        assert lines[3] == " ".join(str(v) for v in pixels[0, 0])

        assert err.getvalue() == (
            "\rScanlines remaining: 3     "
            "\rScanlines remaining: 2     "
            "\rScanlines remaining: 1     "
            "\rScanlines remaining: 0     "
            "\nDone\n"
        )

    def test_quiet_suppresses_progress(self):
        """quiet=True leaves stderr empty."""
        from spheretrace.cli import run

        out, err = io.StringIO(), io.StringIO()
        run(_small_config(), scene_name="materials", quiet=True, out=out, err=err)
        assert err.getvalue() == ""
        assert out.getvalue().startswith("P3\n8 4\n255\n")

    def test_same_seed_same_image(self):
        """Two runs with one seed write identical PPM text."""
        from spheretrace.cli import run

        first, second = io.StringIO(), io.StringIO()
        run(_small_config(), quiet=True, out=first)
        run(_small_config(), quiet=True, out=second)
        assert first.getvalue() == second.getvalue()

    def test_scene_file_and_png(self, tmp_path):
        """Scenes load from JSON and the PNG copy matches the PPM pixels."""
        from PIL import Image as PILImage

        from spheretrace.cli import run

        scene_path = tmp_path / "scene.json"
        scene_path.write_text(
            json.dumps(
                {
                    "materials": [{"type": "lambertian", "albedo": [0.5, 0.5, 0.5]}],
                    "spheres": [{"center": [0, 0, -1], "radius": 0.5, "material_id": 0}],
                }
            )
        )
        png_path = tmp_path / "out.png"

        pixels = run(
            _small_config(),
            scene_file=scene_path,
            png_path=png_path,
            quiet=True,
            out=io.StringIO(),
        )
        with PILImage.open(png_path) as img:
            np.testing.assert_array_equal(np.asarray(img.convert("RGB")), pixels)

    def test_depth_zero_is_black(self):
        """max_depth 0 writes an all-black image."""
        from spheretrace.cli import run

        out = io.StringIO()
        run(_small_config(max_depth=0), quiet=True, out=out)
        assert all(line == "0 0 0" for line in out.getvalue().splitlines()[3:])


class TestMain:
    """Tests for the entry point's error handling."""

    def test_invalid_config_returns_error(self, restore_logging, capsys):
        """Bad settings are reported and exit with status 1."""
        assert main(["--width", "0"]) == 1
        captured = capsys.readouterr()
        assert captured.out == ""

    def test_missing_scene_file_returns_error(self, restore_logging, tmp_path, monkeypatch):
        """A missing scene file fails before anything is written."""
        # Skip backend re-initialization, the session has already set it up
        monkeypatch.setattr("spheretrace.cli.init_backend", lambda arch: None)
        out = io.StringIO()
        monkeypatch.setattr("sys.stdout", out)
        assert main(["--scene-file", str(tmp_path / "missing.json"), "--quiet"]) == 1
        assert out.getvalue() == ""


class TestBackendOutput:
    """Tests that only the image reaches stdout."""

    def test_init_backend_keeps_stdout_clean(self, monkeypatch, capsys):
        """Anything ti.init prints goes to stderr."""

        def fake_init(**kwargs):
            print("[Taichi] Starting on arch=x64")

        monkeypatch.setattr("spheretrace.cli.ti.init", fake_init)
        init_backend("cpu")

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "[Taichi] Starting on arch=x64" in captured.err

    def test_module_entry_point_writes_clean_ppm(self):
        """python -m spheretrace writes a complete P3 image and nothing else to stdout."""
        # A fresh process, since this one already initialized Taichi
        env = dict(os.environ)
        env["PYTHONPATH"] = os.pathsep.join(
            p for p in (str(SRC_DIR), env.get("PYTHONPATH", "")) if p
        )
        result = subprocess.run(
            [
                sys.executable, "-m", "spheretrace",
                "--width", "16",
                "--aspect-ratio", "2",
                "--samples", "1",
                "--max-depth", "3",
                "--scene", "two-sphere",
            ],
            capture_output=True,
            text=True,
            env=env,
            timeout=600,
        )

        assert result.returncode == 0, result.stderr
        assert result.stdout.startswith("P3\n16 8\n255\n")
        lines = result.stdout.splitlines()
        assert len(lines) == 3 + 16 * 8
        assert all(len(line.split()) == 3 for line in lines[3:])
        assert result.stderr.endswith("\nDone\n")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
