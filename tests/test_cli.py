from __future__ import annotations

import contextlib
import io
import tempfile
import unittest
from pathlib import Path

import numpy as np
from PIL import Image

from gridsheet_plot.cli import build_parser, config_from_args, main
from gridsheet_plot.raster.draw_text import Alignment

from font_fixtures import text_font_bytes


def _write_images(root: Path, count: int, size: tuple[int, int] = (24, 16)) -> list[str]:
    paths = []
    for i in range(count):
        path = root / f"img{i}.png"
        Image.new("RGB", size, (i * 30 % 256, 90, 160)).save(path)
        paths.append(str(path))
    return paths


class CliTests(unittest.TestCase):
    def test_parser_defaults(self) -> None:
        args = build_parser().parse_args(["a.png"])
        self.assertEqual(args.rows, 1)
        self.assertEqual(args.output, Path("output.jpg"))
        self.assertEqual(args.row_labels, [])
        self.assertFalse(args.debug)

    def test_flags_override_config(self) -> None:
        args = build_parser().parse_args(
            ["a.png", "--align", "end", "--top-padding", "12", "--label-size", "30", "--font", "x.ttf"]
        )
        config = config_from_args(args)
        self.assertIs(config.alignment.horizontal, Alignment.END)
        self.assertIs(config.alignment.vertical, Alignment.CENTER)
        self.assertEqual((config.padding.top, config.padding.left), (12, 150))
        self.assertEqual(config.style.size_px, 30.0)
        self.assertEqual(config.font_path, Path("x.ttf"))

    def test_plot_without_labels(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            root = Path(td)
            images = _write_images(root, 3)
            output = root / "grid.png"
            stdout = io.StringIO()
            with contextlib.redirect_stdout(stdout):
                code = main([*images, "--rows", "2", "--output", str(output)])
            self.assertEqual(code, 0)
            self.assertIn(f"Generated plot saved as {output}", stdout.getvalue())
            with Image.open(output) as saved:
                self.assertEqual(saved.size, (48, 32))

    def test_plot_with_labels_and_font(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            root = Path(td)
            font = root / "Label.ttf"
            font.write_bytes(text_font_bytes())
            images = _write_images(root, 4, size=(40, 40))
            output = root / "labelled.png"
            with contextlib.redirect_stdout(io.StringIO()):
                code = main(
                    [
                        *images,
                        "--rows", "2",
                        "--row-labels", "A", "O",
                        "--column-labels", "AA", "OO",
                        "--font", str(font),
                        "--emoji-font", str(font),
                        "--output", str(output),
                    ]
                )
            self.assertEqual(code, 0)
            with Image.open(output) as saved:
                pixels = np.asarray(saved.convert("RGB"))
            self.assertEqual(pixels.shape, (80 * 2 + 40, 40 * 2 + 150, 3))
            self.assertTrue(np.any(pixels[:40, 150:] != 255))

    def test_label_count_mismatch_reports_error(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            root = Path(td)
            images = _write_images(root, 1)
            output = root / "never.png"
            stderr = io.StringIO()
            with contextlib.redirect_stderr(stderr):
                code = main([*images, "--row-labels", "A", "B", "--output", str(output)])
            self.assertEqual(code, 1)
            self.assertIn("error: Number of row labels (2) should match the number of rows (1)", stderr.getvalue())
            self.assertFalse(output.exists())

    def test_unreadable_image_reports_error(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            root = Path(td)
            missing = root / "missing.png"
            stderr = io.StringIO()
            with contextlib.redirect_stderr(stderr):
                code = main([str(missing), "--output", str(root / "out.png")])
            self.assertEqual(code, 1)
            self.assertIn("Failed to open image", stderr.getvalue())


if __name__ == "__main__":
    unittest.main()
