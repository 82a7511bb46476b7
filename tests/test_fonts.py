from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from gridsheet_plot.errors import FontLoadError, ResourceError
from gridsheet_plot.raster.fonts import NOTDEF_GLYPH_ID, FontChoice, FontPair, load_font, load_font_file

from font_fixtures import EMOJI, cbdt_emoji_font, emoji_font, text_font, text_font_bytes


class FontTests(unittest.TestCase):
    def test_metrics_use_pixel_height_scale(self) -> None:
        font = text_font()
        self.assertEqual(font.height_unscaled, 1000.0)
        self.assertAlmostEqual(font.scale_for(24.0), 0.024)
        self.assertAlmostEqual(font.scaled_ascent(100.0), 80.0)
        self.assertAlmostEqual(font.scaled_descent(100.0), 20.0)

    def test_outline_presence(self) -> None:
        font = text_font()
        self.assertTrue(font.has_outline(font.glyph_id("A")))
        self.assertFalse(font.has_outline(font.glyph_id(" ")))
        self.assertEqual(font.glyph_id("Z"), NOTDEF_GLYPH_ID)

    def test_advance_scales_with_pixel_size(self) -> None:
        font = text_font()
        self.assertAlmostEqual(font.h_advance(font.glyph_id("A"), 100.0), 70.0)
        self.assertAlmostEqual(font.h_advance(font.glyph_id(" "), 100.0), 25.0)

    def test_color_image_lookup_picks_strike(self) -> None:
        font = emoji_font(ppem=100, size=10)
        image = font.raster_image(font.glyph_id(EMOJI), 24.0)
        self.assertIsNotNone(image)
        assert image is not None
        self.assertEqual(image.ppem, 100)
        self.assertEqual(image.image.size, (10, 10))
        self.assertEqual((image.origin_x, image.origin_y), (0.0, -10.0))
        self.assertIsNone(text_font().raster_image(1, 24.0))

    def test_cbdt_strike_selection_and_origin(self) -> None:
        font = cbdt_emoji_font({50: (10, (255, 0, 0)), 100: (20, (0, 0, 255))}, bearing=(2, 15))
        glyph_id = font.glyph_id(EMOJI)
        self.assertEqual(font.raster_image(glyph_id, 40.0).ppem, 50)
        self.assertEqual(font.raster_image(glyph_id, 50.0).ppem, 50)
        self.assertEqual(font.raster_image(glyph_id, 60.0).ppem, 100)
        # past the largest strike, the largest one is scaled up
        image = font.raster_image(glyph_id, 300.0)
        self.assertEqual(image.ppem, 100)
        self.assertEqual(image.image.size, (20, 20))
        self.assertEqual((image.origin_x, image.origin_y), (2.0, -15.0))

    def test_composite_glyph_counts_as_outline(self) -> None:
        font = text_font()
        glyph_id = font.glyph_id("\u00c4")
        self.assertNotEqual(glyph_id, NOTDEF_GLYPH_ID)
        self.assertTrue(font.has_outline(glyph_id))

    def test_invalid_font_bytes_raise_font_load_error(self) -> None:
        with self.assertRaises(FontLoadError):
            load_font(b"definitely not a font", name="junk")

    def test_missing_font_file_is_resource_error(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            missing = Path(td) / "missing.ttf"
            with self.assertRaises(ResourceError) as ctx:
                load_font_file(str(missing))
            self.assertEqual(ctx.exception.path, missing)

    def test_font_file_round_trip(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "Test.ttf"
            path.write_bytes(text_font_bytes())
            font = load_font_file(str(path))
            self.assertEqual(font.name, "Test.ttf")
            self.assertIs(load_font_file(str(path)), font)


class FontPairTests(unittest.TestCase):
    def setUp(self) -> None:
        self.pair = FontPair(text_font(), emoji_font())

    def test_primary_glyph_with_outline_wins(self) -> None:
        resolved = self.pair.resolve("A")
        self.assertIs(resolved.font, self.pair.primary)
        self.assertEqual(resolved.choice, FontChoice.PRIMARY)

    def test_composite_glyph_stays_in_primary(self) -> None:
        resolved = self.pair.resolve("\u00c4")
        self.assertEqual(resolved.choice, FontChoice.PRIMARY)
        self.assertIs(resolved.font, self.pair.primary)

    def test_whitespace_stays_in_primary(self) -> None:
        self.assertEqual(self.pair.resolve(" ").choice, FontChoice.PRIMARY)

    def test_missing_character_falls_back_to_emoji_font(self) -> None:
        resolved = self.pair.resolve(EMOJI)
        self.assertEqual(resolved.choice, FontChoice.FALLBACK)
        self.assertIs(resolved.font, self.pair.fallback)
        self.assertNotEqual(resolved.glyph_id, NOTDEF_GLYPH_ID)

    def test_unknown_everywhere_resolves_to_fallback_notdef(self) -> None:
        resolved = self.pair.resolve("Z")
        self.assertEqual(resolved.choice, FontChoice.FALLBACK)
        self.assertEqual(resolved.glyph_id, NOTDEF_GLYPH_ID)

    def test_single_font_pair_falls_back_to_itself(self) -> None:
        pair = FontPair(text_font())
        self.assertIs(pair.fallback, pair.primary)
        self.assertEqual(pair.resolve("Z").glyph_id, NOTDEF_GLYPH_ID)


if __name__ == "__main__":
    unittest.main()
