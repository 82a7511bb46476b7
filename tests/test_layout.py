from __future__ import annotations

import unittest

from gridsheet_plot.errors import ArithmeticOverflowError, ConfigurationError
from gridsheet_plot.layout import plan_grid
from gridsheet_plot.request import PaddingSpec


class GridLayoutTests(unittest.TestCase):
    def test_side_by_side_without_labels(self) -> None:
        geo = plan_grid(2, 1, (100, 100))
        self.assertEqual(geo.cols, 2)
        self.assertEqual((geo.canvas_width, geo.canvas_height), (200, 100))
        self.assertEqual(geo.cell_origin(0), (0, 0))
        self.assertEqual(geo.cell_origin(1), (100, 0))

    def test_three_by_three_with_row_and_column_labels(self) -> None:
        geo = plan_grid(9, 3, (100, 100), has_row_labels=True, has_column_labels=True)
        self.assertEqual(geo.cols, 3)
        self.assertEqual((geo.left_padding, geo.top_padding), (150, 40))
        self.assertEqual(geo.cell_height, 140)
        self.assertEqual(geo.canvas_width, 100 * 3 + 150)
        self.assertEqual(geo.canvas_height, 140 * 3 + 40)
        self.assertEqual(geo.cell_origin(4), (250, 180))

    def test_cols_is_ceiling_and_cells_are_unique(self) -> None:
        for n in range(1, 30):
            for rows in range(1, 8):
                geo = plan_grid(n, rows, (10, 10))
                self.assertEqual(geo.cols, -(-n // rows))
                cells = {geo.cell_position(i) for i in range(n)}
                self.assertEqual(len(cells), n)
                self.assertEqual(geo.cell_position(n - 1), ((n - 1) // geo.cols, (n - 1) % geo.cols))

    def test_column_labels_alone_reserve_top_band_only(self) -> None:
        geo = plan_grid(4, 2, (50, 30), has_column_labels=True, padding=PaddingSpec(top=10, left=99))
        self.assertEqual(geo.left_padding, 0)
        self.assertEqual(geo.canvas_height, (30 + 10) * 2 + 10)
        self.assertEqual(geo.label_band(2), (0, 40, 50, 10))
        self.assertEqual(geo.row_span(1), (50, 80))

    def test_blank_row_labels_keep_band_but_not_left_padding(self) -> None:
        geo = plan_grid(2, 2, (20, 20), has_row_labels=True, left_labels=False)
        self.assertEqual(geo.left_padding, 0)
        self.assertEqual(geo.top_padding, 40)

    def test_image_labels_reserve_top_band(self) -> None:
        geo = plan_grid(3, 1, (20, 20), has_image_labels=True, padding=PaddingSpec(top=8))
        self.assertEqual(geo.canvas_height, 20 + 8 + 8)
        self.assertEqual(geo.canvas_width, 60)

    def test_index_outside_grid_raises(self) -> None:
        geo = plan_grid(3, 2, (10, 10))
        with self.assertRaises(IndexError):
            geo.cell_origin(3)

    def test_invalid_inputs(self) -> None:
        with self.assertRaises(ConfigurationError):
            plan_grid(0, 1, (10, 10))
        with self.assertRaises(ConfigurationError):
            plan_grid(1, 0, (10, 10))
        with self.assertRaises(ConfigurationError):
            plan_grid(1, 1, (0, 10))

    def test_canvas_overflow_is_reported(self) -> None:
        with self.assertRaises(ArithmeticOverflowError):
            plan_grid(2, 1, (2**31 - 1, 10))
        with self.assertRaises(ArithmeticOverflowError):
            plan_grid(1, 1, (2**31 - 1, 10), has_row_labels=True)


if __name__ == "__main__":
    unittest.main()
