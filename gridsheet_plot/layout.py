from __future__ import annotations

from dataclasses import dataclass
import logging

from gridsheet_plot.errors import ConfigurationError
from gridsheet_plot.raster.numeric import checked_i32
from gridsheet_plot.request import PaddingSpec


LOGGER = logging.getLogger(__name__)

Rect = tuple[int, int, int, int]


@dataclass(frozen=True)
class GridGeometry:
    """Canvas layout for a row-major grid of equally sized cells.

    Each cell is an image plus the label band reserved directly above it.
    One more band of the same height is kept below the last row, so the
    canvas is `cell_height * rows + top_padding` tall.
    """

    count: int
    rows: int
    cols: int
    image_width: int
    image_height: int
    cell_width: int
    cell_height: int
    top_padding: int
    left_padding: int
    canvas_width: int
    canvas_height: int

    def cell_position(self, index: int) -> tuple[int, int]:
        if index < 0 or index >= self.count:
            raise IndexError(f"image index {index} outside grid of {self.count}")
        return (index // self.cols, index % self.cols)

    def cell_origin(self, index: int) -> tuple[int, int]:
        row, col = self.cell_position(index)
        return (col * self.cell_width + self.left_padding, row * self.cell_height + self.top_padding)

    def image_rect(self, index: int) -> Rect:
        x, y = self.cell_origin(index)
        return (x, y, self.cell_width, self.image_height)

    def label_band(self, index: int) -> Rect:
        x, y = self.cell_origin(index)
        return (x, y - self.top_padding, self.cell_width, self.top_padding)

    def column_span(self, col: int) -> tuple[int, int]:
        x = col * self.cell_width + self.left_padding
        return (x, x + self.cell_width)

    def row_span(self, row: int) -> tuple[int, int]:
        """Vertical extent of the images in `row` (label band excluded)."""
        y = row * self.cell_height + self.top_padding
        return (y, y + self.image_height)


def plan_grid(
    image_count: int,
    rows: int,
    image_size: tuple[int, int],
    *,
    has_row_labels: bool = False,
    has_column_labels: bool = False,
    has_image_labels: bool = False,
    left_labels: bool | None = None,
    padding: PaddingSpec | None = None,
) -> GridGeometry:
    """Compute grid geometry from the first image size.

    `left_labels` (default `has_row_labels`) is whether any row label has
    text; only then is the left padding column reserved.
    """
    if image_count < 1:
        raise ConfigurationError(f"At least one image is required (got {image_count})")
    if rows < 1:
        raise ConfigurationError(f"Number of rows must be at least 1 (got {rows})")
    image_width, image_height = image_size
    if image_width <= 0 or image_height <= 0:
        raise ConfigurationError(f"reference image must have positive dimensions (got {image_width}x{image_height})")
    padding = padding or PaddingSpec()

    count = checked_i32(image_count, "image count")
    rows = checked_i32(rows, "row count")
    cols = -(-count // rows)
    if left_labels is None:
        left_labels = has_row_labels
    left_padding = padding.left if left_labels else 0
    any_labels = has_row_labels or has_column_labels or has_image_labels
    top_band = padding.top if any_labels else 0

    cell_width = image_width
    cell_height = checked_i32(image_height + top_band, "cell height")
    canvas_width = checked_i32(cell_width * cols + left_padding, "canvas width")
    canvas_height = checked_i32(cell_height * rows + top_band, "canvas height")

    geometry = GridGeometry(
        count=count,
        rows=rows,
        cols=cols,
        image_width=image_width,
        image_height=image_height,
        cell_width=cell_width,
        cell_height=cell_height,
        top_padding=top_band,
        left_padding=left_padding,
        canvas_width=canvas_width,
        canvas_height=canvas_height,
    )
    LOGGER.debug(
        "grid %dx%d cells=%dx%d canvas=%dx%d top=%d left=%d",
        rows,
        cols,
        cell_width,
        cell_height,
        canvas_width,
        canvas_height,
        top_band,
        left_padding,
    )
    return geometry
