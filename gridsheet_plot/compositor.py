from __future__ import annotations

from functools import partial
import logging
from pathlib import Path
from typing import Callable, Sequence

import numpy as np

from gridsheet_plot.config import SheetConfig, resolve_fonts
from gridsheet_plot.errors import ConfigurationError
from gridsheet_plot.images import load_image, save_image
from gridsheet_plot.layout import GridGeometry, plan_grid
from gridsheet_plot.raster.canvas import RGB, blit, draw_rect_outline, new_canvas
from gridsheet_plot.raster.draw_text import Alignment, draw_text, measure_text
from gridsheet_plot.raster.fonts import FontPair
from gridsheet_plot.request import PlotRequest


LOGGER = logging.getLogger(__name__)

FontsProvider = Callable[[], FontPair]
ImageLoader = Callable[[Path], np.ndarray]
ImageSaver = Callable[[np.ndarray, Path], object]


class PlotCompositor:
    """Lays out, labels and composites a grid of images onto one RGB canvas.

    Everything that can fail (validation, image decoding, font loading) runs
    before the canvas is allocated, so an error never leaves a partial result.
    Fonts are only requested when the request carries labels.
    """

    def __init__(
        self,
        fonts: FontPair | FontsProvider | None = None,
        *,
        loader: ImageLoader = load_image,
        saver: ImageSaver = save_image,
    ) -> None:
        if fonts is None:
            fonts = partial(resolve_fonts, SheetConfig())
        self._fonts_source = fonts
        self._fonts: FontPair | None = fonts if isinstance(fonts, FontPair) else None
        self._loader = loader
        self._saver = saver

    def fonts(self) -> FontPair:
        if self._fonts is None:
            self._fonts = self._fonts_source()
        return self._fonts

    def plan(self, request: PlotRequest, image_size: tuple[int, int]) -> GridGeometry:
        request.validate()
        return plan_grid(
            len(request.images),
            request.rows,
            image_size,
            has_row_labels=bool(request.row_labels),
            has_column_labels=bool(request.column_labels),
            has_image_labels=bool(request.labels),
            left_labels=request.has_row_labels,
            padding=request.padding,
        )

    def render(self, request: PlotRequest, images: Sequence[np.ndarray] | None = None) -> np.ndarray:
        request.validate()
        if images is None:
            images = [self._loader(path) for path in request.images]
        elif len(images) != len(request.images):
            raise ConfigurationError(
                f"Number of decoded images ({len(images)}) should match the number of image paths ({len(request.images)})"
            )
        first = images[0]
        geometry = self.plan(request, (int(first.shape[1]), int(first.shape[0])))
        fonts = self.fonts() if request.has_any_labels else None

        style = request.style
        canvas = new_canvas(geometry.canvas_width, geometry.canvas_height, style.background)

        if fonts is not None and request.column_labels:
            self._draw_column_labels(canvas, request, geometry, fonts)

        labelled_rows: set[int] = set()
        for index, image in enumerate(images):
            row, _ = geometry.cell_position(index)
            if fonts is not None and request.row_labels and row not in labelled_rows:
                self._draw_row_label(canvas, request, geometry, fonts, row)
                labelled_rows.add(row)
            if fonts is not None and request.labels:
                self._draw_image_label(canvas, request, geometry, fonts, index)
            x, y = geometry.cell_origin(index)
            blit(canvas, image, x, y, clip=geometry.image_rect(index))

        if request.debug:
            draw_layout_guides(canvas, geometry, style.debug_color)
        return canvas

    def render_to_file(self, request: PlotRequest, output: str | Path | None = None) -> Path:
        target = Path(output) if output is not None else request.output
        canvas = self.render(request)
        self._saver(canvas, target)
        LOGGER.info("saved %dx%d plot to %s", canvas.shape[1], canvas.shape[0], target)
        return target

    def _draw_column_labels(
        self,
        canvas: np.ndarray,
        request: PlotRequest,
        geometry: GridGeometry,
        fonts: FontPair,
    ) -> None:
        band = (0, geometry.top_padding)
        if request.labels:
            # per-image labels take the lower half of the first band
            band = (0, geometry.top_padding // 2)
        for col, label in enumerate(request.column_labels):
            x0, x1 = geometry.column_span(col)
            self._draw_label(canvas, request, fonts, label, (x0, x1), band)

    def _draw_row_label(
        self,
        canvas: np.ndarray,
        request: PlotRequest,
        geometry: GridGeometry,
        fonts: FontPair,
        row: int,
    ) -> None:
        label = request.row_labels[row]
        self._draw_label(canvas, request, fonts, label, (0, geometry.left_padding), geometry.row_span(row))

    def _draw_image_label(
        self,
        canvas: np.ndarray,
        request: PlotRequest,
        geometry: GridGeometry,
        fonts: FontPair,
        index: int,
    ) -> None:
        x, y, w, h = geometry.label_band(index)
        row, _ = geometry.cell_position(index)
        top = y
        if request.column_labels and row == 0:
            top = y + h // 2
        self._draw_label(canvas, request, fonts, request.labels[index], (x, x + w), (top, y + h))

    def _draw_label(
        self,
        canvas: np.ndarray,
        request: PlotRequest,
        fonts: FontPair,
        text: str,
        x_span: tuple[int, int],
        y_span: tuple[int, int],
    ) -> None:
        if not text:
            return
        style = request.style
        alignment = request.alignment
        metrics = measure_text(text, style.size_px, fonts)
        x = _anchor(x_span, alignment.horizontal, style.margin_px)
        y = _baseline(y_span, alignment.vertical, metrics.ascent, metrics.descent)
        draw_text(canvas, text, x, y, style.size_px, fonts, style.color, alignment.horizontal)


def draw_layout_guides(canvas: np.ndarray, geometry: GridGeometry, color: RGB) -> None:
    """Outline every cell, its label band and the row-label column."""
    for index in range(geometry.rows * geometry.cols):
        row, col = divmod(index, geometry.cols)
        x = col * geometry.cell_width + geometry.left_padding
        y = row * geometry.cell_height + geometry.top_padding
        draw_rect_outline(canvas, x, y, geometry.cell_width, geometry.image_height, color)
        if geometry.top_padding > 0:
            draw_rect_outline(canvas, x, y - geometry.top_padding, geometry.cell_width, geometry.top_padding, color)
    if geometry.left_padding > 0:
        draw_rect_outline(canvas, 0, 0, geometry.left_padding, geometry.canvas_height, color)


def _anchor(span: tuple[int, int], alignment: Alignment, margin: int) -> float:
    start, end = span
    if alignment is Alignment.START:
        return float(start + margin)
    if alignment is Alignment.END:
        return float(end - margin)
    return (start + end) / 2.0


def _baseline(span: tuple[int, int], alignment: Alignment, ascent: float, descent: float) -> float:
    top, bottom = span
    if alignment is Alignment.START:
        return top + ascent
    if alignment is Alignment.END:
        return bottom - descent
    return (top + bottom) / 2.0 + (ascent - descent) / 2.0
