from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Iterator

import numpy as np
from fontTools.pens.basePen import BasePen
from PIL import Image, ImageDraw

from gridsheet_plot.raster.fonts import Font
from gridsheet_plot.raster.numeric import I32_MAX, f32_to_i32


SUPERSAMPLE = 4
CURVE_STEPS = 8


@dataclass(frozen=True)
class Glyph:
    """One positioned glyph; (x, y) is its origin on the baseline in canvas pixels."""

    glyph_id: int
    font: Font
    pixel_size: float
    x: float
    y: float
    advance: float


@dataclass(frozen=True)
class GlyphCoverage:
    left: int
    top: int
    coverage: np.ndarray

    @property
    def width(self) -> int:
        return int(self.coverage.shape[1])

    @property
    def height(self) -> int:
        return int(self.coverage.shape[0])

    def pixels(self) -> Iterator[tuple[int, int, float]]:
        """Yield (x, y, coverage) for every covered pixel, in canvas coordinates."""
        ys, xs = np.nonzero(self.coverage > 0.0)
        for yy, xx in zip(ys.tolist(), xs.tolist()):
            yield (self.left + xx, self.top + yy, float(self.coverage[yy, xx]))


@dataclass(frozen=True)
class ColorGlyphBitmap:
    left: int
    top: int
    rgb: np.ndarray
    alpha: np.ndarray | None = None


class _FlatteningPen(BasePen):
    """Collects glyph contours as polylines in font units."""

    def __init__(self, glyph_set=None) -> None:
        super().__init__(glyph_set)
        self.contours: list[list[tuple[float, float]]] = []
        self._points: list[tuple[float, float]] = []

    def _moveTo(self, pt):
        self._flush()
        self._points = [pt]

    def _lineTo(self, pt):
        self._points.append(pt)

    def _curveToOne(self, pt1, pt2, pt3):
        x0, y0 = self._getCurrentPoint()
        for step in range(1, CURVE_STEPS + 1):
            t = step / CURVE_STEPS
            mt = 1.0 - t
            x = mt**3 * x0 + 3 * mt**2 * t * pt1[0] + 3 * mt * t**2 * pt2[0] + t**3 * pt3[0]
            y = mt**3 * y0 + 3 * mt**2 * t * pt1[1] + 3 * mt * t**2 * pt2[1] + t**3 * pt3[1]
            self._points.append((x, y))

    def _qCurveToOne(self, pt1, pt2):
        x0, y0 = self._getCurrentPoint()
        for step in range(1, CURVE_STEPS + 1):
            t = step / CURVE_STEPS
            mt = 1.0 - t
            x = mt * mt * x0 + 2 * mt * t * pt1[0] + t * t * pt2[0]
            y = mt * mt * y0 + 2 * mt * t * pt1[1] + t * t * pt2[1]
            self._points.append((x, y))

    def _closePath(self):
        self._flush()

    def _endPath(self):
        self._flush()

    def _flush(self) -> None:
        if len(self._points) >= 3:
            self.contours.append(self._points)
        self._points = []


def rasterize_outline(glyph: Glyph) -> GlyphCoverage | None:
    """Rasterize the glyph outline to per-pixel coverage using the nonzero rule."""
    pen = _FlatteningPen(glyph.font.glyph_set)
    glyph.font.draw_outline(glyph.glyph_id, pen)
    if not pen.contours:
        return None

    scale = glyph.font.scale_for(glyph.pixel_size)
    mapped = [[(glyph.x + fx * scale, glyph.y - fy * scale) for fx, fy in contour] for contour in pen.contours]
    xs = [x for contour in mapped for x, _ in contour]
    ys = [y for contour in mapped for _, y in contour]
    if not all(math.isfinite(v) and abs(v) < I32_MAX for v in xs + ys):
        return None

    left = f32_to_i32(math.floor(min(xs)))
    top = f32_to_i32(math.floor(min(ys)))
    width = max(1, f32_to_i32(math.ceil(max(xs))) - left)
    height = max(1, f32_to_i32(math.ceil(max(ys))) - top)
    size = (width * SUPERSAMPLE, height * SUPERSAMPLE)

    winding = np.zeros((size[1], size[0]), dtype=np.int16)
    for contour, source in zip(mapped, pen.contours):
        direction = _orientation(source)
        if direction == 0:
            continue
        layer = Image.new("L", size, 0)
        points = [((x - left) * SUPERSAMPLE, (y - top) * SUPERSAMPLE) for x, y in contour]
        ImageDraw.Draw(layer).polygon(points, fill=1)
        winding += direction * np.asarray(layer, dtype=np.int16)

    filled = (winding != 0).reshape(height, SUPERSAMPLE, width, SUPERSAMPLE)
    coverage = filled.mean(axis=(1, 3)).astype(np.float32)
    return GlyphCoverage(left=left, top=top, coverage=coverage)


def rasterize_color_bitmap(glyph: Glyph) -> ColorGlyphBitmap | None:
    """Resample the glyph's pre-rendered color image (emoji) into canvas pixels."""
    raster = glyph.font.raster_image(glyph.glyph_id, glyph.pixel_size)
    if raster is None or raster.ppem <= 0:
        return None
    scale_factor = glyph.pixel_size / raster.ppem
    if not math.isfinite(scale_factor) or scale_factor <= 0:
        return None

    image = raster.image
    has_alpha = image.mode in ("RGBA", "LA", "PA") or (image.mode == "P" and "transparency" in image.info)
    pixels = np.asarray(image.convert("RGBA" if has_alpha else "RGB"), dtype=np.uint8)
    src_h, src_w = pixels.shape[:2]
    dst_w = max(1, f32_to_i32(src_w * scale_factor))
    dst_h = max(1, f32_to_i32(src_h * scale_factor))

    # nearest neighbour, sampling source pixel centres
    xs = np.minimum(np.floor((np.arange(dst_w) + 0.5) / scale_factor).astype(np.int64), src_w - 1)
    ys = np.minimum(np.floor((np.arange(dst_h) + 0.5) / scale_factor).astype(np.int64), src_h - 1)
    sampled = pixels[ys[:, None], xs[None, :]]

    left = f32_to_i32(glyph.x + raster.origin_x * scale_factor)
    top = f32_to_i32(glyph.y + raster.origin_y * scale_factor)
    alpha = sampled[:, :, 3] if has_alpha else None
    return ColorGlyphBitmap(left=left, top=top, rgb=sampled[:, :, :3], alpha=alpha)


def _orientation(points: list[tuple[float, float]]) -> int:
    area = 0.0
    for (x0, y0), (x1, y1) in zip(points, points[1:] + points[:1]):
        area += x0 * y1 - x1 * y0
    if area > 0:
        return 1
    if area < 0:
        return -1
    return 0
