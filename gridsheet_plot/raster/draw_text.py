from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import numpy as np

from gridsheet_plot.raster.canvas import RGB
from gridsheet_plot.raster.fonts import FontPair
from gridsheet_plot.raster.glyphs import (
    ColorGlyphBitmap,
    Glyph,
    GlyphCoverage,
    rasterize_color_bitmap,
    rasterize_outline,
)
from gridsheet_plot.raster.numeric import U8_MAX, coverage_to_alpha, round_half_away


class Alignment(Enum):
    START = "start"
    CENTER = "center"
    END = "end"

    @classmethod
    def parse(cls, value: str | Alignment) -> Alignment:
        if isinstance(value, Alignment):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as exc:
            raise ValueError(f"alignment must be one of start/center/end, got {value!r}") from exc

    def offset(self, extent: float) -> float:
        if self is Alignment.CENTER:
            return extent / 2.0
        if self is Alignment.END:
            return extent
        return 0.0


@dataclass(frozen=True)
class TextMetrics:
    width: float
    ascent: float
    descent: float

    @property
    def height(self) -> float:
        return self.ascent + self.descent


def measure_text(text: str, pixel_size: float, fonts: FontPair) -> TextMetrics:
    width = 0.0
    for char in text:
        resolved = fonts.resolve(char)
        width += resolved.font.h_advance(resolved.glyph_id, pixel_size)
    return TextMetrics(
        width=width,
        ascent=fonts.primary.scaled_ascent(pixel_size),
        descent=fonts.primary.scaled_descent(pixel_size),
    )


def layout_text(
    text: str,
    x: float,
    y: float,
    pixel_size: float,
    fonts: FontPair,
    alignment: Alignment = Alignment.START,
) -> list[Glyph]:
    """Place glyphs on one baseline, left to right, using advances only."""
    if pixel_size <= 0:
        raise ValueError("pixel_size must be > 0")
    glyphs: list[Glyph] = []
    cursor = 0.0
    for char in text:
        resolved = fonts.resolve(char)
        advance = resolved.font.h_advance(resolved.glyph_id, pixel_size)
        glyphs.append(
            Glyph(
                glyph_id=resolved.glyph_id,
                font=resolved.font,
                pixel_size=pixel_size,
                x=cursor,
                y=float(y),
                advance=advance,
            )
        )
        cursor += advance
    start = float(x) - alignment.offset(cursor)
    return [
        Glyph(glyph_id=g.glyph_id, font=g.font, pixel_size=g.pixel_size, x=start + g.x, y=g.y, advance=g.advance)
        for g in glyphs
    ]


def draw_text(
    dst: np.ndarray,
    text: str,
    x: float,
    y: float,
    pixel_size: float,
    fonts: FontPair,
    color: RGB,
    alignment: Alignment = Alignment.START,
) -> None:
    if not text:
        return
    for glyph in layout_text(text, x, y, pixel_size, fonts, alignment):
        coverage = rasterize_outline(glyph)
        if coverage is not None:
            blend_coverage(dst, coverage, color)
        bitmap = rasterize_color_bitmap(glyph)
        if bitmap is not None:
            composite_bitmap(dst, bitmap)


def blend_coverage(dst: np.ndarray, glyph: GlyphCoverage, color: RGB) -> None:
    region = _clip(dst, glyph.left, glyph.top, glyph.width, glyph.height)
    if region is None:
        return
    (y0, y1, x0, x1), (sy0, sy1, sx0, sx1) = region
    alpha = coverage_to_alpha(glyph.coverage[sy0:sy1, sx0:sx1])
    if not np.any(alpha):
        return
    src = np.broadcast_to(np.asarray(color, dtype=np.uint8), alpha.shape + (3,))
    _blend_patch(dst[y0:y1, x0:x1], src, alpha)


def composite_bitmap(dst: np.ndarray, bitmap: ColorGlyphBitmap) -> None:
    h, w = bitmap.rgb.shape[:2]
    region = _clip(dst, bitmap.left, bitmap.top, w, h)
    if region is None:
        return
    (y0, y1, x0, x1), (sy0, sy1, sx0, sx1) = region
    src = bitmap.rgb[sy0:sy1, sx0:sx1]
    if bitmap.alpha is None:
        dst[y0:y1, x0:x1] = src
        return
    _blend_patch(dst[y0:y1, x0:x1], src, bitmap.alpha[sy0:sy1, sx0:sx1])


def _blend_patch(patch: np.ndarray, src: np.ndarray, alpha: np.ndarray) -> None:
    a = alpha.astype(np.float32)[:, :, None] / 255.0
    out = patch.astype(np.float32) * (1.0 - a) + src.astype(np.float32) * a
    patch[:, :, :] = np.clip(round_half_away(out), 0, U8_MAX).astype(np.uint8)


def _clip(
    dst: np.ndarray,
    left: int,
    top: int,
    width: int,
    height: int,
) -> tuple[tuple[int, int, int, int], tuple[int, int, int, int]] | None:
    x0 = max(0, left)
    y0 = max(0, top)
    x1 = min(dst.shape[1], left + width)
    y1 = min(dst.shape[0], top + height)
    if x1 <= x0 or y1 <= y0:
        return None
    return (y0, y1, x0, x1), (y0 - top, y1 - top, x0 - left, x1 - left)
