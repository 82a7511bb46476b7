from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
import io
import logging
from pathlib import Path

from fontTools.pens.recordingPen import DecomposingRecordingPen
from fontTools.ttLib import TTFont
from PIL import Image

from gridsheet_plot.errors import FontLoadError


LOGGER = logging.getLogger(__name__)
NOTDEF_GLYPH_ID = 0


class FontChoice(Enum):
    PRIMARY = "primary"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class ColorGlyphImage:
    """Pre-rendered glyph image at its native strike size.

    `origin_x`/`origin_y` are the offset, in strike pixels with y pointing
    down, from the glyph origin on the baseline to the image's top-left pixel.
    """

    ppem: int
    image: Image.Image
    origin_x: float
    origin_y: float


class Font:
    """Read-only view over a parsed TrueType/OpenType font."""

    def __init__(self, ttfont: TTFont, name: str = "font") -> None:
        self.name = name
        self._ttfont = ttfont
        self._cmap: dict[int, str] = ttfont.getBestCmap() or {}
        self._glyph_order: list[str] = ttfont.getGlyphOrder()
        self._glyph_set = ttfont.getGlyphSet()
        self._hmtx = ttfont["hmtx"]
        hhea = ttfont["hhea"]
        self.units_per_em = int(ttfont["head"].unitsPerEm)
        self.ascent = int(hhea.ascent)
        self.descent = int(hhea.descent)
        self._outline_cache: dict[int, bool] = {}
        self._raster_cache: dict[tuple[int, float], ColorGlyphImage | None] = {}

    @property
    def glyph_set(self):
        return self._glyph_set

    @property
    def glyph_count(self) -> int:
        return len(self._glyph_order)

    @property
    def height_unscaled(self) -> float:
        height = self.ascent - self.descent
        return float(height if height > 0 else self.units_per_em)

    def scale_for(self, pixel_size: float) -> float:
        return pixel_size / self.height_unscaled

    def glyph_id(self, char: str) -> int:
        name = self._cmap.get(ord(char))
        if name is None:
            return NOTDEF_GLYPH_ID
        return self._ttfont.getGlyphID(name)

    def glyph_name(self, glyph_id: int) -> str:
        if 0 <= glyph_id < len(self._glyph_order):
            return self._glyph_order[glyph_id]
        return self._glyph_order[NOTDEF_GLYPH_ID]

    def has_outline(self, glyph_id: int) -> bool:
        cached = self._outline_cache.get(glyph_id)
        if cached is not None:
            return cached
        # composites (accented letters) only reference other glyphs
        pen = DecomposingRecordingPen(self._glyph_set)
        self.draw_outline(glyph_id, pen)
        found = any(op in ("lineTo", "curveTo", "qCurveTo") for op, _ in pen.value)
        self._outline_cache[glyph_id] = found
        return found

    def draw_outline(self, glyph_id: int, pen) -> None:
        name = self.glyph_name(glyph_id)
        if name not in self._glyph_set:
            return
        self._glyph_set[name].draw(pen)

    def h_advance_unscaled(self, glyph_id: int) -> int:
        name = self.glyph_name(glyph_id)
        try:
            return int(self._hmtx[name][0])
        except KeyError:
            return 0

    def h_advance(self, glyph_id: int, pixel_size: float) -> float:
        return self.h_advance_unscaled(glyph_id) * self.scale_for(pixel_size)

    def scaled_ascent(self, pixel_size: float) -> float:
        return self.ascent * self.scale_for(pixel_size)

    def scaled_descent(self, pixel_size: float) -> float:
        return -self.descent * self.scale_for(pixel_size)

    def raster_image(self, glyph_id: int, pixel_size: float) -> ColorGlyphImage | None:
        key = (glyph_id, pixel_size)
        if key not in self._raster_cache:
            self._raster_cache[key] = self._find_raster_image(self.glyph_name(glyph_id), pixel_size)
        return self._raster_cache[key]

    def _find_raster_image(self, name: str, pixel_size: float) -> ColorGlyphImage | None:
        if "sbix" in self._ttfont:
            found = self._sbix_image(name, pixel_size)
            if found is not None:
                return found
        if "CBDT" in self._ttfont and "CBLC" in self._ttfont:
            return self._cbdt_image(name, pixel_size)
        return None

    def _sbix_image(self, name: str, pixel_size: float) -> ColorGlyphImage | None:
        candidates: dict[int, object] = {}
        for ppem, strike in self._ttfont["sbix"].strikes.items():
            glyph = strike.glyphs.get(name)
            if glyph is not None and glyph.graphicType == "dupe" and glyph.referenceGlyphName:
                glyph = strike.glyphs.get(glyph.referenceGlyphName)
            if glyph is None or glyph.graphicType != "png " or not glyph.imageData:
                continue
            candidates[int(ppem)] = glyph
        ppem = _pick_strike(list(candidates), pixel_size)
        if ppem is None:
            return None
        glyph = candidates[ppem]
        image = _decode_png(glyph.imageData, self.name, name)
        if image is None:
            return None
        origin_x = float(glyph.originOffsetX)
        origin_y = -float(glyph.originOffsetY + image.height)
        return ColorGlyphImage(ppem=ppem, image=image, origin_x=origin_x, origin_y=origin_y)

    def _cbdt_image(self, name: str, pixel_size: float) -> ColorGlyphImage | None:
        cblc = self._ttfont["CBLC"]
        cbdt = self._ttfont["CBDT"]
        candidates: dict[int, object] = {}
        for index, strike in enumerate(cblc.strikes):
            if index >= len(cbdt.strikeData):
                break
            bitmap = cbdt.strikeData[index].get(name)
            if bitmap is not None:
                candidates[int(strike.bitmapSizeTable.ppemY)] = bitmap
        ppem = _pick_strike(list(candidates), pixel_size)
        if ppem is None:
            return None
        bitmap = candidates[ppem]
        data = getattr(bitmap, "imageData", None)
        if not data:
            return None
        image = _decode_png(data, self.name, name)
        if image is None:
            return None
        metrics = getattr(bitmap, "metrics", None)
        bearing_x = getattr(metrics, "BearingX", getattr(metrics, "horiBearingX", 0))
        bearing_y = getattr(metrics, "BearingY", getattr(metrics, "horiBearingY", image.height))
        return ColorGlyphImage(ppem=ppem, image=image, origin_x=float(bearing_x), origin_y=-float(bearing_y))


class FontPair:
    """Primary outline font plus a fallback (usually color emoji) font."""

    def __init__(self, primary: Font, fallback: Font | None = None) -> None:
        self.primary = primary
        self.fallback = fallback if fallback is not None else primary

    def resolve(self, char: str) -> ResolvedGlyph:
        primary_id = self.primary.glyph_id(char)
        if primary_id != NOTDEF_GLYPH_ID and (self.primary.has_outline(primary_id) or char.isspace()):
            return ResolvedGlyph(glyph_id=primary_id, font=self.primary, choice=FontChoice.PRIMARY)
        fallback_id = self.fallback.glyph_id(char)
        return ResolvedGlyph(glyph_id=fallback_id, font=self.fallback, choice=FontChoice.FALLBACK)


@dataclass(frozen=True)
class ResolvedGlyph:
    glyph_id: int
    font: Font
    choice: FontChoice


def load_font(data: bytes, name: str = "font", *, path: Path | None = None) -> Font:
    try:
        ttfont = TTFont(io.BytesIO(data), fontNumber=0)
        font = Font(ttfont, name=name)
    except Exception as exc:  # noqa: BLE001
        raise FontLoadError(f"Failed to load font {name}: {exc}", path=path) from exc
    LOGGER.debug("loaded font %s (%d glyphs)", name, font.glyph_count)
    return font


@lru_cache(maxsize=16)
def load_font_file(path: str) -> Font:
    font_path = Path(path)
    try:
        data = font_path.read_bytes()
    except OSError as exc:
        raise FontLoadError(f"Failed to read font file: {font_path}", path=font_path) from exc
    return load_font(data, name=font_path.name, path=font_path)


def _pick_strike(ppems: list[int], pixel_size: float) -> int | None:
    if not ppems:
        return None
    larger = [p for p in ppems if p >= pixel_size]
    if larger:
        return min(larger)
    return max(ppems)


def _decode_png(data: bytes, font_name: str, glyph_name: str) -> Image.Image | None:
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (OSError, SyntaxError, ValueError) as exc:
        LOGGER.warning("skipping unreadable color bitmap %s in %s: %s", glyph_name, font_name, exc)
        return None
    return image
