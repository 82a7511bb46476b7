from .canvas import blit, draw_hline, draw_rect_outline, draw_vline, new_canvas, parse_hex_color
from .draw_text import Alignment, TextMetrics, draw_text, layout_text, measure_text
from .fonts import Font, FontChoice, FontPair, ResolvedGlyph, load_font, load_font_file
from .glyphs import ColorGlyphBitmap, Glyph, GlyphCoverage, rasterize_color_bitmap, rasterize_outline

__all__ = [
    "Alignment",
    "ColorGlyphBitmap",
    "Font",
    "FontChoice",
    "FontPair",
    "Glyph",
    "GlyphCoverage",
    "ResolvedGlyph",
    "TextMetrics",
    "blit",
    "draw_hline",
    "draw_rect_outline",
    "draw_text",
    "draw_vline",
    "layout_text",
    "load_font",
    "load_font_file",
    "measure_text",
    "new_canvas",
    "parse_hex_color",
    "rasterize_color_bitmap",
    "rasterize_outline",
]
