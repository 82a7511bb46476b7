from gridsheet_plot.api import build_request, render_plot, save_plot
from gridsheet_plot.compositor import PlotCompositor, draw_layout_guides
from gridsheet_plot.config import SheetConfig, load_config, resolve_fonts
from gridsheet_plot.errors import (
    ArithmeticOverflowError,
    ConfigurationError,
    FontLoadError,
    GridsheetError,
    ImageDecodeError,
    ImageEncodeError,
    ResourceError,
)
from gridsheet_plot.layout import GridGeometry, plan_grid
from gridsheet_plot.request import LabelAlignment, LabelStyle, PaddingSpec, PlotRequest

__all__ = [
    "ArithmeticOverflowError",
    "ConfigurationError",
    "FontLoadError",
    "GridGeometry",
    "GridsheetError",
    "ImageDecodeError",
    "ImageEncodeError",
    "LabelAlignment",
    "LabelStyle",
    "PaddingSpec",
    "PlotCompositor",
    "PlotRequest",
    "ResourceError",
    "SheetConfig",
    "build_request",
    "draw_layout_guides",
    "load_config",
    "plan_grid",
    "render_plot",
    "resolve_fonts",
    "save_plot",
]
