from __future__ import annotations

import argparse
from dataclasses import replace
from functools import partial
import logging
from pathlib import Path
import sys
from typing import Sequence

from gridsheet_plot.compositor import PlotCompositor
from gridsheet_plot.config import SheetConfig, load_config, resolve_fonts
from gridsheet_plot.errors import ConfigurationError, GridsheetError
from gridsheet_plot.raster.draw_text import Alignment
from gridsheet_plot.request import DEFAULT_OUTPUT, LabelAlignment, PaddingSpec, PlotRequest


LOGGER = logging.getLogger(__name__)
ALIGN_CHOICES = [a.value for a in Alignment]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gridsheet",
        description="Compose images into a labeled grid.",
    )
    parser.add_argument("images", nargs="+", type=Path, help="Image files, placed row by row.")
    parser.add_argument("--output", type=Path, default=DEFAULT_OUTPUT, help="Output file for the generated plot.")
    parser.add_argument("--rows", type=int, default=1, help="Number of rows to display the images in.")
    parser.add_argument("--row-labels", nargs="+", action="extend", default=[], help="One label per row.")
    parser.add_argument("--column-labels", nargs="+", action="extend", default=[], help="One label per column.")
    parser.add_argument("--labels", nargs="+", action="extend", default=[], help="One label per image.")
    parser.add_argument("--align", choices=ALIGN_CHOICES, default=None, help="Horizontal label alignment.")
    parser.add_argument("--valign", choices=ALIGN_CHOICES, default=None, help="Vertical label alignment.")
    parser.add_argument("--top-padding", type=int, default=None, help="Height of each label band in pixels.")
    parser.add_argument("--left-padding", type=int, default=None, help="Width of the row label column in pixels.")
    parser.add_argument("--label-size", type=float, default=None, help="Label font size in pixels.")
    parser.add_argument("--font", type=Path, default=None, help="Font file used for labels.")
    parser.add_argument("--emoji-font", type=Path, default=None, help="Fallback font for characters the label font lacks.")
    parser.add_argument("--config", type=Path, default=None, help="TOML file with [fonts], [padding] and [labels] tables.")
    parser.add_argument("--debug", action="store_true", help="Draw layout guides over the plot.")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (DEBUG, INFO, WARNING, ...).")
    return parser


def config_from_args(args: argparse.Namespace) -> SheetConfig:
    config = load_config(args.config) if args.config is not None else SheetConfig()
    padding = config.padding
    if args.top_padding is not None or args.left_padding is not None:
        padding = PaddingSpec(
            top=args.top_padding if args.top_padding is not None else padding.top,
            left=args.left_padding if args.left_padding is not None else padding.left,
        )
    alignment = LabelAlignment(
        horizontal=Alignment.parse(args.align) if args.align else config.alignment.horizontal,
        vertical=Alignment.parse(args.valign) if args.valign else config.alignment.vertical,
    )
    style = config.style
    if args.label_size is not None:
        style = replace(style, size_px=args.label_size)
    return SheetConfig(
        font_path=args.font if args.font is not None else config.font_path,
        fallback_font_path=args.emoji_font if args.emoji_font is not None else config.fallback_font_path,
        padding=padding,
        style=style,
        alignment=alignment,
    )


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    level = getattr(logging, str(args.log_level).upper(), None)
    if not isinstance(level, int):
        parser.error(f"unknown log level: {args.log_level}")
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    try:
        if args.rows < 1:
            raise ConfigurationError(f"Number of rows must be at least 1 (got {args.rows})")
        config = config_from_args(args)
        request = PlotRequest.build(
            args.images,
            rows=args.rows,
            row_labels=args.row_labels,
            column_labels=args.column_labels,
            labels=args.labels,
            alignment=config.alignment,
            padding=config.padding,
            style=config.style,
            debug=args.debug,
            output=args.output,
        )
        output = PlotCompositor(partial(resolve_fonts, config)).render_to_file(request)
    except GridsheetError as exc:
        LOGGER.debug("plot failed", exc_info=True)
        print(f"error: {exc}", file=sys.stderr)
        return 1

    print(f"Generated plot saved as {output}")
    return 0
