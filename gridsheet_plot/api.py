from __future__ import annotations

from functools import partial
from pathlib import Path
from typing import Sequence

import numpy as np

from gridsheet_plot.compositor import PlotCompositor
from gridsheet_plot.config import SheetConfig, resolve_fonts
from gridsheet_plot.request import DEFAULT_OUTPUT, PlotRequest


def build_request(
    images: Sequence[str | Path],
    *,
    rows: int = 1,
    row_labels: Sequence[str] = (),
    column_labels: Sequence[str] = (),
    labels: Sequence[str] = (),
    debug: bool = False,
    output: str | Path = DEFAULT_OUTPUT,
    config: SheetConfig | None = None,
) -> PlotRequest:
    config = config or SheetConfig()
    return PlotRequest.build(
        images,
        rows=rows,
        row_labels=row_labels,
        column_labels=column_labels,
        labels=labels,
        alignment=config.alignment,
        padding=config.padding,
        style=config.style,
        debug=debug,
        output=Path(output),
    )


def render_plot(images: Sequence[str | Path], *, config: SheetConfig | None = None, **kwargs) -> np.ndarray:
    config = config or SheetConfig()
    request = build_request(images, config=config, **kwargs)
    return PlotCompositor(partial(resolve_fonts, config)).render(request)


def save_plot(images: Sequence[str | Path], *, config: SheetConfig | None = None, **kwargs) -> Path:
    config = config or SheetConfig()
    request = build_request(images, config=config, **kwargs)
    return PlotCompositor(partial(resolve_fonts, config)).render_to_file(request)
