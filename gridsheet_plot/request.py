from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from gridsheet_plot.errors import ConfigurationError
from gridsheet_plot.raster.canvas import RGB, parse_hex_color
from gridsheet_plot.raster.draw_text import Alignment


DEFAULT_OUTPUT = Path("output.jpg")
DEFAULT_TOP_PADDING = 40
DEFAULT_LEFT_PADDING = 150
DEFAULT_LABEL_SIZE_PX = 24.0
DEFAULT_LABEL_MARGIN_PX = 20


@dataclass(frozen=True)
class PaddingSpec:
    top: int = DEFAULT_TOP_PADDING
    left: int = DEFAULT_LEFT_PADDING

    def __post_init__(self) -> None:
        if self.top < 0 or self.left < 0:
            raise ConfigurationError("padding values must be >= 0")


@dataclass(frozen=True)
class LabelAlignment:
    """Label placement inside its reserved region; unset means centered."""

    horizontal: Alignment = Alignment.CENTER
    vertical: Alignment = Alignment.CENTER


@dataclass(frozen=True)
class LabelStyle:
    size_px: float = DEFAULT_LABEL_SIZE_PX
    color_hex: str = "#000000"
    background_hex: str = "#ffffff"
    debug_color_hex: str = "#ff0000"
    margin_px: int = DEFAULT_LABEL_MARGIN_PX

    def __post_init__(self) -> None:
        if self.size_px <= 0:
            raise ConfigurationError("label size must be > 0")
        if self.margin_px < 0:
            raise ConfigurationError("label margin must be >= 0")
        for name in ("color_hex", "background_hex", "debug_color_hex"):
            try:
                parse_hex_color(getattr(self, name))
            except ValueError as exc:
                raise ConfigurationError(f"label style `{name}`: {exc}") from exc

    @property
    def color(self) -> RGB:
        return parse_hex_color(self.color_hex)

    @property
    def background(self) -> RGB:
        return parse_hex_color(self.background_hex)

    @property
    def debug_color(self) -> RGB:
        return parse_hex_color(self.debug_color_hex)


@dataclass(frozen=True)
class PlotRequest:
    images: tuple[Path, ...]
    rows: int = 1
    row_labels: tuple[str, ...] = ()
    column_labels: tuple[str, ...] = ()
    labels: tuple[str, ...] = ()
    alignment: LabelAlignment = field(default_factory=LabelAlignment)
    padding: PaddingSpec = field(default_factory=PaddingSpec)
    style: LabelStyle = field(default_factory=LabelStyle)
    debug: bool = False
    output: Path = DEFAULT_OUTPUT

    @classmethod
    def build(
        cls,
        images: Sequence[str | Path],
        *,
        rows: int = 1,
        row_labels: Sequence[str] = (),
        column_labels: Sequence[str] = (),
        labels: Sequence[str] = (),
        **kwargs,
    ) -> PlotRequest:
        return cls(
            images=tuple(Path(p) for p in images),
            rows=rows,
            row_labels=tuple(row_labels),
            column_labels=tuple(column_labels),
            labels=tuple(labels),
            **kwargs,
        )

    @property
    def cols(self) -> int:
        if self.rows < 1:
            raise ConfigurationError(f"Number of rows must be at least 1 (got {self.rows})")
        return -(-len(self.images) // self.rows)

    @property
    def has_row_labels(self) -> bool:
        return any(label for label in self.row_labels)

    @property
    def has_any_labels(self) -> bool:
        return bool(self.row_labels or self.column_labels or self.labels)

    def validate(self) -> None:
        """Check label counts against the grid shape before anything is rendered."""
        if not self.images:
            raise ConfigurationError("At least one image is required (got 0)")
        cols = self.cols
        if self.row_labels and len(self.row_labels) != self.rows:
            raise ConfigurationError(
                f"Number of row labels ({len(self.row_labels)}) should match the number of rows ({self.rows})"
            )
        if self.column_labels and len(self.column_labels) != cols:
            raise ConfigurationError(
                f"Number of column labels ({len(self.column_labels)}) should match the number of columns ({cols})"
            )
        if self.labels and len(self.labels) != len(self.images):
            raise ConfigurationError(
                f"Number of image labels ({len(self.labels)}) should match the number of images ({len(self.images)})"
            )
