from __future__ import annotations

from dataclasses import dataclass, field
import logging
import os
from pathlib import Path
import tomllib
from typing import Any

from gridsheet_plot.errors import ConfigurationError, FontLoadError
from gridsheet_plot.raster.draw_text import Alignment
from gridsheet_plot.raster.fonts import FontPair, load_font_file
from gridsheet_plot.request import LabelAlignment, LabelStyle, PaddingSpec


LOGGER = logging.getLogger(__name__)

PRIMARY_FONT_ENV = "GRIDSHEET_FONT"
FALLBACK_FONT_ENV = "GRIDSHEET_EMOJI_FONT"
PRIMARY_FONT_PATTERNS = (
    "dejavusans",
    "dejavu sans",
    "notosans-regular",
    "liberationsans-regular",
    "arial",
    "helvetica",
)
FALLBACK_FONT_PATTERNS = (
    "notocoloremoji",
    "noto color emoji",
    "apple color emoji",
    "seguiemj",
    "twemoji",
)


@dataclass(frozen=True)
class SheetConfig:
    font_path: Path | None = None
    fallback_font_path: Path | None = None
    padding: PaddingSpec = field(default_factory=PaddingSpec)
    style: LabelStyle = field(default_factory=LabelStyle)
    alignment: LabelAlignment = field(default_factory=LabelAlignment)


def load_config(path: str | Path) -> SheetConfig:
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigurationError(f"config file not found: {config_path}")
    try:
        with config_path.open("rb") as f:
            raw = tomllib.load(f)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(f"invalid config file {config_path}: {exc}") from exc
    return config_from_mapping(raw, base_dir=config_path.parent)


def config_from_mapping(raw: dict[str, Any], *, base_dir: Path | None = None) -> SheetConfig:
    fonts = _table(raw, "fonts")
    padding = _table(raw, "padding")
    labels = _table(raw, "labels")
    defaults = SheetConfig()
    try:
        style = LabelStyle(
            size_px=float(labels.get("size_px", defaults.style.size_px)),
            color_hex=str(labels.get("color", defaults.style.color_hex)),
            background_hex=str(labels.get("background", defaults.style.background_hex)),
            debug_color_hex=str(labels.get("debug_color", defaults.style.debug_color_hex)),
            margin_px=int(labels.get("margin_px", defaults.style.margin_px)),
        )
        alignment = LabelAlignment(
            horizontal=Alignment.parse(labels.get("align", defaults.alignment.horizontal)),
            vertical=Alignment.parse(labels.get("valign", defaults.alignment.vertical)),
        )
        pad = PaddingSpec(
            top=int(padding.get("top", defaults.padding.top)),
            left=int(padding.get("left", defaults.padding.left)),
        )
    except ConfigurationError:
        raise
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"invalid config value: {exc}") from exc
    return SheetConfig(
        font_path=_optional_path(fonts.get("primary"), base_dir),
        fallback_font_path=_optional_path(fonts.get("fallback"), base_dir),
        padding=pad,
        style=style,
        alignment=alignment,
    )


def resolve_fonts(config: SheetConfig) -> FontPair:
    primary_path = resolve_font_path(config.font_path, PRIMARY_FONT_ENV, PRIMARY_FONT_PATTERNS)
    if primary_path is None:
        raise FontLoadError(
            f"no label font found; pass --font or set {PRIMARY_FONT_ENV}",
        )
    primary = load_font_file(str(primary_path))
    fallback_path = resolve_font_path(config.fallback_font_path, FALLBACK_FONT_ENV, FALLBACK_FONT_PATTERNS)
    fallback = load_font_file(str(fallback_path)) if fallback_path is not None else None
    if fallback is None:
        LOGGER.info("no emoji font found, characters missing from %s render as .notdef", primary.name)
    LOGGER.debug("fonts: primary=%s fallback=%s", primary_path, fallback_path)
    return FontPair(primary, fallback)


def resolve_font_path(explicit: Path | None, env_var: str, patterns: tuple[str, ...]) -> Path | None:
    if explicit is not None:
        return explicit
    from_env = os.environ.get(env_var, "").strip()
    if from_env:
        return Path(from_env)
    return _search_system_fonts(patterns)


def _search_system_fonts(patterns: tuple[str, ...]) -> Path | None:
    font_dirs = [
        Path.home() / "Library" / "Fonts",
        Path.home() / ".local" / "share" / "fonts",
        Path.home() / ".fonts",
        Path("/Library/Fonts"),
        Path("/System/Library/Fonts"),
        Path("/System/Library/Fonts/Supplemental"),
        Path("/usr/share/fonts"),
        Path("/usr/local/share/fonts"),
        Path("C:/Windows/Fonts"),
    ]

    candidates: list[Path] = []
    for base in font_dirs:
        if not base.exists():
            continue
        for ext in ("*.ttf", "*.otf", "*.ttc"):
            candidates.extend(base.rglob(ext))

    for pattern in patterns:
        p = pattern.replace(" ", "")
        matches = [path for path in candidates if p in path.stem.lower().replace(" ", "")]
        if matches:
            # shortest stem wins, e.g. DejaVuSans over DejaVuSans-Bold
            return min(matches, key=lambda path: (len(path.stem), str(path)))
    return None


def _table(raw: dict[str, Any], name: str) -> dict[str, Any]:
    value = raw.get(name, {})
    if not isinstance(value, dict):
        raise ConfigurationError(f"config `{name}` must be a table")
    return value


def _optional_path(value: Any, base_dir: Path | None) -> Path | None:
    if value is None:
        return None
    if not isinstance(value, str) or not value.strip():
        raise ConfigurationError("font paths must be non-empty strings")
    path = Path(value).expanduser()
    if not path.is_absolute() and base_dir is not None:
        path = base_dir / path
    return path
