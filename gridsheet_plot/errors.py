from __future__ import annotations

from pathlib import Path


class GridsheetError(Exception):
    """Base error for every failure reported by the grid compositor."""


class ConfigurationError(GridsheetError, ValueError):
    """Request or settings are inconsistent; raised before any rendering."""


class ResourceError(GridsheetError):
    """An image or font could not be read, or the output could not be written."""

    def __init__(self, message: str, *, path: str | Path | None = None) -> None:
        super().__init__(message)
        self.path = Path(path) if path is not None else None


class ImageDecodeError(ResourceError):
    pass


class ImageEncodeError(ResourceError):
    pass


class FontLoadError(ResourceError):
    pass


class ArithmeticOverflowError(GridsheetError, OverflowError):
    """Index or position arithmetic left the signed 32-bit range."""
