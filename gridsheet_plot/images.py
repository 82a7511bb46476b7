from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
from PIL import Image

from gridsheet_plot.errors import ImageDecodeError, ImageEncodeError


LOGGER = logging.getLogger(__name__)


def load_image(path: str | Path) -> np.ndarray:
    """Decode any Pillow-readable image to an (h, w, 3) uint8 RGB array."""
    image_path = Path(path)
    try:
        with Image.open(image_path) as image:
            rgb = image.convert("RGB")
    except (OSError, ValueError, Image.DecompressionBombError) as exc:
        raise ImageDecodeError(f"Failed to open image: {image_path}", path=image_path) from exc
    pixels = np.asarray(rgb, dtype=np.uint8).copy()
    LOGGER.debug("loaded %s (%dx%d)", image_path, pixels.shape[1], pixels.shape[0])
    return pixels


def save_image(canvas: np.ndarray, path: str | Path) -> Path:
    output = Path(path)
    try:
        Image.fromarray(np.ascontiguousarray(canvas, dtype=np.uint8)).save(output)
    except (OSError, ValueError, KeyError) as exc:
        raise ImageEncodeError(f"Failed to save output image: {output}", path=output) from exc
    return output
