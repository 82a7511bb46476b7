from __future__ import annotations

import numpy as np


RGB = tuple[int, int, int]

WHITE: RGB = (255, 255, 255)
BLACK: RGB = (0, 0, 0)


def new_canvas(width: int, height: int, color: RGB = WHITE) -> np.ndarray:
    if width <= 0 or height <= 0:
        raise ValueError("canvas width and height must be > 0")
    canvas = np.zeros((height, width, 3), dtype=np.uint8)
    canvas[:, :, 0] = color[0]
    canvas[:, :, 1] = color[1]
    canvas[:, :, 2] = color[2]
    return canvas


def parse_hex_color(value: str) -> RGB:
    text = value.strip().lstrip("#")
    if len(text) == 3:
        text = "".join(ch * 2 for ch in text)
    if len(text) != 6:
        raise ValueError(f"expected a #rrggbb color, got {value!r}")
    try:
        return (int(text[0:2], 16), int(text[2:4], 16), int(text[4:6], 16))
    except ValueError as exc:
        raise ValueError(f"expected a #rrggbb color, got {value!r}") from exc


def blit(
    dst: np.ndarray,
    src: np.ndarray,
    x0: int = 0,
    y0: int = 0,
    *,
    clip: tuple[int, int, int, int] | None = None,
) -> None:
    """Copy `src` opaquely at (x0, y0), clipped to the canvas and optional (x, y, w, h) rect."""
    h, w = src.shape[:2]
    left, top, right, bottom = 0, 0, dst.shape[1], dst.shape[0]
    if clip is not None:
        cx, cy, cw, ch = clip
        left = max(left, cx)
        top = max(top, cy)
        right = min(right, cx + cw)
        bottom = min(bottom, cy + ch)
    xa = max(left, x0)
    ya = max(top, y0)
    xb = min(right, x0 + w)
    yb = min(bottom, y0 + h)
    if xa >= xb or ya >= yb:
        return
    dst[ya:yb, xa:xb] = src[ya - y0 : yb - y0, xa - x0 : xb - x0, :3]


def draw_hline(dst: np.ndarray, x0: int, x1: int, y: int, color: RGB) -> None:
    if y < 0 or y >= dst.shape[0]:
        return
    xa = max(0, min(x0, x1))
    xb = min(dst.shape[1] - 1, max(x0, x1))
    if xa > xb:
        return
    dst[y, xa : xb + 1] = color


def draw_vline(dst: np.ndarray, x: int, y0: int, y1: int, color: RGB) -> None:
    if x < 0 or x >= dst.shape[1]:
        return
    ya = max(0, min(y0, y1))
    yb = min(dst.shape[0] - 1, max(y0, y1))
    if ya > yb:
        return
    dst[ya : yb + 1, x] = color


def draw_rect_outline(dst: np.ndarray, x: int, y: int, w: int, h: int, color: RGB) -> None:
    if w <= 0 or h <= 0:
        return
    x1 = x + w - 1
    y1 = y + h - 1
    draw_hline(dst, x, x1, y, color)
    draw_hline(dst, x, x1, y1, color)
    draw_vline(dst, x, y, y1, color)
    draw_vline(dst, x1, y, y1, color)
