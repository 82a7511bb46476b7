"""Total conversions between float glyph/image coordinates and integer pixels.

Glyph outlines and emoji bitmaps are positioned with float arithmetic that can
go negative, NaN or far out of range near canvas edges. Every helper here
saturates instead of raising, so out-of-canvas geometry simply gets clipped.
The one exception is `checked_i32`, used for grid index arithmetic where an
out-of-range value means the request itself is unusable.
"""

from __future__ import annotations

import math

import numpy as np

from gridsheet_plot.errors import ArithmeticOverflowError


I32_MIN = -(2**31)
I32_MAX = 2**31 - 1
U32_MAX = 2**32 - 1
U8_MAX = 255


def float_to_int(value: float, lo: int, hi: int) -> int:
    if math.isnan(value):
        return 0
    if value >= hi:
        return hi
    if value <= lo:
        return lo
    # ties away from zero, not to even
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def f32_to_i32(value: float) -> int:
    return float_to_int(value, I32_MIN, I32_MAX)


def f32_to_u8(value: float) -> int:
    return float_to_int(value, 0, U8_MAX)


def i32_to_u32(value: int) -> int:
    if value < 0:
        return 0
    return min(value, U32_MAX)


def u32_to_i32(value: int) -> int:
    if value > I32_MAX:
        return I32_MAX
    return value


def round_half_away(values: np.ndarray) -> np.ndarray:
    """Round to nearest with ties away from zero, unlike `np.rint`."""
    return np.copysign(np.floor(np.abs(values) + 0.5), values)


def coverage_to_alpha(coverage: np.ndarray) -> np.ndarray:
    """Vectorized `f32_to_u8(coverage * 255)` for whole coverage masks."""
    scaled = np.nan_to_num(np.asarray(coverage, dtype=np.float32) * 255.0, nan=0.0, posinf=255.0, neginf=0.0)
    return np.clip(round_half_away(scaled), 0, U8_MAX).astype(np.uint8)


def checked_i32(value: int, what: str) -> int:
    if value < I32_MIN or value > I32_MAX:
        raise ArithmeticOverflowError(f"{what} ({value}) does not fit in a signed 32-bit integer")
    return value
