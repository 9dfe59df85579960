# blocksmith/forge/color/colormath.py
from __future__ import annotations

from typing import Tuple

from blocksmith.forge.errors import FormatError

RGB = Tuple[float, float, float]

_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


def hex_to_rgb(hex_color: str) -> tuple[int, int, int]:
    """
    Parse a 7-character "#RRGGBB" string into three 0..255 ints.

    Anything else (missing '#', shorthand "#fff", alpha suffix, stray
    characters) raises FormatError instead of producing garbage channels.
    """
    if not isinstance(hex_color, str) or len(hex_color) != 7 or hex_color[0] != "#":
        raise FormatError(f"color must be '#RRGGBB', got {hex_color!r}")
    digits = hex_color[1:]
    if not all(c in _HEX_DIGITS for c in digits):
        raise FormatError(f"color must be '#RRGGBB', got {hex_color!r}")
    return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)


def lerp(a: float, b: float, t: float) -> float:
    # t is not clamped; values outside 0..1 extrapolate
    return a * (1 - t) + b * t


def lerp_rgb(a: RGB, b: RGB, t: float) -> RGB:
    return lerp(a[0], b[0], t), lerp(a[1], b[1], t), lerp(a[2], b[2], t)


def clamp_byte(v: float) -> float:
    return min(255.0, max(0.0, v))


def clamp_rgb(rgb: RGB) -> RGB:
    return clamp_byte(rgb[0]), clamp_byte(rgb[1]), clamp_byte(rgb[2])


def shift_rgb(rgb: RGB, delta: float) -> RGB:
    """Add the same offset to all three channels (no clamping)."""
    return rgb[0] + delta, rgb[1] + delta, rgb[2] + delta
