# blocksmith/forge/evaluators/shape.py
from __future__ import annotations

import math
from typing import Optional, Tuple

from blocksmith.forge.color.colormath import RGB, clamp_rgb, hex_to_rgb, shift_rgb
from blocksmith.forge.layers.model import ShapeContent


def shape_membership(lx: float, ly: float, width: int, height: int, shape: ShapeContent) -> Tuple[bool, float]:
    """
    (inside, shade) for a local pixel.

    Shapes are centered on the layer's own canvas, (width/2, height/2).
    Positive shading darkens toward the rim (circle, diamond) or toward
    the layer edges (rectangle).
    """
    half = shape.size / 2

    if shape.kind == "rectangle":
        edge = min(lx, ly, width - 1 - lx, height - 1 - ly)
        return True, (1 - edge / half) * shape.shading * -1

    cx = width / 2
    cy = height / 2
    if shape.kind == "circle":
        d = math.sqrt((lx - cx) ** 2 + (ly - cy) ** 2)
    elif shape.kind == "diamond":
        d = abs(lx - cx) + abs(ly - cy)
    else:
        raise ValueError(f"Unknown shape kind: {shape.kind}")

    if d < half:
        return True, (d / half) * shape.shading * -1
    return False, 0.0


def evaluate_shape(
    lx: int,
    ly: int,
    *,
    width: int,
    height: int,
    shape: ShapeContent,
) -> Tuple[Optional[RGB], float]:
    if not (0 <= lx < width and 0 <= ly < height):
        return None, 0.0

    inside, shade = shape_membership(lx, ly, width, height, shape)
    if not inside:
        return None, 0.0
    return clamp_rgb(shift_rgb(hex_to_rgb(shape.color), shade)), 1.0
