# blocksmith/forge/evaluators/pattern.py
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Tuple

from blocksmith.forge.color.colormath import RGB, clamp_rgb, hex_to_rgb, shift_rgb
from blocksmith.forge.geometry.coords import wrap
from blocksmith.forge.layers.model import PatternContent
from blocksmith.forge.noise.sources import seeded_random

SPOT_CELL_PX = 5


@dataclass(frozen=True)
class PatternSample:
    inside: bool
    shade: float = 0.0
    border: float = 0.0


def sample_stripes(lx: int, ly: int, p: PatternContent) -> PatternSample:
    # one phase offset per row
    jitter = seeded_random(ly) * p.jitter * 5 if p.jitter > 0 else 0.0
    val = math.sin((lx + jitter) / p.scale)
    if val <= 0:
        return PatternSample(False)
    border = 1.0 if val < p.border_width else 0.0
    return PatternSample(True, (val - 0.5) * p.shading, border)


def sample_spots(lx: int, ly: int, p: PatternContent) -> PatternSample:
    gx = math.floor(lx / SPOT_CELL_PX)
    gy = math.floor(ly / SPOT_CELL_PX)
    if p.jitter > 0:
        # distinct keys per axis so x/y jitter are not correlated
        jx = (seeded_random(gy * 13 + gx) - 0.5) * p.jitter * 4
        jy = (seeded_random(gx * 7 + gy) - 0.5) * p.jitter * 4
    else:
        jx = jy = 0.0

    half_cell = SPOT_CELL_PX / 2
    dx = (lx % SPOT_CELL_PX) - half_cell + jx
    dy = (ly % SPOT_CELL_PX) - half_cell + jy
    dist = math.sqrt(dx * dx + dy * dy)
    radius = p.scale / 2

    if dist >= radius:
        return PatternSample(False)
    border = 1.0 if dist > radius - p.border_width else 0.0
    return PatternSample(True, (1 - dist / radius - 0.5) * p.shading * 2, border)


def sample_brick(lx: int, ly: int, p: PatternContent) -> PatternSample:
    """
    Only the 1px mortar lines are drawn. Brick faces report their bevel
    shade but stay uncovered, so the layers below show through.
    """
    scale = p.scale
    row = math.floor(ly / scale)
    jitter = seeded_random(row) * p.jitter * 10 if p.jitter > 0 else 0.0
    shift = (row % 2) * (scale / 2) + jitter
    plx = (lx + shift) % scale
    ply = ly % scale

    if plx < 1 or ply < 1:
        return PatternSample(True)

    edge = min(plx - 1, ply - 1, scale - plx, scale - ply)
    return PatternSample(False, (edge / (scale / 2) - 0.5) * p.shading)


_SAMPLERS = {
    "stripes": sample_stripes,
    "spots": sample_spots,
    "brick": sample_brick,
}


def sample_pattern(lx: int, ly: int, p: PatternContent) -> PatternSample:
    try:
        sampler = _SAMPLERS[p.kind]
    except KeyError:
        raise ValueError(f"Unknown pattern kind: {p.kind}") from None
    return sampler(lx, ly, p)


def evaluate_pattern(
    lx: int,
    ly: int,
    *,
    width: int,
    height: int,
    pattern: PatternContent,
) -> Tuple[Optional[RGB], float]:
    """
    Patterns always repeat inside their own width x height cell, whether or
    not the layer itself tiles across the canvas.
    """
    s = sample_pattern(wrap(lx, width), wrap(ly, height), pattern)
    if not s.inside:
        return None, 0.0

    delta = s.shade - s.border * pattern.border_intensity
    return clamp_rgb(shift_rgb(hex_to_rgb(pattern.color), delta)), 1.0
