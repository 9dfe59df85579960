# blocksmith/forge/evaluators/procedural.py
from __future__ import annotations

import math
from typing import Optional, Tuple

from blocksmith.forge.color.colormath import RGB, clamp_rgb, hex_to_rgb, lerp_rgb, shift_rgb
from blocksmith.forge.noise.sources import EntropySource
from blocksmith.forge.state.procedural_params import ProceduralParams

# Fixed dark rim applied on top of the configurable border.
VIGNETTE_PX = 2
VIGNETTE_STEP = 10.0


def gradient_t(x: int, y: int, resolution: int, gradient: str) -> float:
    if gradient == "linear-v":
        return y / (resolution - 1)
    if gradient == "linear-h":
        return x / (resolution - 1)
    if gradient == "radial":
        dx = x - resolution / 2
        dy = y - resolution / 2
        return min(1.0, math.sqrt(dx * dx + dy * dy) / (resolution / 1.5))
    raise ValueError(f"Unknown gradient kind: {gradient}")


def border_distance(x: int, y: int, resolution: int, params: ProceduralParams) -> Optional[int]:
    """Distance to the nearest *enabled* side, or None when every side is off."""
    sides = params.border_sides
    if not sides.any_enabled():
        return None
    dists = []
    if sides.top:
        dists.append(y)
    if sides.bottom:
        dists.append(resolution - 1 - y)
    if sides.left:
        dists.append(x)
    if sides.right:
        dists.append(resolution - 1 - x)
    return min(dists)


def apply_border(rgb: RGB, dist: Optional[int], params: ProceduralParams) -> RGB:
    if dist is None or dist >= params.border_size:
        return rgb

    f = 1 - dist / params.border_size
    if params.border_color is not None:
        return lerp_rgb(rgb, hex_to_rgb(params.border_color), f * params.border_intensity / 100)

    mod = f * params.border_intensity
    return shift_rgb(rgb, -mod if params.border_type == "darken" else mod)


def apply_vignette(rgb: RGB, x: int, y: int, resolution: int) -> RGB:
    edge = min(x, y, resolution - 1 - x, resolution - 1 - y)
    if edge < VIGNETTE_PX:
        return shift_rgb(rgb, -(VIGNETTE_PX - edge) * VIGNETTE_STEP)
    return rgb


def evaluate_procedural(
    x: int,
    y: int,
    *,
    resolution: int,
    params: ProceduralParams,
    noise: EntropySource,
) -> Tuple[RGB, float]:
    """
    Base material at global pixel (x, y). Always full coverage.

    Order: gradient, grain, configurable border, fixed vignette, clamp.
    """
    start = hex_to_rgb(params.base_color)
    rgb: RGB = (float(start[0]), float(start[1]), float(start[2]))

    if params.gradient != "none":
        end = hex_to_rgb(params.base_color_end)
        rgb = lerp_rgb(start, end, gradient_t(x, y, resolution, params.gradient))

    rgb = shift_rgb(rgb, noise.offset(params.noise_amount))
    rgb = apply_border(rgb, border_distance(x, y, resolution, params), params)
    rgb = apply_vignette(rgb, x, y, resolution)
    return clamp_rgb(rgb), 1.0
