# blocksmith/forge/geometry/coords.py
from __future__ import annotations

from typing import TYPE_CHECKING, Tuple

if TYPE_CHECKING:
    from blocksmith.forge.layers.model import Layer


def wrap(v: int, n: int) -> int:
    """Floored modulo: result is in [0, n) even for negative v (Python % floors)."""
    return v % n


def to_local(gx: int, gy: int, layer: "Layer") -> Tuple[int, int]:
    """
    Global pixel -> layer-local pixel.

    Offset is removed first; tiling layers then wrap both axes into their
    own width/height. Non-tiling results may be out of bounds, see covers().
    """
    lx = gx - layer.x
    ly = gy - layer.y
    if layer.tiling:
        lx = wrap(lx, layer.width)
        ly = wrap(ly, layer.height)
    return lx, ly


def covers(lx: float, ly: float, layer: "Layer") -> bool:
    return 0 <= lx < layer.width and 0 <= ly < layer.height
