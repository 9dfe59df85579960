# blocksmith/forge/evaluators/bitmap.py
from __future__ import annotations

import math
from typing import Optional, Tuple

from blocksmith.forge.color.colormath import RGB
from blocksmith.forge.layers.model import BitmapContent


def evaluate_bitmap(lx: float, ly: float, *, bitmap: BitmapContent) -> Tuple[Optional[RGB], float]:
    """Nearest-neighbour read; coverage is the pixel's own alpha."""
    if not (0 <= lx < bitmap.width and 0 <= ly < bitmap.height):
        return None, 0.0

    r, g, b, a = bitmap.pixels[math.floor(ly), math.floor(lx)]
    if a == 0:
        return None, 0.0
    return (float(r), float(g), float(b)), int(a) / 255.0
