# blocksmith/forge/noise/sources.py
from __future__ import annotations

import math

import numpy as np


def seeded_random(seed: float) -> float:
    """
    Pure hash from a scalar to [0, 1): frac(sin(seed) * 10000).

    Same seed always gives the same value, so pattern jitter is stable
    across re-renders of an unchanged layer.
    """
    x = math.sin(seed) * 10000.0
    return x - math.floor(x)


class EntropySource:
    """
    True per-pixel randomness for material grain.

    Kept apart from seeded_random on purpose: grain is expected to change
    every frame, jitter is not. Pass `seed` only when a reproducible frame
    is wanted (tests, CLI --seed).
    """

    def __init__(self, seed: int | None = None, *, rng: np.random.Generator | None = None) -> None:
        self._rng = rng if rng is not None else np.random.default_rng(seed)

    def uniform(self) -> float:
        return float(self._rng.random())

    def offset(self, amount: float) -> float:
        """One draw in [-amount, amount), shared by all channels of a pixel."""
        if amount == 0:
            return 0.0
        return (self.uniform() - 0.5) * amount * 2.0
