# blocksmith/forge/pipeline/buffer.py
from __future__ import annotations

import numpy as np
from PIL import Image

from blocksmith.forge.state.procedural_params import require_resolution


class TextureBuffer:
    """
    Owner of the live RGBA frame, shape (res, res, 4), float64.

    Writers never touch the published array: a render pass fills its own
    frame and hands it over through publish(), which swaps the reference.
    Readers therefore see either the previous frame or the new one.
    """

    def __init__(self, resolution: int = 16) -> None:
        self._resolution = require_resolution(resolution)
        self._pixels = self._blank(self._resolution)

    @staticmethod
    def _blank(resolution: int) -> np.ndarray:
        # fully transparent black
        return np.zeros((resolution, resolution, 4), dtype=np.float64)

    @property
    def resolution(self) -> int:
        return self._resolution

    @property
    def pixels(self) -> np.ndarray:
        """Read-only view of the current frame (unclamped floats)."""
        view = self._pixels.view()
        view.flags.writeable = False
        return view

    def resize(self, resolution: int) -> None:
        """Discard content and start over at the new size. Never resamples."""
        self._resolution = require_resolution(resolution)
        self._pixels = self._blank(self._resolution)

    def publish(self, frame: np.ndarray) -> None:
        expected = (self._resolution, self._resolution, 4)
        if frame.shape != expected:
            raise ValueError(f"frame must be {expected}, got {frame.shape}")
        self._pixels = frame

    def read_back(self) -> np.ndarray:
        """uint8 copy, every channel finite, rounded and clamped to 0..255."""
        safe = np.nan_to_num(self._pixels, nan=0.0, posinf=255.0, neginf=0.0)
        return np.clip(np.rint(safe), 0, 255).astype(np.uint8)

    def to_image(self) -> Image.Image:
        return Image.fromarray(self.read_back())
