# blocksmith/forge/pipeline/compositor.py
from __future__ import annotations

import logging
from typing import Iterable, Optional, Tuple

import numpy as np

from blocksmith.forge.color.colormath import RGB
from blocksmith.forge.evaluators.bitmap import evaluate_bitmap
from blocksmith.forge.evaluators.pattern import evaluate_pattern
from blocksmith.forge.evaluators.procedural import evaluate_procedural
from blocksmith.forge.evaluators.shape import evaluate_shape
from blocksmith.forge.geometry.coords import to_local
from blocksmith.forge.layers.model import (
    BitmapContent,
    Layer,
    PatternContent,
    ProceduralContent,
    ShapeContent,
)
from blocksmith.forge.noise.sources import EntropySource
from blocksmith.forge.pipeline.buffer import TextureBuffer
from blocksmith.forge.state.procedural_params import ProceduralParams, require_resolution

logger = logging.getLogger(__name__)

# Accumulator starts as an opaque near-black; alpha never changes afterwards.
BACKGROUND: Tuple[float, float, float, float] = (15.0, 15.0, 20.0, 255.0)


def evaluate_layer(
    layer: Layer,
    gx: int,
    gy: int,
    *,
    resolution: int,
    params: ProceduralParams,
    noise: EntropySource,
) -> Tuple[Optional[RGB], float]:
    content = layer.content

    # the base material has no offset and reads global coordinates directly
    if isinstance(content, ProceduralContent):
        return evaluate_procedural(gx, gy, resolution=resolution, params=params, noise=noise)

    lx, ly = to_local(gx, gy, layer)
    if isinstance(content, ShapeContent):
        return evaluate_shape(lx, ly, width=layer.width, height=layer.height, shape=content)
    if isinstance(content, PatternContent):
        return evaluate_pattern(lx, ly, width=layer.width, height=layer.height, pattern=content)
    if isinstance(content, BitmapContent):
        return evaluate_bitmap(lx, ly, bitmap=content)
    raise TypeError(f"Unsupported layer content: {type(content).__name__}")


def blend_into(frame: np.ndarray, gx: int, gy: int, color: RGB, alpha: float) -> None:
    dst = frame[gy, gx]
    inv = 1.0 - alpha
    dst[0] = color[0] * alpha + dst[0] * inv
    dst[1] = color[1] * alpha + dst[1] * inv
    dst[2] = color[2] * alpha + dst[2] * inv


def composite(
    layers: Iterable[Layer],
    *,
    resolution: int,
    params: ProceduralParams,
    noise: EntropySource | None = None,
) -> np.ndarray:
    """
    Full-frame pass: every visible layer, bottom to top, every pixel.

    Returns a new (res, res, 4) float64 frame. Nothing is cached between
    calls; the only non-determinism is the material grain drawn from `noise`.
    """
    resolution = require_resolution(resolution)
    noise = noise or EntropySource()

    frame = np.empty((resolution, resolution, 4), dtype=np.float64)
    frame[:, :] = BACKGROUND

    for layer in layers:
        if not layer.visible:
            continue
        if layer.opacity <= 0:
            continue

        for gy in range(resolution):
            for gx in range(resolution):
                color, coverage = evaluate_layer(
                    layer, gx, gy, resolution=resolution, params=params, noise=noise
                )
                alpha = coverage * layer.opacity
                if color is None or alpha <= 0:
                    continue
                blend_into(frame, gx, gy, color, alpha)

    return frame


class Compositor:
    """Single writer for a TextureBuffer: renders off to the side, then publishes."""

    def __init__(self, buffer: TextureBuffer, *, noise: EntropySource | None = None) -> None:
        self.buffer = buffer
        self.noise = noise or EntropySource()
        self.frames_rendered = 0

    def render(self, layers: Iterable[Layer], params: ProceduralParams) -> np.ndarray:
        layers = tuple(layers)
        frame = composite(
            layers,
            resolution=self.buffer.resolution,
            params=params,
            noise=self.noise,
        )
        self.buffer.publish(frame)
        self.frames_rendered += 1
        logger.debug(
            "rendered frame %d at %dx%d with %d layers",
            self.frames_rendered,
            self.buffer.resolution,
            self.buffer.resolution,
            len(layers),
        )
        return frame
