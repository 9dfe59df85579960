# blocksmith/forge/pipeline/session.py
from __future__ import annotations

import dataclasses
import logging
from pathlib import Path
from typing import Any, Optional

import numpy as np

from blocksmith.forge.api.client import TextureGeneratorClient
from blocksmith.forge.io.image_codec import decode_image, encode_png, fit_bitmap, write_png
from blocksmith.forge.layers.model import (
    Layer,
    PatternKind,
    ShapeKind,
    make_bitmap_layer,
    make_pattern_layer,
    make_shape_layer,
    with_updates,
)
from blocksmith.forge.layers.stack import LayerStack, MoveDirection
from blocksmith.forge.noise.sources import EntropySource
from blocksmith.forge.pipeline.buffer import TextureBuffer
from blocksmith.forge.pipeline.compositor import Compositor
from blocksmith.forge.pipeline.requests import PendingRequest, RequestRunner
from blocksmith.forge.prompt.builder import normalize_user_prompt
from blocksmith.forge.state.procedural_params import ProceduralParams, require_resolution

logger = logging.getLogger(__name__)

AI_LAYER_NAME = "AI Detail"


def export_filename(resolution: int) -> str:
    return f"blocksmith_{resolution}.png"


class ForgeSession:
    """
    The authoring surface.

    Owns the layer stack, the global material params, the texture buffer
    and its compositor. Every mutation re-renders the whole frame, so
    `buffer` always reflects the current state.
    """

    def __init__(
        self,
        *,
        resolution: int = 16,
        params: ProceduralParams | None = None,
        noise: EntropySource | None = None,
        stack: LayerStack | None = None,
    ) -> None:
        resolution = require_resolution(resolution)
        self.params = params or ProceduralParams()
        self.stack = stack or LayerStack(resolution=resolution)
        self.buffer = TextureBuffer(resolution)
        self.compositor = Compositor(self.buffer, noise=noise)
        self._requests = RequestRunner()
        self.render()

    def __enter__(self) -> "ForgeSession":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def close(self) -> None:
        self._requests.shutdown()

    # ------------------------
    # rendering

    @property
    def resolution(self) -> int:
        return self.buffer.resolution

    @property
    def layers(self) -> tuple[Layer, ...]:
        return self.stack.layers

    def render(self) -> np.ndarray:
        return self.compositor.render(self.stack.layers, self.params)

    def set_resolution(self, resolution: int) -> None:
        """Clear the buffer at the new size, then render fresh. Old pixels are not resampled."""
        self.buffer.resize(resolution)
        logger.debug("resolution -> %d", self.buffer.resolution)
        self.render()

    def set_params(self, **fields: Any) -> ProceduralParams:
        params = dataclasses.replace(self.params, **fields)
        # committed only once the new params have rendered
        self.compositor.render(self.stack.layers, params)
        self.params = params
        return params

    # ------------------------
    # layer authoring

    def create_shape(self, kind: ShapeKind = "rectangle", **content: Any) -> Layer:
        layer = self.stack.append(make_shape_layer(kind, resolution=self.resolution, **content))
        logger.debug("added shape layer %s (%s)", layer.id, kind)
        self.render()
        return layer

    def create_pattern(self, kind: PatternKind = "stripes", **content: Any) -> Layer:
        layer = self.stack.append(make_pattern_layer(kind, resolution=self.resolution, **content))
        logger.debug("added pattern layer %s (%s)", layer.id, kind)
        self.render()
        return layer

    def create_image_layer(self, blob: bytes, *, name: str = "Imported Layer", fit_to_canvas: bool = False) -> Layer:
        """
        Decode `blob` and append it as a bitmap layer.
        DecodeError propagates before anything is added.
        """
        bitmap = decode_image(blob)
        if fit_to_canvas:
            bitmap = fit_bitmap(bitmap, self.resolution)
        layer = self.stack.append(make_bitmap_layer(bitmap, name=name))
        logger.debug("added bitmap layer %s (%dx%d)", layer.id, layer.width, layer.height)
        self.render()
        return layer

    def update(self, layer_id: str, **fields: Any) -> Layer:
        """Apply a partial update; the stack is left as it was if validation or rendering fails."""
        layer = with_updates(self.stack.get(layer_id), fields)
        candidate = [layer if other.id == layer_id else other for other in self.stack.layers]
        self.compositor.render(candidate, self.params)
        return self.stack.replace(layer)

    def remove(self, layer_id: str) -> Layer:
        removed = self.stack.remove(layer_id)
        logger.debug("removed layer %s", layer_id)
        self.render()
        return removed

    def move(self, layer_id: str, direction: MoveDirection) -> bool:
        moved = self.stack.move(layer_id, direction)
        if moved:
            self.render()
        return moved

    def set_visible(self, layer_id: str, visible: bool) -> Layer:
        return self.update(layer_id, visible=bool(visible))

    def select_active(self, layer_id: Optional[str]) -> None:
        self.stack.select_active(layer_id)

    @property
    def active_layer(self) -> Optional[Layer]:
        return self.stack.active_layer

    # ------------------------
    # export

    def export_png(self) -> bytes:
        return encode_png(self.buffer)

    def write_png(self, path: Path | str | None = None, *, directory: Path | None = None) -> Path:
        if path is None:
            path = (directory or Path.cwd()) / export_filename(self.resolution)
        return write_png(path, self.buffer)

    # ------------------------
    # image model requests

    @property
    def request_in_flight(self) -> bool:
        return self._requests.busy

    def begin_transform(self, prompt: str, *, client: TextureGeneratorClient) -> PendingRequest:
        """Send the current frame plus `prompt` to the model; result becomes a new layer on complete()."""
        prompt = self._require_prompt(prompt)
        image_png = self.export_png()
        return self._requests.submit(
            "transform",
            prompt,
            lambda: client.transform(image_png=image_png, prompt=prompt),
        )

    def begin_generate(self, prompt: str, *, client: TextureGeneratorClient) -> PendingRequest:
        prompt = self._require_prompt(prompt)
        return self._requests.submit(
            "generate",
            prompt,
            lambda: client.generate(prompt=prompt),
        )

    def complete(
        self,
        pending: PendingRequest,
        *,
        timeout: float | None = None,
        fit_to_canvas: bool = True,
    ) -> Optional[Layer]:
        """
        Wait for `pending` and apply its result on this thread.

        Returns the new bitmap layer, or None when the model produced
        nothing or the request was cancelled. RequestError / DecodeError
        propagate with the stack and buffer untouched.
        """
        blob = self._requests.collect(pending, timeout=timeout)
        if blob is None:
            logger.info("%s request produced no image", pending.kind)
            return None
        return self.create_image_layer(blob, name=AI_LAYER_NAME, fit_to_canvas=fit_to_canvas)

    def ai_transform(
        self,
        prompt: str,
        *,
        client: TextureGeneratorClient,
        timeout: float | None = None,
        fit_to_canvas: bool = True,
    ) -> Optional[Layer]:
        pending = self.begin_transform(prompt, client=client)
        return self.complete(pending, timeout=timeout, fit_to_canvas=fit_to_canvas)

    def ai_generate(
        self,
        prompt: str,
        *,
        client: TextureGeneratorClient,
        timeout: float | None = None,
        fit_to_canvas: bool = True,
    ) -> Optional[Layer]:
        pending = self.begin_generate(prompt, client=client)
        return self.complete(pending, timeout=timeout, fit_to_canvas=fit_to_canvas)

    @staticmethod
    def _require_prompt(prompt: str) -> str:
        if not normalize_user_prompt(prompt or ""):
            raise ValueError("prompt must not be empty")
        return prompt
