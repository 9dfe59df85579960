# blocksmith/forge/layers/stack.py
from __future__ import annotations

from typing import Any, Iterator, Literal, Optional

from blocksmith.forge.errors import StateError
from blocksmith.forge.layers.model import BASE_LAYER_ID, Layer, make_base_layer, with_updates

MoveDirection = Literal["up", "down"]


class LayerStack:
    """
    Ordered layers, index 0 = bottom = composited first.

    Holds exactly one protected base layer. The active id is a weak
    reference: it may outlive the layer it names, in which case
    active_layer is None.
    """

    def __init__(self, *, resolution: int = 16, base: Layer | None = None) -> None:
        base = base or make_base_layer(resolution)
        if base.id != BASE_LAYER_ID:
            raise StateError(f"base layer must have id {BASE_LAYER_ID!r}")
        self._layers: list[Layer] = [base]
        self.active_id: Optional[str] = BASE_LAYER_ID

    def __len__(self) -> int:
        return len(self._layers)

    def __iter__(self) -> Iterator[Layer]:
        return iter(list(self._layers))

    @property
    def layers(self) -> tuple[Layer, ...]:
        return tuple(self._layers)

    def index_of(self, layer_id: str) -> int:
        for i, layer in enumerate(self._layers):
            if layer.id == layer_id:
                return i
        raise StateError(f"Unknown layer id: {layer_id}")

    def get(self, layer_id: str) -> Layer:
        return self._layers[self.index_of(layer_id)]

    def __contains__(self, layer_id: object) -> bool:
        return any(layer.id == layer_id for layer in self._layers)

    # ------------------------
    # mutations

    def append(self, layer: Layer, *, select: bool = True) -> Layer:
        if layer.id in self:
            raise StateError(f"Duplicate layer id: {layer.id}")
        if layer.id == BASE_LAYER_ID:
            raise StateError("Stack already has a base layer")
        self._layers.append(layer)
        if select:
            self.active_id = layer.id
        return layer

    def insert(self, index: int, layer: Layer) -> Layer:
        """Insert above the base; index 0 is clamped to 1 so the base stays protected."""
        if layer.id in self or layer.id == BASE_LAYER_ID:
            raise StateError(f"Duplicate layer id: {layer.id}")
        index = max(1, min(index, len(self._layers)))
        self._layers.insert(index, layer)
        return layer

    def remove(self, layer_id: str) -> Layer:
        if layer_id == BASE_LAYER_ID:
            raise StateError("The base layer cannot be removed")
        idx = self.index_of(layer_id)
        removed = self._layers.pop(idx)
        if self.active_id == layer_id:
            self.active_id = None
        return removed

    def move(self, layer_id: str, direction: MoveDirection) -> bool:
        """
        Swap with the neighbour one step up (toward the top) or down.
        Returns False when already at that end of the stack.
        """
        if direction not in ("up", "down"):
            raise ValueError(f"direction must be 'up' or 'down', got {direction!r}")
        idx = self.index_of(layer_id)
        new_idx = idx + 1 if direction == "up" else idx - 1
        if new_idx < 0 or new_idx >= len(self._layers):
            return False
        self._layers[idx], self._layers[new_idx] = self._layers[new_idx], self._layers[idx]
        return True

    def replace(self, layer: Layer) -> Layer:
        idx = self.index_of(layer.id)
        self._layers[idx] = layer
        return layer

    def update(self, layer_id: str, **fields: Any) -> Layer:
        return self.replace(with_updates(self.get(layer_id), fields))

    def set_visible(self, layer_id: str, visible: bool) -> Layer:
        return self.update(layer_id, visible=bool(visible))

    # ------------------------
    # selection

    def select_active(self, layer_id: Optional[str]) -> None:
        self.active_id = layer_id

    @property
    def active_layer(self) -> Optional[Layer]:
        if self.active_id is None:
            return None
        for layer in self._layers:
            if layer.id == self.active_id:
                return layer
        return None
