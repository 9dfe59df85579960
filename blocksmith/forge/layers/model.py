# blocksmith/forge/layers/model.py
from __future__ import annotations

import dataclasses
import numbers
import uuid
from dataclasses import dataclass
from typing import Any, Literal, Union

import numpy as np

from blocksmith.forge.color.colormath import hex_to_rgb
from blocksmith.forge.errors import FormatError

ShapeKind = Literal["rectangle", "circle", "diamond"]
PatternKind = Literal["stripes", "spots", "brick"]

SHAPE_KINDS: tuple[str, ...] = ("rectangle", "circle", "diamond")
PATTERN_KINDS: tuple[str, ...] = ("stripes", "spots", "brick")

BASE_LAYER_ID = "base-procedural"


@dataclass(frozen=True)
class ProceduralContent:
    """
    Marker payload for the base material.

    The material's inputs are the session-wide ProceduralParams, not
    per-layer fields.
    """


@dataclass(frozen=True)
class ShapeContent:
    kind: ShapeKind = "rectangle"
    color: str = "#ffffff"
    size: float = 8
    shading: float = 40  # signed; positive darkens away from the center

    def __post_init__(self) -> None:
        if self.kind not in SHAPE_KINDS:
            raise FormatError(f"Unknown shape kind: {self.kind}")
        hex_to_rgb(self.color)
        if self.size <= 0:
            raise FormatError(f"shape size must be > 0, got {self.size}")


@dataclass(frozen=True)
class PatternContent:
    kind: PatternKind = "stripes"
    color: str = "#000000"
    scale: float = 3
    jitter: float = 0.1
    shading: float = 30
    border_width: float = 0.5
    border_intensity: float = 40

    def __post_init__(self) -> None:
        if self.kind not in PATTERN_KINDS:
            raise FormatError(f"Unknown pattern kind: {self.kind}")
        hex_to_rgb(self.color)
        if self.scale <= 0:
            raise FormatError(f"pattern scale must be > 0, got {self.scale}")
        if not 0.0 <= self.jitter <= 1.0:
            raise FormatError(f"pattern jitter must be in [0, 1], got {self.jitter}")


@dataclass(frozen=True, eq=False)
class BitmapContent:
    """
    Imported RGBA pixels, shape (height, width, 4), dtype uint8.

    The array is copied and flagged read-only on construction.
    """
    pixels: np.ndarray

    def __post_init__(self) -> None:
        arr = np.array(self.pixels, dtype=np.uint8, copy=True)
        if arr.ndim != 3 or arr.shape[2] != 4 or arr.shape[0] < 1 or arr.shape[1] < 1:
            raise FormatError(f"bitmap pixels must be (H, W, 4), got {arr.shape}")
        arr.flags.writeable = False
        object.__setattr__(self, "pixels", arr)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])


LayerContent = Union[ProceduralContent, ShapeContent, PatternContent, BitmapContent]


def new_layer_id() -> str:
    return uuid.uuid4().hex[:12]


@dataclass(frozen=True)
class Layer:
    id: str
    name: str
    content: LayerContent
    width: int
    height: int
    x: int = 0
    y: int = 0
    opacity: float = 1.0
    visible: bool = True
    tiling: bool = False

    def __post_init__(self) -> None:
        for name in ("width", "height", "x", "y"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, numbers.Integral):
                raise FormatError(f"layer {name} must be an integer, got {value!r}")
        if isinstance(self.opacity, bool) or not isinstance(self.opacity, numbers.Real):
            raise FormatError(f"opacity must be a number, got {self.opacity!r}")
        if self.width < 1 or self.height < 1:
            raise FormatError(f"layer size must be positive, got {self.width}x{self.height}")
        if not 0.0 <= self.opacity <= 1.0:
            raise FormatError(f"opacity must be in [0, 1], got {self.opacity}")
        if isinstance(self.content, BitmapContent):
            if (self.content.width, self.content.height) != (self.width, self.height):
                raise FormatError("bitmap layer size must match its pixel grid")

    @property
    def kind(self) -> str:
        if isinstance(self.content, ProceduralContent):
            return "procedural"
        if isinstance(self.content, ShapeContent):
            return "shape"
        if isinstance(self.content, PatternContent):
            return "pattern"
        return "bitmap"

    @property
    def is_base(self) -> bool:
        return self.id == BASE_LAYER_ID


_LAYER_FIELDS = frozenset(f.name for f in dataclasses.fields(Layer)) - {"id", "content"}


def with_updates(layer: Layer, updates: dict[str, Any]) -> Layer:
    """
    Return a copy of `layer` with `updates` applied.

    Keys may name common layer fields (x, opacity, tiling, ...) or fields of
    the layer's own content payload (color, scale, kind, ...). Changing a
    shape or pattern kind renames the layer the way the type buttons do,
    unless a name is given explicitly.
    """
    common: dict[str, Any] = {}
    payload: dict[str, Any] = {}
    content_fields = (
        set()
        if isinstance(layer.content, (ProceduralContent, BitmapContent))
        else {f.name for f in dataclasses.fields(layer.content)}
    )

    for key, value in updates.items():
        if key in _LAYER_FIELDS:
            common[key] = value
        elif key in content_fields:
            payload[key] = value
        else:
            raise ValueError(f"{layer.kind} layer has no updatable field {key!r}")

    if payload:
        content = dataclasses.replace(layer.content, **payload)
        common["content"] = content
        if "kind" in payload and "name" not in common:
            label = "Shape" if isinstance(content, ShapeContent) else "Pattern"
            common["name"] = f"{label}: {payload['kind']}"

    return dataclasses.replace(layer, **common) if common else layer


def make_base_layer(resolution: int) -> Layer:
    return Layer(
        id=BASE_LAYER_ID,
        name="Base Material",
        content=ProceduralContent(),
        width=resolution,
        height=resolution,
    )


def make_shape_layer(kind: ShapeKind, *, resolution: int, **content: Any) -> Layer:
    shape = ShapeContent(kind=kind, **content)
    return Layer(
        id=new_layer_id(),
        name=f"Shape: {kind}",
        content=shape,
        width=resolution,
        height=resolution,
    )


def make_pattern_layer(kind: PatternKind, *, resolution: int, **content: Any) -> Layer:
    pattern = PatternContent(kind=kind, **content)
    return Layer(
        id=new_layer_id(),
        name=f"Pattern: {kind}",
        content=pattern,
        width=resolution,
        height=resolution,
        opacity=0.8,
        tiling=True,
    )


def make_bitmap_layer(bitmap: BitmapContent, *, name: str = "Imported Layer") -> Layer:
    return Layer(
        id=new_layer_id(),
        name=name,
        content=bitmap,
        width=bitmap.width,
        height=bitmap.height,
    )
