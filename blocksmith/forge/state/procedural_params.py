# blocksmith/forge/state/procedural_params.py
from __future__ import annotations

import numbers
from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Optional

from blocksmith.forge.color.colormath import hex_to_rgb
from blocksmith.forge.errors import FormatError

GradientKind = Literal["none", "linear-v", "linear-h", "radial"]
BorderKind = Literal["darken", "lighten"]

GRADIENT_KINDS: tuple[str, ...] = ("none", "linear-v", "linear-h", "radial")
BORDER_KINDS: tuple[str, ...] = ("darken", "lighten")

RESOLUTIONS: tuple[int, ...] = (16, 32, 64, 128)


def require_resolution(resolution: int) -> int:
    if resolution not in RESOLUTIONS:
        raise FormatError(f"resolution must be one of {RESOLUTIONS}, got {resolution}")
    return int(resolution)


@dataclass(frozen=True)
class BorderSides:
    top: bool = True
    bottom: bool = True
    left: bool = True
    right: bool = True

    def any_enabled(self) -> bool:
        return self.top or self.bottom or self.left or self.right


@dataclass
class ProceduralParams:
    # material colors
    base_color: str = "#ffa500"
    base_color_end: str = "#ff4500"
    gradient: GradientKind = "none"

    # per-pixel grain amplitude (channel units)
    noise_amount: float = 15

    # edge wear; border_color, when set, replaces darken/lighten
    border_type: BorderKind = "darken"
    border_color: Optional[str] = None
    border_size: float = 2
    border_intensity: float = 30
    border_sides: BorderSides = field(default_factory=BorderSides)

    def __post_init__(self) -> None:
        for name in ("noise_amount", "border_size", "border_intensity"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, numbers.Real):
                raise FormatError(f"{name} must be a number, got {value!r}")
        if not isinstance(self.border_sides, BorderSides):
            raise FormatError(f"border_sides must be BorderSides, got {type(self.border_sides).__name__}")
        hex_to_rgb(self.base_color)
        hex_to_rgb(self.base_color_end)
        if self.border_color is not None:
            hex_to_rgb(self.border_color)
        if self.gradient not in GRADIENT_KINDS:
            raise FormatError(f"Unknown gradient kind: {self.gradient}")
        if self.border_type not in BORDER_KINDS:
            raise FormatError(f"Unknown border kind: {self.border_type}")
        if self.border_size <= 0:
            raise FormatError(f"border_size must be > 0, got {self.border_size}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "base_color": self.base_color,
            "base_color_end": self.base_color_end,
            "gradient": self.gradient,
            "noise_amount": self.noise_amount,
            "border_type": self.border_type,
            "border_color": self.border_color,
            "border_size": self.border_size,
            "border_intensity": self.border_intensity,
            "border_sides": {
                "top": self.border_sides.top,
                "bottom": self.border_sides.bottom,
                "left": self.border_sides.left,
                "right": self.border_sides.right,
            },
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ProceduralParams":
        sides = d.get("border_sides", {}) or {}
        defaults = cls()
        return cls(
            base_color=str(d.get("base_color", defaults.base_color)),
            base_color_end=str(d.get("base_color_end", defaults.base_color_end)),
            gradient=d.get("gradient", defaults.gradient),
            noise_amount=float(d.get("noise_amount", defaults.noise_amount)),
            border_type=d.get("border_type", defaults.border_type),
            border_color=d.get("border_color"),
            border_size=float(d.get("border_size", defaults.border_size)),
            border_intensity=float(d.get("border_intensity", defaults.border_intensity)),
            border_sides=BorderSides(
                top=bool(sides.get("top", True)),
                bottom=bool(sides.get("bottom", True)),
                left=bool(sides.get("left", True)),
                right=bool(sides.get("right", True)),
            ),
        )
