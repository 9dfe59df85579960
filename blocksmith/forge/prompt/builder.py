# blocksmith/forge/prompt/builder.py
from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Literal

PromptKind = Literal["transform", "generate"]

PRESET_TAGS: tuple[str, ...] = ("Retro", "Moss", "Rust", "Neon", "Burnt")

_TRANSFORM_TEMPLATE = (
    "Keep the pixel art style and the 1:1 aspect ratio. "
    "Modify this block texture as follows: {user}. "
    "Return only the image."
)

_GENERATE_TEMPLATE = (
    "Create a block-game style {res}x{res} pixel art texture material for: {user}. "
    "The result must be perfectly square and flat (no 3D perspective), "
    "usable as a tiling material or a mob skin part."
)


@dataclass(frozen=True)
class PromptPayload:
    """
    Deterministic prompt payload.

    - full_prompt: exact string sent to the image model
    - sha256_hex: content hash of full_prompt (utf-8), handy for logs
    """
    kind: PromptKind
    full_prompt: str
    sha256_hex: str


def normalize_user_prompt(user_prompt: str) -> str:
    return " ".join(user_prompt.replace("\r\n", "\n").split())


def append_preset(user_prompt: str, tag: str) -> str:
    """Same behaviour as the preset chips: append the tag after a space."""
    if tag not in PRESET_TAGS:
        raise ValueError(f"Unknown preset tag: {tag}")
    return f"{user_prompt} {tag}"


def build_prompt_payload(*, kind: PromptKind, user_prompt: str, resolution: int = 16) -> PromptPayload:
    normalized = normalize_user_prompt(user_prompt)
    if not normalized:
        raise ValueError("prompt must not be empty")

    if kind == "transform":
        full = _TRANSFORM_TEMPLATE.format(user=normalized)
    elif kind == "generate":
        full = _GENERATE_TEMPLATE.format(user=normalized, res=resolution)
    else:
        raise ValueError(f"Unknown prompt kind: {kind}")

    h = hashlib.sha256(full.encode("utf-8")).hexdigest()
    return PromptPayload(kind=kind, full_prompt=full, sha256_hex=h)
