# blocksmith/forge/api/mock_client.py
from __future__ import annotations

import hashlib
import io
from typing import Optional

from PIL import Image

from blocksmith.forge.api.client import TextureGeneratorClient
from blocksmith.forge.errors import DecodeError
from blocksmith.forge.io.image_codec import encode_png_image

MOCK_TILE_PX = 16


def _fill_deterministic(img: Image.Image, seed_bytes: bytes) -> None:
    """
    Fill an RGBA image with a digest-derived pattern.
    No randomness; stable across runs/machines.
    """
    w, h = img.size
    digest = hashlib.sha256(seed_bytes).digest()
    n = len(digest)
    px = img.load()
    for y in range(h):
        for x in range(w):
            i = (x + 7 * y) % n
            px[x, y] = (digest[i], digest[(i + 11) % n], digest[(i + 23) % n], 255)


class MockTextureGeneratorClient(TextureGeneratorClient):
    """
    Offline stand-in for an image model.

    generate(): MOCK_TILE_PX square tile seeded from the prompt.
    transform(): same size as the input; its opaque pixels are tinted toward
    a prompt-derived pattern, so the edit is visible and repeatable.
    `empty=True` makes both calls return None.
    """

    def __init__(self, *, empty: bool = False) -> None:
        self.empty = empty
        self.calls: list[tuple[str, str]] = []

    def generate(self, *, prompt: str) -> Optional[bytes]:
        self.calls.append(("generate", prompt))
        if self.empty:
            return None
        tile = Image.new("RGBA", (MOCK_TILE_PX, MOCK_TILE_PX))
        _fill_deterministic(tile, f"generate|{prompt}".encode("utf-8"))
        return encode_png_image(tile)

    def transform(self, *, image_png: bytes, prompt: str) -> Optional[bytes]:
        self.calls.append(("transform", prompt))
        if self.empty:
            return None
        try:
            base = Image.open(io.BytesIO(image_png)).convert("RGBA")
        except OSError as e:
            raise DecodeError(f"mock transform got unreadable input: {e}") from e

        overlay = Image.new("RGBA", base.size)
        _fill_deterministic(overlay, f"transform|{prompt}".encode("utf-8"))
        return encode_png_image(Image.blend(base, overlay, 0.5))
