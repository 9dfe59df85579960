# blocksmith/forge/io/image_codec.py
from __future__ import annotations

import io
from pathlib import Path

import numpy as np
from PIL import Image, UnidentifiedImageError

from blocksmith.forge.errors import DecodeError
from blocksmith.forge.io.atomic_write import PathLike, atomic_write_bytes
from blocksmith.forge.layers.model import BitmapContent
from blocksmith.forge.pipeline.buffer import TextureBuffer


def decode_image(blob: bytes) -> BitmapContent:
    """
    Encoded image bytes (PNG, JPEG, GIF, ...) -> 8-bit RGBA pixel grid.

    Anything Pillow cannot open or fully load raises DecodeError.
    """
    if not blob:
        raise DecodeError("empty image blob")
    try:
        with Image.open(io.BytesIO(blob)) as img:
            img.load()
            rgba = img.convert("RGBA")
    # Pillow reports some broken chunk streams as SyntaxError
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
        raise DecodeError(f"could not decode image: {e}") from e

    return BitmapContent(np.asarray(rgba, dtype=np.uint8))


def decode_image_file(path: PathLike) -> BitmapContent:
    try:
        blob = Path(path).read_bytes()
    except OSError as e:
        raise DecodeError(f"could not read image {path}: {e}") from e
    return decode_image(blob)


def encode_png_image(img: Image.Image) -> bytes:
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def encode_png(buffer: TextureBuffer) -> bytes:
    """Lossless RGBA PNG of the published frame, exactly res x res."""
    return encode_png_image(buffer.to_image())


def write_png(path: PathLike, buffer: TextureBuffer) -> Path:
    return atomic_write_bytes(path, encode_png(buffer))


def fit_bitmap(bitmap: BitmapContent, size: int) -> BitmapContent:
    """Nearest-neighbour resample to size x size; keeps the pixel-art look."""
    if (bitmap.width, bitmap.height) == (size, size):
        return bitmap
    img = Image.fromarray(np.ascontiguousarray(bitmap.pixels))
    resized = img.resize((size, size), resample=Image.NEAREST)
    return BitmapContent(np.asarray(resized, dtype=np.uint8))
