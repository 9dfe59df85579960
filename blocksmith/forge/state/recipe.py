# blocksmith/forge/state/recipe.py
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

from blocksmith.forge.errors import FormatError
from blocksmith.forge.io.image_codec import decode_image_file
from blocksmith.forge.layers.model import BASE_LAYER_ID, Layer, make_bitmap_layer
from blocksmith.forge.noise.sources import EntropySource
from blocksmith.forge.pipeline.session import ForgeSession
from blocksmith.forge.state.procedural_params import ProceduralParams

# Keys every layer entry may carry besides its content fields.
_COMMON_KEYS = ("name", "x", "y", "width", "height", "opacity", "visible", "tiling")


def _common(entry: Dict[str, Any]) -> Dict[str, Any]:
    return {k: entry[k] for k in _COMMON_KEYS if k in entry}


def _content(entry: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in entry.items() if k not in _COMMON_KEYS and k not in ("kind", "type", "path")}


def _add_layer(session: ForgeSession, entry: Dict[str, Any], *, index: int, base_dir: Path) -> Layer:
    kind = entry.get("kind")
    try:
        if kind == "shape":
            return session.create_shape(entry.get("type", "rectangle"), **_content(entry))
        if kind == "pattern":
            return session.create_pattern(entry.get("type", "stripes"), **_content(entry))
    except TypeError as e:
        raise FormatError(f"layers[{index}]: {e}") from e

    if kind == "image":
        if "path" not in entry:
            raise FormatError(f"layers[{index}] image entry needs a 'path'")
        bitmap = decode_image_file(base_dir / entry["path"])
        return session.stack.append(make_bitmap_layer(bitmap, name=entry.get("name", "Imported Layer")))

    raise FormatError(f"layers[{index}] has unknown kind {kind!r}")


def session_from_recipe(
    recipe: Dict[str, Any],
    *,
    base_dir: Path | None = None,
    noise: EntropySource | None = None,
) -> ForgeSession:
    """
    Build a session from a recipe dict:

        {
          "resolution": 32,
          "params": {... ProceduralParams.to_dict() ...},
          "base": {"visible": true, "opacity": 1.0},
          "layers": [
            {"kind": "shape", "type": "circle", "color": "#ffffff", "size": 12},
            {"kind": "pattern", "type": "brick", "scale": 4, "opacity": 0.6},
            {"kind": "image", "path": "decal.png", "x": 2, "y": 2}
          ]
        }

    Image paths are resolved relative to `base_dir`.
    """
    if not isinstance(recipe, dict):
        raise FormatError("recipe must be a JSON object")

    base_dir = base_dir or Path.cwd()
    session = ForgeSession(
        resolution=int(recipe.get("resolution", 16)),
        params=ProceduralParams.from_dict(recipe.get("params", {}) or {}),
        noise=noise,
    )

    try:
        _apply_layers(session, recipe, base_dir=base_dir)
    except Exception:
        session.close()
        raise
    return session


def _apply_layers(session: ForgeSession, recipe: Dict[str, Any], *, base_dir: Path) -> None:
    base = recipe.get("base") or {}
    if base:
        session.update(BASE_LAYER_ID, **_common(base))

    for i, entry in enumerate(recipe.get("layers", []) or []):
        if not isinstance(entry, dict):
            raise FormatError(f"layers[{i}] must be an object")
        kind = entry.get("kind")
        layer = _add_layer(session, entry, index=i, base_dir=base_dir)

        overrides = _common(entry)
        if kind == "image":
            overrides.pop("width", None)
            overrides.pop("height", None)
        if overrides:
            session.update(layer.id, **overrides)

    session.render()


def load_recipe(path: Path | str, *, noise: EntropySource | None = None) -> ForgeSession:
    path = Path(path)
    try:
        recipe = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise FormatError(f"recipe {path} is not valid JSON: {e}") from e
    return session_from_recipe(recipe, base_dir=path.parent, noise=noise)
