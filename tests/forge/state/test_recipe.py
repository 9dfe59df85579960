from __future__ import annotations

import json

import pytest

from blocksmith.forge.errors import DecodeError, FormatError
from blocksmith.forge.layers.model import BASE_LAYER_ID
from blocksmith.forge.pipeline.session import ForgeSession
from blocksmith.forge.state.recipe import load_recipe, session_from_recipe


def _write(tmp_path, recipe, name="recipe.json"):
    path = tmp_path / name
    path.write_text(json.dumps(recipe))
    return path


def test_load_recipe_builds_layers_in_order(tmp_path, png_blob):
    (tmp_path / "decal.png").write_bytes(png_blob(width=4, height=4))
    path = _write(
        tmp_path,
        {
            "resolution": 32,
            "params": {"base_color": "#202020", "noise_amount": 0},
            "base": {"opacity": 0.9},
            "layers": [
                {"kind": "shape", "type": "circle", "color": "#ffffff", "size": 12, "x": 2},
                {"kind": "pattern", "type": "brick", "scale": 4, "opacity": 0.6, "name": "Mortar"},
                {"kind": "image", "path": "decal.png", "x": 3, "y": 3, "width": 99},
            ],
        },
    )

    with load_recipe(path) as session:
        assert session.resolution == 32
        assert session.params.base_color == "#202020"

        base, shape, pattern, image = session.layers
        assert base.id == BASE_LAYER_ID and base.opacity == 0.9
        assert shape.name == "Shape: circle" and shape.x == 2 and shape.content.size == 12
        assert pattern.name == "Mortar" and pattern.opacity == 0.6 and pattern.tiling
        assert image.kind == "bitmap" and (image.x, image.y) == (3, 3)
        assert (image.width, image.height) == (4, 4)
        assert session.buffer.read_back().shape == (32, 32, 4)


def test_empty_recipe_is_bare_base():
    with session_from_recipe({}) as session:
        assert session.resolution == 16
        assert [layer.id for layer in session.layers] == [BASE_LAYER_ID]


@pytest.mark.parametrize(
    "recipe",
    [
        [],
        {"resolution": 20},
        {"params": {"gradient": "spiral"}},
        {"layers": ["circle"]},
        {"layers": [{"kind": "sprite"}]},
        {"layers": [{"kind": "shape", "type": "hexagon"}]},
        {"layers": [{"kind": "pattern", "bogus": 1}]},
        {"layers": [{"kind": "image"}]},
    ],
)
def test_bad_recipes(recipe):
    with pytest.raises(FormatError):
        session_from_recipe(recipe)


def test_missing_image_file(tmp_path):
    with pytest.raises(DecodeError):
        session_from_recipe({"layers": [{"kind": "image", "path": "gone.png"}]}, base_dir=tmp_path)


def test_invalid_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json")
    with pytest.raises(FormatError):
        load_recipe(path)


def test_failed_recipe_closes_session(monkeypatch):
    closed = []
    real_close = ForgeSession.close

    def tracking_close(self):
        closed.append(self)
        real_close(self)

    monkeypatch.setattr(ForgeSession, "close", tracking_close)
    with pytest.raises(FormatError):
        session_from_recipe({"layers": [{"kind": "shape"}, {"kind": "sprite"}]})
    assert len(closed) == 1
