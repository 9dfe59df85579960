from __future__ import annotations

import numpy as np
import pytest

from blocksmith.forge.evaluators.bitmap import evaluate_bitmap
from blocksmith.forge.layers.model import BitmapContent


@pytest.fixture
def bitmap():
    px = np.zeros((2, 2, 4), dtype=np.uint8)
    px[0, 0] = (255, 0, 0, 255)
    px[0, 1] = (0, 255, 0, 51)
    px[1, 0] = (0, 0, 255, 0)
    px[1, 1] = (10, 20, 30, 255)
    return BitmapContent(px)


def test_opaque_pixel(bitmap):
    assert evaluate_bitmap(0, 0, bitmap=bitmap) == ((255.0, 0.0, 0.0), 1.0)


def test_partial_alpha_becomes_coverage(bitmap):
    color, coverage = evaluate_bitmap(1, 0, bitmap=bitmap)
    assert color == (0.0, 255.0, 0.0)
    assert coverage == pytest.approx(0.2)


def test_transparent_pixel_has_no_coverage(bitmap):
    assert evaluate_bitmap(0, 1, bitmap=bitmap) == (None, 0.0)


def test_fractional_coordinates_floor(bitmap):
    assert evaluate_bitmap(1.7, 1.2, bitmap=bitmap)[0] == (10.0, 20.0, 30.0)


@pytest.mark.parametrize("lx, ly", [(-1, 0), (2, 0), (0, 2), (0, -0.5)])
def test_out_of_bounds(bitmap, lx, ly):
    assert evaluate_bitmap(lx, ly, bitmap=bitmap) == (None, 0.0)
