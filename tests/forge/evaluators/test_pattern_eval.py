from __future__ import annotations

import math

import pytest

from blocksmith.forge.evaluators.pattern import evaluate_pattern, sample_brick, sample_spots, sample_stripes
from blocksmith.forge.layers.model import PatternContent


def _eval(lx, ly, pattern, w=16, h=16):
    return evaluate_pattern(lx, ly, width=w, height=h, pattern=pattern)


def test_stripes_inside_and_outside():
    p = PatternContent(kind="stripes", color="#000000", scale=3, jitter=0)
    assert sample_stripes(0, 0, p).inside is False  # sin(0) == 0
    assert sample_stripes(10, 0, p).inside is False  # sin(10/3) < 0

    s = sample_stripes(3, 0, p)
    assert s.inside and s.border == 0.0
    assert s.shade == pytest.approx((math.sin(1.0) - 0.5) * 30)


def test_stripes_border_band():
    p = PatternContent(kind="stripes", color="#808080", scale=3, jitter=0)
    s = sample_stripes(1, 0, p)
    assert s.inside and s.border == 1.0

    color, coverage = _eval(1, 0, p)
    expected = 128 + (math.sin(1 / 3) - 0.5) * 30 - 40
    assert coverage == 1.0
    assert color == pytest.approx((expected, expected, expected))


def test_stripes_without_border_width():
    p = PatternContent(kind="stripes", scale=3, jitter=0, border_width=0)
    assert sample_stripes(1, 0, p).border == 0.0


def test_jitter_is_stable_across_calls():
    p = PatternContent(kind="stripes", scale=2, jitter=1.0)
    first = [_eval(x, y, p) for y in range(16) for x in range(16)]
    second = [_eval(x, y, p) for y in range(16) for x in range(16)]
    assert first == second


def test_spots_cell_center():
    p = PatternContent(kind="spots", scale=3, jitter=0, shading=30)
    s = sample_spots(2, 2, p)
    dist = math.sqrt(0.5)
    assert s.inside and s.border == 0.0
    assert s.shade == pytest.approx((1 - dist / 1.5 - 0.5) * 60)
    assert sample_spots(0, 0, p).inside is False


def test_brick_draws_only_mortar():
    p = PatternContent(kind="brick", color="#404040", scale=4, jitter=0)
    # horizontal mortar line
    assert _eval(2, 0, p) == ((64.0, 64.0, 64.0), 1.0)
    # brick face
    assert sample_brick(2, 2, p).inside is False
    assert _eval(2, 2, p) == (None, 0.0)


def test_brick_odd_rows_are_offset():
    p = PatternContent(kind="brick", scale=4, jitter=0)
    # row 1 shifted by half a brick: lx=2 lands on the vertical joint
    assert sample_brick(2, 5, p).inside is True
    assert sample_brick(0, 5, p).inside is False
    # row 0 unshifted
    assert sample_brick(0, 2, p).inside is True


def test_pattern_coordinates_wrap_into_layer_size():
    p = PatternContent(kind="stripes", scale=3, jitter=0.3)
    assert _eval(19, 2, p) == _eval(3, 2, p)
    assert _eval(-13, 2, p) == _eval(3, 2, p)
    assert _eval(5, 18, p) == _eval(5, 2, p)
