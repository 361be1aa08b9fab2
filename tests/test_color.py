import math

import numpy as np
import pytest

from pixel_recolor.models.color import Color, matches, match_mask


def test_from_bytes_normalises_channels():
    c = Color.from_bytes(255, 0, 51, 102)
    assert c.as_tuple() == (1.0, 0.0, 0.2, 0.4)


def test_from_hex_with_and_without_alpha():
    assert Color.from_hex("#FF0000").to_bytes() == (255, 0, 0, 255)
    assert Color.from_hex("00ff0080").to_bytes() == (0, 255, 0, 128)


@pytest.mark.parametrize("bad", ["#FFF", "#GG0000", "", "#1234567"])
def test_from_hex_rejects_malformed(bad):
    with pytest.raises(ValueError):
        Color.from_hex(bad)


@pytest.mark.parametrize("value", [-0.1, 1.5, math.nan])
def test_channels_outside_unit_range_rejected(value):
    with pytest.raises(ValueError):
        Color(value, 0.0, 0.0)


def test_to_bytes_rounds_to_nearest():
    # 0.5 * 255 = 127.5 -> 128, 0.499 * 255 = 127.245 -> 127
    assert Color(0.5, 0.499, 0.002, 1.0).to_bytes() == (128, 127, 1, 255)
    assert Color(0.5, 0.499, 0.002, 1.0).to_hex() == "#807f01ff"


def test_tolerance_zero_matches_only_equal_colors():
    red = Color.from_bytes(255, 0, 0)
    assert matches(Color.from_bytes(255, 0, 0), red, 0.0)
    assert not matches(Color.from_bytes(254, 0, 0), red, 0.0)
    assert not matches(Color.from_bytes(255, 0, 0, 254), red, 0.0)


def test_tolerance_one_matches_everything():
    assert matches(Color(0, 0, 0, 0), Color(1, 1, 1, 1), 1.0)


def test_every_channel_must_be_within_bound():
    target = Color.from_bytes(100, 100, 100, 100)
    tol = 10 / 255
    assert matches(Color.from_bytes(110, 90, 105, 100), target, tol)
    assert not matches(Color.from_bytes(110, 90, 105, 111), target, tol)


def test_partial_tolerance_example():
    candidate = Color.from_bytes(200, 0, 0, 255)
    target = Color.from_bytes(255, 0, 0, 255)
    assert matches(candidate, target, 0.25)
    assert not matches(candidate, target, 0.2)


def test_match_mask_agrees_with_scalar_predicate():
    rng = np.random.default_rng(7)
    pixels = rng.integers(0, 256, (200, 4), dtype=np.uint8)
    target = Color.from_bytes(128, 64, 200, 255)
    for tolerance in (0.0, 0.1, 0.37, 1.0):
        mask = match_mask(pixels, target, tolerance)
        expected = [matches(Color.from_bytes(*px), target, tolerance) for px in pixels]
        assert mask.tolist() == expected


def test_numpy_scalar_channels_accepted():
    c = Color(np.float32(0.5), np.int64(1), np.float64(0.0), np.uint8(1))
    assert c.as_tuple() == (0.5, 1.0, 0.0, 1.0)
    assert all(type(v) is float for v in c.as_tuple())


def test_bool_channels_rejected():
    with pytest.raises(ValueError):
        Color(True, 0.0, 0.0)
