import logging
import math

import pytest

from pixel_recolor.models.color import Color
from pixel_recolor.models.replacement_request import ReplacementRequest, normalize_tolerance


def test_default_tolerance_is_half(colors):
    assert ReplacementRequest(colors["red"], colors["blue"]).tolerance == 0.5


@pytest.mark.parametrize("given, expected", [(-0.3, 0.0), (1.7, 1.0), (0.25, 0.25)])
def test_tolerance_is_clamped(colors, given, expected):
    assert ReplacementRequest(colors["red"], colors["blue"], given).tolerance == expected


def test_clamping_logs_a_warning(colors, caplog):
    with caplog.at_level(logging.WARNING):
        ReplacementRequest(colors["red"], colors["blue"], 2.0)
    assert "clamped" in caplog.text


def test_nan_tolerance_rejected(colors):
    with pytest.raises(ValueError):
        ReplacementRequest(colors["red"], colors["blue"], math.nan)


def test_is_noop(colors):
    assert ReplacementRequest(colors["red"], Color.from_hex("#ff0000")).is_noop
    assert not ReplacementRequest(colors["red"], colors["blue"]).is_noop


def test_request_is_immutable(colors):
    req = ReplacementRequest(colors["red"], colors["blue"])
    with pytest.raises(AttributeError):
        req.tolerance = 0.1


@pytest.mark.parametrize("given, expected", [(-2, 0.0), (0.4, 0.4), (9.0, 1.0)])
def test_normalize_tolerance(given, expected):
    assert normalize_tolerance(given) == expected


def test_normalize_tolerance_rejects_nan():
    with pytest.raises(ValueError):
        normalize_tolerance(math.nan)
