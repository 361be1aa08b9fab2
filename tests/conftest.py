from pathlib import Path

import numpy as np
import pytest
from PIL import Image as PILImage

from pixel_recolor.models.bitmap import Bitmap
from pixel_recolor.models.color import Color

RED = (255, 0, 0, 255)
GREEN = (0, 255, 0, 255)
BLUE = (0, 0, 255, 255)


@pytest.fixture
def red_2x2() -> Bitmap:
    return Bitmap.filled(2, 2, RED)


@pytest.fixture
def random_bitmap() -> Bitmap:
    rng = np.random.default_rng(123)
    pixels = rng.integers(0, 256, (37, 23, 4), dtype=np.uint8)
    return Bitmap.from_array(pixels)


@pytest.fixture
def colors():
    return {
        "red": Color.from_bytes(*RED),
        "green": Color.from_bytes(*GREEN),
        "blue": Color.from_bytes(*BLUE),
    }


@pytest.fixture
def write_png(tmp_path):
    """Write an (H, W, 4) RGBA array as PNG and return its path."""
    def _write(pixels: np.ndarray, name: str = "img.png") -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        PILImage.fromarray(pixels).save(path)
        return path
    return _write
