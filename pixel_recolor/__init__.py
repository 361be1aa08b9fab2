"""
Pixel Recolor
Replaces every pixel close to a target color with a replacement color.
"""
from .models.bitmap import Bitmap
from .models.color import Color, matches
from .models.errors import EngineError, InvalidBuffer, UnsupportedLayout
from .models.recolor_engine import RecolorEngine, recolor
from .models.replacement_request import ReplacementRequest

__all__ = [
    "Bitmap",
    "Color",
    "EngineError",
    "InvalidBuffer",
    "RecolorEngine",
    "ReplacementRequest",
    "UnsupportedLayout",
    "matches",
    "recolor",
]

__version__ = "1.0.0"
