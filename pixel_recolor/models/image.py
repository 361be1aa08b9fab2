from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path

from .bitmap import Bitmap


@dataclass
class Image:
    """
    Simple data object: an RGBA bitmap (+ optional source path for bookkeeping).
    No file I/O outside the image repository.
    """
    bitmap: Bitmap
    path: Path | None = None # Source or destination of the image.
    original: Bitmap | None = None # Original unmodified bitmap for comparison
