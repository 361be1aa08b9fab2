from __future__ import annotations
from pathlib import Path
from typing import Union, Iterable, List, Iterator
import logging
import os

import cv2
import numpy as np
from PIL import Image as PILImage
from dotenv import load_dotenv

from ..models.bitmap import Bitmap
from ..models.image import Image

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_EXTS = ".png,.jpg,.jpeg,.bmp,.webp,.tif,.tiff"


class ImageRepository:
    """
    Handles file decode/encode and bitmap updates for Image entities.
    """
    def __init__(self):
        exts = os.getenv("VALID_IMAGE_EXTENSIONS", DEFAULT_EXTS)
        self.VALID_EXTS = {ext.strip().lower() for ext in exts.split(",") if ext.strip()}

    @staticmethod
    def create_image(bitmap: Bitmap, path: Union[str, Path] = None) -> Image:
        if path is None:
            return Image(bitmap)
        return Image(bitmap=bitmap, path=Path(path))

    @staticmethod
    def to_rgba(arr: np.ndarray) -> np.ndarray:
        """Normalise a decoded OpenCV array (gray / BGR / BGRA, 8 or 16 bit) to RGBA8."""
        if arr.dtype == np.uint16:
            arr = (arr >> 8).astype(np.uint8)
        elif arr.dtype != np.uint8:
            raise ValueError(f"Unsupported pixel depth: {arr.dtype}")

        if arr.ndim == 2:
            return cv2.cvtColor(arr, cv2.COLOR_GRAY2RGBA)
        channels = arr.shape[2]
        if channels == 1:
            return cv2.cvtColor(arr[:, :, 0], cv2.COLOR_GRAY2RGBA)
        if channels == 3:
            return cv2.cvtColor(arr, cv2.COLOR_BGR2RGBA)
        if channels == 4:
            return cv2.cvtColor(arr, cv2.COLOR_BGRA2RGBA)
        raise ValueError(f"Unsupported channel count: {channels}")

    def load(self, path: Union[str, Path]) -> Image:
        path = Path(path)
        arr = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
        if arr is None:
            raise FileNotFoundError(f"Image not found or unreadable: {path}")
        return Image(bitmap=Bitmap.from_array(self.to_rgba(arr)), path=path)

    @staticmethod
    def save(image: Image) -> None:
        if image.path is None:
            raise ValueError("Cannot save an image without a path")
        path = Path(image.path)
        path.parent.mkdir(parents=True, exist_ok=True)
        pil_img = PILImage.fromarray(image.bitmap.to_array())
        if path.suffix.lower() in {".jpg", ".jpeg"}:
            # JPEG has no alpha channel
            pil_img = pil_img.convert("RGB")
        pil_img.save(path)

    @staticmethod
    def update_bitmap_preserve_original(image: Image, new_bitmap: Bitmap) -> None:
        """Update the bitmap while preserving the original for comparison"""
        if image.original is None:
            image.original = image.bitmap
        image.bitmap = new_bitmap

    def iter_dir(
        self,
        folder: Union[str, Path],
        *,
        recursive: bool = False,
        exts: Iterable[str] | None = None,
    ) -> Iterator[Image]:
        """
        Yield Image objects one at a time.  Nothing accumulates in memory.
        """
        folder = Path(folder)
        if not folder.is_dir():
            raise NotADirectoryError(folder)

        allowed = {e.lower() for e in (exts or self.VALID_EXTS)}
        pattern = "**/*" if recursive else "*"

        for p in sorted(folder.glob(pattern)):
            if p.suffix.lower() not in allowed or not p.is_file():
                logger.debug(f"Skipping {p}")
                continue
            try:
                yield self.load(p)
            except (FileNotFoundError, ValueError) as err:
                logger.warning(f"Skipping {p.name}: {err}")

    def load_dir(
        self, folder: Union[str, Path], *, recursive=False, exts=None
    ) -> List[Image]:
        """
        Helper that returns a list, but internally streams.
        """
        return list(self.iter_dir(folder, recursive=recursive, exts=exts))
