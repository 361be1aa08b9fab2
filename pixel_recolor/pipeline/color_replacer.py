# pipeline/color_replacer.py
from __future__ import annotations
from pathlib import Path
import os
import logging
from typing import Iterable, List

from dotenv import load_dotenv

from ..models.image import Image
from ..models.replacement_request import ReplacementRequest
from ..services.image_service import ImageService
from ..services.recolor_service import RecolorService

# ------------------------------------------------------------------
# env‑vars
load_dotenv()
OUTPUT_DIR = os.getenv("RECOLOR_OUTPUT_DIR", "data/recolored")
OUTPUT_EXT = os.getenv("OUTPUT_IMG_EXT", ".png")

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------
def replace_color(
    gallery: Iterable[Image],
    request: ReplacementRequest,
    *,
    recolor_service: RecolorService | None = None,
    image_service: ImageService | None = None,
    output_dir: str | Path = OUTPUT_DIR,
    ext: str = OUTPUT_EXT,
) -> List[Image]:
    """
    For every Image in *gallery*:
        • recolor its bitmap with *request*
        • update the bitmap in-memory (preserving original)
        • point its path at *output_dir* (same stem, *ext* suffix)
    Returns the same Image objects; nothing is written to disk.
    """
    image_service = image_service or ImageService()
    recolor_service = recolor_service or RecolorService(image_service=image_service)
    output_dir = Path(output_dir)

    processed = []
    for i, img in enumerate(gallery):
        new_bitmap = recolor_service.recolor(img.bitmap, request)
        image_service.apply_pipeline_modification(img, new_bitmap)

        stem = img.path.stem if img.path else f"image_{i:03d}"
        img.path = output_dir / f"{stem}{ext}"
        processed.append(img)

    logger.info(f"Recolored {len(processed)} images → {output_dir}")
    return processed
