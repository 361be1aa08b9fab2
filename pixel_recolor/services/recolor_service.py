from __future__ import annotations

from pathlib import Path
from typing import Sequence, Tuple, Union
import os
import logging

from dotenv import load_dotenv

from ..models.bitmap import Bitmap
from ..models.color import Color
from ..models.errors import EngineError
from ..models.image import Image
from ..models.recolor_engine import RecolorEngine
from ..models.replacement_request import ReplacementRequest
from .image_service import ImageService

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

ColorLike = Union[Color, str, Sequence[int]]


class RecolorService:
    """
    Business layer around the RecolorEngine.
    *   Accepts colors as Color objects, hex strings or byte tuples.
    *   Uses environment variables for configuration.
    *   Logs and re-raises engine precondition violations.
    """

    def __init__(self,
                 engine: RecolorEngine = None,
                 image_service: ImageService = None,
                 default_tolerance: float = None):
        """
        Args:
            engine: RecolorEngine to run (defaults to one configured from env vars)
            image_service: Service for file I/O
            default_tolerance: Tolerance used when a caller passes none (defaults to env var)
        """
        if default_tolerance is None:
            default_tolerance = float(os.getenv("RECOLOR_DEFAULT_TOLERANCE", "0.5"))
        self.default_tolerance = default_tolerance
        self.engine = engine or RecolorEngine()
        self.image_service = image_service or ImageService()

        logger.info(f"RecolorService initialized: workers={self.engine.max_workers}, "
                    f"rows_per_task={self.engine.rows_per_task}, "
                    f"default_tolerance={self.default_tolerance}")

    # ─── Parameter helpers ─────────────────────────────────────────
    @staticmethod
    def to_color(value: ColorLike) -> Color:
        if isinstance(value, Color):
            return value
        if isinstance(value, str):
            return Color.from_hex(value)
        if len(value) not in (3, 4):
            raise ValueError(f"Expected 3 or 4 byte channels, got {value!r}")
        return Color.from_bytes(*value)

    def build_request(self,
                      target: ColorLike,
                      replacement: ColorLike,
                      tolerance: float | None = None) -> ReplacementRequest:
        return ReplacementRequest(
            target=self.to_color(target),
            replacement=self.to_color(replacement),
            tolerance=self.default_tolerance if tolerance is None else tolerance,
        )

    # ─── Public API ────────────────────────────────────────────────
    def recolor(self, bitmap: Bitmap, request: ReplacementRequest) -> Bitmap:
        return self.recolor_counted(bitmap, request)[0]

    def recolor_counted(self, bitmap: Bitmap, request: ReplacementRequest) -> Tuple[Bitmap, int]:
        """Recolored bitmap plus the number of replaced pixels, in one pass."""
        try:
            return self.engine.recolor_counted(bitmap, request)
        except EngineError as err:
            logger.error(f"Recolor rejected {type(err).__name__}: {err}")
            raise

    def recolor_image(self, img: Image, request: ReplacementRequest) -> Image:
        """
        Recolor an Image and return a *new* Image (no path yet).
        The source bitmap is kept as the new image's original.
        """
        new_bitmap = self.recolor(img.bitmap, request)
        return Image(bitmap=new_bitmap, original=img.original or img.bitmap)

    def count_matches(self, bitmap: Bitmap, target: ColorLike, tolerance: float | None = None) -> int:
        tolerance = self.default_tolerance if tolerance is None else tolerance
        return self.engine.count_matches(bitmap, self.to_color(target), tolerance)

    def recolor_file(self,
                     path: Union[str, Path],
                     request: ReplacementRequest,
                     output_path: Union[str, Path, None] = None) -> Path:
        """
        Load *path*, recolor it and save next to the source
        (``<stem>_recolored<suffix>``) unless *output_path* is given.
        """
        img = self.image_service.load(path)
        edited = self.recolor_image(img, request)
        if output_path is None:
            output_path = img.path.with_stem(img.path.stem + "_recolored")
        edited.path = Path(output_path)
        self.image_service.save(edited)
        logger.info(f"Recolored {img.path} → {edited.path}")
        return edited.path
