# models/recolor_engine.py
"""
Pixel Recolor Engine.

• Validates the bitmap before allocating anything.
• Splits the rows into bands and recolors them on a thread pool
  (numpy releases the GIL inside its kernels).
• Joins every band before returning a freshly allocated Bitmap.
"""
from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import Callable, List, Tuple
import logging
import os
import threading

import numpy as np
from dotenv import load_dotenv

from .bitmap import Bitmap
from .color import Color, match_mask
from .replacement_request import ReplacementRequest, normalize_tolerance
from ..repositories.pixel_repository import PixelRepository

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

Band = Tuple[int, int]  # [start_row, stop_row)


def _positive_int(name: str, value) -> int:
    value = int(value)
    if value < 1:
        raise ValueError(f"{name} must be >= 1, got {value}")
    return value


class RecolorEngine:
    """
    Stateless color replacement over RGBA bitmaps.

    Only the pool size and band height are kept between calls; nothing
    about a previous bitmap survives a call.
    """

    _default: "RecolorEngine" | None = None
    _lock = threading.RLock()

    def __init__(self, max_workers: int = None, rows_per_task: int = None):
        if max_workers is None:
            max_workers = os.getenv("RECOLOR_MAX_WORKERS") or os.cpu_count() or 1
        if rows_per_task is None:
            rows_per_task = os.getenv("RECOLOR_ROWS_PER_TASK", "64")
        self.max_workers = _positive_int("max_workers", max_workers)
        self.rows_per_task = _positive_int("rows_per_task", rows_per_task)
        self.pixel_repository = PixelRepository()

    # ───────────────────────── shared instance
    @classmethod
    def default(cls) -> "RecolorEngine":
        with cls._lock:
            if cls._default is None:
                cls._default = cls()
            return cls._default

    # ───────────────────────── public API
    def recolor(self, bitmap: Bitmap, request: ReplacementRequest) -> Bitmap:
        """
        Return a new Bitmap where every pixel matching request.target
        (within request.tolerance, per channel) holds request.replacement.

        Raises
        ------
        UnsupportedLayout : bytes_per_pixel != 4
        InvalidBuffer     : buffer length / dimensions disagree
        """
        return self.recolor_counted(bitmap, request)[0]

    def recolor_counted(self, bitmap: Bitmap, request: ReplacementRequest) -> Tuple[Bitmap, int]:
        """Same as `recolor`, plus the number of pixels that were replaced."""
        self.pixel_repository.validate(bitmap)

        replacement = np.array(request.replacement.to_bytes(), dtype=np.uint8)
        src_rows = self.pixel_repository.rows(bitmap.buffer, bitmap)
        src_pixels = self.pixel_repository.pixels(bitmap.buffer, bitmap)

        with self.pixel_repository.allocate_like(bitmap) as scratch:
            dst_rows = self.pixel_repository.rows(scratch.array, bitmap)
            dst_pixels = self.pixel_repository.pixels(scratch.array, bitmap)
            work = partial(
                self._recolor_band,
                src_rows, src_pixels, dst_rows, dst_pixels,
                request.target, request.tolerance, replacement,
            )
            counts = self._run(work, self._bands(bitmap.height))
            buffer = scratch.detach()

        replaced = sum(counts)
        logger.debug(
            f"Recolored {replaced}/{bitmap.pixel_count} pixels "
            f"({bitmap.width}x{bitmap.height}, tolerance={request.tolerance})"
        )
        return self.pixel_repository.with_buffer(bitmap, buffer), replaced

    def count_matches(self, bitmap: Bitmap, target: Color, tolerance: float) -> int:
        """Number of pixels `recolor` would replace for this target/tolerance."""
        tolerance = normalize_tolerance(tolerance)
        self.pixel_repository.validate(bitmap)
        pixels = self.pixel_repository.pixels(bitmap.buffer, bitmap)
        work = lambda band: int(match_mask(pixels[band[0]:band[1]], target, tolerance).sum())
        return sum(self._run(work, self._bands(bitmap.height)))

    # ───────────────────────── internal helpers
    @staticmethod
    def _recolor_band(
        src_rows: np.ndarray,
        src_pixels: np.ndarray,
        dst_rows: np.ndarray,
        dst_pixels: np.ndarray,
        target: Color,
        tolerance: float,
        replacement: np.ndarray,
        band: Band,
    ) -> int:
        """Touches rows [start, stop) of the output and nothing else."""
        start, stop = band
        dst_rows[start:stop] = src_rows[start:stop]  # pixels and padding
        mask = match_mask(src_pixels[start:stop], target, tolerance)
        dst_pixels[start:stop][mask] = replacement
        return int(mask.sum())

    def _bands(self, height: int) -> List[Band]:
        return [
            (start, min(start + self.rows_per_task, height))
            for start in range(0, height, self.rows_per_task)
        ]

    def _run(self, work: Callable[[Band], int], bands: List[Band]) -> List[int]:
        if len(bands) == 1 or self.max_workers == 1:
            return [work(band) for band in bands]
        # map() re-raises the first band failure; leaving the block joins all bands.
        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(bands))) as pool:
            return list(pool.map(work, bands))


def recolor(bitmap: Bitmap, request: ReplacementRequest) -> Bitmap:
    """Recolor *bitmap* with the shared default engine."""
    return RecolorEngine.default().recolor(bitmap, request)
