from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple
import numpy as np

BYTES_PER_PIXEL = 4  # R, G, B, A; one unsigned byte each


@dataclass(frozen=True)
class Bitmap:
    """
    Raw RGBA pixel buffer with an explicit row stride.

    Construction does not check the buffer against the declared layout;
    the engine validates before touching any pixel so that a mismatch is
    reported as an `EngineError` instead of a crash.
    """
    width: int
    height: int
    bytes_per_row: int
    buffer: bytes
    bytes_per_pixel: int = BYTES_PER_PIXEL

    @property
    def tight_row_bytes(self) -> int:
        return self.width * self.bytes_per_pixel

    @property
    def is_padded(self) -> bool:
        return self.bytes_per_row > self.tight_row_bytes

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    def pixel_offset(self, x: int, y: int) -> int:
        """Byte offset of pixel (x, y), honouring row padding."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Pixel ({x}, {y}) outside {self.width}x{self.height}")
        return y * self.bytes_per_row + x * self.bytes_per_pixel

    def pixel_at(self, x: int, y: int) -> Tuple[int, ...]:
        offset = self.pixel_offset(x, y)
        return tuple(self.buffer[offset:offset + self.bytes_per_pixel])

    # ── numpy bridges ───────────────────────────────────────────────
    @classmethod
    def from_array(cls, pixels: np.ndarray, row_padding: int = 0) -> "Bitmap":
        """
        Build a Bitmap from an (H, W, 4) uint8 RGBA array.
        *row_padding* extra zero bytes are appended to every row.
        """
        if pixels.ndim != 3 or pixels.shape[2] != BYTES_PER_PIXEL:
            raise ValueError(f"Expected (H, W, 4) RGBA array, got shape {pixels.shape}")
        if row_padding < 0:
            raise ValueError("row_padding must be >= 0")
        h, w = pixels.shape[:2]
        rows = np.ascontiguousarray(pixels, dtype=np.uint8).reshape(h, w * BYTES_PER_PIXEL)
        if row_padding:
            rows = np.hstack([rows, np.zeros((h, row_padding), dtype=np.uint8)])
        return cls(
            width=w,
            height=h,
            bytes_per_row=w * BYTES_PER_PIXEL + row_padding,
            buffer=rows.tobytes(),
        )

    def to_array(self) -> np.ndarray:
        """(H, W, 4) uint8 copy of the pixels, padding dropped."""
        rows = np.frombuffer(self.buffer, dtype=np.uint8).reshape(self.height, self.bytes_per_row)
        return rows[:, :self.tight_row_bytes].reshape(
            self.height, self.width, self.bytes_per_pixel
        ).copy()

    @classmethod
    def filled(cls, width: int, height: int, rgba: Tuple[int, int, int, int]) -> "Bitmap":
        pixels = np.empty((height, width, BYTES_PER_PIXEL), dtype=np.uint8)
        pixels[...] = rgba
        return cls.from_array(pixels)
