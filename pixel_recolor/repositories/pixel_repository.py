# repositories/pixel_repository.py
from __future__ import annotations
import numpy as np

from ..models.bitmap import Bitmap, BYTES_PER_PIXEL
from ..models.errors import InvalidBuffer, UnsupportedLayout


class ScratchBuffer:
    """
    Owns the output bytes while a recolor pass fills them.

    • Allocated on __enter__, released on __exit__ whatever the exit path.
    • detach() hands the finished bytes to the caller and releases early.
    """

    def __init__(self, size: int):
        self._size = size
        self._array: np.ndarray | None = None

    def __enter__(self) -> "ScratchBuffer":
        self._array = np.empty(self._size, dtype=np.uint8)
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self._release()
        return False

    @property
    def array(self) -> np.ndarray:
        if self._array is None:
            raise RuntimeError("Scratch buffer used outside its scope")
        return self._array

    def detach(self) -> bytes:
        data = self.array.tobytes()
        self._release()
        return data

    def _release(self) -> None:
        self._array = None


class PixelRepository:
    """
    Buffer-level access for Bitmap entities.

    Every view it returns addresses pixel (x, y) at
    y * bytes_per_row + x * bytes_per_pixel, so padded rows are never
    mistaken for pixels.
    """

    @staticmethod
    def validate(bitmap: Bitmap) -> None:
        """Raise UnsupportedLayout / InvalidBuffer before any work starts."""
        if bitmap.bytes_per_pixel != BYTES_PER_PIXEL:
            raise UnsupportedLayout(
                f"Expected {BYTES_PER_PIXEL} bytes per pixel, got {bitmap.bytes_per_pixel}"
            )
        if bitmap.width <= 0 or bitmap.height <= 0:
            raise InvalidBuffer(f"Invalid dimensions {bitmap.width}x{bitmap.height}")
        if bitmap.bytes_per_row < bitmap.tight_row_bytes:
            raise InvalidBuffer(
                f"bytes_per_row {bitmap.bytes_per_row} smaller than "
                f"width * bytes_per_pixel = {bitmap.tight_row_bytes}"
            )
        try:
            length = memoryview(bitmap.buffer).nbytes
        except TypeError:
            raise InvalidBuffer(
                f"Buffer must be bytes-like, got {type(bitmap.buffer).__name__}"
            ) from None
        expected = bitmap.bytes_per_row * bitmap.height
        if length != expected:
            raise InvalidBuffer(
                f"Buffer holds {length} bytes, layout needs {expected} "
                f"({bitmap.bytes_per_row} bytes/row x {bitmap.height} rows)"
            )

    @staticmethod
    def rows(buffer, bitmap: Bitmap) -> np.ndarray:
        """(H, bytes_per_row) uint8 view over *buffer*, padding included."""
        return np.ndarray(
            shape=(bitmap.height, bitmap.bytes_per_row),
            dtype=np.uint8,
            buffer=buffer,
        )

    @staticmethod
    def pixels(buffer, bitmap: Bitmap) -> np.ndarray:
        """(H, W, 4) uint8 view over *buffer*, padding skipped via strides."""
        return np.ndarray(
            shape=(bitmap.height, bitmap.width, bitmap.bytes_per_pixel),
            dtype=np.uint8,
            buffer=buffer,
            strides=(bitmap.bytes_per_row, bitmap.bytes_per_pixel, 1),
        )

    @staticmethod
    def allocate_like(bitmap: Bitmap) -> ScratchBuffer:
        return ScratchBuffer(bitmap.bytes_per_row * bitmap.height)

    @staticmethod
    def with_buffer(bitmap: Bitmap, buffer: bytes) -> Bitmap:
        """New Bitmap with the same layout as *bitmap* around *buffer*."""
        return Bitmap(
            width=bitmap.width,
            height=bitmap.height,
            bytes_per_row=bitmap.bytes_per_row,
            buffer=buffer,
            bytes_per_pixel=bitmap.bytes_per_pixel,
        )
