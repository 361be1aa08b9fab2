from __future__ import annotations
from dataclasses import dataclass
import math
import numbers
from typing import Tuple
import numpy as np

# Float slack so that byte/255 round trips compare equal at tolerance 0.
_EPSILON = 1e-9


@dataclass(frozen=True)
class Color:
    """
    RGBA color in the engine's own vocabulary.
    Every channel is a float in [0, 1], i.e. byte value / 255.
    """
    red: float
    green: float
    blue: float
    alpha: float = 1.0

    def __post_init__(self):
        for name in ("red", "green", "blue", "alpha"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, numbers.Real):
                raise ValueError(f"{name} channel must be a number, got {value!r}")
            if math.isnan(value) or not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} channel must lie in [0, 1], got {value}")
            object.__setattr__(self, name, float(value))

    # ── Constructors ────────────────────────────────────────────────
    @classmethod
    def from_bytes(cls, red: int, green: int, blue: int, alpha: int = 255) -> "Color":
        channels = (red, green, blue, alpha)
        for value in channels:
            if not 0 <= int(value) <= 255:
                raise ValueError(f"Byte channel out of range: {value}")
        return cls(*(int(v) / 255.0 for v in channels))

    @classmethod
    def from_hex(cls, hex_str: str) -> "Color":
        """Parse '#RRGGBB' or '#RRGGBBAA' (leading '#' optional)."""
        h = hex_str.strip().lstrip("#")
        if len(h) not in (6, 8):
            raise ValueError(f"Expected 6 or 8 hex digits, got {hex_str!r}")
        try:
            values = [int(h[i:i + 2], 16) for i in range(0, len(h), 2)]
        except ValueError:
            raise ValueError(f"Invalid hex color: {hex_str!r}") from None
        return cls.from_bytes(*values)

    # ── Conversions ─────────────────────────────────────────────────
    def to_bytes(self) -> Tuple[int, int, int, int]:
        """Byte channels, rounded to nearest (round(channel * 255))."""
        return tuple(int(round(c * 255)) for c in self.as_tuple())

    def to_hex(self) -> str:
        return "#" + "".join(f"{b:02x}" for b in self.to_bytes())

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return (self.red, self.green, self.blue, self.alpha)

    def as_array(self) -> np.ndarray:
        return np.array(self.as_tuple(), dtype=np.float64)


def matches(candidate: Color, target: Color, tolerance: float) -> bool:
    """
    True iff every channel of *candidate* is within *tolerance* of *target*.

    Per-channel (Chebyshev) bound: red, green, blue and alpha are checked
    independently and all four must pass. Tolerance 0 accepts only equal
    colors, tolerance 1 accepts everything.
    """
    limit = tolerance + _EPSILON
    return all(
        abs(c - t) <= limit
        for c, t in zip(candidate.as_tuple(), target.as_tuple())
    )


def match_mask(pixels: np.ndarray, target: Color, tolerance: float) -> np.ndarray:
    """
    Vectorised `matches` over a block of RGBA bytes.

    Args
    ----
    pixels : np.ndarray  (..., 4)  uint8  RGBA order

    Returns
    -------
    mask : np.ndarray  (...)  bool
    """
    channels = pixels.astype(np.float64) / 255.0
    diff = np.abs(channels - target.as_array())
    return np.all(diff <= tolerance + _EPSILON, axis=-1)
