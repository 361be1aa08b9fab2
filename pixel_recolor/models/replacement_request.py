from __future__ import annotations
from dataclasses import dataclass
import logging
import math

from .color import Color

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE = 0.5


def normalize_tolerance(tolerance) -> float:
    """Clamp *tolerance* into [0, 1] (with a warning); NaN raises ValueError."""
    tolerance = float(tolerance)
    if math.isnan(tolerance):
        raise ValueError("tolerance must be a number in [0, 1], got NaN")
    clamped = min(max(tolerance, 0.0), 1.0)
    if clamped != tolerance:
        logger.warning(f"Tolerance {tolerance} outside [0, 1], clamped to {clamped}")
    return clamped


@dataclass(frozen=True)
class ReplacementRequest:
    """
    Value-object holding what to replace, with what, and how loosely.

    tolerance: maximum per-channel difference in [0, 1]. Values outside
    the range are clamped (with a warning), NaN is rejected.
    """
    target: Color
    replacement: Color
    tolerance: float = DEFAULT_TOLERANCE

    def __post_init__(self):
        object.__setattr__(self, "tolerance", normalize_tolerance(self.tolerance))

    @property
    def is_noop(self) -> bool:
        return self.target == self.replacement
