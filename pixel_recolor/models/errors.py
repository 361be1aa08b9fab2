class EngineError(Exception):
    """Base class for precondition violations reported by the recolor engine."""


class InvalidBuffer(EngineError):
    """Buffer length or dimensions disagree with the declared layout."""


class UnsupportedLayout(EngineError):
    """Pixel layout other than 4 bytes per pixel (RGBA8)."""
