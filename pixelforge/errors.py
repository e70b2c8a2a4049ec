"""Exception types raised by the sprite-sheet engine."""

from __future__ import annotations

from enum import Enum


class PixelForgeError(RuntimeError):
    """Base class for all engine failures."""


class InputErrorReason(str, Enum):
    NO_OPAQUE_PIXELS = "no_opaque_pixels"
    DEGENERATE_FRAME = "degenerate_frame"
    INVALID_RASTER = "invalid_raster"


class InputError(PixelForgeError):
    """Raised when a raster cannot yield usable geometry."""

    def __init__(self, reason: InputErrorReason, message: str) -> None:
        super().__init__(message)
        self.reason = reason


class ConfigError(PixelForgeError, ValueError):
    """Raised for non-positive frame counts or cell dimensions and malformed documents."""


class StateError(PixelForgeError):
    """Raised when playback is stepped on an animation without frames."""


__all__ = [
    "ConfigError",
    "InputError",
    "InputErrorReason",
    "PixelForgeError",
    "StateError",
]
