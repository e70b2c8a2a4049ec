"""Read-only RGBA raster wrapper used by the detector and segmenter."""

from __future__ import annotations

from typing import Tuple

import numpy as np

from pixelforge.errors import InputError, InputErrorReason, StateError
from pixelforge.models import AnimationMetadata, BoundingBox


class PixelBuffer:
    """Decoded ``height x width`` raster with an RGBA channel layout."""

    def __init__(self, pixels: np.ndarray) -> None:
        array = np.array(pixels, copy=True)
        if array.ndim != 3 or array.shape[2] != 4:
            raise InputError(
                InputErrorReason.INVALID_RASTER,
                f"Expected an HxWx4 RGBA array, got shape {array.shape}",
            )
        if array.dtype != np.uint8:
            array = np.clip(array, 0, 255).astype(np.uint8)
        self._pixels = array
        self._pixels.setflags(write=False)

    @classmethod
    def blank(cls, width: int, height: int) -> "PixelBuffer":
        return cls(np.zeros((height, width, 4), dtype=np.uint8))

    @property
    def width(self) -> int:
        return int(self._pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self._pixels.shape[0])

    @property
    def shape(self) -> Tuple[int, int]:
        return self.width, self.height

    @property
    def pixels(self) -> np.ndarray:
        return self._pixels

    @property
    def alpha(self) -> np.ndarray:
        return self._pixels[..., 3]

    def opaque_mask(self) -> np.ndarray:
        """Boolean mask of pixels with non-zero alpha."""
        return self._pixels[..., 3] > 0

    def crop(self, x: int, y: int, width: int, height: int) -> np.ndarray:
        """Copy a rectangle, clipped to the raster, with alpha preserved."""
        x0 = max(0, x)
        y0 = max(0, y)
        x1 = min(self.width, x + width)
        y1 = min(self.height, y + height)
        if x1 <= x0 or y1 <= y0:
            return np.zeros((0, 0, 4), dtype=np.uint8)
        return self._pixels[y0:y1, x0:x1].copy()

    def crop_box(self, box: BoundingBox) -> np.ndarray:
        return self.crop(box.min_x, box.min_y, box.width, box.height)


def crop_animation_strip(raster: PixelBuffer, animation: AnimationMetadata) -> np.ndarray:
    """Extract one animation's row of frames as a single strip.

    The strip starts at the first frame and spans ``frame_count * frame_width``
    by ``frame_height`` pixels, so frame ``i`` sits at ``i * frame_width``
    inside the result.
    """
    if not animation.frames:
        raise StateError(f"Animation '{animation.name}' has no frames.")

    first = animation.frames[0]
    strip_width = animation.frame_count * animation.frame_width
    strip = np.zeros((animation.frame_height, strip_width, 4), dtype=np.uint8)
    cropped = raster.crop(first.x, first.y, strip_width, animation.frame_height)
    strip[: cropped.shape[0], : cropped.shape[1]] = cropped
    return strip


__all__ = ["PixelBuffer", "crop_animation_strip"]
