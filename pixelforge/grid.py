"""Frame-size inference by boundary scanning around the first opaque sprite."""

from __future__ import annotations

import logging

import numpy as np

from pixelforge.errors import InputError, InputErrorReason
from pixelforge.models import CellSize
from pixelforge.raster import PixelBuffer

LOGGER = logging.getLogger(__name__)


def _leading_run(flags: np.ndarray) -> int:
    """Length of the run of ``True`` values at the start of ``flags``."""
    gaps = np.flatnonzero(~flags)
    return int(gaps[0]) if gaps.size else int(flags.size)


def find_anchor(raster: PixelBuffer) -> tuple[int, int]:
    """Return ``(x, y)`` of the first opaque pixel in row-major order."""
    mask = raster.opaque_mask()
    occupied_rows = np.flatnonzero(mask.any(axis=1))
    if occupied_rows.size == 0:
        raise InputError(
            InputErrorReason.NO_OPAQUE_PIXELS,
            "Could not find any non-transparent pixels.",
        )
    anchor_y = int(occupied_rows[0])
    anchor_x = int(np.flatnonzero(mask[anchor_y])[0])
    return anchor_x, anchor_y


def detect_grid(raster: PixelBuffer) -> CellSize:
    """Infer the cell size from the bounding cell of the first opaque sprite.

    The anchor is the first opaque pixel in row-major order. Columns from the
    anchor rightwards count towards the width until one is fully transparent
    below the anchor row; rows from the anchor downwards, restricted to the
    discovered columns, count towards the height the same way.
    """
    anchor_x, anchor_y = find_anchor(raster)
    mask = raster.opaque_mask()

    frame_width = _leading_run(mask[anchor_y:, anchor_x:].any(axis=0))
    frame_height = _leading_run(
        mask[anchor_y:, anchor_x : anchor_x + frame_width].any(axis=1)
    )

    if frame_width == 0 or frame_height == 0:
        raise InputError(
            InputErrorReason.DEGENERATE_FRAME,
            f"Detected a zero-sized frame ({frame_width}x{frame_height}).",
        )

    LOGGER.debug(
        "Detected %sx%s grid anchored at (%s, %s) on %sx%s raster",
        frame_width,
        frame_height,
        anchor_x,
        anchor_y,
        raster.width,
        raster.height,
    )
    return CellSize(width=frame_width, height=frame_height)


__all__ = ["detect_grid", "find_anchor"]
