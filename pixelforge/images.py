"""PNG loading and writing for rasters, backed by OpenCV."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Sequence

import cv2
import numpy as np

from pixelforge.errors import InputError, InputErrorReason
from pixelforge.models import ExtractedPart
from pixelforge.raster import PixelBuffer

LOGGER = logging.getLogger(__name__)


def to_rgba(image: np.ndarray) -> np.ndarray:
    """Convert an OpenCV grey/BGR/BGRA array to RGBA, opaque when alpha is absent."""
    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2RGBA)
    channels = image.shape[2]
    if channels == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA)
    if channels == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2RGBA)
    raise InputError(
        InputErrorReason.INVALID_RASTER,
        f"Unsupported channel count: {channels}",
    )


def load_raster(path: Path | str) -> PixelBuffer:
    source = Path(path)
    image = cv2.imread(str(source), cv2.IMREAD_UNCHANGED)
    if image is None:
        raise InputError(
            InputErrorReason.INVALID_RASTER,
            f"Failed to load image for analysis: {source}",
        )
    if image.dtype != np.uint8:
        # 16-bit PNGs: keep the high byte.
        image = (image >> 8).astype(np.uint8)
    return PixelBuffer(to_rgba(image))


def encode_png(pixels: np.ndarray) -> bytes:
    success, buffer = cv2.imencode(".png", cv2.cvtColor(pixels, cv2.COLOR_RGBA2BGRA))
    if not success:
        raise RuntimeError("Failed to encode PNG")
    return buffer.tobytes()


def write_raster(path: Path | str, pixels: np.ndarray) -> Path:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(encode_png(pixels))
    return target


def write_parts(parts: Sequence[ExtractedPart], directory: Path | str) -> List[Path]:
    """Write each part as ``part_<n>.png`` numbered from 1 in discovery order."""
    output_dir = Path(directory)
    written: List[Path] = []
    for part in parts:
        written.append(write_raster(output_dir / f"part_{part.index + 1}.png", part.pixels))
    LOGGER.info("Wrote %s parts to %s", len(written), output_dir)
    return written


__all__ = ["encode_png", "load_raster", "to_rgba", "write_parts", "write_raster"]
