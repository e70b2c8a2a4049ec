"""Connected-component labeling of opaque sprite regions."""

from __future__ import annotations

import logging
from typing import List

import numpy as np

from pixelforge.models import BoundingBox, ConnectedComponent, ExtractedPart
from pixelforge.raster import PixelBuffer

LOGGER = logging.getLogger(__name__)


def find_components(raster: PixelBuffer, *, min_pixels: int = 1) -> List[ConnectedComponent]:
    """Label 4-connected opaque regions in row-major discovery order.

    A single visited bitmap with one flag per pixel is shared by every flood
    in the pass. Regions with fewer than ``min_pixels`` pixels are dropped but
    still marked visited.
    """
    width = raster.width
    height = raster.height
    flat_mask = raster.opaque_mask().ravel()
    opaque = bytearray(flat_mask.astype(np.uint8).tobytes())
    visited = bytearray(width * height)

    components: List[ConnectedComponent] = []
    for seed in np.flatnonzero(flat_mask).tolist():
        if visited[seed]:
            continue

        visited[seed] = 1
        stack = [seed]
        min_x = max_x = seed % width
        min_y = max_y = seed // width
        pixel_count = 0

        while stack:
            index = stack.pop()
            y, x = divmod(index, width)
            pixel_count += 1
            if x < min_x:
                min_x = x
            elif x > max_x:
                max_x = x
            if y < min_y:
                min_y = y
            elif y > max_y:
                max_y = y

            if x + 1 < width:
                neighbour = index + 1
                if opaque[neighbour] and not visited[neighbour]:
                    visited[neighbour] = 1
                    stack.append(neighbour)
            if x > 0:
                neighbour = index - 1
                if opaque[neighbour] and not visited[neighbour]:
                    visited[neighbour] = 1
                    stack.append(neighbour)
            if y + 1 < height:
                neighbour = index + width
                if opaque[neighbour] and not visited[neighbour]:
                    visited[neighbour] = 1
                    stack.append(neighbour)
            if y > 0:
                neighbour = index - width
                if opaque[neighbour] and not visited[neighbour]:
                    visited[neighbour] = 1
                    stack.append(neighbour)

        if pixel_count < min_pixels:
            continue
        components.append(
            ConnectedComponent(
                bounding_box=BoundingBox(min_x=min_x, min_y=min_y, max_x=max_x, max_y=max_y),
                pixel_count=pixel_count,
            )
        )

    LOGGER.debug(
        "Found %s components on %sx%s raster",
        len(components),
        width,
        height,
    )
    return components


def segment_parts(raster: PixelBuffer, *, min_pixels: int = 1) -> List[ExtractedPart]:
    """Extract each connected region as a cropped RGBA part.

    An entirely transparent raster yields an empty list.
    """
    return [
        ExtractedPart(
            index=index,
            bounding_box=component.bounding_box,
            pixel_count=component.pixel_count,
            pixels=raster.crop_box(component.bounding_box),
        )
        for index, component in enumerate(find_components(raster, min_pixels=min_pixels))
    ]


__all__ = ["find_components", "segment_parts"]
