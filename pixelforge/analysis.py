"""Batch grid detection and part extraction on a worker pool."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

from pixelforge.errors import InputError
from pixelforge.grid import detect_grid
from pixelforge.images import load_raster
from pixelforge.models import CellSize, ExtractedPart
from pixelforge.progress import ProgressTracker
from pixelforge.segmentation import segment_parts


@dataclass
class SheetAnalysis:
    """Outcome of analysing one sprite sheet image."""

    index: int
    path: Path
    cell_size: Optional[CellSize] = None
    parts: List[ExtractedPart] = field(default_factory=list)
    grid_error: Optional[InputError] = None


def analyze_sheet(
    index: int,
    path: Path,
    *,
    min_part_pixels: int = 1,
    detect: bool = True,
    segment: bool = True,
) -> SheetAnalysis:
    raster = load_raster(path)
    result = SheetAnalysis(index=index, path=path)
    if detect:
        try:
            result.cell_size = detect_grid(raster)
        except InputError as exc:
            result.grid_error = exc
    if segment:
        result.parts = segment_parts(raster, min_pixels=min_part_pixels)
    return result


def analyze_sheets(
    paths: Sequence[Path],
    *,
    workers: int = 1,
    min_part_pixels: int = 1,
    detect: bool = True,
    segment: bool = True,
    logger: Optional[logging.Logger] = None,
) -> List[SheetAnalysis]:
    """Analyse sheets concurrently, returning results in input order.

    A grid detection failure is recorded on the result; loading failures
    propagate from the worker.
    """
    log = logger or logging.getLogger(__name__)
    if not paths:
        return []

    results: List[Optional[SheetAnalysis]] = [None] * len(paths)
    progress = ProgressTracker(len(paths))

    with ThreadPoolExecutor(max_workers=max(1, workers)) as executor:
        futures = [
            executor.submit(
                analyze_sheet,
                index,
                Path(path),
                min_part_pixels=min_part_pixels,
                detect=detect,
                segment=segment,
            )
            for index, path in enumerate(paths)
        ]
        for future in as_completed(futures):
            result = future.result()
            results[result.index] = result
            if progress.tick():
                log.info(
                    "Sheet analysis progress: %s/%s sheets (%0.1f%%, %s)",
                    progress.completed,
                    progress.total,
                    progress.percent,
                    progress.eta(),
                )

    return [result for result in results if result is not None]


__all__ = ["SheetAnalysis", "analyze_sheet", "analyze_sheets"]
