"""
Command line entry points for sprite-sheet analysis, metadata and playback.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import threading
from pathlib import Path
from typing import Optional

from .analysis import analyze_sheets
from .config import Settings, load_config
from .errors import PixelForgeError
from .grid import detect_grid
from .images import load_raster, write_parts
from .logging_setup import configure_logging
from .metadata import (
    build_metadata,
    find_animation,
    load_descriptors,
    load_metadata,
    metadata_to_document,
    parse_cell_size,
    rebuild_metadata,
    save_metadata,
)
from .models import CellSize, TransitionEvent
from .playback import PlaybackInstance
from .scheduler import PlaybackTicker

LOGGER = logging.getLogger("pixelforge.cli")


def _emit_metadata(animations, output: Optional[Path]) -> None:
    if output is None:
        json.dump(metadata_to_document(animations), sys.stdout, indent=2)
        sys.stdout.write("\n")
        return
    save_metadata(animations, output)


def detect_command(args: argparse.Namespace) -> int:
    cell = detect_grid(load_raster(args.image))
    LOGGER.info("Detected grid for %s: %s", args.image, cell)
    print(cell)
    return 0


def segment_command(settings: Settings, args: argparse.Namespace) -> int:
    output_root = args.output_dir or settings.output_dir / "parts"
    min_pixels = args.min_pixels or settings.min_part_pixels
    results = analyze_sheets(
        args.images,
        workers=settings.analysis_workers,
        min_part_pixels=min_pixels,
        detect=False,
    )
    for result in results:
        if not result.parts:
            LOGGER.warning("No opaque parts found in %s", result.path)
            continue
        destination = output_root if len(results) == 1 else output_root / result.path.stem
        write_parts(result.parts, destination)
        for part in result.parts:
            box = part.bounding_box
            LOGGER.info(
                "%s part %s: %sx%s at (%s, %s), %s pixels",
                result.path.name,
                part.index + 1,
                box.width,
                box.height,
                box.min_x,
                box.min_y,
                part.pixel_count,
            )
    return 0


def build_command(settings: Settings, args: argparse.Namespace) -> int:
    descriptors = load_descriptors(args.descriptors)
    cell: CellSize
    if args.detect:
        cell = detect_grid(load_raster(args.detect))
        LOGGER.info("Using detected cell size %s from %s", cell, args.detect)
    elif args.cell:
        cell = parse_cell_size(args.cell)
    else:
        cell = settings.default_cell_size
    animations = build_metadata(descriptors, cell)
    _emit_metadata(animations, args.output)
    return 0


def rebuild_command(args: argparse.Namespace) -> int:
    existing = load_metadata(args.metadata)
    animations = rebuild_metadata(existing, args.width, args.height)
    _emit_metadata(animations, args.output or args.metadata)
    return 0


def play_command(settings: Settings, args: argparse.Namespace) -> int:
    animations = load_metadata(args.metadata)
    if not animations:
        LOGGER.error("No animations in %s", args.metadata)
        return 1
    name = args.animation or animations[0].name
    animation = find_animation(animations, name)
    if animation is None:
        LOGGER.error("Unknown animation '%s'", name)
        return 1

    instance = PlaybackInstance(animation, fps=args.fps or settings.default_fps)

    def log_frame(frame_index: int) -> None:
        frame = instance.current_frame()
        LOGGER.info(
            "%s frame %s/%s at (%s, %s)",
            instance.animation.name,
            frame_index + 1,
            instance.animation.frame_count,
            frame.x if frame else "-",
            frame.y if frame else "-",
        )

    def log_transition(event: TransitionEvent) -> None:
        LOGGER.info("Transition requested: %s -> %s", event.source_name, event.target_name)

    ticker = PlaybackTicker(
        instance,
        on_frame=log_frame,
        on_transition=log_transition,
        animations=animations if args.follow_transitions else None,
    )
    finished = threading.Event()
    try:
        ticker.start()
        finished.wait(args.duration)
    except (KeyboardInterrupt, SystemExit):
        LOGGER.info("Playback interrupted")
    finally:
        ticker.shutdown()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pixelforge",
        description="Sprite-sheet grid detection, part extraction and animation playback.",
    )
    parser.add_argument("--config", type=Path, help="Path to a settings JSON file.")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging.")

    subparsers = parser.add_subparsers(dest="command", required=True)

    detect_parser = subparsers.add_parser("detect", help="Detect the frame size of a sprite sheet.")
    detect_parser.add_argument("image", type=Path, help="Sprite sheet PNG.")

    segment_parser = subparsers.add_parser(
        "segment",
        help="Extract disjoint opaque regions as individual PNG parts.",
    )
    segment_parser.add_argument("images", type=Path, nargs="+", help="Sheet PNGs to segment.")
    segment_parser.add_argument(
        "--output-dir",
        type=Path,
        help="Directory for part_<n>.png files (default: <output_dir>/parts).",
    )
    segment_parser.add_argument(
        "--min-pixels",
        type=int,
        help="Drop regions with fewer pixels than this.",
    )

    build_parser_ = subparsers.add_parser("build", help="Build animation metadata from descriptors.")
    build_parser_.add_argument("descriptors", type=Path, help="JSON array of animation descriptors.")
    cell_group = build_parser_.add_mutually_exclusive_group()
    cell_group.add_argument("--cell", help="Cell size such as 64x64.")
    cell_group.add_argument("--detect", type=Path, help="Detect the cell size from this sheet.")
    build_parser_.add_argument("--output", "-o", type=Path, help="Write metadata JSON here.")

    rebuild_parser = subparsers.add_parser("rebuild", help="Recompute metadata for a new cell size.")
    rebuild_parser.add_argument("metadata", type=Path, help="Existing metadata JSON.")
    rebuild_parser.add_argument("--width", type=int, required=True, help="New frame width.")
    rebuild_parser.add_argument("--height", type=int, required=True, help="New frame height.")
    rebuild_parser.add_argument(
        "--output",
        "-o",
        type=Path,
        help="Write metadata JSON here (default: overwrite the input).",
    )

    play_parser = subparsers.add_parser("play", help="Log frame playback of an animation.")
    play_parser.add_argument("metadata", type=Path, help="Metadata JSON.")
    play_parser.add_argument("--animation", help="Animation name (default: first).")
    play_parser.add_argument("--fps", type=float, help="Frames per second.")
    play_parser.add_argument(
        "--duration",
        type=float,
        default=5.0,
        help="Seconds to play before stopping (default: 5).",
    )
    play_parser.add_argument(
        "--no-follow",
        dest="follow_transitions",
        action="store_false",
        help="Do not switch animations when a transition is requested.",
    )
    play_parser.set_defaults(follow_transitions=True)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = load_config(args.config)
    configure_logging(
        level=logging.DEBUG if args.verbose else logging.INFO,
        log_file=settings.log_file,
    )

    try:
        if args.command == "detect":
            return detect_command(args)
        if args.command == "segment":
            return segment_command(settings, args)
        if args.command == "build":
            return build_command(settings, args)
        if args.command == "rebuild":
            return rebuild_command(args)
        if args.command == "play":
            return play_command(settings, args)
    except PixelForgeError as exc:
        LOGGER.error("%s", exc)
        return 1
    except OSError as exc:
        LOGGER.error("I/O failure: %s", exc)
        return 1

    parser.error(f"Unhandled command: {args.command}")
    return 2


if __name__ == "__main__":
    sys.exit(main())
