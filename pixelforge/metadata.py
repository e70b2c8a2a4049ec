"""Animation metadata layout, rebuilding and document persistence."""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from pixelforge.errors import ConfigError
from pixelforge.models import (
    AnimationDescriptor,
    AnimationMetadata,
    CellSize,
    Frame,
    LoopMode,
)

LOGGER = logging.getLogger(__name__)

DEFAULT_CELL_SIZE = CellSize(width=64, height=64)
_RESOLUTION_PATTERN = re.compile(r"(\d+)x(\d+)")


def parse_resolution(resolution: str) -> CellSize:
    """Parse strings such as ``"64x64 sprites"`` into a cell size."""
    match = _RESOLUTION_PATTERN.search(resolution or "")
    if match:
        width, height = int(match.group(1)), int(match.group(2))
        if width > 0 and height > 0:
            return CellSize(width=width, height=height)
    LOGGER.warning(
        "Could not parse resolution string: %r. Falling back to %s.",
        resolution,
        DEFAULT_CELL_SIZE,
    )
    return DEFAULT_CELL_SIZE


def parse_cell_size(text: str) -> CellSize:
    """Parse a user-supplied ``WxH`` cell size, rejecting anything else."""
    match = re.fullmatch(r"\s*(\d+)\s*[xX]\s*(\d+)\s*", text or "")
    if not match:
        raise ConfigError(f"Cell size must look like WxH, got {text!r}")
    width, height = int(match.group(1)), int(match.group(2))
    _require_positive_cell(width, height)
    return CellSize(width=width, height=height)


def _require_positive_cell(width: int, height: int) -> None:
    if width <= 0 or height <= 0:
        raise ConfigError(f"Cell dimensions must be positive, got {width}x{height}")


def layout_row(row_index: int, frame_count: int, frame_width: int, frame_height: int) -> tuple[Frame, ...]:
    """Frames of one sheet row, packed left to right."""
    return tuple(
        Frame(
            x=frame_index * frame_width,
            y=row_index * frame_height,
            width=frame_width,
            height=frame_height,
        )
        for frame_index in range(frame_count)
    )


def build_metadata(
    descriptors: Sequence[AnimationDescriptor],
    cell_size: CellSize,
) -> List[AnimationMetadata]:
    """Lay out one animation per row, in descriptor order."""
    _require_positive_cell(cell_size.width, cell_size.height)
    seen: set[str] = set()
    for descriptor in descriptors:
        if descriptor.frame_count <= 0:
            raise ConfigError(
                f"Animation '{descriptor.name}' must have a positive frame count, "
                f"got {descriptor.frame_count}"
            )
        if descriptor.name in seen:
            raise ConfigError(f"Duplicate animation name: '{descriptor.name}'")
        seen.add(descriptor.name)

    return [
        AnimationMetadata(
            name=descriptor.name,
            frames=layout_row(row_index, descriptor.frame_count, cell_size.width, cell_size.height),
            loop_mode=descriptor.loop_mode,
            transition_to=descriptor.transition_to,
            frame_width=cell_size.width,
            frame_height=cell_size.height,
        )
        for row_index, descriptor in enumerate(descriptors)
    ]


def rebuild_metadata(
    existing: Sequence[AnimationMetadata],
    new_width: int,
    new_height: int,
) -> List[AnimationMetadata]:
    """Recompute every frame rectangle for a new cell size.

    Names, loop modes, transition targets and frame counts are kept; the row
    of each animation is its position in ``existing``.
    """
    _require_positive_cell(new_width, new_height)
    return [
        AnimationMetadata(
            name=animation.name,
            frames=layout_row(row_index, animation.frame_count, new_width, new_height),
            loop_mode=animation.loop_mode,
            transition_to=animation.transition_to,
            frame_width=new_width,
            frame_height=new_height,
        )
        for row_index, animation in enumerate(existing)
    ]


def find_animation(animations: Iterable[AnimationMetadata], name: str) -> Optional[AnimationMetadata]:
    for animation in animations:
        if animation.name == name:
            return animation
    return None


# ----------------------------------------------------------------------
# Document conversion
# ----------------------------------------------------------------------


def _require_int(entry: Mapping[str, Any], key: str, context: str) -> int:
    try:
        return int(entry[key])
    except KeyError as exc:
        raise ConfigError(f"{context}: missing '{key}'") from exc
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{context}: '{key}' must be an integer") from exc


def _parse_loop_mode(value: Any, context: str) -> LoopMode:
    try:
        return LoopMode.parse(value if value is not None else LoopMode.LOOP)
    except ValueError as exc:
        raise ConfigError(f"{context}: {exc}") from exc


def _optional_name(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def descriptors_from_document(data: Any) -> List[AnimationDescriptor]:
    """Parse ``[{name, frames, loop, transitionTo}]`` animation requests."""
    if isinstance(data, Mapping):
        data = data.get("animations", [])
    if not isinstance(data, list):
        raise ConfigError("Animation descriptors must be a JSON array")

    descriptors: List[AnimationDescriptor] = []
    for position, entry in enumerate(data):
        context = f"Descriptor #{position}"
        if not isinstance(entry, Mapping):
            raise ConfigError(f"{context}: expected an object")
        name = _optional_name(entry.get("name"))
        if name is None:
            raise ConfigError(f"{context}: missing 'name'")
        descriptors.append(
            AnimationDescriptor(
                name=name,
                frame_count=_require_int(entry, "frames", context),
                loop_mode=_parse_loop_mode(entry.get("loop"), context),
                transition_to=_optional_name(entry.get("transitionTo")),
            )
        )
    return descriptors


def metadata_to_document(animations: Sequence[AnimationMetadata]) -> List[dict]:
    document: List[dict] = []
    for animation in animations:
        entry: dict = {
            "animationName": animation.name,
            "frames": [
                {"x": frame.x, "y": frame.y, "width": frame.width, "height": frame.height}
                for frame in animation.frames
            ],
            "loop": animation.loop_mode.value,
            "frameWidth": animation.frame_width,
            "frameHeight": animation.frame_height,
        }
        if animation.transition_to is not None:
            entry["transitionTo"] = animation.transition_to
        document.append(entry)
    return document


def metadata_from_document(data: Any) -> List[AnimationMetadata]:
    if not isinstance(data, list):
        raise ConfigError("Animation metadata must be a JSON array")

    animations: List[AnimationMetadata] = []
    seen: set[str] = set()
    for position, entry in enumerate(data):
        context = f"Animation #{position}"
        if not isinstance(entry, Mapping):
            raise ConfigError(f"{context}: expected an object")
        name = _optional_name(entry.get("animationName"))
        if name is None:
            raise ConfigError(f"{context}: missing 'animationName'")
        if name in seen:
            raise ConfigError(f"Duplicate animation name: '{name}'")
        seen.add(name)

        raw_frames = entry.get("frames") or []
        if not isinstance(raw_frames, list):
            raise ConfigError(f"{context}: 'frames' must be an array")
        frames = tuple(
            Frame(
                x=_require_int(raw, "x", context),
                y=_require_int(raw, "y", context),
                width=_require_int(raw, "width", context),
                height=_require_int(raw, "height", context),
            )
            for raw in raw_frames
        )
        frame_width = _require_int(entry, "frameWidth", context)
        frame_height = _require_int(entry, "frameHeight", context)
        if frame_width <= 0 or frame_height <= 0:
            raise ConfigError(
                f"{context}: cell dimensions must be positive, got {frame_width}x{frame_height}"
            )
        for frame_index, frame in enumerate(frames):
            if frame.width != frame_width or frame.height != frame_height:
                raise ConfigError(
                    f"{context}: frame {frame_index} is {frame.width}x{frame.height}, "
                    f"expected {frame_width}x{frame_height}"
                )
        animations.append(
            AnimationMetadata(
                name=name,
                frames=frames,
                loop_mode=_parse_loop_mode(entry.get("loop"), context),
                transition_to=_optional_name(entry.get("transitionTo")),
                frame_width=frame_width,
                frame_height=frame_height,
            )
        )
    return animations


def save_metadata(animations: Sequence[AnimationMetadata], path: Path | str) -> Path:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    with target.open("w", encoding="utf-8") as handle:
        json.dump(metadata_to_document(animations), handle, indent=2)
    LOGGER.info("Wrote metadata for %s animations to %s", len(animations), target)
    return target


def _read_json(source: Path, kind: str) -> Any:
    try:
        return json.loads(source.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"Could not read {kind} file {source}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid {kind} JSON in {source}: {exc}") from exc


def load_metadata(path: Path | str) -> List[AnimationMetadata]:
    return metadata_from_document(_read_json(Path(path), "metadata"))


def load_descriptors(path: Path | str) -> List[AnimationDescriptor]:
    return descriptors_from_document(_read_json(Path(path), "descriptor"))


__all__ = [
    "DEFAULT_CELL_SIZE",
    "build_metadata",
    "descriptors_from_document",
    "find_animation",
    "layout_row",
    "load_descriptors",
    "load_metadata",
    "metadata_from_document",
    "metadata_to_document",
    "parse_cell_size",
    "parse_resolution",
    "rebuild_metadata",
    "save_metadata",
]
