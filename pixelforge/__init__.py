"""
Sprite-sheet geometry detection, metadata building and animation playback.
"""

from .errors import ConfigError, InputError, InputErrorReason, PixelForgeError, StateError
from .grid import detect_grid
from .metadata import (
    build_metadata,
    load_metadata,
    metadata_from_document,
    metadata_to_document,
    rebuild_metadata,
    save_metadata,
)
from .models import (
    AnimationDescriptor,
    AnimationMetadata,
    BoundingBox,
    CellSize,
    Direction,
    ExtractedPart,
    Frame,
    LoopMode,
    PlaybackState,
    TransitionEvent,
)
from .playback import PlaybackInstance, advance, resolve_transition, step
from .raster import PixelBuffer, crop_animation_strip
from .segmentation import find_components, segment_parts

__all__ = [
    "AnimationDescriptor",
    "AnimationMetadata",
    "BoundingBox",
    "CellSize",
    "ConfigError",
    "Direction",
    "ExtractedPart",
    "Frame",
    "InputError",
    "InputErrorReason",
    "LoopMode",
    "PixelBuffer",
    "PixelForgeError",
    "PlaybackInstance",
    "PlaybackState",
    "StateError",
    "TransitionEvent",
    "advance",
    "build_metadata",
    "crop_animation_strip",
    "detect_grid",
    "find_components",
    "load_metadata",
    "metadata_from_document",
    "metadata_to_document",
    "rebuild_metadata",
    "resolve_transition",
    "save_metadata",
    "segment_parts",
    "step",
]
