"""Data models shared across the sprite-sheet engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

import numpy as np


class LoopMode(str, Enum):
    """Playback repeat policy of an animation."""

    LOOP = "loop"
    ONCE = "once"
    PINGPONG = "pingpong"

    @classmethod
    def parse(cls, value: object) -> "LoopMode":
        if isinstance(value, LoopMode):
            return value
        text = str(value).strip().lower()
        for mode in cls:
            if mode.value == text:
                return mode
        raise ValueError(f"Unknown loop mode: {value!r}")


class Direction(str, Enum):
    FORWARD = "forward"
    BACKWARD = "backward"


@dataclass(frozen=True)
class Frame:
    """Pixel rectangle holding one animation step."""

    x: int
    y: int
    width: int
    height: int


@dataclass(frozen=True)
class CellSize:
    """Shared frame dimensions for every frame of a sheet."""

    width: int
    height: int

    def __str__(self) -> str:
        return f"{self.width}x{self.height}"


@dataclass(frozen=True)
class AnimationDescriptor:
    """Requested animation row before any geometry is known."""

    name: str
    frame_count: int
    loop_mode: LoopMode = LoopMode.LOOP
    transition_to: Optional[str] = None


@dataclass(frozen=True)
class AnimationMetadata:
    """Geometry and playback policy of one animation row."""

    name: str
    frames: Tuple[Frame, ...]
    loop_mode: LoopMode
    frame_width: int
    frame_height: int
    transition_to: Optional[str] = None

    @property
    def frame_count(self) -> int:
        return len(self.frames)

    def identity(self) -> Tuple[str, LoopMode, Tuple[Frame, ...], int, int]:
        """Tuple deciding whether a bound playback state must restart."""
        return (self.name, self.loop_mode, self.frames, self.frame_width, self.frame_height)


@dataclass(frozen=True)
class BoundingBox:
    """Inclusive pixel bounds of a connected region."""

    min_x: int
    min_y: int
    max_x: int
    max_y: int

    @property
    def width(self) -> int:
        return self.max_x - self.min_x + 1

    @property
    def height(self) -> int:
        return self.max_y - self.min_y + 1

    @property
    def area(self) -> int:
        return self.width * self.height


@dataclass(frozen=True)
class ConnectedComponent:
    bounding_box: BoundingBox
    pixel_count: int


@dataclass
class ExtractedPart:
    """A discovered sprite region together with its RGBA crop."""

    index: int
    bounding_box: BoundingBox
    pixel_count: int
    pixels: np.ndarray = field(repr=False)


@dataclass(frozen=True)
class TransitionEvent:
    """Signal that a finished ``once`` animation asks to hand off."""

    source_name: str
    target_name: str


@dataclass
class PlaybackState:
    """Mutable per-display playback cursor."""

    animation: AnimationMetadata
    frame_index: int = 0
    direction: Direction = Direction.FORWARD
    playing: bool = True
    fps: float = 12.0
    carry_ms: float = 0.0

    def reset(self) -> None:
        self.frame_index = 0
        self.direction = Direction.FORWARD
        self.carry_ms = 0.0

    def current_frame(self) -> Optional[Frame]:
        """Return the frame to render, or ``None`` for an empty animation."""
        frames = self.animation.frames
        if not frames or not 0 <= self.frame_index < len(frames):
            return None
        return frames[self.frame_index]


__all__ = [
    "AnimationDescriptor",
    "AnimationMetadata",
    "BoundingBox",
    "CellSize",
    "ConnectedComponent",
    "Direction",
    "ExtractedPart",
    "Frame",
    "LoopMode",
    "PlaybackState",
    "TransitionEvent",
]
