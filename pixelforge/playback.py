"""Deterministic frame-stepping state machine for animation playback."""

from __future__ import annotations

import logging
from typing import NamedTuple, Optional, Sequence, Tuple

from pixelforge.errors import ConfigError, StateError
from pixelforge.metadata import find_animation
from pixelforge.models import (
    AnimationMetadata,
    Direction,
    Frame,
    LoopMode,
    PlaybackState,
    TransitionEvent,
)

LOGGER = logging.getLogger(__name__)

DEFAULT_FPS = 12.0


class StepResult(NamedTuple):
    frame_index: int
    direction: Direction
    transition: Optional[TransitionEvent]


def frame_period_ms(fps: float) -> float:
    if fps <= 0:
        raise ConfigError(f"Playback rate must be positive, got {fps}")
    return 1000.0 / fps


def step(frame_index: int, direction: Direction, animation: AnimationMetadata) -> StepResult:
    """Compute the cursor after one tick from ``(index, direction, loop mode)``."""
    frame_count = animation.frame_count
    if frame_count <= 0:
        raise StateError(f"Animation '{animation.name}' has no frames to step through.")

    last = frame_count - 1
    current = min(max(frame_index, 0), last)
    mode = animation.loop_mode

    if mode is LoopMode.ONCE:
        if current >= last and animation.transition_to:
            event = TransitionEvent(source_name=animation.name, target_name=animation.transition_to)
            return StepResult(last, direction, event)
        return StepResult(min(current + 1, last), direction, None)

    if mode is LoopMode.PINGPONG:
        if last == 0:
            return StepResult(0, Direction.FORWARD, None)
        if direction is Direction.FORWARD:
            if current >= last:
                return StepResult(current - 1, Direction.BACKWARD, None)
            return StepResult(current + 1, Direction.FORWARD, None)
        if current <= 0:
            return StepResult(current + 1, Direction.FORWARD, None)
        return StepResult(current - 1, Direction.BACKWARD, None)

    return StepResult((current + 1) % frame_count, direction, None)


def advance(
    state: PlaybackState,
    elapsed_ms: Optional[float] = None,
) -> Tuple[int, Optional[TransitionEvent]]:
    """Move ``state`` forward and report the new index and any transition.

    Without ``elapsed_ms`` exactly one step is taken. Otherwise the elapsed
    time is added to the state's carry and one step is taken per whole frame
    period, keeping the remainder for the next call. Stepping stops at the
    first transition, so at most one event is returned. An animation without
    frames never advances.
    """
    animation = state.animation
    if animation.frame_count == 0:
        return 0, None

    if elapsed_ms is None:
        steps = 1
    else:
        period = frame_period_ms(state.fps)
        state.carry_ms += max(0.0, float(elapsed_ms))
        steps = int(state.carry_ms // period)
        state.carry_ms -= steps * period

    event: Optional[TransitionEvent] = None
    for _ in range(steps):
        result = step(state.frame_index, state.direction, animation)
        state.frame_index = result.frame_index
        state.direction = result.direction
        if result.transition is not None:
            event = result.transition
            break

    return state.frame_index, event


def resolve_transition(
    animations: Sequence[AnimationMetadata],
    event: TransitionEvent,
) -> Optional[AnimationMetadata]:
    """Look up a transition target; unknown names resolve to ``None``."""
    target = find_animation(animations, event.target_name)
    if target is None:
        LOGGER.warning(
            "Animation '%s' requested transition to unknown animation '%s'; ignoring",
            event.source_name,
            event.target_name,
        )
    return target


class PlaybackInstance:
    """Playback cursor bound to one animation display."""

    def __init__(
        self,
        animation: AnimationMetadata,
        *,
        fps: float = DEFAULT_FPS,
        playing: bool = True,
    ) -> None:
        frame_period_ms(fps)
        self.state = PlaybackState(animation=animation, fps=float(fps), playing=playing)

    @property
    def animation(self) -> AnimationMetadata:
        return self.state.animation

    @property
    def frame_index(self) -> int:
        return self.state.frame_index

    def bind(self, animation: AnimationMetadata) -> bool:
        """Attach ``animation``; restart only when its identity changed.

        Returns ``True`` when the cursor was reset.
        """
        changed = animation.identity() != self.state.animation.identity()
        self.state.animation = animation
        if changed:
            self.state.reset()
            LOGGER.debug("Playback rebound to '%s'; cursor reset", animation.name)
        return changed

    def set_fps(self, fps: float) -> None:
        frame_period_ms(fps)
        self.state.fps = float(fps)
        self.state.carry_ms = 0.0

    def pause(self) -> None:
        self.state.playing = False

    def resume(self) -> None:
        self.state.playing = True

    def advance(self, elapsed_ms: Optional[float] = None) -> Tuple[int, Optional[TransitionEvent]]:
        return advance(self.state, elapsed_ms)

    def current_frame(self) -> Optional[Frame]:
        return self.state.current_frame()


__all__ = [
    "DEFAULT_FPS",
    "PlaybackInstance",
    "StepResult",
    "advance",
    "frame_period_ms",
    "resolve_transition",
    "step",
]
