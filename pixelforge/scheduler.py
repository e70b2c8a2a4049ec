"""Interval ticker delivering playback advances through APScheduler."""

from __future__ import annotations

import logging
import threading
import uuid
from typing import Any, Callable, Optional, Sequence

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from pixelforge.models import AnimationMetadata, TransitionEvent
from pixelforge.playback import PlaybackInstance, frame_period_ms, resolve_transition

FrameCallback = Callable[[int], None]
TransitionCallback = Callable[[TransitionEvent], None]


class PlaybackTicker:
    """Drive one playback instance at ``1000ms / fps``.

    Exactly one interval job exists per ticker. Rebinding the animation or
    the rate removes the previous job before the new one is installed, under
    a single lock, and ticks from a superseded job are discarded by
    generation.
    """

    def __init__(
        self,
        instance: PlaybackInstance,
        *,
        scheduler: Optional[Any] = None,
        on_frame: Optional[FrameCallback] = None,
        on_transition: Optional[TransitionCallback] = None,
        animations: Optional[Sequence[AnimationMetadata]] = None,
        logger: Optional[logging.Logger] = None,
        job_id: Optional[str] = None,
    ) -> None:
        self.instance = instance
        self.scheduler = scheduler if scheduler is not None else BackgroundScheduler()
        self._owns_scheduler = scheduler is None
        self.on_frame = on_frame
        self.on_transition = on_transition
        self.animations = animations
        self.logger = logger or logging.getLogger(__name__)
        self.job_id = job_id or f"playback-{uuid.uuid4().hex[:8]}"

        self._lock = threading.RLock()
        self._job: Optional[Any] = None
        self._generation = 0

    # ------------------------------------------------------------------
    # Job management
    # ------------------------------------------------------------------

    @property
    def running(self) -> bool:
        return self._job is not None

    def _install_job(self) -> None:
        self._generation += 1
        period_seconds = frame_period_ms(self.instance.state.fps) / 1000.0
        self._job = self.scheduler.add_job(
            self._tick,
            trigger=IntervalTrigger(seconds=period_seconds),
            args=[self._generation],
            id=self.job_id,
            name=f"Playback '{self.instance.animation.name}'",
            max_instances=1,
        )
        self.logger.debug(
            "Installed ticker %s for '%s' at %.2f fps",
            self.job_id,
            self.instance.animation.name,
            self.instance.state.fps,
        )

    def _remove_job(self) -> None:
        if self._job is None:
            return
        self._job.remove()
        self._job = None
        self._generation += 1

    def start(self) -> None:
        with self._lock:
            if self._job is not None:
                return
            if not self.scheduler.running:
                self.scheduler.start()
            self._install_job()

    def stop(self) -> None:
        with self._lock:
            self._remove_job()

    def shutdown(self) -> None:
        self.stop()
        if self._owns_scheduler and self.scheduler.running:
            self.scheduler.shutdown(wait=False)

    def rebind(
        self,
        animation: Optional[AnimationMetadata] = None,
        *,
        fps: Optional[float] = None,
    ) -> bool:
        """Swap the bound animation and/or rate without a double-ticking window.

        Returns ``True`` when the playback cursor was reset.
        """
        with self._lock:
            was_running = self._job is not None
            self._remove_job()
            reset = False
            if animation is not None:
                reset = self.instance.bind(animation)
            if fps is not None:
                self.instance.set_fps(fps)
            if was_running:
                self._install_job()
            return reset

    def pause(self) -> None:
        self.instance.pause()

    def resume(self) -> None:
        self.instance.resume()

    # ------------------------------------------------------------------
    # Tick delivery
    # ------------------------------------------------------------------

    def _tick(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation or not self.instance.state.playing:
                return

            frame_index, event = self.instance.advance()
            if self.on_frame is not None:
                self.on_frame(frame_index)
            if event is None:
                return

            self.logger.info(
                "Animation '%s' finished; transition to '%s'",
                event.source_name,
                event.target_name,
            )
            if self.on_transition is not None:
                self.on_transition(event)
            if self.animations is not None:
                target = resolve_transition(self.animations, event)
                if target is not None:
                    self.rebind(target)


__all__ = ["PlaybackTicker"]
