"""Progress and ETA formatting for batch sheet analysis."""

from __future__ import annotations

from datetime import datetime, timedelta
from time import perf_counter
from typing import Optional


def _format_duration(seconds: float) -> str:
    total_seconds = int(round(seconds))
    if total_seconds <= 0:
        return "<1s"
    minutes, seconds_remaining = divmod(total_seconds, 60)
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours}h{minutes:02d}m{seconds_remaining:02d}s"
    if minutes:
        return f"{minutes}m{seconds_remaining:02d}s"
    return f"{seconds_remaining}s"


def eta_string(elapsed: float, completed: int, total: int, *, now: Optional[datetime] = None) -> str:
    """Estimate the remaining time from the share of sheets finished so far."""
    if total <= 0 or completed <= 0 or completed > total or elapsed <= 0.0:
        return "ETA estimating"

    remaining = max(0.0, elapsed * (total - completed) / completed)
    finish_time = (now or datetime.now()) + timedelta(seconds=remaining)
    return f"ETA {_format_duration(remaining)} (finish {finish_time.strftime('%H:%M:%S')})"


class ProgressTracker:
    """Count completed items and decide when a progress line is due."""

    def __init__(self, total: int, *, steps: int = 20) -> None:
        self.total = total
        self.completed = 0
        self.interval = max(1, total // max(1, steps))
        self._started = perf_counter()

    def tick(self) -> bool:
        self.completed += 1
        return self.completed % self.interval == 0 or self.completed == self.total

    @property
    def percent(self) -> float:
        return (self.completed / self.total) * 100.0 if self.total else 100.0

    def eta(self) -> str:
        return eta_string(perf_counter() - self._started, self.completed, self.total)


__all__ = ["ProgressTracker", "eta_string"]
