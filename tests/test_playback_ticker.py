import logging
import sys
from datetime import timedelta
from pathlib import Path
from unittest.mock import patch

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from apscheduler.jobstores.base import ConflictingIdError  # noqa: E402

import pixelforge.scheduler as scheduler_module  # noqa: E402
from pixelforge.metadata import build_metadata  # noqa: E402
from pixelforge.models import AnimationDescriptor, CellSize, LoopMode  # noqa: E402
from pixelforge.playback import PlaybackInstance  # noqa: E402
from pixelforge.scheduler import PlaybackTicker  # noqa: E402


class FakeJob:
    def __init__(self, scheduler, func, trigger, args, id, name, max_instances):
        self.scheduler = scheduler
        self.func = func
        self.trigger = trigger
        self.args = args
        self.id = id
        self.name = name
        self.max_instances = max_instances
        self.removed = False

    def fire(self):
        self.func(*self.args)

    def remove(self):
        self.removed = True
        self.scheduler.events.append(("remove", self.name))


class FakeScheduler:
    def __init__(self):
        self.jobs = []
        self.events = []
        self.running = False
        self.shutdown_called = False

    def add_job(self, func, trigger=None, args=None, id=None, name=None, max_instances=None):
        if any(job.id == id for job in self.active_jobs()):
            raise ConflictingIdError(id)
        job = FakeJob(self, func, trigger, args or [], id, name, max_instances)
        self.jobs.append(job)
        self.events.append(("add", name))
        return job

    def start(self):
        self.running = True

    def shutdown(self, wait=True):
        self.shutdown_called = True
        self.running = False

    def active_jobs(self):
        return [job for job in self.jobs if not job.removed]


SHEET = build_metadata(
    [
        AnimationDescriptor("Idle", 4),
        AnimationDescriptor("Attack", 3, LoopMode.ONCE, "Idle"),
        AnimationDescriptor("Die", 2, LoopMode.ONCE, "Ghost"),
    ],
    CellSize(16, 16),
)
IDLE, ATTACK, DIE = SHEET


def make_ticker(animation, *, fps=10.0, animations=None, on_transition=None):
    scheduler = FakeScheduler()
    frames = []
    ticker = PlaybackTicker(
        PlaybackInstance(animation, fps=fps),
        scheduler=scheduler,
        on_frame=frames.append,
        on_transition=on_transition,
        animations=animations,
        logger=logging.getLogger("ticker-tests"),
    )
    return ticker, scheduler, frames


def test_start_installs_single_interval_job_at_frame_period():
    ticker, scheduler, _ = make_ticker(IDLE, fps=8.0)

    ticker.start()
    ticker.start()

    assert scheduler.running is True
    assert len(scheduler.active_jobs()) == 1
    job = scheduler.active_jobs()[0]
    assert job.trigger.interval == timedelta(milliseconds=125)
    assert job.max_instances == 1


def test_ticks_advance_the_bound_instance():
    ticker, scheduler, frames = make_ticker(IDLE)
    ticker.start()
    job = scheduler.active_jobs()[0]

    for _ in range(5):
        job.fire()

    assert frames == [1, 2, 3, 0, 1]


def test_paused_ticker_skips_ticks_without_mutating_state():
    ticker, scheduler, frames = make_ticker(IDLE)
    ticker.start()
    job = scheduler.active_jobs()[0]
    job.fire()

    ticker.pause()
    job.fire()
    job.fire()
    assert frames == [1]
    assert ticker.instance.frame_index == 1

    ticker.resume()
    job.fire()
    assert frames == [1, 2]


def test_rebind_removes_previous_job_before_installing_new_one():
    ticker, scheduler, _ = make_ticker(IDLE)
    ticker.start()

    reset = ticker.rebind(ATTACK, fps=20.0)

    assert reset is True
    assert scheduler.events[-2:] == [("remove", "Playback 'Idle'"), ("add", "Playback 'Attack'")]
    active = scheduler.active_jobs()
    assert len(active) == 1
    assert active[0].trigger.interval == timedelta(milliseconds=50)


def test_stale_job_ticks_are_discarded_after_rebind():
    ticker, scheduler, frames = make_ticker(IDLE)
    ticker.start()
    stale = scheduler.active_jobs()[0]

    ticker.rebind(ATTACK)
    stale.fire()

    assert frames == []
    assert ticker.instance.frame_index == 0


def test_rebind_while_stopped_does_not_start_ticking():
    ticker, scheduler, _ = make_ticker(IDLE)

    ticker.rebind(ATTACK)

    assert scheduler.jobs == []
    assert ticker.instance.animation is ATTACK


def test_transition_switches_to_named_animation():
    events = []
    ticker, scheduler, frames = make_ticker(ATTACK, animations=SHEET, on_transition=events.append)
    ticker.start()

    for _ in range(3):
        scheduler.active_jobs()[0].fire()

    assert frames == [1, 2, 2]
    assert [event.target_name for event in events] == ["Idle"]
    assert ticker.instance.animation is IDLE
    assert ticker.instance.frame_index == 0

    scheduler.active_jobs()[0].fire()
    assert frames[-1] == 1


def test_unknown_transition_target_keeps_animation_clamped():
    ticker, scheduler, frames = make_ticker(DIE, animations=SHEET)
    ticker.start()
    job = scheduler.active_jobs()[0]

    for _ in range(3):
        job.fire()

    assert frames == [1, 1, 1]
    assert ticker.instance.animation is DIE
    assert len(scheduler.active_jobs()) == 1


def test_transition_without_registry_only_signals():
    events = []
    ticker, scheduler, _ = make_ticker(ATTACK, on_transition=events.append)
    ticker.start()
    job = scheduler.active_jobs()[0]

    for _ in range(4):
        job.fire()

    assert len(events) == 2
    assert ticker.instance.animation is ATTACK


def test_shutdown_leaves_external_scheduler_running():
    ticker, scheduler, _ = make_ticker(IDLE)
    ticker.start()

    ticker.shutdown()

    assert scheduler.active_jobs() == []
    assert scheduler.shutdown_called is False
    assert ticker.running is False


def test_owned_scheduler_is_shut_down():
    fake = FakeScheduler()
    with patch.object(scheduler_module, "BackgroundScheduler", return_value=fake):
        ticker = PlaybackTicker(PlaybackInstance(IDLE))
    ticker.start()

    ticker.shutdown()

    assert fake.shutdown_called is True


def test_tickers_sharing_a_scheduler_get_distinct_jobs():
    scheduler = FakeScheduler()
    idle_frames, attack_frames = [], []
    idle_ticker = PlaybackTicker(PlaybackInstance(IDLE), scheduler=scheduler, on_frame=idle_frames.append)
    attack_ticker = PlaybackTicker(PlaybackInstance(ATTACK), scheduler=scheduler, on_frame=attack_frames.append)

    idle_ticker.start()
    attack_ticker.start()

    idle_job, attack_job = scheduler.active_jobs()
    assert idle_job.id != attack_job.id
    idle_job.fire()
    idle_job.fire()
    attack_job.fire()
    assert idle_frames == [1, 2]
    assert attack_frames == [1]

    attack_ticker.rebind(IDLE)
    assert len(scheduler.active_jobs()) == 2
