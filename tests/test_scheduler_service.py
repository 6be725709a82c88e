from __future__ import annotations

import random
from datetime import timedelta

import pytest
import schedule

from services.scheduler_service import PassScheduler


def _fast_forward(scheduler: schedule.Scheduler, slept: list):
    def sleep(seconds: float) -> None:
        slept.append(seconds)
        for job in scheduler.jobs:
            job.next_run -= timedelta(seconds=seconds)

    return sleep


def test_delays_are_drawn_within_window() -> None:
    runner = PassScheduler(lambda: None, 45, 120, rng=random.Random(7))

    delays = [runner.next_delay() for _ in range(200)]

    assert all(45 <= delay <= 120 for delay in delays)
    assert len(set(delays)) > 1


def test_runs_passes_sequentially_with_jitter() -> None:
    backend = schedule.Scheduler()
    slept: list = []
    events: list = []
    rng = random.Random(3)
    expected = random.Random(3)

    def task() -> None:
        events.append(("start", len(events)))
        events.append(("end", len(events)))

    runner = PassScheduler(task, 5, 9, rng=rng, sleep=_fast_forward(backend, slept), scheduler=backend)

    assert runner.run(max_passes=3) == 3
    assert [kind for kind, _ in events] == ["start", "end"] * 3
    assert len(slept) == 2
    for waited in slept:
        assert waited == pytest.approx(expected.randint(5, 9), abs=1)
    # The next pass is already queued, and only one job is ever pending.
    assert len(backend.jobs) == 1


def test_failing_pass_does_not_stop_the_loop() -> None:
    backend = schedule.Scheduler()
    calls: list = []

    def task() -> None:
        calls.append(len(calls))
        if len(calls) == 1:
            raise ConnectionError("gmail unavailable")

    runner = PassScheduler(task, 1, 2, rng=random.Random(1), sleep=_fast_forward(backend, []), scheduler=backend)

    assert runner.run(max_passes=2) == 2
    assert calls == [0, 1]


def test_single_pass_still_queues_the_next_one() -> None:
    backend = schedule.Scheduler()
    runner = PassScheduler(lambda: None, 10, 10, scheduler=backend, sleep=lambda _: None)

    runner.run(max_passes=1)

    assert len(backend.jobs) == 1
    assert backend.jobs[0].interval == 10
    assert backend.jobs[0].unit == "seconds"


def test_invalid_window_is_rejected() -> None:
    with pytest.raises(ValueError):
        PassScheduler(lambda: None, 120, 45)
