from __future__ import annotations

import logging
import random
import time
from typing import Callable, Optional

import schedule

LOGGER = logging.getLogger(__name__)


class PassScheduler:
    """Run a task repeatedly with a freshly drawn random delay between runs.

    The first run happens immediately. Each following run is registered as
    a one-shot ``schedule`` job only after the previous run has returned, so
    runs never overlap. An exception escaping the task is logged and the
    next run is scheduled as usual.
    """

    def __init__(
        self,
        task: Callable[[], object],
        min_delay_seconds: int,
        max_delay_seconds: int,
        rng: Optional[random.Random] = None,
        sleep: Callable[[float], None] = time.sleep,
        scheduler: Optional[schedule.Scheduler] = None,
    ):
        if min_delay_seconds < 0 or min_delay_seconds > max_delay_seconds:
            raise ValueError(f"Invalid delay window [{min_delay_seconds}, {max_delay_seconds}]")
        self._task = task
        self._min_delay = min_delay_seconds
        self._max_delay = max_delay_seconds
        self._rng = rng or random.Random()
        self._sleep = sleep
        self._scheduler = scheduler or schedule.Scheduler()
        self.passes_run = 0

    @property
    def scheduler(self) -> schedule.Scheduler:
        return self._scheduler

    def next_delay(self) -> int:
        return self._rng.randint(self._min_delay, self._max_delay)

    def run(self, max_passes: int | None = None) -> int:
        """Block running passes until ``max_passes`` is reached (forever if ``None``)."""

        self._run_pass()
        while max_passes is None or self.passes_run < max_passes:
            idle = self._scheduler.idle_seconds
            if idle is None:
                break
            if idle > 0:
                self._sleep(idle)
            self._scheduler.run_pending()
        return self.passes_run

    def _run_pass(self):
        try:
            self._task()
        except Exception:  # noqa: BLE001
            LOGGER.exception("Pass %s failed; will retry on the next scheduled run", self.passes_run + 1)
        finally:
            self.passes_run += 1
            self._schedule_next()
        return schedule.CancelJob

    def _schedule_next(self) -> None:
        delay = self.next_delay()
        LOGGER.info("Next run in %s seconds...", delay)
        self._scheduler.every(delay).seconds.do(self._run_pass)
