"""Daily trigger for the yearly sales job.

The job only sees the ``Scheduler`` protocol. ``DailyScheduler`` is a small
in-process implementation: callers either drive it with ``run_pending`` or
let ``run_forever`` sleep until the next due time.
"""

from __future__ import annotations

import logging
import time as _time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import Optional, Protocol

from store_stats.exceptions import StoreStatsError

logger = logging.getLogger(__name__)

Job = Callable[[], object]


class Scheduler(Protocol):
    def register_daily(self, job: Job, at: time, name: Optional[str] = None) -> None:
        ...


def next_run_at(now: datetime, at: time) -> datetime:
    """Return the first occurrence of ``at`` strictly after ``now``.

    Examples:
        >>> next_run_at(datetime(2025, 1, 1, 12, 0), time(0, 0))
        datetime.datetime(2025, 1, 2, 0, 0)
    """
    candidate = datetime.combine(now.date(), at)
    if candidate <= now:
        candidate += timedelta(days=1)
    return candidate


@dataclass
class ScheduledJob:
    name: str
    job: Job
    at: time
    next_run: datetime


class DailyScheduler:
    """Run registered jobs once per calendar day at a fixed time.

    Errors raised by a job are logged and do not stop the scheduler; the
    next attempt happens at the next daily slot.
    """

    def __init__(
        self,
        clock: Callable[[], datetime] = datetime.now,
        sleep: Callable[[float], None] = _time.sleep,
    ) -> None:
        self.clock = clock
        self.sleep = sleep
        self.jobs: list[ScheduledJob] = []

    def register_daily(self, job: Job, at: time, name: Optional[str] = None) -> None:
        job_name = name or getattr(job, "__name__", "job")
        entry = ScheduledJob(job_name, job, at, next_run_at(self.clock(), at))
        self.jobs.append(entry)
        logger.info("Registered daily job '%s' at %s (next run %s)", job_name, at, entry.next_run)

    def run_pending(self, now: Optional[datetime] = None) -> int:
        """Run every job that is due at ``now``. Returns the number run."""
        now = now or self.clock()
        ran = 0
        for entry in self.jobs:
            if entry.next_run > now:
                continue
            logger.info("Running scheduled job '%s'", entry.name)
            try:
                entry.job()
            except StoreStatsError as e:
                logger.error("Scheduled job '%s' failed: %s", entry.name, e.cause)
            except Exception:
                logger.exception("Scheduled job '%s' crashed", entry.name)
            entry.next_run = next_run_at(now, entry.at)
            ran += 1
        return ran

    def seconds_until_next(self, now: Optional[datetime] = None) -> float:
        if not self.jobs:
            raise ValueError("No jobs registered")
        now = now or self.clock()
        due = min(entry.next_run for entry in self.jobs)
        return max(0.0, (due - now).total_seconds())

    def run_forever(self, max_iterations: Optional[int] = None) -> None:
        """Sleep until the next job is due, run it, repeat."""
        iterations = 0
        while max_iterations is None or iterations < max_iterations:
            self.sleep(self.seconds_until_next())
            self.run_pending()
            iterations += 1
