"""Tests for the daily scheduler."""

from datetime import datetime, time

import pytest

from store_stats.exceptions import AggregationError
from store_stats.scheduling import DailyScheduler, next_run_at


def test_next_run_later_today() -> None:
    assert next_run_at(datetime(2025, 5, 1, 1, 0), time(3, 0)) == datetime(2025, 5, 1, 3, 0)


def test_next_run_tomorrow_when_time_passed() -> None:
    assert next_run_at(datetime(2025, 5, 1, 3, 0), time(3, 0)) == datetime(2025, 5, 2, 3, 0)


def test_job_runs_once_per_day() -> None:
    calls: list[int] = []
    scheduler = DailyScheduler(clock=lambda: datetime(2025, 5, 1, 12, 0))
    scheduler.register_daily(lambda: calls.append(1), time(0, 0), name="yearly_sales")

    assert scheduler.run_pending(datetime(2025, 5, 1, 23, 0)) == 0
    assert scheduler.run_pending(datetime(2025, 5, 2, 0, 0)) == 1
    assert scheduler.run_pending(datetime(2025, 5, 2, 6, 0)) == 0
    assert scheduler.run_pending(datetime(2025, 5, 3, 0, 1)) == 1
    assert calls == [1, 1]


def test_job_errors_are_logged_not_raised(caplog: pytest.LogCaptureFixture) -> None:
    def failing_job() -> None:
        raise AggregationError("Lost connection")

    scheduler = DailyScheduler(clock=lambda: datetime(2025, 5, 1, 12, 0))
    scheduler.register_daily(failing_job, time(0, 0))

    with caplog.at_level("ERROR"):
        assert scheduler.run_pending(datetime(2025, 5, 2, 0, 0)) == 1

    assert "Lost connection" in caplog.text
    assert scheduler.jobs[0].next_run == datetime(2025, 5, 3, 0, 0)


def test_run_forever_sleeps_until_due() -> None:
    now = [datetime(2025, 5, 1, 23, 0)]
    slept: list[float] = []
    calls: list[int] = []

    def sleep(seconds: float) -> None:
        slept.append(seconds)
        now[0] = datetime(2025, 5, 2, 0, 0)

    scheduler = DailyScheduler(clock=lambda: now[0], sleep=sleep)
    scheduler.register_daily(lambda: calls.append(1), time(0, 0))
    scheduler.run_forever(max_iterations=1)

    assert slept == [3600.0]
    assert calls == [1]


def test_seconds_until_next_without_jobs() -> None:
    with pytest.raises(ValueError):
        DailyScheduler().seconds_until_next()


def test_unexpected_job_errors_do_not_stop_scheduler(caplog: pytest.LogCaptureFixture) -> None:
    calls: list[str] = []

    def crashing_job() -> None:
        raise RuntimeError("boom")

    scheduler = DailyScheduler(clock=lambda: datetime(2025, 5, 1, 12, 0))
    scheduler.register_daily(crashing_job, time(0, 0), name="crashing")
    scheduler.register_daily(lambda: calls.append("ok"), time(0, 0), name="healthy")

    with caplog.at_level("ERROR"):
        assert scheduler.run_pending(datetime(2025, 5, 2, 0, 0)) == 2

    assert calls == ["ok"]
    assert "crashing" in caplog.text
    assert scheduler.jobs[0].next_run == datetime(2025, 5, 3, 0, 0)
