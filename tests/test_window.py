"""Tests for reporting window resolution."""

from datetime import datetime, timedelta, timezone

import pytest

from store_stats.exceptions import ConfigError
from store_stats.sales.window import fiscal_year_close, fiscal_year_start, resolve_window


def test_start_is_last_year_when_month_not_past_fiscal_start() -> None:
    window = resolve_window(datetime(2025, 3, 10, 14, 30), 9)
    assert window.start == datetime(2024, 9, 1, 0, 0, 0)
    assert window.end == datetime(2025, 3, 10, 23, 59, 59)


def test_start_is_this_year_when_month_past_fiscal_start() -> None:
    window = resolve_window(datetime(2025, 10, 2, 8, 0), 9)
    assert window.start == datetime(2025, 9, 1)
    assert window.end == datetime(2025, 10, 2, 23, 59, 59)


def test_fiscal_start_month_itself_uses_last_year() -> None:
    # month == fiscal_start_month is not "past" it
    assert fiscal_year_start(datetime(2025, 9, 15), 9) == datetime(2024, 9, 1)


def test_fiscal_close_policy_ends_at_close_of_fiscal_year() -> None:
    window = resolve_window(datetime(2025, 8, 20, 9, 0), 9, policy="fiscal_close")
    assert window.start == datetime(2024, 9, 1)
    assert window.end == datetime(2025, 8, 31, 23, 59, 59)


def test_fiscal_close_for_january_start() -> None:
    assert fiscal_year_close(datetime(2024, 1, 1)) == datetime(2024, 12, 31, 23, 59, 59)


def test_fiscal_close_for_march_start_handles_leap_february() -> None:
    assert fiscal_year_close(datetime(2023, 3, 1)) == datetime(2024, 2, 29, 23, 59, 59)


@pytest.mark.parametrize("policy", ["to_date", "fiscal_close"])
@pytest.mark.parametrize("month", range(1, 13))
def test_window_is_valid_for_every_month(month: int, policy: str) -> None:
    now = datetime(2025, 6, 15, 12, 0)
    window = resolve_window(now, month, policy=policy)
    assert window.start < window.end
    assert window.start.month == month
    assert window.start.day == 1
    assert window.start <= now


def test_resolve_window_is_pure() -> None:
    now = datetime(2025, 2, 1, 6, 0)
    assert resolve_window(now, 4) == resolve_window(now, 4)


@pytest.mark.parametrize("month", [0, 13, -1])
def test_invalid_month_raises(month: int) -> None:
    with pytest.raises(ConfigError):
        resolve_window(datetime(2025, 1, 1), month)


def test_unknown_policy_raises() -> None:
    with pytest.raises(ConfigError, match="Invalid window policy"):
        resolve_window(datetime(2025, 1, 1), 9, policy="calendar")


@pytest.mark.parametrize("policy", ["to_date", "fiscal_close"])
def test_aware_now_gives_window_in_same_timezone(policy: str) -> None:
    tz = timezone(timedelta(hours=1))
    window = resolve_window(datetime(2025, 3, 10, 14, 30, tzinfo=tz), 9, policy=policy)
    assert window.start == datetime(2024, 9, 1, tzinfo=tz)
    assert window.start.tzinfo is tz
    assert window.end.tzinfo is tz
    assert window.start < window.end
