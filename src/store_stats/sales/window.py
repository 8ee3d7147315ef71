"""Reporting window resolution.

The yearly report covers one fiscal year. Its start is the first day of the
configured fiscal start month; its end depends on the window policy.

Examples:
    >>> from datetime import datetime
    >>> w = resolve_window(datetime(2025, 3, 10, 14, 30), 9)
    >>> w.start, w.end
    (datetime.datetime(2024, 9, 1, 0, 0), datetime.datetime(2025, 3, 10, 23, 59, 59))
"""

from __future__ import annotations

from datetime import datetime, timedelta

from store_stats.config import WINDOW_POLICIES
from store_stats.exceptions import ConfigError
from store_stats.sales.types import ReportingWindow


def fiscal_year_start(now: datetime, fiscal_start_month: int) -> datetime:
    """Return 00:00:00 on day 1 of the fiscal start month.

    This calendar year if ``now`` is past the fiscal start month,
    otherwise last calendar year.
    """
    if not 1 <= fiscal_start_month <= 12:
        raise ConfigError(
            f"fiscal_start_month must be between 1 and 12, got {fiscal_start_month}"
        )
    year = now.year if now.month > fiscal_start_month else now.year - 1
    return datetime(year, fiscal_start_month, 1, tzinfo=now.tzinfo)


def fiscal_year_close(start: datetime) -> datetime:
    """Return 23:59:59 on the last day of the fiscal year beginning at ``start``."""
    next_start = datetime(start.year + 1, start.month, 1, tzinfo=start.tzinfo)
    return next_start - timedelta(seconds=1)


def end_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=23, minute=59, second=59, microsecond=0)


def resolve_window(
    now: datetime,
    fiscal_start_month: int,
    policy: str = "to_date",
) -> ReportingWindow:
    """Compute the reporting window for a run happening at ``now``.

    Args:
        now: Current timestamp in store local time. An aware timestamp
            yields a window in the same timezone.
        fiscal_start_month: Calendar month (1-12) the fiscal year starts in.
        policy: "to_date" ends the window at the end of today;
            "fiscal_close" ends it at the close of the fiscal year that
            begins at the window start.

    Returns:
        ReportingWindow with start < end.

    Raises:
        ConfigError: If the month is out of range or the policy is unknown.
    """
    if policy not in WINDOW_POLICIES:
        raise ConfigError(
            f"Invalid window policy '{policy}'. Must be one of: {', '.join(WINDOW_POLICIES)}"
        )

    start = fiscal_year_start(now, fiscal_start_month)
    if policy == "to_date":
        end = end_of_day(now)
    else:
        end = fiscal_year_close(start)

    return ReportingWindow(start=start, end=end)
