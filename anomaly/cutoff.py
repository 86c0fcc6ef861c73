"""
anomaly/cutoff.py

Which days of the target month have complete data.

Today's data is assumed incomplete, so in the current month only days
strictly before today count as past. "Today" is always passed in by the
caller.
"""

from __future__ import annotations

from datetime import date

from reporting.models import TargetMonth


def max_past_day(
    month_index: int | None,
    year: int | None,
    days_in_month: int,
    today: date,
) -> int:
    """
    Return the last day of the month considered past, in ``[0, days_in_month]``.

    - Month before today's month: every day is past.
    - Today's month: ``today.day - 1``.
    - Month after today's month: no day is past.
    - Unknown month (no valid rows): every day is past.
    """

    if month_index is None or year is None:
        return days_in_month

    target = (year, month_index)
    current = (today.year, today.month - 1)
    if target < current:
        return days_in_month
    if target == current:
        return min(max(today.day - 1, 0), days_in_month)
    return 0


def resolve_max_past_day(month: TargetMonth | None, today: date, default_days: int = 31) -> int:
    if month is None:
        return default_days
    return max_past_day(month.month_index, month.year, month.days_in_month, today)
