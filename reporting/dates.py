"""
reporting/dates.py

Date handling for the export's ``Date`` column (``"Mar 7, 2024"``).
"""

from __future__ import annotations

import calendar
import re
from dataclasses import dataclass
from typing import Final

from reporting.models import TargetMonth

MONTHS: Final[dict[str, int]] = {
    "Jan": 0,
    "Feb": 1,
    "Mar": 2,
    "Apr": 3,
    "May": 4,
    "Jun": 5,
    "Jul": 6,
    "Aug": 7,
    "Sep": 8,
    "Oct": 9,
    "Nov": 10,
    "Dec": 11,
}

MONTH_LABELS: Final[tuple[str, ...]] = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

_WHITESPACE = re.compile(r"\s+")
_DATE_PATTERN = re.compile(r"^([A-Za-z]{3})\s+(\d{1,2}),\s+(\d{4})$", re.ASCII)


@dataclass(frozen=True)
class DateParts:
    month_index: int
    day: int
    year: int


def parse_date_parts(value: str) -> DateParts | None:
    """
    Parse ``"<Mon> <D>, <YYYY>"`` into its parts.

    Internal whitespace is collapsed first. The month abbreviation is
    matched case-sensitively. Returns ``None`` for anything else; callers
    treat that as "skip this row", not as an error.
    """

    cleaned = _WHITESPACE.sub(" ", value).strip()
    match = _DATE_PATTERN.match(cleaned)
    if match is None:
        return None

    month_index = MONTHS.get(match.group(1))
    if month_index is None:
        return None

    return DateParts(
        month_index=month_index,
        day=int(match.group(2)),
        year=int(match.group(3)),
    )


def days_in_month(year: int, month_index: int) -> int:
    if month_index == 1 and calendar.isleap(year):
        return 29
    return calendar.mdays[month_index + 1]


def is_valid_day(parts: DateParts) -> bool:
    return 1 <= parts.day <= days_in_month(parts.year, parts.month_index)


def month_label(month_index: int, year: int) -> str:
    return f"{MONTH_LABELS[month_index]} {year}"


def target_month_for(parts: DateParts) -> TargetMonth:
    return TargetMonth(
        month_index=parts.month_index,
        year=parts.year,
        days_in_month=days_in_month(parts.year, parts.month_index),
        label=month_label(parts.month_index, parts.year),
    )


def day_label(month: TargetMonth | None, day: int) -> str:
    """
    Format one day of the target month, e.g. ``"January 5 2024"``.
    """

    if month is None:
        return str(day)
    return f"{MONTH_LABELS[month.month_index]} {day} {month.year}"
