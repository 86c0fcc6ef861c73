"""
reporting/drop_alerts.py

Day-over-day drop alerts per (offer, partner, code).

Alert rules
-----------
For every (offer, partner, code) with at least ``MIN_MONTH_VOLUME``
conversions in the month, each day ``d`` from 2 up to the cutoff is
compared with day ``d - 1``:

    drop              prev > 20  and  cur <= prev * 0.5
    zero after sales  prev >= 6  and  cur == 0

An alert is only raised when the offer as a whole recorded at least one
conversion on day ``d``. A day with no data for the entire offer usually
means the export has not caught up yet, not that the code collapsed.

These thresholds are deliberately stricter than the per-cell drop
highlight in :mod:`anomaly.detectors`; the two serve different views.
"""

from __future__ import annotations

import logging
from typing import Final

from reporting.dates import day_label
from reporting.models import DropAlert, DropAlertLabel, DropAlertReport, TargetMonth
from reporting.scoping import (
    COLUMN_CODE,
    COLUMN_DATE,
    COLUMN_OFFER,
    COLUMN_PARTNER,
    scope_rows,
)

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = (COLUMN_OFFER, COLUMN_PARTNER, COLUMN_DATE, COLUMN_CODE)

MIN_MONTH_VOLUME: Final[int] = 5
DROP_MIN_PREVIOUS: Final[int] = 20
DROP_MAX_RATIO: Final[float] = 0.5
ZERO_AFTER_SALES_MIN_PREVIOUS: Final[int] = 6

_Key = tuple[str, str, str]


def drop_labels(prev_count: int, count: int) -> tuple[str, ...]:
    """
    Return the names of the alert predicates that hold for one day pair.
    """

    labels: list[str] = []
    if prev_count > DROP_MIN_PREVIOUS and count <= prev_count * DROP_MAX_RATIO:
        labels.append(DropAlertLabel.DROP)
    if prev_count >= ZERO_AFTER_SALES_MIN_PREVIOUS and count == 0:
        labels.append(DropAlertLabel.ZERO_AFTER_SALES)
    return tuple(labels)


def _evaluate_key(
    key: _Key,
    counts: list[int],
    offer_counts: list[int],
    last_day: int,
    month: TargetMonth,
) -> list[DropAlert]:
    offer, partner, code = key
    alerts: list[DropAlert] = []
    for day in range(2, last_day + 1):
        prev_count = counts[day - 2]
        count = counts[day - 1]
        if offer_counts[day - 1] <= 0:
            continue
        labels = drop_labels(prev_count, count)
        if not labels:
            continue
        alerts.append(
            DropAlert(
                offer=offer,
                partner=partner,
                code=code,
                day=day,
                prev_day=day - 1,
                day_count=count,
                prev_day_count=prev_count,
                day_label=day_label(month, day),
                prev_day_label=day_label(month, day - 1),
                labels=labels,
            )
        )
    return alerts


def build_drop_alerts(csv_text: str, max_past_day: int | None = None) -> DropAlertReport:
    """
    Build the drop alert list for the target month.

    Parameters
    ----------
    csv_text:
        Whole CSV export.
    max_past_day:
        Last day eligible for evaluation. ``None`` evaluates the whole
        month. Days after it never produce alerts.

    Returns
    -------
    DropAlertReport
        Alerts ordered by day, latest first. Alerts on the same day keep
        the order in which their keys first appeared in the file.
    """

    scoped = scope_rows(csv_text, REQUIRED_COLUMNS)
    if scoped.month is None:
        return DropAlertReport(month=None, max_past_day=max_past_day, **scoped.counters())

    days = scoped.month.days_in_month
    key_counts: dict[_Key, list[int]] = {}
    offer_counts: dict[str, list[int]] = {}
    for event in scoped.events:
        key = (event.offer, event.partner, event.code)
        key_counts.setdefault(key, [0] * days)[event.day - 1] += 1
        offer_counts.setdefault(event.offer, [0] * days)[event.day - 1] += 1

    last_day = days if max_past_day is None else min(days, max_past_day)
    alerts: list[DropAlert] = []
    seen: set[tuple[str, str, str, int]] = set()
    for key, counts in key_counts.items():
        if sum(counts) < MIN_MONTH_VOLUME:
            continue
        for alert in _evaluate_key(key, counts, offer_counts[key[0]], last_day, scoped.month):
            alert_key = (alert.offer, alert.partner, alert.code, alert.day)
            if alert_key in seen:
                continue
            seen.add(alert_key)
            alerts.append(alert)

    alerts.sort(key=lambda alert: alert.day, reverse=True)
    logger.debug(
        "Drop alerts built month=%s keys=%d alerts=%d last_day=%d",
        scoped.month.label,
        len(key_counts),
        len(alerts),
        last_day,
    )
    return DropAlertReport(
        month=scoped.month,
        **scoped.counters(),
        alerts=tuple(alerts),
        max_past_day=max_past_day,
    )
