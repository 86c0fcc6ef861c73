"""
reporting/analysis.py

Flat analysis rows, dimension value sets and dashboard KPIs.

:func:`build_analysis_data` scopes the export once; :func:`filter_rows`
and :func:`summarize_rows` then work on the resulting rows without
touching the CSV again.
"""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

import pandas as pd

from reporting.dates import day_label
from reporting.models import (
    AnalysisData,
    AnalysisFilter,
    AnalysisSummary,
    DailyTotal,
    OfferLastUpdate,
    ParsedEvent,
)
from reporting.scoping import (
    COLUMN_CODE,
    COLUMN_DATE,
    COLUMN_GEO,
    COLUMN_OFFER,
    COLUMN_PARTNER,
    COLUMN_PAYOUT,
    COLUMN_REVENUE,
    COLUMN_SALE_AMOUNT,
    scope_rows,
)

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = (
    COLUMN_OFFER,
    COLUMN_PARTNER,
    COLUMN_DATE,
    COLUMN_CODE,
    COLUMN_GEO,
    COLUMN_PAYOUT,
    COLUMN_REVENUE,
    COLUMN_SALE_AMOUNT,
)

_MONEY_COLUMNS = ("revenue", "payout", "sale_amount")


def build_analysis_data(csv_text: str) -> AnalysisData:
    """
    Collect every in-month row plus the distinct offers, affiliates,
    codes and geos, and the latest day each offer reported.

    ``last_updates`` is ordered by day descending; offers sharing a day
    keep the order in which they first appeared.
    """

    scoped = scope_rows(csv_text, REQUIRED_COLUMNS)
    if scoped.month is None:
        return AnalysisData(month=None, **scoped.counters())

    last_day_by_offer: dict[str, int] = {}
    for event in scoped.events:
        if event.day > last_day_by_offer.get(event.offer, 0):
            last_day_by_offer[event.offer] = event.day

    last_updates = sorted(
        (
            OfferLastUpdate(offer=offer, day=day, label=day_label(scoped.month, day))
            for offer, day in last_day_by_offer.items()
        ),
        key=lambda update: update.day,
        reverse=True,
    )

    events = scoped.events
    return AnalysisData(
        month=scoped.month,
        **scoped.counters(),
        rows=events,
        offers=_distinct(event.offer for event in events),
        affiliates=_distinct(event.partner for event in events),
        codes=_distinct(event.code for event in events),
        geos=_distinct(event.geo for event in events),
        last_updates=tuple(last_updates),
    )


def _distinct(values: Iterable[str]) -> tuple[str, ...]:
    return tuple(sorted(set(values)))


def filter_rows(rows: Sequence[ParsedEvent], selection: AnalysisFilter) -> tuple[ParsedEvent, ...]:
    """
    Apply *selection* to *rows*, keeping their original order.
    """

    dimensions = (selection.offers, selection.affiliates, selection.codes, selection.geos)
    if any(values is not None and not values for values in dimensions):
        return ()

    day_from = selection.day_from
    day_to = selection.day_to
    if day_from is not None and day_to is not None and day_from > day_to:
        day_from, day_to = day_to, day_from

    def _keep(row: ParsedEvent) -> bool:
        if selection.offers is not None and row.offer not in selection.offers:
            return False
        if selection.affiliates is not None and row.partner not in selection.affiliates:
            return False
        if selection.codes is not None and row.code not in selection.codes:
            return False
        if selection.geos is not None and row.geo not in selection.geos:
            return False
        if day_from is not None and row.day < day_from:
            return False
        if day_to is not None and row.day > day_to:
            return False
        return True

    return tuple(row for row in rows if _keep(row))


def rows_to_frame(rows: Sequence[ParsedEvent]) -> pd.DataFrame:
    """
    Build a typed DataFrame with one column per :class:`ParsedEvent` field.
    """

    return pd.DataFrame(
        {
            "offer": pd.Series([row.offer for row in rows], dtype="object"),
            "partner": pd.Series([row.partner for row in rows], dtype="object"),
            "code": pd.Series([row.code for row in rows], dtype="object"),
            "day": pd.Series([row.day for row in rows], dtype="int64"),
            "geo": pd.Series([row.geo for row in rows], dtype="object"),
            "payout": pd.Series([row.payout for row in rows], dtype="float64"),
            "revenue": pd.Series([row.revenue for row in rows], dtype="float64"),
            "sale_amount": pd.Series([row.sale_amount for row in rows], dtype="float64"),
        }
    )


def summarize_rows(rows: Sequence[ParsedEvent], days_in_month: int) -> AnalysisSummary:
    """
    Compute headline KPIs and per-day totals for *rows*.

    Formulas::

        total_orders    = number of rows
        avg_order_value = total_sale_amount / total_orders   (0 when no orders)
        chart_days      = last_updated_day, or days_in_month when no rows

    Rows whose day falls outside ``1..days_in_month`` still count toward
    the headline totals but not toward ``daily_totals``.
    """

    if not rows:
        return AnalysisSummary(
            total_orders=0,
            total_revenue=0.0,
            total_payout=0.0,
            total_sale_amount=0.0,
            avg_order_value=0.0,
            last_updated_day=0,
            chart_days=days_in_month,
            daily_totals=tuple(
                DailyTotal(day=day, orders=0, revenue=0.0, payout=0.0, sale_amount=0.0)
                for day in range(1, days_in_month + 1)
            ),
        )

    frame = rows_to_frame(rows)
    total_orders = int(len(frame))
    totals = {column: float(frame[column].sum()) for column in _MONEY_COLUMNS}

    in_range = frame[(frame["day"] >= 1) & (frame["day"] <= days_in_month)]
    per_day = (
        in_range.groupby("day")
        .agg(
            orders=("revenue", "size"),
            revenue=("revenue", "sum"),
            payout=("payout", "sum"),
            sale_amount=("sale_amount", "sum"),
        )
        .reindex(range(1, days_in_month + 1), fill_value=0)
    )

    daily_totals = tuple(
        DailyTotal(
            day=int(day),
            orders=int(record.orders),
            revenue=float(record.revenue),
            payout=float(record.payout),
            sale_amount=float(record.sale_amount),
        )
        for day, record in zip(per_day.index, per_day.itertuples(index=False))
    )

    last_updated_day = int(frame["day"].max())
    avg_order_value = totals["sale_amount"] / total_orders

    return AnalysisSummary(
        total_orders=total_orders,
        total_revenue=totals["revenue"],
        total_payout=totals["payout"],
        total_sale_amount=totals["sale_amount"],
        avg_order_value=avg_order_value,
        last_updated_day=last_updated_day,
        chart_days=last_updated_day if last_updated_day > 0 else days_in_month,
        daily_totals=daily_totals,
    )
