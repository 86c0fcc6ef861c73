"""
reporting/offer_performance.py

Offer-level daily orders, each day colored against the offer's own average.
"""

from __future__ import annotations

from anomaly.detectors import active_day_average, ratio_classes
from reporting.models import AnalysisData, OfferPerformance, OfferPerformanceReport


def build_offer_performance(data: AnalysisData, max_past_day: int) -> OfferPerformanceReport:
    """
    Roll analysis rows up to one daily count matrix per offer.

    Unlike the code-level view there is no minimum average: every offer
    with at least one active day is classified, and past days with zero
    orders count as very low.
    """

    days = data.days_in_month
    matrices: dict[str, list[int]] = {}
    for row in data.rows:
        if not 1 <= row.day <= days:
            continue
        matrices.setdefault(row.offer, [0] * days)[row.day - 1] += 1

    offers = [
        OfferPerformance(
            offer=offer,
            counts=tuple(counts),
            total=sum(counts),
            avg=active_day_average(counts),
            ratio_classes=tuple(
                ratio_classes(counts, max_past_day, min_average=0.0, include_zero_days=True)
            ),
        )
        for offer, counts in matrices.items()
    ]
    offers.sort(key=lambda item: (-item.total, item.offer))
    return OfferPerformanceReport(
        month=data.month,
        rows_read=data.rows_read,
        rows_skipped=data.rows_skipped,
        missing_columns=data.missing_columns,
        offers=tuple(offers),
        max_past_day=max_past_day,
    )
