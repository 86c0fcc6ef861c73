"""
reporting/offer_report.py

Offer -> code daily conversion matrices for the target month.
"""

from __future__ import annotations

import logging

from reporting.models import CodeSummary, OfferReport, OfferSummary
from reporting.scoping import COLUMN_CODE, COLUMN_DATE, COLUMN_OFFER, scope_rows

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = (COLUMN_OFFER, COLUMN_DATE, COLUMN_CODE)


def build_offer_report(csv_text: str) -> OfferReport:
    """
    Count conversions per offer and code for every day of the target month.

    Codes are ordered by total descending, then code name; offers the same
    way by offer total, then offer name. Returns an empty report with a
    31-day month when a required column is missing or no row is usable.
    """

    scoped = scope_rows(csv_text, REQUIRED_COLUMNS)
    if scoped.month is None:
        return OfferReport(month=None, **scoped.counters())

    days = scoped.month.days_in_month
    matrices: dict[str, dict[str, list[int]]] = {}
    for event in scoped.events:
        codes = matrices.setdefault(event.offer, {})
        counts = codes.setdefault(event.code, [0] * days)
        counts[event.day - 1] += 1

    offers: list[OfferSummary] = []
    for offer, codes in matrices.items():
        code_summaries = sorted(
            (
                CodeSummary(code=code, counts=tuple(counts), total=sum(counts))
                for code, counts in codes.items()
            ),
            key=lambda summary: (-summary.total, summary.code),
        )
        offers.append(
            OfferSummary(
                offer=offer,
                total=sum(summary.total for summary in code_summaries),
                codes=tuple(code_summaries),
            )
        )
    offers.sort(key=lambda summary: (-summary.total, summary.offer))

    logger.debug(
        "Offer report built month=%s offers=%d events=%d",
        scoped.month.label,
        len(offers),
        len(scoped.events),
    )
    return OfferReport(month=scoped.month, offers=tuple(offers), **scoped.counters())
