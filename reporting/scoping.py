"""
reporting/scoping.py

Shared row-scoping stage used by every report builder.

Turns raw CSV text into typed :class:`ParsedEvent` values that all belong
to one :class:`TargetMonth`:

    CSV text -> lines -> header column lookup -> per-row fields
             -> date resolution -> target month filter -> events

Scoping rules
-------------
- Header names are matched exactly after trimming. If any column the
  caller requires is absent the result is empty and carries the missing
  names; nothing is raised.
- A row needs non-empty offer, code and date (and partner, when the
  ``Partner`` column is required) plus a parseable date whose day exists
  in its month. Anything else is skipped silently.
- The first row that passes those checks fixes the target month. Later
  rows from any other month are skipped. The target month therefore
  depends on row order when a file mixes months.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Final, Sequence

from reporting.csv_parser import parse_csv_line, parse_header, split_lines
from reporting.dates import is_valid_day, parse_date_parts, target_month_for
from reporting.models import ParsedEvent, TargetMonth

logger = logging.getLogger(__name__)

COLUMN_OFFER: Final[str] = "Offer Name"
COLUMN_PARTNER: Final[str] = "Partner"
COLUMN_DATE: Final[str] = "Date"
COLUMN_CODE: Final[str] = "Code"
COLUMN_GEO: Final[str] = "Lower_Geo"
COLUMN_PAYOUT: Final[str] = "Payout"
COLUMN_REVENUE: Final[str] = "Revenue"
COLUMN_SALE_AMOUNT: Final[str] = "Sale Amount"

DEFAULT_GEO: Final[str] = "no-geo"


@dataclass(frozen=True)
class ScopedRows:
    """
    Output of :func:`scope_rows`.
    """

    month: TargetMonth | None
    events: tuple[ParsedEvent, ...]
    rows_read: int
    rows_skipped: int
    missing_columns: tuple[str, ...] = ()

    def counters(self) -> dict[str, Any]:
        """Scoping counters as keyword arguments for a report model."""
        return {
            "rows_read": self.rows_read,
            "rows_skipped": self.rows_skipped,
            "missing_columns": self.missing_columns,
        }


def parse_amount(value: str | None) -> float:
    """
    Parse a numeric cell, returning ``0.0`` for blank or unparseable text.

    Digit separators (``1_000``, ``1,000``) count as unparseable.
    """

    if value is None:
        return 0.0
    raw = value.strip()
    if not raw or "_" in raw:
        return 0.0
    try:
        parsed = float(Decimal(raw))
    except (InvalidOperation, ValueError):
        return 0.0
    if not math.isfinite(parsed):
        return 0.0
    return parsed


def _cell(fields: Sequence[str], index: int | None) -> str:
    if index is None or index >= len(fields):
        return ""
    return fields[index].strip()


def _raw_cell(fields: Sequence[str], index: int | None) -> str | None:
    if index is None or index >= len(fields):
        return None
    return fields[index]


def scope_rows(csv_text: str, required_columns: Sequence[str]) -> ScopedRows:
    """
    Parse *csv_text* and keep only rows of the target month.

    Parameters
    ----------
    csv_text:
        Whole CSV export, header line first.
    required_columns:
        Header names the calling builder depends on. ``Offer Name``,
        ``Date`` and ``Code`` are always needed; the rest are optional
        and only read when listed here.
    """

    lines = split_lines(csv_text)
    if not lines:
        return ScopedRows(month=None, events=(), rows_read=0, rows_skipped=0)

    header = parse_header(lines[0])
    positions: dict[str, int] = {}
    for name in required_columns:
        if name in header:
            positions[name] = header.index(name)
    missing = tuple(name for name in required_columns if name not in positions)
    if missing:
        logger.debug("Required columns missing from header: %s", ", ".join(missing))
        return ScopedRows(
            month=None,
            events=(),
            rows_read=len(lines) - 1,
            rows_skipped=len(lines) - 1,
            missing_columns=missing,
        )

    needs_partner = COLUMN_PARTNER in positions
    month: TargetMonth | None = None
    events: list[ParsedEvent] = []
    skipped = 0

    for line in lines[1:]:
        fields = parse_csv_line(line)
        offer = _cell(fields, positions.get(COLUMN_OFFER))
        partner = _cell(fields, positions.get(COLUMN_PARTNER))
        code = _cell(fields, positions.get(COLUMN_CODE))
        date_text = _cell(fields, positions.get(COLUMN_DATE))

        if not offer or not code or not date_text or (needs_partner and not partner):
            skipped += 1
            continue

        parts = parse_date_parts(date_text)
        if parts is None or not is_valid_day(parts):
            skipped += 1
            continue

        if month is None:
            month = target_month_for(parts)
            logger.debug("Target month established: %s", month.label)
        elif (parts.year, parts.month_index) != month.key:
            skipped += 1
            continue

        events.append(
            ParsedEvent(
                offer=offer,
                partner=partner,
                code=code,
                day=parts.day,
                geo=_cell(fields, positions.get(COLUMN_GEO)) or DEFAULT_GEO,
                payout=parse_amount(_raw_cell(fields, positions.get(COLUMN_PAYOUT))),
                revenue=parse_amount(_raw_cell(fields, positions.get(COLUMN_REVENUE))),
                sale_amount=parse_amount(_raw_cell(fields, positions.get(COLUMN_SALE_AMOUNT))),
            )
        )

    return ScopedRows(
        month=month,
        events=tuple(events),
        rows_read=len(lines) - 1,
        rows_skipped=skipped,
    )
