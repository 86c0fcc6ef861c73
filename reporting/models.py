"""
reporting/models.py

Immutable report structures produced by the CSV-to-report layer.

Every builder returns one of the ``*Report`` / ``AnalysisData`` values
below. They are constructed once per build from local accumulators and
never mutated afterwards, so callers may share them freely.
"""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_DAYS_IN_MONTH = 31


# ---------------------------------------------------------------------------
# Scoping values
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TargetMonth:
    """
    The single calendar month a report is scoped to.

    Established from the first row (in file order) that carries a valid
    date; every later row must fall in the same ``year``/``month_index``.
    """

    month_index: int
    """Zero-based month (0 = January)."""

    year: int
    days_in_month: int
    label: str
    """Display label, e.g. ``"January 2024"``."""

    @property
    def key(self) -> tuple[int, int]:
        return (self.year, self.month_index)


@dataclass(frozen=True)
class ParsedEvent:
    """
    One conversion event that survived row scoping.

    ``partner`` is empty and the money fields are ``0.0`` when the
    requesting builder did not ask for those columns.
    """

    offer: str
    partner: str
    code: str
    day: int
    geo: str = "no-geo"
    payout: float = 0.0
    revenue: float = 0.0
    sale_amount: float = 0.0


@dataclass(frozen=True)
class _MonthScoped:
    """
    Shared accessors for reports carrying an optional :class:`TargetMonth`.

    ``rows_read`` / ``rows_skipped`` / ``missing_columns`` are the
    scoping counters of the build that produced the report.
    """

    month: TargetMonth | None
    rows_read: int = 0
    rows_skipped: int = 0
    missing_columns: tuple[str, ...] = ()

    @property
    def days_in_month(self) -> int:
        return self.month.days_in_month if self.month else DEFAULT_DAYS_IN_MONTH

    @property
    def month_index(self) -> int | None:
        return self.month.month_index if self.month else None

    @property
    def year(self) -> int | None:
        return self.month.year if self.month else None

    @property
    def month_label(self) -> str:
        return self.month.label if self.month else ""


# ---------------------------------------------------------------------------
# Offer report
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CodeSummary:
    code: str
    counts: tuple[int, ...]
    total: int


@dataclass(frozen=True)
class OfferSummary:
    offer: str
    total: int
    codes: tuple[CodeSummary, ...]


@dataclass(frozen=True)
class OfferReport(_MonthScoped):
    offers: tuple[OfferSummary, ...] = ()


# ---------------------------------------------------------------------------
# Drop alerts
# ---------------------------------------------------------------------------


class DropAlertLabel:
    """Names of the predicates that can fire for one alert."""

    DROP = "drop"
    ZERO_AFTER_SALES = "zero_after_sales"


@dataclass(frozen=True)
class DropAlert:
    offer: str
    partner: str
    code: str
    day: int
    prev_day: int
    day_count: int
    prev_day_count: int
    day_label: str
    prev_day_label: str
    labels: tuple[str, ...]


@dataclass(frozen=True)
class DropAlertReport(_MonthScoped):
    alerts: tuple[DropAlert, ...] = ()
    max_past_day: int | None = None
    """Cutoff the alerts were evaluated against; ``None`` means the full month."""


# ---------------------------------------------------------------------------
# Analysis data
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OfferLastUpdate:
    offer: str
    day: int
    label: str


@dataclass(frozen=True)
class AnalysisData(_MonthScoped):
    rows: tuple[ParsedEvent, ...] = ()
    offers: tuple[str, ...] = ()
    affiliates: tuple[str, ...] = ()
    codes: tuple[str, ...] = ()
    geos: tuple[str, ...] = ()
    last_updates: tuple[OfferLastUpdate, ...] = ()


@dataclass(frozen=True)
class AnalysisFilter:
    """
    Row selection over :class:`AnalysisData`.

    A dimension left as ``None`` selects every value. An explicitly empty
    set selects nothing, matching a dashboard where every option was
    unticked.
    """

    offers: frozenset[str] | None = None
    affiliates: frozenset[str] | None = None
    codes: frozenset[str] | None = None
    geos: frozenset[str] | None = None
    day_from: int | None = None
    day_to: int | None = None


@dataclass(frozen=True)
class DailyTotal:
    day: int
    orders: int
    revenue: float
    payout: float
    sale_amount: float


@dataclass(frozen=True)
class AnalysisSummary:
    total_orders: int
    total_revenue: float
    total_payout: float
    total_sale_amount: float
    avg_order_value: float
    last_updated_day: int
    chart_days: int
    daily_totals: tuple[DailyTotal, ...] = field(default_factory=tuple)


# ---------------------------------------------------------------------------
# Offer performance
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OfferPerformance:
    offer: str
    counts: tuple[int, ...]
    total: int
    avg: float
    ratio_classes: tuple[str | None, ...]


@dataclass(frozen=True)
class OfferPerformanceReport(_MonthScoped):
    offers: tuple[OfferPerformance, ...] = ()
    max_past_day: int = DEFAULT_DAYS_IN_MONTH
