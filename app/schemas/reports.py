"""
app/schemas/reports.py

Response schemas for report endpoints.

Fields are snake_case in Python and serialised as camelCase, which is the
shape the dashboard renderer consumes.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _ReportModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class _MonthScopedResponse(_ReportModel):
    days_in_month: int = Field(..., ge=1, le=31)
    month_label: str = ""
    month_index: int | None = Field(default=None, ge=0, le=11)
    year: int | None = None


# ---------------------------------------------------------------------------
# Offer report
# ---------------------------------------------------------------------------


class CodeAnomaliesResponse(_ReportModel):
    average: float
    drop_flags: list[bool]
    zero_run_flags: list[bool]
    ratio_classes: list[str | None]
    highlights: list[str | None]


class CodeSummaryResponse(_ReportModel):
    code: str
    counts: list[int]
    total: int = Field(..., ge=0)
    anomalies: CodeAnomaliesResponse | None = None


class OfferSummaryResponse(_ReportModel):
    offer: str
    total: int = Field(..., ge=0)
    codes: list[CodeSummaryResponse] = Field(default_factory=list)


class OfferReportResponse(_MonthScopedResponse):
    offers: list[OfferSummaryResponse] = Field(default_factory=list)
    max_past_day: int = Field(..., ge=0, le=31)


# ---------------------------------------------------------------------------
# Drop alerts
# ---------------------------------------------------------------------------


class DropAlertResponse(_ReportModel):
    offer: str
    partner: str
    code: str
    day: int = Field(..., ge=1, le=31)
    prev_day: int = Field(..., ge=1, le=31)
    day_label: str
    prev_day_label: str
    day_count: int = Field(..., ge=0)
    prev_day_count: int = Field(..., ge=0)
    labels: list[str] = Field(default_factory=list)


class DropAlertReportResponse(_MonthScopedResponse):
    alerts: list[DropAlertResponse] = Field(default_factory=list)
    max_past_day: int | None = None


# ---------------------------------------------------------------------------
# Analysis
# ---------------------------------------------------------------------------


class AnalysisRowResponse(_ReportModel):
    offer: str
    partner: str
    code: str
    day: int
    geo: str
    payout: float
    revenue: float
    sale_amount: float


class OfferLastUpdateResponse(_ReportModel):
    offer: str
    day: int
    label: str


class DailyTotalResponse(_ReportModel):
    day: int
    orders: int = Field(..., ge=0)
    revenue: float
    payout: float
    sale_amount: float


class AnalysisSummaryResponse(_ReportModel):
    total_orders: int = Field(..., ge=0)
    total_revenue: float
    total_payout: float
    total_sale_amount: float
    avg_order_value: float
    last_updated_day: int = Field(..., ge=0)
    chart_days: int = Field(..., ge=0)
    daily_totals: list[DailyTotalResponse] = Field(default_factory=list)


class AnalysisDataResponse(_MonthScopedResponse):
    rows: list[AnalysisRowResponse] = Field(default_factory=list)
    offers: list[str] = Field(default_factory=list)
    affiliates: list[str] = Field(default_factory=list)
    codes: list[str] = Field(default_factory=list)
    geos: list[str] = Field(default_factory=list)
    last_updates: list[OfferLastUpdateResponse] = Field(default_factory=list)
    summary: AnalysisSummaryResponse


# ---------------------------------------------------------------------------
# Offer performance
# ---------------------------------------------------------------------------


class OfferPerformanceResponse(_ReportModel):
    offer: str
    counts: list[int]
    total: int = Field(..., ge=0)
    avg: float
    ratio_classes: list[str | None]


class OfferPerformanceReportResponse(_MonthScopedResponse):
    offers: list[OfferPerformanceResponse] = Field(default_factory=list)
    max_past_day: int = Field(..., ge=0, le=31)
