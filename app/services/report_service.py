"""
app/services/report_service.py

Service layer between HTTP/CLI callers and the report builders.

Responsibilities:
    - Read CSV bytes from an upload or the configured export file and
      decode them.
    - Invoke the pure builders in :mod:`reporting`.
    - Resolve the "max past day" cutoff from a caller-supplied ``today``.
    - Log one structured event per build.

The builders never raise for bad data; this layer only raises
:class:`ReportInputError` when the input bytes themselves are unusable.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from datetime import date
from functools import lru_cache
from pathlib import Path

from fastapi import UploadFile

from anomaly.cutoff import resolve_max_past_day
from anomaly.detectors import CountAnomalies, evaluate_counts
from app.config import get_report_settings
from app.logging_utils import log_report_built
from reporting.analysis import build_analysis_data, filter_rows, summarize_rows
from reporting.drop_alerts import build_drop_alerts
from reporting.models import (
    AnalysisData,
    AnalysisFilter,
    AnalysisSummary,
    DropAlertReport,
    OfferPerformanceReport,
    OfferReport,
    ParsedEvent,
)
from reporting.offer_performance import build_offer_performance
from reporting.offer_report import build_offer_report

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ReportInputError(ValueError):
    """
    Raised when CSV input bytes cannot be read or decoded.
    """


class ReportSourceNotConfiguredError(ReportInputError):
    """
    Raised when a report is requested from the configured export file but
    no usable file is configured.
    """


# ---------------------------------------------------------------------------
# Result containers
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OfferReportResult:
    report: OfferReport
    max_past_day: int
    anomalies: dict[tuple[str, str], CountAnomalies] = field(default_factory=dict)
    """Per (offer, code) anomaly signals; empty unless requested."""


@dataclass(frozen=True)
class AnalysisResult:
    data: AnalysisData
    rows: tuple[ParsedEvent, ...]
    """Rows after filtering; equal to ``data.rows`` when no filter was given."""

    summary: AnalysisSummary


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class ReportService:
    """
    Builds reports from CSV exports.

    Stateless apart from its settings; every call re-parses the full text.
    """

    def __init__(
        self,
        *,
        csv_path: Path | None = None,
        encoding: str = "utf-8-sig",
        max_upload_bytes: int = 20 * 1024 * 1024,
    ) -> None:
        self._csv_path = csv_path
        self._encoding = encoding
        self._max_upload_bytes = max(1, max_upload_bytes)

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def decode(self, raw: bytes) -> str:
        if len(raw) > self._max_upload_bytes:
            raise ReportInputError(
                f"CSV exceeds the maximum size of {self._max_upload_bytes} bytes."
            )
        try:
            return raw.decode(self._encoding)
        except (UnicodeDecodeError, LookupError) as exc:
            raise ReportInputError(f"CSV must be {self._encoding} encoded.") from exc

    def read_upload(self, upload_file: UploadFile) -> str:
        """
        Read and decode an uploaded CSV file.
        """

        raw_file = upload_file.file
        raw_file.seek(0)
        raw = raw_file.read(self._max_upload_bytes + 1)
        return self.decode(raw)

    def read_configured_source(self) -> str:
        """
        Read the export file named by ``REPORT_CSV_PATH``.
        """

        if self._csv_path is None:
            raise ReportSourceNotConfiguredError("REPORT_CSV_PATH is not configured.")
        if not self._csv_path.is_file():
            raise ReportSourceNotConfiguredError(
                f"Configured CSV export does not exist: {self._csv_path}"
            )
        return self.decode(self._csv_path.read_bytes())

    # ------------------------------------------------------------------
    # Reports
    # ------------------------------------------------------------------

    def offer_report(
        self,
        csv_text: str,
        *,
        today: date,
        include_anomalies: bool = False,
    ) -> OfferReportResult:
        report = build_offer_report(csv_text)
        cutoff = resolve_max_past_day(report.month, today, report.days_in_month)

        anomalies: dict[tuple[str, str], CountAnomalies] = {}
        if include_anomalies:
            for offer in report.offers:
                for code in offer.codes:
                    anomalies[(offer.offer, code.code)] = evaluate_counts(code.counts, cutoff)

        log_report_built(
            logger,
            "offers",
            report,
            offers=len(report.offers),
            max_past_day=cutoff,
        )
        return OfferReportResult(report=report, max_past_day=cutoff, anomalies=anomalies)

    def drop_alerts(
        self,
        csv_text: str,
        *,
        today: date,
        max_past_day: int | None = None,
    ) -> DropAlertReport:
        """
        Build drop alerts up to *max_past_day*, or up to the clock-derived
        cutoff when it is not given.
        """

        if max_past_day is not None:
            report = build_drop_alerts(csv_text, max_past_day)
        else:
            full = build_drop_alerts(csv_text)
            cutoff = resolve_max_past_day(full.month, today, full.days_in_month)
            report = dataclasses.replace(
                full,
                alerts=tuple(alert for alert in full.alerts if alert.day <= cutoff),
                max_past_day=cutoff,
            )

        log_report_built(
            logger,
            "drop_alerts",
            report,
            alerts=len(report.alerts),
            max_past_day=report.max_past_day,
        )
        return report

    def analysis(
        self,
        csv_text: str,
        *,
        selection: AnalysisFilter | None = None,
    ) -> AnalysisResult:
        data = build_analysis_data(csv_text)
        rows = data.rows if selection is None else filter_rows(data.rows, selection)
        summary = summarize_rows(rows, data.days_in_month)

        log_report_built(
            logger,
            "analysis",
            data,
            rows=len(data.rows),
            selected_rows=len(rows),
        )
        return AnalysisResult(data=data, rows=rows, summary=summary)

    def offer_performance(self, csv_text: str, *, today: date) -> OfferPerformanceReport:
        data = build_analysis_data(csv_text)
        cutoff = resolve_max_past_day(data.month, today, data.days_in_month)
        report = build_offer_performance(data, cutoff)

        log_report_built(
            logger,
            "offer_performance",
            report,
            offers=len(report.offers),
            max_past_day=cutoff,
        )
        return report


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_report_service() -> ReportService:
    """
    Build and cache the report service with env-driven settings.
    """

    settings = get_report_settings()
    return ReportService(
        csv_path=settings.csv_path,
        encoding=settings.csv_encoding,
        max_upload_bytes=settings.max_upload_bytes,
    )
