"""
app/api/routers/reports.py

Report HTTP endpoints.

Every report is available two ways:

    POST /reports/<name>   build from an uploaded CSV (multipart ``file``)
    GET  /reports/<name>   build from the export at ``REPORT_CSV_PATH``

Reports: ``offers``, ``drop-alerts``, ``analysis``, ``offer-performance``.
``POST /reports/analysis/export`` returns the filtered analysis rows as a
CSV download.

All building happens in ReportService; this module only reads input,
maps errors to status codes and serialises results.
"""

from __future__ import annotations

import csv
import io
import logging
from datetime import date
from typing import Iterator

from fastapi import APIRouter, Depends, HTTPException, Query, UploadFile, status
from fastapi.responses import StreamingResponse

from app.api.dependencies import get_csv_upload, get_today
from app.schemas.reports import (
    AnalysisDataResponse,
    AnalysisRowResponse,
    AnalysisSummaryResponse,
    CodeAnomaliesResponse,
    CodeSummaryResponse,
    DailyTotalResponse,
    DropAlertReportResponse,
    DropAlertResponse,
    OfferLastUpdateResponse,
    OfferPerformanceReportResponse,
    OfferPerformanceResponse,
    OfferReportResponse,
    OfferSummaryResponse,
)
from app.services.report_service import (
    AnalysisResult,
    OfferReportResult,
    ReportInputError,
    ReportService,
    ReportSourceNotConfiguredError,
    get_report_service,
)
from reporting.models import AnalysisFilter, DropAlertReport, OfferPerformanceReport

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["reports"])

_EXPORT_FIELDS = ("offer", "partner", "code", "day", "geo", "payout", "revenue", "sale_amount")


# ---------------------------------------------------------------------------
# Input helpers
# ---------------------------------------------------------------------------


def _read_upload(service: ReportService, file: UploadFile) -> str:
    try:
        return service.read_upload(file)
    except ReportInputError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    finally:
        file.file.close()


def _read_configured(service: ReportService) -> str:
    try:
        return service.read_configured_source()
    except ReportSourceNotConfiguredError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ReportInputError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


def _selection(
    offers: list[str] | None = Query(default=None, description="Offers to include"),
    affiliates: list[str] | None = Query(default=None, description="Partners to include"),
    codes: list[str] | None = Query(default=None, description="Codes to include"),
    geos: list[str] | None = Query(default=None, description="Geos to include"),
    day_from: int | None = Query(default=None, ge=1, le=31),
    day_to: int | None = Query(default=None, ge=1, le=31),
) -> AnalysisFilter | None:
    if all(value is None for value in (offers, affiliates, codes, geos, day_from, day_to)):
        return None
    return AnalysisFilter(
        offers=frozenset(offers) if offers is not None else None,
        affiliates=frozenset(affiliates) if affiliates is not None else None,
        codes=frozenset(codes) if codes is not None else None,
        geos=frozenset(geos) if geos is not None else None,
        day_from=day_from,
        day_to=day_to,
    )


# ---------------------------------------------------------------------------
# Serialisation helpers (no business logic)
# ---------------------------------------------------------------------------


def _offer_report_response(result: OfferReportResult) -> OfferReportResponse:
    report = result.report
    offers: list[OfferSummaryResponse] = []
    for offer in report.offers:
        codes: list[CodeSummaryResponse] = []
        for code in offer.codes:
            anomalies = result.anomalies.get((offer.offer, code.code))
            codes.append(
                CodeSummaryResponse(
                    code=code.code,
                    counts=list(code.counts),
                    total=code.total,
                    anomalies=(
                        CodeAnomaliesResponse(
                            average=anomalies.average,
                            drop_flags=list(anomalies.drop_flags),
                            zero_run_flags=list(anomalies.zero_run_flags),
                            ratio_classes=list(anomalies.ratio_classes),
                            highlights=list(anomalies.highlights),
                        )
                        if anomalies is not None
                        else None
                    ),
                )
            )
        offers.append(OfferSummaryResponse(offer=offer.offer, total=offer.total, codes=codes))

    return OfferReportResponse(
        offers=offers,
        days_in_month=report.days_in_month,
        month_label=report.month_label,
        month_index=report.month_index,
        year=report.year,
        max_past_day=result.max_past_day,
    )


def _drop_alert_response(report: DropAlertReport) -> DropAlertReportResponse:
    return DropAlertReportResponse(
        alerts=[
            DropAlertResponse(
                offer=alert.offer,
                partner=alert.partner,
                code=alert.code,
                day=alert.day,
                prev_day=alert.prev_day,
                day_label=alert.day_label,
                prev_day_label=alert.prev_day_label,
                day_count=alert.day_count,
                prev_day_count=alert.prev_day_count,
                labels=list(alert.labels),
            )
            for alert in report.alerts
        ],
        days_in_month=report.days_in_month,
        month_label=report.month_label,
        month_index=report.month_index,
        year=report.year,
        max_past_day=report.max_past_day,
    )


def _analysis_response(result: AnalysisResult) -> AnalysisDataResponse:
    data = result.data
    summary = result.summary
    return AnalysisDataResponse(
        rows=[
            AnalysisRowResponse(
                offer=row.offer,
                partner=row.partner,
                code=row.code,
                day=row.day,
                geo=row.geo,
                payout=row.payout,
                revenue=row.revenue,
                sale_amount=row.sale_amount,
            )
            for row in result.rows
        ],
        offers=list(data.offers),
        affiliates=list(data.affiliates),
        codes=list(data.codes),
        geos=list(data.geos),
        last_updates=[
            OfferLastUpdateResponse(offer=update.offer, day=update.day, label=update.label)
            for update in data.last_updates
        ],
        summary=AnalysisSummaryResponse(
            total_orders=summary.total_orders,
            total_revenue=summary.total_revenue,
            total_payout=summary.total_payout,
            total_sale_amount=summary.total_sale_amount,
            avg_order_value=summary.avg_order_value,
            last_updated_day=summary.last_updated_day,
            chart_days=summary.chart_days,
            daily_totals=[
                DailyTotalResponse(
                    day=total.day,
                    orders=total.orders,
                    revenue=total.revenue,
                    payout=total.payout,
                    sale_amount=total.sale_amount,
                )
                for total in summary.daily_totals
            ],
        ),
        days_in_month=data.days_in_month,
        month_label=data.month_label,
        month_index=data.month_index,
        year=data.year,
    )


def _offer_performance_response(report: OfferPerformanceReport) -> OfferPerformanceReportResponse:
    return OfferPerformanceReportResponse(
        offers=[
            OfferPerformanceResponse(
                offer=item.offer,
                counts=list(item.counts),
                total=item.total,
                avg=item.avg,
                ratio_classes=list(item.ratio_classes),
            )
            for item in report.offers
        ],
        days_in_month=report.days_in_month,
        month_label=report.month_label,
        month_index=report.month_index,
        year=report.year,
        max_past_day=report.max_past_day,
    )


def _rows_to_csv_streaming(result: AnalysisResult, filename: str) -> StreamingResponse:
    """Stream the selected analysis rows as a UTF-8 CSV file download."""

    def _generate() -> Iterator[str]:
        buf = io.StringIO()
        writer = csv.writer(buf, lineterminator="\r\n")
        writer.writerow(_EXPORT_FIELDS)
        yield buf.getvalue()

        for row in result.rows:
            buf.seek(0)
            buf.truncate(0)
            writer.writerow(
                [
                    row.offer,
                    row.partner,
                    row.code,
                    row.day,
                    row.geo,
                    row.payout,
                    row.revenue,
                    row.sale_amount,
                ]
            )
            yield buf.getvalue()

    return StreamingResponse(
        _generate(),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.post("/offers", response_model=OfferReportResponse)
def upload_offer_report(
    file: UploadFile = Depends(get_csv_upload),
    include_anomalies: bool = Query(default=False, description="Attach per-code anomaly flags"),
    today: date = Depends(get_today),
    service: ReportService = Depends(get_report_service),
) -> OfferReportResponse:
    """
    Offer -> code daily conversion matrices for an uploaded export.
    """

    csv_text = _read_upload(service, file)
    result = service.offer_report(csv_text, today=today, include_anomalies=include_anomalies)
    return _offer_report_response(result)


@router.get("/offers", response_model=OfferReportResponse)
def offer_report(
    include_anomalies: bool = Query(default=False, description="Attach per-code anomaly flags"),
    today: date = Depends(get_today),
    service: ReportService = Depends(get_report_service),
) -> OfferReportResponse:
    csv_text = _read_configured(service)
    result = service.offer_report(csv_text, today=today, include_anomalies=include_anomalies)
    return _offer_report_response(result)


@router.post("/drop-alerts", response_model=DropAlertReportResponse)
def upload_drop_alerts(
    file: UploadFile = Depends(get_csv_upload),
    max_past_day: int | None = Query(default=None, ge=0, le=31, description="Override the cutoff day"),
    today: date = Depends(get_today),
    service: ReportService = Depends(get_report_service),
) -> DropAlertReportResponse:
    """
    Day-over-day drop alerts for an uploaded export, latest day first.
    """

    csv_text = _read_upload(service, file)
    report = service.drop_alerts(csv_text, today=today, max_past_day=max_past_day)
    return _drop_alert_response(report)


@router.get("/drop-alerts", response_model=DropAlertReportResponse)
def drop_alerts(
    max_past_day: int | None = Query(default=None, ge=0, le=31, description="Override the cutoff day"),
    today: date = Depends(get_today),
    service: ReportService = Depends(get_report_service),
) -> DropAlertReportResponse:
    csv_text = _read_configured(service)
    report = service.drop_alerts(csv_text, today=today, max_past_day=max_past_day)
    return _drop_alert_response(report)


@router.post("/analysis", response_model=AnalysisDataResponse)
def upload_analysis(
    file: UploadFile = Depends(get_csv_upload),
    selection: AnalysisFilter | None = Depends(_selection),
    service: ReportService = Depends(get_report_service),
) -> AnalysisDataResponse:
    """
    Flat rows, filter options, KPIs and per-offer last update day.
    """

    csv_text = _read_upload(service, file)
    return _analysis_response(service.analysis(csv_text, selection=selection))


@router.get("/analysis", response_model=AnalysisDataResponse)
def analysis(
    selection: AnalysisFilter | None = Depends(_selection),
    service: ReportService = Depends(get_report_service),
) -> AnalysisDataResponse:
    csv_text = _read_configured(service)
    return _analysis_response(service.analysis(csv_text, selection=selection))


@router.post("/analysis/export")
def export_analysis(
    file: UploadFile = Depends(get_csv_upload),
    selection: AnalysisFilter | None = Depends(_selection),
    service: ReportService = Depends(get_report_service),
) -> StreamingResponse:
    """
    Download the selected analysis rows as CSV.
    """

    csv_text = _read_upload(service, file)
    result = service.analysis(csv_text, selection=selection)
    logger.info("Analysis export rows=%d", len(result.rows))
    return _rows_to_csv_streaming(result, "analysis_export.csv")


@router.post("/offer-performance", response_model=OfferPerformanceReportResponse)
def upload_offer_performance(
    file: UploadFile = Depends(get_csv_upload),
    today: date = Depends(get_today),
    service: ReportService = Depends(get_report_service),
) -> OfferPerformanceReportResponse:
    """
    Daily orders per offer, classified against each offer's average.
    """

    csv_text = _read_upload(service, file)
    return _offer_performance_response(service.offer_performance(csv_text, today=today))


@router.get("/offer-performance", response_model=OfferPerformanceReportResponse)
def offer_performance(
    today: date = Depends(get_today),
    service: ReportService = Depends(get_report_service),
) -> OfferPerformanceReportResponse:
    csv_text = _read_configured(service)
    return _offer_performance_response(service.offer_performance(csv_text, today=today))
