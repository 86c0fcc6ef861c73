"""
app/schemas package marker.
"""

from app.schemas.reports import (
    AnalysisDataResponse,
    DropAlertReportResponse,
    OfferPerformanceReportResponse,
    OfferReportResponse,
)

__all__ = [
    "AnalysisDataResponse",
    "DropAlertReportResponse",
    "OfferPerformanceReportResponse",
    "OfferReportResponse",
]
