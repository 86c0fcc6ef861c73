"""
app/services package marker.
"""

from app.services.report_service import (
    ReportInputError,
    ReportService,
    ReportSourceNotConfiguredError,
    get_report_service,
)

__all__ = [
    "ReportInputError",
    "ReportService",
    "ReportSourceNotConfiguredError",
    "get_report_service",
]
