"""
app/api/dependencies.py

Shared FastAPI dependencies: CSV export upload validation and the report
clock.
"""

from __future__ import annotations

from datetime import date, datetime

from fastapi import File, HTTPException, UploadFile, status

from app.config import get_report_settings

# Browsers and affiliate dashboards label CSV exports inconsistently.
CSV_CONTENT_TYPES = frozenset(
    {
        "text/csv",
        "application/csv",
        "text/comma-separated-values",
        "application/vnd.ms-excel",
    }
)


def _media_type(content_type: str | None) -> str:
    """Strip parameters such as ``; charset=utf-8`` from a content type."""
    return (content_type or "").split(";", 1)[0].strip().lower()


def get_csv_upload(file: UploadFile = File(..., description="Conversion CSV export")) -> UploadFile:
    """
    Accept the upload when either its filename ends in ``.csv`` or its
    media type is a known CSV type.
    """

    filename = (file.filename or "").strip().lower()
    if filename.endswith(".csv") or _media_type(file.content_type) in CSV_CONTENT_TYPES:
        return file

    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail="Upload must be a CSV export (.csv).",
    )


def get_today() -> date:
    """
    Current calendar date in the configured report timezone.

    Override this dependency in tests to pin the clock.
    """

    return datetime.now(tz=get_report_settings().timezone).date()
