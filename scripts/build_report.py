"""
Build one report from a CSV export on the command line.
"""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any

from app.config import get_report_settings
from app.services.report_service import ReportInputError, ReportService

_REPORTS = ("offers", "drop-alerts", "analysis", "offer-performance")


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid date {value!r}, expected YYYY-MM-DD") from exc


def _non_negative_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid day {value!r}, expected an integer") from exc
    if number < 0:
        raise argparse.ArgumentTypeError(f"day must be zero or greater, got {number}")
    return number


def _month_fields(report: Any) -> dict[str, Any]:
    return {
        "days_in_month": report.days_in_month,
        "month_label": report.month_label,
        "month_index": report.month_index,
        "year": report.year,
        "rows_read": report.rows_read,
        "rows_skipped": report.rows_skipped,
    }


def _build_payload(service: ReportService, csv_text: str, args: argparse.Namespace) -> dict[str, Any]:
    today = args.today or datetime.now(tz=get_report_settings().timezone).date()

    if args.report == "offers":
        result = service.offer_report(csv_text, today=today)
        report = result.report
        return {
            **_month_fields(report),
            "max_past_day": result.max_past_day,
            "offers": [dataclasses.asdict(offer) for offer in report.offers],
        }

    if args.report == "drop-alerts":
        report = service.drop_alerts(csv_text, today=today, max_past_day=args.max_past_day)
        return {
            **_month_fields(report),
            "max_past_day": report.max_past_day,
            "alerts": [dataclasses.asdict(alert) for alert in report.alerts],
        }

    if args.report == "analysis":
        result = service.analysis(csv_text)
        data = result.data
        return {
            **_month_fields(data),
            "offers": list(data.offers),
            "affiliates": list(data.affiliates),
            "codes": list(data.codes),
            "geos": list(data.geos),
            "last_updates": [dataclasses.asdict(update) for update in data.last_updates],
            "summary": dataclasses.asdict(result.summary),
            "rows": len(data.rows),
        }

    report = service.offer_performance(csv_text, today=today)
    return {
        **_month_fields(report),
        "max_past_day": report.max_past_day,
        "offers": [dataclasses.asdict(offer) for offer in report.offers],
    }


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Build a conversion report from a CSV export.")
    parser.add_argument("csv_path", type=Path, help="Path to the CSV export.")
    parser.add_argument(
        "--report",
        choices=_REPORTS,
        default="offers",
        help="Report to build (default: offers).",
    )
    parser.add_argument(
        "--today",
        type=_parse_date,
        default=None,
        help="Reference date for the past-day cutoff (default: today in REPORT_TIMEZONE).",
    )
    parser.add_argument(
        "--max-past-day",
        dest="max_past_day",
        type=_non_negative_int,
        default=None,
        help="Explicit cutoff day for drop alerts.",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.WARNING, format="%(levelname)s [%(name)s] %(message)s")

    service = ReportService(csv_path=args.csv_path)
    try:
        csv_text = service.read_configured_source()
    except ReportInputError as exc:
        parser.error(str(exc))

    payload = _build_payload(service, csv_text, args)
    print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
