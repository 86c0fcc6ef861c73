"""
tests/test_build_report_cli.py

Tests for the scripts.build_report command-line entry point.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from datetime import datetime
from pathlib import Path

import pytest

from app.config import get_report_settings
from scripts import build_report
from scripts.build_report import main

HEADER = ["Offer Name", "Partner", "Date", "Code"]


@pytest.fixture()
def export_path(tmp_path: Path, make_csv, conversions) -> Path:
    rows = conversions("A", "P1", "X", 1, 30) + conversions("A", "P1", "X", 2, 5)
    path = tmp_path / "export.csv"
    path.write_text(make_csv(HEADER, rows), encoding="utf-8")
    return path


def test_offers_report(export_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main([str(export_path), "--today", "2024-01-02"]) == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload["month_label"] == "January 2024"
    assert payload["max_past_day"] == 1
    assert payload["offers"][0]["total"] == 35


def test_drop_alerts_report(export_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = main([str(export_path), "--report", "drop-alerts", "--max-past-day", "2"])

    assert exit_code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["max_past_day"] == 2
    assert [alert["day"] for alert in payload["alerts"]] == [2]
    assert payload["alerts"][0]["labels"] == ["drop"]


def test_missing_file_exits_with_usage_error(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main([str(tmp_path / "missing.csv")])
    assert excinfo.value.code == 2


def test_invalid_today_is_rejected(export_path: Path) -> None:
    with pytest.raises(SystemExit):
        main([str(export_path), "--today", "01/02/2024"])


def test_negative_max_past_day_is_rejected(export_path: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main([str(export_path), "--report", "drop-alerts", "--max-past-day", "-1"])
    assert excinfo.value.code == 2


def test_zero_max_past_day_is_accepted(export_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main([str(export_path), "--report", "drop-alerts", "--max-past-day", "0"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["max_past_day"] == 0
    assert payload["alerts"] == []


def test_payload_carries_row_counters(export_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main([str(export_path), "--today", "2024-01-02"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert (payload["rows_read"], payload["rows_skipped"]) == (35, 0)


@pytest.fixture()
def istanbul_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.setenv("REPORT_TIMEZONE", "Europe/Istanbul")
    get_report_settings.cache_clear()
    yield
    get_report_settings.cache_clear()


def test_default_today_uses_report_timezone(
    export_path: Path,
    istanbul_settings: None,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    seen = []

    class _Clock:
        @staticmethod
        def now(tz=None):
            seen.append(tz)
            return datetime(2024, 1, 2, 12, 0, tzinfo=tz)

    monkeypatch.setattr(build_report, "datetime", _Clock)

    assert main([str(export_path)]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert [str(tz) for tz in seen] == ["Europe/Istanbul"]
    assert payload["max_past_day"] == 1
