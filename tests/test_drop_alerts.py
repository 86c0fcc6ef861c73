"""
tests/test_drop_alerts.py

Pytest unit tests for reporting.drop_alerts.

Coverage
--------
- Drop and zero-after-sales predicates, including threshold boundaries
- Offer-level guard for days with no data at all
- Monthly volume gate
- Cutoff handling
- Ordering and display labels
"""

from __future__ import annotations

import pytest

from reporting.drop_alerts import build_drop_alerts, drop_labels
from reporting.models import DropAlertLabel

HEADER = ["Offer Name", "Partner", "Date", "Code"]


class TestDropLabels:
    @pytest.mark.parametrize(
        "prev_count, count, expected",
        [
            (30, 5, (DropAlertLabel.DROP,)),
            (21, 10, (DropAlertLabel.DROP,)),
            (22, 11, (DropAlertLabel.DROP,)),
            (22, 12, ()),
            (20, 0, (DropAlertLabel.ZERO_AFTER_SALES,)),
            (30, 0, (DropAlertLabel.DROP, DropAlertLabel.ZERO_AFTER_SALES)),
            (6, 0, (DropAlertLabel.ZERO_AFTER_SALES,)),
            (5, 0, ()),
            (0, 0, ()),
        ],
    )
    def test_predicates(self, prev_count: int, count: int, expected: tuple[str, ...]) -> None:
        assert drop_labels(prev_count, count) == expected


class TestBuildDropAlerts:
    def test_single_drop(self, make_csv, conversions) -> None:
        rows = conversions("A", "P1", "X", 1, 30) + conversions("A", "P1", "X", 2, 5)
        report = build_drop_alerts(make_csv(HEADER, rows), max_past_day=2)

        (alert,) = report.alerts
        assert (alert.offer, alert.partner, alert.code) == ("A", "P1", "X")
        assert (alert.prev_day, alert.day) == (1, 2)
        assert (alert.prev_day_count, alert.day_count) == (30, 5)
        assert alert.labels == (DropAlertLabel.DROP,)
        assert alert.day_label == "January 2 2024"
        assert alert.prev_day_label == "January 1 2024"
        assert report.max_past_day == 2

    def test_zero_after_sales_needs_offer_activity(self, make_csv, conversions) -> None:
        rows = (
            conversions("A", "P1", "B", 1, 8)
            + conversions("A", "P2", "C", 2, 1)
        )
        report = build_drop_alerts(make_csv(HEADER, rows))

        (alert,) = report.alerts
        assert alert.code == "B"
        assert alert.day == 2
        assert alert.labels == (DropAlertLabel.ZERO_AFTER_SALES,)

    def test_no_alert_when_offer_has_no_data_that_day(self, make_csv, conversions) -> None:
        rows = conversions("A", "P1", "B", 1, 8) + conversions("Other", "P1", "B", 2, 3)
        report = build_drop_alerts(make_csv(HEADER, rows))
        assert report.alerts == ()

    def test_low_volume_keys_are_skipped(self, make_csv, conversions) -> None:
        rows = conversions("A", "P1", "X", 1, 4) + conversions("A", "P1", "Y", 2, 1)
        assert build_drop_alerts(make_csv(HEADER, rows)).alerts == ()

    def test_days_after_cutoff_are_not_evaluated(self, make_csv, conversions) -> None:
        rows = conversions("A", "P1", "X", 1, 30) + conversions("A", "P1", "X", 2, 5)
        assert build_drop_alerts(make_csv(HEADER, rows), max_past_day=1).alerts == ()
        assert build_drop_alerts(make_csv(HEADER, rows), max_past_day=0).alerts == ()

    def test_cutoff_beyond_month_is_clamped(self, make_csv, conversions) -> None:
        rows = (
            conversions("A", "P1", "X", 1, 30, month="Feb")
            + conversions("A", "P1", "X", 2, 5, month="Feb")
        )
        report = build_drop_alerts(make_csv(HEADER, rows), max_past_day=31)
        assert len(report.alerts) == 1
        assert report.days_in_month == 29

    def test_both_labels_on_collapse_to_zero(self, make_csv, conversions) -> None:
        rows = conversions("A", "P1", "X", 1, 30) + conversions("A", "P2", "Y", 2, 1)
        (alert,) = build_drop_alerts(make_csv(HEADER, rows)).alerts
        assert alert.code == "X"
        assert alert.labels == (DropAlertLabel.DROP, DropAlertLabel.ZERO_AFTER_SALES)

    def test_partner_splits_keys(self, make_csv, conversions) -> None:
        rows = (
            conversions("A", "P1", "X", 1, 30)
            + conversions("A", "P1", "X", 2, 30)
            + conversions("A", "P2", "X", 1, 30)
            + conversions("A", "P2", "X", 2, 3)
        )
        (alert,) = build_drop_alerts(make_csv(HEADER, rows)).alerts
        assert alert.partner == "P2"

    def test_alerts_sorted_latest_day_first(self, make_csv, conversions) -> None:
        rows = (
            conversions("A", "P1", "X", 1, 30)
            + conversions("A", "P1", "X", 2, 5)
            + conversions("A", "P1", "X", 3, 25)
            + conversions("A", "P1", "X", 4, 10)
            + conversions("A", "P2", "Y", 5, 1)
        )
        report = build_drop_alerts(make_csv(HEADER, rows))
        assert [alert.day for alert in report.alerts] == [5, 4, 2]
        assert report.alerts[0].labels == (DropAlertLabel.ZERO_AFTER_SALES,)

    def test_missing_partner_column_gives_empty_report(self, make_csv) -> None:
        text = make_csv(["Offer Name", "Date", "Code"], [["A", "Jan 1, 2024", "X"]])
        report = build_drop_alerts(text)
        assert report.alerts == ()
        assert report.month is None
        assert report.days_in_month == 31

    def test_header_only_gives_empty_shape(self, make_csv) -> None:
        report = build_drop_alerts(make_csv(HEADER, []))
        assert report.alerts == ()
        assert report.days_in_month == 31
        assert report.month_index is None
        assert report.month_label == ""

    def test_idempotent(self, make_csv, conversions) -> None:
        rows = (
            conversions("A", "P1", "X", 1, 30)
            + conversions("A", "P1", "X", 2, 5)
            + conversions("A", "P2", "Y", 2, 8)
        )
        text = make_csv(HEADER, rows)
        assert build_drop_alerts(text, max_past_day=5) == build_drop_alerts(text, max_past_day=5)
