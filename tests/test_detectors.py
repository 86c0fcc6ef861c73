"""
tests/test_detectors.py

Pytest unit tests for anomaly.detectors and anomaly.cutoff.

Coverage
--------
- Drop flags ignore the cutoff
- Zero runs need a positive predecessor and three zero days inside the cutoff
- Average-ratio classes and the minimum-average gate
- Highlight precedence for past and future days
- Max-past-day resolution for past, current and future months
"""

from __future__ import annotations

from datetime import date

import pytest

from anomaly.cutoff import max_past_day, resolve_max_past_day
from anomaly.detectors import (
    Highlight,
    RatioClass,
    active_day_average,
    classify_ratio,
    drop_flags,
    evaluate_counts,
    ratio_classes,
    zero_run_flags,
)
from reporting.models import TargetMonth


# ---------------------------------------------------------------------------
# Drop flags
# ---------------------------------------------------------------------------


class TestDropFlags:
    @pytest.mark.parametrize(
        "counts, expected",
        [
            ([20, 11], [False, True]),
            ([16, 9], [False, True]),
            ([16, 10], [False, False]),
            ([15, 0], [False, False]),
            ([], []),
        ],
    )
    def test_thresholds(self, counts: list[int], expected: list[bool]) -> None:
        assert drop_flags(counts) == expected

    def test_first_day_never_flagged(self) -> None:
        assert drop_flags([100])[0] is False


# ---------------------------------------------------------------------------
# Zero runs
# ---------------------------------------------------------------------------


class TestZeroRunFlags:
    def test_run_after_positive_day(self) -> None:
        assert zero_run_flags([5, 0, 0, 0, 4], 5) == [False, True, True, True, False]

    def test_run_shorter_than_three_is_ignored(self) -> None:
        assert zero_run_flags([5, 0, 0, 4], 4) == [False] * 4

    def test_leading_zeros_are_not_a_run(self) -> None:
        assert zero_run_flags([0, 0, 0, 0, 3], 5) == [False] * 5

    def test_run_is_cut_at_max_past_day(self) -> None:
        counts = [5, 0, 0, 0, 0]
        assert zero_run_flags(counts, 3) == [False] * 5
        assert zero_run_flags(counts, 4) == [False, True, True, True, False]
        assert zero_run_flags(counts, 5) == [False, True, True, True, True]

    def test_zero_cutoff_flags_nothing(self) -> None:
        assert zero_run_flags([5, 0, 0, 0, 0], 0) == [False] * 5


# ---------------------------------------------------------------------------
# Average ratio
# ---------------------------------------------------------------------------


class TestRatioClasses:
    def test_active_day_average_ignores_zero_days(self) -> None:
        assert active_day_average([10, 0, 20]) == pytest.approx(15.0)
        assert active_day_average([0, 0]) == 0.0

    @pytest.mark.parametrize(
        "ratio, expected",
        [
            (0.49, RatioClass.VERY_LOW),
            (0.5, RatioClass.LOW),
            (0.74, RatioClass.LOW),
            (0.75, RatioClass.NORMAL),
            (1.4, RatioClass.NORMAL),
            (1.41, RatioClass.HIGH),
        ],
    )
    def test_classify_ratio(self, ratio: float, expected: str) -> None:
        assert classify_ratio(ratio) == expected

    def test_classes_against_average(self) -> None:
        counts = [10, 4, 6, 14, 5, 21]
        assert ratio_classes(counts, 6) == [
            RatioClass.NORMAL,
            RatioClass.VERY_LOW,
            RatioClass.LOW,
            RatioClass.NORMAL,
            RatioClass.LOW,
            RatioClass.HIGH,
        ]

    def test_flat_series_is_normal(self) -> None:
        assert ratio_classes([10, 10, 10, 10], 4) == [RatioClass.NORMAL] * 4

    def test_small_average_is_unclassified(self) -> None:
        assert ratio_classes([10, 9], 2) == [None, None]

    def test_zero_and_future_days_are_unclassified(self) -> None:
        assert ratio_classes([20, 0, 20, 20], 2) == [RatioClass.NORMAL, None, None, None]

    def test_zero_days_classified_when_requested(self) -> None:
        classes = ratio_classes([3, 0, 6, 3], 4, min_average=0.0, include_zero_days=True)
        assert classes == [RatioClass.NORMAL, RatioClass.VERY_LOW, RatioClass.HIGH, RatioClass.NORMAL]


# ---------------------------------------------------------------------------
# Highlights
# ---------------------------------------------------------------------------


class TestEvaluateCounts:
    def test_past_precedence(self) -> None:
        anomalies = evaluate_counts([20, 5, 0, 0, 0, 10], 6)

        assert anomalies.average == pytest.approx(35 / 3)
        assert anomalies.highlights == (
            Highlight.HIGH,
            Highlight.VERY_LOW,
            Highlight.ZERO_RUN,
            Highlight.ZERO_RUN,
            Highlight.ZERO_RUN,
            None,
        )

    def test_future_days_only_carry_drops(self) -> None:
        anomalies = evaluate_counts([20, 5, 0, 0, 0, 10], 1)

        assert anomalies.highlights == (Highlight.HIGH, Highlight.DROP, None, None, None, None)
        assert anomalies.zero_run_flags == (False,) * 6
        assert anomalies.ratio_classes == (RatioClass.HIGH, None, None, None, None, None)

    def test_drop_beats_high(self) -> None:
        # Day 2 is a drop from 100 and also above 1.4x the average.
        anomalies = evaluate_counts([100, 50, 5, 5, 5], 5)
        assert anomalies.drop_flags[1] is True
        assert anomalies.ratio_classes[1] == RatioClass.HIGH
        assert anomalies.highlights[1] == Highlight.DROP


# ---------------------------------------------------------------------------
# Max past day
# ---------------------------------------------------------------------------


class TestMaxPastDay:
    @pytest.mark.parametrize(
        "today, expected",
        [
            (date(2024, 2, 10), 31),
            (date(2025, 1, 1), 31),
            (date(2024, 1, 1), 0),
            (date(2024, 1, 15), 14),
            (date(2023, 12, 31), 0),
        ],
    )
    def test_january_2024(self, today: date, expected: int) -> None:
        assert max_past_day(0, 2024, 31, today) == expected

    def test_unknown_month_is_fully_past(self) -> None:
        assert max_past_day(None, None, 31, date(2024, 1, 15)) == 31

    def test_resolve_from_target_month(self) -> None:
        month = TargetMonth(month_index=1, year=2024, days_in_month=29, label="February 2024")
        assert resolve_max_past_day(month, date(2024, 2, 20)) == 19
        assert resolve_max_past_day(month, date(2024, 3, 1)) == 29
        assert resolve_max_past_day(None, date(2024, 3, 1)) == 31
