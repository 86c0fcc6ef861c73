"""
anomaly/detectors.py

Per-cell anomaly heuristics over one daily count matrix.

All functions are pure and operate on a single sequence where index ``i``
holds the count for day ``i + 1``. ``max_past_day`` is the last day with
complete data; later days are "future" and are never flagged by the
zero-run or average-ratio checks.

Heuristics
----------
drop flag      counts[i-1] > 15 and counts[i] < counts[i-1] * 0.6
               (whole matrix, cutoff ignored)
zero run       3+ consecutive zero days right after a positive day,
               counted only up to the cutoff
average ratio  value / avg where avg = total / active days, applied only
               when avg >= 10:
                   < 0.5          very_low
                   0.5 .. < 0.75  low
                   > 1.4          high
                   otherwise      normal
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Sequence

DROP_FLAG_MIN_PREVIOUS: Final[int] = 15
DROP_FLAG_MAX_RATIO: Final[float] = 0.6
ZERO_RUN_MIN_LENGTH: Final[int] = 3
RATIO_MIN_AVERAGE: Final[float] = 10.0
VERY_LOW_RATIO: Final[float] = 0.5
LOW_RATIO: Final[float] = 0.75
HIGH_RATIO: Final[float] = 1.4


class RatioClass:
    VERY_LOW = "very_low"
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"


class Highlight:
    DROP = "drop"
    ZERO_RUN = "zero_run"
    VERY_LOW = "very_low"
    LOW = "low"
    HIGH = "high"


@dataclass(frozen=True)
class CountAnomalies:
    """
    Every per-cell signal for one count matrix, aligned by day index.
    """

    average: float
    drop_flags: tuple[bool, ...]
    zero_run_flags: tuple[bool, ...]
    ratio_classes: tuple[str | None, ...]
    highlights: tuple[str | None, ...]


def drop_flags(counts: Sequence[int]) -> list[bool]:
    flags = [False] * len(counts)
    for index in range(1, len(counts)):
        prev = counts[index - 1]
        flags[index] = prev > DROP_FLAG_MIN_PREVIOUS and counts[index] < prev * DROP_FLAG_MAX_RATIO
    return flags


def zero_run_flags(counts: Sequence[int], max_past_day: int) -> list[bool]:
    """
    Flag every day of a zero run that follows a positive day.

    A run is cut at ``max_past_day``; only the part inside the cutoff
    counts toward the minimum length and only that part is flagged.
    """

    length = len(counts)
    flags = [False] * length
    index = 1
    while index < length:
        if index + 1 > max_past_day:
            break
        if counts[index - 1] <= 0 or counts[index] != 0:
            index += 1
            continue

        end = index
        while end < length and counts[end] == 0 and end + 1 <= max_past_day:
            end += 1
        if end - index >= ZERO_RUN_MIN_LENGTH:
            for flagged in range(index, end):
                flags[flagged] = True
        index = max(index + 1, end)
    return flags


def active_day_average(counts: Sequence[int]) -> float:
    """
    Mean count over days with at least one conversion (0 when none).
    """

    active_days = sum(1 for value in counts if value > 0)
    if not active_days:
        return 0.0
    return sum(counts) / active_days


def classify_ratio(ratio: float) -> str:
    if ratio < VERY_LOW_RATIO:
        return RatioClass.VERY_LOW
    if ratio < LOW_RATIO:
        return RatioClass.LOW
    if ratio > HIGH_RATIO:
        return RatioClass.HIGH
    return RatioClass.NORMAL


def ratio_classes(
    counts: Sequence[int],
    max_past_day: int,
    *,
    min_average: float = RATIO_MIN_AVERAGE,
    include_zero_days: bool = False,
) -> list[str | None]:
    """
    Classify each past day against the matrix's active-day average.

    Parameters
    ----------
    counts:
        Daily count matrix.
    max_past_day:
        Days after this are left unclassified.
    min_average:
        Below this average nothing is classified; ratios over a handful
        of conversions are noise.
    include_zero_days:
        When true, past days with zero conversions are classified too
        (they always land in ``very_low``). Code-level views leave them
        to the zero-run check instead.

    Returns
    -------
    list[str | None]
        One :class:`RatioClass` value per day, ``None`` where no
        classification applies.
    """

    classes: list[str | None] = [None] * len(counts)
    average = active_day_average(counts)
    if average <= 0 or average < min_average:
        return classes

    for index, value in enumerate(counts):
        if index + 1 > max_past_day:
            break
        if value <= 0 and not include_zero_days:
            continue
        classes[index] = classify_ratio(value / average)
    return classes


def _highlight(
    is_future: bool,
    is_drop: bool,
    is_zero_run: bool,
    ratio_class: str | None,
) -> str | None:
    if not is_future:
        if is_zero_run:
            return Highlight.ZERO_RUN
        if ratio_class == RatioClass.VERY_LOW:
            return Highlight.VERY_LOW
        if ratio_class == RatioClass.LOW:
            return Highlight.LOW
    if is_drop:
        return Highlight.DROP
    if not is_future and ratio_class == RatioClass.HIGH:
        return Highlight.HIGH
    return None


def evaluate_counts(counts: Sequence[int], max_past_day: int) -> CountAnomalies:
    """
    Run every detector over one code's counts and merge them into a
    single highlight per day.

    Precedence for past days is zero run, very low, low, drop, high.
    Future days can only carry the drop highlight.
    """

    drops = drop_flags(counts)
    zero_runs = zero_run_flags(counts, max_past_day)
    classes = ratio_classes(counts, max_past_day)
    highlights = tuple(
        _highlight(index + 1 > max_past_day, drops[index], zero_runs[index], classes[index])
        for index in range(len(counts))
    )
    return CountAnomalies(
        average=active_day_average(counts),
        drop_flags=tuple(drops),
        zero_run_flags=tuple(zero_runs),
        ratio_classes=tuple(classes),
        highlights=highlights,
    )
