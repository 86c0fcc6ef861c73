"""
Shared fixtures for building conversion CSV exports in tests.
"""

from __future__ import annotations

from typing import Callable, Sequence

import pytest



def _quote(value: str) -> str:
    return '"' + value.replace('"', '""') + '"'


def build_csv(header: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
    lines = [",".join(_quote(name) for name in header)]
    lines.extend(",".join(_quote(value) for value in row) for row in rows)
    return "\n".join(lines) + "\n"


@pytest.fixture()
def make_csv() -> Callable[[Sequence[str], Sequence[Sequence[str]]], str]:
    """Quote every field and join rows into CSV text."""
    return build_csv


@pytest.fixture()
def conversions() -> Callable[..., list[list[str]]]:
    """
    Build ``count`` identical drop-alert rows
    (Offer Name, Partner, Date, Code) for one day.
    """

    def _rows(
        offer: str,
        partner: str,
        code: str,
        day: int,
        count: int,
        month: str = "Jan",
        year: int = 2024,
    ) -> list[list[str]]:
        return [[offer, partner, f"{month} {day}, {year}", code] for _ in range(count)]

    return _rows
