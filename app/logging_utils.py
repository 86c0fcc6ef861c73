"""
app/logging_utils.py

Structured log lines for report builds.

Each build emits one JSON object so log pipelines can chart report volume
per month without parsing free text::

    {"event": "report_built", "missing_columns": [], "month": "January 2024",
     "offers": 4, "report": "offers", "rows_read": 120, "rows_skipped": 3}
"""

from __future__ import annotations

import json
import logging
from typing import Any

REPORT_BUILT_EVENT = "report_built"


def log_event(
    logger: logging.Logger,
    level: int,
    event: str,
    **fields: Any,
) -> None:
    """
    Emit one structured log line as compact JSON.
    """

    if not logger.isEnabledFor(level):
        return
    payload = {"event": event, **fields}
    logger.log(level, json.dumps(payload, default=str, sort_keys=True))


def log_report_built(
    logger: logging.Logger,
    report: str,
    built: Any,
    **counts: Any,
) -> None:
    """
    Log a finished report build at INFO.

    *built* is any month-scoped report value; its month label and row
    scoping counters are always included. An empty month label (no usable
    rows) is written as ``null``.
    """

    log_event(
        logger,
        logging.INFO,
        REPORT_BUILT_EVENT,
        report=report,
        month=built.month_label or None,
        rows_read=built.rows_read,
        rows_skipped=built.rows_skipped,
        missing_columns=list(built.missing_columns),
        **counts,
    )
