"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

_DEFAULT_MAX_UPLOAD_BYTES = 20 * 1024 * 1024
_MIN_MAX_UPLOAD_BYTES = 1024


def load_env_files() -> None:
    """
    Load simple KEY=VALUE pairs from `.env` and `.env.local` (if present).
    Existing process environment variables are not overwritten.
    """

    project_root = Path(__file__).resolve().parents[1]
    for filename in (".env", ".env.local"):
        env_path = project_root / filename
        if not env_path.exists():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_optional_str_env(name: str) -> str | None:
    """
    Read an optional string value from environment variables.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None


def _resolve_timezone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown REPORT_TIMEZONE %r; falling back to UTC", name)
        return ZoneInfo("UTC")


@dataclass(frozen=True)
class ReportSettings:
    """
    Runtime settings for report generation.
    """

    csv_path: Path | None = None
    timezone: ZoneInfo = ZoneInfo("UTC")
    csv_encoding: str = "utf-8-sig"
    max_upload_bytes: int = _DEFAULT_MAX_UPLOAD_BYTES


@lru_cache(maxsize=1)
def get_report_settings() -> ReportSettings:
    """
    Return cached report settings from environment variables.
    """

    csv_path = _get_optional_str_env("REPORT_CSV_PATH")
    return ReportSettings(
        csv_path=Path(csv_path) if csv_path else None,
        timezone=_resolve_timezone(_get_str_env("REPORT_TIMEZONE", "UTC")),
        csv_encoding=_get_str_env("REPORT_CSV_ENCODING", "utf-8-sig"),
        max_upload_bytes=max(
            _MIN_MAX_UPLOAD_BYTES,
            _get_int_env("REPORT_MAX_UPLOAD_BYTES", _DEFAULT_MAX_UPLOAD_BYTES),
        ),
    )


def get_log_level() -> str:
    return _get_str_env("LOG_LEVEL", "INFO").upper()
