"""Configuration helpers and Settings container.

This module provides a small `Settings` dataclass and `get_settings` which
reads environment variables (optionally from a `.env` file at the project
root) and checks that the analytics window is usable.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import os

from dotenv import load_dotenv

from freelance_analytics.aggregate.metrics import DEFAULT_TZ, DEFAULT_WINDOW

# Explicitly load .env from project root
PROJECT_ROOT = Path(__file__).resolve().parents[2]
load_dotenv(PROJECT_ROOT / ".env")


@dataclass(frozen=True)
class Settings:
    """Container for analytics configuration read from the environment.

    Attributes:
        mongo_uri: MongoDB connection URI.
        mongo_db: Target MongoDB database name.
        bucket_tz: Time zone used for monthly bucket boundaries.
        window: Number of most recent monthly buckets kept in a series.
        log_path: Optional log file for CLI runs.
    """
    mongo_uri: str
    mongo_db: str
    bucket_tz: str
    window: int
    log_path: Path | None


def parse_window(raw: str | None) -> int:
    """Parse an `ANALYTICS_WINDOW` value; unset or blank means the default.

    Raises:
        RuntimeError: if the value is not a positive integer.
    """
    text = (raw or "").strip()
    if not text:
        return DEFAULT_WINDOW
    try:
        window = int(text)
    except ValueError:
        window = 0
    if window < 1:
        raise RuntimeError(f"ANALYTICS_WINDOW must be a positive integer, got {raw!r}.")
    return window


def get_settings() -> Settings:
    """Read environment variables and return a frozen `Settings` object.

    Raises:
        RuntimeError: if `ANALYTICS_WINDOW` is not a positive integer.
    """
    mongo_uri = os.getenv("MONGO_URI", "mongodb://localhost:27017")
    mongo_db = os.getenv("MONGO_DB", "freelance")
    bucket_tz = os.getenv("ANALYTICS_TZ", DEFAULT_TZ).strip() or DEFAULT_TZ
    window = parse_window(os.getenv("ANALYTICS_WINDOW"))
    raw_log = os.getenv("ANALYTICS_LOG", "logs/analytics.log").strip()

    return Settings(
        mongo_uri=mongo_uri,
        mongo_db=mongo_db,
        bucket_tz=bucket_tz,
        window=window,
        log_path=Path(raw_log) if raw_log else None,
    )
