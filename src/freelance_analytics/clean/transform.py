"""Cleaning and normalization utilities.

This module contains transformations that are applied partition-wise using
Dask. The output is a Dask DataFrame whose schema is stable and suitable for
Pydantic validation into records.
"""
from __future__ import annotations

import logging
from typing import Any

import pandas as pd

log = logging.getLogger(__name__)

PROPOSAL_COLUMNS = (
    "id", "user_id", "title", "status", "created_at",
    "estimated_value", "actual_value", "completion_date",
)
EARNING_COLUMNS = (
    "id", "user_id", "proposal_id", "description", "status",
    "amount", "created_at", "payment_date",
)
MESSAGE_COLUMNS = ("id", "sender_id", "receiver_id", "sent_at")

ID_COLUMNS = {"id", "user_id", "proposal_id", "sender_id", "receiver_id"}
TEXT_COLUMNS = {"title", "description"}
TIMESTAMP_COLUMNS = {"created_at", "completion_date", "payment_date", "sent_at"}
NUMERIC_COLUMNS = {"estimated_value", "actual_value", "amount"}


def _missing(value: Any) -> bool:
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _as_id(value: Any) -> str | None:
    if value is None or _missing(value):
        return None
    text = str(value).strip()
    return text or None


def _as_status(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    return value.strip().lower() or None


def _as_text(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    text = " ".join(value.split())
    return text or None


def clean_partition(pdf: pd.DataFrame, columns: tuple[str, ...]) -> pd.DataFrame:
    """Normalize one partition of raw rows.

    Keeps exactly `columns` (missing ones are added empty), strips and
    lower-cases `status`, parses timestamps to UTC (invalid → NaT) and
    coerces numeric fields (invalid → NaN).

    Args:
        pdf: Pandas DataFrame for the partition.
        columns: Output column order.

    Returns:
        Cleaned Pandas DataFrame.
    """
    pdf = pdf.copy()
    for col in columns:
        if col not in pdf.columns:
            pdf[col] = None
    pdf = pdf[list(columns)]

    for col in columns:
        if col in ID_COLUMNS:
            pdf[col] = pdf[col].map(_as_id).astype(object)
        elif col == "status":
            pdf[col] = pdf[col].map(_as_status).astype(object)
        elif col in TEXT_COLUMNS:
            pdf[col] = pdf[col].map(_as_text).astype(object)
        elif col in TIMESTAMP_COLUMNS:
            pdf[col] = pd.to_datetime(
                pdf[col], errors="coerce", utc=True, format="ISO8601"
            )
        elif col in NUMERIC_COLUMNS:
            pdf[col] = pd.to_numeric(pdf[col], errors="coerce").astype("float64")

    return pdf


def _clean_ddf(ddf: Any, columns: tuple[str, ...]) -> Any:
    meta = clean_partition(ddf._meta, columns)
    return ddf.map_partitions(clean_partition, columns=columns, meta=meta)


def clean_proposals_ddf(ddf: Any) -> Any:
    """Clean raw proposal rows.

    Returns:
        Dask DataFrame with the columns in `PROPOSAL_COLUMNS`.
    """
    log.info("Cleaning proposals")
    return _clean_ddf(ddf, PROPOSAL_COLUMNS)


def clean_earnings_ddf(ddf: Any) -> Any:
    """Clean raw earning rows; a missing or invalid amount becomes 0."""
    log.info("Cleaning earnings")

    def _fill_amount(pdf: pd.DataFrame) -> pd.DataFrame:
        pdf = pdf.copy()
        pdf["amount"] = pdf["amount"].fillna(0.0)
        return pdf

    cleaned = _clean_ddf(ddf, EARNING_COLUMNS)
    return cleaned.map_partitions(_fill_amount, meta=cleaned._meta)


def clean_messages_ddf(ddf: Any) -> Any:
    """Clean raw message rows (ids and `sent_at`)."""
    log.info("Cleaning messages")
    return _clean_ddf(ddf, MESSAGE_COLUMNS)
