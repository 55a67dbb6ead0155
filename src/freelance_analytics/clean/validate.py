"""Validation utilities for cleaned records.

This module validates cleaned partitions against the Pydantic record models
and converts pandas scalars into native Python types prior to validation.
"""
from __future__ import annotations

import logging
from typing import Any, TypeVar

import pandas as pd
from pydantic import BaseModel, ValidationError

log = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def _native(value: Any) -> Any:
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    return value


def partition_records(pdf: pd.DataFrame) -> list[dict[str, Any]]:
    """Return partition rows as dicts with missing values as None."""
    if len(pdf) == 0:
        return []
    rows = pdf.astype(object).where(pd.notna(pdf), None).to_dict(orient="records")
    return [{k: _native(v) for k, v in row.items()} for row in rows]


def validate_partition(pdf: pd.DataFrame, model: type[M]) -> tuple[list[M], int]:
    """Validate a pandas partition of records using Pydantic.

    Args:
        pdf: Cleaned pandas DataFrame.
        model: Record model to validate each row into.

    Returns:
        A tuple of (validated_records, bad_count).
    """
    good: list[M] = []
    bad = 0

    for rec in partition_records(pdf):
        try:
            good.append(model.model_validate(rec))
        except ValidationError as e:
            bad += 1
            log.debug("Rejected %s row id=%s: %s", model.__name__, rec.get("id"), e)

    if bad:
        log.warning("%d %s rows failed validation", bad, model.__name__)
    return good, bad
