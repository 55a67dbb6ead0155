"""Readers for table exports.

The `read_export_to_pandas` function loads a single CSV, JSON or JSON-lines
export into a pandas DataFrame while `read_export` wraps it in a Dask
DataFrame with a stable partitioning strategy.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, cast

import dask.dataframe as dd
import pandas as pd

log = logging.getLogger(__name__)

PARTITION_ROWS = 200_000
SUPPORTED_SUFFIXES = (".csv", ".json", ".jsonl", ".ndjson")


def read_export_to_pandas(path: Path) -> pd.DataFrame:
    """Read one table export into pandas.

    Values are kept as exported (CSV cells as strings, JSON scalars as-is);
    typing happens in the Clean step. An `ingest_ts` column is added.

    Args:
        path: Export file path; the format is taken from its suffix.

    Raises:
        ValueError: for unsupported file extensions.
    """
    suffix = path.suffix.lower()
    if suffix == ".csv":
        pdf = pd.read_csv(path, dtype=str, keep_default_na=False, na_values=[""])
    elif suffix == ".json":
        pdf = pd.read_json(path, orient="records", dtype=False, convert_dates=False)
    elif suffix in (".jsonl", ".ndjson"):
        pdf = pd.read_json(path, lines=True, dtype=False, convert_dates=False)
    else:
        raise ValueError(
            f"Unsupported export format {suffix!r}; expected one of {SUPPORTED_SUFFIXES}"
        )

    if "id" in pdf.columns:
        pdf["id"] = pdf["id"].astype(str)
    pdf["ingest_ts"] = datetime.now(timezone.utc).isoformat()

    log.info("Read %d rows from %s", len(pdf), path)
    return pdf


def read_export(path: Path) -> Any:
    """Read a table export into a Dask DataFrame.

    Args:
        path: Export file path.

    Returns:
        Dask DataFrame with roughly `PARTITION_ROWS` rows per partition.
    """
    pdf = read_export_to_pandas(path)
    dd_mod = cast(Any, dd)
    return dd_mod.from_pandas(pdf, npartitions=max(1, len(pdf) // PARTITION_ROWS))
