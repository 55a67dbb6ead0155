"""Raw-layer loading utilities.

This module upserts exported table rows into the MongoDB collection of the
same name, partition by partition and in batches for reliability.
"""

from __future__ import annotations

import logging
from typing import Any, List
from typing import cast, Any as TypingAny

import pandas as pd
from dask import delayed, compute  # type: ignore[attr-defined]

from freelance_analytics.config import get_settings
from freelance_analytics.db import bulk_upsert, get_client, get_db

log = logging.getLogger(__name__)

RAW_TABLES = ("proposals", "earnings", "messages", "profiles")
BATCH_SIZE = 1000


def to_documents(pdf: pd.DataFrame) -> List[dict[str, Any]]:
    """Convert a partition to BSON-safe dicts (NaN/NaT become None)."""
    if pdf is None or len(pdf) == 0:
        return []
    clean = pdf.astype(object).where(pd.notna(pdf), None)
    return cast(List[dict[str, Any]], clean.to_dict(orient="records"))


def _load_partition(pdf: pd.DataFrame, table: str) -> int:
    """Upsert a pandas partition into the `table` collection.

    Runs inside a Dask task and therefore opens and closes its own
    MongoDB connection.

    Returns:
        The number of documents upserted or modified from this partition.
    """
    docs = to_documents(pdf)
    if not docs:
        return 0

    settings = get_settings()
    client = get_client(settings.mongo_uri)
    try:
        collection = get_db(client, settings.mongo_db)[table]
        return bulk_upsert(collection, docs, "id", batch_size=BATCH_SIZE)
    finally:
        client.close()


def load_raw_to_mongo(ddf: Any, table: str) -> int:
    """Load a Dask DataFrame into a raw table collection using partitioned upserts.

    Args:
        ddf: Dask DataFrame of exported rows; each row needs an `id`.
        table: Target collection, one of `RAW_TABLES`.

    Returns:
        Total number of documents upserted or modified.

    Raises:
        ValueError: for unknown tables or exports without an `id` column.
    """
    if table not in RAW_TABLES:
        raise ValueError(f"Unknown table {table!r}; expected one of {RAW_TABLES}")
    if "id" not in ddf.columns:
        raise ValueError(f"Export for {table!r} has no 'id' column")

    log.info("Loading export into %s collection...", table)

    tasks = [delayed(_load_partition)(part, table) for part in ddf.to_delayed()]
    results = cast(TypingAny, compute)(*tasks)

    total = int(sum(results))
    log.info("Loaded %d documents into %s.", total, table)
    return total
