"""Utilities for loading analytics snapshots into MongoDB.

Snapshots are small (one document per user) and are upserted into a
dedicated collection keyed by `user_id`. This module centralizes the upsert
strategy and logging behavior.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from pydantic import BaseModel
from pymongo import UpdateOne

log = logging.getLogger(__name__)

SNAPSHOT_COLLECTION = "analytics_snapshots"
PLATFORM_COLLECTION = "analytics_platform"


def load_snapshots(
    db: Any,
    snapshots: Iterable[BaseModel],
    collection_name: str = SNAPSHOT_COLLECTION,
    key_fields: tuple[str, ...] = ("user_id",),
) -> int:
    """Upsert analytics documents into MongoDB.

    Args:
        db: PyMongo Database (or anything indexable by collection name).
        snapshots: Pydantic models to persist.
        collection_name: Target MongoDB collection name.
        key_fields: Fields used as the upsert key.

    Returns:
        Number of upsert operations sent.
    """
    collection = db[collection_name]
    log.info("Writing analytics collection: %s", collection_name)

    ops = []
    for snap in snapshots:
        doc = snap.model_dump(mode="python")
        query = {k: doc[k] for k in key_fields}
        ops.append(UpdateOne(query, {"$set": doc}, upsert=True))

    if not ops:
        log.warning("No documents to load for %s", collection_name)
        return 0

    collection.bulk_write(ops, ordered=False)
    log.info("Analytics load complete for %s: %d documents", collection_name, len(ops))
    return len(ops)
