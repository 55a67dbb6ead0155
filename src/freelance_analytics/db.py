"""MongoDB helpers and bulk upsert utility.

Centralizes creation of Mongo clients, batched reads of record collections
into Dask DataFrames and a stable bulk_upsert implementation used by the
loaders.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, List
from typing import cast, Any as TypingAny

import certifi
import dask.dataframe as dd
import pandas as pd
from pymongo import MongoClient, UpdateOne
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import PyMongoError

log = logging.getLogger(__name__)


def get_client(uri: str) -> MongoClient:
    """Return a configured PyMongo MongoClient for the provided URI.

    TLS with the certifi CA bundle is enabled for `mongodb+srv://` (hosted)
    URIs; plain `mongodb://` URIs connect as given.

    Args:
        uri: MongoDB connection URI.

    Returns:
        Configured MongoClient instance.
    """
    options: dict[str, Any] = {
        "serverSelectionTimeoutMS": 30000,
        "socketTimeoutMS": 30000,
        "connectTimeoutMS": 30000,
    }
    if uri.startswith("mongodb+srv://"):
        options.update(tls=True, tlsCAFile=certifi.where())
    return MongoClient(uri, **options)


def get_db(
    client: MongoClient[dict[str, Any]],
    db_name: str,
) -> Database[dict[str, Any]]:
    """Return the named Database instance from a MongoClient."""
    return client[db_name]


def load_collection_to_ddf(
    collection: Any,
    query: dict[str, Any] | None = None,
    projection: dict[str, Any] | None = None,
    batch_size: int = 50_000,
) -> Any:
    """Load a MongoDB collection into a Dask DataFrame using batched reads.

    Args:
        collection: PyMongo collection to read.
        query: Optional filter (e.g. ``{"user_id": ...}``).
        projection: Optional projection; `_id` is always dropped.
        batch_size: Cursor batch size and rows per intermediate frame.

    Returns:
        Dask DataFrame of the matching documents (empty when none match).
    """
    projection = {"_id": False, **(projection or {})}
    cursor = collection.find(query or {}, projection).batch_size(batch_size)

    pdf_batches: List[pd.DataFrame] = []
    buffer: List[dict[str, Any]] = []

    for doc in cursor:
        buffer.append(doc)
        if len(buffer) >= batch_size:
            pdf_batches.append(pd.DataFrame(buffer))
            buffer.clear()

    if buffer:
        pdf_batches.append(pd.DataFrame(buffer))

    dd_mod = cast(TypingAny, dd)
    if not pdf_batches:
        return dd_mod.from_pandas(pd.DataFrame(), npartitions=1)

    pdf = pd.concat(pdf_batches, ignore_index=True)
    nparts = max(1, len(pdf) // 200_000)

    log.info("Loaded %d documents from %s into %d partitions", len(pdf), collection.name, nparts)
    return dd_mod.from_pandas(pdf, npartitions=nparts)


def bulk_upsert(
    collection: Collection[dict[str, Any]],
    docs: Iterable[dict[str, Any]],
    key_field: str,
    batch_size: int = 1000,
) -> int:
    """Bulk upsert documents using `key_field` as the selector.

    Writes in batches; a failed batch is logged and skipped. Documents
    without `key_field` are skipped.

    Args:
        collection: Target PyMongo collection.
        docs: Iterable of document dictionaries to upsert.
        key_field: Document key to use for upsert selector.
        batch_size: Number of ops per bulk_write call.

    Returns:
        Number of documents upserted or modified.
    """
    ops: list[UpdateOne] = []
    written = 0

    def _flush() -> int:
        try:
            result = collection.bulk_write(ops, ordered=False)
        except PyMongoError as e:
            log.warning("bulk_upsert batch of %d failed: %s", len(ops), e)
            return 0
        return result.upserted_count + result.modified_count

    for d in docs:
        if d.get(key_field) in (None, ""):
            continue

        ops.append(
            UpdateOne(
                {key_field: d[key_field]},
                {"$set": d},
                upsert=True,
            )
        )

        if len(ops) >= batch_size:
            written += _flush()
            ops.clear()

    if ops:
        written += _flush()

    return written
