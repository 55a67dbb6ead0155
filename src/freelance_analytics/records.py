"""Read, clean and validate records from the store.

These helpers are the boundary between MongoDB documents and the typed
records the aggregator consumes. Queries are filtered by owner and the
returned lists are ordered by creation time, newest first.
"""
from __future__ import annotations

import logging
from typing import Any

from freelance_analytics.clean.transform import (
    clean_earnings_ddf,
    clean_messages_ddf,
    clean_proposals_ddf,
)
from freelance_analytics.clean.validate import partition_records, validate_partition
from freelance_analytics.db import load_collection_to_ddf
from freelance_analytics.models import Earning, Message, Profile, Proposal

log = logging.getLogger(__name__)


def _owner_query(user_id: str | None) -> dict[str, Any]:
    return {"user_id": user_id} if user_id else {}


def _newest_first(records: list[Any], field: str) -> list[Any]:
    return sorted(
        records,
        key=lambda r: (getattr(r, field) is not None, getattr(r, field) or 0),
        reverse=True,
    )


def fetch_proposals(db: Any, user_id: str | None = None) -> list[Proposal]:
    """Return validated proposals, optionally only those owned by `user_id`."""
    ddf = load_collection_to_ddf(db["proposals"], _owner_query(user_id))
    pdf = clean_proposals_ddf(ddf).compute()
    good, bad = validate_partition(pdf, Proposal)
    log.info("Fetched proposals: good=%d bad=%d", len(good), bad)
    return _newest_first(good, "created_at")


def fetch_earnings(db: Any, user_id: str | None = None) -> list[Earning]:
    """Return validated earnings, optionally only those owned by `user_id`."""
    ddf = load_collection_to_ddf(db["earnings"], _owner_query(user_id))
    pdf = clean_earnings_ddf(ddf).compute()
    good, bad = validate_partition(pdf, Earning)
    log.info("Fetched earnings: good=%d bad=%d", len(good), bad)
    return _newest_first(good, "created_at")


def fetch_messages(db: Any, user_id: str) -> list[Message]:
    """Return messages sent or received by `user_id` with both profiles joined.

    Messages whose profiles are missing keep `None` for that side.
    """
    query = {"$or": [{"sender_id": user_id}, {"receiver_id": user_id}]}
    pdf = clean_messages_ddf(load_collection_to_ddf(db["messages"], query)).compute()
    rows = partition_records(pdf)

    ids = {r[k] for r in rows for k in ("sender_id", "receiver_id") if r.get(k)}
    profiles = {
        doc["id"]: Profile.model_validate(doc)
        for doc in db["profiles"].find({"id": {"$in": sorted(ids)}}, {"_id": False})
    }

    messages, bad = validate_partition(
        pdf.assign(
            sender=[profiles.get(r["sender_id"]) for r in rows],
            receiver=[profiles.get(r["receiver_id"]) for r in rows],
        ),
        Message,
    )
    log.info("Fetched messages for %s: good=%d bad=%d", user_id, len(messages), bad)
    return messages
