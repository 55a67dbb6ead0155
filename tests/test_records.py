from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from freelance_analytics.conversations import conversation_partners
from freelance_analytics.records import fetch_earnings, fetch_messages, fetch_proposals


def _matches(doc: dict[str, Any], query: dict[str, Any]) -> bool:
    for key, expected in query.items():
        if key == "$or":
            if not any(_matches(doc, q) for q in expected):
                return False
        elif isinstance(expected, dict) and "$in" in expected:
            if doc.get(key) not in expected["$in"]:
                return False
        elif doc.get(key) != expected:
            return False
    return True


class FakeCursor(list):
    def batch_size(self, size: int) -> "FakeCursor":
        return self


class FakeCollection:
    """Answers find() from in-memory documents instead of MongoDB."""

    def __init__(self, name: str, docs: list[dict[str, Any]]) -> None:
        self.name = name
        self.docs = docs
        self.queries: list[dict[str, Any]] = []

    def find(self, query: dict[str, Any], projection: dict[str, Any] | None = None) -> FakeCursor:
        self.queries.append(query)
        return FakeCursor(dict(d) for d in self.docs if _matches(d, query))


def _db() -> dict[str, FakeCollection]:
    proposals = [
        {"id": "p1", "user_id": "u1", "status": "approved", "created_at": "2024-01-01T00:00:00Z"},
        {"id": "p2", "user_id": "u1", "status": "pending", "created_at": "2024-03-01T00:00:00Z"},
        {"id": "p3", "user_id": "u1", "status": "draft", "created_at": None},
        {"id": "p4", "user_id": "u2", "status": "draft", "created_at": "2024-05-01T00:00:00Z"},
    ]
    earnings = [
        {"id": "e1", "user_id": "u1", "amount": "100", "status": "paid", "created_at": "2024-01-05T00:00:00Z"},
        {"id": "e2", "user_id": "u1", "amount": "-1", "status": "paid", "created_at": "2024-01-06T00:00:00Z"},
        {"id": "e3", "user_id": "u2", "amount": "5", "status": "pending", "created_at": "2024-02-01T00:00:00Z"},
    ]
    messages = [
        {"id": "m1", "sender_id": "u1", "receiver_id": "u2", "sent_at": "2024-01-01T10:00:00Z"},
        {"id": "m2", "sender_id": "u3", "receiver_id": "u1", "sent_at": "2024-01-02T10:00:00Z"},
        {"id": "m3", "sender_id": "u2", "receiver_id": "u3", "sent_at": "2024-01-03T10:00:00Z"},
    ]
    profiles = [
        {"id": "u1", "full_name": "Una"},
        {"id": "u2", "full_name": "Dos"},
        {"id": "u3", "full_name": "Tres", "avatar_url": "https://example.com/3.png"},
    ]
    return {
        "proposals": FakeCollection("proposals", proposals),
        "earnings": FakeCollection("earnings", earnings),
        "messages": FakeCollection("messages", messages),
        "profiles": FakeCollection("profiles", profiles),
    }


def test_fetch_proposals_filters_by_owner_newest_first() -> None:
    db = _db()
    proposals = fetch_proposals(db, "u1")

    assert db["proposals"].queries == [{"user_id": "u1"}]
    assert [p.id for p in proposals] == ["p2", "p1", "p3"]
    assert proposals[0].created_at == datetime(2024, 3, 1, tzinfo=timezone.utc)
    assert proposals[2].created_at is None


def test_fetch_proposals_without_owner_reads_everything() -> None:
    db = _db()
    assert {p.id for p in fetch_proposals(db)} == {"p1", "p2", "p3", "p4"}
    assert db["proposals"].queries == [{}]


def test_fetch_earnings_drops_invalid_rows() -> None:
    earnings = fetch_earnings(_db(), "u1")
    assert [e.id for e in earnings] == ["e1"]
    assert earnings[0].amount == 100.0


def test_fetch_messages_joins_profiles() -> None:
    messages = fetch_messages(_db(), "u1")

    assert {(m.sender_id, m.receiver_id) for m in messages} == {("u1", "u2"), ("u3", "u1")}
    for m in messages:
        assert m.sender is not None and m.sender.id == m.sender_id
        assert m.receiver is not None and m.receiver.id == m.receiver_id

    partners = conversation_partners(messages, "u1")
    assert [p.full_name for p in partners] == ["Tres", "Dos"]
    assert partners[0].avatar_url == "https://example.com/3.png"


def test_fetch_from_empty_collections() -> None:
    db = {name: FakeCollection(name, []) for name in ("proposals", "earnings", "messages", "profiles")}
    assert fetch_proposals(db, "u1") == []
    assert fetch_earnings(db, "u1") == []
    assert fetch_messages(db, "u1") == []
