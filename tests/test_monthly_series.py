from __future__ import annotations

from datetime import datetime, timezone

import pytest

from freelance_analytics.aggregate.metrics import (
    BucketField,
    compute_monthly_series,
    monthly_earnings_series,
    monthly_proposal_series,
)
from freelance_analytics.models import Earning, Proposal

NOW = datetime(2024, 3, 10, tzinfo=timezone.utc)


def _proposal(pid: str, created: datetime | None) -> Proposal:
    return Proposal(id=pid, status="pending", created_at=created)


def test_same_month_shares_a_bucket() -> None:
    proposals = [
        _proposal("a", datetime(2024, 1, 15, tzinfo=timezone.utc)),
        _proposal("b", datetime(2024, 1, 28, tzinfo=timezone.utc)),
        _proposal("c", datetime(2024, 2, 5, tzinfo=timezone.utc)),
    ]
    series = monthly_proposal_series(proposals, now=NOW)
    assert series == [
        {"month": "Jan 2024", "count": 2},
        {"month": "Feb 2024", "count": 1},
    ]


def test_buckets_are_chronological_for_unsorted_input() -> None:
    proposals = [
        _proposal("a", datetime(2024, 2, 1, tzinfo=timezone.utc)),
        _proposal("b", datetime(2023, 12, 31, tzinfo=timezone.utc)),
        _proposal("c", datetime(2024, 1, 1, tzinfo=timezone.utc)),
    ]
    months = [b["month"] for b in monthly_proposal_series(proposals, now=NOW)]
    assert months == ["Dec 2023", "Jan 2024", "Feb 2024"]


def test_only_latest_six_months_are_kept() -> None:
    proposals = [
        _proposal(str(m), datetime(2023, m, 1, tzinfo=timezone.utc)) for m in range(1, 13)
    ]
    series = monthly_proposal_series(proposals, now=NOW)
    assert len(series) == 6
    assert [b["month"] for b in series] == [
        "Jul 2023", "Aug 2023", "Sep 2023", "Oct 2023", "Nov 2023", "Dec 2023",
    ]


def test_window_can_be_changed() -> None:
    proposals = [
        _proposal(str(m), datetime(2023, m, 1, tzinfo=timezone.utc)) for m in range(1, 5)
    ]
    series = monthly_proposal_series(proposals, window=2, now=NOW)
    assert [b["month"] for b in series] == ["Mar 2023", "Apr 2023"]


def test_empty_input_yields_single_placeholder() -> None:
    assert monthly_proposal_series([], now=NOW) == [{"month": "Mar 2024", "count": 0}]
    assert monthly_earnings_series([], now=NOW) == [
        {"month": "Mar 2024", "total": 0.0, "paid": 0.0}
    ]


def test_records_without_timestamp_are_skipped() -> None:
    series = monthly_proposal_series([_proposal("a", None)], now=NOW)
    assert series == [{"month": "Mar 2024", "count": 0}]


def test_earnings_sum_total_and_paid() -> None:
    earnings = [
        Earning(id="1", amount=100, status="paid", created_at=datetime(2024, 1, 3, tzinfo=timezone.utc)),
        Earning(id="2", amount=50, status="pending", created_at=datetime(2024, 1, 20, tzinfo=timezone.utc)),
        Earning(id="3", amount=25.5, status="paid", created_at=datetime(2024, 2, 2, tzinfo=timezone.utc)),
    ]
    series = monthly_earnings_series(earnings, now=NOW)
    assert series == [
        {"month": "Jan 2024", "total": 150.0, "paid": 100.0},
        {"month": "Feb 2024", "total": 25.5, "paid": 25.5},
    ]


def test_naive_timestamps_are_utc_and_tz_moves_boundaries() -> None:
    records = [{"created_at": datetime(2024, 1, 31, 23, 30), "n": 1}]
    assert compute_monthly_series(records, "created_at", "n", now=NOW)[0]["month"] == "Jan 2024"

    tokyo = compute_monthly_series(records, "created_at", "n", tz="Asia/Tokyo", now=NOW)
    assert tokyo == [{"month": "Feb 2024", "n": 1.0}]


def test_string_timestamps_and_conditional_counts() -> None:
    records = [
        {"created_at": "2024-05-01T10:00:00Z", "status": "paid"},
        {"created_at": "2024-05-09T10:00:00+00:00", "status": "pending"},
        {"created_at": "not a date", "status": "paid"},
    ]
    fields = [BucketField("all"), BucketField("paid", where={"status": "paid"})]
    series = compute_monthly_series(records, "created_at", fields, now=NOW)
    assert series == [{"month": "May 2024", "all": 2, "paid": 1}]


def test_repeated_calls_are_identical() -> None:
    proposals = [_proposal("a", datetime(2024, 1, 15, tzinfo=timezone.utc))]
    assert monthly_proposal_series(proposals, now=NOW) == monthly_proposal_series(proposals, now=NOW)


@pytest.mark.parametrize("fields", [[], ["month"], ["x", "x"]])
def test_invalid_bucket_fields_rejected(fields: list[str]) -> None:
    with pytest.raises(ValueError):
        compute_monthly_series([], "created_at", fields)


def test_invalid_window_rejected() -> None:
    with pytest.raises(ValueError):
        monthly_proposal_series([], window=0)


def test_bucket_fields_are_hashable() -> None:
    paid = BucketField("paid", "amount", {"status": "paid"})
    assert paid.where == (("status", "paid"),)
    assert hash(paid) == hash(BucketField("paid", "amount", (("status", "paid"),)))
    assert len({f for f in (paid, paid)}) == 1
