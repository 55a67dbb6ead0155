from __future__ import annotations

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from freelance_analytics.models import Earning, Proposal, StatusCount


def test_proposal_validates_and_ignores_unused_columns() -> None:
    rec = {
        "id": "0b6f4c1e",
        "user_id": "u1",
        "title": "Logo design",
        "status": "pending",
        "created_at": "2024-01-02T09:30:00+00:00",
        "estimated_value": 800,
        "generated_content": {"sections": []},
        "initial_prompt": "Design a logo",
    }
    p = Proposal.model_validate(rec)
    assert p.estimated_value == 800.0
    assert p.created_at == datetime(2024, 1, 2, 9, 30, tzinfo=timezone.utc)
    assert p.actual_value is None


def test_proposal_keeps_unknown_status() -> None:
    assert Proposal(id="p", status="archived").status == "archived"


def test_proposal_rejects_negative_estimate() -> None:
    with pytest.raises(ValidationError):
        Proposal(id="p", status="draft", estimated_value=-1)


def test_earning_requires_timestamp() -> None:
    with pytest.raises(ValidationError):
        Earning.model_validate({"id": "e", "amount": 10, "status": "paid"})


def test_status_count_forbids_extra_fields() -> None:
    with pytest.raises(ValidationError):
        StatusCount(status="draft", label="Draft", count=1, color="#000", extra=True)
