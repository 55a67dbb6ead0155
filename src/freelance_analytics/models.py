"""Pydantic models for marketplace records and analytics outputs.

Record models (`Proposal`, `Earning`, `Message`) describe rows owned by the
backing store; they ignore columns the analytics never read. Output models
define the shapes produced by the aggregator and persisted as snapshots.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, ConfigDict

PROPOSAL_STATUSES = ("draft", "pending", "approved", "rejected", "completed")
EARNING_STATUSES = ("pending", "paid", "cancelled")


class Proposal(BaseModel):
    """A proposal row.

    Attributes:
        id: Opaque unique identifier.
        status: Lifecycle status; values outside `PROPOSAL_STATUSES` are
            kept as-is and ignored by the status distribution.
        created_at: Creation timestamp, used for monthly bucketing.
        estimated_value: Optional quoted value of the proposal.
        user_id: Owner of the proposal.
        title: Proposal title.
        actual_value: Value actually billed, once known.
        completion_date: When the work was completed.
    """
    model_config = ConfigDict(extra="ignore", frozen=True)
    id: str
    status: str
    created_at: datetime | None = None
    estimated_value: float | None = Field(default=None, ge=0)
    user_id: str | None = None
    title: str | None = None
    actual_value: float | None = Field(default=None, ge=0)
    completion_date: datetime | None = None


class Earning(BaseModel):
    """An earning row recorded against a proposal."""
    model_config = ConfigDict(extra="ignore", frozen=True)
    id: str
    amount: float = Field(..., ge=0)
    status: str
    created_at: datetime
    user_id: str | None = None
    proposal_id: str | None = None
    description: str | None = None
    payment_date: datetime | None = None


class Profile(BaseModel):
    """Public profile fields attached to a message participant."""
    model_config = ConfigDict(extra="ignore", frozen=True)
    id: str
    full_name: str | None = None
    avatar_url: str | None = None


class Message(BaseModel):
    """A direct message with its sender and receiver profiles joined in."""
    model_config = ConfigDict(extra="ignore", frozen=True)
    sender_id: str
    receiver_id: str
    sent_at: datetime | None = None
    sender: Profile | None = None
    receiver: Profile | None = None


class StatusCount(BaseModel):
    """Number of proposals in one status, with its chart label and colour."""
    model_config = ConfigDict(extra="forbid")
    status: str
    label: str
    count: int = Field(..., ge=0)
    color: str


class SummaryMetrics(BaseModel):
    """Headline KPIs shown above the dashboard charts.

    Rates are percentages rounded to one decimal and are 0 when their
    denominator is 0.
    """
    model_config = ConfigDict(extra="forbid")
    total_proposals: int = Field(..., ge=0)
    approved_proposals: int = Field(..., ge=0)
    completed_proposals: int = Field(..., ge=0)
    approval_rate: float
    completion_rate: float
    total_earnings: float
    paid_earnings: float
    pending_earnings: float
    collection_rate: float
    avg_proposal_value: float


class AnalyticsSnapshot(BaseModel):
    """All analytics for one user, as persisted for the dashboard."""
    model_config = ConfigDict(extra="forbid")
    user_id: str
    summary: SummaryMetrics
    status_distribution: list[StatusCount]
    monthly_proposals: list[dict[str, Any]]
    monthly_earnings: list[dict[str, Any]]
    generated_at: datetime


class PlatformTotals(BaseModel):
    """Marketplace-wide totals for the admin view."""
    model_config = ConfigDict(extra="forbid")
    users: int = Field(..., ge=0)
    total_proposals: int = Field(..., ge=0)
    completed_proposals: int = Field(..., ge=0)
    total_earnings: float = Field(..., ge=0)
    generated_at: datetime
