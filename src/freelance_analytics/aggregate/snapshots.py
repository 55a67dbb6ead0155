"""Per-user analytics snapshots and platform-wide totals.

Snapshots bundle everything the dashboard renders for one user so the page
can read a single document instead of recomputing from raw records.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Iterable

import pandas as pd

from freelance_analytics.aggregate.metrics import (
    DEFAULT_TZ,
    DEFAULT_WINDOW,
    numeric_series,
    read_field,
    compute_status_distribution,
    compute_summary_metrics,
    monthly_earnings_series,
    monthly_proposal_series,
)
from freelance_analytics.models import AnalyticsSnapshot, PlatformTotals


def build_user_snapshot(
    user_id: str,
    proposals: Iterable[Any],
    earnings: Iterable[Any],
    *,
    window: int = DEFAULT_WINDOW,
    tz: str = DEFAULT_TZ,
    now: datetime | None = None,
) -> AnalyticsSnapshot:
    """Compute all dashboard analytics for one user's records.

    Args:
        user_id: Owner the records belong to.
        proposals: That user's proposals.
        earnings: That user's earnings.
        window: Number of months kept in each monthly series.
        tz: Time zone for month boundaries.
        now: Generation time; also dates placeholder buckets.
    """
    now = now or datetime.now(timezone.utc)
    proposals = list(proposals)
    earnings = list(earnings)

    return AnalyticsSnapshot(
        user_id=user_id,
        summary=compute_summary_metrics(proposals, earnings),
        status_distribution=compute_status_distribution(proposals),
        monthly_proposals=monthly_proposal_series(proposals, window=window, tz=tz, now=now),
        monthly_earnings=monthly_earnings_series(earnings, window=window, tz=tz, now=now),
        generated_at=now,
    )


def build_user_snapshots(
    proposals: Iterable[Any],
    earnings: Iterable[Any],
    *,
    window: int = DEFAULT_WINDOW,
    tz: str = DEFAULT_TZ,
    now: datetime | None = None,
) -> list[AnalyticsSnapshot]:
    """Build one snapshot per distinct `user_id`, sorted by user.

    Records without an owner are skipped. A user with proposals but no
    earnings (or the reverse) still gets a snapshot.
    """
    now = now or datetime.now(timezone.utc)

    by_user: dict[str, tuple[list[Any], list[Any]]] = {}
    for p in proposals:
        uid = read_field(p, "user_id")
        if uid:
            by_user.setdefault(uid, ([], []))[0].append(p)
    for e in earnings:
        uid = read_field(e, "user_id")
        if uid:
            by_user.setdefault(uid, ([], []))[1].append(e)

    return [
        build_user_snapshot(uid, ps, es, window=window, tz=tz, now=now)
        for uid, (ps, es) in sorted(by_user.items())
    ]


def compute_platform_totals(
    proposals: Iterable[Any],
    earnings: Iterable[Any],
    now: datetime | None = None,
) -> PlatformTotals:
    """Marketplace-wide counts for the admin view.

    `users` counts distinct owners across both record lists.
    """
    proposals = list(proposals)
    earnings = list(earnings)

    owners = pd.Series(
        [read_field(r, "user_id") for r in proposals + earnings], dtype=object
    ).dropna()
    amounts = numeric_series([read_field(e, "amount") for e in earnings])

    return PlatformTotals(
        users=int(owners.nunique()),
        total_proposals=len(proposals),
        completed_proposals=sum(1 for p in proposals if read_field(p, "status") == "completed"),
        total_earnings=float(amounts.fillna(0.0).sum()),
        generated_at=now or datetime.now(timezone.utc),
    )
