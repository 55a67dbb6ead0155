"""Dashboard analytics over proposal and earning records.

Three operations feed the analytics dashboard:

- `compute_status_distribution`: proposal counts per status, in a fixed
  order, with chart colours.
- `compute_monthly_series`: records bucketed by calendar month, with one or
  more summed/counted columns, limited to the most recent months.
- `compute_summary_metrics`: headline counts, totals and rates.

All of them only read their inputs and build a fresh result on every call.
Records may be pydantic models or plain mappings. Pandas does the grouping.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Sequence

import pandas as pd

from freelance_analytics.models import (
    PROPOSAL_STATUSES,
    StatusCount,
    SummaryMetrics,
)

DEFAULT_WINDOW = 6
DEFAULT_TZ = "UTC"

# Fixed abbreviations keep labels independent of the process locale.
MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

STATUS_STYLE: dict[str, tuple[str, str]] = {
    "draft": ("Draft", "#6B7280"),
    "pending": ("Pending", "#F59E0B"),
    "approved": ("Approved", "#10B981"),
    "rejected": ("Rejected", "#EF4444"),
    "completed": ("Completed", "#3B82F6"),
}


def read_field(record: Any, name: str) -> Any:
    """Read `name` from a mapping or an attribute-style record."""
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def _to_utc(value: Any) -> pd.Timestamp | None:
    """Return `value` as a UTC timestamp, or None when it is not a timestamp.

    Naive values are taken to be UTC already.
    """
    if value is None:
        return None
    try:
        ts = pd.Timestamp(value)
    except (TypeError, ValueError):
        return None
    if pd.isna(ts):
        return None
    if ts.tzinfo is None:
        return ts.tz_localize("UTC")
    return ts.tz_convert("UTC")


def _month_label(period: pd.Period) -> str:
    return f"{MONTH_ABBR[period.month - 1]} {period.year:04d}"


def numeric_series(values: list[Any]) -> pd.Series:
    """Coerce raw values to floats; anything unparseable becomes NaN."""
    return pd.to_numeric(pd.Series(values, dtype=object), errors="coerce").astype("float64")


def _rate(numerator: float, denominator: float) -> float:
    if denominator <= 0:
        return 0.0
    return round(numerator / denominator * 100.0, 1)


# =========================================================
# STATUS DISTRIBUTION
# =========================================================

def compute_status_distribution(
    proposals: Iterable[Any],
    omit_empty: bool = False,
) -> list[StatusCount]:
    """Count proposals per status.

    Args:
        proposals: Proposal records.
        omit_empty: Drop statuses with a zero count (useful for pie charts).

    Returns:
        `StatusCount` entries ordered draft, pending, approved, rejected,
        completed. Proposals with any other status are not counted.
    """
    statuses = pd.Series([read_field(p, "status") for p in proposals], dtype=object)
    counts = statuses.value_counts().reindex(list(PROPOSAL_STATUSES), fill_value=0)

    out: list[StatusCount] = []
    for status in PROPOSAL_STATUSES:
        n = int(counts[status])
        if omit_empty and n == 0:
            continue
        label, color = STATUS_STYLE[status]
        out.append(StatusCount(status=status, label=label, count=n, color=color))
    return out


# =========================================================
# MONTHLY SERIES
# =========================================================

@dataclass(frozen=True)
class BucketField:
    """One numeric column of a monthly series.

    Attributes:
        name: Column name in each output bucket.
        source: Record field to sum. ``None`` counts records instead.
        where: Only records whose fields equal these values contribute;
            a mapping is accepted and stored as sorted `(field, value)` pairs.
    """
    name: str
    source: str | None = None
    where: tuple[tuple[str, Any], ...] = ()

    def __post_init__(self) -> None:
        if isinstance(self.where, Mapping):
            object.__setattr__(self, "where", tuple(sorted(self.where.items())))

    @property
    def is_count(self) -> bool:
        return self.source is None

    def value(self, record: Any) -> float:
        """Return this column's contribution for a single record."""
        for key, expected in self.where:
            if read_field(record, key) != expected:
                return 0
        if self.source is None:
            return 1
        raw = read_field(record, self.source)
        if raw is None:
            return 0.0
        try:
            number = float(raw)
        except (TypeError, ValueError):
            return 0.0
        return 0.0 if pd.isna(number) else number

    def zero(self) -> float:
        return 0 if self.is_count else 0.0


PROPOSAL_SERIES_FIELDS = (BucketField("count"),)
EARNING_SERIES_FIELDS = (
    BucketField("total", "amount"),
    BucketField("paid", "amount", {"status": "paid"}),
)

_TS = "__ts"
_PERIOD = "__period"


def _normalize_fields(
    bucket_fields: BucketField | str | Sequence[BucketField | str],
) -> list[BucketField]:
    if isinstance(bucket_fields, (BucketField, str)):
        bucket_fields = [bucket_fields]
    fields = [f if isinstance(f, BucketField) else BucketField(f, f) for f in bucket_fields]

    if not fields:
        raise ValueError("at least one bucket field is required")
    names = [f.name for f in fields]
    if "month" in names or len(set(names)) != len(names):
        raise ValueError(f"bucket field names must be unique and not 'month': {names}")
    return fields


def compute_monthly_series(
    records: Iterable[Any],
    date_field: str,
    bucket_fields: BucketField | str | Sequence[BucketField | str],
    *,
    window: int = DEFAULT_WINDOW,
    tz: str = DEFAULT_TZ,
    now: Any = None,
) -> list[dict[str, Any]]:
    """Aggregate records into calendar-month buckets.

    Args:
        records: Records carrying a timestamp in `date_field`.
        date_field: Name of the timestamp field; records without a usable
            timestamp are skipped.
        bucket_fields: Columns to compute per bucket. A plain string sums the
            record field of the same name.
        window: Keep only the most recent `window` buckets.
        tz: Time zone whose calendar defines month boundaries.
        now: Reference time for the placeholder bucket (defaults to the
            current time).

    Returns:
        A list of ``{"month": "Jan 2024", <field>: <value>, ...}`` dicts in
        chronological order. Never empty: with no bucketable records a single
        zero-valued bucket for the month of `now` is returned.
    """
    fields = _normalize_fields(bucket_fields)
    if window < 1:
        raise ValueError(f"window must be >= 1, got {window}")

    rows: list[dict[str, Any]] = []
    for record in records:
        ts = _to_utc(read_field(record, date_field))
        if ts is None:
            continue
        row: dict[str, Any] = {_TS: ts}
        for f in fields:
            row[f.name] = f.value(record)
        rows.append(row)

    series: list[dict[str, Any]] = []
    if rows:
        frame = pd.DataFrame(rows)
        local = pd.to_datetime(frame[_TS], utc=True).dt.tz_convert(tz).dt.tz_localize(None)
        frame[_PERIOD] = local.dt.to_period("M")

        grouped = (
            frame.groupby(_PERIOD, sort=True)[[f.name for f in fields]]
            .sum()
            .tail(window)
        )
        for period, values in grouped.iterrows():
            bucket: dict[str, Any] = {"month": _month_label(period)}
            for f in fields:
                v = values[f.name]
                bucket[f.name] = int(v) if f.is_count else float(v)
            series.append(bucket)

    if not series:
        ref = _to_utc(now) if now is not None else None
        if ref is None:
            ref = pd.Timestamp.now(tz="UTC")
        period = ref.tz_convert(tz).tz_localize(None).to_period("M")
        placeholder: dict[str, Any] = {"month": _month_label(period)}
        for f in fields:
            placeholder[f.name] = f.zero()
        series.append(placeholder)

    return series


def monthly_proposal_series(proposals: Iterable[Any], **kwargs: Any) -> list[dict[str, Any]]:
    """Proposals created per month (column `count`)."""
    return compute_monthly_series(proposals, "created_at", PROPOSAL_SERIES_FIELDS, **kwargs)


def monthly_earnings_series(earnings: Iterable[Any], **kwargs: Any) -> list[dict[str, Any]]:
    """Earnings recorded per month (columns `total` and `paid`)."""
    return compute_monthly_series(earnings, "created_at", EARNING_SERIES_FIELDS, **kwargs)


# =========================================================
# SUMMARY METRICS
# =========================================================

def compute_summary_metrics(
    proposals: Iterable[Any],
    earnings: Iterable[Any],
) -> SummaryMetrics:
    """Compute the KPI row of the dashboard.

    Rates are percentages rounded to one decimal and fall back to 0 when
    their denominator is 0. The average proposal value only considers
    proposals that have an `estimated_value`.
    """
    proposals = list(proposals)
    earnings = list(earnings)

    p_status = pd.Series([read_field(p, "status") for p in proposals], dtype=object)
    p_value = numeric_series([read_field(p, "estimated_value") for p in proposals])
    e_status = pd.Series([read_field(e, "status") for e in earnings], dtype=object)
    e_amount = numeric_series([read_field(e, "amount") for e in earnings]).fillna(0.0)

    total = len(p_status)
    approved = int((p_status == "approved").sum())
    completed = int((p_status == "completed").sum())

    total_earnings = float(e_amount.sum())
    paid_earnings = float(e_amount[e_status == "paid"].sum())
    pending_earnings = float(e_amount[e_status == "pending"].sum())

    valued = p_value.dropna()
    avg_value = float(valued.mean()) if len(valued) > 0 else 0.0

    return SummaryMetrics(
        total_proposals=total,
        approved_proposals=approved,
        completed_proposals=completed,
        approval_rate=_rate(approved, total),
        completion_rate=_rate(completed, approved),
        total_earnings=total_earnings,
        paid_earnings=paid_earnings,
        pending_earnings=pending_earnings,
        collection_rate=_rate(paid_earnings, total_earnings),
        avg_proposal_value=avg_value,
    )
