from __future__ import annotations

import pandas as pd
import streamlit as st
import altair as alt
from dotenv import dotenv_values

from freelance_analytics.aggregate.metrics import (
    compute_status_distribution,
    compute_summary_metrics,
    monthly_earnings_series,
    monthly_proposal_series,
)
from freelance_analytics.config import parse_window
from freelance_analytics.db import get_client, get_db
from freelance_analytics.records import fetch_earnings, fetch_proposals

# =====================================================
# Page config
# =====================================================
st.set_page_config(page_title="Proposal & Earnings Analytics", layout="wide")
st.title("📊 Proposal & Earnings Analytics")

# =====================================================
# MongoDB connection (strict: read from .env only)
# =====================================================
_env = dotenv_values(".env")
MONGO_URI = _env.get("MONGO_URI")
MONGO_DB = _env.get("MONGO_DB") or "freelance"
BUCKET_TZ = _env.get("ANALYTICS_TZ") or "UTC"
try:
    WINDOW = parse_window(_env.get("ANALYTICS_WINDOW"))
except RuntimeError as exc:
    st.error(str(exc))
    st.stop()

if not MONGO_URI:
    st.error(
        "Missing `MONGO_URI` in `.env`. Please create a `.env` file with `MONGO_URI=<your mongodb uri>` (do not put secrets in source control)."
    )
    st.stop()

try:
    client = get_client(MONGO_URI)
    # fail fast: ensure the client can reach the server
    client.admin.command("ping")
    db = get_db(client, MONGO_DB)
except Exception as exc:  # pragma: no cover - runtime failure handling
    st.error(f"Unable to connect to MongoDB: {exc}")
    st.stop()


# =====================================================
# Helpers
# =====================================================
@st.cache_data(ttl=60, show_spinner="Loading analytics...")
def load_analytics(user_id: str) -> dict:
    """Fetch one user's records and compute every dashboard dataset.

    Cached per user for a minute; the computation itself is pure so the
    cache only saves the round-trips and recomputation on re-render.
    """
    proposals = fetch_proposals(db, user_id)
    earnings = fetch_earnings(db, user_id)
    return {
        "summary": compute_summary_metrics(proposals, earnings).model_dump(),
        "status": [s.model_dump() for s in compute_status_distribution(proposals, omit_empty=True)],
        "monthly_proposals": monthly_proposal_series(proposals, window=WINDOW, tz=BUCKET_TZ),
        "monthly_earnings": monthly_earnings_series(earnings, window=WINDOW, tz=BUCKET_TZ),
    }


def kpi(label: str, value) -> None:
    """Display a simple KPI metric in the dashboard."""
    st.metric(label, value)


# =====================================================
# SECTION 0 - USER PICKER
# =====================================================
owners = sorted(
    set(db.proposals.distinct("user_id")) | set(db.earnings.distinct("user_id")),
    key=str,
)
owners = [o for o in owners if o]

if not owners:
    st.warning("No proposals or earnings found. Run `freelance_analytics ingest` first.")
    st.stop()

user_id = st.selectbox("User", owners, index=0)
data = load_analytics(user_id)
summary = data["summary"]

# =====================================================
# SECTION 1 - KEY METRICS
# =====================================================
st.header("📌 Key Metrics")

c1, c2, c3, c4 = st.columns(4)
with c1:
    kpi("Approval Rate", f"{summary['approval_rate']}%")
with c2:
    kpi("Completion Rate", f"{summary['completion_rate']}%")
with c3:
    kpi("Avg. Proposal Value", f"${summary['avg_proposal_value']:,.2f}")
with c4:
    kpi("Collection Rate", f"{summary['collection_rate']}%")

st.caption(
    f"{summary['total_proposals']} proposals • "
    f"${summary['paid_earnings']:,.2f} paid of ${summary['total_earnings']:,.2f} recorded • "
    f"${summary['pending_earnings']:,.2f} pending"
)

st.divider()

# =====================================================
# SECTION 2 - PROPOSALS
# =====================================================
left, right = st.columns(2)

with left:
    st.subheader("🎯 Proposal Status Distribution")
    df_status = pd.DataFrame(data["status"])
    if df_status.empty:
        st.info("No proposals yet.")
    else:
        pie = (
            alt.Chart(df_status)
            .mark_arc()
            .encode(
                theta=alt.Theta("count:Q"),
                color=alt.Color(
                    "label:N",
                    scale=alt.Scale(domain=list(df_status["label"]), range=list(df_status["color"])),
                    title="Status",
                ),
                tooltip=["label:N", "count:Q"],
            )
            .properties(height=300)
        )
        st.altair_chart(pie, width="stretch")

with right:
    st.subheader("📅 Monthly Proposal Creation")
    df_monthly = pd.DataFrame(data["monthly_proposals"])
    bars = (
        alt.Chart(df_monthly)
        .mark_bar()
        .encode(
            x=alt.X("month:N", sort=None, title=None),
            y=alt.Y("count:Q", title="Proposals"),
            tooltip=["month:N", "count:Q"],
        )
        .properties(height=300)
    )
    st.altair_chart(bars, width="stretch")

st.divider()

# =====================================================
# SECTION 3 - EARNINGS
# =====================================================
st.header("💵 Earnings Overview")

df_earn = pd.DataFrame(data["monthly_earnings"]).melt(
    id_vars="month", value_vars=["total", "paid"], var_name="series", value_name="amount"
)
lines = (
    alt.Chart(df_earn)
    .mark_line(point=True)
    .encode(
        x=alt.X("month:N", sort=None, title=None),
        y=alt.Y("amount:Q", title="Amount ($)"),
        color=alt.Color("series:N", title=None),
        tooltip=["month:N", "series:N", "amount:Q"],
    )
    .properties(height=320)
)
st.altair_chart(lines, width="stretch")

# =====================================================
# Footer
# =====================================================
st.caption("MongoDB • Dask • Pydantic • Streamlit | Freelance marketplace analytics")
