"""Analytics aggregation helpers.

This package turns validated proposal and earning records into the datasets
the dashboard renders (status distribution, monthly series, summary KPIs)
and bundles them into per-user snapshots stored in MongoDB as
read-optimized documents.
"""
