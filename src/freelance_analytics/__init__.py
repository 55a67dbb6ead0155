"""freelance_analytics package.

Turns the proposal and earning records of a freelance marketplace into
dashboard-ready analytics: status distributions, monthly time series and
summary rates. Also contains loaders that move table exports into MongoDB,
cleaning/validation of stored records, per-user snapshot building and
utilities for serving a Streamlit dashboard.

Architecture:
- Raw exports → MongoDB collections → cleaned, validated records
- Dask is used for partition-wise loading and cleaning
- Pydantic models type the records and the analytics outputs
- The aggregator in `aggregate.metrics` is pure and has no I/O
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
