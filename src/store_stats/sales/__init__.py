"""Sales domain module.

Stages of the yearly sales job:

- **window**: resolve the reporting window from the fiscal start month.
- **aggregate**: group completed order line items by product.
- **snapshot**: single-slot cache of the latest aggregation.
- **popularity**: rewrite the per-product popularity metadata.

Example:
    >>> from store_stats import StatsConfig
    >>> from store_stats.sales import open_cache, open_store, run_yearly_sales
    >>>
    >>> config = StatsConfig.from_env()
    >>> result = run_yearly_sales(open_store(config), open_cache(config), config)
    >>> len(result.snapshot)
"""

from store_stats.sales.aggregate import aggregate
from store_stats.sales.api import RunResult, open_cache, open_store, run_yearly_sales
from store_stats.sales.popularity import SyncResult, sync_popularity
from store_stats.sales.snapshot import SnapshotCache
from store_stats.sales.types import ReportingWindow, SalesAggregateRow, SalesSnapshot
from store_stats.sales.window import resolve_window

__all__ = [
    "ReportingWindow",
    "RunResult",
    "SalesAggregateRow",
    "SalesSnapshot",
    "SnapshotCache",
    "SyncResult",
    "aggregate",
    "open_cache",
    "open_store",
    "resolve_window",
    "run_yearly_sales",
    "sync_popularity",
]
