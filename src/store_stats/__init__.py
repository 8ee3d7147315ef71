"""store_stats - yearly per-product sales statistics for an online store.

The package computes one fiscal year of sales per product from completed
orders, caches the result and keeps a per-product popularity value in sync
for catalog sorting.

Module Structure:
    store_stats.sales: The yearly sales job (window, aggregate, snapshot, popularity)
    store_stats.store: Entity store and blob store backends (SQL, file, memory)
    store_stats.formatters: Console table and admin page rendering
    store_stats.catalog: Catalog ordering by popularity
    store_stats.scheduling: Daily trigger
    store_stats.cli: ``store-stats`` command

Quick Start:
    >>> from store_stats import StatsConfig
    >>> from store_stats.sales import open_cache, open_store, run_yearly_sales
    >>>
    >>> config = StatsConfig(database_url="sqlite:///shop.db", fiscal_start_month=9)
    >>> result = run_yearly_sales(open_store(config), open_cache(config), config)
    >>> result.window.start
    >>> open_cache(config).get().rows[0]
"""

__version__ = "0.1.0"

from store_stats.config import StatsConfig
from store_stats.exceptions import (
    AggregationError,
    ConfigError,
    ETLError,
    StoreError,
    StoreStatsError,
    SyncError,
)

__all__ = [
    "AggregationError",
    "ConfigError",
    "ETLError",
    "StatsConfig",
    "StoreError",
    "StoreStatsError",
    "SyncError",
    "__version__",
]
