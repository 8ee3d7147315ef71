"""Public API for the yearly sales job.

This module provides the single entry point used by every trigger (daily
schedule, CLI, admin page):

1. Resolve the reporting window from the configured fiscal start month
2. Aggregate completed order line items into a snapshot
3. Replace the cached snapshot
4. Rewrite the per-product popularity metadata
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

from store_stats.exceptions import SyncError
from store_stats.sales.aggregate import aggregate
from store_stats.sales.popularity import SyncResult, sync_popularity
from store_stats.sales.snapshot import SnapshotCache
from store_stats.sales.window import resolve_window
from store_stats.store.files import JsonFileBlobStore
from store_stats.store.sql import SqlEntityStore, SqlOptionStore, get_engine

if TYPE_CHECKING:
    from store_stats.config import StatsConfig
    from store_stats.sales.types import ReportingWindow, SalesSnapshot
    from store_stats.store.base import EntityStore

logger = logging.getLogger(__name__)


@dataclass
class RunResult:
    """Result of one run of the yearly sales job.

    Attributes:
        window: Reporting window used.
        snapshot: Snapshot stored in the cache.
        sync: Outcome of the popularity sync.
    """

    window: ReportingWindow
    snapshot: SalesSnapshot
    sync: SyncResult


def run_yearly_sales(
    store: EntityStore,
    cache: SnapshotCache,
    config: StatsConfig,
    now: datetime | None = None,
) -> RunResult:
    """Run the yearly sales job once.

    Args:
        store: Entity store holding orders, products and product metadata.
        cache: Snapshot cache to replace.
        config: Job settings.
        now: Time of the run (default: current local time).

    Returns:
        RunResult describing the window, the new snapshot and the sync.

    Raises:
        AggregationError: If the line item query fails. The cache and the
            metadata are unchanged.
        SyncError: If the metadata sync fails. The cache already holds the
            new snapshot.
        StoreError: If the snapshot cannot be written or the product list
            cannot be read.
    """
    now = now or datetime.now()
    window = resolve_window(now, config.fiscal_start_month, config.window_policy)
    logger.info(
        "Yearly sales run at %s (fiscal start month %d, policy %s)",
        now.isoformat(sep=" ", timespec="seconds"),
        config.fiscal_start_month,
        config.window_policy,
    )

    snapshot = aggregate(store, window, generated_at=now.replace(microsecond=0))
    product_ids = store.product_ids()
    cache.put(snapshot)

    result = sync_popularity(
        snapshot,
        product_ids,
        store,
        meta_key=config.meta_key,
        atomic=config.atomic_sync,
    )
    if not result.ok:
        raise SyncError(result.error or "popularity sync failed")

    logger.info(
        "Yearly sales run complete: %d product row(s), %d popularity record(s)",
        len(snapshot),
        result.updated,
    )
    return RunResult(window=window, snapshot=snapshot, sync=result)


def open_store(config: StatsConfig) -> SqlEntityStore:
    """Return the SQL entity store for ``config.database_url``."""
    return SqlEntityStore(get_engine(config.database_url))


def open_cache(config: StatsConfig) -> SnapshotCache:
    """Return the snapshot cache configured by ``config``.

    File-backed under ``data_root`` when set, else the database option table.
    """
    if config.snapshot_dir is not None:
        blobs = JsonFileBlobStore(config.snapshot_dir)
    else:
        blobs = SqlOptionStore(get_engine(config.database_url))
    return SnapshotCache(blobs, key=config.snapshot_key)
