"""Reconcile the per-product popularity metadata with a sales snapshot.

After a successful sync every published product has exactly one record
under the popularity key: its quantity sold in the snapshot, or 0.
"""

from __future__ import annotations

import logging
from contextlib import nullcontext
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from store_stats.config import DEFAULT_META_KEY
from store_stats.exceptions import StoreError

if TYPE_CHECKING:
    from store_stats.sales.types import SalesSnapshot
    from store_stats.store.base import ProductMetaStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SyncResult:
    """Outcome of a popularity sync.

    Attributes:
        updated: Number of records written.
        error: Cause string when the sync failed, None on success.
    """

    updated: int
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def popularity_values(snapshot: SalesSnapshot, all_product_ids: set[int]) -> dict[int, int]:
    """Return the target popularity value for every product in ``all_product_ids``.

    Snapshot rows for products outside ``all_product_ids`` are ignored.
    """
    sold = snapshot.quantities()
    return {pid: sold.get(pid, 0) for pid in sorted(all_product_ids)}


def sync_popularity(
    snapshot: SalesSnapshot,
    all_product_ids: set[int],
    store: ProductMetaStore,
    meta_key: str = DEFAULT_META_KEY,
    atomic: bool = True,
) -> SyncResult:
    """Rewrite the popularity metadata from ``snapshot``.

    Steps: delete every record under ``meta_key``, insert one record per
    snapshot row, then insert 0 for every product without sales.

    Args:
        snapshot: Freshly aggregated sales snapshot.
        all_product_ids: Ids of every published product.
        store: Metadata store to write to.
        meta_key: Metadata key holding the popularity value.
        atomic: Run all steps in one store transaction. When False a failure
            leaves the steps already executed in place.

    Returns:
        SyncResult with the number of records written, or the failure cause.
    """
    values = popularity_values(snapshot, all_product_ids)
    skipped = set(snapshot.quantities()) - set(all_product_ids)
    if skipped:
        logger.debug("Skipping %d unpublished product(s): %s", len(skipped), sorted(skipped))

    sold_ids = [row.product_id for row in snapshot if row.product_id in values]
    sold_set = set(sold_ids)
    unsold_ids = [pid for pid in values if pid not in sold_set]

    written = 0
    boundary = store.transaction() if atomic else nullcontext()
    try:
        with boundary:
            removed = store.delete_meta(meta_key)
            logger.debug("Removed %d '%s' record(s)", removed, meta_key)
            for pid in sold_ids:
                store.insert_meta(pid, meta_key, values[pid])
                written += 1
            for pid in unsold_ids:
                store.insert_meta(pid, meta_key, 0)
                written += 1
    except StoreError as e:
        logger.error(
            "Popularity sync failed after %d write(s)%s: %s",
            written,
            " (rolled back)" if atomic else "",
            e.cause,
        )
        return SyncResult(updated=0 if atomic else written, error=e.cause)

    logger.info(
        "Synced '%s' for %d product(s): %d with sales, %d set to 0",
        meta_key,
        written,
        len(sold_ids),
        len(unsold_ids),
    )
    return SyncResult(updated=written)
