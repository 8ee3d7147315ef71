"""Catalog ordering by yearly popularity."""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from store_stats.config import DEFAULT_META_KEY

if TYPE_CHECKING:
    from store_stats.store.base import ProductMetaStore


def order_by_popularity(
    product_ids: Iterable[int],
    popularity: dict[int, int],
    descending: bool = True,
) -> list[int]:
    """Sort product ids by popularity value, ties by product id.

    Products missing from ``popularity`` count as 0, so none are dropped.

    Examples:
        >>> order_by_popularity([1, 2, 3], {2: 40, 3: 40})
        [2, 3, 1]
    """
    sign = -1 if descending else 1
    return sorted(product_ids, key=lambda pid: (sign * popularity.get(pid, 0), pid))


def catalog_order(store: ProductMetaStore, meta_key: str = DEFAULT_META_KEY) -> list[int]:
    """Return published product ids, most popular first."""
    return order_by_popularity(store.product_ids(), store.meta_values(meta_key))
