"""In-memory store backends.

Used by the test suite and for dry runs. Orders are held as plain records;
``transaction()`` snapshots the metadata and restores it on error.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from store_stats.store.base import LineItemRecord

logger = logging.getLogger(__name__)

COMPLETED = "completed"


@dataclass
class MemoryOrderLine:
    product_id: int
    quantity: int
    line_total: Decimal
    bundle_price: Optional[Decimal] = None


@dataclass
class MemoryOrder:
    order_id: int
    completed_at: datetime
    lines: list[MemoryOrderLine] = field(default_factory=list)
    status: str = COMPLETED


class InMemoryEntityStore:
    """Entity store holding products, orders and product metadata in dicts."""

    def __init__(self) -> None:
        self.products: dict[int, str] = {}
        self.unpublished: set[int] = set()
        self.orders: list[MemoryOrder] = []
        # {key: {product_id: value}}
        self.meta: dict[str, dict[int, int]] = {}

    def add_product(self, product_id: int, name: str, published: bool = True) -> None:
        self.products[product_id] = name
        if not published:
            self.unpublished.add(product_id)

    def add_order(
        self,
        order_id: int,
        completed_at: datetime,
        lines: list[MemoryOrderLine],
        status: str = COMPLETED,
    ) -> None:
        self.orders.append(MemoryOrder(order_id, completed_at, list(lines), status))

    def fetch_line_items(self, start: datetime, end: datetime) -> list[LineItemRecord]:
        items = []
        for order in self.orders:
            if order.status != COMPLETED:
                continue
            if not start <= order.completed_at <= end:
                continue
            for line in order.lines:
                if line.product_id not in self.products:
                    continue
                items.append(
                    LineItemRecord(
                        product_id=line.product_id,
                        product_name=self.products[line.product_id],
                        quantity=line.quantity,
                        line_total=line.line_total,
                        bundle_price=line.bundle_price,
                    )
                )
        return items

    def product_ids(self) -> set[int]:
        return set(self.products) - self.unpublished

    def delete_meta(self, key: str) -> int:
        removed = self.meta.pop(key, {})
        return len(removed)

    def insert_meta(self, product_id: int, key: str, value: int) -> None:
        self.meta.setdefault(key, {})[product_id] = value

    def get_meta(self, product_id: int, key: str) -> Optional[int]:
        return self.meta.get(key, {}).get(product_id)

    def set_meta(self, product_id: int, key: str, value: int) -> None:
        self.meta.setdefault(key, {})[product_id] = value

    def meta_values(self, key: str) -> dict[int, int]:
        return dict(self.meta.get(key, {}))

    @contextmanager
    def transaction(self) -> Iterator[None]:
        saved = copy.deepcopy(self.meta)
        try:
            yield
        except Exception:
            logger.debug("Rolling back in-memory metadata")
            self.meta = saved
            raise


class InMemoryBlobStore:
    """Blob store backed by a dict."""

    def __init__(self) -> None:
        self.blobs: dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self.blobs.get(key)

    def put(self, key: str, value: str) -> None:
        self.blobs[key] = value
