"""Interfaces to the host store's data.

The job never talks to a database directly. It goes through the protocols
below, so the SQL backend and the in-memory backend used in tests are
interchangeable.
"""

from __future__ import annotations

from collections.abc import Iterable
from contextlib import AbstractContextManager
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional, Protocol


@dataclass(frozen=True)
class LineItemRecord:
    """One product line of a completed order.

    Attributes:
        product_id: Product the line refers to.
        product_name: Product title at query time.
        quantity: Units on the line.
        line_total: Monetary total of the line.
        bundle_price: Alternate price set on bundled lines, None when absent.
    """

    product_id: int
    product_name: str
    quantity: int
    line_total: Decimal
    bundle_price: Optional[Decimal] = None


class LineItemReader(Protocol):
    """Read side of the entity store."""

    def fetch_line_items(self, start: datetime, end: datetime) -> Iterable[LineItemRecord]:
        """Return line items of orders completed within ``[start, end]``.

        Raises:
            StoreError: If the query fails.
        """
        ...


class ProductMetaStore(Protocol):
    """Per-product key/value metadata and the product catalog."""

    def product_ids(self) -> set[int]:
        """Return ids of all published products."""
        ...

    def delete_meta(self, key: str) -> int:
        """Delete every record stored under ``key``. Returns the number removed."""
        ...

    def insert_meta(self, product_id: int, key: str, value: int) -> None:
        ...

    def get_meta(self, product_id: int, key: str) -> Optional[int]:
        ...

    def set_meta(self, product_id: int, key: str, value: int) -> None:
        """Replace the value of ``key`` for one product."""
        ...

    def meta_values(self, key: str) -> dict[int, int]:
        """Map product id to the value stored under ``key``."""
        ...

    def transaction(self) -> AbstractContextManager[None]:
        """Group writes so they commit or roll back together."""
        ...


class EntityStore(LineItemReader, ProductMetaStore, Protocol):
    """Full entity store used by the job."""


class BlobStore(Protocol):
    """Named, opaque blob storage backing the snapshot cache."""

    def get(self, key: str) -> Optional[str]:
        ...

    def put(self, key: str, value: str) -> None:
        ...
