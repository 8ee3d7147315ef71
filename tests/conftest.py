"""Shared fixtures for store_stats tests."""

from collections.abc import Generator
from datetime import datetime
from decimal import Decimal
from pathlib import Path

import pytest
import sqlalchemy as sa

from store_stats.config import StatsConfig
from store_stats.sales.snapshot import SnapshotCache
from store_stats.store.memory import InMemoryBlobStore, InMemoryEntityStore, MemoryOrderLine
from store_stats.store.sql import create_schema
from store_stats.store.tables import order_items, orders, products


@pytest.fixture
def memory_store() -> InMemoryEntityStore:
    """Store with three published products and orders around the 2024/25 fiscal year."""
    store = InMemoryEntityStore()
    store.add_product(10, "Tomato")
    store.add_product(20, "Basil")
    store.add_product(30, "Carrot")

    store.add_order(
        1,
        datetime(2024, 9, 1, 0, 0, 0),
        [MemoryOrderLine(10, 100, Decimal("50.00")), MemoryOrderLine(30, 5, Decimal("7.50"))],
    )
    store.add_order(
        2,
        datetime(2025, 8, 31, 23, 59, 59),
        [MemoryOrderLine(10, 50, Decimal("25.00"))],
    )
    # Outside the window
    store.add_order(3, datetime(2024, 8, 31, 23, 59, 59), [MemoryOrderLine(20, 999, Decimal("1.00"))])
    # Not completed
    store.add_order(
        4,
        datetime(2025, 1, 10),
        [MemoryOrderLine(20, 7, Decimal("3.00"))],
        status="processing",
    )
    return store


@pytest.fixture
def memory_cache() -> SnapshotCache:
    return SnapshotCache(InMemoryBlobStore())


@pytest.fixture
def config() -> StatsConfig:
    return StatsConfig(fiscal_start_month=9)


@pytest.fixture
def db_url(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / 'store.db'}"


@pytest.fixture
def engine(db_url: str) -> Generator[sa.Engine, None, None]:
    """SQLite engine with the store schema and sample data."""
    eng = sa.create_engine(db_url)
    create_schema(eng)
    with eng.begin() as conn:
        conn.execute(
            sa.insert(products),
            [
                {"id": 10, "name": "Tomato", "status": "publish"},
                {"id": 20, "name": "Basil", "status": "publish"},
                {"id": 30, "name": "Carrot", "status": "publish"},
                {"id": 40, "name": "Old Seed Mix", "status": "draft"},
            ],
        )
        conn.execute(
            sa.insert(orders),
            [
                {"id": 1, "status": "completed", "completed_at": datetime(2024, 9, 1, 0, 0, 0)},
                {"id": 2, "status": "completed", "completed_at": datetime(2025, 8, 31, 23, 59, 59)},
                {"id": 3, "status": "completed", "completed_at": datetime(2024, 8, 31, 23, 59, 59)},
                {"id": 4, "status": "processing", "completed_at": datetime(2025, 1, 10)},
            ],
        )
        line_items = [
            # (order_id, product_id, quantity, line_total, bundle_price)
            (1, 10, 100, Decimal("50.00"), None),
            (1, 30, 5, Decimal("7.50"), None),
            (2, 10, 50, Decimal("25.00"), None),
            (2, 20, 2, Decimal("0"), Decimal("12.50")),
            (3, 20, 999, Decimal("1.00"), None),
            (4, 20, 7, Decimal("3.00"), None),
        ]
        conn.execute(
            sa.insert(order_items),
            [
                {
                    "order_id": order_id,
                    "product_id": product_id,
                    "quantity": quantity,
                    "line_total": line_total,
                    "bundle_price": bundle_price,
                }
                for order_id, product_id, quantity, line_total, bundle_price in line_items
            ],
        )
    yield eng
    eng.dispose()
