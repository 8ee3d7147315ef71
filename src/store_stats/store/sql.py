"""SQL backends for the entity store and the snapshot option table.

Every statement is built with SQLAlchemy Core and executed with bound
parameters. Data layer failures are re-raised as StoreError with the
driver's message as the cause.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.exc import SQLAlchemyError

from store_stats.exceptions import StoreError
from store_stats.store.base import LineItemRecord
from store_stats.store.tables import (
    ORDER_COMPLETED,
    PUBLISHED,
    metadata,
    options,
    order_items,
    orders,
    product_meta,
    products,
)

logger = logging.getLogger(__name__)

_engine_cache: dict[str, sa.Engine] = {}


def get_engine(database_url: str) -> sa.Engine:
    """Return a cached engine for ``database_url``."""
    if database_url not in _engine_cache:
        _engine_cache[database_url] = sa.create_engine(database_url)
    return _engine_cache[database_url]


def create_schema(engine: sa.Engine) -> None:
    """Create any missing tables."""
    try:
        metadata.create_all(engine)
    except SQLAlchemyError as e:
        raise StoreError(f"Could not create schema: {e}") from e
    logger.info("Schema ready on %s", engine.url)


class SqlEntityStore:
    """Entity store over the ``products``/``orders``/``product_meta`` tables."""

    def __init__(self, engine: sa.Engine) -> None:
        self.engine = engine
        self._conn: Optional[sa.Connection] = None

    @contextmanager
    def _connect(self) -> Iterator[sa.Connection]:
        # Reuse the open transaction if there is one.
        if self._conn is not None:
            yield self._conn
            return
        with self.engine.begin() as conn:
            yield conn

    @contextmanager
    def transaction(self) -> Iterator[None]:
        if self._conn is not None:
            yield
            return
        try:
            with self.engine.begin() as conn:
                self._conn = conn
                try:
                    yield
                finally:
                    self._conn = None
        except SQLAlchemyError as e:
            raise StoreError(f"Transaction failed: {e}") from e

    def fetch_line_items(self, start: datetime, end: datetime) -> list[LineItemRecord]:
        stmt = (
            sa.select(
                order_items.c.product_id,
                products.c.name,
                order_items.c.quantity,
                order_items.c.line_total,
                order_items.c.bundle_price,
            )
            .select_from(
                order_items.join(orders, order_items.c.order_id == orders.c.id).join(
                    products, order_items.c.product_id == products.c.id
                )
            )
            .where(orders.c.status == ORDER_COMPLETED)
            .where(orders.c.completed_at >= start)
            .where(orders.c.completed_at <= end)
        )
        try:
            with self._connect() as conn:
                rows = conn.execute(stmt).all()
        except SQLAlchemyError as e:
            raise StoreError(f"Line item query failed: {e}") from e

        return [
            LineItemRecord(
                product_id=int(row.product_id),
                product_name=row.name,
                quantity=int(row.quantity),
                line_total=_decimal(row.line_total),
                bundle_price=None if row.bundle_price is None else _decimal(row.bundle_price),
            )
            for row in rows
        ]

    def product_ids(self) -> set[int]:
        stmt = sa.select(products.c.id).where(products.c.status == PUBLISHED)
        try:
            with self._connect() as conn:
                return {int(pid) for pid in conn.execute(stmt).scalars()}
        except SQLAlchemyError as e:
            raise StoreError(f"Product query failed: {e}") from e

    def delete_meta(self, key: str) -> int:
        stmt = sa.delete(product_meta).where(product_meta.c.meta_key == key)
        try:
            with self._connect() as conn:
                result = conn.execute(stmt)
        except SQLAlchemyError as e:
            raise StoreError(f"Could not delete '{key}' metadata: {e}") from e
        return result.rowcount or 0

    def insert_meta(self, product_id: int, key: str, value: int) -> None:
        stmt = sa.insert(product_meta).values(
            product_id=product_id, meta_key=key, meta_value=value
        )
        try:
            with self._connect() as conn:
                conn.execute(stmt)
        except SQLAlchemyError as e:
            raise StoreError(
                f"Could not insert '{key}' metadata for product {product_id}: {e}"
            ) from e

    def get_meta(self, product_id: int, key: str) -> Optional[int]:
        stmt = (
            sa.select(product_meta.c.meta_value)
            .where(product_meta.c.product_id == product_id)
            .where(product_meta.c.meta_key == key)
            .order_by(product_meta.c.id)
            .limit(1)
        )
        try:
            with self._connect() as conn:
                value = conn.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise StoreError(f"Could not read '{key}' for product {product_id}: {e}") from e
        return None if value is None else int(value)

    def set_meta(self, product_id: int, key: str, value: int) -> None:
        with self.transaction():
            with self._connect() as conn:
                try:
                    conn.execute(
                        sa.delete(product_meta)
                        .where(product_meta.c.product_id == product_id)
                        .where(product_meta.c.meta_key == key)
                    )
                    conn.execute(
                        sa.insert(product_meta).values(
                            product_id=product_id, meta_key=key, meta_value=value
                        )
                    )
                except SQLAlchemyError as e:
                    raise StoreError(
                        f"Could not update '{key}' for product {product_id}: {e}"
                    ) from e

    def meta_values(self, key: str) -> dict[int, int]:
        stmt = sa.select(product_meta.c.product_id, product_meta.c.meta_value).where(
            product_meta.c.meta_key == key
        )
        try:
            with self._connect() as conn:
                rows = conn.execute(stmt).all()
        except SQLAlchemyError as e:
            raise StoreError(f"Could not read '{key}' metadata: {e}") from e
        return {int(row.product_id): int(row.meta_value) for row in rows}


class SqlOptionStore:
    """Blob store over the ``options`` table, one row per key."""

    def __init__(self, engine: sa.Engine) -> None:
        self.engine = engine

    def get(self, key: str) -> Optional[str]:
        stmt = sa.select(options.c.value).where(options.c.name == key)
        try:
            with self.engine.connect() as conn:
                return conn.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise StoreError(f"Could not read option '{key}': {e}") from e

    def put(self, key: str, value: str) -> None:
        try:
            with self.engine.begin() as conn:
                conn.execute(sa.delete(options).where(options.c.name == key))
                conn.execute(sa.insert(options).values(name=key, value=value))
        except SQLAlchemyError as e:
            raise StoreError(f"Could not write option '{key}': {e}") from e


def _decimal(value: object) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))
