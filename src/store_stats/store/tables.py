"""SQLAlchemy table definitions for the store database."""

from __future__ import annotations

import sqlalchemy as sa

metadata = sa.MetaData()

PUBLISHED = "publish"
ORDER_COMPLETED = "completed"

products = sa.Table(
    "products",
    metadata,
    sa.Column("id", sa.Integer(), primary_key=True),
    sa.Column("name", sa.String(length=255), nullable=False),
    sa.Column("status", sa.String(length=20), nullable=False, server_default=PUBLISHED),
)

orders = sa.Table(
    "orders",
    metadata,
    sa.Column("id", sa.Integer(), primary_key=True),
    sa.Column("status", sa.String(length=20), nullable=False),
    sa.Column("completed_at", sa.DateTime(), nullable=True),
    sa.Index("ix_orders_status_completed_at", "status", "completed_at"),
)

order_items = sa.Table(
    "order_items",
    metadata,
    sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
    sa.Column("order_id", sa.Integer(), sa.ForeignKey("orders.id"), nullable=False),
    sa.Column("product_id", sa.Integer(), sa.ForeignKey("products.id"), nullable=False),
    sa.Column("quantity", sa.Integer(), nullable=False),
    sa.Column("line_total", sa.Numeric(12, 2), nullable=False),
    sa.Column("bundle_price", sa.Numeric(12, 2), nullable=True),
)

product_meta = sa.Table(
    "product_meta",
    metadata,
    sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
    sa.Column("product_id", sa.Integer(), nullable=False),
    sa.Column("meta_key", sa.String(length=255), nullable=False),
    sa.Column("meta_value", sa.BigInteger(), nullable=False),
    sa.Index("ix_product_meta_key_product", "meta_key", "product_id"),
)

options = sa.Table(
    "options",
    metadata,
    sa.Column("name", sa.String(length=191), primary_key=True),
    sa.Column("value", sa.Text(), nullable=False),
)
