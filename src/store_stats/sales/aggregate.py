"""Aggregate completed order line items into per-product yearly totals.

The store is queried once for the whole window; grouping, the bundle price
substitution and the ordering are done in pandas.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

import numpy as np
import pandas as pd

from store_stats.exceptions import AggregationError, StoreError
from store_stats.sales.types import ReportingWindow, SalesAggregateRow, SalesSnapshot
from store_stats.store.base import LineItemRecord

if TYPE_CHECKING:
    from store_stats.store.base import LineItemReader

logger = logging.getLogger(__name__)

LINE_ITEM_COLUMNS = ["product_id", "product_name", "quantity", "line_total", "bundle_price"]


def line_items_frame(records: Iterable[LineItemRecord]) -> pd.DataFrame:
    """Build a DataFrame with LINE_ITEM_COLUMNS from line item records.

    Money columns are floats; a missing bundle price becomes NaN.
    """
    df = pd.DataFrame(
        [
            (
                r.product_id,
                r.product_name,
                r.quantity,
                float(r.line_total),
                np.nan if r.bundle_price is None else float(r.bundle_price),
            )
            for r in records
        ],
        columns=LINE_ITEM_COLUMNS,
    )
    df["product_id"] = df["product_id"].astype("int64")
    df["quantity"] = df["quantity"].astype("int64")
    df["line_total"] = df["line_total"].astype("float64")
    df["bundle_price"] = df["bundle_price"].astype("float64")
    return df


def effective_amount(df: pd.DataFrame) -> pd.Series:
    """Return the money amount counted for each line.

    Bundled lines can carry a zero line total with the real price in
    ``bundle_price``. The bundle price is used only when the line total is
    exactly zero and a bundle price is present.
    """
    use_bundle = (df["line_total"] == 0) & df["bundle_price"].notna()
    return pd.Series(
        np.where(use_bundle, df["bundle_price"], df["line_total"]),
        index=df.index,
        dtype="float64",
    )


def summarize_line_items(df: pd.DataFrame) -> pd.DataFrame:
    """Group line items by product.

    Returns:
        DataFrame with product_id, product_name, quantity_sold, total_sales,
        sorted by quantity_sold descending then product_id ascending.
    """
    if df.empty:
        return pd.DataFrame(
            {
                "product_id": pd.Series(dtype="int64"),
                "product_name": pd.Series(dtype="object"),
                "quantity_sold": pd.Series(dtype="int64"),
                "total_sales": pd.Series(dtype="float64"),
            }
        )

    work = df.assign(amount=effective_amount(df))
    summary = (
        work.groupby("product_id", as_index=False, sort=False)
        .agg(
            product_name=("product_name", "first"),
            quantity_sold=("quantity", "sum"),
            total_sales=("amount", "sum"),
        )
    )
    summary["total_sales"] = summary["total_sales"].round(2)
    summary = summary.sort_values(
        ["quantity_sold", "product_id"],
        ascending=[False, True],
        kind="mergesort",
    ).reset_index(drop=True)
    return summary


def aggregate(
    store: LineItemReader,
    window: ReportingWindow,
    generated_at: datetime | None = None,
) -> SalesSnapshot:
    """Build the sales snapshot for ``window``.

    Args:
        store: Source of completed order line items.
        window: Inclusive reporting window.
        generated_at: Timestamp recorded on the snapshot (default: now).

    Returns:
        SalesSnapshot with one row per product sold in the window.

    Raises:
        AggregationError: If the store query fails. Nothing is written.
    """
    logger.info("Aggregating line items from %s to %s", window.start, window.end)
    try:
        records = list(store.fetch_line_items(window.start, window.end))
    except StoreError as e:
        logger.error("Line item query failed: %s", e.cause)
        raise AggregationError(e.cause) from e

    summary = summarize_line_items(line_items_frame(records))
    rows = tuple(
        SalesAggregateRow(
            product_id=int(rec.product_id),
            product_name=str(rec.product_name),
            quantity_sold=int(rec.quantity_sold),
            total_sales=Decimal(f"{rec.total_sales:.2f}"),
        )
        for rec in summary.itertuples(index=False)
    )
    logger.info("Aggregated %d line item(s) into %d product row(s)", len(records), len(rows))

    return SalesSnapshot(
        rows=rows,
        window=window,
        generated_at=generated_at or datetime.now().replace(microsecond=0),
    )
