"""Console output formatting for the cached snapshot."""

from __future__ import annotations

import pandas as pd

from store_stats.sales.types import SalesSnapshot

NO_DATA_MESSAGE = "No sales data found."

CONSOLE_HEADERS = {
    "product_id": "Product ID",
    "product_name": "Product Title",
    "quantity_sold": "Quantity Sold",
    "total_sales": "Total Sales",
}


def format_window(snapshot: SalesSnapshot) -> str:
    if snapshot.window is None:
        return ""
    start = snapshot.window.start.strftime("%d/%m/%Y")
    end = snapshot.window.end.strftime("%d/%m/%Y")
    return f"Start Date: {start}  End Date: {end}"


def format_snapshot_table(snapshot: SalesSnapshot | None) -> str:
    """Build a plain-text table of the snapshot for console output.

    Args:
        snapshot: Cached snapshot, or None when no run has happened yet.

    Returns:
        The table, or NO_DATA_MESSAGE when there are no rows.
    """
    if not snapshot:
        return NO_DATA_MESSAGE

    df = snapshot.to_frame()
    df["total_sales"] = df["total_sales"].map(lambda v: f"{v:.2f}")
    df = df.rename(columns=CONSOLE_HEADERS)

    lines = []
    window_line = format_window(snapshot)
    if window_line:
        lines.append(window_line)
        lines.append("")
    lines.append(df.to_string(index=False))
    return "\n".join(lines)
