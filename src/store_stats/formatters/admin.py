"""HTML rendering of the admin statistics page.

Builds the page body as a string; serving it is up to the host. All values
coming from the store are escaped.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from html import escape
from typing import TYPE_CHECKING, Optional

from store_stats.exceptions import StoreStatsError
from store_stats.formatters.console import NO_DATA_MESSAGE
from store_stats.sales.api import run_yearly_sales
from store_stats.sales.types import SalesAggregateRow, SalesSnapshot

if TYPE_CHECKING:
    from store_stats.config import StatsConfig
    from store_stats.sales.snapshot import SnapshotCache
    from store_stats.store.base import EntityStore

logger = logging.getLogger(__name__)

PAGE_SLUG = "store-stats"
SORT_FIELDS = ("quantity_sold", "total_sales")

# (exclusive lower bound, cell color), highest first
QUANTITY_BANDS = [
    (1000, "#ffcccc"),
    (500, "#ffcc99"),
    (250, "#ffffcc"),
    (125, "#ccffcc"),
]
DEFAULT_BAND = "white"


def quantity_color(quantity_sold: int) -> str:
    """Return the background color for a quantity cell."""
    for threshold, color in QUANTITY_BANDS:
        if quantity_sold > threshold:
            return color
    return DEFAULT_BAND


def sort_rows(
    rows: list[SalesAggregateRow],
    sort_by: Optional[str],
    sort_order: str = "asc",
) -> list[SalesAggregateRow]:
    """Sort rows by ``sort_by`` in ``sort_order``; unknown fields keep the cached order."""
    if sort_by not in SORT_FIELDS:
        return list(rows)
    return sorted(
        rows,
        key=lambda row: getattr(row, sort_by),
        reverse=sort_order == "desc",
    )


def toggle_order(sort_order: Optional[str]) -> str:
    """Order the column links should request next."""
    return "desc" if sort_order == "asc" else "asc"


def render_notice(message: str, success: bool = True) -> str:
    kind = "notice-success" if success else "notice-error"
    return (
        f'<div class="notice {kind} is-dismissible"><p>{escape(message)}</p></div>'
    )


def render_admin_page(
    snapshot: Optional[SalesSnapshot],
    sort_by: Optional[str] = None,
    sort_order: Optional[str] = None,
    notice: Optional[str] = None,
    notice_success: bool = True,
) -> str:
    """Render the statistics page.

    Args:
        snapshot: Cached snapshot, or None before the first run.
        sort_by: "quantity_sold" or "total_sales"; anything else keeps the
            cached order.
        sort_order: Order carried by the last column link. The page is
            shown in the opposite order, which the links then carry, so
            repeated clicks flip between ascending and descending.
        notice: Optional message shown above the page (e.g. run outcome).
        notice_success: Style of the notice.

    Returns:
        HTML fragment for the page body.
    """
    parts = []
    if notice:
        parts.append(render_notice(notice, notice_success))

    parts.append('<div class="wrap">')
    parts.append("<h1>Store Stats</h1>")
    if snapshot is not None and snapshot.window is not None:
        start = snapshot.window.start.strftime("%d/%m/%Y")
        end = snapshot.window.end.strftime("%d/%m/%Y")
        parts.append(f"<p>Start Date: {escape(start)}</p>")
        parts.append(f"<p>End Date: {escape(end)}</p>")
    parts.append(
        '<form method="post">'
        '<input type="hidden" name="store_stats_run" value="1">'
        '<p><input type="submit" class="button button-primary" '
        'value="Run Yearly Sales Calculation"></p>'
        "</form>"
    )

    if not snapshot:
        parts.append(f"<p>{NO_DATA_MESSAGE}</p>")
        parts.append("</div>")
        return "\n".join(parts)

    next_order = toggle_order(sort_order)
    rows = sort_rows(list(snapshot.rows), sort_by, next_order)

    def header_link(field: str, label: str) -> str:
        href = f"?page={PAGE_SLUG}&amp;sort_by={field}&amp;sort_order={next_order}"
        return f'<th><a href="{href}">{label}</a></th>'

    parts.append('<table class="widefat">')
    parts.append(
        "<thead><tr>"
        "<th>Product ID</th>"
        "<th>Product Name</th>"
        f"{header_link('quantity_sold', 'Quantity Sold')}"
        f"{header_link('total_sales', 'Total Sales')}"
        "</tr></thead>"
    )
    parts.append("<tbody>")
    for row in rows:
        color = quantity_color(row.quantity_sold)
        parts.append(
            "<tr>"
            f"<td>{row.product_id}</td>"
            f"<td>{escape(row.product_name)}</td>"
            f'<td style="background-color: {color};">{row.quantity_sold}</td>'
            f"<td>&pound;{row.total_sales:.2f}</td>"
            "</tr>"
        )
    parts.append("</tbody></table>")
    parts.append("</div>")
    return "\n".join(parts)


def handle_admin_request(
    store: EntityStore,
    cache: SnapshotCache,
    config: StatsConfig,
    query: Mapping[str, str],
    form: Mapping[str, str],
) -> str:
    """Serve one admin page request.

    A POST carrying ``store_stats_run`` runs the job first; its outcome is
    shown as a notice. Failures are reported on the page, not raised.
    """
    notice = None
    success = True
    if form.get("store_stats_run"):
        try:
            run_yearly_sales(store, cache, config)
            notice = "Yearly sales per product have been calculated and saved."
        except StoreStatsError as e:
            logger.error("Admin-triggered run failed: %s", e.cause)
            notice = f"Yearly sales calculation failed: {e.cause}"
            success = False

    try:
        snapshot = cache.get()
    except StoreStatsError as e:
        logger.error("Could not load cached snapshot: %s", e.cause)
        snapshot = None
        notice = f"Could not load sales data: {e.cause}"
        success = False

    return render_admin_page(
        snapshot,
        sort_by=query.get("sort_by"),
        sort_order=query.get("sort_order"),
        notice=notice,
        notice_success=success,
    )
