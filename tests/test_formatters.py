"""Tests for the console table and the admin page."""

import json
from datetime import datetime
from decimal import Decimal

import pytest

from store_stats.config import StatsConfig
from store_stats.exceptions import StoreError
from store_stats.formatters.admin import (
    handle_admin_request,
    quantity_color,
    render_admin_page,
    sort_rows,
    toggle_order,
)
from store_stats.formatters.console import NO_DATA_MESSAGE, format_snapshot_table
from store_stats.sales.snapshot import SnapshotCache
from store_stats.sales.types import ReportingWindow, SalesAggregateRow, SalesSnapshot
from store_stats.store.memory import InMemoryBlobStore, InMemoryEntityStore


@pytest.fixture
def snapshot() -> SalesSnapshot:
    return SalesSnapshot(
        rows=(
            SalesAggregateRow(10, "Tomato", 1200, Decimal("600.00")),
            SalesAggregateRow(30, "Carrot <Nantes>", 130, Decimal("900.50")),
            SalesAggregateRow(20, "Basil", 5, Decimal("2.25")),
        ),
        window=ReportingWindow(datetime(2024, 9, 1), datetime(2025, 8, 31, 23, 59, 59)),
    )


class TestConsoleTable:
    def test_no_snapshot(self) -> None:
        assert format_snapshot_table(None) == NO_DATA_MESSAGE

    def test_empty_snapshot(self) -> None:
        assert format_snapshot_table(SalesSnapshot()) == NO_DATA_MESSAGE

    def test_table_has_headers_and_rows(self, snapshot: SalesSnapshot) -> None:
        text = format_snapshot_table(snapshot)
        assert "Start Date: 01/09/2024  End Date: 31/08/2025" in text
        for header in ("Product ID", "Product Title", "Quantity Sold", "Total Sales"):
            assert header in text
        assert "Tomato" in text
        assert "600.00" in text
        assert text.index("Tomato") < text.index("Basil")


class TestAdminPage:
    @pytest.mark.parametrize(
        "quantity,color",
        [
            (1001, "#ffcccc"),
            (1000, "#ffcc99"),
            (501, "#ffcc99"),
            (500, "#ffffcc"),
            (251, "#ffffcc"),
            (250, "#ccffcc"),
            (126, "#ccffcc"),
            (125, "white"),
            (0, "white"),
        ],
    )
    def test_quantity_bands(self, quantity: int, color: str) -> None:
        assert quantity_color(quantity) == color

    def test_toggle_order(self) -> None:
        assert toggle_order("asc") == "desc"
        assert toggle_order("desc") == "asc"
        assert toggle_order(None) == "asc"

    def test_sort_rows(self, snapshot: SalesSnapshot) -> None:
        rows = list(snapshot.rows)
        assert [r.product_id for r in sort_rows(rows, "total_sales", "desc")] == [30, 10, 20]
        assert [r.product_id for r in sort_rows(rows, "quantity_sold", "asc")] == [20, 30, 10]
        assert [r.product_id for r in sort_rows(rows, "product_name", "asc")] == [10, 30, 20]

    def test_page_without_data(self) -> None:
        html = render_admin_page(None)
        assert NO_DATA_MESSAGE in html
        assert "Run Yearly Sales Calculation" in html
        assert "<table" not in html

    def test_page_with_data(self, snapshot: SalesSnapshot) -> None:
        html = render_admin_page(snapshot)
        assert "<p>Start Date: 01/09/2024</p>" in html
        assert "<p>End Date: 31/08/2025</p>" in html
        assert 'style="background-color: #ffcccc;">1200<' in html
        assert 'style="background-color: #ccffcc;">130<' in html
        assert "&pound;900.50" in html
        assert "Carrot &lt;Nantes&gt;" in html
        assert "sort_by=quantity_sold&amp;sort_order=asc" in html

    def test_sort_link_toggles(self, snapshot: SalesSnapshot) -> None:
        html = render_admin_page(snapshot, sort_by="total_sales", sort_order="asc")
        # Requested "asc" is shown descending and links now carry "desc"
        assert "sort_order=desc" in html
        assert html.index("Carrot") < html.index("Tomato") < html.index("Basil")

    def test_notice(self) -> None:
        html = render_admin_page(None, notice="Done <ok>", notice_success=False)
        assert 'class="notice notice-error is-dismissible"' in html
        assert "Done &lt;ok&gt;" in html


class TestAdminRequest:
    def test_view_without_run(self, snapshot: SalesSnapshot) -> None:
        cache = SnapshotCache(InMemoryBlobStore())
        cache.put(snapshot)
        html = handle_admin_request(InMemoryEntityStore(), cache, StatsConfig(), {}, {})
        assert "notice" not in html
        assert "Tomato" in html

    def test_run_success_notice(self, memory_store: InMemoryEntityStore) -> None:
        cache = SnapshotCache(InMemoryBlobStore())
        html = handle_admin_request(
            memory_store, cache, StatsConfig(), {}, {"store_stats_run": "1"}
        )
        assert "notice-success" in html
        assert "have been calculated and saved" in html
        assert cache.get() is not None

    def test_run_failure_notice(self) -> None:
        class FailingStore(InMemoryEntityStore):
            def fetch_line_items(self, start, end):
                raise StoreError("Lost connection to server")

        html = handle_admin_request(
            FailingStore(),
            SnapshotCache(InMemoryBlobStore()),
            StatsConfig(),
            {},
            {"store_stats_run": "1"},
        )
        assert "notice-error" in html
        assert "Lost connection to server" in html
        assert NO_DATA_MESSAGE in html

    def test_corrupt_snapshot_shows_error_notice(self, snapshot: SalesSnapshot) -> None:
        blobs = InMemoryBlobStore()
        blob = snapshot.to_dict()
        blob["rows"][0]["total_sales"] = "abc"
        blobs.put("yearly_sales_per_product", json.dumps(blob))

        html = handle_admin_request(
            InMemoryEntityStore(), SnapshotCache(blobs), StatsConfig(), {}, {}
        )
        assert "notice-error" in html
        assert "Could not load sales data" in html
        assert NO_DATA_MESSAGE in html
