"""Shared types for the yearly sales job."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any

import pandas as pd

SNAPSHOT_COLUMNS = ["product_id", "product_name", "quantity_sold", "total_sales"]

_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass(frozen=True)
class ReportingWindow:
    """Inclusive reporting window ``[start, end]``.

    Attributes:
        start: First instant included in the report.
        end: Last instant included in the report.
    """

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if not self.start < self.end:
            raise ValueError(f"Window start {self.start} must be before end {self.end}")

    def to_dict(self) -> dict[str, str]:
        return {
            "start": self.start.strftime(_TIMESTAMP_FORMAT),
            "end": self.end.strftime(_TIMESTAMP_FORMAT),
        }

    @classmethod
    def from_dict(cls, data: dict[str, str]) -> ReportingWindow:
        return cls(
            start=datetime.strptime(data["start"], _TIMESTAMP_FORMAT),
            end=datetime.strptime(data["end"], _TIMESTAMP_FORMAT),
        )


@dataclass(frozen=True)
class SalesAggregateRow:
    """Yearly totals for one product."""

    product_id: int
    product_name: str
    quantity_sold: int
    total_sales: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {
            "product_id": self.product_id,
            "product_name": self.product_name,
            "quantity_sold": self.quantity_sold,
            "total_sales": f"{self.total_sales:.2f}",
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SalesAggregateRow:
        return cls(
            product_id=int(data["product_id"]),
            product_name=str(data["product_name"]),
            quantity_sold=int(data["quantity_sold"]),
            total_sales=Decimal(str(data["total_sales"])),
        )


@dataclass(frozen=True)
class SalesSnapshot:
    """Result of one aggregation run.

    Rows are ordered by quantity sold (descending), then product id.

    Attributes:
        rows: One row per product sold within the window.
        window: Window the rows were computed for, if known.
        generated_at: When the aggregation ran, if known.
    """

    rows: tuple[SalesAggregateRow, ...] = ()
    window: ReportingWindow | None = None
    generated_at: datetime | None = field(default=None, compare=False)

    def __iter__(self) -> Iterator[SalesAggregateRow]:
        return iter(self.rows)

    def __len__(self) -> int:
        return len(self.rows)

    def __bool__(self) -> bool:
        return bool(self.rows)

    def quantities(self) -> dict[int, int]:
        """Map product id to quantity sold."""
        return {row.product_id: row.quantity_sold for row in self.rows}

    def to_frame(self) -> pd.DataFrame:
        """Return the rows as a DataFrame with SNAPSHOT_COLUMNS."""
        return pd.DataFrame(
            [
                (row.product_id, row.product_name, row.quantity_sold, row.total_sales)
                for row in self.rows
            ],
            columns=SNAPSHOT_COLUMNS,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "window": self.window.to_dict() if self.window else None,
            "generated_at": (
                self.generated_at.strftime(_TIMESTAMP_FORMAT) if self.generated_at else None
            ),
            "rows": [row.to_dict() for row in self.rows],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SalesSnapshot:
        window = data.get("window")
        generated_at = data.get("generated_at")
        return cls(
            rows=tuple(SalesAggregateRow.from_dict(row) for row in data.get("rows", [])),
            window=ReportingWindow.from_dict(window) if window else None,
            generated_at=(
                datetime.strptime(generated_at, _TIMESTAMP_FORMAT) if generated_at else None
            ),
        )
