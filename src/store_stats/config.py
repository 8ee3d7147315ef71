"""Unified configuration for store_stats.

A single typed configuration object is built once at process start
(usually with ``StatsConfig.from_env()``) and passed to every component
that needs it.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import time
from pathlib import Path

from store_stats.exceptions import ConfigError

WINDOW_POLICIES = ("to_date", "fiscal_close")

DEFAULT_FISCAL_START_MONTH = 9
DEFAULT_META_KEY = "yearly_sales"
DEFAULT_SNAPSHOT_KEY = "yearly_sales_per_product"
DEFAULT_DATABASE_URL = "sqlite:///store_stats.db"

ENV_PREFIX = "STORE_STATS_"


@dataclass
class StatsConfig:
    """Settings for the yearly sales job and its front-ends.

    Attributes:
        fiscal_start_month: Calendar month (1-12) at which the reporting year starts.
        window_policy: How the end of the reporting window is chosen:
            - "to_date": through the end of today (default).
            - "fiscal_close": through the last day of the fiscal year that
              begins at the window start.
        meta_key: Product metadata key holding the popularity value.
        snapshot_key: Name of the blob holding the cached snapshot.
        atomic_sync: Run the metadata reconciliation inside one transaction.
        run_at: Time of day of the scheduled run.
        database_url: SQLAlchemy URL of the store database.
        data_root: Directory for file-backed snapshots. When None the snapshot
            is kept in the database option table.
    """

    fiscal_start_month: int = DEFAULT_FISCAL_START_MONTH
    window_policy: str = "to_date"
    meta_key: str = DEFAULT_META_KEY
    snapshot_key: str = DEFAULT_SNAPSHOT_KEY
    atomic_sync: bool = True
    run_at: time = time(0, 0)
    database_url: str = DEFAULT_DATABASE_URL
    data_root: Path | None = None

    def __post_init__(self) -> None:
        if isinstance(self.data_root, str):
            self.data_root = Path(self.data_root)
        self.validate()

    def validate(self) -> None:
        """Check the settings, raising ConfigError on the first bad value."""
        if isinstance(self.fiscal_start_month, bool) or not isinstance(
            self.fiscal_start_month, int
        ):
            raise ConfigError(
                f"fiscal_start_month must be an integer, got {self.fiscal_start_month!r}"
            )
        if not 1 <= self.fiscal_start_month <= 12:
            raise ConfigError(
                f"fiscal_start_month must be between 1 and 12, got {self.fiscal_start_month}"
            )
        if self.window_policy not in WINDOW_POLICIES:
            raise ConfigError(
                f"Invalid window_policy '{self.window_policy}'. "
                f"Must be one of: {', '.join(WINDOW_POLICIES)}"
            )
        if not self.meta_key:
            raise ConfigError("meta_key must not be empty")
        if not self.snapshot_key:
            raise ConfigError("snapshot_key must not be empty")

    @property
    def snapshot_dir(self) -> Path | None:
        """Directory holding file-backed snapshot blobs."""
        if self.data_root is None:
            return None
        return self.data_root / "snapshots"

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> StatsConfig:
        """Build a config from ``STORE_STATS_*`` environment variables.

        Recognised variables: FISCAL_START_MONTH, WINDOW_POLICY, META_KEY,
        SNAPSHOT_KEY, ATOMIC_SYNC, RUN_AT (HH:MM), DATABASE_URL, DATA_ROOT.
        Unset variables keep their defaults.

        Raises:
            ConfigError: If a variable cannot be parsed or a value is invalid.

        Examples:
            >>> cfg = StatsConfig.from_env({"STORE_STATS_FISCAL_START_MONTH": "4"})
            >>> cfg.fiscal_start_month
            4
        """
        env = os.environ if environ is None else environ

        def get(name: str) -> str | None:
            value = env.get(ENV_PREFIX + name)
            if value is None:
                return None
            value = value.strip().strip('"').strip("'")
            return value or None

        kwargs: dict[str, object] = {}

        month = get("FISCAL_START_MONTH")
        if month is not None:
            try:
                kwargs["fiscal_start_month"] = int(month)
            except ValueError as e:
                raise ConfigError(f"Invalid {ENV_PREFIX}FISCAL_START_MONTH: {month!r}") from e

        for name, field_name in (
            ("WINDOW_POLICY", "window_policy"),
            ("META_KEY", "meta_key"),
            ("SNAPSHOT_KEY", "snapshot_key"),
            ("DATABASE_URL", "database_url"),
        ):
            value = get(name)
            if value is not None:
                kwargs[field_name] = value

        atomic = get("ATOMIC_SYNC")
        if atomic is not None:
            kwargs["atomic_sync"] = _parse_bool(atomic, ENV_PREFIX + "ATOMIC_SYNC")

        run_at = get("RUN_AT")
        if run_at is not None:
            try:
                kwargs["run_at"] = time.fromisoformat(run_at)
            except ValueError as e:
                raise ConfigError(f"Invalid {ENV_PREFIX}RUN_AT: {run_at!r}") from e

        data_root = get("DATA_ROOT")
        if data_root is not None:
            kwargs["data_root"] = Path(data_root)

        return cls(**kwargs)


def _parse_bool(value: str, name: str) -> bool:
    lowered = value.lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    raise ConfigError(f"Invalid {name}: {value!r}")
