"""Command-line interface for store_stats.

Examples:
    $ store-stats init-db
    $ store-stats run
    $ store-stats show
    $ store-stats get-popularity 10
    $ store-stats set-popularity 10 150
    $ store-stats admin --sort-by total_sales --output stats.html
    $ store-stats schedule
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from store_stats.catalog import catalog_order
from store_stats.config import WINDOW_POLICIES, StatsConfig
from store_stats.exceptions import ConfigError, StoreStatsError
from store_stats.formatters.admin import SORT_FIELDS, handle_admin_request
from store_stats.formatters.console import NO_DATA_MESSAGE, format_snapshot_table
from store_stats.sales.api import open_cache, open_store, run_yearly_sales
from store_stats.scheduling import DailyScheduler
from store_stats.store.sql import create_schema, get_engine

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="store-stats",
        description="Yearly per-product sales statistics for the store.",
    )
    parser.add_argument("--database-url", help="SQLAlchemy URL of the store database.")
    parser.add_argument(
        "--data-root",
        help="Directory for file-backed snapshots (default: database option table).",
    )
    parser.add_argument(
        "--fiscal-start-month",
        type=int,
        help="Month (1-12) the reporting year starts in (default: 9).",
    )
    parser.add_argument("--window-policy", choices=WINDOW_POLICIES)
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="Create missing store tables.")
    sub.add_parser("run", help="Calculate yearly sales per product and sync popularity.")
    sub.add_parser("show", help="Display the cached yearly sales table.")

    get_p = sub.add_parser("get-popularity", help="Show the popularity value of one product.")
    get_p.add_argument("product_id")

    set_p = sub.add_parser("set-popularity", help="Set the popularity value of one product.")
    set_p.add_argument("product_id")
    set_p.add_argument("value")

    cat_p = sub.add_parser("catalog", help="List product ids, most popular first.")
    cat_p.add_argument("--limit", type=int, default=None)

    admin_p = sub.add_parser("admin", help="Render the admin statistics page.")
    admin_p.add_argument("--sort-by", choices=SORT_FIELDS)
    admin_p.add_argument("--sort-order", choices=("asc", "desc"))
    admin_p.add_argument("--run", action="store_true", help="Run the calculation first.")
    admin_p.add_argument("--output", "-o", type=Path, help="Write HTML here instead of stdout.")

    sub.add_parser("schedule", help="Run the calculation every day at the configured time.")
    return parser


def load_config(args: argparse.Namespace) -> StatsConfig:
    """Environment settings overridden by command-line options."""
    config = StatsConfig.from_env()
    overrides = {}
    if args.database_url:
        overrides["database_url"] = args.database_url
    if args.data_root:
        overrides["data_root"] = Path(args.data_root)
    if args.fiscal_start_month is not None:
        overrides["fiscal_start_month"] = args.fiscal_start_month
    if args.window_policy:
        overrides["window_policy"] = args.window_policy
    if overrides:
        config = dataclasses.replace(config, **overrides)
    return config


def _parse_int(value: str, message: str) -> int:
    try:
        return int(value)
    except ValueError as e:
        raise ConfigError(message) from e


def cmd_init_db(config: StatsConfig, args: argparse.Namespace) -> int:
    create_schema(get_engine(config.database_url))
    print("Success: Store tables are ready.")
    return 0


def cmd_run(config: StatsConfig, args: argparse.Namespace) -> int:
    print("Starting the calculation of yearly sales per product...")
    result = run_yearly_sales(open_store(config), open_cache(config), config)
    print(
        f"Success: Yearly sales for {len(result.snapshot)} product(s) calculated and saved; "
        f"{result.sync.updated} popularity record(s) updated."
    )
    return 0


def cmd_show(config: StatsConfig, args: argparse.Namespace) -> int:
    snapshot = open_cache(config).get()
    if not snapshot:
        print(f"Warning: {NO_DATA_MESSAGE}")
        return 0
    print(format_snapshot_table(snapshot))
    print("Success: Yearly sales per product displayed.")
    return 0


def cmd_get_popularity(config: StatsConfig, args: argparse.Namespace) -> int:
    product_id = _parse_int(args.product_id, "product_id must be numeric.")
    value = open_store(config).get_meta(product_id, config.meta_key)
    if value is None:
        print(f"Warning: No yearly sales data found for product ID {product_id}.")
        return 0
    print(f"Success: Yearly sales for product ID {product_id}: {value}.")
    return 0


def cmd_set_popularity(config: StatsConfig, args: argparse.Namespace) -> int:
    message = "Both product_id and value must be numeric."
    product_id = _parse_int(args.product_id, message)
    value = _parse_int(args.value, message)

    store = open_store(config)
    store.set_meta(product_id, config.meta_key, value)
    if store.get_meta(product_id, config.meta_key) != value:
        print("Error: Failed to update yearly sales meta value.", file=sys.stderr)
        return 1
    print(f"Success: Yearly sales meta value for product ID {product_id} updated to {value}.")
    return 0


def cmd_catalog(config: StatsConfig, args: argparse.Namespace) -> int:
    ordered = catalog_order(open_store(config), config.meta_key)
    if args.limit is not None:
        ordered = ordered[: args.limit]
    for product_id in ordered:
        print(product_id)
    return 0


def cmd_admin(config: StatsConfig, args: argparse.Namespace) -> int:
    query = {}
    if args.sort_by:
        query["sort_by"] = args.sort_by
    if args.sort_order:
        query["sort_order"] = args.sort_order
    form = {"store_stats_run": "1"} if args.run else {}

    html = handle_admin_request(open_store(config), open_cache(config), config, query, form)
    if args.output:
        args.output.write_text(html, encoding="utf-8")
        print(f"Success: Admin page written to {args.output}")
    else:
        print(html)
    return 0


def cmd_schedule(config: StatsConfig, args: argparse.Namespace) -> int:
    store = open_store(config)
    cache = open_cache(config)

    def yearly_sales_job() -> None:
        run_yearly_sales(store, cache, config)

    scheduler = DailyScheduler()
    scheduler.register_daily(yearly_sales_job, config.run_at, name="yearly_sales")
    print(f"Scheduling yearly sales daily at {config.run_at.strftime('%H:%M')} (Ctrl+C to stop)")
    scheduler.run_forever()
    return 0


COMMANDS = {
    "init-db": cmd_init_db,
    "run": cmd_run,
    "show": cmd_show,
    "get-popularity": cmd_get_popularity,
    "set-popularity": cmd_set_popularity,
    "catalog": cmd_catalog,
    "admin": cmd_admin,
    "schedule": cmd_schedule,
}


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main CLI entry point. Returns the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )

    try:
        config = load_config(args)
        return COMMANDS[args.command](config, args)
    except StoreStatsError as e:
        logger.debug("Command '%s' failed", args.command, exc_info=True)
        print(f"Error: {e.cause}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
