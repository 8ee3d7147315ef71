from store_stats.formatters.admin import handle_admin_request, render_admin_page
from store_stats.formatters.console import format_snapshot_table

__all__ = ["format_snapshot_table", "handle_admin_request", "render_admin_page"]
