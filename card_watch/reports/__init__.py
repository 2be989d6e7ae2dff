"""Worklist views and follow-up report rows."""

from card_watch.reports.follow_up import (
    EXPORT_COLUMNS,
    FollowUpRow,
    export_row,
    export_status,
    follow_up_row,
    follow_up_rows,
)
from card_watch.reports.formatting import (
    CardStatusLabel,
    card_brand,
    card_status_label,
    format_card_number,
    format_days_ago,
    format_phone,
)
from card_watch.reports.views import (
    CustomerView,
    SortOrder,
    build_worklist,
    in_view,
    matches_search,
    sort_customers,
    view_counts,
)

__all__ = [
    "EXPORT_COLUMNS",
    "CardStatusLabel",
    "CustomerView",
    "FollowUpRow",
    "SortOrder",
    "build_worklist",
    "card_brand",
    "card_status_label",
    "export_row",
    "export_status",
    "follow_up_row",
    "follow_up_rows",
    "format_card_number",
    "format_days_ago",
    "format_phone",
    "in_view",
    "matches_search",
    "sort_customers",
    "view_counts",
]
