"""Card expiration classification and customer prioritization."""

from card_watch.analysis.action_required import ActionRequiredPolicy, sort_by_urgency, urgency_rank
from card_watch.analysis.aggregator import (
    analyze_customer,
    analyze_customers,
    expired_customers,
    expiring_later_customers,
    expiring_soon_customers,
    filter_by_status,
    most_relevant_card,
)
from card_watch.analysis.classifier import as_utc, classify_card, classify_code, classify_date, days_until
from card_watch.analysis.client_status import (
    ClientStatusPolicy,
    filter_by_client_status,
    requiring_action,
    summarize_client_status,
)
from card_watch.analysis.codec import format_expiry, parse_expiration_code
from card_watch.analysis.summary import generate_summary

__all__ = [
    "ActionRequiredPolicy",
    "ClientStatusPolicy",
    "analyze_customer",
    "analyze_customers",
    "as_utc",
    "classify_card",
    "classify_code",
    "classify_date",
    "days_until",
    "expired_customers",
    "expiring_later_customers",
    "expiring_soon_customers",
    "filter_by_client_status",
    "filter_by_status",
    "format_expiry",
    "generate_summary",
    "most_relevant_card",
    "parse_expiration_code",
    "requiring_action",
    "sort_by_urgency",
    "summarize_client_status",
    "urgency_rank",
]
