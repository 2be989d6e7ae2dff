"""Worklist views: category filters, search and sort orders."""

from collections.abc import Iterable
from datetime import datetime
from enum import Enum

from card_watch.analysis import ActionRequiredPolicy, sort_by_urgency
from card_watch.models import CustomerWithExpiration


class CustomerView(str, Enum):
    ALL = "all"
    ACTION_REQUIRED = "action-required"
    EXPIRED = "expired"
    EXPIRING = "expiring"
    NO_CARDS = "no-cards"
    ACTIVE = "active"


class SortOrder(str, Enum):
    URGENCY = "urgency"
    NAME = "name"
    RECENT = "recent"


def in_view(
    analyzed: CustomerWithExpiration,
    view: CustomerView,
    policy: ActionRequiredPolicy,
    now: datetime,
) -> bool:
    """Whether a customer belongs to a worklist category.

    ``expiring`` excludes customers that also hold an expired card, so the
    expired, expiring, no-cards and active views partition the population.
    """
    if view is CustomerView.ALL:
        return True
    if view is CustomerView.ACTION_REQUIRED:
        return policy.requires_action(analyzed, now)
    if view is CustomerView.EXPIRED:
        return analyzed.has_expired
    if view is CustomerView.EXPIRING:
        return analyzed.has_expiring_soon and not analyzed.has_expired
    if view is CustomerView.NO_CARDS:
        return analyzed.total_cards == 0
    return analyzed.total_cards > 0 and not analyzed.has_expired and not analyzed.has_expiring_soon


def matches_search(analyzed: CustomerWithExpiration, term: str) -> bool:
    """Case-insensitive substring match on name, business, email and phone."""
    needle = term.lower()
    customer = analyzed.customer
    haystack = (
        customer.full_name,
        customer.business_name or "",
        customer.primary_email or "",
        customer.primary_phone or "",
    )
    return any(needle in field.lower() for field in haystack)


def _name_key(analyzed: CustomerWithExpiration) -> str:
    customer = analyzed.customer
    return (customer.business_name or customer.full_name).lower()


def _recent_key(analyzed: CustomerWithExpiration) -> float:
    since = analyzed.customer.customer_since
    return since.timestamp() if since is not None else 0.0


def sort_customers(customers: Iterable[CustomerWithExpiration], order: SortOrder) -> list[CustomerWithExpiration]:
    """Stable sort by urgency, display name, or newest first."""
    if order is SortOrder.URGENCY:
        return sort_by_urgency(customers)
    if order is SortOrder.NAME:
        return sorted(customers, key=_name_key)
    return sorted(customers, key=_recent_key, reverse=True)


def build_worklist(
    customers: Iterable[CustomerWithExpiration],
    now: datetime,
    view: CustomerView = CustomerView.ACTION_REQUIRED,
    search: str = "",
    sort: SortOrder = SortOrder.URGENCY,
    policy: ActionRequiredPolicy | None = None,
) -> list[CustomerWithExpiration]:
    """Filter, search and sort analyzed customers for display or export."""
    policy = policy or ActionRequiredPolicy()
    selected = [c for c in customers if in_view(c, view, policy, now)]
    if search:
        selected = [c for c in selected if matches_search(c, search)]
    return sort_customers(selected, sort)


def view_counts(
    customers: list[CustomerWithExpiration],
    now: datetime,
    policy: ActionRequiredPolicy | None = None,
) -> dict[CustomerView, int]:
    """Number of customers in each view, for tab badges."""
    policy = policy or ActionRequiredPolicy()
    return {view: sum(1 for c in customers if in_view(c, view, policy, now)) for view in CustomerView}
