"""Action-required worklist policy.

Decides which business customers belong on the staff follow-up worklist
and how urgently. Walk-in customers (no business name) never qualify.
A business customer qualifies when any of these holds:

- it is new: created on or after the cleanup cutoff when it has no cards,
  or within the last 90 days when it has at least one card;
- it has a card expiring within 30 days;
- it has a card that expired no more than 180 days ago.

These windows are independent of the client-status thresholds and must
not be aligned with them without a product decision.
"""

from collections.abc import Iterable
from datetime import datetime, timedelta

from card_watch.analysis.classifier import as_utc
from card_watch.config import DEFAULT_NEW_CUSTOMER_CUTOFF
from card_watch.models.analysis import CustomerWithExpiration
from card_watch.models.enums import ExpirationStatus

NEW_CUSTOMER_WINDOW_DAYS = 90
RECENTLY_EXPIRED_WINDOW_DAYS = 180

URGENCY_EXPIRED = 4
URGENCY_EXPIRING_SOON = 3
URGENCY_NO_CARDS = 2
URGENCY_OTHER = 1


class ActionRequiredPolicy:
    """Worklist filter and urgency ranking for staff follow-up."""

    def __init__(
        self,
        new_customer_cutoff: datetime = DEFAULT_NEW_CUSTOMER_CUTOFF,
        new_customer_window_days: int = NEW_CUSTOMER_WINDOW_DAYS,
        recently_expired_window_days: int = RECENTLY_EXPIRED_WINDOW_DAYS,
    ) -> None:
        """Initialize the policy.

        Parameters
        ----------
        new_customer_cutoff : datetime
            Fixed instant after which card-less customers count as new;
            naive values are taken as UTC.
        new_customer_window_days : int
            Look-back window for customers that already have cards.
        recently_expired_window_days : int
            Maximum days overdue for an expired card to reopen a case.
        """
        self.new_customer_cutoff = as_utc(new_customer_cutoff)
        self.new_customer_window_days = new_customer_window_days
        self.recently_expired_window_days = recently_expired_window_days

    def is_new_customer(self, analyzed: CustomerWithExpiration, now: datetime) -> bool:
        since = analyzed.customer.customer_since
        if since is None:
            return False
        since = as_utc(since)
        if analyzed.total_cards > 0:
            return since >= as_utc(now) - timedelta(days=self.new_customer_window_days)
        return since >= self.new_customer_cutoff

    def has_recently_expired(self, analyzed: CustomerWithExpiration) -> bool:
        return any(
            a.expiration.days_overdue <= self.recently_expired_window_days
            for a in analyzed.cards_with_status(ExpirationStatus.EXPIRED)
        )

    def requires_action(self, analyzed: CustomerWithExpiration, now: datetime) -> bool:
        """Whether the customer belongs on the worklist.

        A naive ``now`` is taken as UTC.
        """
        business_name = analyzed.customer.business_name
        if not business_name or not business_name.strip():
            return False
        return (
            self.is_new_customer(analyzed, now)
            or analyzed.has_expiring_soon
            or self.has_recently_expired(analyzed)
        )

    def select(
        self,
        customers: Iterable[CustomerWithExpiration],
        now: datetime,
    ) -> list[CustomerWithExpiration]:
        """Customers that require action, in input order."""
        return [c for c in customers if self.requires_action(c, now)]


def urgency_rank(analyzed: CustomerWithExpiration) -> int:
    """Ordinal urgency: expired > expiring soon > no cards > everything else."""
    if analyzed.has_expired:
        return URGENCY_EXPIRED
    if analyzed.has_expiring_soon:
        return URGENCY_EXPIRING_SOON
    if analyzed.total_cards == 0:
        return URGENCY_NO_CARDS
    return URGENCY_OTHER


def sort_by_urgency(customers: Iterable[CustomerWithExpiration]) -> list[CustomerWithExpiration]:
    """Most urgent first; equal ranks keep their incoming order."""
    return sorted(customers, key=urgency_rank, reverse=True)
