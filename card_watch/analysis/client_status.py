"""Client-status policy.

Lifecycle/health taxonomy used by the client analysis surface. Rules are
evaluated in strict order and use their own age thresholds (180 and 365
days), separate from the action-required worklist policy.
"""

from collections.abc import Iterable
from datetime import datetime, timedelta

from card_watch.analysis.classifier import as_utc
from card_watch.models.analysis import (
    ActionStatus,
    ClientStatusSummary,
    CustomerWithExpiration,
    CustomerWithStatus,
)
from card_watch.models.enums import ClientStatusTag, Priority

NEW_CUSTOMER_MAX_DAYS = 180
INACTIVE_MIN_DAYS = 365
# Reported age when the platform gave no creation timestamp
UNKNOWN_AGE_DAYS = 999

ACTION_STATUSES = frozenset(
    {
        ClientStatusTag.EXPIRED_CARDS,
        ClientStatusTag.EXPIRING_CARDS,
        ClientStatusTag.NEW_NEEDS_PAYMENT,
    }
)

_MESSAGES = {
    (ClientStatusTag.EXPIRED_CARDS, Priority.CRITICAL): "URGENT: Customer has expired credit cards",
    (ClientStatusTag.EXPIRING_CARDS, Priority.HIGH): "Customer has cards expiring soon",
    (ClientStatusTag.NEW_NEEDS_PAYMENT, Priority.HIGH): "New customer needs payment method setup",
    (ClientStatusTag.INACTIVE_OLD, Priority.NONE): "Old inactive customer - no action needed",
    (ClientStatusTag.INACTIVE_OLD, Priority.LOW): "Customer has not set up payment methods",
    (ClientStatusTag.ALL_GOOD, Priority.NONE): "Customer is set up properly",
}


def days_since(created: datetime, now: datetime) -> int:
    """Whole days elapsed since ``created``, rounded down; naive values are UTC."""
    return (as_utc(now) - as_utc(created)) // timedelta(days=1)


class ClientStatusPolicy:
    """Assigns a client status and priority to each customer."""

    def evaluate(self, analyzed: CustomerWithExpiration, now: datetime) -> ActionStatus:
        """Determine the client status of one analyzed customer."""
        has_cards = analyzed.total_cards > 0
        created = analyzed.customer.customer_since

        if created is None:
            if has_cards:
                return _status(ClientStatusTag.ALL_GOOD, Priority.NONE, UNKNOWN_AGE_DAYS, has_cards)
            return ActionStatus(
                status=ClientStatusTag.INACTIVE_OLD,
                priority=Priority.NONE,
                days_old=UNKNOWN_AGE_DAYS,
                has_cards=False,
                requires_action=False,
                action_message="Old customer - no action needed",
            )

        days_old = days_since(created, now)

        if has_cards and analyzed.has_expired:
            return _status(ClientStatusTag.EXPIRED_CARDS, Priority.CRITICAL, days_old, has_cards)
        if has_cards and analyzed.has_expiring_soon:
            return _status(ClientStatusTag.EXPIRING_CARDS, Priority.HIGH, days_old, has_cards)

        if not has_cards:
            if days_old <= NEW_CUSTOMER_MAX_DAYS:
                return _status(ClientStatusTag.NEW_NEEDS_PAYMENT, Priority.HIGH, days_old, has_cards)
            if days_old > INACTIVE_MIN_DAYS:
                return _status(ClientStatusTag.INACTIVE_OLD, Priority.NONE, days_old, has_cards)
            return _status(ClientStatusTag.INACTIVE_OLD, Priority.LOW, days_old, has_cards)

        return _status(ClientStatusTag.ALL_GOOD, Priority.NONE, days_old, has_cards)

    def evaluate_all(
        self,
        customers: Iterable[CustomerWithExpiration],
        now: datetime,
    ) -> list[CustomerWithStatus]:
        return [CustomerWithStatus(analyzed=c, client_status=self.evaluate(c, now)) for c in customers]


def filter_by_client_status(
    customers: Iterable[CustomerWithStatus],
    statuses: Iterable[ClientStatusTag],
) -> list[CustomerWithStatus]:
    wanted = frozenset(statuses)
    return [c for c in customers if c.client_status.status in wanted]


def requiring_action(customers: Iterable[CustomerWithStatus]) -> list[CustomerWithStatus]:
    return [c for c in customers if c.client_status.requires_action]


def summarize_client_status(customers: list[CustomerWithStatus]) -> ClientStatusSummary:
    """Count customers per client status."""
    breakdown: dict[ClientStatusTag, list[CustomerWithStatus]] = {tag: [] for tag in ClientStatusTag}
    for customer in customers:
        breakdown[customer.client_status.status].append(customer)

    return ClientStatusSummary(
        total=len(customers),
        counts={tag: len(members) for tag, members in breakdown.items()},
        requires_action=len(requiring_action(customers)),
        breakdown=breakdown,
    )


def _status(tag: ClientStatusTag, priority: Priority, days_old: int, has_cards: bool) -> ActionStatus:
    return ActionStatus(
        status=tag,
        priority=priority,
        days_old=days_old,
        has_cards=has_cards,
        requires_action=tag in ACTION_STATUSES,
        action_message=_MESSAGES[(tag, priority)],
    )
