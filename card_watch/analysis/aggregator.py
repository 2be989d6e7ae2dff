"""Per-customer roll-up of card classifications."""

from collections.abc import Iterable
from datetime import datetime

from card_watch.analysis.classifier import classify_card
from card_watch.models.analysis import CardAnalysis, CustomerWithExpiration, RelevantCard
from card_watch.models.customer import Customer
from card_watch.models.enums import ExpirationStatus, RelevantCardKind

ACTIVE_STATUSES = (
    ExpirationStatus.EXPIRING_LATER,
    ExpirationStatus.VALID,
    ExpirationStatus.NO_EXPIRATION,
)


def analyze_customer(customer: Customer, now: datetime) -> CustomerWithExpiration:
    """Classify every card of ``customer`` and derive the customer flags."""
    analyses = [CardAnalysis(card=card, expiration=classify_card(card, now)) for card in customer.cards]
    return CustomerWithExpiration(
        customer=customer,
        expiration_analysis=analyses,
        has_expired=any(a.status is ExpirationStatus.EXPIRED for a in analyses),
        has_expiring_soon=any(a.status is ExpirationStatus.EXPIRING_SOON for a in analyses),
    )


def analyze_customers(customers: Iterable[Customer], now: datetime) -> list[CustomerWithExpiration]:
    """Analyze a population, preserving input order."""
    return [analyze_customer(customer, now) for customer in customers]


def most_relevant_card(analyzed: CustomerWithExpiration) -> RelevantCard:
    """Pick the one card worth surfacing in compact views.

    Expired cards win (the most recently expired one), then cards
    expiring soon (the soonest), then the soonest-expiring active card.
    A customer without cards has no payment method. Ties keep the first
    card encountered.
    """
    expired = analyzed.cards_with_status(ExpirationStatus.EXPIRED)
    if expired:
        chosen = min(expired, key=lambda a: abs(a.expiration.days_until_expiration))
        return RelevantCard(kind=RelevantCardKind.EXPIRED, analysis=chosen)

    expiring = analyzed.cards_with_status(ExpirationStatus.EXPIRING_SOON)
    if expiring:
        chosen = min(expiring, key=lambda a: a.expiration.days_until_expiration)
        return RelevantCard(kind=RelevantCardKind.EXPIRING, analysis=chosen)

    active = [a for a in analyzed.expiration_analysis if a.status in ACTIVE_STATUSES]
    if active:
        return RelevantCard(kind=RelevantCardKind.ACTIVE, analysis=min(active, key=_expiry_sort_key))

    return RelevantCard(kind=RelevantCardKind.NO_PAYMENT_METHOD)


def filter_by_status(
    customers: Iterable[CustomerWithExpiration],
    statuses: Iterable[ExpirationStatus],
) -> list[CustomerWithExpiration]:
    """Customers having at least one card in any of ``statuses``."""
    wanted = frozenset(statuses)
    return [c for c in customers if any(a.status in wanted for a in c.expiration_analysis)]


def expired_customers(customers: Iterable[CustomerWithExpiration]) -> list[CustomerWithExpiration]:
    return filter_by_status(customers, [ExpirationStatus.EXPIRED])


def expiring_soon_customers(customers: Iterable[CustomerWithExpiration]) -> list[CustomerWithExpiration]:
    return filter_by_status(customers, [ExpirationStatus.EXPIRING_SOON])


def expiring_later_customers(customers: Iterable[CustomerWithExpiration]) -> list[CustomerWithExpiration]:
    return filter_by_status(customers, [ExpirationStatus.EXPIRING_LATER])


def _expiry_sort_key(analysis: CardAnalysis) -> tuple[int, int]:
    # undated cards go after every dated card
    days = analysis.expiration.days_until_expiration
    return (1, 0) if days is None else (0, days)
