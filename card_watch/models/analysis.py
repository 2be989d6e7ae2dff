"""Derived, never-persisted analysis records."""

from dataclasses import dataclass, field
from datetime import date

from card_watch.models.customer import Card, Customer
from card_watch.models.enums import (
    ClientStatusTag,
    ExpirationStatus,
    Priority,
    RelevantCardKind,
    WarningLevel,
)


@dataclass(frozen=True)
class ExpirationClassification:
    """Expiration status of one card relative to a reference instant.

    ``days_until_expiration`` and ``expiration_date`` are ``None`` only
    for ``NO_EXPIRATION``.
    """

    status: ExpirationStatus
    days_until_expiration: int | None
    expiration_date: date | None
    warning_level: WarningLevel

    @property
    def days_overdue(self) -> int:
        """Days since expiry (0 unless expired)."""
        if self.status is ExpirationStatus.EXPIRED and self.days_until_expiration is not None:
            return abs(self.days_until_expiration)
        return 0


@dataclass(frozen=True)
class CardAnalysis:
    """A card paired with its classification."""

    card: Card
    expiration: ExpirationClassification

    @property
    def status(self) -> ExpirationStatus:
        return self.expiration.status


@dataclass
class CustomerWithExpiration:
    """Customer annotated with one classification per card."""

    customer: Customer
    expiration_analysis: list[CardAnalysis] = field(default_factory=list)
    has_expired: bool = False
    has_expiring_soon: bool = False

    @property
    def total_cards(self) -> int:
        return len(self.customer.cards)

    def cards_with_status(self, status: ExpirationStatus) -> list[CardAnalysis]:
        """Card analyses matching ``status``, in card order."""
        return [a for a in self.expiration_analysis if a.status is status]


@dataclass(frozen=True)
class RelevantCard:
    """Single card chosen for compact display of a customer."""

    kind: RelevantCardKind
    analysis: CardAnalysis | None = None


@dataclass(frozen=True)
class ActionStatus:
    """Client-status determination for one customer."""

    status: ClientStatusTag
    priority: Priority
    days_old: int
    has_cards: bool
    requires_action: bool
    action_message: str


@dataclass
class CustomerWithStatus:
    """Analyzed customer together with its client status."""

    analyzed: CustomerWithExpiration
    client_status: ActionStatus

    @property
    def customer(self) -> Customer:
        return self.analyzed.customer


@dataclass(frozen=True)
class StatusCounts:
    """Customer and classification-record counts for one status bucket."""

    customers: int = 0
    cards: int = 0


@dataclass(frozen=True)
class SummaryStatistics:
    """Population counts for dashboard display."""

    total_customers: int
    total_cards: int
    expired: StatusCounts
    expiring_soon: StatusCounts
    expiring_later: StatusCounts


@dataclass
class ClientStatusSummary:
    """Population breakdown by client status."""

    total: int
    counts: dict[ClientStatusTag, int]
    requires_action: int
    breakdown: dict[ClientStatusTag, list[CustomerWithStatus]]
