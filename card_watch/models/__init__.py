"""Domain models for card expiration tracking."""

from card_watch.models.analysis import (
    ActionStatus,
    CardAnalysis,
    ClientStatusSummary,
    CustomerWithExpiration,
    CustomerWithStatus,
    ExpirationClassification,
    RelevantCard,
    StatusCounts,
    SummaryStatistics,
)
from card_watch.models.base import Address, EmailAddress, PhoneNumber
from card_watch.models.customer import Card, Customer
from card_watch.models.enums import (
    ClientStatusTag,
    ExpirationStatus,
    MerchantCurrency,
    Priority,
    RelevantCardKind,
    WarningLevel,
)

__all__ = [
    "ActionStatus",
    "Address",
    "Card",
    "CardAnalysis",
    "ClientStatusSummary",
    "ClientStatusTag",
    "Customer",
    "CustomerWithExpiration",
    "CustomerWithStatus",
    "EmailAddress",
    "ExpirationClassification",
    "ExpirationStatus",
    "MerchantCurrency",
    "PhoneNumber",
    "Priority",
    "RelevantCard",
    "RelevantCardKind",
    "StatusCounts",
    "SummaryStatistics",
    "WarningLevel",
]
