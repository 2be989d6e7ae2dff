"""Enumeration types for card-watch entities."""

from enum import Enum


class MerchantCurrency(str, Enum):
    USD = "USD"
    CAD = "CAD"


class ExpirationStatus(str, Enum):
    VALID = "valid"
    EXPIRING_SOON = "expiring-soon"
    EXPIRING_LATER = "expiring-later"
    EXPIRED = "expired"
    NO_EXPIRATION = "no-expiration"


class WarningLevel(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"
    NONE = "none"


class ClientStatusTag(str, Enum):
    NEW_NEEDS_PAYMENT = "new-needs-payment"
    EXPIRED_CARDS = "expired-cards"
    EXPIRING_CARDS = "expiring-cards"
    ALL_GOOD = "all-good"
    INACTIVE_OLD = "inactive-old"


class Priority(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    NONE = "none"


class RelevantCardKind(str, Enum):
    EXPIRED = "expired"
    EXPIRING = "expiring"
    ACTIVE = "active"
    NO_PAYMENT_METHOD = "no-payment-method"
