"""Customer and card models for the payment platform domain."""

from dataclasses import dataclass, field
from datetime import datetime

from card_watch.models.base import Address, EmailAddress, PhoneNumber
from card_watch.models.enums import MerchantCurrency


@dataclass(frozen=True)
class Card:
    """Payment card on file for a customer."""

    id: str | None = None  # absent on some legacy records
    first6: str | None = None
    last4: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    expiration_date: str | None = None  # MMYY
    card_type: str | None = None  # network label, e.g. VISA
    token_type: str | None = None
    modified_time: datetime | None = None


@dataclass
class Customer:
    """Customer record from one merchant account.

    ``(merchant_currency, id)`` is the identity key; ids are only unique
    within a merchant account.
    """

    id: str
    merchant_currency: MerchantCurrency
    first_name: str | None = None
    last_name: str | None = None
    business_name: str | None = None
    customer_since: datetime | None = None
    marketing_allowed: bool = False
    merchant_id: str | None = None
    note: str | None = None
    cards: list[Card] = field(default_factory=list)
    email_addresses: list[EmailAddress] = field(default_factory=list)
    phone_numbers: list[PhoneNumber] = field(default_factory=list)
    addresses: list[Address] = field(default_factory=list)
    last_synced_at: datetime | None = None

    @property
    def key(self) -> tuple[MerchantCurrency, str]:
        """Identity key across merchant accounts."""
        return (self.merchant_currency, self.id)

    @property
    def full_name(self) -> str:
        """First and last name joined, empty when neither is known."""
        return f"{self.first_name or ''} {self.last_name or ''}".strip()

    @property
    def display_name(self) -> str:
        """Business name when present, otherwise the person's name."""
        if self.business_name and self.business_name.strip():
            return self.business_name
        return self.full_name

    @property
    def primary_email(self) -> str | None:
        """Email flagged as primary, falling back to the first one."""
        for email in self.email_addresses:
            if email.primary:
                return email.email_address
        return self.email_addresses[0].email_address if self.email_addresses else None

    @property
    def primary_phone(self) -> str | None:
        """First phone number on file."""
        return self.phone_numbers[0].phone_number if self.phone_numbers else None
