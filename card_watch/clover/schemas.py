"""Pydantic models for Clover customer payloads.

Clover returns expanded relations either as a plain array or wrapped as
``{"elements": [...]}`` depending on endpoint and expand options. Both
shapes are normalized to plain lists here, so the analysis code only ever
sees :class:`card_watch.models.Customer`.
"""

from datetime import datetime, timedelta, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from card_watch.exceptions import RecordValidationError
from card_watch.models import Address, Card, Customer, EmailAddress, MerchantCurrency, PhoneNumber

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def from_epoch_millis(value: int | None) -> datetime | None:
    """Convert Clover epoch milliseconds to an aware UTC datetime."""
    if value is None:
        return None
    return _EPOCH + timedelta(milliseconds=value)


def to_epoch_millis(value: datetime | None) -> int | None:
    """Inverse of :func:`from_epoch_millis`."""
    if value is None:
        return None
    return (value - _EPOCH) // timedelta(milliseconds=1)


def unwrap_elements(value: Any) -> Any:
    """Normalize ``None``, ``[...]`` and ``{"elements": [...]}`` to a list."""
    if value is None:
        return []
    if isinstance(value, dict) and "elements" in value:
        return value["elements"] or []
    return value


class CloverModel(BaseModel):
    """Base for Clover payloads: camelCase aliases, unknown keys ignored."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class CloverReference(CloverModel):
    id: str


class CloverAddress(CloverModel):
    address1: str | None = None
    address2: str | None = None
    address3: str | None = None
    city: str | None = None
    country: str | None = None
    state: str | None = None
    zip: str | None = None

    def to_domain(self) -> Address:
        return Address(**self.model_dump())


class CloverEmailAddress(CloverModel):
    id: str
    email_address: str = Field(alias="emailAddress")
    verified_time: int | None = Field(default=None, alias="verifiedTime")
    primary_email: bool = Field(default=False, alias="primaryEmail")
    customer: CloverReference | None = None

    def to_domain(self) -> EmailAddress:
        return EmailAddress(
            email_address=self.email_address,
            id=self.id,
            verified_time=from_epoch_millis(self.verified_time),
            primary=self.primary_email,
        )


class CloverPhoneNumber(CloverModel):
    id: str
    phone_number: str = Field(alias="phoneNumber")
    customer: CloverReference | None = None

    def to_domain(self) -> PhoneNumber:
        return PhoneNumber(phone_number=self.phone_number, id=self.id)


class CloverCard(CloverModel):
    id: str | None = None
    first6: str | None = None
    last4: str | None = None
    first_name: str | None = Field(default=None, alias="firstName")
    last_name: str | None = Field(default=None, alias="lastName")
    expiration_date: str | None = Field(default=None, alias="expirationDate")  # MMYY
    additional_info: dict[str, str] | None = Field(default=None, alias="additionalInfo")
    card_type: str | None = Field(default=None, alias="cardType")
    token: str | None = None
    token_type: str | None = Field(default=None, alias="tokenType")
    modified_time: int | None = Field(default=None, alias="modifiedTime")
    customer: CloverReference | None = None

    def to_domain(self) -> Card:
        # the token is deliberately not carried into the domain model
        return Card(
            id=self.id,
            first6=self.first6,
            last4=self.last4,
            first_name=self.first_name,
            last_name=self.last_name,
            expiration_date=self.expiration_date,
            card_type=self.card_type,
            token_type=self.token_type,
            modified_time=from_epoch_millis(self.modified_time),
        )


class CloverMetadata(CloverModel):
    business_name: str | None = Field(default=None, alias="businessName")
    note: str | None = None
    dob_year: int | None = Field(default=None, alias="dobYear")
    dob_month: int | None = Field(default=None, alias="dobMonth")
    dob_day: int | None = Field(default=None, alias="dobDay")
    modified_time: int | None = Field(default=None, alias="modifiedTime")
    customer: CloverReference | None = None


class CloverCustomer(CloverModel):
    """One customer as returned by ``/v3/merchants/{mId}/customers``."""

    id: str
    merchant: CloverReference | None = None
    first_name: str | None = Field(default=None, alias="firstName")
    last_name: str | None = Field(default=None, alias="lastName")
    marketing_allowed: bool = Field(default=False, alias="marketingAllowed")
    customer_since: int | None = Field(default=None, alias="customerSince")  # epoch ms
    orders: list[CloverReference] = Field(default_factory=list)
    addresses: list[CloverAddress] = Field(default_factory=list)
    email_addresses: list[CloverEmailAddress] = Field(default_factory=list, alias="emailAddresses")
    phone_numbers: list[CloverPhoneNumber] = Field(default_factory=list, alias="phoneNumbers")
    cards: list[CloverCard] = Field(default_factory=list)
    metadata: CloverMetadata | None = None

    @field_validator("orders", "addresses", "email_addresses", "phone_numbers", "cards", mode="before")
    @classmethod
    def _normalize_collection(cls, value: Any) -> Any:
        return unwrap_elements(value)

    @field_validator("marketing_allowed", mode="before")
    @classmethod
    def _null_is_false(cls, value: Any) -> Any:
        return False if value is None else value

    def to_domain(
        self,
        currency: MerchantCurrency,
        merchant_id: str | None = None,
        synced_at: datetime | None = None,
    ) -> Customer:
        """Build the canonical domain customer."""
        metadata = self.metadata or CloverMetadata()
        return Customer(
            id=self.id,
            merchant_currency=currency,
            first_name=self.first_name,
            last_name=self.last_name,
            business_name=metadata.business_name,
            customer_since=from_epoch_millis(self.customer_since),
            marketing_allowed=self.marketing_allowed,
            merchant_id=merchant_id or (self.merchant.id if self.merchant else None),
            note=metadata.note,
            cards=[card.to_domain() for card in self.cards],
            email_addresses=[email.to_domain() for email in self.email_addresses],
            phone_numbers=[phone.to_domain() for phone in self.phone_numbers],
            addresses=[address.to_domain() for address in self.addresses],
            last_synced_at=synced_at,
        )


class CloverCustomersPage(CloverModel):
    """Envelope of a customers listing; records are validated one by one."""

    elements: list[dict[str, Any]] = Field(default_factory=list)
    href: str | None = None

    @field_validator("elements", mode="before")
    @classmethod
    def _null_is_empty(cls, value: Any) -> Any:
        return [] if value is None else value


def parse_customer(raw: dict[str, Any]) -> CloverCustomer:
    """Validate one raw customer record.

    Raises
    ------
    RecordValidationError
        If the record does not match the expected shape.
    """
    try:
        return CloverCustomer.model_validate(raw)
    except ValidationError as e:
        customer_id = raw.get("id") if isinstance(raw, dict) else None
        raise RecordValidationError(
            f"Invalid customer record {customer_id!r}: {e.error_count()} error(s)",
            customer_id=customer_id if isinstance(customer_id, str) else None,
        ) from e
