"""Contact and address models shared by customer records."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Address:
    """Postal address as stored by the payment platform.

    The platform assigns no identifier to addresses, so they are
    replaced as a list whenever the owning customer is synced.
    """

    address1: str | None = None
    address2: str | None = None
    address3: str | None = None
    city: str | None = None
    state: str | None = None
    zip: str | None = None
    country: str | None = None


@dataclass
class EmailAddress:
    """Customer email address."""

    email_address: str
    id: str | None = None
    verified_time: datetime | None = None
    primary: bool = False


@dataclass
class PhoneNumber:
    """Customer phone number."""

    phone_number: str
    id: str | None = None
