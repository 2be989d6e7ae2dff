"""Pytest configuration and fixtures."""

from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from card_watch.models import Card, Customer, EmailAddress, MerchantCurrency, PhoneNumber

REFERENCE_NOW = datetime(2026, 11, 15, tzinfo=timezone.utc)


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def now() -> datetime:
    """Fixed reference instant: 2026-11-15 00:00 UTC."""
    return REFERENCE_NOW


@pytest.fixture
def make_card() -> Callable[..., Card]:
    """Factory for cards with a given MMYY code."""

    def factory(code: str | None = "1230", **kwargs: Any) -> Card:
        defaults = {
            "id": "card-001",
            "first6": "411111",
            "last4": "1111",
            "first_name": "Ada",
            "last_name": "Lovelace",
            "card_type": "VISA",
        }
        defaults.update(kwargs)
        return Card(expiration_date=code, **defaults)

    return factory


@pytest.fixture
def make_customer(now: datetime) -> Callable[..., Customer]:
    """Factory for customers; ``codes`` builds one card per MMYY code."""

    def factory(
        customer_id: str = "CUST001",
        codes: list[str | None] | None = None,
        business_name: str | None = "Acme Fitness",
        age_days: float | None = 400,
        currency: MerchantCurrency = MerchantCurrency.USD,
        **kwargs: Any,
    ) -> Customer:
        cards = [
            Card(id=f"{customer_id}-card-{i}", first6="411111", last4=f"{i:04d}", expiration_date=code)
            for i, code in enumerate(codes or [])
        ]
        defaults: dict[str, Any] = {
            "first_name": "Ada",
            "last_name": "Lovelace",
            "email_addresses": [EmailAddress(email_address="ada@example.com", id="e1", primary=True)],
            "phone_numbers": [PhoneNumber(phone_number="5551234567", id="p1")],
        }
        defaults.update(kwargs)
        return Customer(
            id=customer_id,
            merchant_currency=currency,
            business_name=business_name,
            customer_since=None if age_days is None else now - timedelta(days=age_days),
            cards=cards,
            **defaults,
        )

    return factory


@pytest.fixture
def raw_customer() -> dict[str, Any]:
    """Raw Clover customer record with wrapped and plain nested lists."""
    return {
        "id": "AB12CD34EF56G",
        "merchant": {"id": "MERCHANT1"},
        "firstName": "Grace",
        "lastName": "Hopper",
        "marketingAllowed": True,
        "customerSince": 1735689600000,  # 2025-01-01T00:00:00Z
        "emailAddresses": {
            "elements": [
                {"id": "E1", "emailAddress": "grace@navy.example", "primaryEmail": False},
                {"id": "E2", "emailAddress": "ghopper@example.com", "primaryEmail": True},
            ]
        },
        "phoneNumbers": [{"id": "P1", "phoneNumber": "+1 555 010 9999"}],
        "addresses": {"elements": [{"address1": "1 Main St", "city": "Arlington", "state": "VA", "zip": "22201"}]},
        "cards": {
            "elements": [
                {
                    "id": "C1",
                    "first6": "545454",
                    "last4": "5454",
                    "expirationDate": "1026",
                    "cardType": "MC",
                    "token": "secret-token",
                    "tokenType": "CLOVER",
                    "modifiedTime": 1760000000000,
                    "additionalInfo": {"default": "true"},
                }
            ]
        },
        "orders": {"elements": [{"id": "O1"}]},
        "metadata": {"businessName": "Hopper Compilers", "note": "VIP", "dobYear": 1906},
    }
