"""Synthetic Clover customer payloads.

Payloads are shaped exactly like ``/v3/merchants/{mId}/customers``
elements (camelCase keys, epoch-millisecond timestamps, nested lists
sometimes wrapped as ``{"elements": [...]}``), and expiration codes are
chosen relative to a reference instant so every profile lands in its
intended status bucket.
"""

import random
import string
from datetime import datetime
from enum import Enum
from typing import Any, Iterator

from card_watch.clover.schemas import to_epoch_millis
from card_watch.generators.base import BaseGenerator


class CustomerProfile(str, Enum):
    EXPIRED = "expired"
    EXPIRING_SOON = "expiring-soon"
    EXPIRING_LATER = "expiring-later"
    HEALTHY = "healthy"
    NO_CARDS = "no-cards"
    WALK_IN = "walk-in"
    MALFORMED = "malformed"


PROFILE_WEIGHTS = {
    CustomerProfile.EXPIRED: 0.15,
    CustomerProfile.EXPIRING_SOON: 0.10,
    CustomerProfile.EXPIRING_LATER: 0.10,
    CustomerProfile.HEALTHY: 0.35,
    CustomerProfile.NO_CARDS: 0.15,
    CustomerProfile.WALK_IN: 0.10,
    CustomerProfile.MALFORMED: 0.05,
}

MALFORMED_CODES = ["1326", "0026", "AB26", "126", "12/26", "", "１２26"]

# (cardType, first6 prefixes)
CARD_NETWORKS = [
    ("VISA", ["4"]),
    ("MC", ["51", "52", "53", "54", "55"]),
    ("AMEX", ["34", "37"]),
    ("DISCOVER", ["6011", "65"]),
]


def add_months(year: int, month: int, delta: int) -> tuple[int, int]:
    """Shift a (year, month) pair by ``delta`` months."""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def expiration_code(year: int, month: int) -> str:
    """MMYY code for a year in 2000-2099."""
    return f"{month:02d}{year % 100:02d}"


class CloverCustomerGenerator(BaseGenerator):
    """Generate raw Clover customer records.

    Parameters
    ----------
    seed : int | None
        Random seed for reproducibility.
    locale : str
        Faker locale; ``en_CA`` suits the CAD merchant.
    wrap_probability : float
        Chance that a nested list is emitted as ``{"elements": [...]}``.
    """

    def __init__(self, seed: int | None = None, locale: str = "en_US", wrap_probability: float = 0.3) -> None:
        super().__init__(seed, locale)
        self.wrap_probability = wrap_probability

    def customer_id(self) -> str:
        """13-character uppercase id in Clover's style."""
        return "".join(random.choices(string.ascii_uppercase + string.digits, k=13))

    def code_for(self, profile: CustomerProfile, now: datetime) -> str | None:
        """Expiration code landing in the profile's status bucket at ``now``."""
        year, month = now.year, now.month
        if profile is CustomerProfile.EXPIRED:
            return expiration_code(*add_months(year, month, -random.randint(1, 12)))
        if profile is CustomerProfile.EXPIRING_SOON:
            # last day of the current month is 0-30 days away
            return expiration_code(year, month)
        if profile is CustomerProfile.EXPIRING_LATER:
            # next month's end is 43-61 days away from the first half of a
            # month, the month after's end 59-77 days away from the second half
            ahead = 1 if now.day <= 15 else 2
            return expiration_code(*add_months(year, month, ahead))
        if profile is CustomerProfile.MALFORMED:
            return random.choice(MALFORMED_CODES)
        return expiration_code(*add_months(year, month, random.randint(12, 60)))

    def card(self, code: str | None, first_name: str, last_name: str, now: datetime) -> dict[str, Any]:
        card_type, prefixes = random.choice(CARD_NETWORKS)
        prefix = random.choice(prefixes)
        first6 = prefix + "".join(random.choices(string.digits, k=6 - len(prefix)))
        record = {
            "id": self.customer_id(),
            "first6": first6,
            "last4": "".join(random.choices(string.digits, k=4)),
            "firstName": first_name,
            "lastName": last_name,
            "cardType": card_type,
            "tokenType": "CLOVER",
            "modifiedTime": to_epoch_millis(self.instant_before(now, 0, 365)),
        }
        if code is not None:
            record["expirationDate"] = code
        return record

    def _collection(self, items: list[dict[str, Any]]) -> list[dict[str, Any]] | dict[str, Any]:
        if random.random() < self.wrap_probability:
            return {"elements": items}
        return items

    def generate(self, now: datetime, profile: CustomerProfile | None = None) -> dict[str, Any]:
        """Generate one customer record for the reference instant ``now``."""
        if profile is None:
            profile = random.choices(list(PROFILE_WEIGHTS), weights=list(PROFILE_WEIGHTS.values()), k=1)[0]

        customer_id = self.customer_id()
        first_name = self.fake.first_name()
        last_name = self.fake.last_name()

        if profile is CustomerProfile.NO_CARDS:
            cards = []
        else:
            cards = [self.card(self.code_for(profile, now), first_name, last_name, now)]
            if profile is CustomerProfile.HEALTHY and random.random() < 0.3:
                cards.append(self.card(self.code_for(profile, now), first_name, last_name, now))

        since = self.instant_before(now, 1, 1500)
        record: dict[str, Any] = {
            "id": customer_id,
            "firstName": first_name,
            "lastName": last_name,
            "marketingAllowed": random.random() < 0.4,
            "customerSince": to_epoch_millis(since),
            "emailAddresses": self._collection(
                [
                    {
                        "id": self.customer_id(),
                        "emailAddress": self.fake.email(),
                        "primaryEmail": True,
                    }
                ]
            ),
            "phoneNumbers": self._collection(
                [{"id": self.customer_id(), "phoneNumber": self.fake.numerify("##########")}]
            ),
            "addresses": self._collection(
                [
                    {
                        "address1": self.fake.street_address(),
                        "city": self.fake.city(),
                        "zip": self.fake.postcode(),
                        "country": self.fake.current_country_code(),
                    }
                ]
            ),
            "cards": self._collection(cards),
        }
        if profile is not CustomerProfile.WALK_IN:
            record["metadata"] = {"businessName": self.fake.company(), "note": None}
        return record

    def generate_batch(self, count: int, now: datetime) -> Iterator[dict[str, Any]]:
        """Yield ``count`` customers with weighted random profiles."""
        for _ in range(count):
            yield self.generate(now)

    def generate_page(self, count: int, now: datetime) -> dict[str, Any]:
        """A full customers-listing response body."""
        return {"elements": list(self.generate_batch(count, now))}
