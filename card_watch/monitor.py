"""Run the expiration analysis over every merchant's customers."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from card_watch.analysis import (
    analyze_customers,
    expired_customers,
    expiring_later_customers,
    expiring_soon_customers,
    generate_summary,
)
from card_watch.clover.client import MerchantFailure, MultiMerchantClient
from card_watch.clover.schemas import parse_customer
from card_watch.exceptions import RecordValidationError
from card_watch.models import (
    Customer,
    CustomerWithExpiration,
    ExpirationStatus,
    MerchantCurrency,
    SummaryStatistics,
)

logger = logging.getLogger(__name__)

CustomerSource = Callable[[], tuple[list[Customer], list[MerchantFailure]]]

NOTIFY_STATUSES = (ExpirationStatus.EXPIRED, ExpirationStatus.EXPIRING_SOON)


@dataclass
class MonitorResult:
    """Everything the dashboard and reports need for one reference instant."""

    now: datetime
    summary: SummaryStatistics
    customers: list[CustomerWithExpiration]
    expired: list[CustomerWithExpiration]
    expiring_soon: list[CustomerWithExpiration]
    expiring_later: list[CustomerWithExpiration]
    by_merchant: dict[MerchantCurrency, list[CustomerWithExpiration]] = field(default_factory=dict)
    merchant_errors: list[MerchantFailure] = field(default_factory=list)

    def urgent_customers(self) -> list[CustomerWithExpiration]:
        """Customers with an expired or expiring-soon card, each listed once."""
        seen: set[tuple[MerchantCurrency, str]] = set()
        urgent = []
        for analyzed in [*self.expired, *self.expiring_soon]:
            if analyzed.customer.key not in seen:
                seen.add(analyzed.customer.key)
                urgent.append(analyzed)
        return urgent


class ExpirationMonitor:
    """Analyze customers from a source of record.

    Parameters
    ----------
    source : callable
        Returns the customers to analyze and any merchant failures met
        while loading them. Use :meth:`from_store` or :meth:`from_client`.
    """

    def __init__(self, source: CustomerSource) -> None:
        self.source = source

    @classmethod
    def from_store(cls, store: Any) -> "ExpirationMonitor":
        """Analyze the customers held by a store or repository."""
        return cls(lambda: (store.load_customers(), []))

    @classmethod
    def from_client(cls, client: MultiMerchantClient) -> "ExpirationMonitor":
        """Analyze customers fetched live from the payment platform."""

        def load() -> tuple[list[Customer], list[MerchantFailure]]:
            fetched = client.fetch_all()
            customers = []
            for currency, raw in fetched.customers:
                try:
                    customers.append(parse_customer(raw).to_domain(currency))
                except RecordValidationError as e:
                    logger.warning("Skipping invalid %s customer %s: %s", currency.value, e.customer_id, e)
            return customers, fetched.errors

        return cls(load)

    def run_analysis(self, now: datetime) -> MonitorResult:
        """Classify every card and bucket the customers."""
        customers, errors = self.source()
        analyzed = analyze_customers(customers, now)

        by_merchant: dict[MerchantCurrency, list[CustomerWithExpiration]] = {}
        for item in analyzed:
            by_merchant.setdefault(item.customer.merchant_currency, []).append(item)

        result = MonitorResult(
            now=now,
            summary=generate_summary(analyzed),
            customers=analyzed,
            expired=expired_customers(analyzed),
            expiring_soon=expiring_soon_customers(analyzed),
            expiring_later=expiring_later_customers(analyzed),
            by_merchant=by_merchant,
            merchant_errors=errors,
        )
        logger.info(
            "Analyzed %d customers: %d expired, %d expiring soon, %d expiring later",
            len(analyzed),
            len(result.expired),
            len(result.expiring_soon),
            len(result.expiring_later),
        )
        return result

    def urgent_customers(self, now: datetime) -> list[CustomerWithExpiration]:
        """Customers requiring immediate attention."""
        return self.run_analysis(now).urgent_customers()


def format_for_notification(analyzed: CustomerWithExpiration) -> dict[str, Any]:
    """Compact record for an email or SMS collaborator."""
    customer = analyzed.customer
    return {
        "customer_id": customer.id,
        "name": customer.full_name or "Customer",
        "email": customer.email_addresses[0].email_address if customer.email_addresses else None,
        "phone": customer.primary_phone,
        "merchant_currency": customer.merchant_currency.value,
        "expiring_cards": [
            {
                "card_type": a.card.card_type,
                "last4": a.card.last4,
                "expiration_date": a.card.expiration_date,
                "days_until_expiration": a.expiration.days_until_expiration,
                "status": a.status.value,
            }
            for a in analyzed.expiration_analysis
            if a.status in NOTIFY_STATUSES
        ],
    }
