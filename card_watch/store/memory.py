"""In-memory customer store keyed by merchant account."""

from dataclasses import dataclass, field
from datetime import datetime

from card_watch.exceptions import EntityNotFoundError, ReferentialIntegrityError
from card_watch.models import Customer, MerchantCurrency

CustomerKey = tuple[MerchantCurrency, str]


@dataclass(frozen=True)
class StoreStats:
    """Counts reported after a sync."""

    total_customers: int
    customers_by_merchant: dict[str, int]
    customers_with_cards: int
    customers_with_business_name: int


@dataclass
class CustomerStore:
    """In-memory store for customers with per-merchant indexes.

    Customer ids are only unique within one merchant account, so every
    lookup takes the merchant currency as well.
    """

    customers: dict[CustomerKey, Customer] = field(default_factory=dict)

    # Relationship indexes
    _merchant_customers: dict[MerchantCurrency, list[str]] = field(default_factory=dict)

    def add_customer(self, customer: Customer) -> None:
        """Add or replace a customer."""
        key = customer.key
        if key not in self.customers:
            self._merchant_customers.setdefault(customer.merchant_currency, []).append(customer.id)
        self.customers[key] = customer

    def get_customer(self, currency: MerchantCurrency, customer_id: str) -> Customer:
        """Get a customer by merchant and id."""
        customer = self.customers.get((currency, customer_id))
        if customer is None:
            raise EntityNotFoundError(f"Customer {currency.value}/{customer_id} not found")
        return customer

    def replace_merchant_customers(
        self,
        currency: MerchantCurrency,
        customers: list[Customer],
        synced_at: datetime | None = None,
    ) -> int:
        """Replace every customer of one merchant account.

        The merchant keeps its position in :meth:`load_customers` order.

        Returns
        -------
        int
            Number of customers stored.
        """
        for customer_id in self._merchant_customers.get(currency, []):
            self.customers.pop((currency, customer_id), None)
        self._merchant_customers[currency] = []

        for customer in customers:
            if customer.merchant_currency is not currency:
                raise ReferentialIntegrityError(
                    f"Customer {customer.id} belongs to {customer.merchant_currency.value}, not {currency.value}"
                )
            if synced_at is not None:
                customer.last_synced_at = synced_at
            self.add_customer(customer)
        return len(self._merchant_customers.get(currency, []))

    def load_customers(self, currency: MerchantCurrency | None = None) -> list[Customer]:
        """All customers, optionally restricted to one merchant, in insertion order."""
        currencies = [currency] if currency is not None else list(self._merchant_customers)
        return [
            self.customers[(c, customer_id)]
            for c in currencies
            for customer_id in self._merchant_customers.get(c, [])
        ]

    def stats(self) -> StoreStats:
        """Summary counts matching the database statistics."""
        customers = list(self.customers.values())
        return StoreStats(
            total_customers=len(customers),
            customers_by_merchant={
                c.value: len(ids) for c, ids in self._merchant_customers.items() if ids
            },
            customers_with_cards=sum(1 for c in customers if c.cards),
            customers_with_business_name=sum(1 for c in customers if c.business_name),
        )
