"""PostgreSQL repository for synced customers."""

import logging
from datetime import datetime
from typing import Any

import psycopg
from psycopg.rows import dict_row

from card_watch.exceptions import StorageError
from card_watch.models import Address, Card, Customer, EmailAddress, MerchantCurrency, PhoneNumber
from card_watch.store.memory import StoreStats

logger = logging.getLogger(__name__)

SCHEMA_STATEMENTS = [
    """
    CREATE TABLE IF NOT EXISTS customers (
        merchant_currency TEXT NOT NULL,
        customer_id TEXT NOT NULL,
        merchant_id TEXT,
        first_name TEXT,
        last_name TEXT,
        customer_since TIMESTAMPTZ,
        marketing_allowed BOOLEAN NOT NULL DEFAULT FALSE,
        last_synced_at TIMESTAMPTZ,
        PRIMARY KEY (merchant_currency, customer_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS customer_metadata (
        merchant_currency TEXT NOT NULL,
        customer_id TEXT NOT NULL,
        business_name TEXT,
        note TEXT,
        PRIMARY KEY (merchant_currency, customer_id),
        FOREIGN KEY (merchant_currency, customer_id)
            REFERENCES customers (merchant_currency, customer_id) ON DELETE CASCADE
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS cards (
        merchant_currency TEXT NOT NULL,
        customer_id TEXT NOT NULL,
        position INTEGER NOT NULL,
        card_id TEXT,
        first6 TEXT,
        last4 TEXT,
        first_name TEXT,
        last_name TEXT,
        expiration_date TEXT,
        card_type TEXT,
        token_type TEXT,
        modified_time TIMESTAMPTZ,
        PRIMARY KEY (merchant_currency, customer_id, position),
        FOREIGN KEY (merchant_currency, customer_id)
            REFERENCES customers (merchant_currency, customer_id) ON DELETE CASCADE
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS email_addresses (
        merchant_currency TEXT NOT NULL,
        customer_id TEXT NOT NULL,
        position INTEGER NOT NULL,
        email_id TEXT,
        email_address TEXT NOT NULL,
        verified_time TIMESTAMPTZ,
        primary_email BOOLEAN NOT NULL DEFAULT FALSE,
        PRIMARY KEY (merchant_currency, customer_id, position),
        FOREIGN KEY (merchant_currency, customer_id)
            REFERENCES customers (merchant_currency, customer_id) ON DELETE CASCADE
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS phone_numbers (
        merchant_currency TEXT NOT NULL,
        customer_id TEXT NOT NULL,
        position INTEGER NOT NULL,
        phone_id TEXT,
        phone_number TEXT NOT NULL,
        PRIMARY KEY (merchant_currency, customer_id, position),
        FOREIGN KEY (merchant_currency, customer_id)
            REFERENCES customers (merchant_currency, customer_id) ON DELETE CASCADE
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS addresses (
        merchant_currency TEXT NOT NULL,
        customer_id TEXT NOT NULL,
        position INTEGER NOT NULL,
        address1 TEXT,
        address2 TEXT,
        address3 TEXT,
        city TEXT,
        state TEXT,
        zip TEXT,
        country TEXT,
        PRIMARY KEY (merchant_currency, customer_id, position),
        FOREIGN KEY (merchant_currency, customer_id)
            REFERENCES customers (merchant_currency, customer_id) ON DELETE CASCADE
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_cards_expiration ON cards (expiration_date)",
    "CREATE INDEX IF NOT EXISTS idx_metadata_business ON customer_metadata (business_name)",
]


class PostgresCustomerRepository:
    """Persist customers and their related records in PostgreSQL.

    Tables are written in ``TABLE_ORDER`` so that child rows always follow
    their customer row.
    """

    TABLE_COLUMNS: dict[str, list[str]] = {
        "customers": [
            "merchant_currency", "customer_id", "merchant_id", "first_name", "last_name",
            "customer_since", "marketing_allowed", "last_synced_at",
        ],
        "customer_metadata": ["merchant_currency", "customer_id", "business_name", "note"],
        "cards": [
            "merchant_currency", "customer_id", "position", "card_id", "first6", "last4",
            "first_name", "last_name", "expiration_date", "card_type", "token_type", "modified_time",
        ],
        "email_addresses": [
            "merchant_currency", "customer_id", "position", "email_id", "email_address",
            "verified_time", "primary_email",
        ],
        "phone_numbers": ["merchant_currency", "customer_id", "position", "phone_id", "phone_number"],
        "addresses": [
            "merchant_currency", "customer_id", "position", "address1", "address2", "address3",
            "city", "state", "zip", "country",
        ],
    }

    TABLE_ORDER = ["customers", "customer_metadata", "cards", "email_addresses", "phone_numbers", "addresses"]

    def __init__(self, connection_string: str) -> None:
        """Open a connection.

        Parameters
        ----------
        connection_string : str
            libpq connection URL, e.g. ``PostgresConfig.connection_string``.
        """
        try:
            self.conn = psycopg.connect(connection_string)
        except psycopg.Error as e:
            raise StorageError(f"Could not connect to PostgreSQL: {e}") from e

    def initialize_schema(self) -> None:
        """Create tables and indexes if they do not exist."""
        try:
            with self.conn.cursor() as cur:
                for statement in SCHEMA_STATEMENTS:
                    cur.execute(statement)
            self.conn.commit()
        except psycopg.Error as e:
            self.conn.rollback()
            raise StorageError(f"Schema initialization failed: {e}") from e

    def replace_merchant_customers(
        self,
        currency: MerchantCurrency,
        customers: list[Customer],
        synced_at: datetime | None = None,
    ) -> int:
        """Replace every stored customer of one merchant in a single transaction.

        Returns
        -------
        int
            Number of customers written.
        """
        rows = build_rows(customers, synced_at)
        try:
            with self.conn.cursor() as cur:
                # child tables cascade
                cur.execute("DELETE FROM customers WHERE merchant_currency = %s", (currency.value,))
                for table in self.TABLE_ORDER:
                    if not rows[table]:
                        continue
                    columns = self.TABLE_COLUMNS[table]
                    placeholders = ", ".join(["%s"] * len(columns))
                    cur.executemany(
                        f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders})",  # noqa: S608
                        rows[table],
                    )
            self.conn.commit()
        except psycopg.Error as e:
            self.conn.rollback()
            raise StorageError(f"Failed to store {currency.value} customers: {e}") from e

        logger.info("Stored %d %s customers", len(customers), currency.value)
        return len(customers)

    def load_customers(self, currency: MerchantCurrency | None = None) -> list[Customer]:
        """Load customers with cards, contacts and addresses assembled."""
        where, customer_where, params = "", "", ()
        if currency is not None:
            where = " WHERE merchant_currency = %s"
            customer_where = " WHERE c.merchant_currency = %s"
            params = (currency.value,)
        try:
            with self.conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    "SELECT c.merchant_currency, c.customer_id, c.merchant_id, c.first_name,"
                    " c.last_name, c.customer_since, c.marketing_allowed, c.last_synced_at,"
                    " m.business_name, m.note"
                    " FROM customers c LEFT JOIN customer_metadata m"
                    " USING (merchant_currency, customer_id)"
                    + customer_where
                    + " ORDER BY c.merchant_currency, c.customer_id",
                    params,
                )
                customer_rows = cur.fetchall()
                related = {}
                for table in ("cards", "email_addresses", "phone_numbers", "addresses"):
                    cur.execute(
                        f"SELECT * FROM {table}{where} ORDER BY merchant_currency, customer_id, position",  # noqa: S608
                        params,
                    )
                    related[table] = cur.fetchall()
        except psycopg.Error as e:
            raise StorageError(f"Failed to load customers: {e}") from e

        return assemble_customers(customer_rows, related)

    def stats(self) -> StoreStats:
        """Counts of stored customers."""
        try:
            with self.conn.cursor() as cur:
                cur.execute("SELECT COUNT(*) FROM customers")
                total = cur.fetchone()[0]
                cur.execute(
                    "SELECT merchant_currency, COUNT(*) FROM customers GROUP BY merchant_currency"
                    " ORDER BY merchant_currency"
                )
                by_merchant = {currency: count for currency, count in cur.fetchall()}
                cur.execute("SELECT COUNT(DISTINCT (merchant_currency, customer_id)) FROM cards")
                with_cards = cur.fetchone()[0]
                cur.execute(
                    "SELECT COUNT(*) FROM customer_metadata"
                    " WHERE business_name IS NOT NULL AND business_name <> ''"
                )
                with_business = cur.fetchone()[0]
        except psycopg.Error as e:
            raise StorageError(f"Failed to read statistics: {e}") from e

        return StoreStats(
            total_customers=total,
            customers_by_merchant=by_merchant,
            customers_with_cards=with_cards,
            customers_with_business_name=with_business,
        )

    def close(self) -> None:
        """Close the connection."""
        self.conn.close()


def build_rows(customers: list[Customer], synced_at: datetime | None = None) -> dict[str, list[tuple]]:
    """Flatten customers into insert rows per table."""
    rows: dict[str, list[tuple]] = {table: [] for table in PostgresCustomerRepository.TABLE_ORDER}
    for customer in customers:
        key = (customer.merchant_currency.value, customer.id)
        rows["customers"].append(
            (
                *key,
                customer.merchant_id,
                customer.first_name,
                customer.last_name,
                customer.customer_since,
                customer.marketing_allowed,
                synced_at or customer.last_synced_at,
            )
        )
        if customer.business_name or customer.note:
            rows["customer_metadata"].append((*key, customer.business_name, customer.note))
        for i, card in enumerate(customer.cards):
            rows["cards"].append(
                (
                    *key, i, card.id, card.first6, card.last4, card.first_name, card.last_name,
                    card.expiration_date, card.card_type, card.token_type, card.modified_time,
                )
            )
        for i, email in enumerate(customer.email_addresses):
            rows["email_addresses"].append(
                (*key, i, email.id, email.email_address, email.verified_time, email.primary)
            )
        for i, phone in enumerate(customer.phone_numbers):
            rows["phone_numbers"].append((*key, i, phone.id, phone.phone_number))
        for i, address in enumerate(customer.addresses):
            rows["addresses"].append(
                (
                    *key, i, address.address1, address.address2, address.address3,
                    address.city, address.state, address.zip, address.country,
                )
            )
    return rows


def assemble_customers(
    customer_rows: list[dict[str, Any]],
    related: dict[str, list[dict[str, Any]]],
) -> list[Customer]:
    """Build domain customers from ``dict_row`` query results."""
    customers: dict[tuple[str, str], Customer] = {}
    for row in customer_rows:
        key = (row["merchant_currency"], row["customer_id"])
        customers[key] = Customer(
            id=row["customer_id"],
            merchant_currency=MerchantCurrency(row["merchant_currency"]),
            first_name=row["first_name"],
            last_name=row["last_name"],
            business_name=row["business_name"],
            customer_since=row["customer_since"],
            marketing_allowed=bool(row["marketing_allowed"]),
            merchant_id=row["merchant_id"],
            note=row["note"],
            last_synced_at=row["last_synced_at"],
        )

    for row in related.get("cards", []):
        customer = customers.get((row["merchant_currency"], row["customer_id"]))
        if customer is None:
            continue
        customer.cards.append(
            Card(
                id=row["card_id"],
                first6=row["first6"],
                last4=row["last4"],
                first_name=row["first_name"],
                last_name=row["last_name"],
                expiration_date=row["expiration_date"],
                card_type=row["card_type"],
                token_type=row["token_type"],
                modified_time=row["modified_time"],
            )
        )
    for row in related.get("email_addresses", []):
        customer = customers.get((row["merchant_currency"], row["customer_id"]))
        if customer is None:
            continue
        customer.email_addresses.append(
            EmailAddress(
                email_address=row["email_address"],
                id=row["email_id"],
                verified_time=row["verified_time"],
                primary=bool(row["primary_email"]),
            )
        )
    for row in related.get("phone_numbers", []):
        customer = customers.get((row["merchant_currency"], row["customer_id"]))
        if customer is None:
            continue
        customer.phone_numbers.append(PhoneNumber(phone_number=row["phone_number"], id=row["phone_id"]))
    for row in related.get("addresses", []):
        customer = customers.get((row["merchant_currency"], row["customer_id"]))
        if customer is None:
            continue
        customer.addresses.append(
            Address(
                address1=row["address1"],
                address2=row["address2"],
                address3=row["address3"],
                city=row["city"],
                state=row["state"],
                zip=row["zip"],
                country=row["country"],
            )
        )
    return list(customers.values())
