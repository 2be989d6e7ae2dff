"""Customer storage: in-memory store and PostgreSQL repository."""

from card_watch.store.memory import CustomerStore, StoreStats
from card_watch.store.postgres import PostgresCustomerRepository

__all__ = ["CustomerStore", "PostgresCustomerRepository", "StoreStats"]
