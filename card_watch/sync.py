"""Pull customers from every configured merchant into local storage."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from card_watch.clover.client import CloverClient, MultiMerchantClient
from card_watch.clover.schemas import parse_customer
from card_watch.exceptions import CardWatchError, MerchantApiError, RecordValidationError
from card_watch.models import Customer

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class MerchantSyncStats:
    """Per-merchant record counts."""

    fetched: int = 0
    synced: int = 0
    errors: int = 0


@dataclass
class SyncIssue:
    """A failure recorded during sync without aborting the run."""

    currency: str
    merchant_id: str
    error: str
    customer_id: str | None = None
    status: int | None = None


@dataclass
class SyncResult:
    """Outcome of one sync run."""

    started_at: datetime
    finished_at: datetime | None = None
    merchants: dict[str, MerchantSyncStats] = field(default_factory=dict)
    errors: list[SyncIssue] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors

    @property
    def total_customers(self) -> int:
        return sum(stats.synced for stats in self.merchants.values())

    @property
    def duration_seconds(self) -> float | None:
        if self.finished_at is None:
            return None
        return (self.finished_at - self.started_at).total_seconds()


class SyncService:
    """Fetch, validate and store customers merchant by merchant.

    Each merchant's stored customers are replaced wholesale, and only when
    its fetch succeeded; a failing merchant keeps its previous data. A
    storage failure is recorded like a fetch failure and the remaining
    merchants still sync.

    Parameters
    ----------
    client : MultiMerchantClient
        One Clover client per merchant currency.
    store
        ``CustomerStore`` or ``PostgresCustomerRepository``; anything with
        ``replace_merchant_customers(currency, customers, synced_at)``.
    clock : callable, optional
        Returns the current aware datetime.
    """

    def __init__(
        self,
        client: MultiMerchantClient,
        store: Any,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.client = client
        self.store = store
        self.clock = clock

    def sync_all(self) -> SyncResult:
        """Sync every merchant sequentially."""
        result = SyncResult(started_at=self.clock())
        logger.info("Starting sync of %d merchant(s)", len(self.client.clients))

        for merchant_client in self.client.clients.values():
            self.sync_merchant(merchant_client, result)

        result.finished_at = self.clock()
        logger.info(
            "Sync completed in %.2fs: %d customers, %d error(s)",
            result.duration_seconds,
            result.total_customers,
            len(result.errors),
        )
        return result

    def sync_merchant(self, client: CloverClient, result: SyncResult) -> MerchantSyncStats:
        """Sync one merchant, recording failures in ``result``."""
        currency = client.currency
        merchant_id = client.config.merchant_id
        stats = result.merchants.setdefault(currency.value, MerchantSyncStats())
        logger.info("Syncing customers for %s merchant %s", currency.value, merchant_id)

        try:
            records = client.fetch_customers()
        except MerchantApiError as e:
            logger.error("Error syncing %s merchant: %s", currency.value, e)
            result.errors.append(SyncIssue(currency.value, merchant_id, str(e), status=e.status))
            return stats

        stats.fetched = len(records)
        synced_at = self.clock()
        customers: list[Customer] = []
        for raw in records:
            try:
                customers.append(parse_customer(raw).to_domain(currency, merchant_id, synced_at))
            except RecordValidationError as e:
                logger.warning(
                    "Skipping customer %s: %s",
                    e.customer_id,
                    e,
                    extra={"merchant_currency": currency.value, "customer_id": e.customer_id},
                )
                result.errors.append(
                    SyncIssue(currency.value, merchant_id, str(e), customer_id=e.customer_id)
                )

        try:
            stats.synced = self.store.replace_merchant_customers(currency, customers, synced_at)
        except CardWatchError as e:
            logger.error("Error storing %s customers: %s", currency.value, e)
            result.errors.append(SyncIssue(currency.value, merchant_id, str(e)))
            stats.errors = stats.fetched
            return stats

        stats.errors = stats.fetched - stats.synced
        logger.info("Synced %d/%d %s customers", stats.synced, stats.fetched, currency.value)
        return stats
