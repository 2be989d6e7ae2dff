"""Clover REST client with rate limiting and pagination."""

import logging
import time
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import Any

import httpx
from pydantic import ValidationError

from card_watch.clover.schemas import CloverCustomersPage
from card_watch.config import CloverMerchantConfig, SyncConfig
from card_watch.exceptions import MerchantApiError
from card_watch.logging import get_logger
from card_watch.models.enums import MerchantCurrency

logger = logging.getLogger(__name__)

EXPAND_FIELDS = "metadata,cards,addresses,emailAddresses,phoneNumbers"


class CloverClient:
    """Read-only client for one merchant account.

    Parameters
    ----------
    config : CloverMerchantConfig
        Merchant id, token and environment.
    sync : SyncConfig, optional
        Page size, minimum delay between requests and request timeout.
    http_client : httpx.Client, optional
        Pre-built client (tests pass one with ``httpx.MockTransport``).
    sleep, clock : callable, optional
        Injected for tests; default to ``time.sleep`` / ``time.monotonic``.
    """

    def __init__(
        self,
        config: CloverMerchantConfig,
        sync: SyncConfig | None = None,
        http_client: httpx.Client | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config
        self.sync = sync or SyncConfig()
        self._owns_client = http_client is None
        self._http = http_client or httpx.Client(timeout=self.sync.request_timeout)
        self._sleep = sleep
        self._clock = clock
        self._last_request: float | None = None
        self.log = get_logger(__name__, merchant_currency=config.currency.value, merchant_id=config.merchant_id)

    @property
    def currency(self) -> MerchantCurrency:
        return self.config.currency

    def _enforce_rate_limit(self) -> None:
        if self._last_request is not None:
            elapsed = self._clock() - self._last_request
            wait = self.sync.rate_limit_delay - elapsed
            if wait > 0:
                self.log.debug("Rate limit: waiting %.2fs before next request", wait)
                self._sleep(wait)
        self._last_request = self._clock()

    def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        self._enforce_rate_limit()
        url = f"{self.config.base_url}{path}"
        headers = {
            "Authorization": f"Bearer {self.config.api_token}",
            "Accept": "application/json",
        }
        try:
            response = self._http.get(url, params=params, headers=headers)
        except httpx.HTTPError as e:
            raise MerchantApiError(
                f"Clover request failed for {self.currency.value}: {e}", self.currency.value
            ) from e

        if response.is_error:
            raise MerchantApiError(
                f"Clover API error: {response.status_code} {response.reason_phrase} - {response.text}",
                self.currency.value,
                status=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise MerchantApiError(
                f"Clover returned a non-JSON body for {self.currency.value}",
                self.currency.value,
                status=response.status_code,
            ) from e

    def get_customers_page(self, limit: int, offset: int) -> list[dict[str, Any]]:
        """Fetch one page of customers."""
        body = self._get(
            f"/v3/merchants/{self.config.merchant_id}/customers",
            params={"expand": EXPAND_FIELDS, "limit": limit, "offset": offset},
        )
        try:
            return CloverCustomersPage.model_validate(body).elements
        except ValidationError as e:
            raise MerchantApiError(
                f"Unexpected customers response shape for {self.currency.value}", self.currency.value
            ) from e

    def iter_customers(self) -> Iterator[dict[str, Any]]:
        """Yield raw customer records across all pages.

        Stops at the first empty or short page.
        """
        limit = self.sync.page_size
        offset = 0
        while True:
            page = self.get_customers_page(limit, offset)
            self.log.debug("Fetched %d customers at offset %d", len(page), offset)
            yield from page
            if len(page) < limit:
                break
            offset += limit

    def fetch_customers(self) -> list[dict[str, Any]]:
        """Fetch every customer for this merchant."""
        return list(self.iter_customers())

    def close(self) -> None:
        if self._owns_client:
            self._http.close()

    def __enter__(self) -> "CloverClient":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


@dataclass
class MerchantFailure:
    """API failure for one merchant account."""

    currency: MerchantCurrency
    error: str
    status: int | None = None


@dataclass
class MultiMerchantFetch:
    """Raw records from every merchant plus the merchants that failed."""

    customers: list[tuple[MerchantCurrency, dict[str, Any]]] = field(default_factory=list)
    errors: list[MerchantFailure] = field(default_factory=list)


class MultiMerchantClient:
    """Fan out over the configured merchant accounts, one client per currency."""

    def __init__(self, clients: list[CloverClient]) -> None:
        self.clients: dict[MerchantCurrency, CloverClient] = {c.currency: c for c in clients}

    @classmethod
    def from_configs(
        cls,
        configs: list[CloverMerchantConfig],
        sync: SyncConfig | None = None,
    ) -> "MultiMerchantClient":
        return cls([CloverClient(config, sync) for config in configs])

    def fetch_all(self) -> MultiMerchantFetch:
        """Fetch all merchants sequentially; one failure does not stop the others."""
        result = MultiMerchantFetch()
        for currency, client in self.clients.items():
            try:
                records = client.fetch_customers()
            except MerchantApiError as e:
                logger.error("Failed to fetch %s customers: %s", currency.value, e)
                result.errors.append(MerchantFailure(currency, str(e), e.status))
                continue
            result.customers.extend((currency, record) for record in records)
        return result

    def close(self) -> None:
        for client in self.clients.values():
            client.close()
