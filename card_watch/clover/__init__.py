"""Clover payment platform adapter."""

from card_watch.clover.client import (
    CloverClient,
    MerchantFailure,
    MultiMerchantClient,
    MultiMerchantFetch,
)
from card_watch.clover.schemas import (
    CloverCard,
    CloverCustomer,
    CloverCustomersPage,
    from_epoch_millis,
    parse_customer,
    to_epoch_millis,
    unwrap_elements,
)

__all__ = [
    "CloverCard",
    "CloverClient",
    "CloverCustomer",
    "CloverCustomersPage",
    "MerchantFailure",
    "MultiMerchantClient",
    "MultiMerchantFetch",
    "from_epoch_millis",
    "parse_customer",
    "to_epoch_millis",
    "unwrap_elements",
]
