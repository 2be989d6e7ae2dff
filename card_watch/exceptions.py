"""Custom exception hierarchy for card-watch."""


class CardWatchError(Exception):
    """Base exception for all card-watch errors."""


class EntityNotFoundError(CardWatchError):
    """Raised when a referenced entity does not exist."""


class ReferentialIntegrityError(EntityNotFoundError):
    """Raised when a customer is stored under another merchant account."""


class ConfigurationError(CardWatchError):
    """Raised when configuration is invalid or missing."""


class MerchantApiError(CardWatchError):
    """Raised when the payment platform API rejects or fails a request."""

    def __init__(self, message: str, currency: str, status: int | None = None) -> None:
        super().__init__(message)
        self.currency = currency
        self.status = status


class RecordValidationError(CardWatchError):
    """Raised when a raw platform record fails boundary validation."""

    def __init__(self, message: str, customer_id: str | None = None) -> None:
        super().__init__(message)
        self.customer_id = customer_id


class StorageError(CardWatchError):
    """Raised when the local database cannot be read or written."""


class SinkError(CardWatchError):
    """Raised when a sink operation fails."""
