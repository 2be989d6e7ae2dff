"""Tests for custom exception hierarchy."""

from card_watch.exceptions import (
    CardWatchError,
    ConfigurationError,
    EntityNotFoundError,
    MerchantApiError,
    RecordValidationError,
    ReferentialIntegrityError,
    SinkError,
    StorageError,
)


class TestExceptionHierarchy:
    """Test exception inheritance chain."""

    def test_card_watch_error_is_exception(self) -> None:
        assert isinstance(CardWatchError("test"), Exception)

    def test_entity_not_found_is_card_watch_error(self) -> None:
        assert isinstance(EntityNotFoundError("test"), CardWatchError)

    def test_referential_integrity_is_entity_not_found(self) -> None:
        err = ReferentialIntegrityError("test")
        assert isinstance(err, EntityNotFoundError)
        assert isinstance(err, CardWatchError)

    def test_other_errors_are_card_watch_errors(self) -> None:
        for err in (
            ConfigurationError("x"),
            MerchantApiError("x", "USD"),
            RecordValidationError("x"),
            StorageError("x"),
            SinkError("x"),
        ):
            assert isinstance(err, CardWatchError)

    def test_exception_message(self) -> None:
        err = ReferentialIntegrityError("Card references unknown customer USD/cust-001")
        assert str(err) == "Card references unknown customer USD/cust-001"


class TestContextAttributes:
    """Errors carrying merchant or record context."""

    def test_merchant_api_error(self) -> None:
        err = MerchantApiError("Clover API error: 429", "CAD", status=429)

        assert err.currency == "CAD"
        assert err.status == 429
        assert str(err) == "Clover API error: 429"

    def test_merchant_api_error_without_status(self) -> None:
        assert MerchantApiError("timeout", "USD").status is None

    def test_record_validation_error(self) -> None:
        err = RecordValidationError("Invalid customer record", customer_id="C1")

        assert err.customer_id == "C1"
        assert RecordValidationError("x").customer_id is None
