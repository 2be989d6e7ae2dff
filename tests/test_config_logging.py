"""Tests for config and logging."""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import patch

import pytest

from card_watch.config import (
    DEFAULT_NEW_CUSTOMER_CUTOFF,
    CardWatchConfig,
    CloverMerchantConfig,
    OutputConfig,
    PolicyConfig,
    PostgresConfig,
    SyncConfig,
    missing_merchant_variables,
)
from card_watch.exceptions import ConfigurationError
from card_watch.logging import JsonFormatter, get_logger, setup_logging
from card_watch.models import MerchantCurrency

MERCHANT_ENV = {
    "CLOVER_USD_MERCHANT_ID": "MUSD",
    "CLOVER_USD_API_TOKEN": "tok-usd",
    "CLOVER_CAD_MERCHANT_ID": "MCAD",
    "CLOVER_CAD_API_TOKEN": "tok-cad",
}


class TestPostgresConfig:
    """Tests for PostgresConfig."""

    def test_default_values(self) -> None:
        """Test default configuration values."""
        config = PostgresConfig()

        assert config.host == "localhost"
        assert config.port == 5432
        assert config.database == "cardwatch"

    def test_connection_string(self) -> None:
        """Test connection string property."""
        config = PostgresConfig(host="db", port=5433, database="cw", user="u", password="p")
        assert config.connection_string == "postgresql://u:p@db:5433/cw"


class TestSimpleConfigs:
    """Tests for the smaller config sections."""

    def test_sync_defaults(self) -> None:
        config = SyncConfig()

        assert config.page_size == 100
        assert config.rate_limit_delay == 2.0
        assert config.request_timeout == 30.0

    def test_output_defaults(self) -> None:
        config = OutputConfig()

        assert config.report_output_dir == Path("reports")
        assert config.pretty_json is False

    def test_policy_default_cutoff(self) -> None:
        assert PolicyConfig().new_customer_cutoff == datetime(2025, 7, 21, tzinfo=timezone.utc)

    def test_merchant_base_url(self) -> None:
        prod = CloverMerchantConfig(MerchantCurrency.USD, "M", "t")
        sandbox = CloverMerchantConfig(MerchantCurrency.USD, "M", "t", environment="sandbox")

        assert prod.base_url == "https://api.clover.com"
        assert sandbox.base_url == "https://apisandbox.dev.clover.com"


class TestCardWatchConfig:
    """Tests for CardWatchConfig."""

    def test_default_values(self) -> None:
        """Test default configuration values."""
        config = CardWatchConfig()

        assert config.merchants == []
        assert isinstance(config.postgres, PostgresConfig)
        assert config.policy.new_customer_cutoff == DEFAULT_NEW_CUSTOMER_CUTOFF
        assert config.seed is None
        assert config.log_level == "INFO"
        assert config.log_format == "standard"

    def test_enabled_merchants_requires_one(self) -> None:
        """Test a config without merchants is rejected when merchants are needed."""
        disabled = CloverMerchantConfig(MerchantCurrency.CAD, "M", "t", enabled=False)

        with pytest.raises(ConfigurationError, match="USD or CAD"):
            CardWatchConfig(merchants=[disabled]).enabled_merchants()

    def test_from_env_default(self) -> None:
        """Test creating config from an empty environment."""
        with patch.dict(os.environ, {}, clear=True):
            config = CardWatchConfig.from_env()

        assert config.merchants == []
        assert config.postgres.host == "localhost"
        assert config.sync.page_size == 100
        assert config.policy.new_customer_cutoff == DEFAULT_NEW_CUSTOMER_CUTOFF
        assert config.output.report_output_dir == Path("reports")
        assert config.seed is None

    def test_from_env_custom(self) -> None:
        """Test creating config from custom environment variables."""
        env = {
            **MERCHANT_ENV,
            "CLOVER_ENV": "sandbox",
            "CLOVER_CAD_ENABLED": "false",
            "POSTGRES_HOST": "db.example.com",
            "POSTGRES_PORT": "5433",
            "SYNC_PAGE_SIZE": "50",
            "SYNC_RATE_LIMIT_DELAY": "0.5",
            "NEW_CUSTOMER_CUTOFF": "2026-01-01",
            "OUTPUT_DIR": "/data/reports",
            "PRETTY_JSON": "true",
            "SEED": "12345",
            "LOG_LEVEL": "DEBUG",
            "LOG_FORMAT": "json",
        }
        with patch.dict(os.environ, env, clear=True):
            config = CardWatchConfig.from_env()

        assert [m.currency for m in config.merchants] == [MerchantCurrency.USD, MerchantCurrency.CAD]
        assert config.merchants[0].environment == "sandbox"
        assert [m.merchant_id for m in config.enabled_merchants()] == ["MUSD"]
        assert config.postgres.port == 5433
        assert config.sync.page_size == 50
        assert config.sync.rate_limit_delay == 0.5
        assert config.policy.new_customer_cutoff == datetime(2026, 1, 1, tzinfo=timezone.utc)
        assert config.output.report_output_dir == Path("/data/reports")
        assert config.output.pretty_json is True
        assert config.seed == 12345
        assert config.log_format == "json"

    def test_from_env_partial_merchant_skipped(self) -> None:
        """Test a merchant without both id and token is not configured."""
        with patch.dict(os.environ, {"CLOVER_USD_MERCHANT_ID": "MUSD"}, clear=True):
            config = CardWatchConfig.from_env()

        assert config.merchants == []

    def test_from_env_invalid_cutoff(self) -> None:
        """Test an unparseable cutoff raises ConfigurationError."""
        with patch.dict(os.environ, {"NEW_CUSTOMER_CUTOFF": "last summer"}, clear=True):
            with pytest.raises(ConfigurationError, match="NEW_CUSTOMER_CUTOFF"):
                CardWatchConfig.from_env()

    def test_missing_merchant_variables(self) -> None:
        """Test unset merchant variables are listed."""
        env = {"CLOVER_USD_MERCHANT_ID": "MUSD", "CLOVER_USD_API_TOKEN": "t"}
        with patch.dict(os.environ, env, clear=True):
            assert missing_merchant_variables() == ["CLOVER_CAD_MERCHANT_ID", "CLOVER_CAD_API_TOKEN"]


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_setup_logging_default(self) -> None:
        """Test default logging setup."""
        setup_logging()

        assert logging.getLogger("card_watch").level == logging.INFO

    def test_setup_logging_debug(self) -> None:
        """Test debug level logging setup."""
        setup_logging(level="DEBUG")

        assert logging.getLogger().level == logging.DEBUG

    def test_setup_logging_invalid_level(self) -> None:
        """Test logging with invalid level defaults to INFO."""
        setup_logging(level="INVALID")

        assert logging.getLogger().level == logging.INFO

    def test_setup_logging_json_format(self) -> None:
        """Test JSON format logging."""
        setup_logging(format_type="json")

        assert any(isinstance(h.formatter, JsonFormatter) for h in logging.getLogger().handlers)

    def test_setup_logging_replaces_handlers(self) -> None:
        """Test that setup_logging replaces existing handlers."""
        logger = logging.getLogger()
        logger.addHandler(logging.StreamHandler())
        logger.addHandler(logging.StreamHandler())

        setup_logging()

        assert len(logger.handlers) == 1

    def test_noisy_libraries_quieted(self) -> None:
        """Test HTTP and database libraries log at WARNING."""
        setup_logging(level="DEBUG")

        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("psycopg").level == logging.WARNING


class TestJsonFormatter:
    """Tests for JsonFormatter."""

    def test_format_basic(self) -> None:
        """Test basic JSON formatting."""
        record = logging.LogRecord("card_watch.sync", logging.INFO, "", 0, "Synced %d", (3,), None)

        data = json.loads(JsonFormatter().format(record))

        assert data["level"] == "INFO"
        assert data["logger"] == "card_watch.sync"
        assert data["message"] == "Synced 3"
        assert "timestamp" in data

    def test_format_with_exception(self) -> None:
        """Test exception text is included."""
        try:
            raise ValueError("bad")
        except ValueError:
            record = logging.LogRecord("x", logging.ERROR, "", 0, "failed", (), sys.exc_info())

        data = json.loads(JsonFormatter().format(record))

        assert "ValueError: bad" in data["exception"]

    def test_format_context_attributes(self) -> None:
        """Test merchant and customer attributes become top-level keys."""
        record = logging.LogRecord("x", logging.WARNING, "", 0, "skipped", (), None)
        record.merchant_currency = "CAD"
        record.customer_id = None

        data = json.loads(JsonFormatter().format(record))

        assert data["merchant_currency"] == "CAD"
        assert "customer_id" not in data


class TestGetLogger:
    """Tests for get_logger."""

    def test_get_logger(self) -> None:
        logger = get_logger("card_watch.test")

        assert isinstance(logger, logging.Logger)
        assert logger.name == "card_watch.test"

    def test_bound_context(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test bound context is stamped on every record."""
        logger = get_logger("card_watch.test", merchant_currency="USD", merchant_id="M1")

        with caplog.at_level(logging.INFO, logger="card_watch.test"):
            logger.info("fetched")

        assert caplog.records[0].merchant_currency == "USD"
        assert caplog.records[0].merchant_id == "M1"
