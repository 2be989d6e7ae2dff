"""Configuration management for card-watch."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from card_watch.exceptions import ConfigurationError
from card_watch.models.enums import MerchantCurrency

SANDBOX_BASE_URL = "https://apisandbox.dev.clover.com"
PRODUCTION_BASE_URL = "https://api.clover.com"

# One-time historical cleanup boundary for the "new customer without cards" rule.
DEFAULT_NEW_CUSTOMER_CUTOFF = datetime(2025, 7, 21, tzinfo=timezone.utc)


@dataclass
class CloverMerchantConfig:
    """Credentials and environment for one Clover merchant account."""

    currency: MerchantCurrency
    merchant_id: str
    api_token: str
    environment: str = "production"
    enabled: bool = True

    @property
    def base_url(self) -> str:
        """Get the API base URL for the configured environment."""
        return SANDBOX_BASE_URL if self.environment == "sandbox" else PRODUCTION_BASE_URL


@dataclass
class PostgresConfig:
    """PostgreSQL connection configuration."""

    host: str = "localhost"
    port: int = 5432
    database: str = "cardwatch"
    user: str = "postgres"
    password: str = "postgres"

    @property
    def connection_string(self) -> str:
        """Get connection string."""
        return f"postgresql://{self.user}:{self.password}@{self.host}:{self.port}/{self.database}"


@dataclass
class SyncConfig:
    """Pull-sync settings for the payment platform."""

    page_size: int = 100
    rate_limit_delay: float = 2.0
    request_timeout: float = 30.0


@dataclass
class PolicyConfig:
    """Tunables for the action-required worklist policy."""

    new_customer_cutoff: datetime = DEFAULT_NEW_CUSTOMER_CUTOFF


@dataclass
class OutputConfig:
    """Output configuration."""

    report_output_dir: Path = field(default_factory=lambda: Path("reports"))
    pretty_json: bool = False


@dataclass
class CardWatchConfig:
    """Main configuration for card-watch."""

    merchants: list[CloverMerchantConfig] = field(default_factory=list)
    postgres: PostgresConfig = field(default_factory=PostgresConfig)
    sync: SyncConfig = field(default_factory=SyncConfig)
    policy: PolicyConfig = field(default_factory=PolicyConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    seed: int | None = None
    log_level: str = "INFO"
    log_format: str = "standard"

    def enabled_merchants(self) -> list[CloverMerchantConfig]:
        """Return merchants that are switched on.

        Raises
        ------
        ConfigurationError
            If no merchant account is configured and enabled.
        """
        enabled = [m for m in self.merchants if m.enabled]
        if not enabled:
            raise ConfigurationError(
                "At least one Clover merchant configuration is required (USD or CAD)"
            )
        return enabled

    @classmethod
    def from_env(cls) -> "CardWatchConfig":
        """Create config from environment variables."""
        import os

        environment = os.getenv("CLOVER_ENV", "production")
        merchants = []
        for currency in MerchantCurrency:
            merchant_id = os.getenv(f"CLOVER_{currency.value}_MERCHANT_ID")
            api_token = os.getenv(f"CLOVER_{currency.value}_API_TOKEN")
            if merchant_id and api_token:
                merchants.append(
                    CloverMerchantConfig(
                        currency=currency,
                        merchant_id=merchant_id,
                        api_token=api_token,
                        environment=environment,
                        enabled=os.getenv(f"CLOVER_{currency.value}_ENABLED", "true").lower() == "true",
                    )
                )

        postgres = PostgresConfig(
            host=os.getenv("POSTGRES_HOST", "localhost"),
            port=int(os.getenv("POSTGRES_PORT", "5432")),
            database=os.getenv("POSTGRES_DB", "cardwatch"),
            user=os.getenv("POSTGRES_USER", "postgres"),
            password=os.getenv("POSTGRES_PASSWORD", "postgres"),
        )

        sync = SyncConfig(
            page_size=int(os.getenv("SYNC_PAGE_SIZE", "100")),
            rate_limit_delay=float(os.getenv("SYNC_RATE_LIMIT_DELAY", "2.0")),
            request_timeout=float(os.getenv("SYNC_REQUEST_TIMEOUT", "30")),
        )

        cutoff_str = os.getenv("NEW_CUSTOMER_CUTOFF")
        policy = PolicyConfig(
            new_customer_cutoff=_parse_cutoff(cutoff_str) if cutoff_str else DEFAULT_NEW_CUSTOMER_CUTOFF,
        )

        output = OutputConfig(
            report_output_dir=Path(os.getenv("OUTPUT_DIR", "reports")),
            pretty_json=os.getenv("PRETTY_JSON", "false").lower() == "true",
        )

        return cls(
            merchants=merchants,
            postgres=postgres,
            sync=sync,
            policy=policy,
            output=output,
            seed=int(os.getenv("SEED")) if os.getenv("SEED") else None,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "standard"),
        )


def missing_merchant_variables() -> list[str]:
    """List the merchant environment variables that are not set."""
    import os

    required = []
    for currency in MerchantCurrency:
        required.append(f"CLOVER_{currency.value}_MERCHANT_ID")
        required.append(f"CLOVER_{currency.value}_API_TOKEN")
    return [name for name in required if not os.getenv(name)]


def _parse_cutoff(value: str) -> datetime:
    """Parse an ISO-8601 cutoff; naive values are taken as UTC."""
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as e:
        raise ConfigurationError(f"Invalid NEW_CUSTOMER_CUTOFF: {value!r}") from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
