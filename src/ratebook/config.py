"""
Ratebook Configuration Management

Process-level settings are read from the environment (or a .env file).
Runtime module settings (enabled currencies, table type, ...) live in the
config store and are seeded from the defaults declared here.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings

from ratebook.models import ModuleSettings, TableType


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # === Upstream Rate API ===
    nbp_base_url: str = Field(
        default="https://api.nbp.pl/api/exchangerates",
        description="Central bank exchange rate API base URL"
    )
    http_timeout_seconds: float = Field(default=10.0, gt=0)
    http_max_attempts: int = Field(default=3, ge=1)
    http_backoff_multiplier: float = Field(
        default=2.0,
        ge=0,
        description="Backoff seconds = multiplier * 2^(attempt-1)"
    )

    # === Database Configuration ===
    database_host: str = Field(default="localhost")
    database_port: int = Field(default=5432)
    database_name: str = Field(default="ratebook")
    database_user: str = Field(default="ratebook")
    database_password: str = Field(default="")
    database_ssl_mode: str = Field(default="prefer")

    @property
    def database_url(self) -> str:
        """Construct PostgreSQL connection URL."""
        return (
            f"postgresql://{self.database_user}:{self.database_password}"
            f"@{self.database_host}:{self.database_port}/{self.database_name}"
            f"?sslmode={self.database_ssl_mode}"
        )

    # === API Configuration ===
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8000)

    # === Scheduler Configuration ===
    scheduler_enabled: bool = Field(default=True)
    scheduler_cron_hour: int = Field(default=12, description="Daily job hour")
    scheduler_cron_minute: int = Field(default=30, description="Daily job minute")
    scheduler_timezone: str = Field(default="Europe/Warsaw")

    # === Logging ===
    log_level: str = Field(default="INFO")

    # === Cache ===
    cache_max_entries: int = Field(default=1024, ge=1)

    # === Module defaults (seed values for the config store) ===
    default_currencies: str = Field(default="EUR,USD,GBP,CHF")
    default_table_type: TableType = Field(default=TableType.A)
    default_cache_ttl: int = Field(default=86400, ge=1)
    default_items_per_page: int = Field(default=10, ge=1)
    default_auto_cleanup: bool = Field(default=True)
    default_retention_days: int = Field(default=30, ge=1)
    cron_token: str = Field(
        default="",
        description="Shared secret for the ingestion endpoint; generated when empty"
    )
    base_currency: str = Field(default="PLN", description="Shop pivot currency")
    quotation_unit: str = Field(
        default="PLN",
        description="Currency the rate table quotes all rates against"
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }

    def module_defaults(self) -> ModuleSettings:
        """Build the initial module settings from environment defaults."""
        return ModuleSettings(
            enabled_currencies=ModuleSettings.split_currencies(self.default_currencies),
            table_type=self.default_table_type,
            cache_ttl=self.default_cache_ttl,
            items_per_page=self.default_items_per_page,
            auto_cleanup=self.default_auto_cleanup,
            retention_days=self.default_retention_days,
            cron_token=self.cron_token,
            base_currency=self.base_currency,
            quotation_unit=self.quotation_unit,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
