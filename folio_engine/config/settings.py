"""Application configuration and environment helpers."""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_TIMEZONE = "Europe/Berlin"
DEFAULT_ACCOUNTING_CURRENCY = "EUR"


class AppSettings(BaseSettings):
    """Configuration options for the portfolio pricing service."""

    app_name: str = Field(default="Folio Engine")
    timezone: str = Field(default=DEFAULT_TIMEZONE, description="Timezone used for calendar-day boundaries.")
    accounting_currency: str = Field(default=DEFAULT_ACCOUNTING_CURRENCY)
    log_level: str = Field(default="INFO")

    coingecko_base_url: str = Field(default="https://api.coingecko.com/api/v3")
    coingecko_api_key: str | None = Field(default=None, description="Optional CoinGecko demo API key.")
    yahoo_hosts: list[str] = Field(
        default_factory=lambda: ["query1.finance.yahoo.com", "query2.finance.yahoo.com"],
        description="Yahoo Finance hosts tried in order for v7 quotes; the first one serves charts.",
    )
    frankfurter_base_url: str = Field(default="https://api.frankfurter.app")
    http_timeout_seconds: float = Field(default=15.0)

    fx_cache_ttl_hours: float = Field(default=24.0)
    fx_latest_cache_ttl_seconds: int = Field(default=3600)
    quote_cache_ttl_seconds: int = Field(default=60)
    history_cache_ttl_seconds: int = Field(default=3600)

    transactions_path: str = Field(default="data/transactions.json")

    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000"],
    )

    telemetry_enabled: bool = Field(default=False)
    telemetry_service_name: str = Field(default="folio-engine")
    telemetry_otlp_endpoint: str | None = Field(default=None)
    telemetry_otlp_insecure: bool = Field(default=True)
    telemetry_sample_ratio: float = Field(default=1.0, ge=0.0, le=1.0)

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", env_prefix="FOLIO_")

    def dict_for_logging(self) -> dict[str, Any]:
        """Return a sanitized dict for logging purposes."""

        hidden = {"coingecko_api_key"}
        return {k: ("***" if k in hidden and v else v) for k, v in self.model_dump().items()}


@lru_cache(maxsize=1)
def get_settings(**overrides: Any) -> AppSettings:
    """Return cached application settings with optional overrides."""

    if overrides:
        return AppSettings(**overrides)
    return AppSettings()


__all__ = [
    "AppSettings",
    "DEFAULT_TIMEZONE",
    "DEFAULT_ACCOUNTING_CURRENCY",
    "get_settings",
]
