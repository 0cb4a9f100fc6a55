"""Composition root: providers, caches and services wired from settings."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

import httpx

from folio_engine.config import AppSettings
from folio_engine.core.cache import ExpiringCache
from folio_engine.core.clock import Clock, resolve_tz, utc_now
from folio_engine.core.telemetry import PricingInstruments, get_instruments
from folio_engine.domain.assets import DEFAULT_REGISTRY, AssetRegistry
from folio_engine.providers import CoinGeckoClient, FrankfurterClient, YahooFinanceClient
from folio_engine.services.fx import CurrencyNormalizer
from folio_engine.services.quote_sources import CoinGeckoSource, YahooSource
from folio_engine.services.quotes import QuoteResolver


@dataclass
class PricingEngine:
    """Owns the shared HTTP client and every process-wide cache."""

    http: httpx.AsyncClient
    normalizer: CurrencyNormalizer
    resolver: QuoteResolver

    async def aclose(self) -> None:
        await self.http.aclose()


def build_engine(
    settings: AppSettings,
    *,
    http: httpx.AsyncClient | None = None,
    registry: AssetRegistry = DEFAULT_REGISTRY,
    clock: Clock = utc_now,
    instruments: PricingInstruments | None = None,
) -> PricingEngine:
    http = http or httpx.AsyncClient(timeout=settings.http_timeout_seconds)
    instruments = instruments or get_instruments()
    tz = resolve_tz(settings.timezone)

    normalizer = CurrencyNormalizer(
        FrankfurterClient(settings.frankfurter_base_url, client=http),
        accounting_currency=settings.accounting_currency,
        cache=ExpiringCache(timedelta(hours=settings.fx_cache_ttl_hours), clock),
        latest_cache=ExpiringCache(timedelta(seconds=settings.fx_latest_cache_ttl_seconds), clock),
        clock=clock,
        instruments=instruments,
    )
    sources = {
        "coingecko": CoinGeckoSource(
            CoinGeckoClient(settings.coingecko_base_url, settings.coingecko_api_key, client=http),
            tz=tz,
        ),
        "yahoo": YahooSource(
            YahooFinanceClient(settings.yahoo_hosts, client=http),
            normalizer,
            instruments=instruments,
        ),
    }
    resolver = QuoteResolver(
        sources,
        normalizer,
        registry=registry,
        tz=tz,
        quote_cache=ExpiringCache(timedelta(seconds=settings.quote_cache_ttl_seconds), clock),
        history_cache=ExpiringCache(timedelta(seconds=settings.history_cache_ttl_seconds), clock),
        clock=clock,
        instruments=instruments,
    )
    return PricingEngine(http=http, normalizer=normalizer, resolver=resolver)


__all__ = ["PricingEngine", "build_engine"]
