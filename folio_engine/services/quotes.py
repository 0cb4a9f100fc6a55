"""Quote resolution across providers, with per-asset failure isolation."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Iterable, Mapping, Sequence
from zoneinfo import ZoneInfo

from folio_engine.core.cache import ExpiringCache
from folio_engine.core.clock import Clock, from_millis, utc_now
from folio_engine.core.telemetry import PricingInstruments, get_instruments
from folio_engine.domain.assets import DEFAULT_REGISTRY, AssetRegistry, validate_asset_config
from folio_engine.domain.models import (
    AssetDefinition,
    HistoricalPrices,
    PricePoint,
    Quote,
    QuoteResult,
    Transaction,
)
from folio_engine.errors import ConfigurationError

from .fx import CurrencyNormalizer
from .quote_sources import QuoteSource
from .timeseries import merge_historical_prices, parse_historical_prices

logger = logging.getLogger(__name__)

QUOTE_CACHE_TTL = timedelta(seconds=60)
HISTORY_CACHE_TTL = timedelta(hours=1)


class QuoteResolver:
    """Dispatch quote requests to the strategy registered for an asset's source.

    Only the quote-source tag decides which strategy runs. Fallback chains
    live inside the strategies; nothing is retried here.
    """

    def __init__(
        self,
        sources: Mapping[str, QuoteSource],
        normalizer: CurrencyNormalizer,
        *,
        registry: AssetRegistry = DEFAULT_REGISTRY,
        tz: ZoneInfo | None = None,
        quote_cache: ExpiringCache[str, Quote] | None = None,
        history_cache: ExpiringCache[tuple[str, str, str], list[PricePoint]] | None = None,
        clock: Clock = utc_now,
        instruments: PricingInstruments | None = None,
    ) -> None:
        self.sources = dict(sources)
        self.instruments = instruments or get_instruments()
        self.normalizer = normalizer
        self.registry = registry
        self.tz = tz or ZoneInfo("UTC")
        self.quote_cache = quote_cache if quote_cache is not None else ExpiringCache(QUOTE_CACHE_TTL, clock)
        self.history_cache = history_cache if history_cache is not None else ExpiringCache(HISTORY_CACHE_TTL, clock)
        self._clock = clock

    def _source_for(self, asset: AssetDefinition) -> QuoteSource:
        if not validate_asset_config(asset):
            raise ConfigurationError(f"Invalid asset configuration for {asset.display_name}")
        source = self.sources.get(asset.quote_source)
        if source is None:
            raise ConfigurationError(f"Unsupported quote source: {asset.quote_source}")
        return source

    async def current_price(self, asset: AssetDefinition) -> Quote:
        """Spot price in the currency the provider quotes the asset in."""

        source = self._source_for(asset)
        cached = self.quote_cache.get(asset.id)
        if cached is not None:
            return cached
        quote = await source.current_price(asset)
        self.quote_cache.set(asset.id, quote)
        return quote

    async def current_price_eur(self, asset: AssetDefinition) -> float:
        quote = await self.current_price(asset)
        return await self.normalizer.to_accounting_currency(quote.price, quote.currency, self._clock())

    async def price_at(self, asset: AssetDefinition, at: datetime) -> float:
        """Accounting-currency price of ``asset`` nearest to the instant ``at``."""

        return await self._source_for(asset).price_at(asset, at)

    async def historical_series(self, asset: AssetDefinition, start: datetime, end: datetime) -> list[PricePoint]:
        """One accounting-currency price per day between ``start`` and ``end``, ascending."""

        source = self._source_for(asset)
        key = (asset.id, start.isoformat(), end.isoformat())
        cached = self.history_cache.get(key)
        if cached is not None:
            return list(cached)
        points = await source.historical_series(asset, start, end)
        self.history_cache.set(key, points)
        return list(points)

    async def all_current_prices(self, assets: Iterable[AssetDefinition] | None = None) -> list[QuoteResult]:
        """Resolve every asset concurrently; a failing asset yields a notice, never an exception."""

        selected = list(assets) if assets is not None else self.registry.all()

        async def _resolve(asset: AssetDefinition) -> QuoteResult:
            if not validate_asset_config(asset):
                self.instruments.failure(asset.id, "InvalidConfiguration")
                return QuoteResult(
                    asset_id=asset.id,
                    price_eur=None,
                    notice=f"Invalid asset configuration for {asset.display_name}",
                )
            try:
                price = await self.current_price_eur(asset)
            except Exception as exc:
                logger.warning("Failed to fetch price for %s: %s", asset.id, exc)
                self.instruments.failure(asset.id, type(exc).__name__)
                return QuoteResult(asset_id=asset.id, price_eur=None, notice=str(exc) or "Quote unavailable")
            return QuoteResult(asset_id=asset.id, price_eur=price)

        with self.instruments.tracer.start_as_current_span("quotes.resolve_all") as span:
            span.set_attribute("folio.asset_count", len(selected))
            results = await asyncio.gather(*(_resolve(asset) for asset in selected))
            span.set_attribute("folio.unpriced_count", sum(1 for r in results if r.price_eur is None))
        return list(results)

    async def historical_prices_for(
        self,
        transactions: Sequence[Transaction],
        *,
        end: datetime | None = None,
    ) -> HistoricalPrices:
        """Fetch the series of every logged asset from its first transaction to ``end``.

        ``end`` defaults to the start of the current hour. Assets whose series
        cannot be fetched contribute no data.
        """

        if not transactions:
            return {}
        start = from_millis(min(tx.timestamp for tx in transactions))
        # truncated to the hour so repeated calls share a history cache key
        end = end or self._clock().replace(minute=0, second=0, microsecond=0)
        asset_ids = list(dict.fromkeys(tx.asset_id for tx in transactions))

        async def _fetch(asset_id: str) -> HistoricalPrices:
            asset = self.registry.get(asset_id)
            if asset is None:
                logger.warning("Skipping historical prices for unknown asset %s", asset_id)
                return {}
            try:
                points = await self.historical_series(asset, start, end)
            except Exception as exc:
                logger.warning("Failed to fetch historical prices for %s: %s", asset_id, exc)
                return {}
            return parse_historical_prices(asset_id, points, self.tz)

        datasets = await asyncio.gather(*(_fetch(asset_id) for asset_id in asset_ids))
        return merge_historical_prices(*datasets)


def current_prices_eur(results: Iterable[QuoteResult]) -> dict[str, float]:
    """Map asset id to EUR price for every result that resolved."""

    return {result.asset_id: result.price_eur for result in results if result.price_eur is not None}


__all__ = ["QuoteResolver", "current_prices_eur"]
