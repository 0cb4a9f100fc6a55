"""Per-provider quote strategies.

Each quote-source tag maps to one strategy implementing the same three
operations: the current spot quote, the price at an arbitrary instant and a
daily historical series. Strategies parse the raw provider payloads
defensively: a missing field means "no data", never zero.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta
from typing import Any, Protocol, Sequence
from zoneinfo import ZoneInfo

import pandas as pd

from folio_engine.core.clock import ceil_seconds, floor_seconds, from_millis
from folio_engine.core.telemetry import PricingInstruments, get_instruments
from folio_engine.domain.models import AssetDefinition, PricePoint, Quote
from folio_engine.errors import ConfigurationError, NoDataError, ProviderDataError, QuoteError
from folio_engine.providers.coingecko import CoinGeckoClient
from folio_engine.providers.yahoo import YahooFinanceClient

from .fx import CurrencyNormalizer

logger = logging.getLogger(__name__)

COINGECKO_WINDOW = timedelta(hours=1)
YAHOO_WINDOW = timedelta(hours=24)


class QuoteSource(Protocol):
    """Capability interface every quote-source variant implements."""

    name: str

    async def current_price(self, asset: AssetDefinition) -> Quote:
        ...

    async def price_at(self, asset: AssetDefinition, at: datetime) -> float:
        ...

    async def historical_series(
        self,
        asset: AssetDefinition,
        start: datetime,
        end: datetime,
    ) -> list[PricePoint]:
        ...


def _finite(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return float(value)


def nearest_index(timestamps: Sequence[float], target: float) -> int:
    """Index of the sample closest to ``target``; the earliest index wins ties."""

    best = 0
    best_delta = math.inf
    for idx, ts in enumerate(timestamps):
        delta = abs(ts - target)
        if delta < best_delta:
            best_delta = delta
            best = idx
    return best


def aggregate_by_day(points: Sequence[PricePoint], tz: ZoneInfo) -> list[PricePoint]:
    """Keep the chronologically last point of each local calendar day, ascending."""

    if not points:
        return []
    frame = pd.DataFrame(
        {"timestamp": [p.timestamp for p in points], "price": [p.price for p in points]}
    )
    frame["day"] = pd.to_datetime(frame["timestamp"], unit="ms", utc=True).dt.tz_convert(tz.key).dt.normalize()
    frame = frame.sort_values("timestamp", kind="stable")
    last = frame.groupby("day", sort=True).tail(1)
    return [PricePoint(timestamp=int(row.timestamp), price=float(row.price)) for row in last.itertuples(index=False)]


# CoinGecko


def _parse_market_chart(payload: Any) -> list[PricePoint]:
    raw = payload.get("prices") if isinstance(payload, dict) else None
    points: list[PricePoint] = []
    for row in raw or []:
        if not isinstance(row, (list, tuple)) or len(row) < 2:
            continue
        ts = _finite(row[0])
        price = _finite(row[1])
        if ts is None or price is None:
            continue
        points.append(PricePoint(timestamp=int(ts), price=price))
    if not points:
        raise NoDataError("No price data available")
    return points


class CoinGeckoSource:
    """Crypto prices quoted directly in EUR."""

    name = "coingecko"

    def __init__(self, client: CoinGeckoClient, *, tz: ZoneInfo, window: timedelta = COINGECKO_WINDOW) -> None:
        self.client = client
        self.tz = tz
        self.window = window

    @staticmethod
    def _coin_id(asset: AssetDefinition) -> str:
        if not asset.coingecko_id:
            raise ConfigurationError("Missing coingeckoId for CoinGecko asset")
        return asset.coingecko_id

    async def current_price(self, asset: AssetDefinition) -> Quote:
        coin_id = self._coin_id(asset)
        payload = await self.client.simple_price(coin_id, vs_currency="eur")
        entry = payload.get(coin_id) if isinstance(payload, dict) else None
        price = _finite(entry.get("eur")) if isinstance(entry, dict) else None
        if price is None:
            raise ProviderDataError("No price data available")
        return Quote(price=price, currency="EUR")

    async def price_at(self, asset: AssetDefinition, at: datetime) -> float:
        coin_id = self._coin_id(asset)
        payload = await self.client.market_chart_range(
            coin_id,
            floor_seconds(at - self.window),
            ceil_seconds(at + self.window),
        )
        points = _parse_market_chart(payload)
        target = at.timestamp() * 1000
        return points[nearest_index([p.timestamp for p in points], target)].price

    async def historical_series(self, asset: AssetDefinition, start: datetime, end: datetime) -> list[PricePoint]:
        coin_id = self._coin_id(asset)
        payload = await self.client.market_chart_range(coin_id, floor_seconds(start), ceil_seconds(end))
        return aggregate_by_day(_parse_market_chart(payload), self.tz)


# Yahoo Finance


def _parse_v7_quote(payload: Any) -> Quote | None:
    response = payload.get("quoteResponse") if isinstance(payload, dict) else None
    results = response.get("result") if isinstance(response, dict) else None
    if not results or not isinstance(results[0], dict):
        return None
    quote = results[0]
    currency = quote.get("currency")
    for field in ("regularMarketPrice", "preMarketPrice", "postMarketPrice"):
        price = _finite(quote.get(field))
        if price is not None:
            break
    else:
        return None
    if not currency:
        return None
    return Quote(price=price, currency=str(currency))


def _chart_result(payload: Any) -> dict[str, Any]:
    chart = payload.get("chart") if isinstance(payload, dict) else None
    results = chart.get("result") if isinstance(chart, dict) else None
    if not results or not isinstance(results[0], dict):
        raise ProviderDataError("No chart data available")
    return results[0]


def _chart_closes(result: dict[str, Any]) -> list[Any]:
    indicators = result.get("indicators")
    quotes = indicators.get("quote") if isinstance(indicators, dict) else None
    if not quotes or not isinstance(quotes[0], dict):
        return []
    closes = quotes[0].get("close")
    return list(closes) if isinstance(closes, list) else []


def _chart_currency(result: dict[str, Any]) -> str | None:
    meta = result.get("meta")
    currency = meta.get("currency") if isinstance(meta, dict) else None
    return str(currency) if currency else None


def _chart_timestamps(result: dict[str, Any]) -> list[Any]:
    timestamps = result.get("timestamp")
    return list(timestamps) if isinstance(timestamps, list) else []


class YahooSource:
    """Exchange-listed securities, quoted in their listing currency."""

    name = "yahoo"

    def __init__(
        self,
        client: YahooFinanceClient,
        normalizer: CurrencyNormalizer,
        *,
        window: timedelta = YAHOO_WINDOW,
        instruments: PricingInstruments | None = None,
    ) -> None:
        self.client = client
        self.normalizer = normalizer
        self.window = window
        self.instruments = instruments or get_instruments()

    @staticmethod
    def _symbol(asset: AssetDefinition) -> str:
        if not asset.yahoo_symbol:
            raise ConfigurationError("Missing yahooSymbol for Yahoo asset")
        return asset.yahoo_symbol

    async def current_price(self, asset: AssetDefinition) -> Quote:
        symbol = self._symbol(asset)
        with self.instruments.tracer.start_as_current_span("yahoo.current_price") as span:
            span.set_attribute("folio.symbol", symbol)
            for host in self.client.hosts:
                try:
                    payload = await self.client.quote_v7(symbol, host)
                except QuoteError as exc:
                    logger.debug("Yahoo v7 quote for %s failed on %s: %s", symbol, host, exc)
                    self.instruments.fallback(self.name, f"v7:{host}", type(exc).__name__)
                    continue
                quote = _parse_v7_quote(payload)
                if quote is not None:
                    span.set_attribute("folio.quote.step", f"v7:{host}")
                    return quote
                logger.debug("Yahoo v7 quote for %s on %s had no usable price", symbol, host)
                self.instruments.fallback(self.name, f"v7:{host}", "unusable_quote")

            logger.info("Falling back to Yahoo v8 chart for %s", symbol)
            span.set_attribute("folio.quote.step", "v8")
            return self._last_intraday_close(await self.client.intraday_chart(symbol))

    @staticmethod
    def _last_intraday_close(payload: Any) -> Quote:
        try:
            result = _chart_result(payload)
        except ProviderDataError as exc:
            raise NoDataError("No price data available") from exc
        currency = _chart_currency(result)
        price = None
        for value in reversed(_chart_closes(result)):
            price = _finite(value)
            if price is not None:
                break
        if price is None or not currency:
            raise NoDataError("No price data available")
        return Quote(price=price, currency=currency)

    async def price_at(self, asset: AssetDefinition, at: datetime) -> float:
        symbol = self._symbol(asset)
        payload = await self.client.daily_chart(
            symbol,
            floor_seconds(at - self.window),
            ceil_seconds(at + self.window),
        )
        result = _chart_result(payload)
        currency = _chart_currency(result) or asset.price_currency
        timestamps = _chart_timestamps(result)
        closes = _chart_closes(result)
        if not timestamps or not closes:
            raise NoDataError("No price data available")

        seconds = [_finite(ts) for ts in timestamps]
        idx = nearest_index([math.inf if ts is None else ts for ts in seconds], at.timestamp())
        close = _finite(closes[idx]) if idx < len(closes) else None
        if close is None:
            raise NoDataError("No close price at the nearest sample")
        # converted at the requested instant, not the matched sample
        return await self.normalizer.to_accounting_currency(close, currency, at)

    async def historical_series(self, asset: AssetDefinition, start: datetime, end: datetime) -> list[PricePoint]:
        symbol = self._symbol(asset)
        payload = await self.client.daily_chart(symbol, floor_seconds(start), ceil_seconds(end))
        result = _chart_result(payload)
        currency = _chart_currency(result) or asset.price_currency
        timestamps = _chart_timestamps(result)
        closes = _chart_closes(result)
        if not timestamps or not closes:
            raise NoDataError("No price data available")

        points: list[PricePoint] = []
        for idx, raw_ts in enumerate(timestamps):
            ts = _finite(raw_ts)
            close = _finite(closes[idx]) if idx < len(closes) else None
            if ts is None or close is None:
                continue
            ms = int(ts * 1000)
            price = await self.normalizer.to_accounting_currency(close, currency, from_millis(ms))
            points.append(PricePoint(timestamp=ms, price=price))
        if not points:
            raise NoDataError("No price data available")
        return points


__all__ = [
    "QuoteSource",
    "CoinGeckoSource",
    "YahooSource",
    "aggregate_by_day",
    "nearest_index",
]
