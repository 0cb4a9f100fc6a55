"""Quote resolver dispatch, caching and batch isolation tests."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import httpx
import pytest

from conftest import FakeClock, counter_values, mock_client, recording_instruments

from folio_engine.core.cache import ExpiringCache
from folio_engine.core.clock import day_start_millis, to_millis
from folio_engine.domain.assets import BTC_ASSET, INVESCO_FTSE_ALL_WORLD_ASSET, AssetRegistry
from folio_engine.domain.models import AssetDefinition, PricePoint, Quote, Transaction
from folio_engine.errors import ConfigurationError, ProviderTransportError
from folio_engine.providers.frankfurter import FrankfurterClient
from folio_engine.services.fx import CurrencyNormalizer
from folio_engine.services.quotes import QuoteResolver, current_prices_eur

UTC = ZoneInfo("UTC")

pytestmark = pytest.mark.asyncio


class StubSource:
    def __init__(self, name: str, quote: Quote | None = None, error: Exception | None = None) -> None:
        self.name = name
        self.quote = quote
        self.error = error
        self.history: list[PricePoint] = []
        self.calls: list[tuple[str, str]] = []

    async def current_price(self, asset: AssetDefinition) -> Quote:
        self.calls.append(("current", asset.id))
        if self.error is not None:
            raise self.error
        assert self.quote is not None
        return self.quote

    async def price_at(self, asset: AssetDefinition, at: datetime) -> float:
        self.calls.append(("at", asset.id))
        return 99.0

    async def historical_series(self, asset: AssetDefinition, start: datetime, end: datetime) -> list[PricePoint]:
        self.calls.append(("history", asset.id))
        if self.error is not None:
            raise self.error
        return list(self.history)


def _normalizer(rate: float = 1.2):
    http, handler = mock_client(lambda request: httpx.Response(200, json={"rates": {"EUR": rate}}))
    return CurrencyNormalizer(FrankfurterClient(client=http)), handler


def _resolver(sources, registry=None, clock=None, instruments=None):
    normalizer, _ = _normalizer()
    clock = clock or FakeClock()
    return QuoteResolver(
        sources,
        normalizer,
        registry=registry or AssetRegistry([BTC_ASSET, INVESCO_FTSE_ALL_WORLD_ASSET]),
        tz=UTC,
        quote_cache=ExpiringCache(timedelta(seconds=60), clock),
        history_cache=ExpiringCache(timedelta(hours=1), clock),
        clock=clock,
        instruments=instruments,
    )


async def test_batch_isolates_failing_asset():
    coingecko = StubSource("coingecko", error=ProviderTransportError("CoinGecko API failed: 429", status_code=429))
    yahoo = StubSource("yahoo", quote=Quote(price=7500.0, currency="GBp"))
    instruments, reader = recording_instruments()
    resolver = _resolver({"coingecko": coingecko, "yahoo": yahoo}, instruments=instruments)

    results = await resolver.all_current_prices()

    by_id = {r.asset_id: r for r in results}
    assert by_id["btc"].price_eur is None
    assert by_id["btc"].notice == "CoinGecko API failed: 429"
    assert by_id["etf:invesco-ftse-all-world"].price_eur == pytest.approx(90.0)
    assert by_id["etf:invesco-ftse-all-world"].notice is None
    assert current_prices_eur(results) == {"etf:invesco-ftse-all-world": pytest.approx(90.0)}
    assert counter_values(reader, "folio.quote.failures") == {
        (("asset_id", "btc"), ("reason", "ProviderTransportError")): 1,
    }


async def test_invalid_config_yields_notice_without_calls():
    broken = replace(BTC_ASSET, coingecko_id=None)
    instruments, reader = recording_instruments()
    coingecko = StubSource("coingecko", quote=Quote(price=1.0, currency="EUR"))
    resolver = _resolver({"coingecko": coingecko}, registry=AssetRegistry([broken]), instruments=instruments)

    results = await resolver.all_current_prices()

    assert results[0].price_eur is None
    assert results[0].notice == "Invalid asset configuration for Bitcoin"
    assert coingecko.calls == []
    assert counter_values(reader, "folio.quote.failures") == {
        (("asset_id", "btc"), ("reason", "InvalidConfiguration")): 1,
    }


async def test_unsupported_source_raises_configuration_error():
    resolver = _resolver({"coingecko": StubSource("coingecko")})
    with pytest.raises(ConfigurationError, match="Unsupported quote source: yahoo"):
        await resolver.current_price(INVESCO_FTSE_ALL_WORLD_ASSET)
    with pytest.raises(ConfigurationError):
        await resolver.price_at(INVESCO_FTSE_ALL_WORLD_ASSET, datetime.now(timezone.utc))


async def test_current_quote_cached_until_ttl():
    clock = FakeClock()
    coingecko = StubSource("coingecko", quote=Quote(price=60000.0, currency="EUR"))
    resolver = _resolver({"coingecko": coingecko}, registry=AssetRegistry([BTC_ASSET]), clock=clock)

    assert await resolver.current_price_eur(BTC_ASSET) == 60000.0
    assert await resolver.current_price_eur(BTC_ASSET) == 60000.0
    assert coingecko.calls == [("current", "btc")]

    clock.advance(seconds=61)
    await resolver.current_price(BTC_ASSET)
    assert len(coingecko.calls) == 2


async def test_price_at_dispatches_by_source():
    coingecko = StubSource("coingecko")
    resolver = _resolver({"coingecko": coingecko})
    assert await resolver.price_at(BTC_ASSET, datetime(2024, 1, 1, tzinfo=timezone.utc)) == 99.0
    assert coingecko.calls == [("at", "btc")]


async def test_historical_prices_for_keys_by_midnight_and_skips_failures():
    clock = FakeClock(datetime(2024, 3, 5, 12, 0, tzinfo=timezone.utc))
    coingecko = StubSource("coingecko")
    coingecko.history = [
        PricePoint(timestamp=to_millis(datetime(2024, 3, 1, 23, 59, tzinfo=timezone.utc)), price=100.0),
        PricePoint(timestamp=to_millis(datetime(2024, 3, 2, 23, 59, tzinfo=timezone.utc)), price=110.0),
    ]
    yahoo = StubSource("yahoo", error=ProviderTransportError("Yahoo Finance API failed: 500"))
    resolver = _resolver({"coingecko": coingecko, "yahoo": yahoo}, clock=clock)
    transactions = [
        Transaction("t1", "btc", to_millis(datetime(2024, 3, 1, 9, tzinfo=timezone.utc)), 0.01, 50000.0),
        Transaction("t2", "etf:invesco-ftse-all-world", to_millis(datetime(2024, 3, 2, 9, tzinfo=timezone.utc)), 2, 90.0),
    ]

    historical = await resolver.historical_prices_for(transactions)

    assert historical == {
        "btc": {
            day_start_millis(datetime(2024, 3, 1).date(), UTC): 100.0,
            day_start_millis(datetime(2024, 3, 2).date(), UTC): 110.0,
        }
    }


async def test_historical_series_cached_per_range():
    coingecko = StubSource("coingecko")
    coingecko.history = [PricePoint(timestamp=0, price=1.0)]
    resolver = _resolver({"coingecko": coingecko})
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    end = datetime(2024, 2, 1, tzinfo=timezone.utc)

    await resolver.historical_series(BTC_ASSET, start, end)
    await resolver.historical_series(BTC_ASSET, start, end)

    assert coingecko.calls == [("history", "btc")]


async def test_historical_prices_for_empty_log():
    resolver = _resolver({})
    assert await resolver.historical_prices_for([]) == {}


async def test_repeated_history_calls_share_cached_series():
    clock = FakeClock(datetime(2024, 3, 5, 12, 0, 0, tzinfo=timezone.utc))
    coingecko = StubSource("coingecko")
    coingecko.history = [PricePoint(timestamp=to_millis(datetime(2024, 3, 2, tzinfo=timezone.utc)), price=100.0)]
    resolver = _resolver({"coingecko": coingecko}, registry=AssetRegistry([BTC_ASSET]), clock=clock)
    transactions = [Transaction("t1", "btc", to_millis(datetime(2024, 3, 1, 9, tzinfo=timezone.utc)), 0.01, 50000.0)]

    first = await resolver.historical_prices_for(transactions)
    clock.advance(seconds=5)
    second = await resolver.historical_prices_for(transactions)
    clock.advance(minutes=20)
    await resolver.historical_prices_for(transactions)

    assert first == second
    assert coingecko.calls == [("history", "btc")]
