"""Currency normalization tests."""

from __future__ import annotations

from datetime import datetime, timezone

import httpx
import pytest

from conftest import FakeClock, counter_values, mock_client, recording_instruments

from folio_engine.core.cache import ExpiringCache
from folio_engine.errors import ProviderDataError, ProviderTransportError
from folio_engine.providers.frankfurter import FrankfurterClient
from folio_engine.services.fx import FX_CACHE_TTL, CurrencyNormalizer

AT = datetime(2024, 3, 15, 23, 30, tzinfo=timezone.utc)

pytestmark = pytest.mark.asyncio


def _rates(rate: float | None = 1.2):
    def routes(request: httpx.Request) -> httpx.Response:
        to_ccy = request.url.params["to"]
        rates = {} if rate is None else {to_ccy: rate}
        return httpx.Response(200, json={"amount": 1.0, "base": request.url.params["from"], "rates": rates})

    return routes


def _normalizer(routes, clock: FakeClock | None = None, instruments=None):
    http, handler = mock_client(routes)
    clock = clock or FakeClock()
    normalizer = CurrencyNormalizer(
        FrankfurterClient(client=http),
        cache=ExpiringCache(FX_CACHE_TTL, clock),
        clock=clock,
        instruments=instruments,
    )
    return normalizer, handler


async def test_pence_divided_before_gbp_rate():
    normalizer, handler = _normalizer(_rates(1.2))
    converted = await normalizer.to_accounting_currency(250.0, "GBp", AT)
    assert converted == pytest.approx(3.0)
    request = handler.requests[0]
    assert request.url.path == "/2024-03-15"
    assert request.url.params["from"] == "GBP"
    assert request.url.params["to"] == "EUR"


async def test_gbx_is_treated_as_pence():
    normalizer, _ = _normalizer(_rates(1.2))
    assert await normalizer.to_accounting_currency(100.0, "GBX", AT) == pytest.approx(1.2)


async def test_usd_applies_rate_directly():
    normalizer, handler = _normalizer(_rates(0.9))
    assert await normalizer.to_accounting_currency(10.0, "USD", AT) == pytest.approx(9.0)
    assert handler.requests[0].url.params["from"] == "USD"


async def test_accounting_currency_is_identity_without_network():
    normalizer, handler = _normalizer(_rates())
    assert await normalizer.to_accounting_currency(42.5, "EUR", AT) == 42.5
    assert handler.requests == []


async def test_unknown_currency_passes_through(caplog):
    normalizer, handler = _normalizer(_rates())
    with caplog.at_level("WARNING"):
        assert await normalizer.to_accounting_currency(7.0, "JPY", AT) == 7.0
    assert handler.requests == []
    assert "Unknown currency JPY" in caplog.text


async def test_rate_cached_per_day_until_expiry():
    clock = FakeClock()
    normalizer, handler = _normalizer(_rates(1.2), clock)

    await normalizer.fx_rate("GBP", "EUR", AT)
    await normalizer.fx_rate("GBP", "EUR", AT.replace(hour=1))
    assert len(handler.requests) == 1

    clock.advance(hours=24)
    await normalizer.fx_rate("GBP", "EUR", AT)
    assert len(handler.requests) == 2


async def test_different_days_fetched_separately():
    normalizer, handler = _normalizer(_rates(1.2))
    await normalizer.fx_rate("GBP", "EUR", AT)
    await normalizer.fx_rate("GBP", "EUR", datetime(2024, 3, 16, 0, 30, tzinfo=timezone.utc))
    assert [r.url.path for r in handler.requests] == ["/2024-03-15", "/2024-03-16"]


async def test_missing_rate_raises():
    normalizer, _ = _normalizer(_rates(None))
    with pytest.raises(ProviderDataError, match="No FX rate available"):
        await normalizer.fx_rate("GBP", "EUR", AT)


async def test_provider_status_error_propagates():
    normalizer, _ = _normalizer(lambda request: httpx.Response(503))
    with pytest.raises(ProviderTransportError) as excinfo:
        await normalizer.to_accounting_currency(1.0, "USD", AT)
    assert excinfo.value.status_code == 503
    assert "FX API failed: 503" in str(excinfo.value)


async def test_latest_rate_same_currency_and_cached():
    normalizer, handler = _normalizer(_rates(0.85))
    assert await normalizer.latest_rate("EUR", "EUR") == 1.0
    assert await normalizer.latest_rate("GBP", "EUR") == pytest.approx(0.85)
    assert await normalizer.latest_rate("GBP", "EUR") == pytest.approx(0.85)
    assert [r.url.path for r in handler.requests] == ["/latest"]


async def test_rate_lookups_counted_by_cache_outcome():
    instruments, reader = recording_instruments()
    normalizer, _ = _normalizer(_rates(1.2), instruments=instruments)

    await normalizer.fx_rate("GBP", "EUR", AT)
    await normalizer.fx_rate("GBP", "EUR", AT)
    await normalizer.fx_rate("GBP", "EUR", AT)

    assert counter_values(reader, "folio.fx.lookups") == {
        (("cache", "miss"), ("from", "GBP"), ("to", "EUR")): 1,
        (("cache", "hit"), ("from", "GBP"), ("to", "EUR")): 2,
    }
