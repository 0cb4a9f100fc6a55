"""Currency normalization into the accounting currency."""

from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta
from typing import Any

from folio_engine.core.cache import ExpiringCache
from folio_engine.core.clock import Clock, iso_day, utc_now
from folio_engine.core.telemetry import PricingInstruments, get_instruments
from folio_engine.errors import ProviderDataError
from folio_engine.providers.frankfurter import FrankfurterClient

logger = logging.getLogger(__name__)

# London listings are quoted in pence under either tag
PENCE_CURRENCIES = frozenset({"GBp", "GBX"})
CONVERTIBLE_CURRENCIES = frozenset({"GBP", "USD"})

FX_CACHE_TTL = timedelta(hours=24)
FX_LATEST_CACHE_TTL = timedelta(hours=1)


def _extract_rate(payload: Any, to_ccy: str) -> float:
    rates = payload.get("rates") if isinstance(payload, dict) else None
    rate = rates.get(to_ccy) if isinstance(rates, dict) else None
    if not isinstance(rate, (int, float)) or isinstance(rate, bool) or not math.isfinite(rate) or rate <= 0:
        raise ProviderDataError("No FX rate available")
    return float(rate)


class CurrencyNormalizer:
    """Convert native-currency prices to the accounting currency on a given date.

    Rates are looked up per calendar day (UTC date of the instant) and cached
    under ``(from, to, date)`` for a fixed wall-clock TTL, even for past dates
    whose rate can no longer change.
    """

    def __init__(
        self,
        client: FrankfurterClient,
        *,
        accounting_currency: str = "EUR",
        cache: ExpiringCache[tuple[str, str, str], float] | None = None,
        latest_cache: ExpiringCache[tuple[str, str], float] | None = None,
        clock: Clock = utc_now,
        instruments: PricingInstruments | None = None,
    ) -> None:
        self.client = client
        self.instruments = instruments or get_instruments()
        self.accounting_currency = accounting_currency
        self.cache = cache if cache is not None else ExpiringCache(FX_CACHE_TTL, clock)
        self.latest_cache = latest_cache if latest_cache is not None else ExpiringCache(FX_LATEST_CACHE_TTL, clock)
        self._clock = clock

    async def fx_rate(self, from_ccy: str, to_ccy: str, at: datetime) -> float:
        day = iso_day(at)
        key = (from_ccy, to_ccy, day)
        cached = self.cache.get(key)
        if cached is not None:
            self.instruments.fx_lookup(from_ccy, to_ccy, "hit")
            return cached

        self.instruments.fx_lookup(from_ccy, to_ccy, "miss")
        with self.instruments.tracer.start_as_current_span("fx.rate") as span:
            span.set_attribute("folio.fx.pair", f"{from_ccy}-{to_ccy}")
            span.set_attribute("folio.fx.date", day)
            payload = await self.client.rates_on(day, from_ccy, to_ccy)
        rate = _extract_rate(payload, to_ccy)
        self.cache.set(key, rate)
        logger.debug("Fetched %s->%s rate for %s: %s", from_ccy, to_ccy, day, rate)
        return rate

    async def latest_rate(self, from_ccy: str, to_ccy: str) -> float:
        if from_ccy == to_ccy:
            return 1.0
        key = (from_ccy, to_ccy)
        cached = self.latest_cache.get(key)
        if cached is not None:
            return cached
        payload = await self.client.latest(from_ccy, to_ccy)
        rate = _extract_rate(payload, to_ccy)
        self.latest_cache.set(key, rate)
        return rate

    async def to_accounting_currency(self, amount: float, currency: str, at: datetime | None = None) -> float:
        """Return ``amount`` expressed in the accounting currency as of ``at``."""

        target = self.accounting_currency
        if currency == target:
            return amount
        moment = at or self._clock()
        if currency in PENCE_CURRENCIES:
            rate = await self.fx_rate("GBP", target, moment)
            return (amount / 100) * rate
        if currency in CONVERTIBLE_CURRENCIES:
            rate = await self.fx_rate(currency, target, moment)
            return amount * rate

        logger.warning("Unknown currency %s, treating as %s", currency, target)
        return amount


__all__ = ["CurrencyNormalizer", "PENCE_CURRENCIES", "FX_CACHE_TTL"]
