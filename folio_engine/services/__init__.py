"""Pricing, valuation and time-series services."""

from .fx import CurrencyNormalizer
from .quote_sources import CoinGeckoSource, QuoteSource, YahooSource
from .quotes import QuoteResolver, current_prices_eur
from .timeseries import daily_series, find_nearest_price, merge_historical_prices, parse_historical_prices
from .valuation import accumulate_positions, compute_snapshot

__all__ = [
    "CurrencyNormalizer",
    "CoinGeckoSource",
    "QuoteSource",
    "YahooSource",
    "QuoteResolver",
    "current_prices_eur",
    "daily_series",
    "find_nearest_price",
    "merge_historical_prices",
    "parse_historical_prices",
    "accumulate_positions",
    "compute_snapshot",
]
