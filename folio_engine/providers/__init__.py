"""HTTP clients for the external quote and FX providers."""

from .coingecko import CoinGeckoClient
from .frankfurter import FrankfurterClient
from .yahoo import YahooFinanceClient

__all__ = ["CoinGeckoClient", "FrankfurterClient", "YahooFinanceClient"]
