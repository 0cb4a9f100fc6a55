"""Yahoo Finance quote and chart client."""

from __future__ import annotations

from typing import Any, Sequence
from urllib.parse import quote

import httpx

from .base import JSONProviderClient

DEFAULT_HOSTS = ("query1.finance.yahoo.com", "query2.finance.yahoo.com")
QUOTE_FIELDS = ("currency", "regularMarketPrice", "preMarketPrice", "postMarketPrice")
# Yahoo rejects requests without a browser-like user agent
_HEADERS = {"User-Agent": "Mozilla/5.0 (compatible; folio-engine)"}


class YahooFinanceClient(JSONProviderClient):
    """Access to the v7 quote and v8 chart endpoints."""

    provider_name = "Yahoo Finance"

    def __init__(
        self,
        hosts: Sequence[str] = DEFAULT_HOSTS,
        *,
        client: httpx.AsyncClient | None = None,
        timeout_seconds: float = 15.0,
    ) -> None:
        super().__init__(client=client, timeout_seconds=timeout_seconds, headers=dict(_HEADERS))
        if not hosts:
            raise ValueError("At least one Yahoo Finance host is required")
        self.hosts = tuple(hosts)

    async def quote_v7(self, symbol: str, host: str) -> Any:
        return await self._get_json(
            f"https://{host}/v7/finance/quote",
            params={
                "symbols": symbol,
                "fields": ",".join(QUOTE_FIELDS),
                "formatted": "false",
                "region": "US",
                "lang": "en-US",
            },
        )

    async def intraday_chart(self, symbol: str) -> Any:
        """Most recent trading day at one-minute resolution, pre/post market included."""

        return await self._chart(
            symbol,
            {"range": "1d", "interval": "1m", "includePrePost": "true", "lang": "en-US", "region": "US"},
        )

    async def daily_chart(self, symbol: str, period1: int, period2: int) -> Any:
        return await self._chart(
            symbol,
            {
                "period1": period1,
                "period2": period2,
                "interval": "1d",
                "events": "div,split",
                "includePrePost": "false",
            },
        )

    async def _chart(self, symbol: str, params: dict[str, Any]) -> Any:
        host = self.hosts[0]
        return await self._get_json(f"https://{host}/v8/finance/chart/{quote(symbol, safe='')}", params=params)


__all__ = ["YahooFinanceClient", "DEFAULT_HOSTS"]
