"""CoinGecko market-data client."""

from __future__ import annotations

from typing import Any

import httpx

from .base import JSONProviderClient

BASE_URL = "https://api.coingecko.com/api/v3"


class CoinGeckoClient(JSONProviderClient):
    """Thin wrapper over the two CoinGecko endpoints the engine needs."""

    provider_name = "CoinGecko"

    def __init__(
        self,
        base_url: str = BASE_URL,
        api_key: str | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        timeout_seconds: float = 15.0,
    ) -> None:
        headers = {"x-cg-demo-api-key": api_key} if api_key else None
        super().__init__(client=client, timeout_seconds=timeout_seconds, headers=headers)
        self.base_url = base_url.rstrip("/")

    async def simple_price(self, coin_id: str, vs_currency: str = "eur") -> Any:
        return await self._get_json(
            f"{self.base_url}/simple/price",
            params={"ids": coin_id, "vs_currencies": vs_currency},
        )

    async def market_chart_range(
        self,
        coin_id: str,
        from_seconds: int,
        to_seconds: int,
        vs_currency: str = "eur",
    ) -> Any:
        return await self._get_json(
            f"{self.base_url}/coins/{coin_id}/market_chart/range",
            params={"vs_currency": vs_currency, "from": from_seconds, "to": to_seconds},
        )


__all__ = ["CoinGeckoClient"]
