"""Frankfurter (ECB reference rates) client."""

from __future__ import annotations

from typing import Any

import httpx

from .base import JSONProviderClient

BASE_URL = "https://api.frankfurter.app"


class FrankfurterClient(JSONProviderClient):
    provider_name = "FX"

    def __init__(
        self,
        base_url: str = BASE_URL,
        *,
        client: httpx.AsyncClient | None = None,
        timeout_seconds: float = 15.0,
    ) -> None:
        super().__init__(client=client, timeout_seconds=timeout_seconds)
        self.base_url = base_url.rstrip("/")

    async def rates_on(self, day: str, from_ccy: str, to_ccy: str) -> Any:
        """Daily rates for ``day`` (``YYYY-MM-DD``)."""

        return await self._get_json(f"{self.base_url}/{day}", params={"from": from_ccy, "to": to_ccy})

    async def latest(self, from_ccy: str, to_ccy: str) -> Any:
        return await self._get_json(f"{self.base_url}/latest", params={"from": from_ccy, "to": to_ccy})


__all__ = ["FrankfurterClient"]
