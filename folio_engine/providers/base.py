"""Shared plumbing for the JSON-over-HTTP quote providers."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from folio_engine.errors import ProviderDataError, ProviderTransportError

logger = logging.getLogger(__name__)


class JSONProviderClient:
    """Async JSON client that maps transport and parse failures to engine errors.

    An ``httpx.AsyncClient`` may be injected (shared connection pool, or a
    ``MockTransport`` in tests); otherwise one is created on first use and
    closed by :meth:`aclose`.
    """

    provider_name = "provider"

    def __init__(
        self,
        *,
        client: httpx.AsyncClient | None = None,
        timeout_seconds: float = 15.0,
        headers: dict[str, str] | None = None,
    ) -> None:
        self._client = client
        self._owns_client = client is None
        self._timeout = timeout_seconds
        self._headers = headers or {}

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def _get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        try:
            response = await self._http().get(url, params=params, headers=self._headers)
        except httpx.HTTPError as exc:
            raise ProviderTransportError(f"Failed to reach {self.provider_name}: {exc}") from exc

        if response.status_code >= 400:
            logger.warning("%s error %s for %s", self.provider_name, response.status_code, url)
            raise ProviderTransportError(
                f"{self.provider_name} API failed: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as exc:
            raise ProviderDataError(f"{self.provider_name} returned invalid JSON payload") from exc

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None


__all__ = ["JSONProviderClient"]
