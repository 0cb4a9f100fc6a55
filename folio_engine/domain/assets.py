"""Registered assets and their quote-source configuration.

This table is the single source of truth for which assets the service can
price. Adding an asset means adding an ``AssetDefinition`` here; nothing
else in the engine branches on asset identity.
"""

from __future__ import annotations

from typing import Dict, Iterable, List

from .models import AssetDefinition

BTC_ASSET = AssetDefinition(
    id="btc",
    display_name="Bitcoin",
    kind="crypto",
    quote_source="coingecko",
    coingecko_id="bitcoin",
    price_currency="EUR",
    decimals=8,
)

INVESCO_FTSE_ALL_WORLD_ASSET = AssetDefinition(
    id="etf:invesco-ftse-all-world",
    display_name="Invesco FTSE All-World",
    kind="etf",
    quote_source="yahoo",
    yahoo_symbol="FWRG.L",
    # Yahoo quotes London listings in pence
    price_currency="GBp",
    decimals=2,
)

DEFAULT_PRECISION = 4


class AssetRegistry:
    """Read-only lookup over a fixed set of asset definitions."""

    def __init__(self, assets: Iterable[AssetDefinition]) -> None:
        self._assets: Dict[str, AssetDefinition] = {}
        for asset in assets:
            if asset.id in self._assets:
                raise ValueError(f"Duplicate asset id {asset.id}")
            self._assets[asset.id] = asset

    def get(self, asset_id: str) -> AssetDefinition | None:
        return self._assets.get(asset_id)

    def all(self) -> List[AssetDefinition]:
        return list(self._assets.values())

    def precision_for(self, asset_id: str) -> int:
        asset = self._assets.get(asset_id)
        return asset.decimals if asset else DEFAULT_PRECISION


def validate_asset_config(asset: AssetDefinition) -> bool:
    """Return ``False`` when the provider field for the asset's quote source is unset."""

    if asset.quote_source == "coingecko" and not asset.coingecko_id:
        return False
    if asset.quote_source == "yahoo" and not asset.yahoo_symbol:
        return False
    return True


DEFAULT_REGISTRY = AssetRegistry([BTC_ASSET, INVESCO_FTSE_ALL_WORLD_ASSET])


def get_asset_by_id(asset_id: str) -> AssetDefinition | None:
    return DEFAULT_REGISTRY.get(asset_id)


def get_all_assets() -> List[AssetDefinition]:
    return DEFAULT_REGISTRY.all()


__all__ = [
    "BTC_ASSET",
    "INVESCO_FTSE_ALL_WORLD_ASSET",
    "DEFAULT_PRECISION",
    "DEFAULT_REGISTRY",
    "AssetRegistry",
    "get_asset_by_id",
    "get_all_assets",
    "validate_asset_config",
]
