"""Domain models and the asset registry."""

from .assets import (
    DEFAULT_REGISTRY,
    AssetRegistry,
    get_all_assets,
    get_asset_by_id,
    validate_asset_config,
)
from .models import (
    AssetDefinition,
    AssetPosition,
    AssetValuation,
    ChartPoint,
    HistoricalPrices,
    PortfolioSnapshot,
    PortfolioTotals,
    PricePoint,
    Quote,
    QuoteResult,
    Transaction,
)

__all__ = [
    "DEFAULT_REGISTRY",
    "AssetRegistry",
    "get_all_assets",
    "get_asset_by_id",
    "validate_asset_config",
    "AssetDefinition",
    "AssetPosition",
    "AssetValuation",
    "ChartPoint",
    "HistoricalPrices",
    "PortfolioSnapshot",
    "PortfolioTotals",
    "PricePoint",
    "Quote",
    "QuoteResult",
    "Transaction",
]
