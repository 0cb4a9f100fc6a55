"""Price resolution and portfolio valuation engine."""

from .domain import AssetDefinition, ChartPoint, PortfolioSnapshot, Transaction
from .services import compute_snapshot, daily_series

__all__ = [
    "AssetDefinition",
    "ChartPoint",
    "PortfolioSnapshot",
    "Transaction",
    "compute_snapshot",
    "daily_series",
]
