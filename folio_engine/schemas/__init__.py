"""Pydantic schema exports."""

from .portfolio import (
    AssetPositionSchema,
    AssetValuationSchema,
    ChartPointSchema,
    DailySeriesResponse,
    PortfolioSnapshotSchema,
    PortfolioTotalsSchema,
    TransactionCreateRequest,
    TransactionRecord,
)
from .quotes import (
    FxRateResponse,
    HistoricalPricesResponse,
    PriceAtResponse,
    PricePointSchema,
    QuoteResultSchema,
    QuotesResponse,
)

__all__ = [
    "AssetPositionSchema",
    "AssetValuationSchema",
    "ChartPointSchema",
    "DailySeriesResponse",
    "PortfolioSnapshotSchema",
    "PortfolioTotalsSchema",
    "TransactionCreateRequest",
    "TransactionRecord",
    "FxRateResponse",
    "HistoricalPricesResponse",
    "PriceAtResponse",
    "PricePointSchema",
    "QuoteResultSchema",
    "QuotesResponse",
]
