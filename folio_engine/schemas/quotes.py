"""Pydantic schemas for quote, price and FX responses."""

from __future__ import annotations

from pydantic import BaseModel, Field


class QuoteResultSchema(BaseModel):
    asset_id: str
    price_eur: float | None = None
    notice: str | None = None


class QuotesResponse(BaseModel):
    quotes: list[QuoteResultSchema]


class PriceAtResponse(BaseModel):
    asset_id: str
    timestamp: int
    price_eur: float


class PricePointSchema(BaseModel):
    timestamp: int = Field(..., description="Unix epoch milliseconds")
    price: float


class HistoricalPricesResponse(BaseModel):
    asset_id: str
    prices: list[PricePointSchema]


class FxRateResponse(BaseModel):
    from_currency: str
    to_currency: str
    rate: float
    source: str = "frankfurter"
