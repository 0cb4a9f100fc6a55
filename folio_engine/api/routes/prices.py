"""Point-in-time and historical price endpoints."""

from __future__ import annotations

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status

from folio_engine.api.dependencies import get_resolver, resolve_asset
from folio_engine.core.clock import from_millis
from folio_engine.errors import QuoteError
from folio_engine.schemas.quotes import HistoricalPricesResponse, PriceAtResponse, PricePointSchema
from folio_engine.services.quotes import QuoteResolver

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/at", response_model=PriceAtResponse)
async def get_price_at(
    asset_id: str = Query(..., examples=["btc"]),
    timestamp: int = Query(..., description="Unix epoch milliseconds"),
    resolver: QuoteResolver = Depends(get_resolver),
) -> PriceAtResponse:
    asset = resolve_asset(resolver, asset_id)
    try:
        price = await resolver.price_at(asset, from_millis(timestamp))
    except QuoteError as exc:
        logger.error("Price at %s for %s failed: %s", timestamp, asset_id, exc)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    return PriceAtResponse(asset_id=asset.id, timestamp=timestamp, price_eur=price)


@router.get("/historical", response_model=HistoricalPricesResponse)
async def get_historical_prices(
    asset_id: str = Query(..., examples=["etf:invesco-ftse-all-world"]),
    start_date: datetime = Query(...),
    end_date: datetime = Query(...),
    resolver: QuoteResolver = Depends(get_resolver),
) -> HistoricalPricesResponse:
    asset = resolve_asset(resolver, asset_id)
    if start_date.tzinfo is None or end_date.tzinfo is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Dates must include a UTC offset")
    if start_date > end_date:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="start_date cannot be after end_date")
    try:
        points = await resolver.historical_series(asset, start_date, end_date)
    except QuoteError as exc:
        logger.error("Historical prices for %s failed: %s", asset_id, exc)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    return HistoricalPricesResponse(
        asset_id=asset.id,
        prices=[PricePointSchema(timestamp=p.timestamp, price=p.price) for p in points],
    )


__all__ = ["router"]
