"""Current quote endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from folio_engine.api.dependencies import get_resolver, resolve_asset
from folio_engine.errors import QuoteError
from folio_engine.schemas.quotes import QuoteResultSchema, QuotesResponse
from folio_engine.services.quotes import QuoteResolver

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/all", response_model=QuotesResponse)
async def get_all_quotes(resolver: QuoteResolver = Depends(get_resolver)) -> QuotesResponse:
    results = await resolver.all_current_prices()
    return QuotesResponse(
        quotes=[QuoteResultSchema(asset_id=r.asset_id, price_eur=r.price_eur, notice=r.notice) for r in results]
    )


@router.get("/{asset_id}", response_model=QuoteResultSchema)
async def get_quote(asset_id: str, resolver: QuoteResolver = Depends(get_resolver)) -> QuoteResultSchema:
    asset = resolve_asset(resolver, asset_id)
    try:
        price = await resolver.current_price_eur(asset)
    except QuoteError as exc:
        logger.error("Quote for %s failed: %s", asset_id, exc)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    return QuoteResultSchema(asset_id=asset.id, price_eur=price)


__all__ = ["router"]
