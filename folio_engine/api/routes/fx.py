"""Latest FX rate endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from folio_engine.api.dependencies import get_engine
from folio_engine.engine import PricingEngine
from folio_engine.errors import QuoteError
from folio_engine.schemas.quotes import FxRateResponse

router = APIRouter()

SUPPORTED = {"EUR", "GBP", "USD"}


@router.get("/{from_ccy}-{to_ccy}", response_model=FxRateResponse)
async def get_latest_rate(from_ccy: str, to_ccy: str, engine: PricingEngine = Depends(get_engine)) -> FxRateResponse:
    source, target = from_ccy.upper(), to_ccy.upper()
    if source not in SUPPORTED or target not in SUPPORTED:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Unsupported pair {source}-{target}")
    try:
        rate = await engine.normalizer.latest_rate(source, target)
    except QuoteError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    return FxRateResponse(from_currency=source, to_currency=target, rate=rate)


__all__ = ["router"]
