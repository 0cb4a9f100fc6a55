"""Transaction log, valuation snapshot and daily series endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status

from folio_engine.api.dependencies import get_resolver, get_transaction_store
from folio_engine.errors import ConfigurationError, QuoteError
from folio_engine.schemas.portfolio import (
    ChartPointSchema,
    DailySeriesResponse,
    PortfolioSnapshotSchema,
    TransactionCreateRequest,
    TransactionRecord,
)
from folio_engine.services import portfolio as portfolio_service
from folio_engine.services.quotes import QuoteResolver
from folio_engine.storage.transactions import TransactionNotFound, TransactionStore

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/transactions", response_model=list[TransactionRecord], response_model_by_alias=False)
async def get_transactions(store: TransactionStore = Depends(get_transaction_store)) -> list[TransactionRecord]:
    return [TransactionRecord.from_domain(tx) for tx in store.load()]


@router.post(
    "/transactions",
    response_model=TransactionRecord,
    response_model_by_alias=False,
    status_code=status.HTTP_201_CREATED,
)
async def post_transaction(
    payload: TransactionCreateRequest,
    store: TransactionStore = Depends(get_transaction_store),
    resolver: QuoteResolver = Depends(get_resolver),
) -> TransactionRecord:
    try:
        tx = await portfolio_service.record_purchase(
            store,
            resolver,
            payload.asset_id,
            payload.timestamp,
            payload.quantity,
        )
    except ConfigurationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except QuoteError as exc:
        logger.error("Could not price purchase of %s: %s", payload.asset_id, exc)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    return TransactionRecord.from_domain(tx)


@router.delete("/transactions/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_transaction(
    transaction_id: str,
    store: TransactionStore = Depends(get_transaction_store),
) -> Response:
    try:
        store.delete(transaction_id)
    except TransactionNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Transaction not found") from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/snapshot", response_model=PortfolioSnapshotSchema)
async def get_snapshot(
    store: TransactionStore = Depends(get_transaction_store),
    resolver: QuoteResolver = Depends(get_resolver),
) -> PortfolioSnapshotSchema:
    valued = await portfolio_service.value_portfolio(store, resolver)
    return PortfolioSnapshotSchema.from_domain(valued.snapshot, valued.notices)


@router.get("/series", response_model=DailySeriesResponse)
async def get_series(
    store: TransactionStore = Depends(get_transaction_store),
    resolver: QuoteResolver = Depends(get_resolver),
) -> DailySeriesResponse:
    points = await portfolio_service.portfolio_series(store, resolver)
    return DailySeriesResponse(points=[ChartPointSchema.from_domain(p) for p in points])


__all__ = ["router"]
