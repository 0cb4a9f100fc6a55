"""FastAPI dependency providers for the pricing engine and transaction log."""

from __future__ import annotations

from functools import lru_cache

from fastapi import HTTPException, status

from folio_engine.config import get_settings
from folio_engine.domain.models import AssetDefinition
from folio_engine.engine import PricingEngine, build_engine
from folio_engine.services.quotes import QuoteResolver
from folio_engine.storage.transactions import TransactionStore


@lru_cache(maxsize=1)
def get_engine() -> PricingEngine:
    return build_engine(get_settings())


def get_resolver() -> QuoteResolver:
    return get_engine().resolver


def get_transaction_store() -> TransactionStore:
    return TransactionStore(get_settings().transactions_path)


def resolve_asset(resolver: QuoteResolver, asset_id: str) -> AssetDefinition:
    asset = resolver.registry.get(asset_id)
    if asset is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Unknown asset: {asset_id}")
    return asset


__all__ = ["get_engine", "get_resolver", "get_transaction_store", "resolve_asset"]
