"""Route registration helpers."""

from __future__ import annotations

from fastapi import APIRouter

from .fx import router as fx_router
from .portfolio import router as portfolio_router
from .prices import router as prices_router
from .quotes import router as quotes_router

api_router = APIRouter()
api_router.include_router(quotes_router, prefix="/quotes", tags=["quotes"])
api_router.include_router(prices_router, prefix="/prices", tags=["prices"])
api_router.include_router(fx_router, prefix="/fx", tags=["fx"])
api_router.include_router(portfolio_router, prefix="/portfolio", tags=["portfolio"])

__all__ = ["api_router"]
