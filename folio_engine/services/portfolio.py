"""Portfolio-level workflows composed from the pricing services."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import date

from folio_engine.core.clock import from_millis
from folio_engine.domain.models import ChartPoint, PortfolioSnapshot, Transaction
from folio_engine.errors import ConfigurationError
from folio_engine.storage.transactions import TransactionStore

from .quotes import QuoteResolver, current_prices_eur
from .timeseries import daily_series
from .valuation import compute_snapshot

logger = logging.getLogger(__name__)


@dataclass
class ValuedPortfolio:
    snapshot: PortfolioSnapshot
    notices: dict[str, str] = field(default_factory=dict)


async def record_purchase(
    store: TransactionStore,
    resolver: QuoteResolver,
    asset_id: str,
    timestamp: int,
    quantity: float,
) -> Transaction:
    """Price a purchase at its instant and append it to the log."""

    asset = resolver.registry.get(asset_id)
    if asset is None:
        raise ConfigurationError(f"Unknown asset: {asset_id}")
    price = await resolver.price_at(asset, from_millis(timestamp))
    tx = Transaction(
        id=str(uuid.uuid4()),
        asset_id=asset_id,
        timestamp=timestamp,
        quantity=quantity,
        price_per_unit_eur=price,
    ).with_precision(asset.decimals)
    store.add(tx)
    logger.info("Recorded %s x %s at %.2f EUR", tx.quantity, asset_id, price)
    return tx


async def value_portfolio(store: TransactionStore, resolver: QuoteResolver) -> ValuedPortfolio:
    transactions = store.load()
    results = await resolver.all_current_prices()
    notices = {r.asset_id: r.notice for r in results if r.notice}
    return ValuedPortfolio(snapshot=compute_snapshot(transactions, current_prices_eur(results)), notices=notices)


async def portfolio_series(
    store: TransactionStore,
    resolver: QuoteResolver,
    *,
    today: date | None = None,
) -> list[ChartPoint]:
    transactions = store.load()
    if not transactions:
        return []
    results = await resolver.all_current_prices()
    historical = await resolver.historical_prices_for(transactions)
    return daily_series(
        transactions,
        current_prices_eur(results),
        historical,
        tz=resolver.tz,
        today=today,
    )


__all__ = ["ValuedPortfolio", "record_purchase", "value_portfolio", "portfolio_series"]
