"""Portfolio valuation: positions, current values and totals."""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Dict, Iterable, Mapping

from folio_engine.domain.models import (
    AssetPosition,
    AssetValuation,
    PortfolioSnapshot,
    PortfolioTotals,
    Transaction,
)

_CENT = Decimal("0.01")
_TEN_THOUSANDTH = Decimal("0.0001")


def _round(value: float, quantum: Decimal) -> float:
    if not math.isfinite(value):
        return value
    exact = Decimal(repr(value))
    with localcontext() as ctx:
        # room for every integer digit plus the quantum's fraction digits
        ctx.prec = max(ctx.prec, exact.adjusted() - quantum.as_tuple().exponent + 2)
        # ROUND_HALF_UP on Decimal rounds halves away from zero
        return float(exact.quantize(quantum, rounding=ROUND_HALF_UP))


def round_money(value: float) -> float:
    return _round(value, _CENT)


def round_quantity(value: float) -> float:
    return _round(value, _TEN_THOUSANDTH)


def accumulate_positions(transactions: Iterable[Transaction]) -> Dict[str, AssetPosition]:
    """Sum quantity and deployed capital per asset, in first-seen order."""

    positions: Dict[str, AssetPosition] = {}
    for tx in transactions:
        position = positions.setdefault(tx.asset_id, AssetPosition(asset_id=tx.asset_id))
        position.quantity_held += tx.quantity
        position.deployed_capital_eur += tx.cost_eur
    return positions


def compute_snapshot(
    transactions: Iterable[Transaction],
    current_prices_eur: Mapping[str, float],
) -> PortfolioSnapshot:
    """Value every held asset at its current price and total the portfolio.

    Assets without a known price are valued at 0. Accumulation stays
    unrounded; only the reported figures are rounded (money to cents,
    quantities to four decimals).
    """

    positions = accumulate_positions(transactions)
    assets: list[AssetValuation] = []
    total_current = 0.0
    total_deployed = 0.0

    for asset_id, position in positions.items():
        current_price = current_prices_eur.get(asset_id) or 0.0
        current_value = position.quantity_held * current_price

        total_current += current_value
        total_deployed += position.deployed_capital_eur

        assets.append(
            AssetValuation(
                asset_id=asset_id,
                current_price_eur=round_money(current_price),
                current_value_eur=round_money(current_value),
                position=AssetPosition(
                    asset_id=asset_id,
                    quantity_held=round_quantity(position.quantity_held),
                    deployed_capital_eur=round_money(position.deployed_capital_eur),
                ),
            )
        )

    profit = total_current - total_deployed
    totals = PortfolioTotals(
        deployed_capital_eur=round_money(total_deployed),
        current_value_eur=round_money(total_current),
        profit_eur=round_money(profit),
        return_pct=profit / total_deployed if total_deployed > 0 else 0.0,
    )
    return PortfolioSnapshot(assets=assets, totals=totals)


__all__ = ["accumulate_positions", "compute_snapshot", "round_money", "round_quantity"]
