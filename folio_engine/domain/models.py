"""Domain models used by the pricing and valuation engine."""
from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Dict, List, Literal, Optional

AssetKind = Literal["crypto", "etf", "stock"]
QuoteSourceName = Literal["coingecko", "yahoo"]

# asset id -> {local-midnight epoch ms -> price in accounting currency}
HistoricalPrices = Dict[str, Dict[int, float]]


@dataclass(frozen=True)
class AssetDefinition:
    """Static quote-source configuration for one asset."""

    id: str
    display_name: str
    kind: AssetKind
    quote_source: QuoteSourceName
    price_currency: str
    decimals: int
    coingecko_id: Optional[str] = None
    yahoo_symbol: Optional[str] = None


@dataclass(frozen=True)
class Transaction:
    """A single buy, priced in the accounting currency at acquisition time."""

    id: str
    asset_id: str
    timestamp: int
    quantity: float
    price_per_unit_eur: float

    @property
    def cost_eur(self) -> float:
        return self.quantity * self.price_per_unit_eur

    def with_precision(self, decimals: int) -> "Transaction":
        """Return a copy whose quantity is rounded to ``decimals`` places."""

        factor = 10 ** decimals
        # halves round toward positive infinity
        return replace(self, quantity=math.floor(self.quantity * factor + 0.5) / factor)


@dataclass
class AssetPosition:
    asset_id: str
    quantity_held: float = 0.0
    deployed_capital_eur: float = 0.0


@dataclass(frozen=True)
class AssetValuation:
    asset_id: str
    current_price_eur: float
    current_value_eur: float
    position: AssetPosition


@dataclass(frozen=True)
class PortfolioTotals:
    deployed_capital_eur: float
    current_value_eur: float
    profit_eur: float
    # profit / deployed capital, exactly 0 when nothing is deployed
    return_pct: float


@dataclass(frozen=True)
class PortfolioSnapshot:
    assets: List[AssetValuation]
    totals: PortfolioTotals


@dataclass(frozen=True)
class Quote:
    """A spot price in the currency the provider quoted it in."""

    price: float
    currency: str


@dataclass(frozen=True)
class PricePoint:
    timestamp: int
    price: float


@dataclass(frozen=True)
class QuoteResult:
    """Outcome of resolving one asset inside a batch."""

    asset_id: str
    price_eur: Optional[float]
    notice: Optional[str] = None


@dataclass(frozen=True)
class ChartPoint:
    """One calendar day of deployed capital vs. mark-to-market value."""

    day: date
    ts: int
    deployed: float
    current: float
    deposit: bool = False


@dataclass
class _RunningPosition:
    quantity: float = 0.0
    deployed: float = 0.0


@dataclass
class PortfolioState:
    """Running per-asset accumulator used while walking the calendar."""

    positions: Dict[str, _RunningPosition] = field(default_factory=dict)

    def apply(self, tx: Transaction) -> None:
        position = self.positions.setdefault(tx.asset_id, _RunningPosition())
        position.quantity += tx.quantity
        position.deployed += tx.cost_eur

    @property
    def deployed_total(self) -> float:
        return sum(position.deployed for position in self.positions.values())


__all__ = [
    "AssetKind",
    "QuoteSourceName",
    "HistoricalPrices",
    "AssetDefinition",
    "Transaction",
    "AssetPosition",
    "AssetValuation",
    "PortfolioTotals",
    "PortfolioSnapshot",
    "Quote",
    "PricePoint",
    "QuoteResult",
    "ChartPoint",
    "PortfolioState",
]
