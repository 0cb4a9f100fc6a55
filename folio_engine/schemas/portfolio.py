"""Pydantic schemas for transactions, valuations and chart series."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, ConfigDict, Field

from folio_engine.domain.models import ChartPoint, PortfolioSnapshot, Transaction


class TransactionRecord(BaseModel):
    """A transaction as stored in the JSON blob and returned by the API."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    asset_id: str = Field(..., alias="assetId", examples=["btc"])
    timestamp: int = Field(..., description="Unix epoch milliseconds")
    quantity: float = Field(..., ge=0)
    price_per_unit_eur: float = Field(..., ge=0, alias="pricePerUnitEUR")

    def to_domain(self) -> Transaction:
        return Transaction(
            id=self.id,
            asset_id=self.asset_id,
            timestamp=self.timestamp,
            quantity=self.quantity,
            price_per_unit_eur=self.price_per_unit_eur,
        )

    @classmethod
    def from_domain(cls, tx: Transaction) -> "TransactionRecord":
        return cls(
            id=tx.id,
            asset_id=tx.asset_id,
            timestamp=tx.timestamp,
            quantity=tx.quantity,
            price_per_unit_eur=tx.price_per_unit_eur,
        )


class TransactionCreateRequest(BaseModel):
    asset_id: str = Field(..., examples=["btc"])
    timestamp: int = Field(..., description="Unix epoch milliseconds of the purchase")
    quantity: float = Field(..., ge=0)


class AssetPositionSchema(BaseModel):
    asset_id: str
    quantity_held: float
    deployed_capital_eur: float


class AssetValuationSchema(BaseModel):
    asset_id: str
    current_price_eur: float
    current_value_eur: float
    position: AssetPositionSchema


class PortfolioTotalsSchema(BaseModel):
    deployed_capital_eur: float
    current_value_eur: float
    profit_eur: float
    return_pct: float


class PortfolioSnapshotSchema(BaseModel):
    assets: list[AssetValuationSchema]
    totals: PortfolioTotalsSchema
    notices: dict[str, str] = Field(default_factory=dict, description="Per-asset quote notices")

    @classmethod
    def from_domain(cls, snapshot: PortfolioSnapshot, notices: dict[str, str] | None = None) -> "PortfolioSnapshotSchema":
        return cls(
            assets=[
                AssetValuationSchema(
                    asset_id=item.asset_id,
                    current_price_eur=item.current_price_eur,
                    current_value_eur=item.current_value_eur,
                    position=AssetPositionSchema(
                        asset_id=item.position.asset_id,
                        quantity_held=item.position.quantity_held,
                        deployed_capital_eur=item.position.deployed_capital_eur,
                    ),
                )
                for item in snapshot.assets
            ],
            totals=PortfolioTotalsSchema(
                deployed_capital_eur=snapshot.totals.deployed_capital_eur,
                current_value_eur=snapshot.totals.current_value_eur,
                profit_eur=snapshot.totals.profit_eur,
                return_pct=snapshot.totals.return_pct,
            ),
            notices=notices or {},
        )


class ChartPointSchema(BaseModel):
    day: date
    ts: int
    deployed: float
    current: float
    deposit: bool

    @classmethod
    def from_domain(cls, point: ChartPoint) -> "ChartPointSchema":
        return cls(day=point.day, ts=point.ts, deployed=point.deployed, current=point.current, deposit=point.deposit)


class DailySeriesResponse(BaseModel):
    points: list[ChartPointSchema]

    class Config:
        json_schema_extra = {
            "example": {
                "points": [
                    {"day": "2024-03-01", "ts": 1709247600000, "deployed": 100.0, "current": 100.0, "deposit": True},
                    {"day": "2024-03-02", "ts": 1709334000000, "deployed": 100.0, "current": 104.2, "deposit": False},
                ]
            }
        }
