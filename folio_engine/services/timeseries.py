"""Daily deployed-capital vs. market-value series for charting."""
from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Mapping, Sequence
from zoneinfo import ZoneInfo

from folio_engine.core.clock import (
    day_start_millis,
    iter_days,
    local_day,
    local_midnight_millis,
    resolve_tz,
)
from folio_engine.domain.models import ChartPoint, HistoricalPrices, PortfolioState, PricePoint, Transaction


def find_nearest_price(price_map: Mapping[int, float], target: int) -> float | None:
    """Return the price recorded closest to ``target``.

    Targets before the first sample clamp to the first price, targets after
    the last sample clamp to the last price. Otherwise the sample with the
    smallest absolute distance wins, the earlier one on ties.
    """

    if not price_map:
        return None
    timestamps = sorted(price_map)
    if target <= timestamps[0]:
        return price_map[timestamps[0]]
    if target >= timestamps[-1]:
        return price_map[timestamps[-1]]

    nearest = timestamps[0]
    min_diff = abs(target - nearest)
    for ts in timestamps:
        diff = abs(target - ts)
        if diff < min_diff:
            min_diff = diff
            nearest = ts
    return price_map[nearest]


def parse_historical_prices(
    asset_id: str,
    prices: Iterable[PricePoint],
    tz: ZoneInfo | str = "UTC",
) -> HistoricalPrices:
    """Key a price series by local midnight; later points overwrite earlier ones."""

    zone = resolve_tz(tz)
    price_map: Dict[int, float] = {}
    for point in prices:
        price_map[local_midnight_millis(point.timestamp, zone)] = point.price
    return {asset_id: price_map}


def merge_historical_prices(*datasets: HistoricalPrices) -> HistoricalPrices:
    result: HistoricalPrices = {}
    for dataset in datasets:
        for asset_id, price_map in dataset.items():
            result.setdefault(asset_id, {}).update(price_map)
    return result


def _portfolio_value(
    state: PortfolioState,
    day_ts: int,
    current_prices: Mapping[str, float],
    historical_prices: HistoricalPrices | None,
) -> float:
    total = 0.0
    for asset_id, position in state.positions.items():
        if position.quantity == 0:
            continue
        price = None
        if historical_prices and historical_prices.get(asset_id):
            price = find_nearest_price(historical_prices[asset_id], day_ts)
        if not price:
            price = current_prices.get(asset_id)
        if price and price > 0:
            total += position.quantity * price

    # No price for any held asset: report the day at cost
    if total == 0 and state.deployed_total > 0:
        total = state.deployed_total
    return total


def daily_series(
    transactions: Sequence[Transaction],
    current_prices: Mapping[str, float],
    historical_prices: HistoricalPrices | None = None,
    *,
    tz: ZoneInfo | str = "UTC",
    today: date | None = None,
) -> List[ChartPoint]:
    """Build one point per calendar day from the first transaction through today.

    Transactions are folded in on the local day they occur. Days before any
    capital is deployed are skipped. Each day's value uses the nearest
    historical price per asset, then the live price, then the deployed total.
    """

    if not transactions:
        return []

    zone = resolve_tz(tz)
    ordered = sorted(transactions, key=lambda tx: tx.timestamp)
    end_day = today or datetime.now(zone).date()
    start_day = local_day(ordered[0].timestamp, zone)
    deposit_days = {local_day(tx.timestamp, zone) for tx in ordered}

    state = PortfolioState()
    points: List[ChartPoint] = []
    tx_index = 0

    for day in iter_days(start_day, end_day):
        day_ts = day_start_millis(day, zone)
        next_day_ts = day_start_millis(day + timedelta(days=1), zone)

        while tx_index < len(ordered) and ordered[tx_index].timestamp < next_day_ts:
            state.apply(ordered[tx_index])
            tx_index += 1

        deployed_total = state.deployed_total
        if deployed_total == 0:
            continue

        points.append(
            ChartPoint(
                day=day,
                ts=day_ts,
                deployed=deployed_total,
                current=_portfolio_value(state, day_ts, current_prices, historical_prices),
                deposit=day in deposit_days,
            )
        )

    return points


__all__ = [
    "daily_series",
    "find_nearest_price",
    "parse_historical_prices",
    "merge_historical_prices",
]
