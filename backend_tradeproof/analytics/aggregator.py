"""
Analytics aggregator: swap events -> AnalyticsSnapshot.

Volume, trade count, average size, trading-day span, top assets, and an
approximate realized P&L. Without a price oracle:
- profit_loss uses a weighted-average cost basis per mint (not FIFO/LIFO);
- win_rate is a fixed 60% placeholder ratio, not per-trade profitability.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable

from backend_tradeproof.analytics.models import AnalyticsSnapshot, AssetStat
from backend_tradeproof.swap_parser.models import BUY, SwapEvent
from backend_tradeproof.tradeproof_logging import get_logger

logger = get_logger(__name__)

SECONDS_PER_DAY = 86_400
TOP_ASSETS_LIMIT = 5
RECENT_SWAPS_LIMIT = 10
PLACEHOLDER_WIN_RATIO = 0.6


@dataclass
class _Position:
    amount: float = 0.0
    cost_basis: float = 0.0


def calculate_profit_loss(swaps: Iterable[SwapEvent]) -> float:
    """
    Realized P&L over swaps in the given (chronological) order.

    Buy: the received asset's position grows by amount and value_usd.
    Sell: the sold fraction of the position's cost basis is matched against
    value_usd. Selling without a tracked position is ignored; selling more
    than the position realizes against the whole position.
    """
    pnl = 0.0
    positions: dict[str, _Position] = {}
    for swap in swaps:
        if swap.direction == BUY:
            pos = positions.setdefault(swap.token_in.mint, _Position())
            pos.amount += swap.token_in.amount
            pos.cost_basis += swap.value_usd
            continue
        pos = positions.get(swap.token_out.mint)
        if pos is None or pos.amount <= 0:
            continue
        sold = swap.token_out.amount
        fraction = min(1.0, sold / pos.amount)
        matched_cost = pos.cost_basis * fraction
        pnl += swap.value_usd - matched_cost
        pos.amount = max(0.0, pos.amount - sold)
        pos.cost_basis -= matched_cost
    return pnl


def calculate_win_rate(trade_count: int) -> float:
    """Placeholder: floor(60% of trades) as a percentage. Not derived from trade outcomes."""
    if trade_count <= 0:
        return 0.0
    estimated_wins = math.floor(trade_count * PLACEHOLDER_WIN_RATIO)
    return estimated_wins / trade_count * 100


def calculate_top_assets(swaps: Iterable[SwapEvent], limit: int = TOP_ASSETS_LIMIT) -> list[AssetStat]:
    """Group by acquired asset, rank by volume descending; ties keep first-seen order."""
    volume: dict[str, float] = {}
    trades: dict[str, int] = {}
    symbols: dict[str, str] = {}
    for swap in swaps:
        leg = swap.acquired
        if leg.mint not in volume:
            volume[leg.mint] = 0.0
            trades[leg.mint] = 0
            symbols[leg.mint] = leg.symbol
        volume[leg.mint] += swap.value_usd
        trades[leg.mint] += 1
    ranked = sorted(volume, key=lambda mint: volume[mint], reverse=True)
    return [
        AssetStat(mint=mint, symbol=symbols[mint], volume=volume[mint], trade_count=trades[mint])
        for mint in ranked[:limit]
    ]


def calculate_trading_days(first_timestamp: int, last_timestamp: int) -> int:
    """Whole days spanned (ceil), at least 1."""
    days = math.ceil((last_timestamp - first_timestamp) / SECONDS_PER_DAY)
    return max(1, days)


def aggregate(swaps: Iterable[SwapEvent]) -> AnalyticsSnapshot:
    """
    Aggregate swaps into an AnalyticsSnapshot.

    Empty input returns the zero snapshot. Swaps are ordered by timestamp
    (stable) before P&L and span are computed.
    """
    ordered = sorted(swaps, key=lambda s: s.timestamp)
    if not ordered:
        return AnalyticsSnapshot()

    trade_count = len(ordered)
    total_volume = sum(s.value_usd for s in ordered)
    first, last = ordered[0], ordered[-1]

    snapshot = AnalyticsSnapshot(
        total_volume=total_volume,
        trade_count=trade_count,
        win_rate=calculate_win_rate(trade_count),
        avg_trade_size=total_volume / trade_count,
        profit_loss=calculate_profit_loss(ordered),
        top_assets=tuple(calculate_top_assets(ordered)),
        trading_days=calculate_trading_days(first.timestamp, last.timestamp),
        first_trade_timestamp=first.timestamp,
        last_trade_timestamp=last.timestamp,
        recent_swaps=tuple(reversed(ordered[-RECENT_SWAPS_LIMIT:])),
    )
    logger.debug(
        "analytics_aggregated",
        trade_count=trade_count,
        total_volume=round(total_volume, 2),
        trading_days=snapshot.trading_days,
    )
    return snapshot
