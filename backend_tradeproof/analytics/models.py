"""
Analytics snapshot models.

AnalyticsSnapshot is immutable and round-trips through to_dict()/from_dict()
so it can sit in the analytics cache and travel in API payloads.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from backend_tradeproof.swap_parser.models import SwapEvent


@dataclass(frozen=True)
class AssetStat:
    """Per-asset volume and trade count for top-asset ranking."""

    mint: str
    symbol: str
    volume: float
    trade_count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "mint": self.mint,
            "symbol": self.symbol,
            "volume": self.volume,
            "trades": self.trade_count,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AssetStat":
        return cls(
            mint=str(data["mint"]),
            symbol=str(data["symbol"]),
            volume=float(data["volume"]),
            trade_count=int(data["trades"]),
        )


@dataclass(frozen=True)
class AnalyticsSnapshot:
    """
    Aggregate trading statistics over a set of swaps.

    win_rate and profit_loss are approximations (see analytics.aggregator).
    Timestamps are Unix seconds; 0 when there are no trades.
    """

    total_volume: float = 0.0
    trade_count: int = 0
    win_rate: float = 0.0
    avg_trade_size: float = 0.0
    profit_loss: float = 0.0
    top_assets: tuple[AssetStat, ...] = ()
    trading_days: int = 0
    first_trade_timestamp: int = 0
    last_trade_timestamp: int = 0
    recent_swaps: tuple[SwapEvent, ...] = ()

    @property
    def is_empty(self) -> bool:
        return self.trade_count == 0

    def to_dict(self) -> dict[str, Any]:
        """Wire form (camelCase keys)."""
        return {
            "totalVolume": self.total_volume,
            "tradeCount": self.trade_count,
            "winRate": self.win_rate,
            "avgTradeSize": self.avg_trade_size,
            "profitLoss": self.profit_loss,
            "topTokens": [a.to_dict() for a in self.top_assets],
            "tradingDays": self.trading_days,
            "firstTradeTimestamp": self.first_trade_timestamp,
            "lastTradeTimestamp": self.last_trade_timestamp,
            "recentTrades": [s.to_dict() for s in self.recent_swaps],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AnalyticsSnapshot":
        return cls(
            total_volume=float(data.get("totalVolume") or 0),
            trade_count=int(data.get("tradeCount") or 0),
            win_rate=float(data.get("winRate") or 0),
            avg_trade_size=float(data.get("avgTradeSize") or 0),
            profit_loss=float(data.get("profitLoss") or 0),
            top_assets=tuple(AssetStat.from_dict(a) for a in data.get("topTokens") or ()),
            trading_days=int(data.get("tradingDays") or 0),
            first_trade_timestamp=int(data.get("firstTradeTimestamp") or 0),
            last_trade_timestamp=int(data.get("lastTradeTimestamp") or 0),
            recent_swaps=tuple(SwapEvent.from_dict(s) for s in data.get("recentTrades") or ()),
        )
