"""Human-readable rendering of report stats; [0, 0] ranges and a 0 win rate show as Hidden."""

from __future__ import annotations

import math

from backend_tradeproof.analytics.formatting import format_number
from backend_tradeproof.reports.models import ReportStats, ValueRange

HIDDEN = "Hidden"


def _usd_range(r: ValueRange) -> str:
    if r.is_zero:
        return HIDDEN
    return f"${format_number(r.min)} - ${format_number(r.max)}"


def format_report_stats(stats: ReportStats) -> dict[str, str]:
    trade_count = (
        HIDDEN
        if stats.trade_count_range.is_zero
        else f"{math.floor(stats.trade_count_range.min)} - {math.ceil(stats.trade_count_range.max)} trades"
    )
    return {
        "totalVolume": _usd_range(stats.total_volume_range),
        "tradeCount": trade_count,
        "winRate": f"{stats.win_rate:.1f}%" if stats.win_rate > 0 else HIDDEN,
        "profitLoss": _usd_range(stats.profit_loss_range),
        "tradingDays": f"{stats.trading_days} days",
        "avgTradeSize": _usd_range(stats.avg_trade_size_range),
    }
