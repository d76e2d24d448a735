"""
Analytics pipeline: fetch history -> reconstruct swaps -> aggregate, with cache.

Single entrypoint for the analyze endpoint. The history provider and store are
injected; the pipeline itself holds no global clients.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Protocol

from backend_tradeproof.analytics.aggregator import aggregate
from backend_tradeproof.analytics.models import AnalyticsSnapshot
from backend_tradeproof.database.store import DEFAULT_CACHE_TTL_SEC, TradeProofStore
from backend_tradeproof.reports.models import format_iso
from backend_tradeproof.swap_parser.exchanges import ExchangeTable
from backend_tradeproof.swap_parser.models import RawTransaction
from backend_tradeproof.swap_parser.reconstructor import reconstruct_swaps
from backend_tradeproof.tradeproof_logging import bind_wallet


class HistoryProvider(Protocol):
    def fetch_transactions(self, wallet: str, limit: int = 100) -> list[RawTransaction]:
        ...


@dataclass(frozen=True)
class AnalysisResult:
    snapshot: AnalyticsSnapshot
    cached: bool
    analyzed_at: str  # ISO-8601


class AnalysisService:
    """Runs wallet analysis against an injected history provider and store."""

    def __init__(
        self,
        provider: HistoryProvider,
        store: TradeProofStore,
        *,
        exchanges: ExchangeTable | None = None,
        cache_ttl_sec: int = DEFAULT_CACHE_TTL_SEC,
        reconstruct_workers: int = 0,
    ) -> None:
        self.provider = provider
        self.store = store
        self.exchanges = exchanges
        self.cache_ttl_sec = cache_ttl_sec
        self.reconstruct_workers = reconstruct_workers

    def analyze(self, wallet: str, limit: int = 100, refresh: bool = False) -> AnalysisResult:
        """
        Return analytics for wallet, served from cache unless refresh is set
        or the cached row has expired. Provider errors propagate.
        """
        log = bind_wallet(wallet)
        if not refresh:
            cached = self.store.get_cached_analytics(wallet)
            if cached is not None:
                snapshot, cached_at = cached
                log.info("analytics_cache_hit", trade_count=snapshot.trade_count)
                return AnalysisResult(
                    snapshot=snapshot,
                    cached=True,
                    analyzed_at=format_iso(datetime.fromtimestamp(cached_at, tz=timezone.utc)),
                )

        log.info("analytics_pipeline_start", limit=limit, refresh=refresh)
        transactions = self.provider.fetch_transactions(wallet, limit)
        swaps = reconstruct_swaps(
            transactions,
            wallet,
            exchanges=self.exchanges,
            max_workers=self.reconstruct_workers or None,
        )
        snapshot = aggregate(swaps)

        now = int(time.time())
        self.store.cache_analytics(
            wallet,
            snapshot,
            tx_count=len(transactions),
            last_signature=transactions[0].signature if transactions else "",
            ttl_sec=self.cache_ttl_sec,
            now=now,
        )
        log.info(
            "analytics_pipeline_done",
            tx_count=len(transactions),
            trade_count=snapshot.trade_count,
        )
        return AnalysisResult(
            snapshot=snapshot,
            cached=False,
            analyzed_at=format_iso(datetime.fromtimestamp(now, tz=timezone.utc)),
        )
