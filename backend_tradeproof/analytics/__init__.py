"""
Trading analytics.

Aggregates reconstructed swaps into an AnalyticsSnapshot; analytics_pipeline
wires the history provider, reconstructor, aggregator and cache together.
"""

from backend_tradeproof.analytics.aggregator import aggregate
from backend_tradeproof.analytics.models import AnalyticsSnapshot, AssetStat

__all__ = [
    "AnalyticsSnapshot",
    "AssetStat",
    "aggregate",
]
