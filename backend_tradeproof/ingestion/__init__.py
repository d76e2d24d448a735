"""
Ingestion package: fetches wallet transaction history from Helius.
"""

from backend_tradeproof.ingestion.helius_client import HeliusHistoryProvider

__all__ = ["HeliusHistoryProvider"]
