"""
Persistence layer: users, analytics cache, and issued reports (SQLAlchemy).
"""

from backend_tradeproof.database.store import StoredReport, TradeProofStore

__all__ = ["StoredReport", "TradeProofStore"]
