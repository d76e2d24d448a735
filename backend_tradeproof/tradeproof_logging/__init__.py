"""
Structured logging for Backend TradeProof.

JSON logs with timestamp, event_type and per-call context (wallet, signature, report_id).
Import get_logger from here in every module; no other backend_tradeproof imports.
"""

from backend_tradeproof.tradeproof_logging.logger import bind_wallet, configure_structlog, get_logger, short_wallet

__all__ = ["bind_wallet", "configure_structlog", "get_logger", "short_wallet"]
