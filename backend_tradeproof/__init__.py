"""
Backend TradeProof: verifiable, privacy-preserving trading reports for Solana wallets.

Reconstructs DEX swaps from a wallet's transaction history, aggregates them
into trading analytics, and issues range-obfuscated reports bound by a
SHA-256 commitment that anyone can re-check later.
"""

__version__ = "0.1.0"

from backend_tradeproof.analytics.aggregator import aggregate
from backend_tradeproof.reports.builder import build_report
from backend_tradeproof.reports.verifier import verify_report
from backend_tradeproof.swap_parser.reconstructor import reconstruct_swaps

__all__ = [
    "aggregate",
    "build_report",
    "reconstruct_swaps",
    "verify_report",
]
