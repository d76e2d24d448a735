"""
Application-level exceptions.

Integrity and expiration outcomes of report verification are return values,
not exceptions; these cover the collaborators around the core pipeline.
"""

from __future__ import annotations


class TradeProofError(Exception):
    """Base class for TradeProof errors."""


class HistoryProviderError(TradeProofError):
    """Transaction history could not be fetched (network, rate limit, bad payload)."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class InvalidWalletError(TradeProofError, ValueError):
    """Wallet address is not a valid Solana public key."""


class AuthenticationError(TradeProofError):
    """Signed-message check failed."""
