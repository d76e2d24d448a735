"""
Wallet authentication: proves control of an address with a signed message.
"""

from backend_tradeproof.auth.wallet_auth import parse_wallet, verify_wallet_signature

__all__ = ["parse_wallet", "verify_wallet_signature"]
