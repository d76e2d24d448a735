"""
Wallet authentication: ed25519 signed-message check with solders.

The client signs a plain-text message with its wallet key and sends the
signature hex-encoded (base58 is accepted too, as wallets differ).
"""

from __future__ import annotations

import base58
from solders.pubkey import Pubkey
from solders.signature import Signature

from backend_tradeproof.core.exceptions import AuthenticationError, InvalidWalletError
from backend_tradeproof.tradeproof_logging import get_logger, short_wallet

logger = get_logger(__name__)

SIGNATURE_LEN = 64


def parse_wallet(wallet: str) -> Pubkey:
    """Validate a Solana address. Raises InvalidWalletError."""
    wallet = (wallet or "").strip()
    if not wallet:
        raise InvalidWalletError("wallet must be non-empty")
    try:
        return Pubkey.from_string(wallet)
    except Exception as e:
        raise InvalidWalletError(f"Invalid Solana wallet: {e}") from e


def decode_signature(signature: str) -> bytes:
    """Hex or base58 signature -> 64 raw bytes. Raises AuthenticationError."""
    signature = (signature or "").strip()
    raw: bytes | None = None
    try:
        raw = bytes.fromhex(signature)
    except ValueError:
        try:
            raw = base58.b58decode(signature)
        except ValueError:
            raw = None
    if raw is None or len(raw) != SIGNATURE_LEN:
        raise AuthenticationError("signature must be 64 bytes (hex or base58)")
    return raw


def verify_wallet_signature(wallet: str, signature: str, message: str) -> bool:
    """
    True when signature is wallet's ed25519 signature over message (UTF-8).
    Raises InvalidWalletError for a malformed address; a malformed signature is False.
    """
    pubkey = parse_wallet(wallet)
    try:
        sig = Signature.from_bytes(decode_signature(signature))
    except AuthenticationError as e:
        logger.info("wallet_auth_bad_signature", wallet=short_wallet(wallet), error=str(e))
        return False
    ok = sig.verify(pubkey, message.encode("utf-8"))
    logger.info("wallet_auth_checked", wallet=short_wallet(wallet), verified=ok)
    return ok
