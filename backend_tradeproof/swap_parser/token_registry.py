"""
Token registry: static mint -> symbol/decimals lookup.

Lookup is total and deterministic (no RPC, no clock): unknown mints get a
synthesized entry so downstream commitments stay reproducible.
"""

from __future__ import annotations

from dataclasses import dataclass

WRAPPED_SOL_MINT = "So11111111111111111111111111111111111111112"
USDC_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
USDT_MINT = "Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB"
MSOL_MINT = "mSoLzYCxHdYgdzU16g5QSh3i5K3z3KZK7ytfqcJm7So"
JUP_MINT = "JUPyiwrYJFskUPiHa7hkeR8VUtAeFoSYbKedZNsDvCN"

NATIVE_SYMBOL = "SOL"
STABLECOIN_SYMBOLS = frozenset({"USDC", "USDT", "DAI"})

UNKNOWN_TOKEN_DECIMALS = 9
UNKNOWN_TOKEN_NAME = "Unknown Token"


@dataclass(frozen=True)
class AssetInfo:
    symbol: str
    decimals: int
    name: str


KNOWN_TOKENS: dict[str, AssetInfo] = {
    WRAPPED_SOL_MINT: AssetInfo(symbol="SOL", decimals=9, name="Solana"),
    USDC_MINT: AssetInfo(symbol="USDC", decimals=6, name="USD Coin"),
    USDT_MINT: AssetInfo(symbol="USDT", decimals=6, name="Tether USD"),
    MSOL_MINT: AssetInfo(symbol="mSOL", decimals=9, name="Marinade SOL"),
    JUP_MINT: AssetInfo(symbol="JUP", decimals=6, name="Jupiter"),
}


def lookup(mint: str) -> AssetInfo:
    """Return metadata for a mint; unknown mints get the first 4 chars uppercased, 9 decimals."""
    info = KNOWN_TOKENS.get(mint)
    if info is not None:
        return info
    return AssetInfo(
        symbol=mint[:4].upper(),
        decimals=UNKNOWN_TOKEN_DECIMALS,
        name=UNKNOWN_TOKEN_NAME,
    )


def is_native(symbol: str) -> bool:
    return symbol == NATIVE_SYMBOL


def is_stablecoin(symbol: str) -> bool:
    return symbol in STABLECOIN_SYMBOLS
