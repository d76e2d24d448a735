"""
Data models for swap reconstruction input and output.

RawTransaction mirrors the Helius Enhanced Transactions payload (only the
fields the reconstructor reads); SwapEvent is the normalized swap consumed
by the analytics aggregator.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Literal

from backend_tradeproof.swap_parser import token_registry

Direction = Literal["buy", "sell"]

BUY: Direction = "buy"
SELL: Direction = "sell"


def to_base_units(ui_amount: Any, decimals: int) -> int:
    """UI-scaled amount -> integer base units, rounded half-even. Raises ValueError on non-numbers."""
    try:
        value = Decimal(str(ui_amount))
    except InvalidOperation as e:
        raise ValueError(f"invalid token amount: {ui_amount!r}") from e
    if not value.is_finite():
        raise ValueError(f"invalid token amount: {ui_amount!r}")
    return int(value.scaleb(decimals).to_integral_value())


@dataclass(frozen=True)
class Instruction:
    """One top-level instruction: invoked program and involved accounts."""

    program_id: str
    accounts: tuple[str, ...] = ()
    data: str = ""

    @classmethod
    def from_helius(cls, item: dict[str, Any]) -> "Instruction":
        return cls(
            program_id=str(item["programId"]),
            accounts=tuple(str(a) for a in item.get("accounts") or ()),
            data=str(item.get("data") or ""),
        )


@dataclass(frozen=True)
class TokenTransfer:
    """SPL token movement between two user accounts, amount in raw base units."""

    from_user_account: str
    to_user_account: str
    token_amount: int
    mint: str

    @classmethod
    def from_helius(cls, item: dict[str, Any]) -> "TokenTransfer":
        """
        Build from a Helius tokenTransfers item.

        rawTokenAmount.tokenAmount is already in base units. Otherwise tokenAmount
        is UI-scaled (e.g. 2.75 USDC) and is converted back to base units with
        the registry decimals for the mint.
        """
        mint = str(item["mint"])
        raw = item.get("rawTokenAmount")
        if isinstance(raw, dict) and raw.get("tokenAmount") is not None:
            amount = int(raw["tokenAmount"])
        else:
            amount = to_base_units(item["tokenAmount"], token_registry.lookup(mint).decimals)
        return cls(
            from_user_account=str(item.get("fromUserAccount") or ""),
            to_user_account=str(item.get("toUserAccount") or ""),
            token_amount=amount,
            mint=mint,
        )


@dataclass(frozen=True)
class RawTransaction:
    """
    A fetched on-chain transaction, read-only to the core.

    timestamp is Unix seconds. Instruction and transfer order is preserved
    from the provider; the reconstructor relies on transfer order.
    """

    signature: str
    timestamp: int
    instructions: tuple[Instruction, ...] = ()
    token_transfers: tuple[TokenTransfer, ...] = ()

    @classmethod
    def from_helius(cls, item: dict[str, Any]) -> "RawTransaction":
        """Build from one Enhanced Transactions API item. Raises KeyError/ValueError on malformed input."""
        return cls(
            signature=str(item["signature"]),
            timestamp=int(item.get("timestamp") or 0),
            instructions=tuple(Instruction.from_helius(ix) for ix in item.get("instructions") or ()),
            token_transfers=tuple(TokenTransfer.from_helius(t) for t in item.get("tokenTransfers") or ()),
        )


@dataclass(frozen=True)
class TokenLeg:
    """One side of a swap; amount is scaled by decimals."""

    mint: str
    symbol: str
    amount: float
    decimals: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "mint": self.mint,
            "symbol": self.symbol,
            "amount": self.amount,
            "decimals": self.decimals,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TokenLeg":
        return cls(
            mint=str(data["mint"]),
            symbol=str(data["symbol"]),
            amount=float(data["amount"]),
            decimals=int(data["decimals"]),
        )


@dataclass(frozen=True)
class SwapEvent:
    """
    A reconstructed swap. token_in is the asset the wallet received,
    token_out the asset it sent. value_usd is a non-negative estimate.
    """

    signature: str
    timestamp: int
    direction: Direction
    token_in: TokenLeg
    token_out: TokenLeg
    value_usd: float
    exchange: str

    @property
    def acquired(self) -> TokenLeg:
        """Asset used for top-asset ranking: token_in on buy, token_out on sell."""
        return self.token_in if self.direction == BUY else self.token_out

    def to_dict(self) -> dict[str, Any]:
        """Wire form (camelCase keys), as served by the analyze endpoint."""
        return {
            "signature": self.signature,
            "timestamp": self.timestamp,
            "type": self.direction,
            "tokenIn": self.token_in.to_dict(),
            "tokenOut": self.token_out.to_dict(),
            "valueUsd": self.value_usd,
            "dex": self.exchange,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SwapEvent":
        direction = data["type"]
        if direction not in (BUY, SELL):
            raise ValueError(f"unknown swap direction: {direction!r}")
        return cls(
            signature=str(data["signature"]),
            timestamp=int(data["timestamp"]),
            direction=direction,
            token_in=TokenLeg.from_dict(data["tokenIn"]),
            token_out=TokenLeg.from_dict(data["tokenOut"]),
            value_usd=float(data["valueUsd"]),
            exchange=str(data.get("dex") or "Unknown"),
        )
