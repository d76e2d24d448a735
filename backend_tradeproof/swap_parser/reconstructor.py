"""
Swap reconstructor: raw Helius transactions to normalized swap events.

Purely structural: one transaction in, at most one SwapEvent out. A swap is
approximated as a two-party exchange between the first transfer the wallet
sent and the first transfer it received; multi-hop routes collapse into that
pair. USD value is an estimate (stablecoin face value, or SOL at a fixed
placeholder price); there is no price oracle.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Iterable

from backend_tradeproof.swap_parser import token_registry
from backend_tradeproof.swap_parser.exchanges import DEFAULT_EXCHANGES, ExchangeTable
from backend_tradeproof.swap_parser.models import (
    BUY,
    SELL,
    RawTransaction,
    SwapEvent,
    TokenLeg,
    TokenTransfer,
)
from backend_tradeproof.tradeproof_logging import get_logger, short_wallet

logger = get_logger(__name__)

# Placeholder SOL price used when the priced leg is SOL.
SOL_PRICE_USD_ESTIMATE = 100.0

MIN_WALLET_TRANSFERS = 2


def _to_leg(transfer: TokenTransfer) -> TokenLeg:
    info = token_registry.lookup(transfer.mint)
    return TokenLeg(
        mint=transfer.mint,
        symbol=info.symbol,
        amount=transfer.token_amount / (10 ** info.decimals),
        decimals=info.decimals,
    )


def _usd_value(leg: TokenLeg) -> float:
    if token_registry.is_stablecoin(leg.symbol):
        return leg.amount
    return leg.amount * SOL_PRICE_USD_ESTIMATE


def _is_priced(leg: TokenLeg) -> bool:
    return token_registry.is_native(leg.symbol) or token_registry.is_stablecoin(leg.symbol)


def _classify(sent: TokenLeg, received: TokenLeg) -> tuple[str, float]:
    """
    Return (direction, value_usd).
    Paying with SOL/stablecoin is a buy; receiving SOL/stablecoin is a sell.
    Token-to-token swaps default to a zero-valued buy.
    """
    if _is_priced(sent):
        return BUY, _usd_value(sent)
    if _is_priced(received):
        return SELL, _usd_value(received)
    return BUY, 0.0


def _reconstruct(tx: RawTransaction, wallet: str, exchanges: ExchangeTable) -> SwapEvent | None:
    if not exchanges.touches_exchange(tx.instructions):
        return None

    wallet_transfers = [
        t for t in tx.token_transfers
        if t.from_user_account == wallet or t.to_user_account == wallet
    ]
    if len(wallet_transfers) < MIN_WALLET_TRANSFERS:
        return None

    sent = next((t for t in wallet_transfers if t.from_user_account == wallet), None)
    received = next((t for t in wallet_transfers if t.to_user_account == wallet), None)
    if sent is None or received is None:
        return None

    token_out = _to_leg(sent)
    token_in = _to_leg(received)
    direction, value_usd = _classify(token_out, token_in)

    return SwapEvent(
        signature=tx.signature,
        timestamp=int(tx.timestamp),
        direction=direction,
        token_in=token_in,
        token_out=token_out,
        value_usd=max(0.0, value_usd),
        exchange=exchanges.identify(tx.instructions),
    )


def reconstruct(
    tx: RawTransaction,
    wallet: str,
    exchanges: ExchangeTable | None = None,
) -> SwapEvent | None:
    """
    Reconstruct one swap for wallet from tx, or None.

    None when no known DEX program is invoked, when the wallet has fewer than two
    transfers, when either leg is missing, or when the transaction is malformed.
    Never raises for bad transaction data.
    """
    try:
        return _reconstruct(tx, wallet, exchanges or DEFAULT_EXCHANGES)
    except Exception as e:
        logger.debug(
            "swap_reconstruct_skipped",
            signature=getattr(tx, "signature", None),
            error=str(e),
        )
        return None


def reconstruct_swaps(
    transactions: Iterable[RawTransaction],
    wallet: str,
    *,
    exchanges: ExchangeTable | None = None,
    max_workers: int | None = None,
) -> list[SwapEvent]:
    """
    Reconstruct swaps for a batch of transactions.

    Transactions are independent; with max_workers > 1 they are processed on a
    thread pool. Output keeps one event per signature (first occurrence) and is
    sorted by timestamp ascending, so it does not depend on worker scheduling.
    """
    txs = list(transactions)
    table = exchanges or DEFAULT_EXCHANGES
    if max_workers and max_workers > 1 and len(txs) > 1:
        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="reconstruct") as pool:
            results = list(pool.map(lambda tx: reconstruct(tx, wallet, table), txs))
    else:
        results = [reconstruct(tx, wallet, table) for tx in txs]

    seen: set[str] = set()
    swaps: list[SwapEvent] = []
    for swap in results:
        if swap is None or swap.signature in seen:
            continue
        seen.add(swap.signature)
        swaps.append(swap)
    swaps.sort(key=lambda s: s.timestamp)

    logger.info(
        "swaps_reconstructed",
        wallet=short_wallet(wallet),
        tx_count=len(txs),
        swap_count=len(swaps),
    )
    return swaps
