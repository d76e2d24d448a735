"""
Swap reconstruction package.

Turns raw Helius Enhanced Transactions into normalized swap events using the
static token registry and the DEX program allow-list.
"""

from backend_tradeproof.swap_parser.models import (
    Instruction,
    RawTransaction,
    SwapEvent,
    TokenLeg,
    TokenTransfer,
)
from backend_tradeproof.swap_parser.reconstructor import reconstruct, reconstruct_swaps

__all__ = [
    "Instruction",
    "RawTransaction",
    "SwapEvent",
    "TokenLeg",
    "TokenTransfer",
    "reconstruct",
    "reconstruct_swaps",
]
