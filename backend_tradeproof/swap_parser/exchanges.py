"""
Known DEX programs and their exchange labels.

The allow-list is an immutable, priority-ordered table: when a transaction
touches several DEX programs (e.g. a Jupiter route through Raydium), the
first exchange in this order wins. Extra programs come from configuration
(TRADEPROOF_EXTRA_EXCHANGE_PROGRAMS) and rank after the built-ins.
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Iterable, Mapping

from backend_tradeproof.swap_parser.models import Instruction

UNKNOWN_EXCHANGE = "Unknown"


class Exchange(str, Enum):
    JUPITER = "Jupiter"
    RAYDIUM = "Raydium"
    RAYDIUM_CLMM = "Raydium CLMM"
    ORCA = "Orca"


# Mainnet program IDs, in priority order
EXCHANGE_PROGRAMS: Mapping[str, str] = MappingProxyType({
    "JUP6LkbZbjS1jKKwapdHNy74zcZ3tLUZoi5QNyVTaV4": Exchange.JUPITER.value,
    "675kPX9MHTjS2zt1qfr1NYHuzeLXfQM9H24wFSUt1Mp8": Exchange.RAYDIUM.value,  # AMM v4
    "CAMMCzo5YL8w4VFF8KVHrK22GGUsp5VTaW7grrKgrWqK": Exchange.RAYDIUM_CLMM.value,
    "whirLbMiicVdio4qvUfM5KAg6Ct8VwpYzGff3uctyCc": Exchange.ORCA.value,  # Whirlpool
})


class ExchangeTable:
    """Immutable program_id -> label table with a fixed priority order."""

    def __init__(self, extra_programs: Mapping[str, str] | None = None) -> None:
        programs = dict(EXCHANGE_PROGRAMS)
        for program_id, label in (extra_programs or {}).items():
            programs.setdefault(program_id, label)
        self._programs: Mapping[str, str] = MappingProxyType(programs)

    @property
    def programs(self) -> Mapping[str, str]:
        return self._programs

    def is_exchange_program(self, program_id: str) -> bool:
        return program_id in self._programs

    def touches_exchange(self, instructions: Iterable[Instruction]) -> bool:
        return any(ix.program_id in self._programs for ix in instructions)

    def identify(self, instructions: Iterable[Instruction]) -> str:
        """Label of the highest-priority exchange invoked by any instruction."""
        invoked = {ix.program_id for ix in instructions}
        for program_id, label in self._programs.items():
            if program_id in invoked:
                return label
        return UNKNOWN_EXCHANGE


DEFAULT_EXCHANGES = ExchangeTable()
