"""
Pytest fixtures for TradeProof tests. Uses a temporary SQLite store and a fake
history provider so no test touches Helius.
"""

from __future__ import annotations

import pytest

from backend_tradeproof.swap_parser.models import (
    BUY,
    Instruction,
    RawTransaction,
    SwapEvent,
    TokenLeg,
    TokenTransfer,
)
from backend_tradeproof.swap_parser.token_registry import USDC_MINT, WRAPPED_SOL_MINT

VALID_WALLET = "9QCfNuQuxct1Xk9ytFYgxc5fThmTzL4pHQnSjjrVUrka"
JUPITER_PROGRAM = "JUP6LkbZbjS1jKKwapdHNy74zcZ3tLUZoi5QNyVTaV4"
POOL_ACCOUNT = "7F1WzVNQ1Qpurqxxdyv3UrFQR3uoNepULVW9A4bAJ5nZ"


class FakeHistoryProvider:
    """Returns a fixed transaction list and counts calls."""

    def __init__(self, transactions: list[RawTransaction] | None = None, error: Exception | None = None):
        self.transactions = transactions or []
        self.error = error
        self.calls: list[tuple[str, int]] = []

    def fetch_transactions(self, wallet: str, limit: int = 100) -> list[RawTransaction]:
        self.calls.append((wallet, limit))
        if self.error is not None:
            raise self.error
        return self.transactions[:limit]


@pytest.fixture
def make_swap_tx():
    """
    Factory for a DEX transaction where wallet sends `sent_raw` of `sent_mint`
    and receives `received_raw` of `received_mint`.
    """

    def _make(
        signature: str = "sig-1",
        timestamp: int = 1_700_000_000,
        sent_mint: str = WRAPPED_SOL_MINT,
        sent_raw: int = 1_000_000_000,
        received_mint: str = USDC_MINT,
        received_raw: int = 100_000_000,
        program_ids: tuple[str, ...] = (JUPITER_PROGRAM,),
        wallet: str = VALID_WALLET,
    ) -> RawTransaction:
        return RawTransaction(
            signature=signature,
            timestamp=timestamp,
            instructions=tuple(Instruction(program_id=p, accounts=(wallet, POOL_ACCOUNT)) for p in program_ids),
            token_transfers=(
                TokenTransfer(from_user_account=wallet, to_user_account=POOL_ACCOUNT, token_amount=sent_raw, mint=sent_mint),
                TokenTransfer(from_user_account=POOL_ACCOUNT, to_user_account=wallet, token_amount=received_raw, mint=received_mint),
            ),
        )

    return _make


@pytest.fixture
def make_swap():
    """Factory for SwapEvent values used by aggregator and report tests."""

    def _make(
        signature: str,
        timestamp: int,
        direction: str = BUY,
        *,
        in_mint: str = "TokenXMint1111111111111111111111111111111111",
        in_symbol: str = "TokenX",
        in_amount: float = 1.0,
        out_mint: str = USDC_MINT,
        out_symbol: str = "USDC",
        out_amount: float = 1.0,
        value_usd: float = 0.0,
    ) -> SwapEvent:
        return SwapEvent(
            signature=signature,
            timestamp=timestamp,
            direction=direction,
            token_in=TokenLeg(mint=in_mint, symbol=in_symbol, amount=in_amount, decimals=9),
            token_out=TokenLeg(mint=out_mint, symbol=out_symbol, amount=out_amount, decimals=6),
            value_usd=value_usd,
            exchange="Jupiter",
        )

    return _make


@pytest.fixture
def store(tmp_path):
    """Fresh TradeProofStore on a temporary SQLite file."""
    from backend_tradeproof.database.store import TradeProofStore

    s = TradeProofStore(f"sqlite:///{tmp_path / 'tradeproof.db'}")
    s.init_db()
    yield s
    s.dispose()


@pytest.fixture
def fake_provider():
    return FakeHistoryProvider()


@pytest.fixture
def client(store, fake_provider):
    """FastAPI TestClient with the temp store and fake provider injected."""
    from fastapi.testclient import TestClient

    from backend_tradeproof.api_server.server import create_app
    from backend_tradeproof.config.settings import Settings

    settings = Settings(
        helius_api_key="test-key",
        database_url=store.database_url,
        public_base_url="https://proof.example",
    )
    app = create_app(settings, store=store, provider=fake_provider)
    return TestClient(app)
