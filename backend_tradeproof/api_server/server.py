"""
FastAPI server: auth, analyze, report generate/verify.

Routes delegate to the pipeline (analytics_pipeline), the report builder and
verifier, and the store. Store and history provider live on app.state; they
are passed to create_app() or built lazily from Settings on first use.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from backend_tradeproof.analytics.analytics_pipeline import AnalysisService, HistoryProvider
from backend_tradeproof.analytics.models import AnalyticsSnapshot, AssetStat
from backend_tradeproof.auth.wallet_auth import parse_wallet, verify_wallet_signature
from backend_tradeproof.config.settings import Settings, get_settings
from backend_tradeproof.core.exceptions import HistoryProviderError, InvalidWalletError
from backend_tradeproof.database.store import TradeProofStore
from backend_tradeproof.ingestion.helius_client import HeliusHistoryProvider
from backend_tradeproof.reports.builder import build_report
from backend_tradeproof.reports.models import DisclosurePolicy, Report, format_iso
from backend_tradeproof.reports.verifier import verify_report
from backend_tradeproof.swap_parser.exchanges import ExchangeTable
from backend_tradeproof.tradeproof_logging import get_logger, short_wallet

logger = get_logger(__name__)


# -----------------------------------------------------------------------------
# Request / response models
# -----------------------------------------------------------------------------


class AuthRequest(BaseModel):
    """POST /api/auth body: wallet signs message; signature is hex (or base58)."""

    wallet: str = Field(..., min_length=32, max_length=44, description="Solana wallet (base58)")
    signature: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)


class AnalyzeRequest(BaseModel):
    wallet: str = Field(..., min_length=32, max_length=44, description="Solana wallet (base58)")
    limit: int = Field(100, ge=1, le=1000, description="Transactions to fetch")
    refresh: bool = Field(False, description="Bypass the analytics cache")


class TopTokenPayload(BaseModel):
    mint: str
    symbol: str
    volume: float
    trades: int


class AnalyticsPayload(BaseModel):
    """Analytics as returned by /api/analyze and echoed back by the client."""

    model_config = ConfigDict(populate_by_name=True)

    total_volume: float = Field(..., alias="totalVolume")
    trade_count: int = Field(..., alias="tradeCount")
    win_rate: float = Field(..., alias="winRate")
    profit_loss: float = Field(..., alias="profitLoss")
    avg_trade_size: float = Field(..., alias="avgTradeSize")
    trading_days: int = Field(..., alias="tradingDays")
    top_tokens: list[TopTokenPayload] = Field(default_factory=list, alias="topTokens")
    recent_trades: list[Any] = Field(default_factory=list, alias="recentTrades")

    def to_snapshot(self) -> AnalyticsSnapshot:
        # Recent trades are display-only and never reach a report.
        return AnalyticsSnapshot(
            total_volume=self.total_volume,
            trade_count=self.trade_count,
            win_rate=self.win_rate,
            avg_trade_size=self.avg_trade_size,
            profit_loss=self.profit_loss,
            top_assets=tuple(
                AssetStat(mint=t.mint, symbol=t.symbol, volume=t.volume, trade_count=t.trades)
                for t in self.top_tokens
            ),
            trading_days=self.trading_days,
        )


class GenerateReportRequest(BaseModel):
    wallet: str = Field(..., min_length=32, max_length=44)
    analytics: AnalyticsPayload
    request: DisclosurePolicy


class VerifyReportRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    report_id: UUID = Field(..., alias="reportId")


# -----------------------------------------------------------------------------
# Dependencies
# -----------------------------------------------------------------------------


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> TradeProofStore:
    """Dependency: the app's store, created and initialized on first use."""
    state = request.app.state
    if state.store is None:
        store = TradeProofStore(state.settings.database_url)
        store.init_db()
        state.store = store
    return state.store


def get_provider(request: Request) -> HistoryProvider:
    state = request.app.state
    if state.provider is None:
        if not state.settings.helius_api_key:
            raise HTTPException(status_code=500, detail="Helius API key not configured")
        state.provider = HeliusHistoryProvider.from_settings(state.settings)
    return state.provider


def get_analysis_service(
    request: Request,
    store: TradeProofStore = Depends(get_store),
    provider: HistoryProvider = Depends(get_provider),
) -> AnalysisService:
    settings: Settings = request.app.state.settings
    return AnalysisService(
        provider,
        store,
        exchanges=request.app.state.exchanges,
        cache_ttl_sec=settings.analytics_cache_ttl_sec,
        reconstruct_workers=settings.reconstruct_workers,
    )


def _utc_now_iso() -> str:
    return format_iso(datetime.now(timezone.utc))


# -----------------------------------------------------------------------------
# Routes
# -----------------------------------------------------------------------------

router = APIRouter(prefix="/api")


@router.post("/auth")
def authenticate(body: AuthRequest, store: TradeProofStore = Depends(get_store)) -> dict[str, Any]:
    """Verify a signed message for wallet and register the user on first sight."""
    try:
        verified = verify_wallet_signature(body.wallet, body.signature, body.message)
    except InvalidWalletError as e:
        raise HTTPException(status_code=400, detail="Invalid wallet address") from e
    if not verified:
        raise HTTPException(status_code=401, detail="Invalid signature")
    try:
        user, is_new = store.upsert_user(body.wallet.strip())
    except Exception as e:
        logger.exception("auth_user_upsert_failed", wallet=short_wallet(body.wallet), error=str(e))
        raise HTTPException(status_code=500, detail="Failed to create user") from e
    return {"success": True, "user": user, "isNewUser": is_new}


@router.post("/analyze")
def analyze(
    body: AnalyzeRequest,
    service: AnalysisService = Depends(get_analysis_service),
) -> dict[str, Any]:
    """Fetch, reconstruct, and aggregate a wallet's swaps (cached for the configured TTL)."""
    try:
        parse_wallet(body.wallet)
    except InvalidWalletError as e:
        raise HTTPException(status_code=400, detail="Invalid wallet address") from e
    try:
        result = service.analyze(body.wallet.strip(), limit=body.limit, refresh=body.refresh)
    except HistoryProviderError as e:
        logger.error("analyze_history_failed", wallet=short_wallet(body.wallet), error=str(e))
        raise HTTPException(status_code=502, detail="Failed to fetch transaction data") from e
    return {
        "analytics": result.snapshot.to_dict(),
        "cached": result.cached,
        "analyzedAt": result.analyzed_at,
    }


@router.post("/report/generate")
def generate_report(
    body: GenerateReportRequest,
    request: Request,
    store: TradeProofStore = Depends(get_store),
) -> dict[str, Any]:
    """Issue a committed report from client-held analytics and store it."""
    report = build_report(body.analytics.to_snapshot(), body.request, body.wallet.strip())
    try:
        report_id = store.save_report(body.wallet.strip(), report)
    except Exception as e:
        logger.exception("report_store_failed", wallet=short_wallet(body.wallet), error=str(e))
        raise HTTPException(status_code=500, detail="Failed to store report") from e
    base_url = get_app_settings(request).public_base_url.rstrip("/")
    return {
        "report": report.to_wire(),
        "reportId": report_id,
        "shareUrl": f"{base_url}/report/{report_id}",
    }


@router.post("/report/verify")
def verify_stored_report(
    body: VerifyReportRequest,
    store: TradeProofStore = Depends(get_store),
) -> JSONResponse:
    """
    Re-verify a stored report. 200 valid (view counted), 404 unknown id,
    400 commitment mismatch, 410 expired.
    """
    report_id = str(body.report_id)
    stored = store.get_report(report_id)
    if stored is None:
        return JSONResponse(
            status_code=404,
            content={"valid": False, "expired": False, "report": None,
                     "verifiedAt": _utc_now_iso(), "message": "Report not found"},
        )

    result = verify_report(stored.report_data)
    if not result.valid:
        return JSONResponse(
            status_code=400,
            content={"valid": False, "expired": False, "report": None,
                     "verifiedAt": _utc_now_iso(), "message": "Report commitment verification failed"},
        )
    served = Report.from_wire(stored.report_data).to_wire()
    if result.expired:
        return JSONResponse(
            status_code=410,
            content={"valid": False, "expired": True, "report": served,
                     "verifiedAt": _utc_now_iso(), "message": "Report has expired"},
        )

    views = store.increment_view_count(report_id)
    logger.info("report_verified", report_id=report_id, view_count=views)
    return JSONResponse(
        status_code=200,
        content={"valid": True, "expired": False, "report": served,
                 "verifiedAt": _utc_now_iso(), "message": "Report verified successfully"},
    )


# -----------------------------------------------------------------------------
# App factory
# -----------------------------------------------------------------------------


def create_app(
    settings: Settings | None = None,
    *,
    store: TradeProofStore | None = None,
    provider: HistoryProvider | None = None,
) -> FastAPI:
    """Build the ASGI app with explicitly owned store and provider handles."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("api_starting", database=settings.database_url.split("?")[0].split("//")[-1])
        yield
        if app.state.store is not None:
            app.state.store.dispose()
        logger.info("api_stopped")

    app = FastAPI(
        title="Backend TradeProof API",
        description="Wallet swap analytics and verifiable privacy reports.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store
    app.state.provider = provider
    app.state.exchanges = ExchangeTable(settings.extra_exchange_programs)
    app.include_router(router)

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.exception_handler(HTTPException)
    def http_exception_handler(request: Any, exc: HTTPException) -> JSONResponse:
        """Consistent JSON error response for HTTPException."""
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    return app
