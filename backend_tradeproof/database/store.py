"""
TradeProof persistence: SQLAlchemy-backed users, analytics cache, and reports.

Uses the given SQLAlchemy URL (PostgreSQL in production, SQLite locally and in
tests). The store owns its engine and session factory; callers construct one
and pass it where needed instead of reaching for a module-level client.

Reports are stored as their wire JSON so any process can re-verify the exact
bytes that were committed.
"""

from __future__ import annotations

import json
import time
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator

from sqlalchemy import Column, Integer, String, Text, create_engine, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from backend_tradeproof.analytics.models import AnalyticsSnapshot
from backend_tradeproof.reports.models import Report, parse_iso
from backend_tradeproof.tradeproof_logging import get_logger, short_wallet

logger = get_logger(__name__)

Base = declarative_base()

DEFAULT_CACHE_TTL_SEC = 3600

# -----------------------------------------------------------------------------
# SQLAlchemy models
# -----------------------------------------------------------------------------


class User(Base):
    """Wallet that has authenticated at least once."""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True)
    wallet_address = Column(String(64), unique=True, nullable=False, index=True)
    created_at = Column(Integer, nullable=False)  # Unix timestamp
    updated_at = Column(Integer, nullable=False)
    last_analysis_at = Column(Integer, nullable=True)
    settings = Column(Text, nullable=True)  # JSON object

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "wallet_address": self.wallet_address,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "last_analysis_at": self.last_analysis_at,
            "settings": json.loads(self.settings) if self.settings else {},
        }


class AnalyticsCache(Base):
    """Latest analytics snapshot per wallet, valid until valid_until."""

    __tablename__ = "analytics_cache"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), unique=True, nullable=False, index=True)  # wallet address
    cached_at = Column(Integer, nullable=False)
    valid_until = Column(Integer, nullable=False, index=True)
    tx_count = Column(Integer, nullable=False, default=0)
    last_tx_signature = Column(String(128), nullable=False, default="")
    analytics_data = Column(Text, nullable=False)  # AnalyticsSnapshot.to_dict() JSON


class StoredReportRow(Base):
    """Issued report; report_data is the wire JSON the commitment was computed over."""

    __tablename__ = "reports"

    id = Column(String(36), primary_key=True)
    user_id = Column(String(64), nullable=False, index=True)
    report_data = Column(Text, nullable=False)
    commitment_hash = Column(String(64), nullable=False, index=True)
    created_at = Column(Integer, nullable=False)
    expires_at = Column(Integer, nullable=True, index=True)
    view_count = Column(Integer, nullable=False, default=0)


@dataclass(frozen=True)
class StoredReport:
    id: str
    user_id: str
    report_data: dict[str, Any]
    commitment_hash: str
    created_at: int
    expires_at: int | None
    view_count: int


# -----------------------------------------------------------------------------
# Store
# -----------------------------------------------------------------------------


class TradeProofStore:
    """Persistence handle: one engine and session factory per instance."""

    def __init__(self, database_url: str) -> None:
        connect_args: dict[str, Any] = {}
        if database_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.database_url = database_url
        self._engine = create_engine(database_url, connect_args=connect_args, pool_pre_ping=True)
        self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self._engine)
        logger.info("tradeproof_store_engine", url=database_url.split("?")[0].split("//")[-1])

    @contextmanager
    def _session_scope(self) -> Iterator[Session]:
        """Single session. Commits on success, rolls back on error."""
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def init_db(self) -> None:
        """Create tables if they do not exist. Safe to call on every startup."""
        try:
            Base.metadata.create_all(bind=self._engine)
            logger.info("tradeproof_store_init_db")
        except Exception as e:
            logger.exception("tradeproof_store_init_db_failed", error=str(e))
            raise

    def dispose(self) -> None:
        self._engine.dispose()

    # --- users ---------------------------------------------------------------

    def upsert_user(self, wallet: str) -> tuple[dict[str, Any], bool]:
        """
        Return (user, is_new). Existing users get updated_at bumped.
        A concurrent insert of the same wallet falls back to the existing row.
        """
        now = int(time.time())
        try:
            with self._session_scope() as session:
                row = session.query(User).filter(User.wallet_address == wallet).first()
                if row is not None:
                    row.updated_at = now
                    session.flush()
                    return row.to_dict(), False
                row = User(
                    id=str(uuid.uuid4()),
                    wallet_address=wallet,
                    created_at=now,
                    updated_at=now,
                    settings="{}",
                )
                session.add(row)
                session.flush()
                logger.info("user_created", wallet=short_wallet(wallet))
                return row.to_dict(), True
        except IntegrityError:
            logger.info("user_already_exists", wallet=short_wallet(wallet))
            return self.upsert_user(wallet)
        except Exception as e:
            logger.exception("user_upsert_failed", wallet=short_wallet(wallet), error=str(e))
            raise

    # --- analytics cache -----------------------------------------------------

    def get_cached_analytics(
        self,
        wallet: str,
        now: int | None = None,
    ) -> tuple[AnalyticsSnapshot, int] | None:
        """Return (snapshot, cached_at) if a cache row is still valid, else None."""
        now = int(time.time()) if now is None else now
        try:
            with self._session_scope() as session:
                row = (
                    session.query(AnalyticsCache)
                    .filter(AnalyticsCache.user_id == wallet, AnalyticsCache.valid_until >= now)
                    .first()
                )
                if row is None:
                    return None
                return AnalyticsSnapshot.from_dict(json.loads(row.analytics_data)), row.cached_at
        except Exception as e:
            logger.exception("analytics_cache_read_failed", wallet=short_wallet(wallet), error=str(e))
            raise

    def cache_analytics(
        self,
        wallet: str,
        snapshot: AnalyticsSnapshot,
        *,
        tx_count: int,
        last_signature: str = "",
        ttl_sec: int = DEFAULT_CACHE_TTL_SEC,
        now: int | None = None,
    ) -> None:
        """Insert or replace the wallet's cache row and stamp the user's last analysis."""
        now = int(time.time()) if now is None else now
        data = json.dumps(snapshot.to_dict())
        try:
            with self._session_scope() as session:
                row = session.query(AnalyticsCache).filter(AnalyticsCache.user_id == wallet).first()
                if row is None:
                    row = AnalyticsCache(user_id=wallet)
                    session.add(row)
                row.cached_at = now
                row.valid_until = now + ttl_sec
                row.tx_count = tx_count
                row.last_tx_signature = last_signature
                row.analytics_data = data
                session.query(User).filter(User.wallet_address == wallet).update(
                    {"last_analysis_at": now}
                )
            logger.debug("analytics_cached", wallet=short_wallet(wallet), ttl_sec=ttl_sec)
        except Exception as e:
            logger.exception("analytics_cache_write_failed", wallet=short_wallet(wallet), error=str(e))
            raise

    # --- reports -------------------------------------------------------------

    def save_report(self, wallet: str, report: Report) -> str:
        """Persist an issued report; returns the new report id (UUID)."""
        report_id = str(uuid.uuid4())
        expires_at = (
            int(parse_iso(report.metadata.expires_at).timestamp())
            if report.metadata.expires_at
            else None
        )
        try:
            with self._session_scope() as session:
                session.add(
                    StoredReportRow(
                        id=report_id,
                        user_id=wallet,
                        report_data=json.dumps(report.to_wire()),
                        commitment_hash=report.proof.commitment,
                        created_at=int(time.time()),
                        expires_at=expires_at,
                        view_count=0,
                    )
                )
            logger.info("report_saved", report_id=report_id, wallet=short_wallet(wallet))
            return report_id
        except Exception as e:
            logger.exception("report_save_failed", wallet=short_wallet(wallet), error=str(e))
            raise

    def get_report(self, report_id: str) -> StoredReport | None:
        try:
            with self._session_scope() as session:
                row = session.query(StoredReportRow).filter(StoredReportRow.id == report_id).first()
                if row is None:
                    return None
                return StoredReport(
                    id=row.id,
                    user_id=row.user_id,
                    report_data=json.loads(row.report_data),
                    commitment_hash=row.commitment_hash,
                    created_at=row.created_at,
                    expires_at=row.expires_at,
                    view_count=row.view_count,
                )
        except Exception as e:
            logger.exception("report_read_failed", report_id=report_id, error=str(e))
            raise

    def increment_view_count(self, report_id: str) -> int:
        """Atomically add one view; returns the new count (0 if the report does not exist)."""
        try:
            with self._session_scope() as session:
                session.execute(
                    update(StoredReportRow)
                    .where(StoredReportRow.id == report_id)
                    .values(view_count=StoredReportRow.view_count + 1)
                )
                row = session.query(StoredReportRow).filter(StoredReportRow.id == report_id).first()
                return row.view_count if row else 0
        except Exception as e:
            logger.exception("report_view_count_failed", report_id=report_id, error=str(e))
            raise
