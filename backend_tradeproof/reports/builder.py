"""
Report builder: analytics snapshot + disclosure policy -> committed Report.

Disclosed numeric fields are published as [value - v%, value + v%] ranges
(lower bound clamped at 0); undisclosed ones as [0, 0]. The clock is read
once per build, so generatedAt, expiresAt and the period bounds agree.
"""

from __future__ import annotations

import secrets
from datetime import datetime, timedelta, timezone

from backend_tradeproof.analytics.models import AnalyticsSnapshot
from backend_tradeproof.reports.commitment import compute_commitment
from backend_tradeproof.reports.models import (
    DEFAULT_EXPIRES_IN_DAYS,
    HIDDEN_RANGE,
    REPORT_VERSION,
    DisclosurePolicy,
    Report,
    ReportMetadata,
    ReportPrivacy,
    ReportProof,
    ReportStats,
    TopAssetEntry,
    ValueRange,
    format_iso,
)
from backend_tradeproof.tradeproof_logging import get_logger

logger = get_logger(__name__)

REPORT_ID_BYTES = 16
TOP_ASSETS_LIMIT = 5


def create_value_range(value: float, variation_percent: float = 5.0) -> ValueRange:
    variation = value * (variation_percent / 100)
    return ValueRange(min=max(0.0, value - variation), max=value + variation)


def _range_if(disclosed: bool, value: float, variation_percent: float) -> ValueRange:
    return create_value_range(value, variation_percent) if disclosed else HIDDEN_RANGE


def build_report_stats(
    snapshot: AnalyticsSnapshot,
    policy: DisclosurePolicy,
    now: datetime,
) -> ReportStats:
    """
    Project a snapshot through the policy.

    Top assets keep only symbol and trade count. The period is
    [now - trading_days, now], not the snapshot's actual trade timestamps.
    """
    variation = policy.variation_percent
    period_start = now - timedelta(days=snapshot.trading_days)
    top_tokens = (
        [
            TopAssetEntry(symbol=a.symbol, trade_count=a.trade_count)
            for a in snapshot.top_assets[:TOP_ASSETS_LIMIT]
        ]
        if policy.include_top_assets
        else []
    )
    return ReportStats(
        total_volume_range=_range_if(policy.include_volume, snapshot.total_volume, variation),
        trade_count_range=_range_if(policy.include_trade_count, snapshot.trade_count, variation),
        win_rate=snapshot.win_rate if policy.include_win_rate else 0.0,
        profit_loss_range=_range_if(policy.include_profit_loss, snapshot.profit_loss, variation),
        trading_days=snapshot.trading_days,
        avg_trade_size_range=_range_if(policy.include_avg_trade_size, snapshot.avg_trade_size, variation),
        top_tokens=top_tokens,
        period_start=format_iso(period_start),
        period_end=format_iso(now),
    )


def build_report(
    snapshot: AnalyticsSnapshot,
    policy: DisclosurePolicy,
    identity: str | None,
    *,
    now: datetime | None = None,
    report_id: str | None = None,
) -> Report:
    """
    Build a report and set its commitment.

    The report is first assembled with an empty commitment, hashed through the
    shared canonical encoding, and the digest stored in proof.commitment.
    identity is kept only when policy.reveal_identity is set.
    """
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    expires_at = now + timedelta(days=policy.expires_in_days or DEFAULT_EXPIRES_IN_DAYS)

    draft = Report(
        metadata=ReportMetadata(
            id=report_id or secrets.token_hex(REPORT_ID_BYTES),
            title=policy.title,
            description=policy.description,
            generated_at=format_iso(now),
            expires_at=format_iso(expires_at),
            version=REPORT_VERSION,
        ),
        stats=build_report_stats(snapshot, policy, now),
        proof=ReportProof(commitment=""),
        privacy=ReportPrivacy(
            identity_revealed=policy.reveal_identity,
            identity=identity if policy.reveal_identity else None,
        ),
    )
    report = draft.model_copy(update={"proof": ReportProof(commitment=compute_commitment(draft))})
    logger.info(
        "report_built",
        report_id=report.metadata.id,
        identity_revealed=policy.reveal_identity,
        expires_at=report.metadata.expires_at,
    )
    return report
