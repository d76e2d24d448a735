"""
Report verifier: recompute the commitment and check expiration.

Outcomes are values, never exceptions:
- commitment mismatch -> valid=False (contents changed after issue);
- commitment holds, expiresAt passed -> valid=True, expired=True;
- otherwise valid=True, expired=False.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError

from backend_tradeproof.reports.commitment import compute_commitment
from backend_tradeproof.reports.models import (
    REASON_COMMITMENT_MISMATCH,
    REASON_EXPIRED,
    REASON_OK,
    Report,
    VerificationResult,
    parse_iso,
)
from backend_tradeproof.tradeproof_logging import get_logger

logger = get_logger(__name__)


def is_report_expired(report: Report, now: datetime | None = None) -> bool:
    """True when expiresAt is set and earlier than now. No expiresAt never expires."""
    if not report.metadata.expires_at:
        return False
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return parse_iso(report.metadata.expires_at) < now


def verify_commitment(report: Report, wire: dict[str, Any] | None = None) -> bool:
    """Recompute over wire when given (the bytes as stored), else over report."""
    return compute_commitment(wire if wire is not None else report) == report.proof.commitment


def verify_report(
    report: Report | dict[str, Any],
    *,
    now: datetime | None = None,
) -> VerificationResult:
    """Check a report (model or stored wire dict) for integrity, then expiration."""
    wire: dict[str, Any] | None = None
    if not isinstance(report, Report):
        wire = report
        try:
            report = Report.from_wire(wire)
        except ValidationError as e:
            logger.warning("report_verify_unparseable", error_count=e.error_count())
            return VerificationResult(valid=False, expired=False, reason=REASON_COMMITMENT_MISMATCH)

    if not verify_commitment(report, wire):
        logger.warning("report_commitment_mismatch", report_id=report.metadata.id)
        return VerificationResult(valid=False, expired=False, reason=REASON_COMMITMENT_MISMATCH)

    try:
        expired = is_report_expired(report, now)
    except ValueError:
        # Commitment covers expiresAt, so an unparseable value was issued that way.
        logger.warning("report_expiry_unparseable", report_id=report.metadata.id)
        expired = False
    if expired:
        logger.info("report_expired", report_id=report.metadata.id)
        return VerificationResult(valid=True, expired=True, reason=REASON_EXPIRED)
    return VerificationResult(valid=True, expired=False, reason=REASON_OK)
