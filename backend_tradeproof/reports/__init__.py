"""
Privacy reports: range-obfuscated stats bound by a SHA-256 commitment.

build_report issues a report from an analytics snapshot and a disclosure
policy; verify_report re-derives the commitment and checks expiration.
"""

from backend_tradeproof.reports.builder import build_report, create_value_range
from backend_tradeproof.reports.commitment import canonical_bytes, compute_commitment
from backend_tradeproof.reports.models import (
    DisclosurePolicy,
    Report,
    ReportStats,
    ValueRange,
    VerificationResult,
)
from backend_tradeproof.reports.verifier import verify_report

__all__ = [
    "DisclosurePolicy",
    "Report",
    "ReportStats",
    "ValueRange",
    "VerificationResult",
    "build_report",
    "canonical_bytes",
    "compute_commitment",
    "create_value_range",
    "verify_report",
]
