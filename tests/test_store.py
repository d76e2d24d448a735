"""
Pytest tests for TradeProofStore (users, analytics cache, reports) on temporary SQLite.
"""

from __future__ import annotations

import json

from backend_tradeproof.analytics.aggregator import aggregate
from backend_tradeproof.analytics.models import AnalyticsSnapshot
from backend_tradeproof.reports.builder import build_report
from backend_tradeproof.reports.models import DisclosurePolicy
from backend_tradeproof.reports.verifier import verify_report

VALID_WALLET = "9QCfNuQuxct1Xk9ytFYgxc5fThmTzL4pHQnSjjrVUrka"
VALID_WALLET_2 = "7F1WzVNQ1Qpurqxxdyv3UrFQR3uoNepULVW9A4bAJ5nZ"
NOW = 1_700_000_000


def test_upsert_user_creates_then_updates(store):
    user, is_new = store.upsert_user(VALID_WALLET)
    assert is_new is True
    assert user["wallet_address"] == VALID_WALLET
    assert user["settings"] == {}
    assert user["last_analysis_at"] is None

    again, is_new = store.upsert_user(VALID_WALLET)
    assert is_new is False
    assert again["id"] == user["id"]

    _, is_new = store.upsert_user(VALID_WALLET_2)
    assert is_new is True


def test_analytics_cache_round_trip(store, make_swap):
    snapshot = aggregate([make_swap("a", NOW, value_usd=10.0), make_swap("b", NOW + 60, value_usd=5.0)])
    store.cache_analytics(VALID_WALLET, snapshot, tx_count=7, last_signature="b", ttl_sec=3600, now=NOW)

    cached = store.get_cached_analytics(VALID_WALLET, now=NOW + 10)
    assert cached is not None
    restored, cached_at = cached
    assert cached_at == NOW
    assert restored == snapshot


def test_analytics_cache_expires(store):
    store.cache_analytics(VALID_WALLET, AnalyticsSnapshot(), tx_count=0, ttl_sec=60, now=NOW)
    assert store.get_cached_analytics(VALID_WALLET, now=NOW + 60) is not None
    assert store.get_cached_analytics(VALID_WALLET, now=NOW + 61) is None
    assert store.get_cached_analytics(VALID_WALLET_2, now=NOW) is None


def test_analytics_cache_replaces_row_and_stamps_user(store, make_swap):
    store.upsert_user(VALID_WALLET)
    store.cache_analytics(VALID_WALLET, AnalyticsSnapshot(), tx_count=0, now=NOW)
    newer = aggregate([make_swap("a", NOW, value_usd=3.0)])
    store.cache_analytics(VALID_WALLET, newer, tx_count=1, now=NOW + 5)

    restored, cached_at = store.get_cached_analytics(VALID_WALLET, now=NOW + 6)
    assert restored.trade_count == 1
    assert cached_at == NOW + 5
    user, _ = store.upsert_user(VALID_WALLET)
    assert user["last_analysis_at"] == NOW + 5


def test_save_and_get_report_preserves_commitment(store, make_swap):
    snapshot = aggregate([make_swap("a", NOW, value_usd=10.0)])
    report = build_report(snapshot, DisclosurePolicy(title="Stored", includeVolume=True), VALID_WALLET)

    report_id = store.save_report(VALID_WALLET, report)
    stored = store.get_report(report_id)
    assert stored is not None
    assert stored.user_id == VALID_WALLET
    assert stored.commitment_hash == report.proof.commitment
    assert stored.report_data == json.loads(json.dumps(report.to_wire()))
    assert stored.expires_at is not None
    assert stored.view_count == 0
    assert verify_report(stored.report_data).valid


def test_get_unknown_report_returns_none(store):
    assert store.get_report("00000000-0000-0000-0000-000000000000") is None


def test_increment_view_count(store):
    report = build_report(AnalyticsSnapshot(), DisclosurePolicy(title="Views"), VALID_WALLET)
    report_id = store.save_report(VALID_WALLET, report)
    assert store.increment_view_count(report_id) == 1
    assert store.increment_view_count(report_id) == 2
    assert store.get_report(report_id).view_count == 2
    assert store.increment_view_count("missing") == 0
