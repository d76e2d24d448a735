"""
Pytest tests for report building, commitment, verification, and display.
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from backend_tradeproof.analytics.models import AnalyticsSnapshot, AssetStat
from backend_tradeproof.reports.builder import build_report, create_value_range
from backend_tradeproof.reports.commitment import canonical_bytes, compute_commitment
from backend_tradeproof.reports.display import format_report_stats
from backend_tradeproof.reports.models import (
    REASON_COMMITMENT_MISMATCH,
    REASON_EXPIRED,
    REASON_OK,
    DisclosurePolicy,
    Report,
    ValueRange,
)
from backend_tradeproof.reports.verifier import is_report_expired, verify_report

NOW = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)
WALLET = "9QCfNuQuxct1Xk9ytFYgxc5fThmTzL4pHQnSjjrVUrka"


@pytest.fixture
def snapshot() -> AnalyticsSnapshot:
    return AnalyticsSnapshot(
        total_volume=1000.0,
        trade_count=20,
        win_rate=60.0,
        avg_trade_size=50.0,
        profit_loss=200.0,
        top_assets=tuple(
            AssetStat(mint=f"Mint{i}", symbol=f"T{i}", volume=100.0 - i, trade_count=7 - i) for i in range(7)
        ),
        trading_days=12,
        first_trade_timestamp=1_700_000_000,
        last_trade_timestamp=1_701_000_000,
    )


def full_policy(**overrides) -> DisclosurePolicy:
    values = {
        "title": "Q1 trading",
        "includeVolume": True,
        "includeTradeCount": True,
        "includeWinRate": True,
        "includeProfitLoss": True,
        "includeTopTokens": True,
    }
    values.update(overrides)
    return DisclosurePolicy(**values)


# --- Ranges ---


def test_create_value_range():
    r = create_value_range(1000.0, 5.0)
    assert (r.min, r.max) == pytest.approx((950.0, 1050.0))
    assert create_value_range(0.0, 5.0).is_zero
    assert create_value_range(10.0, 0.0) == ValueRange(min=10.0, max=10.0)
    assert create_value_range(10.0, 50.0).min == pytest.approx(5.0)


def test_disclosed_fields_are_ranged(snapshot):
    report = build_report(snapshot, full_policy(rangeVariation=10), WALLET, now=NOW)
    stats = report.stats
    assert (stats.total_volume_range.min, stats.total_volume_range.max) == pytest.approx((900.0, 1100.0))
    assert (stats.trade_count_range.min, stats.trade_count_range.max) == pytest.approx((18.0, 22.0))
    assert (stats.profit_loss_range.min, stats.profit_loss_range.max) == pytest.approx((180.0, 220.0))
    assert (stats.avg_trade_size_range.min, stats.avg_trade_size_range.max) == pytest.approx((45.0, 55.0))
    assert stats.win_rate == 60.0
    assert stats.trading_days == 12


def test_default_variation_is_five_percent(snapshot):
    report = build_report(snapshot, full_policy(), WALLET, now=NOW)
    assert report.stats.total_volume_range.min == pytest.approx(950.0)


def test_undisclosed_fields_are_zero_ranges(snapshot):
    policy = DisclosurePolicy(title="Nothing", includeAvgTradeSize=False)
    report = build_report(snapshot, policy, WALLET, now=NOW)
    stats = report.stats
    assert stats.total_volume_range.is_zero
    assert stats.trade_count_range.is_zero
    assert stats.profit_loss_range.is_zero
    assert stats.avg_trade_size_range.is_zero
    assert stats.win_rate == 0.0
    assert stats.top_tokens == []
    assert stats.trading_days == 12
    wire = report.to_wire()
    assert wire["stats"]["totalVolumeRange"] == {"min": 0.0, "max": 0.0}


def test_top_tokens_limited_and_stripped(snapshot):
    report = build_report(snapshot, full_policy(), WALLET, now=NOW)
    tokens = report.to_wire()["stats"]["topTokens"]
    assert len(tokens) == 5
    assert tokens[0] == {"symbol": "T0", "tradeCount": 7}


def test_period_derived_from_trading_days(snapshot):
    report = build_report(snapshot, full_policy(), WALLET, now=NOW)
    assert report.stats.period_end == "2024-03-01T12:00:00.000Z"
    assert report.stats.period_start == "2024-02-18T12:00:00.000Z"
    assert report.metadata.generated_at == "2024-03-01T12:00:00.000Z"


def test_expiry_defaults_to_thirty_days(snapshot):
    report = build_report(snapshot, full_policy(), WALLET, now=NOW)
    assert report.metadata.expires_at == "2024-03-31T12:00:00.000Z"
    report = build_report(snapshot, full_policy(expiresInDays=7), WALLET, now=NOW)
    assert report.metadata.expires_at == "2024-03-08T12:00:00.000Z"


# --- Identity ---


def test_identity_omitted_unless_revealed(snapshot):
    report = build_report(snapshot, full_policy(), WALLET, now=NOW)
    privacy = report.to_wire()["privacy"]
    assert privacy == {"identityRevealed": False}
    assert WALLET not in json.dumps(report.to_wire())


def test_identity_included_when_revealed(snapshot):
    report = build_report(snapshot, full_policy(revealWallet=True), WALLET, now=NOW)
    assert report.to_wire()["privacy"] == {"identityRevealed": True, "identity": WALLET}


# --- Commitment ---


def test_build_is_deterministic_with_fixed_clock_and_id(snapshot):
    a = build_report(snapshot, full_policy(), WALLET, now=NOW, report_id="abc123")
    b = build_report(snapshot, full_policy(), WALLET, now=NOW, report_id="abc123")
    assert a.proof.commitment == b.proof.commitment
    assert len(a.proof.commitment) == 64
    int(a.proof.commitment, 16)


def test_random_ids_differ(snapshot):
    a = build_report(snapshot, full_policy(), WALLET, now=NOW)
    b = build_report(snapshot, full_policy(), WALLET, now=NOW)
    assert a.metadata.id != b.metadata.id
    assert len(a.metadata.id) == 32
    assert a.proof.commitment != b.proof.commitment


def test_commitment_ignores_current_commitment_value(snapshot):
    report = build_report(snapshot, full_policy(), WALLET, now=NOW)
    assert compute_commitment(report) == report.proof.commitment
    blanked = report.model_copy(update={"proof": report.proof.model_copy(update={"commitment": ""})})
    assert compute_commitment(blanked) == report.proof.commitment


def test_canonical_bytes_stable_across_number_forms():
    assert canonical_bytes({"b": 3, "a": 1.0}) == canonical_bytes({"a": 1, "b": 3.0})
    assert canonical_bytes({"x": -0.0}) == canonical_bytes({"x": 0})
    assert canonical_bytes({"x": None, "y": True}) == canonical_bytes({"y": True})


# --- Verification ---


def test_fresh_report_verifies(snapshot):
    report = build_report(snapshot, full_policy(), WALLET)
    result = verify_report(report)
    assert (result.valid, result.expired, result.reason) == (True, False, REASON_OK)


def test_wire_round_trip_verifies(snapshot):
    report = build_report(snapshot, full_policy(revealWallet=True), WALLET)
    stored = json.loads(json.dumps(report.to_wire()))
    assert verify_report(stored).valid
    assert Report.from_wire(stored) == report


@pytest.mark.parametrize(
    "path, value",
    [
        (("stats", "totalVolumeRange", "max"), 5000.0),
        (("stats", "tradeCountRange", "min"), 1.0),
        (("stats", "profitLossRange", "max"), 99999.0),
        (("stats", "avgTradeSizeRange", "min"), 1.0),
        (("stats", "winRate"), 99.0),
        (("stats", "tradingDays"), 365),
        (("metadata", "title"), "Edited"),
        (("metadata", "expiresAt"), "2099-01-01T00:00:00.000Z"),
        (("privacy", "identityRevealed"), True),
    ],
)
def test_tampering_breaks_commitment(snapshot, path, value):
    wire = build_report(snapshot, full_policy(), WALLET).to_wire()
    target = wire
    for key in path[:-1]:
        target = target[key]
    target[path[-1]] = value
    result = verify_report(wire)
    assert result.valid is False
    assert result.expired is False
    assert result.reason == REASON_COMMITMENT_MISMATCH


def test_removed_top_token_breaks_commitment(snapshot):
    wire = build_report(snapshot, full_policy(), WALLET).to_wire()
    wire["stats"]["topTokens"].pop()
    assert not verify_report(wire).valid


def test_injected_identity_breaks_commitment(snapshot):
    wire = build_report(snapshot, full_policy(), WALLET).to_wire()
    wire["privacy"]["identity"] = WALLET
    assert not verify_report(wire).valid


def test_unparseable_report_is_invalid():
    result = verify_report({"metadata": {"title": "x"}})
    assert result.valid is False
    assert result.reason == REASON_COMMITMENT_MISMATCH


def test_expired_report_keeps_valid_commitment(snapshot):
    issued = datetime.now(timezone.utc) - timedelta(days=2)
    report = build_report(snapshot, full_policy(expiresInDays=1), WALLET, now=issued)
    result = verify_report(report)
    assert (result.valid, result.expired, result.reason) == (True, True, REASON_EXPIRED)


def test_expiry_checked_against_supplied_clock(snapshot):
    report = build_report(snapshot, full_policy(expiresInDays=1), WALLET, now=NOW)
    assert not is_report_expired(report, NOW + timedelta(hours=23))
    assert is_report_expired(report, NOW + timedelta(days=1, seconds=1))
    assert verify_report(report, now=NOW + timedelta(hours=1)).expired is False


def test_report_without_expiry_never_expires(snapshot):
    report = build_report(snapshot, full_policy(), WALLET, now=NOW)
    metadata = report.metadata.model_copy(update={"expires_at": None})
    unexpiring = report.model_copy(update={"metadata": metadata, "proof": report.proof.model_copy(update={"commitment": ""})})
    unexpiring = unexpiring.model_copy(
        update={"proof": unexpiring.proof.model_copy(update={"commitment": compute_commitment(unexpiring)})}
    )
    assert "expiresAt" not in unexpiring.to_wire()["metadata"]
    result = verify_report(unexpiring, now=NOW + timedelta(days=10_000))
    assert (result.valid, result.expired) == (True, False)


# --- Policy validation ---


@pytest.mark.parametrize(
    "field, value",
    [("title", ""), ("title", "x" * 201), ("expiresInDays", 0), ("expiresInDays", 366), ("rangeVariation", 51)],
)
def test_policy_rejects_out_of_range_values(field, value):
    values = {"title": "ok", field: value}
    with pytest.raises(ValidationError):
        DisclosurePolicy(**values)


def test_zero_variation_is_honored(snapshot):
    report = build_report(snapshot, full_policy(rangeVariation=0), WALLET, now=NOW)
    r = report.stats.total_volume_range
    assert (r.min, r.max) == (1000.0, 1000.0)


# --- Display ---


def test_display_marks_hidden_fields(snapshot):
    report = build_report(snapshot, DisclosurePolicy(title="t", includeTradeCount=True), WALLET, now=NOW)
    shown = format_report_stats(report.stats)
    assert shown["totalVolume"] == "Hidden"
    assert shown["winRate"] == "Hidden"
    assert shown["tradeCount"] == "19 - 21 trades"
    assert shown["avgTradeSize"] == "$47.5 - $52.5"
    assert shown["tradingDays"] == "12 days"


# --- Injected keys and exact numbers ---


@pytest.mark.parametrize(
    "section, key, value",
    [
        ("stats", "totalVolume", 9_999_999),
        ("privacy", "walletAddress", "ForgedWallet"),
        ("metadata", "issuer", "someone-else"),
    ],
)
def test_injected_keys_break_commitment(snapshot, section, key, value):
    wire = build_report(snapshot, full_policy(), WALLET).to_wire()
    wire[section][key] = value
    result = verify_report(wire)
    assert (result.valid, result.reason) == (False, REASON_COMMITMENT_MISMATCH)


def test_injected_top_level_key_breaks_commitment(snapshot):
    wire = build_report(snapshot, full_policy(), WALLET).to_wire()
    wire["extra"] = {"note": "added later"}
    assert not verify_report(wire).valid


def test_sub_precision_tampering_breaks_commitment(make_swap):
    from backend_tradeproof.analytics.aggregator import aggregate

    three = aggregate([make_swap(f"s{i}", 1_700_000_000 + i, value_usd=10.0) for i in range(3)])
    assert three.win_rate == pytest.approx(100 / 3)
    wire = build_report(three, full_policy(), WALLET).to_wire()
    assert verify_report(wire).valid
    wire["stats"]["winRate"] = 33.333333334
    assert not verify_report(wire).valid


def test_canonical_numbers_are_exact():
    assert canonical_bytes({"x": 0.1}) != canonical_bytes({"x": 0.1 + 1e-12})
    assert canonical_bytes({"x": 3}) == canonical_bytes({"x": 3.0})
