"""
Report models: disclosure policy, privacy-ranged stats, and the committed report.

Wire keys are camelCase and optional fields that are unset are omitted from the
wire form entirely (to_wire uses exclude_none), so an unrevealed identity never
appears as an empty key. Report models are frozen (a report is never mutated
after its commitment is set) and reject unknown keys when parsed from the wire.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

REPORT_VERSION = "1.0.0"
DEFAULT_RANGE_VARIATION = 5.0
DEFAULT_EXPIRES_IN_DAYS = 30

REASON_OK = "ok"
REASON_COMMITMENT_MISMATCH = "commitment mismatch"
REASON_EXPIRED = "expired"


def format_iso(dt: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and Z suffix (2024-01-31T12:00:00.000Z)."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso(value: str) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True, extra="forbid")


class DisclosurePolicy(BaseModel):
    """Which analytics fields a report exposes, and how coarsely."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    include_volume: bool = Field(False, alias="includeVolume")
    include_trade_count: bool = Field(False, alias="includeTradeCount")
    include_win_rate: bool = Field(False, alias="includeWinRate")
    include_profit_loss: bool = Field(False, alias="includeProfitLoss")
    include_top_assets: bool = Field(False, alias="includeTopTokens")
    include_avg_trade_size: bool = Field(True, alias="includeAvgTradeSize")
    reveal_identity: bool = Field(False, alias="revealWallet")
    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = Field(None, max_length=1000)
    expires_in_days: int | None = Field(None, ge=1, le=365, alias="expiresInDays")
    range_variation: float | None = Field(None, ge=0, le=50, alias="rangeVariation")

    @property
    def variation_percent(self) -> float:
        """Range half-width in percent; unset means the 5% default."""
        return DEFAULT_RANGE_VARIATION if self.range_variation is None else self.range_variation


class ValueRange(_WireModel):
    min: float = 0.0
    max: float = 0.0

    @property
    def is_zero(self) -> bool:
        """[0, 0]: either undisclosed or a true zero; the wire form cannot tell them apart."""
        return self.min == 0 and self.max == 0


HIDDEN_RANGE = ValueRange(min=0.0, max=0.0)


class TopAssetEntry(_WireModel):
    symbol: str
    trade_count: int


class ReportStats(_WireModel):
    total_volume_range: ValueRange = HIDDEN_RANGE
    trade_count_range: ValueRange = HIDDEN_RANGE
    win_rate: float = 0.0
    profit_loss_range: ValueRange = HIDDEN_RANGE
    trading_days: int = 0
    avg_trade_size_range: ValueRange = HIDDEN_RANGE
    top_tokens: list[TopAssetEntry] = Field(default_factory=list)
    period_start: str
    period_end: str


class ReportMetadata(_WireModel):
    id: str
    title: str
    description: str | None = None
    generated_at: str
    expires_at: str | None = None
    version: str = REPORT_VERSION


class ReportProof(_WireModel):
    commitment: str = ""


class ReportPrivacy(_WireModel):
    identity_revealed: bool = False
    identity: str | None = None


class Report(_WireModel):
    metadata: ReportMetadata
    stats: ReportStats
    proof: ReportProof = ReportProof()
    privacy: ReportPrivacy = ReportPrivacy()

    def to_wire(self) -> dict[str, Any]:
        """camelCase dict with unset optionals omitted; the form that is stored and hashed."""
        return self.model_dump(by_alias=True, exclude_none=True)

    @classmethod
    def from_wire(cls, data: dict[str, Any]) -> "Report":
        return cls.model_validate(data)


@dataclass(frozen=True)
class VerificationResult:
    """
    valid: the commitment matches the report contents.
    expired: commitment holds but expiresAt is in the past.
    """

    valid: bool
    expired: bool
    reason: str

    def to_dict(self) -> dict[str, Any]:
        return {"valid": self.valid, "expired": self.expired, "reason": self.reason}
