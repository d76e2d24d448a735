"""
Canonical report encoding and SHA-256 commitment.

The one place reports are serialized for hashing; the builder and the
verifier both go through compute_commitment. Canonical form:
- the wire dict (camelCase, unset optionals omitted) with proof.commitment = "";
- keys sorted, compact separators, UTF-8;
- every number rendered as the shortest string that round-trips its float
  value, so 3 and 3.0 hash the same while any change to the value does not
  (-0.0 is folded into 0.0).

A stored wire dict is hashed as received, not through the parsed model, so
keys added after issue change the digest.
"""

from __future__ import annotations

import copy
import hashlib
import json
from typing import Any

from backend_tradeproof.reports.models import Report


def _number(value: int | float) -> str:
    text = repr(float(value))
    return "0.0" if text == "-0.0" else text


def _normalize(value: Any) -> Any:
    if value is None or isinstance(value, (bool, str)):
        return value
    if isinstance(value, (int, float)):
        return _number(value)
    if isinstance(value, dict):
        return {str(k): _normalize(v) for k, v in value.items() if v is not None}
    if isinstance(value, (list, tuple)):
        return [_normalize(v) for v in value]
    raise TypeError(f"cannot canonicalize {type(value).__name__}")


def canonical_bytes(payload: dict[str, Any]) -> bytes:
    """Deterministic byte encoding of a JSON-like payload."""
    return json.dumps(
        _normalize(payload),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    ).encode("utf-8")


def commitment_payload(report: Report | dict[str, Any]) -> dict[str, Any]:
    """Copy of the report's wire dict with the commitment field blanked."""
    wire = report.to_wire() if isinstance(report, Report) else report
    payload = copy.deepcopy(wire)
    proof = payload.get("proof")
    if not isinstance(proof, dict):
        proof = payload["proof"] = {}
    proof["commitment"] = ""
    return payload


def compute_commitment(report: Report | dict[str, Any]) -> str:
    """Hex SHA-256 over the canonical bytes of report, ignoring its current commitment."""
    return hashlib.sha256(canonical_bytes(commitment_payload(report))).hexdigest()
