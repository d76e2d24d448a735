"""
Environment variable loading for TradeProof.

- HELIUS_API_KEY: Helius API key for the Enhanced Transactions API
- HELIUS_API_URL: Enhanced API base URL (default: mainnet)
- TRADEPROOF_DB_URL / DATABASE_URL: SQLAlchemy URL; else SQLite at TRADEPROOF_DB_PATH
- TRADEPROOF_EXTRA_EXCHANGE_PROGRAMS: extra DEX programs, "PROGRAM_ID=Label,PROGRAM_ID=Label"
- Loads .env from project root when available.
"""

from __future__ import annotations

import os
from pathlib import Path

# Project root: config is backend_tradeproof/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_BACKEND_DIR = _CONFIG_DIR.parent
_ROOT = _BACKEND_DIR.parent
_ENV_PATH = _ROOT / ".env"

HELIUS_MAINNET_API_URL = "https://api-mainnet.helius-rpc.com"
DEFAULT_SQLITE_PATH = "tradeproof.db"
DEFAULT_PUBLIC_BASE_URL = "http://localhost:3000"


def load_tradeproof_env() -> None:
    """Load .env from project root. Safe to call multiple times."""
    from dotenv import load_dotenv

    load_dotenv(_ENV_PATH)


def _env_str(name: str, default: str = "") -> str:
    return (os.getenv(name) or "").strip() or default


def _env_int(name: str, default: int) -> int:
    raw = _env_str(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def get_helius_api_key() -> str:
    """Return HELIUS_API_KEY (empty string when unset)."""
    load_tradeproof_env()
    return _env_str("HELIUS_API_KEY")


def get_helius_api_url() -> str:
    """Return the Enhanced Transactions API base URL without trailing slash."""
    load_tradeproof_env()
    return _env_str("HELIUS_API_URL", HELIUS_MAINNET_API_URL).rstrip("/")


def get_database_url() -> str:
    """
    Resolve the SQLAlchemy URL.
    Order: TRADEPROOF_DB_URL > DATABASE_URL > sqlite:///TRADEPROOF_DB_PATH (default tradeproof.db).
    """
    load_tradeproof_env()
    url = _env_str("TRADEPROOF_DB_URL") or _env_str("DATABASE_URL")
    if url:
        return url
    return f"sqlite:///{_env_str('TRADEPROOF_DB_PATH', DEFAULT_SQLITE_PATH)}"


def get_extra_exchange_programs() -> dict[str, str]:
    """
    Parse TRADEPROOF_EXTRA_EXCHANGE_PROGRAMS ("PROGRAM_ID=Label,...") into {program_id: label}.
    Malformed entries are ignored.
    """
    load_tradeproof_env()
    raw = _env_str("TRADEPROOF_EXTRA_EXCHANGE_PROGRAMS")
    out: dict[str, str] = {}
    for entry in raw.split(","):
        program_id, sep, label = entry.partition("=")
        program_id, label = program_id.strip(), label.strip()
        if sep and program_id and label:
            out[program_id] = label
    return out
