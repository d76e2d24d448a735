"""
Application settings.

Loads configuration from environment variables and .env (via config.env) into a
frozen Settings dataclass. Services receive a Settings instance explicitly;
get_settings() is only the default used by entrypoints.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from backend_tradeproof.config.env import (
    DEFAULT_PUBLIC_BASE_URL,
    _env_int,
    _env_str,
    get_database_url,
    get_extra_exchange_programs,
    get_helius_api_key,
    get_helius_api_url,
)


@dataclass(frozen=True)
class Settings:
    """Resolved service configuration."""

    helius_api_key: str = ""
    helius_base_url: str = "https://api-mainnet.helius-rpc.com"
    helius_timeout_sec: float = 30.0
    helius_max_retries: int = 3
    database_url: str = "sqlite:///tradeproof.db"
    analytics_cache_ttl_sec: int = 3600
    reconstruct_workers: int = 0  # 0 = reconstruct serially
    public_base_url: str = DEFAULT_PUBLIC_BASE_URL
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    extra_exchange_programs: dict[str, str] = field(default_factory=dict)


def get_settings() -> Settings:
    """Build Settings from the current environment."""
    return Settings(
        helius_api_key=get_helius_api_key(),
        helius_base_url=get_helius_api_url(),
        helius_timeout_sec=float(_env_int("HELIUS_TIMEOUT_SEC", 30)),
        helius_max_retries=_env_int("HELIUS_MAX_RETRIES", 3),
        database_url=get_database_url(),
        analytics_cache_ttl_sec=_env_int("ANALYTICS_CACHE_TTL_SEC", 3600),
        reconstruct_workers=_env_int("TRADEPROOF_RECONSTRUCT_WORKERS", 0),
        public_base_url=_env_str("PUBLIC_BASE_URL", DEFAULT_PUBLIC_BASE_URL).rstrip("/"),
        api_host=_env_str("API_HOST", "0.0.0.0"),
        api_port=_env_int("API_PORT", 8000),
        extra_exchange_programs=get_extra_exchange_programs(),
    )
