"""
Configuration management for Backend TradeProof.

Loads settings from environment variables and an optional .env file.
"""

from backend_tradeproof.config.settings import Settings, get_settings  # noqa: F401

__all__ = ["Settings", "get_settings"]
