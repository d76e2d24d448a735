"""
Structured logging for TradeProof.

Every record carries event_type, level, an ISO timestamp and the emitting
module. Wallet addresses are logged truncated (short_wallet); report payloads
and full addresses never go to the log.

LOG_LEVEL picks the threshold, LOG_FORMAT=console switches from JSON lines to
the structlog dev renderer. Both are read when configure_structlog runs.
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, TextIO

import structlog

WALLET_PREFIX_LEN = 16


def _stamp(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    event_dict.setdefault("timestamp", datetime.now(timezone.utc).isoformat())
    return event_dict


def _event_type(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """structlog's positional 'event' becomes event_type."""
    if "event" in event_dict and "event_type" not in event_dict:
        event_dict["event_type"] = event_dict.pop("event")
    return event_dict


def _level_value(level: str | None) -> int:
    name = (level or os.getenv("LOG_LEVEL", "INFO")).strip().upper()
    return getattr(logging, name, logging.INFO)


def configure_structlog(
    level: str | None = None,
    fmt: str | None = None,
    stream: TextIO | None = None,
) -> None:
    """(Re)configure structlog; arguments left as None fall back to LOG_LEVEL / LOG_FORMAT."""
    fmt = (fmt or os.getenv("LOG_FORMAT", "json")).strip().lower()
    stream = stream or sys.stdout
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.format_exc_info,
        _stamp,
        _event_type,
    ]
    if fmt == "console":
        processors.append(structlog.dev.ConsoleRenderer(event_key="event_type", colors=stream.isatty()))
    else:
        processors.append(structlog.processors.JSONRenderer(sort_keys=True))
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(_level_value(level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=False,
    )


if not structlog.is_configured():
    configure_structlog()


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Logger bound to the emitting module.

        logger = get_logger(__name__)
        logger.info("report_issued", report_id=report_id, wallet=short_wallet(wallet))
    """
    return structlog.get_logger(name).bind(logger=name)


def short_wallet(wallet: str) -> str:
    wallet = wallet or ""
    return wallet[:WALLET_PREFIX_LEN] + "..." if len(wallet) > WALLET_PREFIX_LEN else wallet


def bind_wallet(wallet: str) -> structlog.BoundLogger:
    """Logger with the truncated wallet bound to every call."""
    return get_logger("backend_tradeproof").bind(wallet=short_wallet(wallet))
