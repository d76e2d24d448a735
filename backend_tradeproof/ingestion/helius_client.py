"""
Helius Enhanced Transactions client: wallet history as RawTransaction batches.

GET {base_url}/v0/addresses/{wallet}/transactions, paginated with `before`
(signature of the last item of the previous page). Retries 429 and transport
errors with a fixed delay; raises HistoryProviderError once retries run out.
Items that cannot be converted are skipped.
"""

from __future__ import annotations

import time
from typing import Any

import requests

from backend_tradeproof.config.settings import Settings
from backend_tradeproof.core.exceptions import HistoryProviderError
from backend_tradeproof.swap_parser.models import RawTransaction
from backend_tradeproof.tradeproof_logging import get_logger, short_wallet

logger = get_logger(__name__)

PAGE_LIMIT = 100  # Helius max per request
MAX_HISTORY_LIMIT = 1000
RETRY_DELAY_SEC = 2.0
DEFAULT_TIMEOUT_SEC = 30.0
DEFAULT_MAX_RETRIES = 3


class HeliusHistoryProvider:
    """Transaction-history provider backed by the Helius Enhanced API."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api-mainnet.helius-rpc.com",
        *,
        timeout: float = DEFAULT_TIMEOUT_SEC,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay: float = RETRY_DELAY_SEC,
        session: requests.Session | None = None,
    ) -> None:
        if not api_key:
            raise HistoryProviderError("HELIUS_API_KEY is required")
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.retry_delay = retry_delay
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: Settings) -> "HeliusHistoryProvider":
        return cls(
            settings.helius_api_key,
            settings.helius_base_url,
            timeout=settings.helius_timeout_sec,
            max_retries=settings.helius_max_retries,
        )

    def _get(self, url: str, params: dict[str, Any]) -> list[dict[str, Any]]:
        last_error = "no attempt made"
        status: int | None = None
        for attempt in range(self.max_retries):
            try:
                r = self.session.get(url, params=params, timeout=self.timeout)
                status = r.status_code
                if r.status_code == 429:
                    last_error = "rate limited (429)"
                    logger.warning("helius_rate_limited", attempt=attempt + 1, wait_sec=self.retry_delay)
                    if attempt < self.max_retries - 1:
                        time.sleep(self.retry_delay)
                    continue
                r.raise_for_status()
                data = r.json()
            except requests.RequestException as e:
                last_error = str(e)
                logger.warning("helius_request_error", attempt=attempt + 1, error=last_error)
                if attempt < self.max_retries - 1:
                    time.sleep(self.retry_delay)
                continue
            except ValueError as e:
                raise HistoryProviderError(f"Helius returned invalid JSON: {e}", status) from e
            if not isinstance(data, list):
                raise HistoryProviderError("Helius returned a non-list payload", status)
            return data
        raise HistoryProviderError(f"Helius request failed: {last_error}", status)

    def fetch_transactions(self, wallet: str, limit: int = 100) -> list[RawTransaction]:
        """
        Return up to limit transactions for wallet, newest first (Helius order).
        limit is clamped to 1..1000.
        """
        limit = max(1, min(int(limit), MAX_HISTORY_LIMIT))
        url = f"{self.base_url}/v0/addresses/{wallet}/transactions"
        out: list[RawTransaction] = []
        skipped = 0
        before: str | None = None
        while len(out) < limit:
            page_size = min(PAGE_LIMIT, limit - len(out))
            params: dict[str, Any] = {"api-key": self.api_key, "limit": page_size}
            if before:
                params["before"] = before
            items = self._get(url, params)
            for item in items:
                try:
                    out.append(RawTransaction.from_helius(item))
                except (KeyError, TypeError, ValueError) as e:
                    skipped += 1
                    logger.debug("helius_item_skipped", error=str(e))
            if len(items) < page_size:
                break
            last_sig = items[-1].get("signature") if isinstance(items[-1], dict) else None
            if not last_sig:
                break
            before = str(last_sig)

        logger.info(
            "helius_history_fetched",
            wallet=short_wallet(wallet),
            tx_count=len(out),
            skipped=skipped,
        )
        return out[:limit]
