"""
Main entrypoint: FastAPI server for wallet analytics and verifiable reports.

Env: HELIUS_API_KEY, TRADEPROOF_DB_URL / TRADEPROOF_DB_PATH, API_HOST, API_PORT, LOG_LEVEL, etc.

Equivalent: uvicorn backend_tradeproof.api_server.app:app --host 0.0.0.0 --port 8000
"""

import os

# Configure structured JSON logging before other imports that may log
from backend_tradeproof.tradeproof_logging import get_logger

logger = get_logger("main")


def main() -> None:
    """Build settings, create the store, and run the API in the main thread."""
    from backend_tradeproof.api_server.server import create_app
    from backend_tradeproof.config import get_settings
    from backend_tradeproof.database import TradeProofStore
    import uvicorn

    settings = get_settings()
    if not settings.helius_api_key:
        logger.warning("main_config_warning", message="HELIUS_API_KEY not set; /api/analyze will fail")

    store = TradeProofStore(settings.database_url)
    store.init_db()
    app = create_app(settings, store=store)

    logger.info("main_server_starting", host=settings.api_host, port=settings.api_port)
    uvicorn.run(app, host=settings.api_host, port=settings.api_port, log_level=os.getenv("LOG_LEVEL", "info").lower())


if __name__ == "__main__":
    main()
