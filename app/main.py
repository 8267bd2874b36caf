"""
Finance Tracker - Server Entry Point

Exposes the ASGI `app` backed by the in-memory ledger store.

Run with:
    uvicorn app.main:app --port 5000
or:
    python -m app.main
"""

import structlog
import uvicorn

from finance_tracker.api import create_app
from finance_tracker.audit import configure_logging
from finance_tracker.config import get_settings, validate_all_settings


settings = get_settings()
configure_logging(settings.app.log_level)

logger = structlog.get_logger(__name__)
logger.info("settings_loaded", **validate_all_settings())

app = create_app(settings=settings)


if __name__ == "__main__":
    uvicorn.run(
        "app.main:app",
        host=settings.api.host,
        port=settings.api.port,
        reload=settings.app.debug_mode,
    )
