"""HTTP API package."""

from finance_tracker.api.app import CORRELATION_HEADER, create_app
from finance_tracker.api.routes import router

__all__ = ["CORRELATION_HEADER", "create_app", "router"]
