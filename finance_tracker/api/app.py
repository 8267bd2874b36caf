"""
Application Factory

DESIGN DECISION: The app never reaches for a global store. create_app()
receives (or builds) one LedgerService and keeps it on app.state; routes
get it through a dependency. This lets the HTTP server, the tests and the
offline mirror each run the same router over a different storage.
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request

from finance_tracker import __version__
from finance_tracker.api.errors import register_exception_handlers
from finance_tracker.api.routes import router
from finance_tracker.audit import AuditLogger, create_correlation_id
from finance_tracker.config import Settings, get_settings
from finance_tracker.ledger import LedgerService
from finance_tracker.services.storage import InMemoryLedgerStorage


CORRELATION_HEADER = "X-Correlation-ID"


def create_app(
    service: Optional[LedgerService] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """
    Build the ledger API.

    Args:
        service: Ledger service to expose. Defaults to one backed by a fresh
            in-memory store.
        settings: Settings override (defaults to get_settings())
    """
    settings = settings or get_settings()
    audit_logger = AuditLogger()
    if service is None:
        service = LedgerService(
            InMemoryLedgerStorage(audit_logger=audit_logger),
            audit_logger=audit_logger,
            settings=settings.app,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await app.state.service.storage.initialize()
        yield

    app = FastAPI(
        title="Finance Tracker API",
        description="Budget and transaction ledger with dashboard aggregation.",
        version=__version__,
        debug=settings.app.debug_mode,
        lifespan=lifespan,
    )
    app.state.service = service

    @app.middleware("http")
    async def bind_correlation_id(request: Request, call_next):
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(create_correlation_id())
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            correlation_id=correlation_id,
            method=request.method,
            path=request.url.path,
        )
        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.clear_contextvars()
        response.headers[CORRELATION_HEADER] = correlation_id
        return response

    register_exception_handlers(app, audit_logger)
    app.include_router(router)

    @app.get("/health")
    async def health():
        return {"status": "ok", "version": __version__}

    return app
