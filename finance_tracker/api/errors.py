"""
HTTP Error Mapping

Maps the ledger's exception taxonomy onto status codes:
- LedgerValidationError / request validation -> 400
- NotFoundError -> 404
- StorageError and anything unexpected -> 500

Every error body has the same shape: {"message": ...}, plus "errors" for
validation failures.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from finance_tracker.audit import AuditLogger
from finance_tracker.services.storage import NotFoundError, StorageError
from finance_tracker.validation import LedgerValidationError


logger = structlog.get_logger(__name__)


def _error(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message, **extra})


def register_exception_handlers(app: FastAPI, audit_logger: AuditLogger) -> None:
    """Attach the ledger exception handlers to an application."""

    @app.exception_handler(LedgerValidationError)
    async def handle_validation_error(request: Request, exc: LedgerValidationError):
        return _error(400, exc.message, errors=exc.issues_as_dicts())

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        errors = [
            {
                "field": ".".join(str(part) for part in detail.get("loc", ())),
                "issue_type": detail.get("type", "invalid"),
                "message": detail.get("msg", "Invalid value"),
            }
            for detail in exc.errors()
        ]
        return _error(400, "Invalid request data", errors=errors)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error(404, f"{exc.entity_type.capitalize()} not found")

    @app.exception_handler(StorageError)
    async def handle_storage_error(request: Request, exc: StorageError):
        await audit_logger.log_error(
            "StorageError",
            str(exc),
            {"method": request.method, "path": request.url.path},
        )
        return _error(500, "Internal server error")

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.exception(
            "unhandled_request_error",
            method=request.method,
            path=request.url.path,
        )
        await audit_logger.log_error(
            type(exc).__name__,
            str(exc),
            {"method": request.method, "path": request.url.path},
        )
        return _error(500, "Internal server error")
