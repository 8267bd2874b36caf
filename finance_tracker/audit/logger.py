"""
Audit Logger

DESIGN DECISION: Every ledger mutation is logged as a structured event.
This provides:
1. Traceability of what changed and when
2. Debugging capability for the budget spent side effect
3. One correlation id per request tying related events together

The audit logger:
- Is async so it can be awaited inline in the service layer
- Never raises (logging must not fail a request)
- Picks up the request correlation id from structlog's context
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from finance_tracker.models.audit import AuditEvent, AuditEventBuilder


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """
    Route structlog output through the stdlib root logger at `level`.

    structlog renders the JSON line; stdlib only needs to print the message.
    """
    logging.basicConfig(format="%(message)s", level=level.upper())
    logging.getLogger().setLevel(level.upper())


class AuditLogger:
    """
    Central audit logging service.

    Writes every AuditEvent as one structured log line whose level follows
    the event severity.
    """

    def __init__(self, logger_name: str = "finance_tracker.audit"):
        self._logger = structlog.get_logger(logger_name)

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns False if the event could not be written.
        """
        if event.correlation_id is None:
            bound = structlog.contextvars.get_contextvars().get("correlation_id")
            if bound:
                try:
                    event.correlation_id = UUID(str(bound))
                except ValueError:
                    event.details["raw_correlation_id"] = str(bound)

        log_dict = event.to_log_dict()

        try:
            if event.severity.value == "error":
                self._logger.error("audit_event", **log_dict)
            elif event.severity.value == "warning":
                self._logger.warning("audit_event", **log_dict)
            elif event.severity.value == "debug":
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception as e:
            logging.getLogger(__name__).error("Failed to write audit event %s: %s", event.event_id, e)
            return False

        return True

    async def log_created(
        self,
        entity_type: str,
        entity_id: str,
        details: Optional[dict] = None,
    ) -> None:
        await self.log(AuditEventBuilder.entity_created(entity_type, entity_id, details))

    async def log_updated(
        self,
        entity_type: str,
        entity_id: str,
        fields: list[str],
    ) -> None:
        await self.log(AuditEventBuilder.entity_updated(entity_type, entity_id, fields))

    async def log_deleted(self, entity_type: str, entity_id: str) -> None:
        await self.log(AuditEventBuilder.entity_deleted(entity_type, entity_id))

    async def log_budget_spent_updated(
        self,
        budget_id: str,
        previous: str,
        current: str,
        transaction_id: str,
    ) -> None:
        """Log the expense-driven budget side effect."""
        await self.log(
            AuditEventBuilder.budget_spent_updated(
                budget_id=budget_id,
                previous=previous,
                current=current,
                transaction_id=transaction_id,
            )
        )

    async def log_validation_failed(
        self,
        entity_type: str,
        issues: list[dict],
    ) -> None:
        await self.log(AuditEventBuilder.validation_failed(entity_type, issues))

    async def log_not_found(self, entity_type: str, entity_id: str) -> None:
        await self.log(AuditEventBuilder.entity_not_found(entity_type, entity_id))

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> None:
        """Log an error."""
        await self.log(
            AuditEventBuilder.system_error(
                error_type=error_type,
                error_message=error_message,
                details=details,
            )
        )


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new request and bind it into the
    structlog context so every log line carries it.
    """
    return uuid4()
