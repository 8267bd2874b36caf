"""
Audit Models for Finance Tracker

Every mutation of the ledger is logged as a structured audit event.
This provides:
1. Traceability of every create/update/delete
2. Debugging information when a budget total looks wrong
3. A record of the one side effect in the system (budget spent updates)

DESIGN DECISION: Audit events are append-only log lines. They are never
read back by the application.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Lifecycle
    STORE_INITIALIZED = "store_initialized"
    STORE_RESET = "store_reset"

    # Categories
    CATEGORY_CREATED = "category_created"
    CATEGORY_DELETED = "category_deleted"

    # Transactions
    TRANSACTION_CREATED = "transaction_created"
    TRANSACTION_UPDATED = "transaction_updated"
    TRANSACTION_DELETED = "transaction_deleted"

    # Budgets
    BUDGET_CREATED = "budget_created"
    BUDGET_DELETED = "budget_deleted"
    BUDGET_SPENT_UPDATED = "budget_spent_updated"

    # Goals
    GOAL_CREATED = "goal_created"
    GOAL_UPDATED = "goal_updated"
    GOAL_DELETED = "goal_deleted"

    # Failures
    VALIDATION_FAILED = "validation_failed"
    ENTITY_NOT_FOUND = "entity_not_found"
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every ledger mutation creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.now,
        description="When the event occurred (local time)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'transaction', 'budget')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID shared by every event raised while serving one request"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.entity_created("budget", budget.id, budget.name)
        event = AuditEventBuilder.budget_spent_updated(budget.id, "0.00", "30.00", tx.id)
    """

    _CREATED = {
        "category": AuditEventType.CATEGORY_CREATED,
        "transaction": AuditEventType.TRANSACTION_CREATED,
        "budget": AuditEventType.BUDGET_CREATED,
        "goal": AuditEventType.GOAL_CREATED,
    }
    _UPDATED = {
        "transaction": AuditEventType.TRANSACTION_UPDATED,
        "goal": AuditEventType.GOAL_UPDATED,
    }
    _DELETED = {
        "category": AuditEventType.CATEGORY_DELETED,
        "transaction": AuditEventType.TRANSACTION_DELETED,
        "budget": AuditEventType.BUDGET_DELETED,
        "goal": AuditEventType.GOAL_DELETED,
    }

    @staticmethod
    def store_initialized(backend: str, seeded: bool) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORE_INITIALIZED,
            entity_type="store",
            description=f"{backend} ledger store initialized",
            details={
                "backend": backend,
                "seeded_defaults": seeded,
            },
        )

    @staticmethod
    def store_reset(backend: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORE_RESET,
            severity=AuditSeverity.WARNING,
            entity_type="store",
            description=f"{backend} ledger store reset",
            details={"backend": backend},
        )

    @staticmethod
    def entity_created(
        entity_type: str,
        entity_id: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventBuilder._CREATED[entity_type],
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{entity_type.capitalize()} created",
            details=details or {},
        )

    @staticmethod
    def entity_updated(
        entity_type: str,
        entity_id: str,
        fields: list[str],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventBuilder._UPDATED[entity_type],
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{entity_type.capitalize()} updated",
            details={"fields": sorted(fields)},
        )

    @staticmethod
    def entity_deleted(entity_type: str, entity_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventBuilder._DELETED[entity_type],
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{entity_type.capitalize()} deleted",
        )

    @staticmethod
    def budget_spent_updated(
        budget_id: str,
        previous: str,
        current: str,
        transaction_id: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGET_SPENT_UPDATED,
            entity_type="budget",
            entity_id=budget_id,
            description=f"Budget spent moved from {previous} to {current}",
            details={
                "previous_spent": previous,
                "current_spent": current,
                "transaction_id": transaction_id,
            },
        )

    @staticmethod
    def validation_failed(entity_type: str, issues: list[dict]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type=entity_type,
            description=f"{entity_type.capitalize()} payload rejected with {len(issues)} issues",
            details={"issues": issues},
        )

    @staticmethod
    def entity_not_found(entity_type: str, entity_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTITY_NOT_FOUND,
            severity=AuditSeverity.WARNING,
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{entity_type.capitalize()} not found",
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
        )
