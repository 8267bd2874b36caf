"""Payload validation package."""

from finance_tracker.validation.validator import (
    LedgerValidationError,
    issues_from_error,
    validate_payload,
)

__all__ = ["LedgerValidationError", "issues_from_error", "validate_payload"]
