"""
Payload Validation

DESIGN DECISION: Every payload entering the ledger passes through one
function, validate_payload(), which runs the pydantic schema and turns any
failure into a LedgerValidationError carrying ValidationIssue records.

This covers:
- Type checking and coercion (numeric strings, comma decimals, dates)
- Required field presence
- Format validation (hex colours, month range)
- Cross-field rules (a description is mandatory for the "Others" category)

IMPORTANT: Validation NEVER silently fixes issues beyond documented
coercions. A rejected payload is reported to the caller as a 400.
"""

from typing import Any, Type, TypeVar

from pydantic import BaseModel, ValidationError

from finance_tracker.models.ledger import ValidationIssue


ModelT = TypeVar("ModelT", bound=BaseModel)


class LedgerValidationError(Exception):
    """A payload failed schema or rule validation."""

    def __init__(
        self,
        entity_type: str,
        issues: list[ValidationIssue],
        message: str = "",
    ):
        self.entity_type = entity_type
        self.issues = issues
        self.message = message or f"Invalid {entity_type} data"
        super().__init__(self.message)

    def issues_as_dicts(self) -> list[dict]:
        return [issue.model_dump() for issue in self.issues]


def issues_from_error(error: ValidationError) -> list[ValidationIssue]:
    """Flatten a pydantic ValidationError into ValidationIssue records."""
    issues = []
    for detail in error.errors():
        location = ".".join(str(part) for part in detail.get("loc", ())) or "__root__"
        message = detail.get("msg", "Invalid value")
        # "Value error, Description is required..." -> "Description is required..."
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        issues.append(
            ValidationIssue(
                field=location,
                issue_type=detail.get("type", "invalid"),
                message=message,
            )
        )
    return issues


def validate_payload(
    model_cls: Type[ModelT],
    payload: Any,
    entity_type: str,
) -> ModelT:
    """
    Validate a raw payload (usually decoded JSON) against a schema.

    Raises:
        LedgerValidationError: If the payload does not fit the schema
    """
    if isinstance(payload, model_cls):
        return payload
    if not isinstance(payload, dict):
        raise LedgerValidationError(
            entity_type,
            [
                ValidationIssue(
                    field="__root__",
                    issue_type="dict_type",
                    message="Payload must be a JSON object",
                )
            ],
        )
    try:
        return model_cls.model_validate(payload)
    except ValidationError as e:
        raise LedgerValidationError(entity_type, issues_from_error(e))
