"""Workflow error taxonomy.

Business errors (ForbiddenError, ValidationError, InvalidTransitionError,
NotFoundError) carry a human-readable message that can be rendered as-is.
InfrastructureError wraps collaborator I/O failures; its message is never
shown to end users.
"""

from typing import Any, Optional


class WorkflowError(Exception):
    """Base class for all workflow errors."""

    code = "workflow_error"

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class ForbiddenError(WorkflowError):
    """Role or ownership precondition failed."""

    code = "forbidden"


class MaintenanceModeError(ForbiddenError):
    """Portal is in maintenance mode and the actor may not bypass it."""

    code = "maintenance_mode"

    def __init__(self, message: str = "The portal is in maintenance mode"):
        super().__init__(message)


class ValidationError(WorkflowError):
    """A mandatory field is missing or malformed."""

    code = "validation_error"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, {"field": field} if field else None)
        self.field = field


class InvalidTransitionError(WorkflowError):
    """Requested status change is not legal from the current state."""

    code = "invalid_transition"


class NotFoundError(WorkflowError):
    """Target entity does not exist."""

    code = "not_found"

    def __init__(self, entity_type: str, entity_id: str):
        super().__init__(f"{entity_type} {entity_id} not found")
        self.entity_type = entity_type
        self.entity_id = entity_id


class InfrastructureError(WorkflowError):
    """Persistence or collaborator I/O failure, opaque to the workflow core."""

    code = "infrastructure_error"
    public_message = "A storage error occurred. Please try again later."


BUSINESS_ERRORS = (ForbiddenError, ValidationError, InvalidTransitionError, NotFoundError)
