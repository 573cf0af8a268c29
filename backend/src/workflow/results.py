"""Typed results returned by the workflow orchestrator."""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

from domain.audit.models import AuditRecord
from domain.errors import WorkflowError

T = TypeVar("T")


class WorkflowOperation(str, Enum):
    """Mutating operations the orchestrator can execute by name."""
    SUBMIT_CLIENT_FEEDBACK = "SUBMIT_CLIENT_FEEDBACK"
    SUBMIT_TECHNICAL_VERDICT = "SUBMIT_TECHNICAL_VERDICT"
    RECORD_FIRST_VIEW = "RECORD_FIRST_VIEW"
    CREATE_TICKET = "CREATE_TICKET"
    UPDATE_TICKET_STATUS = "UPDATE_TICKET_STATUS"
    ESCALATE_TICKET = "ESCALATE_TICKET"


@dataclass(frozen=True)
class WorkflowResult(Generic[T]):
    """Outcome of one workflow operation.

    Business failures are returned, not raised: ok is False and error holds
    the ForbiddenError / ValidationError / InvalidTransitionError /
    NotFoundError with a message that can be shown to the user.
    changed is False for idempotent no-ops (e.g. a repeated first view).
    """
    ok: bool
    entity: Optional[T] = None
    error: Optional[WorkflowError] = None
    audit_record: Optional[AuditRecord] = None
    changed: bool = False

    @classmethod
    def success(cls, entity: T, audit_record: Optional[AuditRecord] = None, changed: bool = True) -> "WorkflowResult[T]":
        return cls(ok=True, entity=entity, audit_record=audit_record, changed=changed)

    @classmethod
    def failure(cls, error: WorkflowError, audit_record: Optional[AuditRecord] = None) -> "WorkflowResult[T]":
        return cls(ok=False, error=error, audit_record=audit_record)

    def unwrap(self) -> T:
        """Return the entity or raise the business error."""
        if not self.ok:
            raise self.error
        return self.entity
