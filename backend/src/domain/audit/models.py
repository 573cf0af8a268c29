"""Audit record model and enumerations.

Audit records are append-only. Once created they are never mutated or
deleted; the audit trail is the authoritative history of every document and
ticket, while entity status fields only cache the current state.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import uuid4


class AuditCategory(str, Enum):
    """Audit record categories"""
    DATA = "DATA"
    AUTH = "AUTH"
    SYSTEM = "SYSTEM"


class AuditSeverity(str, Enum):
    """Audit record severity levels"""
    INFO = "INFO"
    WARNING = "WARNING"
    CRITICAL = "CRITICAL"


class AuditOutcome(str, Enum):
    """Audit record outcome"""
    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"


class AuditAction(str, Enum):
    """Enumerated action tags written to the audit trail."""
    # Client review
    CLIENT_APPROVED_FILE = "CLIENT_APPROVED_FILE"
    CLIENT_REJECTED_FILE = "CLIENT_REJECTED_FILE"
    CLIENT_MARKED_TO_DELETE = "CLIENT_MARKED_TO_DELETE"
    FILE_VIEWED_BY_CLIENT = "FILE_VIEWED_BY_CLIENT"

    # Quality inspection
    FILE_INSPECT_APPROVE = "FILE_INSPECT_APPROVE"
    FILE_INSPECT_REJECT = "FILE_INSPECT_REJECT"

    # Support tickets
    TICKET_CREATED = "TICKET_CREATED"
    TICKET_STATUS_UPDATED = "TICKET_STATUS_UPDATED"
    TICKET_ESCALATED = "TICKET_ESCALATED"

    # Refused operations that never reached a state machine
    PERMISSION_DENIED = "PERMISSION_DENIED"
    MAINTENANCE_BLOCKED = "MAINTENANCE_BLOCKED"


@dataclass(frozen=True)
class AuditRecord:
    """Immutable audit trail entry.

    target is a "<kind>:<id>" reference such as "document:doc-1".
    """
    actor_id: str
    actor_role: str
    action: AuditAction
    category: AuditCategory
    severity: AuditSeverity
    outcome: AuditOutcome
    target: Optional[str] = None
    context: dict[str, Any] = field(default_factory=dict)
    actor_name: Optional[str] = None
    request_id: Optional[str] = None
    id: str = field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API responses"""
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "actor_id": self.actor_id,
            "actor_role": self.actor_role,
            "actor_name": self.actor_name,
            "action": self.action.value,
            "category": self.category.value,
            "severity": self.severity.value,
            "outcome": self.outcome.value,
            "target": self.target,
            "context": dict(self.context),
            "request_id": self.request_id,
        }


def target_ref(kind: str, entity_id: Optional[str]) -> Optional[str]:
    """Build a target reference string.

    Examples:
        >>> target_ref("document", "doc-1")
        'document:doc-1'
    """
    if entity_id is None:
        return None
    return f"{kind}:{entity_id}"
