"""Support ticket domain models."""

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class TicketStatus(str, Enum):
    """Support ticket status.

    State Machine:
        OPEN → IN_PROGRESS → RESOLVED
        OPEN → RESOLVED

    RESOLVED is terminal.
    """
    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    RESOLVED = "RESOLVED"


class TicketPriority(str, Enum):
    NORMAL = "NORMAL"
    CRITICAL = "CRITICAL"


class TicketFlow(str, Enum):
    """Channel a ticket travels through (origin to destination)."""
    CLIENT_TO_QUALITY = "CLIENT_TO_QUALITY"
    QUALITY_TO_ADMIN = "QUALITY_TO_ADMIN"


@dataclass(frozen=True)
class Escalation:
    reason: str
    escalated_at: datetime
    escalated_by: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "reason": self.reason,
            "escalated_at": self.escalated_at.isoformat(),
            "escalated_by": self.escalated_by,
        }

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> Optional["Escalation"]:
        if not data:
            return None
        at = data["escalated_at"]
        return cls(
            reason=data["reason"],
            escalated_at=at if isinstance(at, datetime) else datetime.fromisoformat(at),
            escalated_by=data["escalated_by"],
        )


@dataclass(frozen=True)
class SupportTicket:
    """A service request, optionally about a specific certificate."""
    id: str
    subject: str
    description: str
    priority: TicketPriority
    status: TicketStatus
    flow: TicketFlow
    raised_by_id: str
    created_at: datetime
    raised_by_name: Optional[str] = None
    org_id: Optional[str] = None
    client_name: Optional[str] = None
    document_id: Optional[str] = None
    document_name: Optional[str] = None
    resolution_note: Optional[str] = None
    escalation: Optional[Escalation] = None
    updated_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.status != TicketStatus.RESOLVED

    def with_changes(self, **changes: Any) -> "SupportTicket":
        return replace(self, **changes)


@dataclass(frozen=True)
class TicketChange:
    """Outcome of a ticket workflow operation: updated ticket plus the patch to persist."""
    ticket: SupportTicket
    patch: dict[str, Any]
    context: dict[str, Any]
