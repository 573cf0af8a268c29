"""Pydantic schemas for support ticket endpoints."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from domain.tickets.models import SupportTicket, TicketFlow, TicketPriority, TicketStatus


class EscalationSchema(BaseModel):
    reason: str
    escalated_at: datetime
    escalated_by: str


class TicketResponse(BaseModel):
    id: str
    subject: str
    description: str
    priority: TicketPriority
    status: TicketStatus
    flow: TicketFlow
    raised_by_id: str
    raised_by_name: Optional[str] = None
    org_id: Optional[str] = None
    client_name: Optional[str] = None
    document_id: Optional[str] = None
    document_name: Optional[str] = None
    resolution_note: Optional[str] = None
    escalation: Optional[EscalationSchema] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, ticket: SupportTicket) -> "TicketResponse":
        return cls(
            id=ticket.id,
            subject=ticket.subject,
            description=ticket.description,
            priority=ticket.priority,
            status=ticket.status,
            flow=ticket.flow,
            raised_by_id=ticket.raised_by_id,
            raised_by_name=ticket.raised_by_name,
            org_id=ticket.org_id,
            client_name=ticket.client_name,
            document_id=ticket.document_id,
            document_name=ticket.document_name,
            resolution_note=ticket.resolution_note,
            escalation=EscalationSchema(
                reason=ticket.escalation.reason,
                escalated_at=ticket.escalation.escalated_at,
                escalated_by=ticket.escalation.escalated_by,
            ) if ticket.escalation else None,
            created_at=ticket.created_at,
            updated_at=ticket.updated_at,
        )


class TicketCreateRequest(BaseModel):
    """New support ticket. flow defaults from the caller's role."""
    subject: str = Field(..., description="Short summary")
    description: str = Field(..., description="Problem description")
    priority: TicketPriority = TicketPriority.NORMAL
    flow: Optional[TicketFlow] = None
    document_id: Optional[str] = Field(None, description="Certificate the ticket is about")

    class Config:
        json_schema_extra = {
            "example": {
                "subject": "Wrong yield strength unit",
                "description": "Certificate 4711 lists yield strength in ksi instead of MPa",
                "priority": "CRITICAL",
                "document_id": "doc-1",
            }
        }


class TicketStatusUpdateRequest(BaseModel):
    status: TicketStatus
    resolution_note: Optional[str] = Field(None, description="Required when status is RESOLVED")


class TicketEscalationRequest(BaseModel):
    reason: str = Field(..., description="Why administration must handle the ticket")
