"""SupportTicket SQLAlchemy model"""

from sqlalchemy import Column, Enum as SQLEnum, Index, String, Text

from .base import Base, PortableJSONB, UTCDateTime, new_id, utcnow
from domain.tickets.models import (
    Escalation,
    SupportTicket,
    TicketFlow,
    TicketPriority,
    TicketStatus,
)


class SupportTicketRow(Base):
    """Support ticket raised by a client or by the quality team."""
    __tablename__ = "support_ticket"
    __table_args__ = (
        Index("ix_support_ticket_org_id", "org_id"),
        Index("ix_support_ticket_flow_status", "flow", "status"),
        Index("ix_support_ticket_raised_by_id", "raised_by_id"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    subject = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    priority = Column(SQLEnum(TicketPriority, name="ticket_priority"), nullable=False)
    status = Column(SQLEnum(TicketStatus, name="ticket_status"), nullable=False)
    flow = Column(SQLEnum(TicketFlow, name="ticket_flow"), nullable=False)
    raised_by_id = Column(String(64), nullable=False)
    raised_by_name = Column(Text, nullable=True)
    org_id = Column(String(64), nullable=True)
    client_name = Column(Text, nullable=True)
    document_id = Column(String(36), nullable=True)
    document_name = Column(Text, nullable=True)
    resolution_note = Column(Text, nullable=True)
    escalation_json = Column(PortableJSONB, nullable=True)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime, nullable=True, default=utcnow)

    def to_domain(self) -> SupportTicket:
        return SupportTicket(
            id=self.id,
            subject=self.subject,
            description=self.description,
            priority=self.priority,
            status=self.status,
            flow=self.flow,
            raised_by_id=self.raised_by_id,
            raised_by_name=self.raised_by_name,
            org_id=self.org_id,
            client_name=self.client_name,
            document_id=self.document_id,
            document_name=self.document_name,
            resolution_note=self.resolution_note,
            escalation=Escalation.from_dict(self.escalation_json),
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_domain(cls, ticket: SupportTicket) -> "SupportTicketRow":
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
            escalation_json=ticket.escalation.to_dict() if ticket.escalation else None,
            created_at=ticket.created_at,
            updated_at=ticket.updated_at,
        )
