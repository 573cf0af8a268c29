"""Ticket repository: SQLAlchemy adapter for TicketPort"""

from typing import Any, Optional

from sqlalchemy import and_, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from domain.errors import InfrastructureError, NotFoundError
from domain.ports.ticket_port import TicketFilter, TicketPort
from domain.tickets.models import SupportTicket
from models.support_ticket import SupportTicketRow

UPDATABLE_FIELDS = frozenset({"status", "resolution_note", "flow", "escalation", "updated_at"})


class SqlTicketRepository(TicketPort):
    """Repository for support_ticket database operations."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, ticket_id: str) -> Optional[SupportTicket]:
        try:
            row = self.db.get(SupportTicketRow, ticket_id)
        except SQLAlchemyError as e:
            raise InfrastructureError(f"Failed to load ticket {ticket_id}") from e
        return row.to_domain() if row else None

    def insert(self, ticket: SupportTicket) -> SupportTicket:
        row = SupportTicketRow.from_domain(ticket)
        try:
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise InfrastructureError("Failed to store ticket") from e
        return row.to_domain()

    def update(self, ticket_id: str, patch: dict[str, Any]) -> SupportTicket:
        """Apply a workflow patch.

        Raises:
            ValueError: If the patch touches a field the workflow may not change
            NotFoundError: If the ticket does not exist
            InfrastructureError: On database failure
        """
        illegal = set(patch) - UPDATABLE_FIELDS
        if illegal:
            raise ValueError(f"Fields not updatable: {sorted(illegal)}")

        try:
            row = self.db.get(SupportTicketRow, ticket_id)
            if row is None:
                raise NotFoundError("Ticket", ticket_id)
            for name, value in patch.items():
                if name == "escalation":
                    row.escalation_json = value.to_dict() if value else None
                else:
                    setattr(row, name, value)
            self.db.commit()
            self.db.refresh(row)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise InfrastructureError(f"Failed to update ticket {ticket_id}") from e
        return row.to_domain()

    def list(self, ticket_filter: TicketFilter) -> list[SupportTicket]:
        conditions = []
        if ticket_filter.org_id is not None:
            conditions.append(SupportTicketRow.org_id == ticket_filter.org_id)
        if ticket_filter.status is not None:
            conditions.append(SupportTicketRow.status == ticket_filter.status)
        if ticket_filter.document_id is not None:
            conditions.append(SupportTicketRow.document_id == ticket_filter.document_id)

        # flows and raised_by_id widen each other (OR), see TicketFilter
        audience = []
        if ticket_filter.flows is not None:
            audience.append(SupportTicketRow.flow.in_(sorted(ticket_filter.flows)))
        if ticket_filter.raised_by_id is not None:
            audience.append(SupportTicketRow.raised_by_id == ticket_filter.raised_by_id)
        if audience:
            conditions.append(or_(*audience))

        query = select(SupportTicketRow)
        if conditions:
            query = query.where(and_(*conditions))
        query = query.order_by(SupportTicketRow.created_at.desc())

        try:
            rows = self.db.execute(query).scalars().all()
        except SQLAlchemyError as e:
            raise InfrastructureError("Failed to list tickets") from e
        return [row.to_domain() for row in rows]
