"""Ticket Port - Domain interface for support ticket persistence."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

from domain.tickets.models import SupportTicket, TicketFlow, TicketStatus


@dataclass(frozen=True)
class TicketFilter:
    """Ticket listing filter. None fields do not filter.

    raised_by_id is OR-combined with flows: a quality user sees the
    CLIENT_TO_QUALITY queue plus the tickets they raised themselves.
    """
    org_id: Optional[str] = None
    status: Optional[TicketStatus] = None
    flows: Optional[frozenset[TicketFlow]] = None
    raised_by_id: Optional[str] = None
    document_id: Optional[str] = None


class TicketPort(ABC):
    """Port interface for ticket storage."""

    @abstractmethod
    def get(self, ticket_id: str) -> Optional[SupportTicket]:
        pass

    @abstractmethod
    def update(self, ticket_id: str, patch: dict[str, Any]) -> SupportTicket:
        """Apply a patch and return the stored ticket.

        Raises:
            NotFoundError: If the ticket vanished
            InfrastructureError: On storage failure
        """
        pass

    @abstractmethod
    def list(self, ticket_filter: TicketFilter) -> list[SupportTicket]:
        pass

    @abstractmethod
    def insert(self, ticket: SupportTicket) -> SupportTicket:
        pass
