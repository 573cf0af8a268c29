"""Support tickets domain module - ticket model and status lifecycle

The workflow lives in domain.tickets.workflow; it is not re-exported here
because the escalation policy imports the ticket models.
"""

from .models import (
    Escalation,
    SupportTicket,
    TicketChange,
    TicketFlow,
    TicketPriority,
    TicketStatus,
)
from .status import can_transition, get_allowed_transitions, validate_transition

__all__ = [
    "Escalation",
    "SupportTicket",
    "TicketChange",
    "TicketFlow",
    "TicketPriority",
    "TicketStatus",
    "can_transition",
    "get_allowed_transitions",
    "validate_transition",
]
