"""Support ticket status transitions."""

from typing import assert_never

from domain.errors import InvalidTransitionError
from .models import TicketStatus


def get_allowed_transitions(current: TicketStatus) -> frozenset[TicketStatus]:
    """Get all statuses reachable from the current ticket status.

    Examples:
        >>> sorted(s.value for s in get_allowed_transitions(TicketStatus.OPEN))
        ['IN_PROGRESS', 'RESOLVED']
        >>> get_allowed_transitions(TicketStatus.RESOLVED)
        frozenset()
    """
    match current:
        case TicketStatus.OPEN:
            return frozenset({TicketStatus.IN_PROGRESS, TicketStatus.RESOLVED})
        case TicketStatus.IN_PROGRESS:
            return frozenset({TicketStatus.RESOLVED})
        case TicketStatus.RESOLVED:
            return frozenset()
        case _:
            assert_never(current)


def can_transition(from_status: TicketStatus, to_status: TicketStatus) -> bool:
    return to_status in get_allowed_transitions(from_status)


def validate_transition(from_status: TicketStatus, to_status: TicketStatus) -> None:
    """Validate a ticket status transition.

    Raises:
        InvalidTransitionError: If the transition is not allowed
    """
    if from_status == TicketStatus.RESOLVED:
        raise InvalidTransitionError("Resolved tickets cannot be changed")
    if not can_transition(from_status, to_status):
        allowed = sorted(s.value for s in get_allowed_transitions(from_status))
        raise InvalidTransitionError(
            f"Invalid transition: {from_status.value} -> {to_status.value}. "
            f"Allowed transitions from {from_status.value}: {allowed}"
        )


def inbox_rank(status: TicketStatus) -> int:
    """Sort rank for ticket inboxes: open and in-progress work first."""
    match status:
        case TicketStatus.OPEN | TicketStatus.IN_PROGRESS:
            return 0
        case TicketStatus.RESOLVED:
            return 1
        case _:
            assert_never(status)
