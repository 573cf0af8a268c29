"""Certificate status transitions.

The transition table is expressed as an exhaustive match over QualityStatus,
so adding a status without deciding its outgoing edges fails type checking
(assert_never) instead of silently allowing nothing.
"""

from typing import Optional, assert_never

from domain.errors import InvalidTransitionError
from .models import QualityStatus


def get_allowed_transitions(current: QualityStatus) -> frozenset[QualityStatus]:
    """Get all statuses reachable from the current status.

    Args:
        current: Current certificate status

    Returns:
        Set of statuses reachable in one step

    Examples:
        >>> sorted(s.value for s in get_allowed_transitions(QualityStatus.APPROVED))
        ['REJECTED', 'TO_DELETE']
    """
    match current:
        case QualityStatus.PENDING:
            return frozenset({QualityStatus.APPROVED, QualityStatus.REJECTED, QualityStatus.TO_DELETE})
        case QualityStatus.APPROVED:
            return frozenset({QualityStatus.REJECTED, QualityStatus.TO_DELETE})
        case QualityStatus.REJECTED | QualityStatus.TO_DELETE:
            return frozenset({QualityStatus.APPROVED, QualityStatus.REJECTED})
        case _:
            assert_never(current)


def can_transition(from_status: Optional[QualityStatus], to_status: QualityStatus) -> bool:
    """Check if a status transition is allowed.

    Folders (status None) never transition.

    Examples:
        >>> can_transition(QualityStatus.PENDING, QualityStatus.APPROVED)
        True
        >>> can_transition(QualityStatus.APPROVED, QualityStatus.PENDING)
        False
        >>> can_transition(None, QualityStatus.APPROVED)
        False
    """
    if from_status is None:
        return False
    return to_status in get_allowed_transitions(from_status)


def validate_transition(from_status: Optional[QualityStatus], to_status: QualityStatus) -> None:
    """Validate a status transition.

    Raises:
        InvalidTransitionError: If the transition is not allowed
    """
    if from_status is None:
        raise InvalidTransitionError("Folders have no compliance status")
    if not can_transition(from_status, to_status):
        allowed = sorted(s.value for s in get_allowed_transitions(from_status))
        raise InvalidTransitionError(
            f"Invalid transition: {from_status.value} -> {to_status.value}. "
            f"Allowed transitions from {from_status.value}: {allowed}"
        )


def client_actionable(status: Optional[QualityStatus]) -> bool:
    """Statuses from which the owning client may still review a certificate."""
    if status is None:
        return False
    match status:
        case QualityStatus.PENDING | QualityStatus.APPROVED:
            return True
        case QualityStatus.REJECTED | QualityStatus.TO_DELETE:
            return False
        case _:
            assert_never(status)


def inspectable(status: Optional[QualityStatus]) -> bool:
    """Statuses from which the quality team may issue a verdict."""
    if status is None:
        return False
    match status:
        case QualityStatus.PENDING | QualityStatus.REJECTED | QualityStatus.TO_DELETE:
            return True
        case QualityStatus.APPROVED:
            return False
        case _:
            assert_never(status)
