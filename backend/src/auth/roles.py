"""Portal roles and permission groups.

Roles:
- CLIENT: Member of a receiving organization. Reviews certificates of its own
  organization and raises support tickets.
- QUALITY: Quality team. Inspects certificates, adjudicates contested ones and
  escalates tickets to administration.
- ADMIN: Administrators. Full read access, ticket handling, and the only role
  allowed through while the portal is in maintenance mode.

Permission Matrix:
┌──────────────────────────┬────────┬─────────┬───────┐
│ Action                   │ CLIENT │ QUALITY │ ADMIN │
├──────────────────────────┼────────┼─────────┼───────┤
│ Review own certificates  │   ✓    │         │       │
│ Technical verdict        │        │    ✓    │       │
│ Delete non-root folders  │        │    ✓    │   ✓   │
│ Create tickets           │   ✓    │    ✓    │       │
│ Update ticket status     │        │    ✓    │   ✓   │
│ Escalate tickets         │        │    ✓    │       │
│ View audit logs          │        │ DATA    │   ✓   │
│ Bypass maintenance mode  │        │         │   ✓   │
└──────────────────────────┴────────┴─────────┴───────┘

The portal roles are not hierarchical: a QUALITY user cannot act as a CLIENT
of an organization, so permissions are expressed as explicit role sets.
"""

from enum import Enum
from typing import FrozenSet


class UserRole(str, Enum):
    """Portal user roles.

    Values travel in the X-Actor-Role header and are stored as TEXT in the
    audit log, so they must match exactly.
    """
    CLIENT = "CLIENT"
    QUALITY = "QUALITY"
    ADMIN = "ADMIN"


STAFF_ROLES: FrozenSet[UserRole] = frozenset({UserRole.QUALITY, UserRole.ADMIN})
TICKET_AUTHOR_ROLES: FrozenSet[UserRole] = frozenset({UserRole.CLIENT, UserRole.QUALITY})
TICKET_HANDLER_ROLES: FrozenSet[UserRole] = STAFF_ROLES


def has_any_role(user_role: UserRole, allowed_roles) -> bool:
    """Check if a user role is part of an allowed role set.

    Args:
        user_role: The role of the current actor
        allowed_roles: Iterable of roles allowed to perform the action

    Returns:
        True if user_role is one of allowed_roles, False otherwise

    Examples:
        >>> has_any_role(UserRole.ADMIN, STAFF_ROLES)
        True
        >>> has_any_role(UserRole.CLIENT, STAFF_ROLES)
        False
    """
    return user_role in set(allowed_roles)


def parse_role(value: str) -> UserRole:
    """Parse a role name case-insensitively.

    Raises:
        ValueError: If the value is not a known role
    """
    return UserRole(value.strip().upper())
