"""Actor value object threaded explicitly through every workflow operation."""

from dataclasses import dataclass
from typing import Optional

from auth.roles import UserRole


@dataclass(frozen=True)
class Actor:
    """The authenticated caller of a workflow operation.

    Supplied by the authentication collaborator. The workflow core only
    authorizes, it never authenticates or reads ambient session state.
    """
    id: str
    role: UserRole
    organization_id: Optional[str] = None
    name: Optional[str] = None
    organization_name: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.name or self.id

    def belongs_to(self, org_id: Optional[str]) -> bool:
        """True if the actor is a member of the given organization."""
        return self.organization_id is not None and self.organization_id == org_id
