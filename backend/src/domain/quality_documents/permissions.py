"""Per-document permission checks used by listings and the file manager."""

from typing import Iterable

from auth.roles import STAFF_ROLES, UserRole
from domain.actors import Actor
from .models import QualityDocument, QualityStatus


def can_delete(actor: Actor, doc: QualityDocument) -> bool:
    """Check if an actor may physically delete a document or folder.

    Root folders anchor an organization's tree and are never destructible.
    Clients never delete; they mark certificates TO_DELETE instead.

    Examples:
        >>> root = QualityDocument(id="f1", owner_org_id="o1", name="Root", is_folder=True, status=None)
        >>> can_delete(Actor(id="a", role=UserRole.ADMIN), root)
        False
    """
    if doc.is_root_folder:
        return False
    return actor.role in STAFF_ROLES


def can_view(actor: Actor, doc: QualityDocument) -> bool:
    """Check if an actor may see a document in listings.

    Clients see folders and APPROVED certificates of their own organization;
    staff see everything.
    """
    if actor.role in STAFF_ROLES:
        return True
    if actor.role != UserRole.CLIENT or not actor.belongs_to(doc.owner_org_id):
        return False
    return doc.is_folder or doc.status == QualityStatus.APPROVED


def visible_documents(actor: Actor, docs: Iterable[QualityDocument]) -> list[QualityDocument]:
    return [doc for doc in docs if can_view(actor, doc)]
