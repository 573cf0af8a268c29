"""Document Port - Domain interface for certificate persistence.

The workflow core assumes an external store reachable by key that offers
single-row atomic updates but no transaction spanning a document update and
its audit record.

Architecture: Hexagonal - Port interface in domain layer
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from domain.quality_documents.models import QualityDocument


@dataclass(frozen=True)
class DocumentScope:
    """Restricts listings to a set of organizations.

    org_id None means every organization (staff listings).
    """
    org_id: Optional[str] = None
    include_folders: bool = False

    @classmethod
    def everything(cls) -> "DocumentScope":
        return cls()


class DocumentPort(ABC):
    """Port interface for certificate storage."""

    @abstractmethod
    def get(self, document_id: str) -> Optional[QualityDocument]:
        """Load a document or folder by id.

        Returns:
            The document, or None if it does not exist

        Raises:
            InfrastructureError: On storage failure
        """
        pass

    @abstractmethod
    def update(self, document_id: str, patch: dict[str, Any]) -> QualityDocument:
        """Apply a patch and return the stored document.

        Patch values are domain values (QualityStatus, Inspection,
        ClientFeedback, datetime). The update is committed when this returns.

        Raises:
            NotFoundError: If the document vanished
            InfrastructureError: On storage failure
        """
        pass

    @abstractmethod
    def set_first_view_if_unset(
        self, document_id: str, viewed_at: datetime, viewed_by: str
    ) -> tuple[QualityDocument, bool]:
        """Atomically set viewed_at/viewed_by unless already set.

        Returns:
            (stored document, applied). applied is False when another call
            won the race and the document was already marked as viewed.
        """
        pass

    @abstractmethod
    def list_pending(self, scope: DocumentScope) -> list[QualityDocument]:
        """Certificates in PENDING status within scope."""
        pass

    @abstractmethod
    def list_rejected(self, scope: DocumentScope) -> list[QualityDocument]:
        """Contested certificates (REJECTED or TO_DELETE) within scope."""
        pass

    @abstractmethod
    def list_children(self, parent_id: Optional[str], scope: DocumentScope) -> list[QualityDocument]:
        """Documents and folders directly under parent_id (None for roots)."""
        pass

    @abstractmethod
    def list_all(self, scope: DocumentScope) -> list[QualityDocument]:
        """Every document within scope, folders included only if scope says so."""
        pass
