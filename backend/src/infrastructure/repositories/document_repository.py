"""Document repository: SQLAlchemy adapter for DocumentPort"""

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import and_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from domain.errors import InfrastructureError, NotFoundError
from domain.ports.document_port import DocumentPort, DocumentScope
from domain.quality_documents.models import QualityDocument, QualityStatus
from models.base import utcnow
from models.quality_document import QualityDocumentRow

# Fields the workflow may change. Metallurgical data is fixed at upload.
UPDATABLE_FIELDS = frozenset({
    "status",
    "inspection",
    "client_feedback",
    "viewed_at",
    "viewed_by",
    "name",
    "parent_folder_id",
})


class SqlDocumentRepository(DocumentPort):
    """Repository for quality_document database operations.

    Every write commits immediately so the caller observes a committed
    single-row update before any audit record is appended.
    """

    def __init__(self, db: Session):
        """Initialize repository with database session.

        Args:
            db: SQLAlchemy database session
        """
        self.db = db

    def get(self, document_id: str) -> Optional[QualityDocument]:
        try:
            row = self.db.get(QualityDocumentRow, document_id)
        except SQLAlchemyError as e:
            raise InfrastructureError(f"Failed to load document {document_id}") from e
        return row.to_domain() if row else None

    def add(self, doc: QualityDocument) -> QualityDocument:
        """Insert a document or folder created by the upload collaborator."""
        row = QualityDocumentRow.from_domain(doc)
        try:
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise InfrastructureError(f"Failed to store document {doc.id}") from e
        return row.to_domain()

    def update(self, document_id: str, patch: dict[str, Any]) -> QualityDocument:
        """Apply a workflow patch.

        Raises:
            ValueError: If the patch touches a field the workflow may not change
            NotFoundError: If the document does not exist
            InfrastructureError: On database failure
        """
        illegal = set(patch) - UPDATABLE_FIELDS
        if illegal:
            raise ValueError(f"Fields not updatable: {sorted(illegal)}")

        try:
            row = self.db.get(QualityDocumentRow, document_id)
            if row is None:
                raise NotFoundError("Document", document_id)
            _apply_patch(row, patch)
            self.db.commit()
            self.db.refresh(row)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise InfrastructureError(f"Failed to update document {document_id}") from e
        return row.to_domain()

    def set_first_view_if_unset(
        self, document_id: str, viewed_at: datetime, viewed_by: str
    ) -> tuple[QualityDocument, bool]:
        """Conditional UPDATE ... WHERE viewed_at IS NULL; rowcount tells who won."""
        stmt = (
            update(QualityDocumentRow)
            .where(and_(
                QualityDocumentRow.id == document_id,
                QualityDocumentRow.viewed_at.is_(None),
            ))
            .values(viewed_at=viewed_at, viewed_by=viewed_by, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        try:
            result = self.db.execute(stmt)
            applied = result.rowcount == 1
            self.db.commit()
            self.db.expire_all()
            row = self.db.get(QualityDocumentRow, document_id)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise InfrastructureError(f"Failed to record view of document {document_id}") from e

        if row is None:
            raise NotFoundError("Document", document_id)
        return row.to_domain(), applied

    def list_pending(self, scope: DocumentScope) -> list[QualityDocument]:
        return self._list(scope, QualityDocumentRow.status == QualityStatus.PENDING)

    def list_rejected(self, scope: DocumentScope) -> list[QualityDocument]:
        return self._list(
            scope,
            QualityDocumentRow.status.in_([QualityStatus.REJECTED, QualityStatus.TO_DELETE]),
        )

    def list_children(self, parent_id: Optional[str], scope: DocumentScope) -> list[QualityDocument]:
        if parent_id is None:
            condition = QualityDocumentRow.parent_folder_id.is_(None)
        else:
            condition = QualityDocumentRow.parent_folder_id == parent_id
        return self._list(scope, condition)

    def list_all(self, scope: DocumentScope) -> list[QualityDocument]:
        return self._list(scope)

    def _list(self, scope: DocumentScope, *conditions) -> list[QualityDocument]:
        query = select(QualityDocumentRow)
        if conditions:
            query = query.where(and_(*conditions))
        if scope.org_id is not None:
            query = query.where(QualityDocumentRow.owner_org_id == scope.org_id)
        if not scope.include_folders:
            query = query.where(QualityDocumentRow.is_folder.is_(False))
        query = query.order_by(QualityDocumentRow.uploaded_at.desc(), QualityDocumentRow.name)

        try:
            rows = self.db.execute(query).scalars().all()
        except SQLAlchemyError as e:
            raise InfrastructureError("Failed to list documents") from e
        return [row.to_domain() for row in rows]


def _apply_patch(row: QualityDocumentRow, patch: dict[str, Any]) -> None:
    for name, value in patch.items():
        if name == "inspection":
            row.inspection_json = value.to_dict() if value else None
        elif name == "client_feedback":
            row.client_feedback_json = value.to_dict() if value else None
        else:
            setattr(row, name, value)
