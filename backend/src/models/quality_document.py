"""QualityDocument SQLAlchemy model"""

from sqlalchemy import Boolean, Column, Enum as SQLEnum, Index, Integer, String, Text

from .base import Base, PortableJSONB, UTCDateTime, new_id, utcnow
from domain.quality_documents.models import (
    ChemicalComposition,
    ClientFeedback,
    Inspection,
    MechanicalProperties,
    QualityDocument,
    QualityStatus,
)


class QualityDocumentRow(Base):
    """Certificate or folder in an organization's document tree.

    Metallurgical data (chemical_composition, mechanical_properties) is
    written once at upload. inspection_json and client_feedback_json hold the
    latest verdict and review; their history lives in the audit log.
    """
    __tablename__ = "quality_document"
    __table_args__ = (
        Index("ix_quality_document_owner_org_id", "owner_org_id"),
        Index("ix_quality_document_owner_org_status", "owner_org_id", "status"),
        Index("ix_quality_document_parent_folder_id", "parent_folder_id"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    owner_org_id = Column(String(64), nullable=False)
    owner_org_name = Column(Text, nullable=True)
    parent_folder_id = Column(String(36), nullable=True)
    name = Column(Text, nullable=False)
    is_folder = Column(Boolean, nullable=False, default=False)
    status = Column(SQLEnum(QualityStatus, name="quality_status"), nullable=True)

    project_name = Column(Text, nullable=True)
    batch_number = Column(Text, nullable=True)
    grade = Column(Text, nullable=True)
    invoice_number = Column(Text, nullable=True)
    file_type = Column(Text, nullable=True)
    size = Column(Integer, nullable=True)
    url = Column(Text, nullable=True)
    uploaded_at = Column(UTCDateTime, nullable=True, default=utcnow)
    uploaded_by = Column(String(64), nullable=True)

    chemical_composition = Column(PortableJSONB, nullable=True)
    mechanical_properties = Column(PortableJSONB, nullable=True)
    inspection_json = Column(PortableJSONB, nullable=True)
    client_feedback_json = Column(PortableJSONB, nullable=True)

    viewed_at = Column(UTCDateTime, nullable=True)
    viewed_by = Column(String(64), nullable=True)

    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def to_domain(self) -> QualityDocument:
        """Convert row to the domain model"""
        return QualityDocument(
            id=self.id,
            owner_org_id=self.owner_org_id,
            owner_org_name=self.owner_org_name,
            parent_folder_id=self.parent_folder_id,
            name=self.name,
            is_folder=bool(self.is_folder),
            status=self.status,
            project_name=self.project_name,
            batch_number=self.batch_number,
            grade=self.grade,
            invoice_number=self.invoice_number,
            file_type=self.file_type,
            size=self.size,
            url=self.url,
            uploaded_at=self.uploaded_at,
            uploaded_by=self.uploaded_by,
            chemical_composition=ChemicalComposition.from_dict(self.chemical_composition),
            mechanical_properties=MechanicalProperties.from_dict(self.mechanical_properties),
            inspection=Inspection.from_dict(self.inspection_json),
            client_feedback=ClientFeedback.from_dict(self.client_feedback_json),
            viewed_at=self.viewed_at,
            viewed_by=self.viewed_by,
        )

    @classmethod
    def from_domain(cls, doc: QualityDocument) -> "QualityDocumentRow":
        """Build a row for a document created at upload"""
        return cls(
            id=doc.id,
            owner_org_id=doc.owner_org_id,
            owner_org_name=doc.owner_org_name,
            parent_folder_id=doc.parent_folder_id,
            name=doc.name,
            is_folder=doc.is_folder,
            status=None if doc.is_folder else doc.status,
            project_name=doc.project_name,
            batch_number=doc.batch_number,
            grade=doc.grade,
            invoice_number=doc.invoice_number,
            file_type=doc.file_type,
            size=doc.size,
            url=doc.url,
            uploaded_at=doc.uploaded_at,
            uploaded_by=doc.uploaded_by,
            chemical_composition=doc.chemical_composition.to_dict() if doc.chemical_composition else None,
            mechanical_properties=doc.mechanical_properties.to_dict() if doc.mechanical_properties else None,
            inspection_json=doc.inspection.to_dict() if doc.inspection else None,
            client_feedback_json=doc.client_feedback.to_dict() if doc.client_feedback else None,
            viewed_at=doc.viewed_at,
            viewed_by=doc.viewed_by,
        )
