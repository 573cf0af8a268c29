"""Pydantic schemas for certificate endpoints."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from domain.quality_documents.models import QualityDocument, QualityStatus
from domain.quality_documents.stats import ComplianceOverview


class ChemicalCompositionSchema(BaseModel):
    carbon: float
    manganese: float
    silicon: float
    phosphorus: float
    sulfur: float


class MechanicalPropertiesSchema(BaseModel):
    yield_strength: float = Field(..., description="Yield strength (MPa)")
    tensile_strength: float = Field(..., description="Tensile strength (MPa)")
    elongation: float = Field(..., description="Elongation (%)")


class InspectionSchema(BaseModel):
    inspected_at: datetime
    inspected_by: str
    rejection_reason: Optional[str] = None


class ClientFeedbackSchema(BaseModel):
    observations: Optional[str] = None
    flags: list[str] = Field(default_factory=list)
    last_interaction_at: Optional[datetime] = None
    last_interaction_by: Optional[str] = None


class DocumentResponse(BaseModel):
    """Certificate or folder as shown in the file manager."""
    id: str
    name: str
    owner_org_id: str
    owner_org_name: Optional[str] = None
    parent_folder_id: Optional[str] = None
    is_folder: bool
    status: Optional[QualityStatus] = Field(None, description="None for folders")
    project_name: Optional[str] = None
    batch_number: Optional[str] = None
    grade: Optional[str] = None
    invoice_number: Optional[str] = None
    file_type: Optional[str] = None
    size: Optional[int] = None
    url: Optional[str] = None
    uploaded_at: Optional[datetime] = None
    uploaded_by: Optional[str] = None
    chemical_composition: Optional[ChemicalCompositionSchema] = None
    mechanical_properties: Optional[MechanicalPropertiesSchema] = None
    inspection: Optional[InspectionSchema] = None
    client_feedback: Optional[ClientFeedbackSchema] = None
    viewed_at: Optional[datetime] = None
    viewed_by: Optional[str] = None

    @classmethod
    def from_domain(cls, doc: QualityDocument) -> "DocumentResponse":
        return cls(
            id=doc.id,
            name=doc.name,
            owner_org_id=doc.owner_org_id,
            owner_org_name=doc.owner_org_name,
            parent_folder_id=doc.parent_folder_id,
            is_folder=doc.is_folder,
            status=doc.status,
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
            inspection=InspectionSchema(
                inspected_at=doc.inspection.inspected_at,
                inspected_by=doc.inspection.inspected_by,
                rejection_reason=doc.inspection.rejection_reason,
            ) if doc.inspection else None,
            client_feedback=ClientFeedbackSchema(
                observations=doc.client_feedback.observations,
                flags=list(doc.client_feedback.flags),
                last_interaction_at=doc.client_feedback.last_interaction_at,
                last_interaction_by=doc.client_feedback.last_interaction_by,
            ) if doc.client_feedback else None,
            viewed_at=doc.viewed_at,
            viewed_by=doc.viewed_by,
        )


class ClientFeedbackRequest(BaseModel):
    """Client review of a certificate.

    REJECTED requires observations or at least one flag.
    """
    decision: QualityStatus = Field(..., description="APPROVED, REJECTED or TO_DELETE")
    observations: Optional[str] = Field(None, max_length=4000)
    flags: list[str] = Field(default_factory=list, description="Defect tags, e.g. dimension-mismatch")

    class Config:
        json_schema_extra = {
            "example": {
                "decision": "REJECTED",
                "observations": "Heat number does not match the delivery note",
                "flags": ["dimension-mismatch"],
            }
        }


class TechnicalVerdictRequest(BaseModel):
    """Quality verdict. REJECTED requires a rejection reason."""
    decision: QualityStatus = Field(..., description="APPROVED or REJECTED")
    rejection_reason: Optional[str] = Field(None, max_length=4000)


class DocumentPermissionsResponse(BaseModel):
    can_view: bool
    can_delete: bool


class ComplianceOverviewResponse(BaseModel):
    total: int
    pending: int
    approved: int
    rejected: int
    to_delete: int
    unviewed: int = Field(..., description="APPROVED certificates no client has opened yet")

    @classmethod
    def from_domain(cls, overview: ComplianceOverview) -> "ComplianceOverviewResponse":
        return cls(**overview.to_dict())
