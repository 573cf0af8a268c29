"""Certificate review API endpoints.

Every mutation goes through the WorkflowOrchestrator; business failures come
back as a WorkflowResult and are raised here so the application exception
handlers turn them into HTTP errors.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from auth.dependencies import get_current_actor
from dependencies import get_orchestrator
from domain.actors import Actor
from domain.quality_documents.permissions import can_delete, can_view
from workflow.orchestrator import WorkflowOrchestrator
from .schemas import (
    ClientFeedbackRequest,
    ComplianceOverviewResponse,
    DocumentPermissionsResponse,
    DocumentResponse,
    TechnicalVerdictRequest,
)

router = APIRouter(prefix="/documents", tags=["Documents"])


@router.get("", response_model=list[DocumentResponse], summary="List a folder")
def list_documents(
    parent_id: Optional[str] = Query(None, description="Folder id; omit for root level"),
    actor: Actor = Depends(get_current_actor),
    orchestrator: WorkflowOrchestrator = Depends(get_orchestrator),
):
    """List documents and folders under parent_id.

    Clients only see folders and APPROVED certificates of their organization.
    """
    return [DocumentResponse.from_domain(d) for d in orchestrator.list_documents(actor, parent_id)]


@router.get("/pending", response_model=list[DocumentResponse], summary="Review queue (staff)")
def list_pending(
    org_id: Optional[str] = Query(None),
    actor: Actor = Depends(get_current_actor),
    orchestrator: WorkflowOrchestrator = Depends(get_orchestrator),
):
    return [DocumentResponse.from_domain(d) for d in orchestrator.list_pending(actor, org_id)]


@router.get("/contested", response_model=list[DocumentResponse], summary="Contested certificates (staff)")
def list_contested(
    org_id: Optional[str] = Query(None),
    actor: Actor = Depends(get_current_actor),
    orchestrator: WorkflowOrchestrator = Depends(get_orchestrator),
):
    return [DocumentResponse.from_domain(d) for d in orchestrator.list_contested(actor, org_id)]


@router.get("/overview", response_model=ComplianceOverviewResponse, summary="Compliance counters")
def overview(
    org_id: Optional[str] = Query(None, description="Ignored for clients"),
    actor: Actor = Depends(get_current_actor),
    orchestrator: WorkflowOrchestrator = Depends(get_orchestrator),
):
    return ComplianceOverviewResponse.from_domain(orchestrator.compliance_overview(actor, org_id))


@router.get("/{document_id}", response_model=DocumentResponse)
def get_document(
    document_id: str,
    actor: Actor = Depends(get_current_actor),
    orchestrator: WorkflowOrchestrator = Depends(get_orchestrator),
):
    return DocumentResponse.from_domain(orchestrator.get_document(actor, document_id))


@router.get("/{document_id}/permissions", response_model=DocumentPermissionsResponse)
def get_permissions(
    document_id: str,
    actor: Actor = Depends(get_current_actor),
    orchestrator: WorkflowOrchestrator = Depends(get_orchestrator),
):
    """What the current actor may do with a document (drives UI controls)."""
    doc = orchestrator.get_document(actor, document_id)
    return DocumentPermissionsResponse(can_view=can_view(actor, doc), can_delete=can_delete(actor, doc))


@router.post("/{document_id}/feedback", response_model=DocumentResponse, summary="Client review")
def submit_client_feedback(
    document_id: str,
    body: ClientFeedbackRequest,
    actor: Actor = Depends(get_current_actor),
    orchestrator: WorkflowOrchestrator = Depends(get_orchestrator),
):
    """Approve, reject or mark a certificate for deletion (owning client only).

    Example:
        POST /documents/doc-1/feedback
        {"decision": "REJECTED", "flags": ["dimension-mismatch"]}
    """
    result = orchestrator.submit_client_feedback(
        actor, document_id, body.decision, observations=body.observations, flags=body.flags
    )
    return DocumentResponse.from_domain(result.unwrap())


@router.post("/{document_id}/verdict", response_model=DocumentResponse, summary="Technical verdict")
def submit_technical_verdict(
    document_id: str,
    body: TechnicalVerdictRequest,
    actor: Actor = Depends(get_current_actor),
    orchestrator: WorkflowOrchestrator = Depends(get_orchestrator),
):
    result = orchestrator.submit_technical_verdict(
        actor, document_id, body.decision, rejection_reason=body.rejection_reason
    )
    return DocumentResponse.from_domain(result.unwrap())


@router.post("/{document_id}/view", response_model=DocumentResponse, summary="Record first view")
def record_first_view(
    document_id: str,
    actor: Actor = Depends(get_current_actor),
    orchestrator: WorkflowOrchestrator = Depends(get_orchestrator),
):
    """Idempotent: repeated calls return the document unchanged."""
    result = orchestrator.record_first_view(actor, document_id)
    return DocumentResponse.from_domain(result.unwrap())
