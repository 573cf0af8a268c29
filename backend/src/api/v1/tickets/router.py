"""Support ticket API endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from auth.dependencies import get_current_actor
from dependencies import get_orchestrator
from domain.actors import Actor
from domain.tickets.models import TicketFlow, TicketStatus
from workflow.orchestrator import WorkflowOrchestrator
from .schemas import (
    TicketCreateRequest,
    TicketEscalationRequest,
    TicketResponse,
    TicketStatusUpdateRequest,
)

router = APIRouter(prefix="/tickets", tags=["Tickets"])


@router.get("", response_model=list[TicketResponse], summary="Ticket inbox")
def list_tickets(
    status_filter: Optional[TicketStatus] = Query(None, alias="status"),
    flow: Optional[TicketFlow] = Query(None),
    actor: Actor = Depends(get_current_actor),
    orchestrator: WorkflowOrchestrator = Depends(get_orchestrator),
):
    """Tickets visible to the caller, open work first, then newest first."""
    return [TicketResponse.from_domain(t) for t in orchestrator.list_tickets(actor, status_filter, flow)]


@router.post("", response_model=TicketResponse, status_code=status.HTTP_201_CREATED)
def create_ticket(
    body: TicketCreateRequest,
    actor: Actor = Depends(get_current_actor),
    orchestrator: WorkflowOrchestrator = Depends(get_orchestrator),
):
    result = orchestrator.create_ticket(
        actor,
        body.subject,
        body.description,
        priority=body.priority,
        flow=body.flow,
        document_id=body.document_id,
    )
    return TicketResponse.from_domain(result.unwrap())


@router.get("/{ticket_id}", response_model=TicketResponse)
def get_ticket(
    ticket_id: str,
    actor: Actor = Depends(get_current_actor),
    orchestrator: WorkflowOrchestrator = Depends(get_orchestrator),
):
    return TicketResponse.from_domain(orchestrator.get_ticket(actor, ticket_id))


@router.post("/{ticket_id}/status", response_model=TicketResponse, summary="Update ticket status")
def update_ticket_status(
    ticket_id: str,
    body: TicketStatusUpdateRequest,
    actor: Actor = Depends(get_current_actor),
    orchestrator: WorkflowOrchestrator = Depends(get_orchestrator),
):
    """Move a ticket forward (quality and admin). RESOLVED needs a resolution note."""
    result = orchestrator.update_ticket_status(
        actor, ticket_id, body.status, resolution_note=body.resolution_note
    )
    return TicketResponse.from_domain(result.unwrap())


@router.post("/{ticket_id}/escalate", response_model=TicketResponse, summary="Escalate to administration")
def escalate_ticket(
    ticket_id: str,
    body: TicketEscalationRequest,
    actor: Actor = Depends(get_current_actor),
    orchestrator: WorkflowOrchestrator = Depends(get_orchestrator),
):
    result = orchestrator.escalate_ticket(actor, ticket_id, body.reason)
    return TicketResponse.from_domain(result.unwrap())
