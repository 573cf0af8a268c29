"""Support ticket workflow.

Creation, status updates and escalation of support tickets. Like the
certificate state machine, it performs no I/O and returns what changed.
"""

from datetime import datetime, timezone
from typing import Callable, Optional
from uuid import uuid4

from auth.roles import TICKET_AUTHOR_ROLES, TICKET_HANDLER_ROLES, UserRole
from domain.actors import Actor
from domain.errors import ForbiddenError, InvalidTransitionError, ValidationError
from domain.escalation.policy import EscalationPolicy, default_policy
from domain.quality_documents.models import QualityDocument
from .models import (
    Escalation,
    SupportTicket,
    TicketChange,
    TicketFlow,
    TicketPriority,
    TicketStatus,
)
from .status import validate_transition

SUBJECT_MAX_LENGTH = 200


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TicketWorkflow:
    """Lifecycle of support tickets.

    Args:
        policy: Escalation policy deciding flows and escalation rights
        clock: Returns the current time
        id_factory: Generates ticket ids
    """

    def __init__(
        self,
        policy: EscalationPolicy = default_policy,
        clock: Callable[[], datetime] = _utcnow,
        id_factory: Callable[[], str] = lambda: str(uuid4()),
    ):
        self.policy = policy
        self.clock = clock
        self.id_factory = id_factory

    def create_ticket(
        self,
        actor: Actor,
        subject: str,
        description: str,
        priority: TicketPriority = TicketPriority.NORMAL,
        flow: Optional[TicketFlow] = None,
        document: Optional[QualityDocument] = None,
    ) -> SupportTicket:
        """Open a new support ticket.

        Clients open CLIENT_TO_QUALITY tickets, the quality team opens
        QUALITY_TO_ADMIN tickets. A client can only attach a certificate of
        its own organization.

        Args:
            actor: Client or quality user raising the ticket
            subject: Short summary (required)
            description: Problem description (required)
            priority: NORMAL or CRITICAL
            flow: Explicit flow; defaults from the actor's role
            document: Certificate the ticket is about, if any

        Returns:
            SupportTicket: The new ticket in OPEN status

        Raises:
            ForbiddenError: If the role may not open tickets in the flow, or the
                certificate belongs to another organization
            ValidationError: If subject or description is blank
        """
        if actor.role not in TICKET_AUTHOR_ROLES:
            raise ForbiddenError("Only client and quality users can open tickets")

        allowed_flows = self.policy.creatable_flows(actor.role)
        flow = flow or self.policy.default_flow(actor.role)
        if flow not in allowed_flows:
            raise ForbiddenError(f"{actor.role.value} users cannot open {flow.value} tickets")

        subject = (subject or "").strip()
        description = (description or "").strip()
        if not subject:
            raise ValidationError("Subject required", field="subject")
        if len(subject) > SUBJECT_MAX_LENGTH:
            raise ValidationError(
                f"Subject must be at most {SUBJECT_MAX_LENGTH} characters", field="subject"
            )
        if not description:
            raise ValidationError("Description required", field="description")

        if document is not None and actor.role == UserRole.CLIENT and not actor.belongs_to(document.owner_org_id):
            raise ForbiddenError("Certificate belongs to another organization")

        now = self.clock()
        return SupportTicket(
            id=self.id_factory(),
            subject=subject,
            description=description,
            priority=priority,
            status=TicketStatus.OPEN,
            flow=flow,
            raised_by_id=actor.id,
            raised_by_name=actor.name,
            org_id=actor.organization_id,
            client_name=actor.organization_name,
            document_id=document.id if document else None,
            document_name=document.name if document else None,
            created_at=now,
            updated_at=now,
        )

    def update_status(
        self,
        actor: Actor,
        ticket: SupportTicket,
        new_status: TicketStatus,
        resolution_note: Optional[str] = None,
    ) -> TicketChange:
        """Move a ticket forward.

        Raises:
            ForbiddenError: If the actor is neither quality nor admin
            InvalidTransitionError: If the transition is not allowed
            ValidationError: If resolving without a resolution note
        """
        if actor.role not in TICKET_HANDLER_ROLES:
            raise ForbiddenError("Only quality and admin users can update tickets")
        validate_transition(ticket.status, new_status)

        note = (resolution_note or "").strip() or None
        if new_status == TicketStatus.RESOLVED and note is None:
            raise ValidationError("Resolution note required", field="resolution_note")

        patch = {"status": new_status, "updated_at": self.clock()}
        if note is not None:
            patch["resolution_note"] = note

        return TicketChange(
            ticket=ticket.with_changes(**patch),
            patch=patch,
            context={
                "old_status": ticket.status.value,
                "new_status": new_status.value,
                "resolution_note": note,
            },
        )

    def escalate(self, actor: Actor, ticket: SupportTicket, reason: Optional[str]) -> TicketChange:
        """Raise a client ticket to the administration channel.

        Raises:
            ForbiddenError: If the policy denies the escalation (role or flow)
            InvalidTransitionError: If the ticket is already resolved
            ValidationError: If the reason is blank
        """
        target_flow = TicketFlow.QUALITY_TO_ADMIN
        decision = self.policy.evaluate(actor.role, ticket.flow, target_flow)
        if not decision.allowed:
            raise ForbiddenError(decision.reason)
        if not ticket.is_active:
            raise InvalidTransitionError("Resolved tickets cannot be escalated")

        reason = (reason or "").strip()
        missing = decision.missing_evidence(reason=reason)
        if missing:
            raise ValidationError("Escalation reason required", field=missing[0])

        now = self.clock()
        escalation = Escalation(reason=reason, escalated_at=now, escalated_by=actor.id)
        patch = {"flow": target_flow, "escalation": escalation, "updated_at": now}

        return TicketChange(
            ticket=ticket.with_changes(**patch),
            patch=patch,
            context={
                "old_flow": ticket.flow.value,
                "new_flow": target_flow.value,
                "reason": reason,
            },
        )
