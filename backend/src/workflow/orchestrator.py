"""Workflow orchestrator.

Binds an actor, a target entity and a requested operation into one logical
operation:

1. Maintenance gate (only ADMIN passes while maintenance mode is on)
2. Load the target (NotFoundError if missing)
3. Run the state machine / ticket workflow (role, ownership, evidence checks)
4. Persist the returned patch through the port
5. Append exactly one SUCCESS audit record
6. Signal the notifier so live views refresh

Business errors are caught, optionally audited as FAILURE, and returned in
a WorkflowResult. InfrastructureError propagates untouched and is never
audited or retried here.

Persistence and audit are separate writes: the entity commits first, then
the audit record is appended. An audit failure after a committed update is
logged by the recorder and does not undo the update.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Optional, assert_never

from audit.service import AuditRecorder
from auth.roles import STAFF_ROLES, UserRole
from domain.actors import Actor
from domain.audit.models import (
    AuditAction,
    AuditCategory,
    AuditOutcome,
    AuditRecord,
    AuditSeverity,
    target_ref,
)
from domain.errors import (
    BUSINESS_ERRORS,
    ForbiddenError,
    InfrastructureError,
    MaintenanceModeError,
    NotFoundError,
    WorkflowError,
)
from domain.ports.document_port import DocumentPort, DocumentScope
from domain.ports.notification_port import NotificationPort
from domain.ports.system_status_port import SystemStatusPort
from domain.ports.ticket_port import TicketFilter, TicketPort
from domain.quality_documents.machine import DocumentStateMachine
from domain.quality_documents.models import QualityDocument, QualityStatus
from domain.quality_documents.permissions import can_view, visible_documents
from domain.quality_documents.stats import ComplianceOverview, compliance_overview
from domain.tickets.models import (
    SupportTicket,
    TicketFlow,
    TicketPriority,
    TicketStatus,
)
from domain.tickets.status import inbox_rank
from domain.tickets.workflow import TicketWorkflow
from observability.metrics import (
    notification_failures_total,
    workflow_duration_seconds,
    workflow_operations_total,
)
from .results import WorkflowOperation, WorkflowResult

logger = logging.getLogger(__name__)

DOCUMENT = "document"
TICKET = "ticket"


@dataclass
class _Outcome:
    """What a successful operation changed and how to audit it."""
    entity: Any
    kind: str
    entity_id: str
    action: Optional[AuditAction] = None
    severity: AuditSeverity = AuditSeverity.INFO
    category: AuditCategory = AuditCategory.DATA
    context: dict[str, Any] = field(default_factory=dict)
    changed: bool = True


class WorkflowOrchestrator:
    """Façade over the certificate state machine and the ticket workflow.

    Args:
        documents: Certificate persistence port
        tickets: Ticket persistence port
        recorder: Audit recorder
        notifier: Refresh signal after committed mutations (optional)
        system_status: Maintenance mode source (optional; open if absent)
        audit_business_failures: Record FAILURE audits for refused operations
        machine: Certificate state machine
        ticket_workflow: Ticket workflow
    """

    def __init__(
        self,
        documents: DocumentPort,
        tickets: TicketPort,
        recorder: AuditRecorder,
        notifier: Optional[NotificationPort] = None,
        system_status: Optional[SystemStatusPort] = None,
        audit_business_failures: bool = True,
        machine: Optional[DocumentStateMachine] = None,
        ticket_workflow: Optional[TicketWorkflow] = None,
    ):
        self.documents = documents
        self.tickets = tickets
        self.recorder = recorder
        self.notifier = notifier
        self.system_status = system_status
        self.audit_business_failures = audit_business_failures
        self.machine = machine or DocumentStateMachine()
        self.ticket_workflow = ticket_workflow or TicketWorkflow()

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def execute(
        self,
        actor: Actor,
        operation: WorkflowOperation,
        target_id: Optional[str] = None,
        **params: Any,
    ) -> WorkflowResult:
        """Run an operation by name.

        target_id is the document id for document operations, the ticket id
        for ticket operations, and the optional related document id for
        CREATE_TICKET.

        Example:
            result = orchestrator.execute(
                actor,
                WorkflowOperation.UPDATE_TICKET_STATUS,
                "ticket-1",
                new_status=TicketStatus.RESOLVED,
                resolution_note="Fixed the measurement unit",
            )
        """
        match operation:
            case WorkflowOperation.SUBMIT_CLIENT_FEEDBACK:
                return self.submit_client_feedback(actor, target_id, **params)
            case WorkflowOperation.SUBMIT_TECHNICAL_VERDICT:
                return self.submit_technical_verdict(actor, target_id, **params)
            case WorkflowOperation.RECORD_FIRST_VIEW:
                return self.record_first_view(actor, target_id)
            case WorkflowOperation.CREATE_TICKET:
                return self.create_ticket(actor, document_id=target_id, **params)
            case WorkflowOperation.UPDATE_TICKET_STATUS:
                return self.update_ticket_status(actor, target_id, **params)
            case WorkflowOperation.ESCALATE_TICKET:
                return self.escalate_ticket(actor, target_id, **params)
            case _:
                assert_never(operation)

    # ------------------------------------------------------------------
    # Certificate operations
    # ------------------------------------------------------------------

    def submit_client_feedback(
        self,
        actor: Actor,
        document_id: str,
        decision: QualityStatus,
        observations: Optional[str] = None,
        flags: Optional[Iterable[str]] = None,
    ) -> WorkflowResult[QualityDocument]:
        """Client review of a certificate (approve, reject, mark for deletion)."""
        flags = list(flags or [])

        def run() -> _Outcome:
            doc = self._load_document(document_id)
            transition = self.machine.submit_client_feedback(actor, doc, decision, observations, flags)
            stored = self.documents.update(doc.id, transition.patch)
            return _Outcome(
                entity=stored,
                kind=DOCUMENT,
                entity_id=stored.id,
                action=transition.action,
                severity=transition.severity,
                context=transition.context,
            )

        return self._run(
            WorkflowOperation.SUBMIT_CLIENT_FEEDBACK,
            actor,
            target_ref(DOCUMENT, document_id),
            run,
            intended_action=_client_feedback_action(decision),
            request_context={"requested_status": decision.value, "observations": observations, "flags": flags},
        )

    def submit_technical_verdict(
        self,
        actor: Actor,
        document_id: str,
        decision: QualityStatus,
        rejection_reason: Optional[str] = None,
    ) -> WorkflowResult[QualityDocument]:
        """Quality verdict on a pending or contested certificate."""

        def run() -> _Outcome:
            doc = self._load_document(document_id)
            transition = self.machine.submit_technical_verdict(actor, doc, decision, rejection_reason)
            stored = self.documents.update(doc.id, transition.patch)
            return _Outcome(
                entity=stored,
                kind=DOCUMENT,
                entity_id=stored.id,
                action=transition.action,
                severity=transition.severity,
                context=transition.context,
            )

        intended = (
            AuditAction.FILE_INSPECT_REJECT
            if decision == QualityStatus.REJECTED
            else AuditAction.FILE_INSPECT_APPROVE
        )
        return self._run(
            WorkflowOperation.SUBMIT_TECHNICAL_VERDICT,
            actor,
            target_ref(DOCUMENT, document_id),
            run,
            intended_action=intended,
            request_context={"requested_status": decision.value, "rejection_reason": rejection_reason},
        )

    def record_first_view(self, actor: Actor, document_id: str) -> WorkflowResult[QualityDocument]:
        """Mark an approved certificate as viewed by its owning organization.

        Repeated or concurrent calls succeed with changed=False and write no
        further audit record.
        """

        def run() -> _Outcome:
            doc = self._load_document(document_id)
            transition = self.machine.record_first_view(actor, doc)
            if not transition.changed:
                return _Outcome(entity=doc, kind=DOCUMENT, entity_id=doc.id, changed=False)

            stored, applied = self.documents.set_first_view_if_unset(
                doc.id, transition.patch["viewed_at"], transition.patch["viewed_by"]
            )
            if not applied:
                return _Outcome(entity=stored, kind=DOCUMENT, entity_id=stored.id, changed=False)
            return _Outcome(
                entity=stored,
                kind=DOCUMENT,
                entity_id=stored.id,
                action=transition.action,
                severity=transition.severity,
                context=transition.context,
            )

        return self._run(
            WorkflowOperation.RECORD_FIRST_VIEW,
            actor,
            target_ref(DOCUMENT, document_id),
            run,
            intended_action=AuditAction.FILE_VIEWED_BY_CLIENT,
        )

    # ------------------------------------------------------------------
    # Ticket operations
    # ------------------------------------------------------------------

    def create_ticket(
        self,
        actor: Actor,
        subject: str,
        description: str,
        priority: TicketPriority = TicketPriority.NORMAL,
        flow: Optional[TicketFlow] = None,
        document_id: Optional[str] = None,
    ) -> WorkflowResult[SupportTicket]:
        """Open a support ticket, optionally about a certificate."""

        def run() -> _Outcome:
            document = self._load_document(document_id) if document_id else None
            ticket = self.ticket_workflow.create_ticket(
                actor, subject, description, priority=priority, flow=flow, document=document
            )
            stored = self.tickets.insert(ticket)
            return _Outcome(
                entity=stored,
                kind=TICKET,
                entity_id=stored.id,
                action=AuditAction.TICKET_CREATED,
                severity=AuditSeverity.WARNING if stored.priority == TicketPriority.CRITICAL else AuditSeverity.INFO,
                context={
                    "subject": stored.subject,
                    "priority": stored.priority.value,
                    "flow": stored.flow.value,
                    "document_id": stored.document_id,
                },
            )

        return self._run(
            WorkflowOperation.CREATE_TICKET,
            actor,
            target_ref(DOCUMENT, document_id),
            run,
            intended_action=AuditAction.TICKET_CREATED,
            request_context={"subject": subject, "priority": priority.value},
        )

    def update_ticket_status(
        self,
        actor: Actor,
        ticket_id: str,
        new_status: TicketStatus,
        resolution_note: Optional[str] = None,
    ) -> WorkflowResult[SupportTicket]:
        """Move a ticket to IN_PROGRESS or RESOLVED."""

        def run() -> _Outcome:
            ticket = self._load_ticket(actor, ticket_id)
            change = self.ticket_workflow.update_status(actor, ticket, new_status, resolution_note)
            stored = self.tickets.update(ticket.id, change.patch)
            return _Outcome(
                entity=stored,
                kind=TICKET,
                entity_id=stored.id,
                action=AuditAction.TICKET_STATUS_UPDATED,
                context=change.context,
            )

        return self._run(
            WorkflowOperation.UPDATE_TICKET_STATUS,
            actor,
            target_ref(TICKET, ticket_id),
            run,
            intended_action=AuditAction.TICKET_STATUS_UPDATED,
            request_context={"requested_status": new_status.value},
        )

    def escalate_ticket(self, actor: Actor, ticket_id: str, reason: Optional[str]) -> WorkflowResult[SupportTicket]:
        """Raise a CLIENT_TO_QUALITY ticket to administration."""

        def run() -> _Outcome:
            ticket = self._load_ticket(actor, ticket_id)
            change = self.ticket_workflow.escalate(actor, ticket, reason)
            stored = self.tickets.update(ticket.id, change.patch)
            return _Outcome(
                entity=stored,
                kind=TICKET,
                entity_id=stored.id,
                action=AuditAction.TICKET_ESCALATED,
                severity=AuditSeverity.WARNING,
                context=change.context,
            )

        return self._run(
            WorkflowOperation.ESCALATE_TICKET,
            actor,
            target_ref(TICKET, ticket_id),
            run,
            intended_action=AuditAction.TICKET_ESCALATED,
            request_context={"reason": reason},
        )

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    def get_document(self, actor: Actor, document_id: str) -> QualityDocument:
        """Load a document the actor may see.

        Raises:
            NotFoundError: If missing or not visible to the actor
        """
        self._check_availability(actor)
        doc = self._load_document(document_id)
        if not can_view(actor, doc):
            raise NotFoundError("Document", document_id)
        return doc

    def list_documents(self, actor: Actor, parent_id: Optional[str] = None) -> list[QualityDocument]:
        """Children of a folder (roots when parent_id is None), filtered for the actor."""
        self._check_availability(actor)
        scope = DocumentScope(org_id=self._org_scope(actor), include_folders=True)
        docs = self.documents.list_children(parent_id, scope)
        return sorted(visible_documents(actor, docs), key=lambda d: (not d.is_folder, d.name.lower()))

    def list_pending(self, actor: Actor, org_id: Optional[str] = None) -> list[QualityDocument]:
        """Certificates awaiting review (quality and admin only)."""
        self._require_staff(actor)
        return self.documents.list_pending(DocumentScope(org_id=org_id))

    def list_contested(self, actor: Actor, org_id: Optional[str] = None) -> list[QualityDocument]:
        """REJECTED and TO_DELETE certificates, folders excluded (quality and admin only)."""
        self._require_staff(actor)
        return [doc for doc in self.documents.list_rejected(DocumentScope(org_id=org_id)) if not doc.is_folder]

    def compliance_overview(self, actor: Actor, org_id: Optional[str] = None) -> ComplianceOverview:
        """Status counters; clients always get their own organization's figures."""
        self._check_availability(actor)
        if actor.role == UserRole.CLIENT:
            org_id = self._org_scope(actor)
        return compliance_overview(self.documents.list_all(DocumentScope(org_id=org_id)))

    def get_ticket(self, actor: Actor, ticket_id: str) -> SupportTicket:
        self._check_availability(actor)
        return self._load_ticket(actor, ticket_id)

    def list_tickets(
        self,
        actor: Actor,
        status: Optional[TicketStatus] = None,
        flow: Optional[TicketFlow] = None,
    ) -> list[SupportTicket]:
        """Tickets visible to the actor, open work first, then newest first.

        Clients see their organization's tickets. The quality team sees the
        CLIENT_TO_QUALITY queue and the tickets it raised. Admins see all.
        """
        self._check_availability(actor)
        match actor.role:
            case UserRole.CLIENT:
                ticket_filter = TicketFilter(org_id=self._org_scope(actor), status=status)
            case UserRole.QUALITY:
                ticket_filter = TicketFilter(
                    status=status,
                    flows=frozenset({TicketFlow.CLIENT_TO_QUALITY}),
                    raised_by_id=actor.id,
                )
            case UserRole.ADMIN:
                ticket_filter = TicketFilter(status=status)
            case _:
                assert_never(actor.role)

        tickets = [t for t in self.tickets.list(ticket_filter) if flow is None or t.flow == flow]
        tickets.sort(key=lambda t: t.created_at, reverse=True)
        tickets.sort(key=lambda t: inbox_rank(t.status))
        return tickets

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _run(
        self,
        operation: WorkflowOperation,
        actor: Actor,
        target: Optional[str],
        run: Callable[[], _Outcome],
        intended_action: AuditAction,
        request_context: Optional[dict[str, Any]] = None,
    ) -> WorkflowResult:
        start = time.time()
        log_extra = {
            "operation": operation.value,
            "actor_id": actor.id,
            "actor_role": actor.role.value,
            "org_id": actor.organization_id,
            "target": target,
        }

        try:
            self._check_availability(actor)
            outcome = run()
        except BUSINESS_ERRORS as e:
            workflow_operations_total.labels(operation=operation.value, outcome=e.code).inc()
            logger.warning(f"{operation.value} refused: {e.message}", extra={**log_extra, "outcome": e.code})
            record = self._audit_failure(actor, e, target, intended_action, operation, request_context)
            return WorkflowResult.failure(e, audit_record=record)
        except InfrastructureError as e:
            workflow_operations_total.labels(operation=operation.value, outcome=e.code).inc()
            logger.error(f"{operation.value} failed: {e.message}", extra={**log_extra, "outcome": e.code})
            raise
        finally:
            workflow_duration_seconds.labels(operation=operation.value).observe(time.time() - start)

        workflow_operations_total.labels(operation=operation.value, outcome="success").inc()

        if not outcome.changed:
            logger.info(f"{operation.value} was a no-op", extra={**log_extra, "outcome": "noop"})
            return WorkflowResult.success(outcome.entity, changed=False)

        record = self.recorder.record(
            actor=actor,
            action=outcome.action,
            target=target_ref(outcome.kind, outcome.entity_id),
            category=outcome.category,
            severity=outcome.severity,
            outcome=AuditOutcome.SUCCESS,
            context=outcome.context,
        )
        logger.info(f"{operation.value} succeeded", extra={**log_extra, "outcome": "success"})
        self._notify(outcome.kind, outcome.entity_id)
        return WorkflowResult.success(outcome.entity, audit_record=record)

    def _audit_failure(
        self,
        actor: Actor,
        error: WorkflowError,
        target: Optional[str],
        intended_action: AuditAction,
        operation: WorkflowOperation,
        request_context: Optional[dict[str, Any]],
    ) -> Optional[AuditRecord]:
        if not self.audit_business_failures:
            return None

        context = {
            "operation": operation.value,
            "error": error.code,
            "reason": error.message,
            **(request_context or {}),
        }
        if isinstance(error, MaintenanceModeError):
            action, category, severity = AuditAction.MAINTENANCE_BLOCKED, AuditCategory.SYSTEM, AuditSeverity.WARNING
        elif isinstance(error, ForbiddenError):
            context["attempted_action"] = intended_action.value
            action, category, severity = AuditAction.PERMISSION_DENIED, AuditCategory.AUTH, AuditSeverity.CRITICAL
        else:
            action, category, severity = intended_action, AuditCategory.DATA, AuditSeverity.WARNING

        return self.recorder.record(
            actor=actor,
            action=action,
            target=target,
            category=category,
            severity=severity,
            outcome=AuditOutcome.FAILURE,
            context=context,
        )

    def _notify(self, kind: str, entity_id: str) -> None:
        if self.notifier is None:
            return
        try:
            self.notifier.entity_changed(kind, entity_id)
        except Exception as e:
            notification_failures_total.labels(kind=kind).inc()
            logger.warning(
                f"Refresh notification for {kind} {entity_id} failed: {e}",
                extra={"target": target_ref(kind, entity_id), "error_type": type(e).__name__},
            )

    def _check_availability(self, actor: Actor) -> None:
        if actor.role == UserRole.ADMIN or self.system_status is None:
            return
        if self.system_status.is_maintenance_mode():
            raise MaintenanceModeError()

    def _require_staff(self, actor: Actor) -> None:
        self._check_availability(actor)
        if actor.role not in STAFF_ROLES:
            raise ForbiddenError("Only quality and admin users can access the review queues")

    def _org_scope(self, actor: Actor) -> Optional[str]:
        if actor.role in STAFF_ROLES:
            return None
        if not actor.organization_id:
            raise ForbiddenError("Client users must belong to an organization")
        return actor.organization_id

    def _load_document(self, document_id: str) -> QualityDocument:
        doc = self.documents.get(document_id)
        if doc is None:
            raise NotFoundError("Document", document_id)
        return doc

    def _load_ticket(self, actor: Actor, ticket_id: str) -> SupportTicket:
        """Tickets outside the actor's queues are reported as missing."""
        ticket = self.tickets.get(ticket_id)
        if ticket is None or not _ticket_visible(actor, ticket):
            raise NotFoundError("Ticket", ticket_id)
        return ticket


def _client_feedback_action(decision: QualityStatus) -> AuditAction:
    match decision:
        case QualityStatus.APPROVED:
            return AuditAction.CLIENT_APPROVED_FILE
        case QualityStatus.TO_DELETE:
            return AuditAction.CLIENT_MARKED_TO_DELETE
        case QualityStatus.REJECTED | QualityStatus.PENDING:
            return AuditAction.CLIENT_REJECTED_FILE
        case _:
            assert_never(decision)


def _ticket_visible(actor: Actor, ticket: SupportTicket) -> bool:
    match actor.role:
        case UserRole.CLIENT:
            return actor.belongs_to(ticket.org_id)
        case UserRole.QUALITY:
            return ticket.flow == TicketFlow.CLIENT_TO_QUALITY or ticket.raised_by_id == actor.id
        case UserRole.ADMIN:
            return True
        case _:
            assert_never(actor.role)
