"""Unit tests for the workflow orchestrator.

Uses the in-memory ports from conftest: every successful mutation must be
persisted, audited exactly once and signalled to the notifier; business
failures come back as a failed WorkflowResult with a FAILURE audit record.
"""

import pytest

from audit.service import AuditRecorder
from domain.audit.models import AuditAction, AuditCategory, AuditOutcome, AuditSeverity
from domain.errors import (
    ForbiddenError,
    InfrastructureError,
    InvalidTransitionError,
    MaintenanceModeError,
    NotFoundError,
    ValidationError,
)
from domain.quality_documents import QualityStatus
from domain.tickets.models import TicketFlow, TicketPriority, TicketStatus
from fixtures.builders import make_document, make_folder, make_ticket
from fixtures.in_memory import (
    FailingAuditSink,
    FailingDocuments,
    InMemoryAuditSink,
    InMemoryDocuments,
    InMemoryTickets,
    RecordingNotifier,
)
from workflow import WorkflowOperation
from workflow.notifier import CallbackNotifier
from workflow.orchestrator import WorkflowOrchestrator


class TestClientFeedback:
    """Test submit_client_feedback through the orchestrator"""

    def test_success_persists_audits_and_notifies(self, orchestrator, client_actor, documents, audit_sink, notifier):
        """Test one SUCCESS record and one refresh signal per mutation"""
        result = orchestrator.submit_client_feedback(client_actor, "doc-pending", QualityStatus.APPROVED)

        assert result.ok is True
        assert result.changed is True
        assert result.entity.status == QualityStatus.APPROVED
        assert documents.get("doc-pending").status == QualityStatus.APPROVED
        assert audit_sink.actions() == ["CLIENT_APPROVED_FILE"]
        assert audit_sink.records[0].outcome == AuditOutcome.SUCCESS
        assert audit_sink.records[0].target == "document:doc-pending"
        assert result.audit_record == audit_sink.records[0]
        assert notifier.events == [("document", "doc-pending")]

    def test_rejection_without_evidence_is_audited_as_failure(
        self, orchestrator, client_actor, documents, audit_sink, notifier
    ):
        """Test validation failures leave the document untouched"""
        result = orchestrator.submit_client_feedback(client_actor, "doc-pending", QualityStatus.REJECTED)

        assert result.ok is False
        assert isinstance(result.error, ValidationError)
        assert documents.get("doc-pending").status == QualityStatus.PENDING
        assert documents.update_calls == 0
        assert notifier.events == []

        record = audit_sink.records[0]
        assert record.action == AuditAction.CLIENT_REJECTED_FILE
        assert record.outcome == AuditOutcome.FAILURE
        assert record.category == AuditCategory.DATA
        assert record.severity == AuditSeverity.WARNING
        assert record.context["error"] == "validation_error"
        assert record.context["reason"] == result.error.message

    def test_foreign_client_is_permission_denied(self, orchestrator, other_client_actor, audit_sink):
        """Test ownership failures are recorded as AUTH / CRITICAL"""
        result = orchestrator.submit_client_feedback(other_client_actor, "doc-pending", QualityStatus.APPROVED)

        assert isinstance(result.error, ForbiddenError)
        record = audit_sink.records[0]
        assert record.action == AuditAction.PERMISSION_DENIED
        assert record.category == AuditCategory.AUTH
        assert record.severity == AuditSeverity.CRITICAL
        assert record.context["attempted_action"] == "CLIENT_APPROVED_FILE"

    def test_missing_document(self, orchestrator, client_actor, audit_sink):
        """Test unknown ids fail with NotFoundError"""
        result = orchestrator.submit_client_feedback(client_actor, "doc-missing", QualityStatus.APPROVED)

        assert isinstance(result.error, NotFoundError)
        assert result.error.message == "Document doc-missing not found"
        assert audit_sink.records[0].outcome == AuditOutcome.FAILURE

    def test_unwrap_raises_business_error(self, orchestrator, client_actor):
        """Test callers that prefer exceptions can unwrap"""
        result = orchestrator.submit_client_feedback(client_actor, "doc-approved", QualityStatus.APPROVED)

        with pytest.raises(InvalidTransitionError):
            result.unwrap()


class TestTechnicalVerdict:
    """Test submit_technical_verdict through the orchestrator"""

    def test_reject_with_reason(self, orchestrator, quality_actor, documents, audit_sink):
        """Test the rejection reason is persisted and audited as WARNING"""
        result = orchestrator.submit_technical_verdict(
            quality_actor, "doc-pending", QualityStatus.REJECTED, rejection_reason="Charpy test missing"
        )

        assert result.ok is True
        stored = documents.get("doc-pending")
        assert stored.status == QualityStatus.REJECTED
        assert stored.inspection.rejection_reason == "Charpy test missing"
        assert audit_sink.records[0].action == AuditAction.FILE_INSPECT_REJECT
        assert audit_sink.records[0].severity == AuditSeverity.WARNING

    def test_reject_without_reason(self, orchestrator, quality_actor, documents, audit_sink):
        """Test a verdict without reason fails and is audited"""
        result = orchestrator.submit_technical_verdict(quality_actor, "doc-pending", QualityStatus.REJECTED)

        assert isinstance(result.error, ValidationError)
        assert documents.get("doc-pending").status == QualityStatus.PENDING
        assert audit_sink.records[0].action == AuditAction.FILE_INSPECT_REJECT
        assert audit_sink.records[0].outcome == AuditOutcome.FAILURE

    def test_client_verdict_is_permission_denied(self, orchestrator, client_actor, audit_sink):
        result = orchestrator.submit_technical_verdict(client_actor, "doc-pending", QualityStatus.APPROVED)

        assert isinstance(result.error, ForbiddenError)
        assert audit_sink.records[0].action == AuditAction.PERMISSION_DENIED
        assert audit_sink.records[0].context["attempted_action"] == "FILE_INSPECT_APPROVE"


class TestFirstView:
    """Test record_first_view idempotency"""

    def test_second_view_writes_no_audit(self, orchestrator, client_actor, documents, audit_sink, notifier):
        """Test a repeated view keeps viewed_at and writes a single audit record"""
        first = orchestrator.record_first_view(client_actor, "doc-approved")
        viewed_at = documents.get("doc-approved").viewed_at

        second = orchestrator.record_first_view(client_actor, "doc-approved")

        assert first.changed is True
        assert second.ok is True
        assert second.changed is False
        assert second.audit_record is None
        assert documents.get("doc-approved").viewed_at == viewed_at
        assert audit_sink.actions() == ["FILE_VIEWED_BY_CLIENT"]
        assert notifier.events == [("document", "doc-approved")]

    def test_lost_race_is_a_noop(self, client_actor, audit_sink):
        """Test a concurrent first view that lost the conditional update is not audited"""

        class RacingDocuments(InMemoryDocuments):
            def set_first_view_if_unset(self, document_id, viewed_at, viewed_by):
                super().set_first_view_if_unset(document_id, viewed_at, "u-client-other")
                return super().set_first_view_if_unset(document_id, viewed_at, viewed_by)

        documents = RacingDocuments([make_document("doc-approved", QualityStatus.APPROVED)])
        orchestrator = WorkflowOrchestrator(documents, InMemoryTickets(), AuditRecorder(audit_sink))

        result = orchestrator.record_first_view(client_actor, "doc-approved")

        assert result.ok is True
        assert result.changed is False
        assert result.entity.viewed_by == "u-client-other"
        assert audit_sink.records == []

    def test_pending_cannot_be_viewed(self, orchestrator, client_actor):
        result = orchestrator.record_first_view(client_actor, "doc-pending")

        assert isinstance(result.error, InvalidTransitionError)


class TestTickets:
    """Test ticket operations through the orchestrator"""

    def test_create_ticket(self, orchestrator, client_actor, tickets, audit_sink, notifier):
        """Test a new client ticket is stored and audited"""
        result = orchestrator.create_ticket(
            client_actor, "Heat number typo", "Heat 4471 printed as 4417", document_id="doc-approved"
        )

        assert result.ok is True
        ticket = tickets.get(result.entity.id)
        assert ticket.flow == TicketFlow.CLIENT_TO_QUALITY
        assert ticket.document_id == "doc-approved"
        assert audit_sink.records[0].action == AuditAction.TICKET_CREATED
        assert audit_sink.records[0].target == f"ticket:{ticket.id}"
        assert audit_sink.records[0].severity == AuditSeverity.INFO
        assert notifier.events == [("ticket", ticket.id)]

    def test_critical_ticket_is_audited_as_warning(self, orchestrator, quality_actor, audit_sink):
        result = orchestrator.create_ticket(
            quality_actor, "Portal down for Globex", "Users get HTTP 500", priority=TicketPriority.CRITICAL
        )

        assert result.entity.flow == TicketFlow.QUALITY_TO_ADMIN
        assert audit_sink.records[0].severity == AuditSeverity.WARNING

    def test_create_ticket_on_foreign_document(self, orchestrator, client_actor, tickets):
        """Test a client cannot attach another organization's certificate"""
        before = len(tickets.tickets)

        result = orchestrator.create_ticket(client_actor, "Subject", "Body", document_id="doc-globex")

        assert isinstance(result.error, ForbiddenError)
        assert len(tickets.tickets) == before

    def test_resolve_requires_note(self, orchestrator, quality_actor, tickets, audit_sink):
        """Test resolving with an empty note fails with a readable reason"""
        result = orchestrator.update_ticket_status(quality_actor, "ticket-1", TicketStatus.RESOLVED, "")

        assert isinstance(result.error, ValidationError)
        assert result.error.message == "Resolution note required"
        assert tickets.get("ticket-1").status == TicketStatus.OPEN
        assert audit_sink.records[0].outcome == AuditOutcome.FAILURE

    def test_resolve_with_note(self, orchestrator, quality_actor, tickets, audit_sink):
        """Test resolution appends exactly one SUCCESS record"""
        result = orchestrator.update_ticket_status(
            quality_actor, "ticket-1", TicketStatus.RESOLVED, "Fixed the measurement unit"
        )

        assert result.ok is True
        assert tickets.get("ticket-1").status == TicketStatus.RESOLVED
        assert tickets.get("ticket-1").resolution_note == "Fixed the measurement unit"
        assert len(audit_sink.records) == 1
        assert audit_sink.records[0].action == AuditAction.TICKET_STATUS_UPDATED
        assert audit_sink.records[0].outcome == AuditOutcome.SUCCESS

    def test_escalate(self, orchestrator, quality_actor, tickets, audit_sink):
        result = orchestrator.escalate_ticket(quality_actor, "ticket-1", "Contract penalty question")

        assert result.ok is True
        assert tickets.get("ticket-1").flow == TicketFlow.QUALITY_TO_ADMIN
        assert audit_sink.records[0].action == AuditAction.TICKET_ESCALATED
        assert audit_sink.records[0].severity == AuditSeverity.WARNING

    def test_escalate_admin_ticket_is_forbidden(self, orchestrator, quality_actor, tickets, audit_sink):
        """Test a non CLIENT_TO_QUALITY ticket keeps its flow"""
        result = orchestrator.escalate_ticket(quality_actor, "ticket-admin", "Again")

        assert isinstance(result.error, ForbiddenError)
        assert tickets.get("ticket-admin").flow == TicketFlow.QUALITY_TO_ADMIN
        assert audit_sink.records[0].action == AuditAction.PERMISSION_DENIED

    def test_missing_ticket(self, orchestrator, admin_actor):
        result = orchestrator.update_ticket_status(admin_actor, "ticket-404", TicketStatus.IN_PROGRESS)

        assert isinstance(result.error, NotFoundError)

    def test_quality_cannot_resolve_other_admin_ticket(self, orchestrator, quality_actor, tickets, audit_sink):
        """Test another quality user's QUALITY_TO_ADMIN ticket is out of reach"""
        tickets.insert(make_ticket("ticket-other", flow=TicketFlow.QUALITY_TO_ADMIN, raised_by_id="u-quality-2"))

        result = orchestrator.update_ticket_status(
            quality_actor, "ticket-other", TicketStatus.RESOLVED, "Closing it"
        )

        assert isinstance(result.error, NotFoundError)
        assert tickets.get("ticket-other").status == TicketStatus.OPEN
        assert audit_sink.records[0].outcome == AuditOutcome.FAILURE

    def test_escalated_client_ticket_leaves_quality_queue(self, orchestrator, quality_actor, admin_actor, tickets):
        """Test quality cannot resolve a client ticket after escalating it"""
        orchestrator.escalate_ticket(quality_actor, "ticket-1", "Contract penalty question").unwrap()

        result = orchestrator.update_ticket_status(
            quality_actor, "ticket-1", TicketStatus.RESOLVED, "Handled locally"
        )

        assert isinstance(result.error, NotFoundError)
        assert tickets.get("ticket-1").status == TicketStatus.OPEN
        assert orchestrator.update_ticket_status(
            admin_actor, "ticket-1", TicketStatus.RESOLVED, "Credit note issued"
        ).ok is True

    def test_quality_cannot_escalate_invisible_ticket(self, orchestrator, quality_actor, tickets):
        tickets.insert(make_ticket("ticket-other", flow=TicketFlow.QUALITY_TO_ADMIN, raised_by_id="u-quality-2"))

        result = orchestrator.escalate_ticket(quality_actor, "ticket-other", "Again")

        assert isinstance(result.error, NotFoundError)


class TestExecute:
    """Test dispatch by operation name"""

    def test_execute_update_ticket_status(self, orchestrator, admin_actor, tickets):
        result = orchestrator.execute(
            admin_actor,
            WorkflowOperation.UPDATE_TICKET_STATUS,
            "ticket-1",
            new_status=TicketStatus.RESOLVED,
            resolution_note="Fixed the measurement unit",
        )

        assert result.ok is True
        assert tickets.get("ticket-1").status == TicketStatus.RESOLVED

    def test_execute_create_ticket_uses_target_as_document(self, orchestrator, client_actor):
        result = orchestrator.execute(
            client_actor,
            WorkflowOperation.CREATE_TICKET,
            "doc-approved",
            subject="Question",
            description="Which standard applies?",
        )

        assert result.entity.document_id == "doc-approved"

    def test_execute_record_first_view(self, orchestrator, client_actor):
        result = orchestrator.execute(client_actor, WorkflowOperation.RECORD_FIRST_VIEW, "doc-approved")

        assert result.entity.viewed_by == "u-client-1"


class TestMaintenanceMode:
    """Test the maintenance gate"""

    def test_client_blocked(self, orchestrator, client_actor, system_status, documents, audit_sink):
        """Test mutations are refused and audited as MAINTENANCE_BLOCKED"""
        system_status.maintenance_mode = True

        result = orchestrator.submit_client_feedback(client_actor, "doc-pending", QualityStatus.APPROVED)

        assert isinstance(result.error, MaintenanceModeError)
        assert documents.get("doc-pending").status == QualityStatus.PENDING
        record = audit_sink.records[0]
        assert record.action == AuditAction.MAINTENANCE_BLOCKED
        assert record.category == AuditCategory.SYSTEM
        assert record.severity == AuditSeverity.WARNING

    def test_quality_reads_blocked(self, orchestrator, quality_actor, system_status):
        system_status.maintenance_mode = True

        with pytest.raises(MaintenanceModeError):
            orchestrator.list_pending(quality_actor)

    def test_admin_passes(self, orchestrator, admin_actor, system_status):
        """Test administrators keep working during maintenance"""
        system_status.maintenance_mode = True

        result = orchestrator.update_ticket_status(admin_actor, "ticket-1", TicketStatus.IN_PROGRESS)

        assert result.ok is True


class TestFailureHandling:
    """Test audit, notifier and infrastructure failure behavior"""

    def test_audit_sink_failure_keeps_update(self, client_actor, documents, tickets):
        """Test a failed audit append does not undo a committed change"""
        orchestrator = WorkflowOrchestrator(documents, tickets, AuditRecorder(FailingAuditSink()))

        result = orchestrator.submit_client_feedback(client_actor, "doc-pending", QualityStatus.TO_DELETE)

        assert result.ok is True
        assert result.audit_record is None
        assert documents.get("doc-pending").status == QualityStatus.TO_DELETE

    def test_notifier_failure_is_not_fatal(self, client_actor, documents, tickets, audit_sink):
        orchestrator = WorkflowOrchestrator(
            documents, tickets, AuditRecorder(audit_sink), notifier=RecordingNotifier(fail=True)
        )

        result = orchestrator.record_first_view(client_actor, "doc-approved")

        assert result.ok is True
        assert audit_sink.actions() == ["FILE_VIEWED_BY_CLIENT"]

    def test_infrastructure_error_propagates_without_audit(self, quality_actor, tickets, audit_sink):
        """Test storage failures are raised, not audited"""
        documents = FailingDocuments([make_document("doc-pending")])
        orchestrator = WorkflowOrchestrator(documents, tickets, AuditRecorder(audit_sink))

        with pytest.raises(InfrastructureError):
            orchestrator.submit_technical_verdict(quality_actor, "doc-pending", QualityStatus.APPROVED)

        assert audit_sink.records == []

    def test_business_failure_audit_can_be_disabled(self, client_actor, documents, tickets, audit_sink):
        orchestrator = WorkflowOrchestrator(
            documents, tickets, AuditRecorder(audit_sink), audit_business_failures=False
        )

        result = orchestrator.submit_client_feedback(client_actor, "doc-pending", QualityStatus.REJECTED)

        assert result.ok is False
        assert result.audit_record is None
        assert audit_sink.records == []

    def test_callback_notifier_fans_out(self, client_actor, documents, tickets, audit_sink):
        notifier = CallbackNotifier()
        seen = []
        unsubscribe = notifier.subscribe(lambda kind, entity_id: seen.append((kind, entity_id)))
        orchestrator = WorkflowOrchestrator(documents, tickets, AuditRecorder(audit_sink), notifier=notifier)

        orchestrator.record_first_view(client_actor, "doc-approved")
        unsubscribe()
        orchestrator.submit_client_feedback(client_actor, "doc-pending", QualityStatus.APPROVED)

        assert seen == [("document", "doc-approved")]


class TestReadSide:
    """Test listings and visibility"""

    def test_client_lists_only_visible_children(self, orchestrator, client_actor):
        """Test pending and rejected certificates are hidden from clients"""
        docs = orchestrator.list_documents(client_actor, parent_id="folder-acme")

        assert [d.id for d in docs] == ["doc-approved"]

    def test_staff_listing_puts_folders_first(self, orchestrator, quality_actor, documents):
        documents.add(make_folder("folder-2024", parent_folder_id="folder-acme"))

        docs = orchestrator.list_documents(quality_actor, parent_id="folder-acme")

        assert docs[0].id == "folder-2024"
        assert {d.id for d in docs[1:]} == {"doc-pending", "doc-approved", "doc-rejected", "doc-globex"}

    def test_client_cannot_get_pending_document(self, orchestrator, client_actor):
        """Test invisible documents look missing"""
        with pytest.raises(NotFoundError):
            orchestrator.get_document(client_actor, "doc-pending")

    def test_client_cannot_get_foreign_document(self, orchestrator, client_actor):
        with pytest.raises(NotFoundError):
            orchestrator.get_document(client_actor, "doc-globex")

    def test_review_queues_are_staff_only(self, orchestrator, client_actor, quality_actor):
        with pytest.raises(ForbiddenError):
            orchestrator.list_pending(client_actor)

        assert [d.id for d in orchestrator.list_pending(quality_actor)] == ["doc-pending"]
        assert [d.id for d in orchestrator.list_contested(quality_actor)] == ["doc-rejected"]

    def test_client_overview_is_scoped_to_own_organization(self, orchestrator, client_actor, admin_actor):
        """Test clients cannot request another organization's figures"""
        overview = orchestrator.compliance_overview(client_actor, org_id="org-globex")

        assert overview.total == 3
        assert orchestrator.compliance_overview(admin_actor).total == 4

    def test_client_sees_own_organization_tickets(self, orchestrator, client_actor, other_client_actor):
        assert {t.id for t in orchestrator.list_tickets(client_actor)} == {"ticket-1", "ticket-resolved"}
        assert orchestrator.list_tickets(other_client_actor) == []

    def test_quality_sees_client_queue_and_own_tickets(self, orchestrator, quality_actor):
        tickets = orchestrator.list_tickets(quality_actor)

        assert {t.id for t in tickets} == {"ticket-1", "ticket-resolved", "ticket-admin"}

    def test_quality_cannot_see_other_admin_tickets(self, orchestrator, quality_actor, tickets):
        tickets.insert(make_ticket("ticket-other", flow=TicketFlow.QUALITY_TO_ADMIN, raised_by_id="u-quality-2"))

        with pytest.raises(NotFoundError):
            orchestrator.get_ticket(quality_actor, "ticket-other")

    def test_ticket_ordering(self, client_actor, audit_sink):
        """Test open work first, newest first within each group"""
        tickets = InMemoryTickets([
            make_ticket("old-open", created_offset_minutes=0),
            make_ticket("new-resolved", status=TicketStatus.RESOLVED, created_offset_minutes=30),
            make_ticket("new-open", created_offset_minutes=20),
            make_ticket("in-progress", status=TicketStatus.IN_PROGRESS, created_offset_minutes=10),
        ])
        orchestrator = WorkflowOrchestrator(InMemoryDocuments(), tickets, AuditRecorder(audit_sink))

        ordered = [t.id for t in orchestrator.list_tickets(client_actor)]

        assert ordered == ["new-open", "in-progress", "old-open", "new-resolved"]

    def test_list_tickets_filters(self, orchestrator, admin_actor):
        resolved = orchestrator.list_tickets(admin_actor, status=TicketStatus.RESOLVED)
        admin_flow = orchestrator.list_tickets(admin_actor, flow=TicketFlow.QUALITY_TO_ADMIN)

        assert [t.id for t in resolved] == ["ticket-resolved"]
        assert [t.id for t in admin_flow] == ["ticket-admin"]

    def test_reads_write_no_audit(self, orchestrator, admin_actor, audit_sink):
        orchestrator.list_tickets(admin_actor)
        orchestrator.get_document(admin_actor, "doc-pending")

        assert audit_sink.records == []


class TestEndToEnd:
    """Contest an approved certificate, then re-inspect it"""

    def test_contest_and_reinspection(self, orchestrator, client_actor, quality_actor, documents, audit_sink):
        contested = orchestrator.submit_client_feedback(
            client_actor, "doc-approved", QualityStatus.REJECTED, flags=["dimension-mismatch"]
        )
        assert contested.entity.status == QualityStatus.REJECTED
        assert {d.id for d in orchestrator.list_contested(quality_actor)} == {"doc-approved", "doc-rejected"}

        reinspected = orchestrator.submit_technical_verdict(quality_actor, "doc-approved", QualityStatus.APPROVED)

        stored = documents.get("doc-approved")
        assert reinspected.ok is True
        assert stored.status == QualityStatus.APPROVED
        assert stored.inspection.inspected_by == "u-quality-1"
        assert stored.client_feedback.flags == ()
        assert audit_sink.actions() == ["CLIENT_REJECTED_FILE", "FILE_INSPECT_APPROVE"]
        assert audit_sink.records[0].context["flags"] == ["dimension-mismatch"]
        assert all(r.outcome == AuditOutcome.SUCCESS for r in audit_sink.records)
