"""Unit tests for the audit recorder"""

from prometheus_client import REGISTRY

from audit.service import AuditRecorder
from domain.audit.models import (
    AuditAction,
    AuditCategory,
    AuditOutcome,
    AuditSeverity,
    target_ref,
)
from fixtures.in_memory import FailingAuditSink, InMemoryAuditSink
from observability.request_id import request_id_scope


def _sink_failures() -> float:
    return REGISTRY.get_sample_value("qcompliance_audit_sink_failures_total") or 0.0


class TestAuditRecorder:
    """Test AuditRecorder.record"""

    def test_record_appends_to_sink(self, quality_actor):
        """Test a record carries the actor and the classification"""
        sink = InMemoryAuditSink()
        recorder = AuditRecorder(sink)

        record = recorder.record(
            actor=quality_actor,
            action=AuditAction.FILE_INSPECT_REJECT,
            target=target_ref("document", "doc-1"),
            severity=AuditSeverity.WARNING,
            context={"old_status": "PENDING", "new_status": "REJECTED"},
        )

        assert sink.records == [record]
        assert record.actor_id == "u-quality-1"
        assert record.actor_role == "QUALITY"
        assert record.actor_name == "Ines Kraft"
        assert record.target == "document:doc-1"
        assert record.category == AuditCategory.DATA
        assert record.outcome == AuditOutcome.SUCCESS
        assert record.context["new_status"] == "REJECTED"
        assert record.timestamp.tzinfo is not None

    def test_request_id_is_stamped(self, client_actor):
        """Test the current request id is copied onto the record"""
        recorder = AuditRecorder(InMemoryAuditSink())

        with request_id_scope("req-42"):
            record = recorder.record(actor=client_actor, action=AuditAction.FILE_VIEWED_BY_CLIENT)

        assert record.request_id == "req-42"

    def test_no_request_id_outside_request(self, client_actor):
        """Test records outside a request have no request id"""
        record = AuditRecorder(InMemoryAuditSink()).record(
            actor=client_actor, action=AuditAction.FILE_VIEWED_BY_CLIENT
        )

        assert record.request_id is None

    def test_sink_failure_is_swallowed(self, admin_actor):
        """Test a failing sink returns None and is counted, never raised"""
        recorder = AuditRecorder(FailingAuditSink())
        before = _sink_failures()

        record = recorder.record(actor=admin_actor, action=AuditAction.TICKET_STATUS_UPDATED)

        assert record is None
        assert _sink_failures() == before + 1

    def test_context_is_copied(self, client_actor):
        """Test later changes to the caller's dict do not leak into the record"""
        context = {"flags": ["weld"]}
        record = AuditRecorder(InMemoryAuditSink()).record(
            actor=client_actor, action=AuditAction.CLIENT_REJECTED_FILE, context=context
        )
        context["extra"] = True

        assert "extra" not in record.context

    def test_to_dict_is_json_friendly(self, client_actor):
        """Test the serialized record uses plain values"""
        record = AuditRecorder(InMemoryAuditSink()).record(
            actor=client_actor, action=AuditAction.CLIENT_APPROVED_FILE, target="document:doc-1"
        )

        data = record.to_dict()

        assert data["action"] == "CLIENT_APPROVED_FILE"
        assert data["severity"] == "INFO"
        assert isinstance(data["timestamp"], str)


class TestTargetRef:
    def test_target_ref(self):
        assert target_ref("ticket", "t-1") == "ticket:t-1"

    def test_target_ref_without_id(self):
        assert target_ref("document", None) is None
