"""Audit recorder.

Centralized interface for appending immutable audit records. Every workflow
outcome (success or business failure) is written through this service.

Appending is fire-and-forget: a failing sink must never undo or block the
state change that was already committed, so sink errors are logged and
counted, never raised.
"""

import logging
from typing import Any, Optional

from domain.actors import Actor
from domain.audit.models import (
    AuditAction,
    AuditCategory,
    AuditOutcome,
    AuditRecord,
    AuditSeverity,
)
from domain.ports.audit_sink_port import AuditSinkPort
from observability.metrics import audit_records_total, audit_sink_failures_total
from observability.request_id import current_request_id

logger = logging.getLogger(__name__)


class AuditRecorder:
    """Builds audit records and appends them to a sink.

    Args:
        sink: Append-only destination for records
    """

    def __init__(self, sink: AuditSinkPort):
        self.sink = sink

    def record(
        self,
        actor: Actor,
        action: AuditAction,
        target: Optional[str] = None,
        category: AuditCategory = AuditCategory.DATA,
        severity: AuditSeverity = AuditSeverity.INFO,
        outcome: AuditOutcome = AuditOutcome.SUCCESS,
        context: Optional[dict[str, Any]] = None,
    ) -> Optional[AuditRecord]:
        """Append one audit record.

        Args:
            actor: Who performed the action
            action: Enumerated action tag
            target: "<kind>:<id>" reference of the affected entity
            category: DATA, AUTH or SYSTEM
            severity: INFO, WARNING or CRITICAL
            outcome: SUCCESS or FAILURE
            context: Free-form details (old/new status, reasons, ...)

        Returns:
            The appended record, or None if the sink failed

        Example:
            recorder.record(
                actor=quality_user,
                action=AuditAction.FILE_INSPECT_REJECT,
                target="document:doc-1",
                severity=AuditSeverity.WARNING,
                context={"old_status": "PENDING", "new_status": "REJECTED"},
            )
        """
        record = AuditRecord(
            actor_id=actor.id,
            actor_role=actor.role.value,
            actor_name=actor.name,
            action=action,
            category=category,
            severity=severity,
            outcome=outcome,
            target=target,
            context=dict(context or {}),
            request_id=current_request_id(),
        )

        try:
            self.sink.append(record)
        except Exception as e:
            audit_sink_failures_total.inc()
            logger.warning(
                f"Audit record {action.value} could not be appended: {e}",
                extra={
                    "actor_id": actor.id,
                    "operation": action.value,
                    "target": target,
                    "error_type": type(e).__name__,
                },
                exc_info=True,
            )
            return None

        audit_records_total.labels(category=category.value, outcome=outcome.value).inc()
        return record
