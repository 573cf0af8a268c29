"""Global FastAPI dependencies wiring ports to their adapters.

Tests override get_orchestrator (or the lower-level providers) through
app.dependency_overrides.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from audit.service import AuditRecorder
from config import Settings, get_settings
from database import get_db
from domain.ports.notification_port import NotificationPort
from domain.ports.system_status_port import SystemStatusPort
from infrastructure.repositories.audit_repository import SqlAuditSink
from infrastructure.repositories.document_repository import SqlDocumentRepository
from infrastructure.repositories.ticket_repository import SqlTicketRepository
from infrastructure.system_status import SettingsSystemStatus
from workflow.notifier import LoggingNotifier
from workflow.orchestrator import WorkflowOrchestrator

_notifier: NotificationPort = LoggingNotifier()


def get_system_status(settings: Settings = Depends(get_settings)) -> SystemStatusPort:
    return SettingsSystemStatus(settings)


def get_notifier() -> NotificationPort:
    """Process-wide notifier; replace with set_notifier at startup."""
    return _notifier


def set_notifier(notifier: NotificationPort) -> None:
    global _notifier
    _notifier = notifier


def get_audit_sink(db: Session = Depends(get_db)) -> SqlAuditSink:
    return SqlAuditSink(db)


def get_orchestrator(
    db: Session = Depends(get_db),
    audit_sink: SqlAuditSink = Depends(get_audit_sink),
    system_status: SystemStatusPort = Depends(get_system_status),
    notifier: NotificationPort = Depends(get_notifier),
    settings: Settings = Depends(get_settings),
) -> WorkflowOrchestrator:
    """Build a request-scoped orchestrator over SQL adapters.

    Example:
        @router.post("/{document_id}/view")
        def view(orchestrator: WorkflowOrchestrator = Depends(get_orchestrator)):
            ...
    """
    return WorkflowOrchestrator(
        documents=SqlDocumentRepository(db),
        tickets=SqlTicketRepository(db),
        recorder=AuditRecorder(audit_sink),
        notifier=notifier,
        system_status=system_status,
        audit_business_failures=settings.AUDIT_BUSINESS_FAILURES,
    )
