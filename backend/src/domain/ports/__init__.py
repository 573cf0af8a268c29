"""Domain ports (hexagonal architecture): interfaces implemented by adapters"""

from .audit_sink_port import AuditSinkPort
from .document_port import DocumentPort, DocumentScope
from .notification_port import NotificationPort
from .system_status_port import SystemStatusPort
from .ticket_port import TicketFilter, TicketPort

__all__ = [
    "AuditSinkPort",
    "DocumentPort",
    "DocumentScope",
    "NotificationPort",
    "SystemStatusPort",
    "TicketFilter",
    "TicketPort",
]
