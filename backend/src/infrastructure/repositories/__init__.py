"""SQLAlchemy adapters implementing the domain ports"""

from .audit_repository import AuditQuery, SqlAuditSink
from .document_repository import SqlDocumentRepository
from .ticket_repository import SqlTicketRepository

__all__ = ["AuditQuery", "SqlAuditSink", "SqlDocumentRepository", "SqlTicketRepository"]
