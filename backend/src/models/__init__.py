"""SQLAlchemy models for the compliance portal"""

from .base import Base, PortableJSONB, UTCDateTime
from .audit_log import AuditLog
from .quality_document import QualityDocumentRow
from .support_ticket import SupportTicketRow

__all__ = [
    "Base",
    "PortableJSONB",
    "UTCDateTime",
    "AuditLog",
    "QualityDocumentRow",
    "SupportTicketRow",
]
