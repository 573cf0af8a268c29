"""AuditLog SQLAlchemy model"""

from sqlalchemy import Column, Index, String, Text

from .base import Base, PortableJSONB, UTCDateTime
from domain.audit.models import (
    AuditAction,
    AuditCategory,
    AuditOutcome,
    AuditRecord,
    AuditSeverity,
)


class AuditLog(Base):
    """AuditLog model for the immutable workflow audit trail.

    Entries are append-only and must never be updated or deleted. Enum
    values are stored as TEXT so new action tags need no schema change.
    """
    __tablename__ = "audit_log"
    __table_args__ = (
        Index("ix_audit_log_created_at", "created_at"),
        Index("ix_audit_log_category_created_at", "category", "created_at"),
        Index("ix_audit_log_target", "target"),
        Index("ix_audit_log_actor_id", "actor_id"),
    )

    id = Column(String(36), primary_key=True)
    created_at = Column(UTCDateTime, nullable=False)
    actor_id = Column(String(64), nullable=False)
    actor_role = Column(Text, nullable=False)
    actor_name = Column(Text, nullable=True)
    action = Column(Text, nullable=False)
    category = Column(Text, nullable=False)
    severity = Column(Text, nullable=False)
    outcome = Column(Text, nullable=False)
    target = Column(Text, nullable=True)
    context_json = Column(PortableJSONB, nullable=True)
    request_id = Column(String(64), nullable=True)

    @classmethod
    def from_record(cls, record: AuditRecord) -> "AuditLog":
        return cls(
            id=record.id,
            created_at=record.timestamp,
            actor_id=record.actor_id,
            actor_role=record.actor_role,
            actor_name=record.actor_name,
            action=record.action.value,
            category=record.category.value,
            severity=record.severity.value,
            outcome=record.outcome.value,
            target=record.target,
            context_json=record.context,
            request_id=record.request_id,
        )

    def to_record(self) -> AuditRecord:
        return AuditRecord(
            id=self.id,
            timestamp=self.created_at,
            actor_id=self.actor_id,
            actor_role=self.actor_role,
            actor_name=self.actor_name,
            action=AuditAction(self.action),
            category=AuditCategory(self.category),
            severity=AuditSeverity(self.severity),
            outcome=AuditOutcome(self.outcome),
            target=self.target,
            context=self.context_json or {},
            request_id=self.request_id,
        )

    def to_dict(self):
        """Convert audit log entry to dictionary representation"""
        return {
            "id": self.id,
            "created_at": self.created_at.isoformat(),
            "actor_id": self.actor_id,
            "actor_role": self.actor_role,
            "actor_name": self.actor_name,
            "action": self.action,
            "category": self.category,
            "severity": self.severity,
            "outcome": self.outcome,
            "target": self.target,
            "context": self.context_json,
            "request_id": self.request_id,
        }
