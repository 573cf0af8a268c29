"""Audit repository: append-only SQLAlchemy sink and read queries"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import and_, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from domain.audit.models import (
    AuditAction,
    AuditCategory,
    AuditOutcome,
    AuditRecord,
    AuditSeverity,
)
from domain.errors import InfrastructureError
from domain.ports.audit_sink_port import AuditSinkPort
from models.audit_log import AuditLog


@dataclass(frozen=True)
class AuditQuery:
    """Filters for reading the audit trail. None fields do not filter."""
    categories: Optional[frozenset[AuditCategory]] = None
    action: Optional[AuditAction] = None
    severity: Optional[AuditSeverity] = None
    outcome: Optional[AuditOutcome] = None
    actor_id: Optional[str] = None
    target: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    page: int = 1
    per_page: int = 50


class SqlAuditSink(AuditSinkPort):
    """Appends audit records in their own transaction.

    There is deliberately no update or delete method.
    """

    def __init__(self, db: Session):
        self.db = db

    def append(self, record: AuditRecord) -> None:
        try:
            self.db.add(AuditLog.from_record(record))
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise InfrastructureError(f"Failed to append audit record {record.id}") from e

    def query(self, audit_query: AuditQuery) -> tuple[list[AuditRecord], int]:
        """Return one page of records (newest first) and the total match count."""
        conditions = []
        if audit_query.categories is not None:
            conditions.append(AuditLog.category.in_(sorted(c.value for c in audit_query.categories)))
        if audit_query.action is not None:
            conditions.append(AuditLog.action == audit_query.action.value)
        if audit_query.severity is not None:
            conditions.append(AuditLog.severity == audit_query.severity.value)
        if audit_query.outcome is not None:
            conditions.append(AuditLog.outcome == audit_query.outcome.value)
        if audit_query.actor_id is not None:
            conditions.append(AuditLog.actor_id == audit_query.actor_id)
        if audit_query.target is not None:
            conditions.append(AuditLog.target == audit_query.target)
        if audit_query.start_date is not None:
            conditions.append(AuditLog.created_at >= audit_query.start_date)
        if audit_query.end_date is not None:
            conditions.append(AuditLog.created_at <= audit_query.end_date)

        where = and_(*conditions) if conditions else None
        count_query = select(func.count()).select_from(AuditLog)
        page_query = select(AuditLog)
        if where is not None:
            count_query = count_query.where(where)
            page_query = page_query.where(where)

        offset = (audit_query.page - 1) * audit_query.per_page
        page_query = (
            page_query.order_by(AuditLog.created_at.desc(), AuditLog.id)
            .offset(offset)
            .limit(audit_query.per_page)
        )

        try:
            total = self.db.execute(count_query).scalar_one()
            rows = self.db.execute(page_query).scalars().all()
        except SQLAlchemyError as e:
            raise InfrastructureError("Failed to query audit log") from e
        return [row.to_record() for row in rows], total
